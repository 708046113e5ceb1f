"""
Per-group settings persistence.
Keeps an in-memory copy of every group's settings, backed by the key-value store.
"""
import logging
import threading
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from botrouter.database.database_manager import DatabaseManager
from botrouter.exceptions import SettingsStoreError, StorageError

logger = logging.getLogger(__name__)

SERVERS_COLLECTION = "Servers"


class GroupSettings(BaseModel):
    """Settings for a single group, persisted as {"Prefix": ..., "GuildID": ...}."""

    prefix: str = Field(alias="Prefix")
    guild_id: str = Field(alias="GuildID")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class SettingsStore:
    """Group settings cache with write-through persistence."""

    def __init__(self, db: DatabaseManager):
        self.db = db
        self.lock = threading.Lock()
        self.servers: Dict[str, GroupSettings] = {}

    def load(self) -> Dict[str, GroupSettings]:
        """
        Read every stored group record into the cache.
        Records that fail to decode are logged and skipped.
        """
        try:
            raw_records = self.db.read_all(SERVERS_COLLECTION)
        except StorageError as e:
            logger.error(f"Failed to read {SERVERS_COLLECTION} collection: {e}")
            raw_records = []

        servers: Dict[str, GroupSettings] = {}
        for raw in raw_records:
            try:
                settings = GroupSettings.model_validate_json(raw)
            except ValidationError as e:
                logger.error(f"Skipping unreadable group settings record: {e}")
                continue
            servers[settings.guild_id] = settings

        with self.lock:
            self.servers = servers
        logger.info(f"Loaded settings for {len(servers)} group(s)")
        return dict(servers)

    def get(self, group_id: str) -> Optional[GroupSettings]:
        with self.lock:
            return self.servers.get(group_id)

    def set_prefix(self, group_id: str, new_prefix: str) -> Tuple[Optional[GroupSettings], GroupSettings]:
        """
        Persist a new prefix for a group.

        Returns:
            (previous settings or None, new settings)

        Raises:
            SettingsStoreError: if the write fails; the cache is left unchanged.
        """
        with self.lock:
            previous = self.servers.get(group_id)
            updated = GroupSettings(prefix=new_prefix, guild_id=group_id)
            try:
                self.db.write(SERVERS_COLLECTION, group_id, updated.to_json())
            except (StorageError, ValueError) as e:
                logger.error(f"Failed to save prefix for group {group_id}: {e}")
                raise SettingsStoreError(f"Could not save settings for group {group_id}") from e
            self.servers[group_id] = updated

        logger.info(f"Prefix for group {group_id} set to {new_prefix!r}")
        return previous, updated
