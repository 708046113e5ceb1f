import sqlite3
import threading
import os
import logging
import json
from datetime import datetime, timezone
from typing import Any, List, Optional

from botrouter.exceptions import StorageError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Thread-safe SQLite key-value store for bot settings.
    Records are grouped into named collections and addressed by key;
    values are stored as JSON text.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.lock = threading.Lock()
        self._initialize_database()
        logger.info(f"📦 Database initialized at {self.db_path}")

    @classmethod
    def for_settings(cls, settings) -> "DatabaseManager":
        """Open the store described by the application settings."""
        return cls(os.path.join(settings.database_dir, f"{settings.database_name}.db"))

    # -------------------------------------------------------------------------
    # Initialization and Connection
    # -------------------------------------------------------------------------
    def _connect(self):
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_database(self):
        """Create tables if not already existing."""
        with self._connect() as conn:
            c = conn.cursor()
            c.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    collection TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_on TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (collection, key)
                )
            """)
            conn.commit()

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------
    def write(self, collection: str, key: str, value: Any):
        """
        Insert or replace a record.

        Args:
            collection: Collection name (e.g. "Servers")
            key: Record key inside the collection
            value: JSON text, or any JSON-serialisable object

        Raises:
            StorageError: if the database rejects the write
        """
        if not collection:
            raise ValueError("Missing collection - no place to save record!")
        if not key:
            raise ValueError("Missing key - unable to save record (no name)!")
        if not isinstance(value, str):
            value = json.dumps(value)

        try:
            with self.lock, self._connect() as conn:
                c = conn.cursor()
                c.execute("""
                    INSERT OR REPLACE INTO records (collection, key, value, updated_on)
                    VALUES (?, ?, ?, ?)
                """, (collection, key, value, datetime.now(timezone.utc)))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {collection}/{key}: {e}") from e
        logger.debug(f"Wrote {collection}/{key}")

    def read(self, collection: str, key: str) -> Optional[str]:
        """Return the raw value stored under collection/key, or None."""
        try:
            with self.lock, self._connect() as conn:
                c = conn.cursor()
                c.execute("SELECT value FROM records WHERE collection = ? AND key = ?", (collection, key))
                row = c.fetchone()
                return row["value"] if row else None
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection}/{key}: {e}") from e

    def read_all(self, collection: str) -> List[str]:
        """Return every raw value in a collection, ordered by key."""
        if not collection:
            raise ValueError("Missing collection - unable to record location!")
        try:
            with self.lock, self._connect() as conn:
                c = conn.cursor()
                c.execute("SELECT value FROM records WHERE collection = ? ORDER BY key", (collection,))
                return [row["value"] for row in c.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {collection}: {e}") from e
