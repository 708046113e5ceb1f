from functools import lru_cache
import logging

from pydantic import Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    bot_token: str = Field(..., description="Telegram Bot Token")

    # Command routing
    default_prefix: str = Field("!", description="Trigger prefix for groups without an override")

    # Group settings persistence
    database_dir: str = Field("settings", description="Directory holding the settings database")
    database_name: str = Field("router", description="Settings database file name (without .db)")

    # Runtime
    log_level: str = Field("info", description="Logging level")
    log_dir: str = Field("logs", description="Directory for log files")
    num_threads: int = Field(2, ge=1, description="Worker threads used to handle updates")

    # Member / role lookups
    member_cache_ttl_seconds: float = Field(60, gt=0, description="Seconds a cached member or role stays valid")
    cache_size_limit: int = Field(1000, ge=1, description="Maximum cached members (and roles)")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("default_prefix")
    @classmethod
    def _prefix_not_empty(cls, value: str) -> str:
        # An empty default would turn every message into a command invocation.
        if not value:
            raise ValueError("default_prefix must not be empty")
        return value


def clear_settings_cache() -> None:
    get_settings.cache_clear()


@lru_cache()
def get_settings() -> Settings:
    logger.info("Loading application configuration settings.")
    return Settings()
