from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from roomloop.core.constants import (
    DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES,
    DEFAULT_JWT_ALGORITHM,
    DEFAULT_LIFECYCLE_INTERVAL_SECONDS,
    DEFAULT_STARTING_SOON_WINDOW_MINUTES,
)


class Settings(BaseSettings):
    """Application settings"""

    database_url: str = "sqlite+aiosqlite:///./roomloop.db"

    secret_key: str = "dev-secret-change-me"
    algorithm: str = DEFAULT_JWT_ALGORITHM
    access_token_expire_minutes: int = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES

    app_name: str = "RoomLoop"
    debug: bool = False
    log_json: bool = False

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    redis_url: str = "redis://localhost:6379"

    # Realtime
    broadcast_scope: Literal["room", "global"] = "room"
    realtime_require_auth: bool = False
    realtime_trust_client_sender: bool = True
    realtime_redis_enabled: bool = False

    # Lifecycle engine
    lifecycle_inline_enabled: bool = True
    lifecycle_interval_seconds: int = DEFAULT_LIFECYCLE_INTERVAL_SECONDS

    # Rooms
    starting_soon_window_minutes: int = DEFAULT_STARTING_SOON_WINDOW_MINUTES
    assign_access_code_to_public_rooms: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
