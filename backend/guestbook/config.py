"""Runtime settings, read from ``GUESTBOOK_*`` environment variables or ``.env``."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GuestbookSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GUESTBOOK_",
        env_file=".env",
        extra="ignore",
    )

    secret_key: Optional[str] = None
    webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = Field(default=5.0, gt=0)
    database_url: str = "sqlite:///./guestbook.db"
    api_prefix: str = "/api/guestbook"
    log_level: str = "INFO"
    log_json: bool = True
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("secret_key", "webhook_url")
    @classmethod
    def _blank_as_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        return "/" + value.strip().strip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()
