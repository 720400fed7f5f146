"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables.

    Processor credentials and the webhook secret have no defaults: a process
    started without them fails while building the application.
    """

    processor_provider: Literal["mock", "mux"] = "mux"
    processor_base_url: str = "https://api.mux.com"
    processor_token_id: str = Field(min_length=1)
    processor_token_secret: str = Field(min_length=1)
    processor_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    upload_cors_origin: str = "*"
    upload_expiry_seconds: int = Field(default=3600, ge=60, le=7 * 24 * 3600)
    webhook_secret: str = Field(min_length=1)
    webhook_tolerance_seconds: int | None = Field(default=300, ge=1)
    webhook_audit_limit: int = Field(default=1000, ge=1)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="MEDIASYNC_", env_parse_none_str="null", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
