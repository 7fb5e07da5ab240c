"""Configuration management using pydantic-settings."""
import os
from typing import Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development"),
        description="Environment: development, staging, production"
    )

    # Database
    database_url: str = Field(
        "sqlite+aiosqlite:///./nails_crm.db",
        description="SQLAlchemy async connection URL"
    )

    # Application
    timezone: str = Field("Europe/Kyiv", description="Studio timezone")
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Logging level")
    log_dir: str = Field("logs", description="Directory for rotating log files")

    # Booking
    booking_lock_timeout: float = Field(
        5.0,
        gt=0,
        description="Seconds to wait for a busy master/day bucket before failing"
    )
    default_studio_phone: str = Field("+380 67 123 4567", description="Studio contact phone on cold start")

    # HTTP API
    api_host: str = Field("0.0.0.0", description="API bind host")
    api_port: int = Field(8080, description="API bind port")
    admin_api_key: str | None = Field(None, description="API key granting the admin role")

    # Master keys (comma-separated "master_id:key" pairs in env)
    master_api_keys: str | dict[str, str] = Field(
        default="",
        description="API keys bound to master ids"
    )

    @field_validator("master_api_keys", mode="before")
    @classmethod
    def parse_master_keys(cls, v: Any) -> dict[str, str]:
        """Parse master API keys into a {key: master_id} mapping."""
        if isinstance(v, dict):
            return {str(k): str(m) for k, m in v.items()}
        if isinstance(v, str):
            keys = {}
            for pair in v.split(","):
                if not pair.strip():
                    continue
                master_id, _, key = pair.strip().partition(":")
                if master_id and key:
                    keys[key.strip()] = master_id.strip()
            return keys
        return {}


# Global settings instance
settings = Settings()
