"""
Configuration management for the ticket sync bridge.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Ticket Sync Bridge")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    # Adapter
    adapter_id: str = Field(
        default="e8ab4178-81fb-43c9-8eae-1a61d609a991",
        description="Identifier this adapter subscribes to the hub with",
    )
    adapter_sync_type: str = Field(
        default="bidirectional",
        description="Sync type a tenant must be configured for when the sync-type gate is enabled",
    )
    enable_sync_type_gate: bool = Field(default=False)
    sync_timeout_seconds: Optional[float] = Field(
        default=None, description="Upper bound for a single inbound or outbound sync"
    )

    # External ticket system
    external_base_url: str = Field(default="https://somewhere/tickets")
    max_update_delay_seconds: float = Field(
        default=180.0, description="Maximum pause before an external ticket changes"
    )

    # Collaborators; unset URLs fall back to in-memory implementations
    hub_url: Optional[str] = Field(default=None)
    hub_api_key: Optional[str] = Field(default=None)
    config_service_url: Optional[str] = Field(default=None)
    config_service_api_key: Optional[str] = Field(default=None)
    http_timeout_seconds: float = Field(default=30.0)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
