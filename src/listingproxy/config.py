"""Configuration system for listingproxy.

Uses pydantic-settings to load configuration from environment variables
and .env files with sensible defaults for a single-node deployment.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Environment variables are prefixed with LISTINGPROXY_
    (e.g., LISTINGPROXY_API_BASE_URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="LISTINGPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream listings provider
    api_base_url: str = Field(
        default="https://buildout.com/api/v1/changeme",
        description="Base URL of the listings API, including any key segment",
    )
    page_size: int = Field(
        default=1000,
        ge=1,
        description="Records requested per upstream page",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Upstream request timeout in seconds",
    )

    # Refresh schedule
    refresh_interval_hours: float = Field(
        default=24,
        gt=0,
        description="Hours between scheduled refreshes; also the freshness window on boot",
    )
    refresh_enabled: bool = Field(
        default=True,
        description="Run the periodic refresh loop",
    )
    lease_spaces_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="Time-to-live for the cached lease spaces payload",
    )

    # Data paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted listings snapshot",
    )
    listings_file: str = Field(
        default="listings.json",
        description="File name of the persisted listings snapshot",
    )

    # HTTP service
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed to call the proxy",
    )

    # Dashboard / CLI
    proxy_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the running proxy, used by the dashboard",
    )

    @property
    def listings_path(self) -> Path:
        return self.data_dir / self.listings_file

    @property
    def refresh_interval_seconds(self) -> float:
        return self.refresh_interval_hours * 3600


# Singleton instance for easy import
config = Settings()
