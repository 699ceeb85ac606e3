"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)


class LivetapSettings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="LIVETAP_",
    )

    # Redis
    redis_url: RedisDsn | None = Field(
        default=None,
        description="Redis connection URL for the resolution cache (in-memory when unset)",
    )

    # Timeouts
    http_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for manifest fetches in seconds",
    )
    resolve_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single plugin resolution in seconds",
    )
    probe_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for media duration probing in seconds",
    )

    # Health policy
    max_manifest_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest manifest body that is read into memory",
    )
    max_retry_count: int = Field(
        default=3,
        ge=0,
        description="Consecutive failed reparses after which a channel stops reparsing",
    )
    max_cooldown_seconds: float = Field(
        default=120.0,
        description="Ceiling for the resolution backoff interval",
    )
    max_cooldown_multiplier: int = Field(
        default=1024,
        ge=1,
        description="Ceiling for the backoff multiplier",
    )

    # Outbound requests
    default_strategy: str = Field(
        default="youtube",
        description="Strategy used for channels configured without one",
    )
    default_device: str = Field(
        default="chrome",
        description="Device profile presented when fetching manifests",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent sent with manifest fetches",
    )
    max_http_clients: int = Field(
        default=32,
        ge=1,
        description="Pooled HTTP clients kept across proxy and device pairs",
    )

    # External tools
    ffprobe_path: str = Field(
        default="ffprobe",
        description="ffprobe binary used for duration probing",
    )
    ytdl_cmd: str = Field(
        default="yt-dlp",
        description="yt-dlp compatible binary used by the youtube plugin",
    )
    ytdl_args: str = Field(
        default="-f best",
        description="Extra arguments passed to the yt-dlp binary",
    )

    # App settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins for the HTTP API",
    )


@lru_cache
def get_settings() -> LivetapSettings:
    """Get cached settings instance."""
    return LivetapSettings()
