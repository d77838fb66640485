"""
NeoWatch Configuration.

Pydantic Settings v2 — loads from .env, environment variables.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ──────────────────────────────────────────────────────
    app_name: str = "NeoWatch"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite+aiosqlite:///./neowatch.db",
        alias="DATABASE_URL",
    )
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, alias="DB_MAX_OVERFLOW")
    db_pool_recycle: int = Field(default=3600, alias="DB_POOL_RECYCLE")

    # ── Hazard Feed ───────────────────────────────────────────────────────
    neo_feed_url: str = Field(
        default="https://api.nasa.gov/neo/rest/v1/feed",
        alias="NEO_FEED_URL",
    )
    nasa_api_key: str = Field(default="DEMO_KEY", alias="NASA_API_KEY")
    neo_feed_timeout_seconds: float = Field(default=30.0, alias="NEO_FEED_TIMEOUT_SECONDS")
    neo_feed_window_days: int = Field(
        default=7, ge=1, le=7, alias="NEO_FEED_WINDOW_DAYS",
        description="Days of close approaches fetched per refresh (NeoWs caps at 7)",
    )

    # ── Scheduling ─────────────────────────────────────────────────────────
    refresh_cron: str = Field(default="0 */4 * * *", alias="REFRESH_CRON")
    analysis_cron: str = Field(default="0 9 * * *", alias="ANALYSIS_CRON")
    reference_timezone: str = Field(
        default="UTC", alias="REFERENCE_TIMEZONE",
        description="Timezone for cron triggers and the analysis reference date",
    )

    # ── Alerting ──────────────────────────────────────────────────────────
    alert_smtp_host: str = Field(default="", alias="ALERT_SMTP_HOST")
    alert_smtp_port: int = Field(default=587, alias="ALERT_SMTP_PORT")
    alert_smtp_user: str = Field(default="", alias="ALERT_SMTP_USER")
    alert_smtp_password: str = Field(default="", alias="ALERT_SMTP_PASSWORD")
    alert_from_email: str = Field(default="alerts@neowatch.io", alias="ALERT_FROM_EMAIL")

    # ── Operational ────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")

    @field_validator("refresh_cron", "analysis_cron")
    @classmethod
    def _validate_cron(cls, value: str) -> str:
        CronTrigger.from_crontab(value, timezone="UTC")
        return value

    @field_validator("reference_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.reference_timezone)

    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses an async driver."""
        url = self.database_url
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url


settings = Settings()
