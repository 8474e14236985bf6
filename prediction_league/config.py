"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    PORT: int = 3000
    HOST: str = "0.0.0.0"

    # Database
    DATABASE_URL: str
    MIGRATIONS_URL: str = ""  # Applied externally; reported at startup only

    # Admin routes ("user:password", empty disables them)
    ADMIN_BASIC_AUTH: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"

    # Upstream standings (absent disables the standings job for every season)
    FOOTBALL_DATA_API_TOKEN: Optional[str] = None
    FOOTBALL_DATA_BASE_URL: str = "https://api.football-data.org"

    # Outbound email (absent routes messages to the log)
    MAILGUN_API_KEY: Optional[str] = None
    MAILGUN_BASE_URL: str = "https://api.eu.mailgun.net"

    # Payments (passed through to realm metadata only)
    PAYPAL_CLIENT_ID: Optional[str] = None

    # Realms
    REALMS_PATH: Optional[str] = None
    DEFAULT_REALM_NAME: str = "localhost"
    DEFAULT_REALM_ORIGIN: str = "http://localhost:3000"
    DEFAULT_SEASON_ID: str = "202021_1"

    # Scheduler
    SCHEDULER_TIMEZONE: str = "Europe/London"
    STANDINGS_CRON: str = "*/15 * * * *"
    WINDOW_OPEN_CRON: str = "34 12 * * *"
    WINDOW_CLOSING_CRON: str = "48 16 * * *"
    TOKEN_REAP_CRON: str = "*/30 * * * *"

    # Timeouts / bounds
    SHUTDOWN_GRACE_SECONDS: float = 5.0
    WORKER_TIMEOUT_SECONDS: float = 5.0
    EMAIL_SEND_TIMEOUT_SECONDS: float = 10.0
    EMAIL_QUEUE_SIZE: int = 1000
    EMAIL_FANOUT_CONCURRENCY: int = 10

    # Error tracking
    SENTRY_DSN: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
