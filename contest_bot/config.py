"""Bot configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass

REQUIRED_VARIABLES = (
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_WEBHOOK_SECRET",
    "CLIST_APIKEY",
    "DATABASE_URL",
)

DEFAULT_GREETING = (
    "Hi! I will send you the programming contests of the next 24 hours every day.\n"
    "Ask me anytime with: show contests in 6h"
)


@dataclass(slots=True)
class BotConfig:
    """Container for runtime configuration."""

    bot_token: str
    webhook_secret: str
    clist_api_key: str
    database_url: str
    webhook_url: str | None = None
    clist_base_url: str = "https://clist.by/api/v4"
    clist_timeout: float = 5.0
    greeting_message: str = DEFAULT_GREETING
    cron_schedule: str = "0 8 * * *"
    cron_timezone: str = "UTC"
    display_timezone: str | None = None
    port: int = 8080
    service_name: str = "cp-bot"
    retry_attempts: int = 3
    retry_max_wait: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Load configuration from environment variables."""
        missing = [name for name in REQUIRED_VARIABLES if not os.environ.get(name)]
        if missing:
            raise RuntimeError(f"{', '.join(missing)} must be set")

        database_url = os.environ["DATABASE_URL"]
        # SQLAlchemy prefers 'postgresql' over 'postgres'
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)

        webhook_url = os.environ.get("TELEGRAM_WEBHOOK_URL")

        return cls(
            bot_token=os.environ["TELEGRAM_BOT_TOKEN"],
            webhook_secret=os.environ["TELEGRAM_WEBHOOK_SECRET"],
            clist_api_key=os.environ["CLIST_APIKEY"],
            database_url=database_url,
            webhook_url=webhook_url.rstrip("/") if webhook_url else None,
            clist_base_url=os.environ.get("CLIST_BASE_URL", "https://clist.by/api/v4").rstrip("/"),
            clist_timeout=_number("CLIST_TIMEOUT_SECONDS", 5.0, float),
            greeting_message=os.environ.get("GREETING_MESSAGE") or DEFAULT_GREETING,
            cron_schedule=os.environ.get("CRON_SCHEDULE", "0 8 * * *"),
            cron_timezone=os.environ.get("CRON_TIMEZONE", "UTC"),
            display_timezone=os.environ.get("DISPLAY_TIMEZONE") or None,
            port=_number("PORT", 8080, int),
            service_name=os.environ.get("SERVICE_NAME", "cp-bot"),
            retry_attempts=_number("RETRY_ATTEMPTS", 3, int),
            retry_max_wait=_number("RETRY_MAX_WAIT_SECONDS", 5.0, float),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


def _number(name: str, default, kind):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc
