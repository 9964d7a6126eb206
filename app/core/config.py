from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./data/bookflix.db")
    auto_create_tables: bool = Field(True)
    api_prefix: str = Field("")

    admin_secret_token: str = Field("")
    cron_secret: str = Field("")

    telegram_bot_token: str = Field("")
    telegram_channel_id: str = Field("")
    telegram_api_url: str = Field("https://api.telegram.org")
    telegram_timeout_seconds: float = Field(10.0)
    channel_invite_link: str = Field("")

    webapp_url: str = Field("https://your-app.vercel.app")
    # Upper bound for a single grant of days (payment, activation, admin add).
    max_grant_days: int = Field(3650)

    celery_broker_url: str = Field("redis://localhost:6379/0")
    membership_sweep_interval_seconds: int = Field(3600)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


__all__ = ["settings", "Settings"]
