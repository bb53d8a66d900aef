"""Application settings, read from COMPOSE_* environment variables or .env."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from models.reconciliation import ReentryPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COMPOSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local identity
    user_email: str = "me@gmail.com"
    user_name: str = "Me"

    # Suggestions
    reentry_policy: ReentryPolicy = ReentryPolicy.REPLACE
    suggestion_service_url: Optional[str] = None
    suggestion_timeout: float = 30.0

    # Dispatch
    mail_send_url: Optional[str] = None
    dispatch_timeout: float = 30.0

    # App
    seed_demo_messages: bool = False
    log_level: str = "INFO"


settings = Settings()
