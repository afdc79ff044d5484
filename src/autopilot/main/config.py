import logging
import os
import sys
from importlib import metadata
from typing import Optional

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _set_app_version():
    try:
        version = metadata.version("autopilot-backend")
    except metadata.PackageNotFoundError:
        return "DEV"

    if os.environ.get("DEV", False):
        return f"{version}-dev"

    return version


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    app_version: str = _set_app_version()

    # Infrastructure dependencies
    postgres_user: str
    postgres_host: str
    postgres_password: str
    postgres_port: int
    postgres_db: str

    # Database pool
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Automation engine
    automation_action_timeout_seconds: float = 10.0
    # Extra time on top of the summed action timeouts before a run is abandoned
    automation_engine_grace_seconds: float = 5.0
    automation_history_default_limit: int = 100
    automation_history_max_limit: int = 1000
    automation_recent_executions_limit: int = 10

    # Outgoing webhooks
    automation_webhook_timeout_seconds: float = 10.0
    automation_webhook_user_agent: Optional[str] = None

    # Dev and testing
    dev: bool = False
    testing: bool = False

    @model_validator(mode="after")
    def validate_automation_settings(self):
        """Ensure automation timeouts and limits are sane."""
        if self.automation_action_timeout_seconds <= 0:
            logging.error(
                "AUTOMATION_ACTION_TIMEOUT_SECONDS must be greater than zero. Current value: %s",
                self.automation_action_timeout_seconds,
            )
            sys.exit(1)

        if self.automation_engine_grace_seconds < 0:
            logging.error(
                "AUTOMATION_ENGINE_GRACE_SECONDS cannot be negative. Current value: %s",
                self.automation_engine_grace_seconds,
            )
            sys.exit(1)

        if self.automation_history_default_limit > self.automation_history_max_limit:
            logging.error(
                "AUTOMATION_HISTORY_DEFAULT_LIMIT (%s) exceeds AUTOMATION_HISTORY_MAX_LIMIT (%s).",
                self.automation_history_default_limit,
                self.automation_history_max_limit,
            )
            sys.exit(1)

        return self

    @property
    def webhook_user_agent(self) -> str:
        return self.automation_webhook_user_agent or f"autopilot-automations/{self.app_version}"

    @computed_field
    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton, creating it if needed.

    Returns:
        Settings: The application settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Override settings (primarily for testing).

    Args:
        settings: The Settings instance to use.
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to None (for test cleanup)."""
    global _settings
    _settings = None


def get_loglevel():
    loglevel = os.getenv("LOGLEVEL", "INFO")

    match loglevel:
        case "INFO":
            return logging.INFO
        case "WARNING":
            return logging.WARNING
        case "ERROR":
            return logging.ERROR
        case "CRITICAL":
            return logging.CRITICAL
        case "DEBUG":
            return logging.DEBUG
        case _:
            return logging.INFO
