"""Application configuration."""

from typing import Literal

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
_SQLITE_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def is_sqlite_memory_url(url: str) -> bool:
    """Whether ``url`` points at a private in-memory SQLite database."""
    return url in _SQLITE_MEMORY_URLS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "mapped-repository"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Database
    DATABASE_URL: str = "sqlite://"
    DATABASE_ECHO: bool = False

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @computed_field
    @property
    def is_sqlite_memory(self) -> bool:
        return is_sqlite_memory_url(self.DATABASE_URL)


settings = Settings()
