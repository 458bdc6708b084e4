"""
Configuration settings for the retry engine.

All settings are loaded from environment variables prefixed with
``RETRYABLE_`` with sensible defaults. Use a .env file for local
development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Built-in retry defaults ===
    DEFAULT_TRIES: int = 2
    DEFAULT_SLEEP: float = 1.0  # seconds between attempts
    DEFAULT_MATCHING: str = ".*"  # applied to str(exception)

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
