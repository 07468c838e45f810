"""Application settings using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    Connection parameters are not part of these settings; they are read by
    ``ConnectionConfig.from_env`` so that their source can be injected.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "json"  # 'json' or 'text'
    log_file: str = ""  # empty disables the file handler


# Global settings instance
settings = Settings()
