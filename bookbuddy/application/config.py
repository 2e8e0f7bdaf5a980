"""Application configuration using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BOOKBUDDY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "bookbuddy"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Reading state snapshot
    snapshot_dir: Path = Path(".bookbuddy")
    snapshot_key: str = "book-store"

    # Backend selection: "local" keeps everything in memory, "dynamodb" uses AWS
    storage_backend: Literal["local", "dynamodb"] = "local"
    aws_region: str = "us-east-1"
    books_table_name: str = "BookBuddyBooks"
    settings_table_name: str = "BookBuddySettings"

    # Session tokens
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60

    # Dashboard
    recent_highlights_limit: int = 5


# Create a singleton instance
settings = Settings()
