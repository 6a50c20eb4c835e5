"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.logging import LogFormat


class Settings(BaseSettings):
    """Application settings loaded from DECKPACK_* environment variables."""

    # Service configuration
    host: str = "0.0.0.0"
    port: int = 3004
    cors_origins: list[str] = ["*"]

    # Storage configuration
    data_dir: str = "./data"
    assets_dir: str = "./data/assets"

    # Logging configuration
    log_level: str = "INFO"
    log_format: LogFormat = "text"

    # Package configuration
    pretty_json: bool = True
    asset_archive_prefix: str = "assets/"

    # Minimum length for a bare string to be treated as raw base64
    raw_base64_min_length: int = 80

    model_config = SettingsConfigDict(
        env_prefix="DECKPACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def data_path(self) -> Path:
        """Get the data directory path."""
        return Path(self.data_dir)

    @property
    def assets_path(self) -> Path:
        """Get the asset store directory path."""
        return Path(self.assets_dir)


settings = Settings()
