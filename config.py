"""Configuration management via pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord
    discord_bot_token: str = ""

    # Dataset
    dataset_source: str = "./airbnb_sf_listings_500.json"
    dataset_timeout_seconds: float = 30.0

    # Database
    database_path: Path = Field(default=Path("./data/favorites.db"))
    favorites_key: str = "airbnb_favorites"

    # Display
    display_cap: int = 50
    description_max_chars: int = 180
    top_amenities: int = 6
    max_query_states: int = 1000

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Field(default=Path("./logs"))


settings = Settings()
