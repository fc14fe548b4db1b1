"""Application settings, read from ``FULFILLMENT_*`` environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Configuration of the order fulfillment core."""

    model_config = SettingsConfigDict(
        env_prefix="FULFILLMENT_",
        env_file=".env",
        extra="ignore",
    )

    # Storage
    data_dir: Path = _DEFAULT_DATA_DIR

    # Order numbers
    order_number_max_attempts: int = 100
    order_number_padding: int = 5

    # Listing
    max_page_size: int = 100

    # Logging
    environment: str = "development"
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()
