"""Application settings.

Values come from environment variables prefixed with ``BLENDREC_`` (or a
``.env`` file), e.g. ``BLENDREC_CATALOG_PATH=data/catalog.csv``.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API server."""

    # Catalog
    catalog_path: str = "data/catalog.csv"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="BLENDREC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Settings built once per process."""
    return Settings()
