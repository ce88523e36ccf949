"""FastAPI application settings."""

from pathlib import Path
from pydantic_settings import BaseSettings
from functools import lru_cache
import os


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("FACETS_CORS_ORIGINS", "")
    if cors_env:
        return [origin.strip() for origin in cors_env.split(",")]
    # Default development origins
    return ["http://localhost:3000", "http://localhost:5173"]


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App info
    app_name: str = "Photo Facets API"
    version: str = "1.0.0"
    debug: bool = os.getenv("FACETS_DEBUG", "false").lower() == "true"

    # Catalog database
    database_path: Path = Path(
        os.getenv("FACETS_DB_PATH", str(Path(__file__).parent.parent / "data" / "catalog.duckdb"))
    )

    # Persisted history / presets / analytics / preferences
    storage_path: Path = Path(
        os.getenv("FACETS_STORAGE_PATH", str(Path(__file__).parent.parent / "data" / "facets_state.db"))
    )

    # CORS - configurable via environment variable
    cors_origins: list[str] = _parse_cors_origins()

    # Pagination
    page_size: int = int(os.getenv("FACETS_PAGE_SIZE", "24"))

    # Filter counts cache
    cache_ttl_seconds: int = int(os.getenv("FACETS_CACHE_TTL_SECONDS", "300"))
    cache_max_entries: int = int(os.getenv("FACETS_CACHE_MAX_ENTRIES", "512"))

    class Config:
        env_prefix = "FACETS_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
