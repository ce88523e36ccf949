"""Application settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


@dataclass
class CatalogConfig:
    """Catalog database configuration settings."""

    path: Path = field(
        default_factory=lambda: Path(
            os.getenv("FACETS_DB_PATH", str(PROJECT_ROOT / "data" / "catalog.duckdb"))
        )
    )
    table: str = "photos"
    read_only: bool = field(
        default_factory=lambda: os.getenv("FACETS_DB_READ_ONLY", "false").lower() == "true"
    )
    memory_limit: str = "2GB"
    threads: int = -1  # Use all available threads
    page_size: int = field(
        default_factory=lambda: int(os.getenv("FACETS_PAGE_SIZE", "24"))
    )


@dataclass
class CacheConfig:
    """Distribution cache settings."""

    ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("FACETS_CACHE_TTL_SECONDS", "300"))
    )
    max_entries: int = field(
        default_factory=lambda: int(os.getenv("FACETS_CACHE_MAX_ENTRIES", "512"))
    )


@dataclass
class TrackingConfig:
    """History, preset and analytics persistence settings."""

    storage_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("FACETS_STORAGE_PATH", str(PROJECT_ROOT / "data" / "facets_state.db"))
        )
    )
    history_size: int = 10
    recent_presets_size: int = 10
    top_combinations: int = 20
    session_timeout_seconds: int = field(
        default_factory=lambda: int(os.getenv("FACETS_SESSION_TIMEOUT_SECONDS", "1800"))
    )
    notification_duration_ms: int = 5000


@dataclass
class AppConfig:
    """Application configuration settings."""

    name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Photo Facets"))
    version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    compatibility_rules_path: Optional[Path] = field(
        default_factory=lambda: (
            Path(os.environ["FACETS_COMPATIBILITY_RULES"])
            if os.getenv("FACETS_COMPATIBILITY_RULES")
            else None
        )
    )


@dataclass
class Config:
    """Main configuration container."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.catalog.path.parent.mkdir(parents=True, exist_ok=True)
        self.tracking.storage_path.parent.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()
