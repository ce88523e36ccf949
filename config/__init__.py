"""Configuration module for Photo Facets.

Settings come from the environment (optionally via a .env file); built-in
presets and filter compatibility rules come from YAML files in this package.
"""

from .settings import config, CatalogConfig, CacheConfig, TrackingConfig, AppConfig, Config
from .logging_config import setup_logging, get_logger
from .config_loader import (
    ConfigurationError,
    load_presets,
    load_compatibility_rules,
    clear_config_cache,
    get_preset_definitions,
    get_rule_definitions,
    find_preset_definition,
)

__all__ = [
    # Settings
    "config",
    "CatalogConfig",
    "CacheConfig",
    "TrackingConfig",
    "AppConfig",
    "Config",
    # Logging
    "setup_logging",
    "get_logger",
    # YAML configuration
    "ConfigurationError",
    "load_presets",
    "load_compatibility_rules",
    "clear_config_cache",
    "get_preset_definitions",
    "get_rule_definitions",
    "find_preset_definition",
]
