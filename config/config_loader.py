"""YAML Configuration Loader for Photo Facets.

Loads and caches configuration from YAML files with fallback to defaults.
Built-in presets and filter compatibility rules both live here rather than
in code, so they can be edited without a release.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from functools import lru_cache
import yaml

from config.logging_config import get_logger

logger = get_logger("config")

# Get config directory
CONFIG_DIR = Path(__file__).parent

COMPATIBILITY_RULES_ENV = "FACETS_COMPATIBILITY_RULES"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""

    pass


def _load_yaml_file(filepath: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filepath: Path to the YAML file

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigurationError: If file cannot be loaded
    """
    if not filepath.exists():
        raise ConfigurationError(f"Configuration file not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing {filepath.name}: {e}")
    except IOError as e:
        raise ConfigurationError(f"Error reading {filepath.name}: {e}")

    if not isinstance(content, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {filepath.name}")
    return content


def _compatibility_rules_path() -> Path:
    override = os.getenv(COMPATIBILITY_RULES_ENV)
    if override:
        return Path(override)
    return CONFIG_DIR / "compatibility.yaml"


@lru_cache(maxsize=1)
def load_presets() -> Dict[str, Any]:
    """Load presets.yaml configuration."""
    try:
        return _load_yaml_file(CONFIG_DIR / "presets.yaml")
    except ConfigurationError as e:
        logger.warning(f"Falling back to default presets: {e}")
        return {
            "presets": [
                {
                    "id": "rule-of-thirds",
                    "name": "Composed Shots",
                    "description": "Well-composed, rule of thirds",
                    "filters": {"composition": ["rule_of_thirds"]},
                }
            ]
        }


@lru_cache(maxsize=1)
def load_compatibility_rules() -> Dict[str, Any]:
    """Load compatibility rules, honouring the FACETS_COMPATIBILITY_RULES override."""
    try:
        return _load_yaml_file(_compatibility_rules_path())
    except ConfigurationError as e:
        logger.warning(f"Falling back to default compatibility rules: {e}")
        return {
            "rules": [
                {
                    "dimension": "play_type",
                    "values": ["serve", "set", "dig", "block"],
                    "requires": "sport",
                    "allowed": ["volleyball"],
                    "reason": "volleyball-specific play type",
                }
            ]
        }


def clear_config_cache() -> None:
    """Clear all cached configuration data."""
    load_presets.cache_clear()
    load_compatibility_rules.cache_clear()


def get_preset_definitions() -> List[Dict[str, Any]]:
    """Get the raw built-in preset definitions, skipping malformed entries."""
    presets = load_presets().get("presets") or []
    if not isinstance(presets, list):
        logger.warning("presets.yaml 'presets' is not a list; ignoring")
        return []
    valid = []
    for entry in presets:
        if isinstance(entry, dict) and entry.get("id") and entry.get("name"):
            valid.append(entry)
        else:
            logger.warning(f"Skipping malformed preset definition: {entry!r}")
    return valid


def get_rule_definitions() -> List[Dict[str, Any]]:
    """Get the raw compatibility rule definitions, skipping malformed entries."""
    rules = load_compatibility_rules().get("rules") or []
    if not isinstance(rules, list):
        logger.warning("compatibility 'rules' is not a list; ignoring")
        return []
    required = ("dimension", "values", "requires", "allowed")
    valid = []
    for entry in rules:
        if isinstance(entry, dict) and all(entry.get(key) for key in required):
            valid.append(entry)
        else:
            logger.warning(f"Skipping malformed compatibility rule: {entry!r}")
    return valid


def find_preset_definition(preset_id: str) -> Optional[Dict[str, Any]]:
    """Get a single built-in preset definition by id."""
    for entry in get_preset_definitions():
        if entry["id"] == preset_id:
            return entry
    return None
