"""Result sort keys, shared by the URL codec and the query composer."""

from enum import Enum
from typing import Any, Optional

from config.logging_config import get_logger

logger = get_logger("sorting")


class SortKey(str, Enum):
    """Supported result orderings."""

    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST_QUALITY = "highest_quality"
    LOWEST_QUALITY = "lowest_quality"
    INTENSITY = "intensity"

    @classmethod
    def parse(cls, raw: Any, default: Optional["SortKey"] = None) -> "SortKey":
        """Parse a sort key, falling back to the default for anything unknown."""
        fallback = default or DEFAULT_SORT
        if isinstance(raw, SortKey):
            return raw
        if not isinstance(raw, str):
            return fallback
        try:
            return cls(raw.strip().lower())
        except ValueError:
            logger.debug(f"Unknown sort key {raw!r}, using {fallback.value}")
            return fallback


DEFAULT_SORT = SortKey.NEWEST
