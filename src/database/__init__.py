"""Database module for DuckDB operations."""

from .connection import (
    open_catalog,
    get_connection,
    get_memory_connection,
)
from .schema import (
    PHOTO_COLUMNS,
    create_photos_table,
    count_photos,
)

__all__ = [
    # Connection
    "open_catalog",
    "get_connection",
    "get_memory_connection",
    # Schema
    "PHOTO_COLUMNS",
    "create_photos_table",
    "count_photos",
]
