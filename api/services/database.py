"""Catalog connection service for FastAPI."""

import duckdb
from typing import Optional
from pathlib import Path

from api.config import get_settings
from src.database import count_photos, open_catalog


class DatabaseService:
    """Holds the API's read-only catalog connection."""

    def __init__(self, db_path: Optional[Path] = None, connection: Optional[duckdb.DuckDBPyConnection] = None):
        """Initialize database service.

        Args:
            db_path: Path to the catalog file.
            connection: Already-open connection to use instead of db_path.
        """
        self.db_path = db_path or get_settings().database_path
        self._connection: Optional[duckdb.DuckDBPyConnection] = connection

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Get the connection, opening the catalog read-only on first use."""
        if self._connection is None:
            self._connection = open_catalog(self.db_path, read_only=True)
        return self._connection

    def photo_count(self) -> int:
        return count_photos(self.connect())

    def close(self) -> None:
        if self._connection:
            self._connection.close()
            self._connection = None


# Global database instance
_db_service: Optional[DatabaseService] = None


def get_db() -> DatabaseService:
    """Get global database service instance."""
    global _db_service
    if _db_service is None:
        _db_service = DatabaseService()
    return _db_service


def close_db() -> None:
    """Close the global catalog connection."""
    global _db_service
    if _db_service is not None:
        _db_service.close()
        _db_service = None
