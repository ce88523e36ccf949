"""API services."""

from api.services.database import get_db, close_db, DatabaseService

__all__ = ["get_db", "close_db", "DatabaseService"]
