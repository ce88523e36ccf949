"""DuckDB connections to the photo catalog.

The API opens the catalog read-only; the loader opens it for writing.
DuckDB lets one process write a file at a time, so a read-only open can
hit a lock while a load is running. Opening is retried briefly before the
failure is reported as CatalogUnavailableError.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import duckdb
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import config
from config.logging_config import get_logger
from src.errors import CatalogUnavailableError

logger = get_logger("database")


@retry(
    retry=retry_if_exception_type(duckdb.IOException),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, max=2),
    reraise=True,
)
def _connect(path: str, read_only: bool) -> duckdb.DuckDBPyConnection:
    return duckdb.connect(path, read_only=read_only)


def open_catalog(
    db_path: Optional[Path] = None, read_only: Optional[bool] = None
) -> duckdb.DuckDBPyConnection:
    """
    Open the catalog database with the configured memory and thread limits.

    Args:
        db_path: Path to the database file. Defaults to config setting.
        read_only: Open read-only. Defaults to config setting.

    Raises:
        CatalogUnavailableError: If the file is missing (read-only) or
            cannot be opened.
    """
    path = Path(db_path or config.catalog.path)
    read_only = config.catalog.read_only if read_only is None else read_only

    if read_only and not path.exists():
        raise CatalogUnavailableError(f"Catalog not found: {path}", retryable=False)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = _connect(str(path), read_only)
    except duckdb.Error as e:
        raise CatalogUnavailableError(f"Could not open catalog {path}: {e}") from e

    conn.execute(f"SET memory_limit = '{config.catalog.memory_limit}'")
    if config.catalog.threads > 0:
        conn.execute(f"SET threads = {config.catalog.threads}")

    logger.info(f"Opened catalog {path} ({'read-only' if read_only else 'read-write'})")
    return conn


@contextmanager
def get_connection(
    db_path: Optional[Path] = None, read_only: Optional[bool] = None
) -> Iterator[duckdb.DuckDBPyConnection]:
    """
    Catalog connection that is closed on exit.

    Example:
        with get_connection(read_only=False) as conn:
            create_photos_table(conn)
    """
    conn = open_catalog(db_path, read_only)
    try:
        yield conn
    finally:
        conn.close()


def get_memory_connection() -> duckdb.DuckDBPyConnection:
    """In-memory database, used by tests and dry runs."""
    return duckdb.connect(":memory:")
