"""DuckDB table definition for the photo catalog.

The catalog's authoritative schema is owned elsewhere; this is only the
table the loader and the tests create when it does not exist yet. One row
per photo, one value per filter dimension.
"""

from typing import List
import duckdb

from config import config
from config.logging_config import get_logger
from src.filters.vocabulary import DIMENSIONS

logger = get_logger("schema")

PHOTO_COLUMNS: List[str] = [
    "photo_id",
    "image_key",
    "sport_type",
    "photo_category",
    "play_type",
    "action_intensity",
    "lighting",
    "color_temperature",
    "time_of_day",
    "composition",
    "quality_score",
    "upload_date",
    "image_url",
    "thumbnail_url",
]

CREATE_PHOTOS = """
CREATE TABLE IF NOT EXISTS {table} (
    -- Primary Key
    photo_id VARCHAR PRIMARY KEY,
    image_key VARCHAR,

    -- Filter Dimensions (AI annotations)
    sport_type VARCHAR,
    photo_category VARCHAR,
    play_type VARCHAR,
    action_intensity VARCHAR,
    lighting VARCHAR,
    color_temperature VARCHAR,
    time_of_day VARCHAR,
    composition VARCHAR,

    -- Sorting
    quality_score DOUBLE,
    upload_date TIMESTAMP,

    -- Display
    image_url VARCHAR,
    thumbnail_url VARCHAR
)
"""


def _index_statements(table: str) -> List[str]:
    statements = [
        f"CREATE INDEX IF NOT EXISTS idx_{table}_{d.column} ON {table}({d.column})"
        for d in DIMENSIONS
    ]
    statements.append(f"CREATE INDEX IF NOT EXISTS idx_{table}_upload_date ON {table}(upload_date)")
    return statements


def create_photos_table(conn: duckdb.DuckDBPyConnection, table: str = None) -> None:
    """
    Create the photos table and its filter indexes if missing.

    Args:
        conn: DuckDB connection.
        table: Table name (defaults to the configured catalog table).
    """
    table = table or config.catalog.table
    conn.execute(CREATE_PHOTOS.format(table=table))
    for statement in _index_statements(table):
        try:
            conn.execute(statement)
        except duckdb.Error as e:
            logger.warning(f"Could not create index: {e}")
    logger.info(f"Catalog table ready: {table}")


def count_photos(conn: duckdb.DuckDBPyConnection, table: str = None) -> int:
    """Row count of the photos table (0 if it does not exist)."""
    table = table or config.catalog.table
    try:
        result = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
    except duckdb.CatalogException:
        return 0
    return result[0] if result else 0
