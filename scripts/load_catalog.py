#!/usr/bin/env python
"""
Load annotated photo metadata into the DuckDB catalog.

Reads a CSV export (one row per photo, one column per filter dimension),
normalizes annotation values to the filter vocabulary and upserts the rows
into the photos table. Values outside the vocabulary are stored as NULL so
they never match a filter.

Usage:
    python scripts/load_catalog.py photos.csv [options]

Options:
    --db PATH           Custom database path
    --table NAME        Target table (default: photos)
    --chunk-size N      Rows per insert batch
    --replace           Drop existing rows before loading
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
from tqdm import tqdm

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import config
from config.logging_config import setup_logging, get_logger
from src.database import get_connection, create_photos_table, count_photos, PHOTO_COLUMNS
from src.filters.vocabulary import DIMENSIONS

logger = get_logger("load_catalog")


def normalize_frame(df: pd.DataFrame) -> tuple[pd.DataFrame, dict[str, int]]:
    """
    Align a raw export with the photos table.

    Returns:
        The cleaned frame and, per dimension column, how many values were
        dropped for being outside the vocabulary.
    """
    df = df.copy()
    for column in PHOTO_COLUMNS:
        if column not in df.columns:
            df[column] = None

    dropped: dict[str, int] = {}
    for dimension in DIMENSIONS:
        raw = df[dimension.column]
        cleaned = raw.map(dimension.clean_value)
        dropped[dimension.column] = int((raw.notna() & cleaned.isna()).sum())
        df[dimension.column] = cleaned

    df["photo_id"] = df["photo_id"].astype(str).str.strip()
    df = df[df["photo_id"].ne("") & df["photo_id"].ne("nan")]
    df = df.drop_duplicates(subset="photo_id", keep="last").copy()
    df["quality_score"] = pd.to_numeric(df["quality_score"], errors="coerce")
    df["upload_date"] = pd.to_datetime(df["upload_date"], errors="coerce")

    return df[PHOTO_COLUMNS], dropped


def load_csv(csv_path: Path, db_path: Path, table: str, chunk_size: int, replace: bool) -> int:
    """Load one CSV into the catalog. Returns rows written."""
    total = 0
    dropped_totals = {d.column: 0 for d in DIMENSIONS}

    with get_connection(db_path, read_only=False) as conn:
        create_photos_table(conn, table)
        if replace:
            conn.execute(f"DELETE FROM {table}")
            logger.info(f"Cleared existing rows from {table}")

        reader = pd.read_csv(csv_path, chunksize=chunk_size, dtype=str)
        for chunk in tqdm(reader, desc=f"Loading {csv_path.name}", unit="chunk"):
            frame, dropped = normalize_frame(chunk)
            for column, count in dropped.items():
                dropped_totals[column] += count
            if frame.empty:
                continue

            conn.register("incoming_photos", frame)
            conn.execute(f"DELETE FROM {table} WHERE photo_id IN (SELECT photo_id FROM incoming_photos)")
            conn.execute(f"INSERT INTO {table} SELECT * FROM incoming_photos")
            conn.unregister("incoming_photos")
            total += len(frame)

        for column, count in dropped_totals.items():
            if count:
                logger.warning(f"{count} values in {column} were outside the vocabulary and stored as NULL")

        logger.info(f"Catalog now holds {count_photos(conn, table):,} photos")

    return total


def main():
    """Main entry point for catalog loading."""
    parser = argparse.ArgumentParser(
        description="Load photo annotations into DuckDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("csv", type=Path, help="CSV export to load")
    parser.add_argument(
        "--db",
        type=Path,
        default=config.catalog.path,
        help="Custom database path",
    )
    parser.add_argument(
        "--table",
        default=config.catalog.table,
        help="Target table",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=5000,
        help="Rows per insert batch",
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Drop existing rows before loading",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level",
    )

    args = parser.parse_args()

    setup_logging(log_level=args.log_level)

    if not args.csv.exists():
        logger.error(f"File not found: {args.csv}")
        return 1

    start_time = datetime.now()
    logger.info("=" * 60)
    logger.info("Photo Facets - Catalog Load")
    logger.info(f"Source: {args.csv}")
    logger.info(f"Database path: {args.db}")
    logger.info("=" * 60)

    try:
        rows = load_csv(args.csv, args.db, args.table, args.chunk_size, args.replace)
    except Exception as e:
        logger.exception(f"Catalog load failed: {e}")
        return 1

    elapsed = (datetime.now() - start_time).total_seconds()
    logger.info(f"Loaded {rows:,} rows in {elapsed:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
