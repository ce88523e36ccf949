"""Pytest configuration and fixtures for Photo Facets tests."""

import sys
from pathlib import Path

import duckdb
import pandas as pd
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.database.schema import create_photos_table
from src.filters.compatibility import load_rules
from src.filters.store import FilterStateStore
from src.storage.kv_store import InMemoryKeyValueStore
from src.tracking.presets import load_built_in_presets

# photo_id, sport, category, play_type, intensity, lighting, color_temp,
# time_of_day, composition, quality_score, upload_date
SAMPLE_PHOTOS = [
    ("p01", "volleyball", "action", "attack", "peak", "natural", "warm", "golden_hour", "rule_of_thirds", 0.95, "2024-06-01 10:00:00"),
    ("p02", "volleyball", "action", "serve", "high", "dramatic", "neutral", "midday", "centered", 0.80, "2024-06-02 10:00:00"),
    ("p03", "volleyball", "celebration", "celebration", "medium", "natural", "warm", "evening", "centered", 0.70, "2024-06-03 10:00:00"),
    ("p04", "basketball", "action", "attack", "peak", "artificial", "cool", "night", "leading_lines", 0.88, "2024-06-04 10:00:00"),
    ("p05", "basketball", "candid", None, "low", "soft", "neutral", "midday", "symmetry", 0.60, "2024-06-05 10:00:00"),
    ("p06", "soccer", "action", "transition", "high", "natural", "warm", "golden_hour", "rule_of_thirds", 0.92, "2024-06-06 10:00:00"),
    ("p07", "soccer", "portrait", None, "low", "soft", "warm", "golden_hour", "centered", 0.75, "2024-06-07 10:00:00"),
    ("p08", "volleyball", "action", "dig", "high", "backlit", "warm", "golden_hour", "frame_within_frame", 0.85, "2024-06-08 10:00:00"),
    ("p09", "portrait", "portrait", None, None, "soft", "neutral", "blue_hour", "centered", None, "2024-06-09 10:00:00"),
    ("p10", "volleyball", "warmup", None, "low", "artificial", "cool", "evening", "leading_lines", 0.50, "2024-06-10 10:00:00"),
]

RULE_DEFINITIONS = [
    {
        "dimension": "play_type",
        "values": ["serve", "set", "dig", "block"],
        "requires": "sport",
        "allowed": ["volleyball"],
        "reason": "volleyball-specific play type",
    },
    {
        "dimension": "play_type",
        "values": ["attack", "celebration", "transition"],
        "requires": "category",
        "allowed": ["action", "celebration"],
        "reason": "play types only apply to game photos",
    },
]

PRESET_DEFINITIONS = [
    {
        "id": "action-shots",
        "name": "Action Shots",
        "description": "High-intensity volleyball action",
        "filters": {"sport": "volleyball", "category": "action", "intensity": "peak"},
    },
    {
        "id": "golden-hour",
        "name": "Golden Hour",
        "description": "Warm, natural lighting photos",
        "filters": {"time_of_day": "golden_hour", "color_temp": "warm", "lighting": ["natural"]},
    },
]


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def insert_sample_photos(conn: duckdb.DuckDBPyConnection, table: str = "photos") -> None:
    """Insert SAMPLE_PHOTOS into an existing photos table."""
    conn.executemany(
        f"""
        INSERT INTO {table} (
            photo_id, image_key, sport_type, photo_category, play_type, action_intensity,
            lighting, color_temperature, time_of_day, composition, quality_score,
            upload_date, image_url, thumbnail_url
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, CAST(? AS TIMESTAMP), ?, ?)
        """,
        [
            (
                row[0], f"img/{row[0]}.jpg", *row[1:],
                f"https://cdn.example.com/{row[0]}.jpg",
                f"https://cdn.example.com/{row[0]}_thumb.jpg",
            )
            for row in SAMPLE_PHOTOS
        ],
    )


@pytest.fixture
def test_db():
    """Create in-memory DuckDB with the photos table and sample rows."""
    conn = duckdb.connect(":memory:")
    create_photos_table(conn, "photos")
    insert_sample_photos(conn)
    yield conn
    conn.close()


@pytest.fixture
def empty_db():
    """In-memory DuckDB with an empty photos table."""
    conn = duckdb.connect(":memory:")
    create_photos_table(conn, "photos")
    yield conn
    conn.close()


@pytest.fixture
def sample_photos_df():
    """Raw catalog export as a loader would read it."""
    return pd.DataFrame(
        {
            "photo_id": ["a1", "a2", "a3", "a3"],
            "sport_type": ["Volleyball ", "curling", "soccer", "soccer"],
            "photo_category": ["action", "ACTION", None, "candid"],
            "lighting": ["natural", "neon", "soft", "soft"],
            "quality_score": ["0.9", "bad", "0.5", "0.6"],
            "upload_date": ["2024-01-01", "2024-01-02", "not a date", "2024-01-03"],
        }
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def rules():
    return load_rules(RULE_DEFINITIONS)


@pytest.fixture
def built_in_presets():
    return load_built_in_presets(PRESET_DEFINITIONS)


@pytest.fixture
def store():
    return FilterStateStore()
