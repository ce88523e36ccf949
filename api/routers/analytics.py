"""Filter usage analytics API router."""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_kv_store
from src.filters.vocabulary import DIMENSIONS
from src.storage.kv_store import KeyValueStore
from src.tracking.analytics import FilterAnalytics

router = APIRouter()


@router.get("")
async def get_analytics(
    top: int = Query(5, ge=1, le=20, description="Top values per dimension"),
    kv_store: KeyValueStore = Depends(get_kv_store),
):
    """Usage summary, session stats, top values and top combinations."""
    analytics = FilterAnalytics(kv_store)
    return {
        "summary": analytics.summary(),
        "session": analytics.session_stats(),
        "top_values": {
            dimension.key: [
                {"value": value, "count": count}
                for value, count in analytics.top_values(dimension, top)
            ]
            for dimension in DIMENSIONS
        },
        "top_combinations": analytics.top_combinations(10),
    }


@router.get("/export")
async def export_analytics(kv_store: KeyValueStore = Depends(get_kv_store)):
    """All raw counters, for debugging or offline analysis."""
    return FilterAnalytics(kv_store).export()


@router.delete("")
async def reset_analytics(kv_store: KeyValueStore = Depends(get_kv_store)):
    """Reset all analytics."""
    FilterAnalytics(kv_store).reset()
    return {"message": "Analytics reset"}
