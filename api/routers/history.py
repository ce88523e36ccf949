"""Filter history API router."""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_kv_store
from api.models.schemas import HistoryEntryModel
from src.filters.url_codec import build_share_url
from src.storage.kv_store import KeyValueStore
from src.tracking.history import FilterHistory

router = APIRouter()


@router.get("", response_model=list[HistoryEntryModel])
async def list_history(
    limit: int = Query(10, ge=1, le=10, description="Maximum entries to return"),
    kv_store: KeyValueStore = Depends(get_kv_store),
):
    """Recently used filter combinations, newest first."""
    history = FilterHistory(kv_store)
    return [
        HistoryEntryModel(
            **entry.to_dict(),
            relative_time=history.relative_time(entry.timestamp),
            url=build_share_url(entry.filters),
        )
        for entry in history.recent(limit)
    ]


@router.delete("")
async def clear_history(kv_store: KeyValueStore = Depends(get_kv_store)):
    """Clear all history."""
    FilterHistory(kv_store).clear()
    return {"message": "History cleared"}


@router.delete("/{entry_id}")
async def delete_history_entry(entry_id: str, kv_store: KeyValueStore = Depends(get_kv_store)):
    """Remove one history entry."""
    if not FilterHistory(kv_store).remove(entry_id):
        raise HTTPException(status_code=404, detail="History entry not found")
    return {"message": "History entry deleted", "id": entry_id}
