"""Display preferences API router."""

from fastapi import APIRouter, Depends

from api.dependencies import get_kv_store
from api.models.schemas import PreferencesModel, PreferencesUpdate
from src.storage.kv_store import KeyValueStore
from src.tracking.preferences import DisplayPreferences

router = APIRouter()


@router.get("", response_model=PreferencesModel)
async def get_preferences(kv_store: KeyValueStore = Depends(get_kv_store)):
    return PreferencesModel(**DisplayPreferences(kv_store).to_dict())


@router.put("", response_model=PreferencesModel)
async def update_preferences(update: PreferencesUpdate, kv_store: KeyValueStore = Depends(get_kv_store)):
    """Update the given flags; omitted flags keep their values."""
    preferences = DisplayPreferences(kv_store)
    changes = {name: value for name, value in update.model_dump().items() if value is not None}
    return PreferencesModel(**preferences.update(changes))
