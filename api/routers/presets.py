"""Filter presets API router.

Built-in presets come from configuration and are read-only; custom presets
are persisted in the key/value store.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import SessionFactory, get_kv_store, get_session_factory
from api.models.schemas import ApplyPresetResponse, CreatePresetRequest, NotificationModel, PresetModel
from src.filters.state import FilterState
from src.filters.url_codec import encode
from src.storage.kv_store import KeyValueStore
from src.tracking.presets import Preset, PresetLibrary

router = APIRouter()


def _to_model(library: PresetLibrary, preset: Preset) -> PresetModel:
    return PresetModel(**preset.to_dict(), share_url=library.share_url(preset.id))


@router.get("", response_model=list[PresetModel])
async def list_presets(
    include_built_in: bool = Query(True, description="Include built-in presets"),
    recent: bool = Query(False, description="Only the most recently used presets"),
    kv_store: KeyValueStore = Depends(get_kv_store),
):
    """List filter presets."""
    library = PresetLibrary(kv_store)
    if recent:
        presets = library.recent
    elif include_built_in:
        presets = library.all
    else:
        presets = library.custom
    return [_to_model(library, p) for p in presets]


@router.get("/{preset_id}", response_model=PresetModel)
async def get_preset(preset_id: str, kv_store: KeyValueStore = Depends(get_kv_store)):
    """Get a single preset by ID."""
    library = PresetLibrary(kv_store)
    preset = library.get(preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail="Preset not found")
    return _to_model(library, preset)


@router.post("", status_code=201, response_model=PresetModel)
async def create_preset(request: CreatePresetRequest, kv_store: KeyValueStore = Depends(get_kv_store)):
    """Save the given filters as a custom preset."""
    filters = FilterState.from_dict(request.filters)
    if filters.is_empty():
        raise HTTPException(status_code=400, detail="Preset needs at least one valid filter")

    library = PresetLibrary(kv_store)
    try:
        preset = library.save(request.name, request.description or "", filters)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_model(library, preset)


@router.delete("/{preset_id}")
async def delete_preset(preset_id: str, kv_store: KeyValueStore = Depends(get_kv_store)):
    """Delete a custom preset."""
    library = PresetLibrary(kv_store)
    preset = library.get(preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail="Preset not found")
    if not preset.is_custom:
        raise HTTPException(status_code=403, detail="Cannot delete built-in presets")

    library.delete(preset_id)
    return {"message": "Preset deleted", "id": preset_id}


@router.post("/{preset_id}/apply", response_model=ApplyPresetResponse)
async def apply_preset(preset_id: str, factory: SessionFactory = Depends(get_session_factory)):
    """Apply a preset: one commit, recorded in history, analytics and recent presets."""
    session = factory(track=True)
    try:
        preset = session.apply_preset(preset_id)
        if preset is None:
            raise HTTPException(status_code=404, detail="Preset not found")
        state = session.state
        return ApplyPresetResponse(
            preset=_to_model(session.presets, preset),
            filters=state.to_dict(),
            query=encode(state),
            share_url=session.share_url(),
            notifications=[NotificationModel(**n.to_dict()) for n in session.notifications.active()],
        )
    finally:
        session.close()
