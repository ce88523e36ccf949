"""API Pydantic models."""

from api.models.schemas import (
    PaginationInfo,
    NotificationModel,
    PhotosResponse,
    FilterCountsResponse,
    PresetModel,
    CreatePresetRequest,
    ApplyPresetResponse,
    HistoryEntryModel,
    PreferencesModel,
    PreferencesUpdate,
)

__all__ = [
    "PaginationInfo",
    "NotificationModel",
    "PhotosResponse",
    "FilterCountsResponse",
    "PresetModel",
    "CreatePresetRequest",
    "ApplyPresetResponse",
    "HistoryEntryModel",
    "PreferencesModel",
    "PreferencesUpdate",
]
