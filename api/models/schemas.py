"""Pydantic schemas for API request/response validation."""

from pydantic import BaseModel, Field
from typing import Any, Optional


class PaginationInfo(BaseModel):
    """Pagination metadata."""
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool


class NotificationModel(BaseModel):
    """A user-facing notification produced while handling the request."""
    id: str
    message: str
    severity: str
    duration_ms: int


class PhotosResponse(BaseModel):
    """One page of photos for the requested filters."""
    photos: list[dict[str, Any]]
    pagination: PaginationInfo
    filters: dict[str, Any] = Field(..., description="Filters actually applied, after reconciliation")
    description: str
    sort: str
    query: str = Field(..., description="Canonical query string for the applied filters")
    share_url: str
    cleared: list[str] = Field(default_factory=list, description="Dimensions auto-cleared as incompatible")
    notifications: list[NotificationModel] = Field(default_factory=list)


class FilterCountsResponse(BaseModel):
    """Per-value counts and option states for every dimension."""
    filters: dict[str, Any]
    counts: dict[str, dict[str, int]]
    options: dict[str, dict[str, str]] = Field(..., description="active / available / disabled per value")


class PresetModel(BaseModel):
    """A built-in or custom filter preset."""
    id: str
    name: str
    description: str
    filters: dict[str, Any]
    is_custom: bool
    created_at: Optional[float] = None
    icon: Optional[str] = None
    share_url: Optional[str] = None


class CreatePresetRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    filters: dict[str, Any]


class ApplyPresetResponse(BaseModel):
    """Result of applying a preset."""
    preset: PresetModel
    filters: dict[str, Any]
    query: str
    share_url: str
    notifications: list[NotificationModel] = Field(default_factory=list)


class HistoryEntryModel(BaseModel):
    """A recently used filter combination."""
    id: str
    filters: dict[str, Any]
    timestamp: float
    description: str
    relative_time: str
    url: str


class PreferencesModel(BaseModel):
    """Display and accessibility preferences."""
    disable_quality_dimming: bool = False
    always_show_emotion_labels: bool = False
    disable_animations: bool = False
    high_contrast_mode: bool = False
    show_quality_scores: bool = False


class PreferencesUpdate(BaseModel):
    """Partial preferences update; omitted fields are left unchanged."""
    disable_quality_dimming: Optional[bool] = None
    always_show_emotion_labels: Optional[bool] = None
    disable_animations: Optional[bool] = None
    high_contrast_mode: Optional[bool] = None
    show_quality_scores: Optional[bool] = None
