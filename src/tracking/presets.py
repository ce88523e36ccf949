"""Named filter presets: built-in ones from configuration plus user-saved ones."""

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from config import config
from config.config_loader import get_preset_definitions
from config.logging_config import get_logger
from src.filters.state import FilterState
from src.filters.store import CommitSource, FilterStateStore
from src.filters.url_codec import DEFAULT_SHARE_PATH, build_share_url
from src.storage.kv_store import CUSTOM_PRESETS_KEY, RECENT_PRESETS_KEY, KeyValueStore
from src.tracking.base import PersistedTracker

logger = get_logger("presets")

RECENT_DISPLAY_LIMIT = 5


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    description: str
    filters: FilterState
    is_custom: bool = False
    created_at: Optional[float] = None
    icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "filters": self.filters.to_dict(),
            "is_custom": self.is_custom,
            "created_at": self.created_at,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: Any, is_custom: bool = True) -> Optional["Preset"]:
        """Tolerant loader; returns None for entries without an id or name."""
        if not isinstance(data, dict) or not data.get("id") or not data.get("name"):
            return None
        created_at = data.get("created_at")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            filters=FilterState.from_dict(data.get("filters")),
            is_custom=is_custom,
            created_at=float(created_at) if isinstance(created_at, (int, float)) else None,
            icon=data.get("icon"),
        )


def load_built_in_presets(definitions: Optional[Iterable[Dict[str, Any]]] = None) -> Tuple[Preset, ...]:
    """Built-in presets from presets.yaml (or the given definitions)."""
    raw = get_preset_definitions() if definitions is None else definitions
    presets = []
    for entry in raw:
        preset = Preset.from_dict(entry, is_custom=False)
        if preset is None or preset.filters.is_empty():
            logger.warning(f"Skipping unusable built-in preset: {entry!r}")
            continue
        presets.append(preset)
    return tuple(presets)


class PresetLibrary(PersistedTracker):
    """
    Built-in and custom presets plus a most-recently-used list.

    Custom presets and the recent list are persisted under their own keys;
    built-ins are read-only.
    """

    storage_key = CUSTOM_PRESETS_KEY

    def __init__(
        self,
        kv_store: KeyValueStore,
        built_in: Optional[Iterable[Preset]] = None,
        max_recent: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(kv_store)
        self._built_in: Tuple[Preset, ...] = tuple(built_in) if built_in is not None else load_built_in_presets()
        self.max_recent = max_recent or config.tracking.recent_presets_size
        self._clock = clock
        self._custom: List[Preset] = self._load_custom()
        self._recent: List[str] = self._load_recent()

    def _load_custom(self) -> List[Preset]:
        raw = self._load(CUSTOM_PRESETS_KEY)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Stored custom presets are not a list; starting empty")
            return []
        presets = [Preset.from_dict(item, is_custom=True) for item in raw]
        return [p for p in presets if p is not None]

    def _load_recent(self) -> List[str]:
        raw = self._load(RECENT_PRESETS_KEY)
        if not isinstance(raw, list):
            return []
        return [str(pid) for pid in raw if isinstance(pid, str)][: self.max_recent]

    def _persist_custom(self) -> None:
        self._save([p.to_dict() for p in self._custom], CUSTOM_PRESETS_KEY)

    def _persist_recent(self) -> None:
        self._save(list(self._recent), RECENT_PRESETS_KEY)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def all(self) -> List[Preset]:
        return list(self._built_in) + list(self._custom)

    @property
    def built_in(self) -> List[Preset]:
        return list(self._built_in)

    @property
    def custom(self) -> List[Preset]:
        return list(self._custom)

    @property
    def recent(self) -> List[Preset]:
        """Most recently used presets that still exist, newest first."""
        found = [self.get(pid) for pid in self._recent]
        return [p for p in found if p is not None][:RECENT_DISPLAY_LIMIT]

    def get(self, preset_id: str) -> Optional[Preset]:
        for preset in self.all:
            if preset.id == preset_id:
                return preset
        return None

    def matches(self, state: FilterState) -> Optional[Preset]:
        """The first preset whose filters equal the given state."""
        for preset in self.all:
            if preset.filters == state:
                return preset
        return None

    def share_url(self, preset_id: str, base_path: str = DEFAULT_SHARE_PATH) -> Optional[str]:
        preset = self.get(preset_id)
        if preset is None:
            return None
        return build_share_url(preset.filters, base_path)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, name: str, description: str, filters: FilterState) -> Preset:
        """Save a custom preset."""
        if not name or not name.strip():
            raise ValueError("Preset name is required")
        now = self._clock()
        preset = Preset(
            id=f"custom-{int(now * 1000)}-{uuid.uuid4().hex[:9]}",
            name=name.strip(),
            description=(description or "").strip(),
            filters=filters,
            is_custom=True,
            created_at=now,
        )
        self._custom.append(preset)
        self._persist_custom()
        logger.info(f"Saved custom preset {preset.id}: {preset.name}")
        return preset

    def delete(self, preset_id: str) -> bool:
        """Delete a custom preset. Built-in presets cannot be deleted."""
        if not any(p.id == preset_id for p in self._custom):
            return False
        self._custom = [p for p in self._custom if p.id != preset_id]
        self._persist_custom()
        if preset_id in self._recent:
            self._recent = [pid for pid in self._recent if pid != preset_id]
            self._persist_recent()
        return True

    def track_usage(self, preset_id: str) -> None:
        self._recent = [preset_id] + [pid for pid in self._recent if pid != preset_id]
        del self._recent[self.max_recent:]
        self._persist_recent()

    def apply_preset(self, preset_id: str, store: FilterStateStore) -> Optional[Preset]:
        """
        Replace the store's state with a preset's filters in one commit.

        Returns:
            The applied preset, or None if the id is unknown
        """
        preset = self.get(preset_id)
        if preset is None:
            logger.warning(f"Unknown preset: {preset_id}")
            return None
        store.replace(preset.filters, source=CommitSource.PRESET)
        self.track_usage(preset_id)
        return preset

    def clear_custom(self) -> None:
        custom_ids = {p.id for p in self._custom}
        self._custom = []
        self._persist_custom()
        if any(pid in custom_ids for pid in self._recent):
            self._recent = [pid for pid in self._recent if pid not in custom_ids]
            self._persist_recent()

    def clear_recent(self) -> None:
        self._recent = []
        self._persist_recent()
