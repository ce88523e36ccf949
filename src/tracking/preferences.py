"""Display and accessibility preferences."""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from config.logging_config import get_logger
from src.storage.kv_store import PREFERENCES_KEY, KeyValueStore
from src.tracking.base import PersistedTracker

logger = get_logger("preferences")


@dataclass
class PreferenceFlags:
    # Show low-quality photos without blur/dimming
    disable_quality_dimming: bool = False
    # Emotion labels always visible, not only on hover
    always_show_emotion_labels: bool = False
    disable_animations: bool = False
    high_contrast_mode: bool = False
    show_quality_scores: bool = False


FLAG_NAMES = tuple(f.name for f in fields(PreferenceFlags))


class DisplayPreferences(PersistedTracker):
    """Persisted boolean display flags."""

    storage_key = PREFERENCES_KEY

    def __init__(self, kv_store: KeyValueStore):
        super().__init__(kv_store)
        self.flags = PreferenceFlags()
        stored = self._load()
        if isinstance(stored, dict):
            for name in FLAG_NAMES:
                if isinstance(stored.get(name), bool):
                    setattr(self.flags, name, stored[name])
        elif stored is not None:
            logger.warning("Stored preferences are not a mapping; using defaults")

    def _check(self, name: str) -> None:
        if name not in FLAG_NAMES:
            raise KeyError(f"Unknown preference: {name}")

    def get(self, name: str) -> bool:
        self._check(name)
        return getattr(self.flags, name)

    def set(self, name: str, value: bool) -> None:
        self._check(name)
        setattr(self.flags, name, bool(value))
        self._save(self.to_dict())

    def update(self, values: Dict[str, Any]) -> Dict[str, bool]:
        """Set several flags at once; unknown names raise KeyError before anything changes."""
        for name in values:
            self._check(name)
        for name, value in values.items():
            setattr(self.flags, name, bool(value))
        self._save(self.to_dict())
        return self.to_dict()

    def toggle(self, name: str) -> bool:
        value = not self.get(name)
        self.set(name, value)
        return value

    def reset(self) -> None:
        self.flags = PreferenceFlags()
        self._save(self.to_dict())

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self.flags)
