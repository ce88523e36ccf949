"""History, presets, usage analytics and display preferences."""

from .history import FilterHistory, HistoryEntry, relative_time
from .presets import Preset, PresetLibrary, load_built_in_presets
from .analytics import FilterAnalytics, describe_combination
from .preferences import DisplayPreferences, PreferenceFlags

__all__ = [
    "FilterHistory",
    "HistoryEntry",
    "relative_time",
    "Preset",
    "PresetLibrary",
    "load_built_in_presets",
    "FilterAnalytics",
    "describe_combination",
    "DisplayPreferences",
    "PreferenceFlags",
]
