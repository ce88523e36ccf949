"""Filter vocabulary, state, URL codec, store and compatibility guard."""

from .vocabulary import (
    Cardinality,
    DimensionSpec,
    FilterDimension,
    DIMENSIONS,
    format_dimension_labels,
)
from .state import FilterState
from .sorting import DEFAULT_SORT, SortKey
from .notifications import Notification, NotificationCenter, Severity, ZERO_RESULTS_MESSAGE
from .store import CommitEvent, CommitSource, FilterStateStore
from .url_codec import (
    encode,
    decode,
    encode_with_extras,
    decode_with_extras,
    build_share_url,
    UrlMirror,
)
from .compatibility import (
    AutoClearEvent,
    CompatibilityGuard,
    CompatibilityRule,
    Conflict,
    GuardState,
    PillState,
    load_rules,
    pill_state,
)

__all__ = [
    # Vocabulary
    "Cardinality",
    "DimensionSpec",
    "FilterDimension",
    "DIMENSIONS",
    "format_dimension_labels",
    # State and store
    "FilterState",
    "DEFAULT_SORT",
    "SortKey",
    "CommitEvent",
    "CommitSource",
    "FilterStateStore",
    # Notifications
    "Notification",
    "NotificationCenter",
    "Severity",
    "ZERO_RESULTS_MESSAGE",
    # URL codec
    "encode",
    "decode",
    "encode_with_extras",
    "decode_with_extras",
    "build_share_url",
    "UrlMirror",
    # Compatibility
    "AutoClearEvent",
    "CompatibilityGuard",
    "CompatibilityRule",
    "Conflict",
    "GuardState",
    "PillState",
    "load_rules",
    "pill_state",
]
