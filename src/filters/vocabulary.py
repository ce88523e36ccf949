"""Filter vocabulary: the closed set of dimensions and their legal values.

Every dimension knows its URL key, catalog column, display label, whether it
holds one value or several, and how to describe a selection for people.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from config.logging_config import get_logger

logger = get_logger("vocabulary")

Selection = Union[None, str, Tuple[str, ...]]


class Cardinality(str, Enum):
    """How many values a dimension may hold at once."""

    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class DimensionSpec:
    """Static description of one filter dimension."""

    column: str
    label: str
    cardinality: Cardinality
    values: Tuple[str, ...]
    template: str = "{}"
    value_labels: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    def value_label(self, value: str) -> str:
        """Display label for a single value."""
        if value in self.value_labels:
            return self.value_labels[value]
        return value.replace("_", " ").title()


class FilterDimension(str, Enum):
    """The eight filter dimensions, in canonical (vocabulary) order.

    The member value is the dimension's URL key.
    """

    SPORT = "sport"
    CATEGORY = "category"
    PLAY_TYPE = "play_type"
    INTENSITY = "intensity"
    LIGHTING = "lighting"
    COLOR_TEMP = "color_temp"
    TIME_OF_DAY = "time_of_day"
    COMPOSITION = "composition"

    @property
    def spec(self) -> DimensionSpec:
        return DIMENSION_SPECS[self]

    @property
    def key(self) -> str:
        return self.value

    @property
    def column(self) -> str:
        return self.spec.column

    @property
    def label(self) -> str:
        return self.spec.label

    @property
    def values(self) -> Tuple[str, ...]:
        return self.spec.values

    @property
    def is_multi(self) -> bool:
        return self.spec.cardinality == Cardinality.MULTI

    @property
    def position(self) -> int:
        """Index of this dimension in vocabulary order."""
        return list(FilterDimension).index(self)

    @classmethod
    def from_key(cls, key: Any) -> Optional["FilterDimension"]:
        """Look up a dimension by URL key (or member), returning None if unknown."""
        if isinstance(key, FilterDimension):
            return key
        if not isinstance(key, str):
            return None
        try:
            return cls(key.strip().lower())
        except ValueError:
            return None

    def is_legal(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.spec.values

    def clean_value(self, raw: Any) -> Optional[str]:
        """Strip and lower-case a raw value; None when it is not legal."""
        if not isinstance(raw, str):
            return None
        value = raw.strip().lower()
        return value if value in self.spec.values else None

    def normalize(self, raw: Any) -> Selection:
        """
        Validate a raw selection for this dimension.

        Args:
            raw: None, a single value, or an iterable of values

        Returns:
            None when nothing legal remains, a value for single-valued
            dimensions (first legal one wins), or a deduplicated tuple in
            vocabulary order for multi-valued dimensions.
        """
        if raw is None:
            return None

        if isinstance(raw, str):
            candidates: Iterable[Any] = [raw]
        elif isinstance(raw, (list, tuple, set, frozenset)):
            candidates = raw
        else:
            logger.debug(f"Ignoring non-string value for {self.key}: {raw!r}")
            return None

        legal = []
        for candidate in candidates:
            value = self.clean_value(candidate)
            if value is None:
                logger.debug(f"Dropping illegal {self.key} value: {candidate!r}")
                continue
            if value not in legal:
                legal.append(value)

        if not legal:
            return None
        if not self.is_multi:
            return legal[0]
        return tuple(v for v in self.spec.values if v in legal)

    def format_value(self, value: str) -> str:
        return self.spec.value_label(value)

    def format_selection(self, selection: Selection) -> str:
        """Labels for a selection, multi values joined with ' + '."""
        if selection is None:
            return ""
        if isinstance(selection, tuple):
            return " + ".join(self.format_value(v) for v in selection)
        return self.format_value(selection)

    def describe(self, selection: Selection) -> str:
        """Human description of a selection, e.g. 'Peak Intensity'."""
        if not selection:
            return ""
        return self.spec.template.format(self.format_selection(selection))


DIMENSION_SPECS: Dict[FilterDimension, DimensionSpec] = {
    FilterDimension.SPORT: DimensionSpec(
        column="sport_type",
        label="Sport",
        cardinality=Cardinality.SINGLE,
        values=(
            "volleyball",
            "basketball",
            "soccer",
            "softball",
            "baseball",
            "football",
            "track",
            "portrait",
        ),
    ),
    FilterDimension.CATEGORY: DimensionSpec(
        column="photo_category",
        label="Category",
        cardinality=Cardinality.SINGLE,
        values=("action", "celebration", "candid", "portrait", "warmup", "ceremony"),
        value_labels={"warmup": "Warm-up"},
    ),
    FilterDimension.PLAY_TYPE: DimensionSpec(
        column="play_type",
        label="Play Type",
        cardinality=Cardinality.SINGLE,
        values=("attack", "block", "dig", "set", "serve", "celebration", "transition"),
    ),
    FilterDimension.INTENSITY: DimensionSpec(
        column="action_intensity",
        label="Intensity",
        cardinality=Cardinality.SINGLE,
        values=("low", "medium", "high", "peak"),
        template="{} Intensity",
    ),
    FilterDimension.LIGHTING: DimensionSpec(
        column="lighting",
        label="Lighting",
        cardinality=Cardinality.MULTI,
        values=("natural", "backlit", "dramatic", "soft", "artificial"),
        template="{} Lighting",
    ),
    FilterDimension.COLOR_TEMP: DimensionSpec(
        column="color_temperature",
        label="Color Temperature",
        cardinality=Cardinality.SINGLE,
        values=("warm", "neutral", "cool"),
        template="{} Tones",
    ),
    FilterDimension.TIME_OF_DAY: DimensionSpec(
        column="time_of_day",
        label="Time of Day",
        cardinality=Cardinality.SINGLE,
        values=("golden_hour", "midday", "evening", "blue_hour", "night", "dawn"),
    ),
    FilterDimension.COMPOSITION: DimensionSpec(
        column="composition",
        label="Composition",
        cardinality=Cardinality.MULTI,
        values=("rule_of_thirds", "leading_lines", "centered", "symmetry", "frame_within_frame"),
        value_labels={
            "rule_of_thirds": "Rule of Thirds",
            "frame_within_frame": "Frame within Frame",
        },
    ),
}

DIMENSIONS: Tuple[FilterDimension, ...] = tuple(FilterDimension)


def format_dimension_labels(dimensions: Iterable[FilterDimension]) -> str:
    """Join dimension labels in vocabulary order, e.g. 'Sport, Play Type'."""
    chosen = set(dimensions)
    return ", ".join(d.label for d in DIMENSIONS if d in chosen)
