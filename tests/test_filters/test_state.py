"""Tests for the immutable filter state."""

from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension


class TestConstruction:
    """Tests for building states."""

    def test_empty(self):
        state = FilterState.empty()
        assert state.is_empty()
        assert state.active_filter_count == 0
        assert state.describe() == "All photos"

    def test_of_keyword_arguments(self):
        state = FilterState.of(sport="volleyball", lighting=["natural", "backlit"])
        assert state.get(FilterDimension.SPORT) == "volleyball"
        assert state.get(FilterDimension.LIGHTING) == ("natural", "backlit")

    def test_illegal_values_and_unknown_keys_dropped(self):
        state = FilterState.of({"sport": "curling", "mood": "happy", "intensity": "peak"})
        assert state.active_dimensions == (FilterDimension.INTENSITY,)

    def test_empty_collection_counts_as_unset(self):
        state = FilterState.of(lighting=[])
        assert FilterDimension.LIGHTING not in state

    def test_equality_ignores_pick_order(self):
        a = FilterState.of(composition=["centered", "rule_of_thirds"], sport="soccer")
        b = FilterState.of(sport="soccer", composition=["rule_of_thirds", "centered"])
        assert a == b
        assert hash(a) == hash(b)

    def test_from_dict_tolerates_garbage(self):
        assert FilterState.from_dict("not a dict").is_empty()
        assert FilterState.from_dict(None).is_empty()

    def test_to_dict_roundtrip(self):
        state = FilterState.of(sport="volleyball", lighting=["natural"])
        assert state.to_dict() == {"sport": "volleyball", "lighting": ["natural"]}
        assert FilterState.from_dict(state.to_dict()) == state


class TestTransitions:
    """Tests for state transitions."""

    def test_with_value_returns_new_state(self):
        base = FilterState.of(sport="volleyball")
        updated = base.with_value(FilterDimension.INTENSITY, "peak")
        assert FilterDimension.INTENSITY not in base
        assert updated.get(FilterDimension.INTENSITY) == "peak"

    def test_with_none_unsets(self):
        base = FilterState.of(sport="volleyball")
        assert base.with_value(FilterDimension.SPORT, None).is_empty()

    def test_toggle_multi_adds_and_removes(self):
        state = FilterState.empty().toggled(FilterDimension.LIGHTING, "natural")
        state = state.toggled(FilterDimension.LIGHTING, "backlit")
        assert state.get(FilterDimension.LIGHTING) == ("natural", "backlit")

        state = state.toggled(FilterDimension.LIGHTING, "natural")
        assert state.get(FilterDimension.LIGHTING) == ("backlit",)

        state = state.toggled(FilterDimension.LIGHTING, "backlit")
        assert FilterDimension.LIGHTING not in state

    def test_toggle_single_selects_and_deselects(self):
        state = FilterState.empty().toggled(FilterDimension.SPORT, "soccer")
        assert state.get(FilterDimension.SPORT) == "soccer"
        state = state.toggled(FilterDimension.SPORT, "volleyball")
        assert state.get(FilterDimension.SPORT) == "volleyball"
        assert state.toggled(FilterDimension.SPORT, "volleyball").is_empty()

    def test_without_dimensions(self):
        state = FilterState.of(sport="volleyball", play_type="serve", intensity="peak")
        reduced = state.without_dimensions([FilterDimension.SPORT, FilterDimension.PLAY_TYPE])
        assert reduced == FilterState.of(intensity="peak")


class TestDescriptions:
    """Tests for summaries and signatures."""

    def test_active_filter_count_counts_values(self):
        state = FilterState.of(sport="volleyball", lighting=["natural", "backlit"])
        assert state.active_filter_count == 3

    def test_signature_is_sorted(self):
        state = FilterState.of(sport="volleyball", intensity="peak", lighting=["natural"])
        assert state.signature() == ("intensity:peak", "lighting:natural", "sport:volleyball")

    def test_describe(self):
        state = FilterState.of(sport="volleyball", intensity="peak", lighting=["natural", "backlit"])
        assert state.describe() == "Volleyball • Peak Intensity • Natural + Backlit Lighting"
