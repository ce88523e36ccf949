"""Bidirectional mapping between FilterState and URL query strings.

The encoded form is canonical: dimensions in vocabulary order, multi-valued
dimensions as repeated keys in vocabulary order, unset dimensions omitted.
Decoding is forgiving and never raises; anything it does not recognize is
dropped.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qs, urlencode

from config.logging_config import get_logger
from src.filters.sorting import DEFAULT_SORT, SortKey
from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension

logger = get_logger("url_codec")

SORT_PARAM = "sort"
PAGE_PARAM = "page"
DEFAULT_SHARE_PATH = "/explore"

QueryInput = Union[str, Mapping[str, Any], None]


def _pairs(state: FilterState) -> List[Tuple[str, str]]:
    pairs = []
    for dimension, _ in state.items():
        for value in state.values_for(dimension):
            pairs.append((dimension.key, value))
    return pairs


def encode(state: FilterState) -> str:
    """Encode a state as a canonical query string (no leading '?')."""
    return urlencode(_pairs(state))


def _to_multidict(query: QueryInput) -> Dict[str, List[str]]:
    """Normalize a query string or mapping into key -> list of raw values."""
    if query is None:
        return {}

    if isinstance(query, str):
        text = query.strip()
        if "?" in text:
            text = text.split("?", 1)[1]
        text = text.split("#", 1)[0]
        try:
            return parse_qs(text, keep_blank_values=False)
        except ValueError as e:
            logger.warning(f"Could not parse query string {query!r}: {e}")
            return {}

    if isinstance(query, Mapping):
        result: Dict[str, List[str]] = {}
        # Framework multi-dicts expose getlist(); plain mappings hold str or list.
        getlist = getattr(query, "getlist", None)
        for key in query.keys():
            raw = getlist(key) if callable(getlist) else query[key]
            if isinstance(raw, (list, tuple)):
                values = [v for v in raw if isinstance(v, str)]
            elif isinstance(raw, str):
                values = [raw]
            else:
                continue
            result.setdefault(str(key), []).extend(values)
        return result

    logger.warning(f"Unsupported query type: {type(query).__name__}")
    return {}


def _state_from_multidict(params: Mapping[str, List[str]]) -> FilterState:
    selections: Dict[FilterDimension, Any] = {}
    for raw_key, values in params.items():
        dimension = FilterDimension.from_key(raw_key)
        if dimension is None:
            continue
        selections.setdefault(dimension, []).extend(values)
    return FilterState.of(selections)


def decode(query: QueryInput) -> FilterState:
    """
    Decode a query string or multi-value mapping into a FilterState.

    Accepts 'sport=volleyball&lighting=natural', the same with a leading
    '?', a full URL, or a mapping of key -> str | list[str]. Unknown keys and
    illegal values are dropped; for single-valued dimensions the first legal
    value wins.
    """
    return _state_from_multidict(_to_multidict(query))


def _parse_page(values: List[str]) -> int:
    for raw in values:
        try:
            page = int(raw.strip())
        except (ValueError, AttributeError):
            continue
        if page >= 1:
            return page
    return 1


def decode_with_extras(query: QueryInput) -> Tuple[FilterState, SortKey, int]:
    """Decode filters plus the `sort` and `page` parameters (invalid -> defaults)."""
    params = _to_multidict(query)
    sort_values = params.get(SORT_PARAM) or []
    sort = SortKey.parse(sort_values[0]) if sort_values else DEFAULT_SORT
    page = _parse_page(params.get(PAGE_PARAM) or [])
    return _state_from_multidict(params), sort, page


def encode_with_extras(state: FilterState, sort: Any = DEFAULT_SORT, page: int = 1) -> str:
    """Encode filters, adding `sort` when not the default and `page` when past the first."""
    pairs = _pairs(state)
    sort_key = SortKey.parse(sort)
    if sort_key != DEFAULT_SORT:
        pairs.append((SORT_PARAM, sort_key.value))
    if page and page > 1:
        pairs.append((PAGE_PARAM, str(page)))
    return urlencode(pairs)


def build_share_url(state: FilterState, base_path: str = DEFAULT_SHARE_PATH) -> str:
    """Shareable path for a state, e.g. '/explore?sport=volleyball'."""
    query = encode(state)
    return f"{base_path}?{query}" if query else base_path


class UrlMirror:
    """
    Store observer that keeps the canonical query string current.

    Stands in for the browser address bar: every commit re-encodes the
    state, so the query string always reflects the committed filters.
    """

    def __init__(self, base_path: str = DEFAULT_SHARE_PATH):
        self.base_path = base_path
        self.query_string = ""
        self.updates = 0

    def __call__(self, event) -> None:
        query = encode(event.current)
        if query != self.query_string:
            self.query_string = query
            self.updates += 1
            logger.debug(f"URL updated: ?{query}")

    @property
    def url(self) -> str:
        return f"{self.base_path}?{self.query_string}" if self.query_string else self.base_path

    def reset(self, query: Optional[str] = None) -> None:
        self.query_string = encode(decode(query)) if query else ""
