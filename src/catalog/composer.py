"""Query composition for the photo catalog.

Turns a FilterState into a conjunctive, parameterized catalog request:
one predicate per active dimension, joined with AND, plus a deterministic
sort and offset pagination.
"""

from dataclasses import dataclass
from math import ceil
from typing import Any, Dict, List, Optional, Tuple

from config import config
from config.logging_config import get_logger
from src.filters.sorting import DEFAULT_SORT, SortKey
from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension

logger = get_logger("composer")

TIE_BREAK_COLUMN = "photo_id"


@dataclass(frozen=True)
class SortTerm:
    """One ORDER BY term. `expression` overrides the plain column when set."""

    column: str
    descending: bool = False
    expression: Optional[str] = None

    def to_sql(self, alias: Optional[str] = None) -> str:
        prefix = f"{alias}." if alias else ""
        target = (self.expression or "{prefix}" + self.column).format(prefix=prefix)
        direction = "DESC" if self.descending else "ASC"
        return f"{target} {direction} NULLS LAST"


def _intensity_rank_expression() -> str:
    """CASE expression ranking intensity values in vocabulary order (peak highest)."""
    whens = " ".join(
        f"WHEN '{value}' THEN {rank}"
        for rank, value in enumerate(FilterDimension.INTENSITY.values, start=1)
    )
    return f"CASE {{prefix}}{FilterDimension.INTENSITY.column} {whens} ELSE 0 END"


_TIE_BREAK = SortTerm(TIE_BREAK_COLUMN)

SORT_TERMS: Dict[SortKey, Tuple[SortTerm, ...]] = {
    SortKey.NEWEST: (SortTerm("upload_date", descending=True), _TIE_BREAK),
    SortKey.OLDEST: (SortTerm("upload_date"), _TIE_BREAK),
    SortKey.HIGHEST_QUALITY: (
        SortTerm("quality_score", descending=True),
        SortTerm("upload_date", descending=True),
        _TIE_BREAK,
    ),
    SortKey.LOWEST_QUALITY: (
        SortTerm("quality_score"),
        SortTerm("upload_date", descending=True),
        _TIE_BREAK,
    ),
    SortKey.INTENSITY: (
        SortTerm("action_intensity", descending=True, expression=_intensity_rank_expression()),
        SortTerm("upload_date", descending=True),
        _TIE_BREAK,
    ),
}


@dataclass(frozen=True)
class Predicate:
    """Equality or membership test on one dimension's catalog column."""

    dimension: FilterDimension
    op: str  # "eq" or "in"
    values: Tuple[str, ...]

    def to_sql(self, alias: Optional[str] = None) -> Tuple[str, List[Any]]:
        """Convert predicate to SQL clause and parameters."""
        column = f"{alias}.{self.dimension.column}" if alias else self.dimension.column
        if self.op == "eq":
            return f"{column} = ?", [self.values[0]]
        placeholders = ", ".join(["?" for _ in self.values])
        return f"{column} IN ({placeholders})", list(self.values)


def build_predicates(state: FilterState) -> Tuple[Predicate, ...]:
    """One predicate per active dimension, in vocabulary order."""
    predicates = []
    for dimension, selection in state.items():
        if dimension.is_multi:
            predicates.append(Predicate(dimension, "in", tuple(selection)))
        else:
            predicates.append(Predicate(dimension, "eq", (selection,)))
    return tuple(predicates)


def render_where(predicates: Tuple[Predicate, ...], alias: Optional[str] = None) -> Tuple[str, List[Any]]:
    """Build WHERE clause and parameters; empty string when there are no predicates."""
    conditions = []
    params: List[Any] = []
    for predicate in predicates:
        sql, predicate_params = predicate.to_sql(alias)
        conditions.append(sql)
        params.extend(predicate_params)

    if not conditions:
        return "", []
    return "WHERE " + " AND ".join(conditions), params


@dataclass(frozen=True)
class CatalogRequest:
    """A fully composed request for one page of catalog results."""

    state: FilterState
    predicates: Tuple[Predicate, ...]
    sort: SortKey = DEFAULT_SORT
    page: int = 1
    page_size: int = 24

    @property
    def out_of_range(self) -> bool:
        """Pages below 1 never match anything; the total is still reported."""
        return self.page < 1

    @property
    def offset(self) -> int:
        return max(self.page - 1, 0) * self.page_size

    @property
    def sort_terms(self) -> Tuple[SortTerm, ...]:
        return SORT_TERMS[self.sort]

    def where_clause(self, alias: Optional[str] = None) -> Tuple[str, List[Any]]:
        return render_where(self.predicates, alias)

    def order_by_clause(self, alias: Optional[str] = None) -> str:
        return "ORDER BY " + ", ".join(term.to_sql(alias) for term in self.sort_terms)


def build_request(
    state: FilterState,
    sort: Any = DEFAULT_SORT,
    page: int = 1,
    page_size: Optional[int] = None,
) -> CatalogRequest:
    """
    Compose a catalog request for a filter state.

    Args:
        state: Current filter state
        sort: Sort key (unknown values fall back to newest)
        page: 1-based page number; values below 1 yield an empty page
        page_size: Results per page (defaults to the configured page size)

    Returns:
        CatalogRequest ready for a CatalogQueryService
    """
    size = page_size or config.catalog.page_size
    return CatalogRequest(
        state=state,
        predicates=build_predicates(state),
        sort=SortKey.parse(sort),
        page=page,
        page_size=size,
    )


def build_distribution_request(state: FilterState, dimension: FilterDimension) -> Tuple[Predicate, ...]:
    """Predicates for the state with `dimension` removed, the base for its value counts."""
    return build_predicates(state.without(dimension))


@dataclass(frozen=True)
class CatalogPage:
    """One page of catalog results."""

    items: Tuple[Dict[str, Any], ...] = ()
    total: int = 0
    page: int = 1
    page_size: int = 24
    sort: SortKey = DEFAULT_SORT

    @property
    def photo_ids(self) -> Tuple[str, ...]:
        return tuple(item["photo_id"] for item in self.items)

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return 1 <= self.page < self.total_pages

    @property
    def is_empty(self) -> bool:
        return not self.items

    @classmethod
    def empty_for(cls, request: CatalogRequest, total: int = 0) -> "CatalogPage":
        return cls(items=(), total=total, page=request.page, page_size=request.page_size, sort=request.sort)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "photos": list(self.items),
            "pagination": {
                "page": self.page,
                "page_size": self.page_size,
                "total": self.total,
                "total_pages": self.total_pages,
                "has_next": self.has_next,
            },
            "sort": self.sort.value,
        }
