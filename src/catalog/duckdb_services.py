"""DuckDB-backed Catalog Query and Distribution services.

Queries run in a worker thread on a fresh cursor per call, so many requests
(including one per dimension for distributions) can be in flight at once.
Transient I/O and connection errors are retried before being reported.
"""

import asyncio
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import duckdb
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import config
from config.logging_config import get_logger
from src.catalog.composer import CatalogPage, CatalogRequest, build_distribution_request, render_where
from src.catalog.services import ValueCount, zero_filled
from src.database.schema import PHOTO_COLUMNS
from src.errors import CatalogUnavailableError, DistributionUnavailableError
from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension

logger = get_logger("duckdb_services")

TABLE_ALIAS = "p"

TRANSIENT_ERRORS = (duckdb.IOException, duckdb.ConnectionException)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class _DuckDBQueryRunner:
    """Shared query plumbing for the DuckDB services."""

    def __init__(self, connection: duckdb.DuckDBPyConnection, table: Optional[str] = None):
        self.connection = connection
        self.table = table or config.catalog.table

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        reraise=True,
    )
    def _query(self, sql: str, params: Sequence[Any]) -> Tuple[List[str], List[tuple]]:
        """Run a query on its own cursor and return (column names, rows)."""
        cursor = self.connection.cursor()
        try:
            result = cursor.execute(sql, list(params))
            columns = [d[0] for d in result.description] if result.description else []
            return columns, result.fetchall()
        finally:
            cursor.close()


class DuckDBCatalogService(_DuckDBQueryRunner):
    """CatalogQueryService over the photos table."""

    async def fetch_page(self, request: CatalogRequest) -> CatalogPage:
        try:
            return await asyncio.to_thread(self._fetch_page_sync, request)
        except duckdb.Error as e:
            logger.error(f"Catalog query failed: {e}")
            raise CatalogUnavailableError(f"Catalog query failed: {e}") from e

    def _fetch_page_sync(self, request: CatalogRequest) -> CatalogPage:
        where, params = request.where_clause(TABLE_ALIAS)

        _, count_rows = self._query(f"SELECT COUNT(*) FROM {self.table} {TABLE_ALIAS} {where}", params)
        total = count_rows[0][0] if count_rows else 0

        if request.out_of_range:
            logger.debug(f"Page {request.page} out of range; returning empty page")
            return CatalogPage.empty_for(request, total)

        select_fields = ", ".join(f"{TABLE_ALIAS}.{c}" for c in PHOTO_COLUMNS)
        sql = f"""
            SELECT {select_fields}
            FROM {self.table} {TABLE_ALIAS}
            {where}
            {request.order_by_clause(TABLE_ALIAS)}
            LIMIT ? OFFSET ?
        """
        columns, rows = self._query(sql, params + [request.page_size, request.offset])
        items = tuple({col: _jsonable(val) for col, val in zip(columns, row)} for row in rows)

        return CatalogPage(
            items=items,
            total=total,
            page=request.page,
            page_size=request.page_size,
            sort=request.sort,
        )


class DuckDBDistributionService(_DuckDBQueryRunner):
    """DistributionService computing GROUP BY counts per dimension."""

    async def fetch_distribution(
        self, base_state: FilterState, dimension: FilterDimension
    ) -> Tuple[ValueCount, ...]:
        try:
            return await asyncio.to_thread(self._fetch_distribution_sync, base_state, dimension)
        except duckdb.Error as e:
            logger.error(f"Distribution query failed for {dimension.key}: {e}")
            raise DistributionUnavailableError(str(e), dimension=dimension.key) from e

    def _fetch_distribution_sync(
        self, base_state: FilterState, dimension: FilterDimension
    ) -> Tuple[ValueCount, ...]:
        where, params = render_where(build_distribution_request(base_state, dimension), TABLE_ALIAS)
        column = f"{TABLE_ALIAS}.{dimension.column}"
        sql = f"""
            SELECT {column} AS value, COUNT(*) AS count
            FROM {self.table} {TABLE_ALIAS}
            {where}
            GROUP BY {column}
        """
        _, rows = self._query(sql, params)
        counts: Dict[str, int] = {value: count for value, count in rows if value is not None}
        return zero_filled(dimension, counts)
