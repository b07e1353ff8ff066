"""
Generic Repository Base Class
Thin async read layer over one PostgREST table.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
from supabase import AsyncClient

from ..utils.observability import logger


class StoreQueryError(Exception):
    """Raised when the backing store rejects or fails a read."""

    def __init__(self, table: str, operation: str, cause: BaseException):
        self.table = table
        self.operation = operation
        self.cause = cause
        super().__init__(f"{table}.{operation} failed: {cause}")


class BaseRepository:
    """
    Async read-only repository for one table.

    The client is injected; repositories never build or own a connection.

    Usage:
        class MetricFactRepository(BaseRepository):
            def __init__(self, client: AsyncClient):
                super().__init__(client, "metric_facts")
    """

    def __init__(self, client: AsyncClient, table_name: str):
        """
        Initialize repository with a store client.

        Args:
            client: Supabase async client (shared, read-only use)
            table_name: PostgREST table name
        """
        self.client = client
        self.table_name = table_name

    async def select(
        self,
        columns: str,
        *,
        operation: str,
        eq: Optional[Dict[str, Any]] = None,
        in_: Optional[Dict[str, Sequence[Any]]] = None,
        gte: Optional[Dict[str, Any]] = None,
        lte: Optional[Dict[str, Any]] = None,
        not_null: Optional[Sequence[str]] = None,
        order: Optional[Sequence[str]] = None,
        range_: Optional[Tuple[int, int]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run one filtered select and return the raw rows.

        Filters whose value is None are skipped.

        Args:
            columns: PostgREST select string, embedded relations included
            operation: Name of the calling operation (for errors and logs)
            eq / in_ / gte / lte: column -> value filters
            not_null: Columns that must not be null
            order: Ascending sort columns, most significant first
            range_: Inclusive (first, last) row offsets

        Returns:
            Raw row dicts as returned by PostgREST

        Raises:
            StoreQueryError: If the store errors
        """
        query = self.client.table(self.table_name).select(columns)

        for column, value in (eq or {}).items():
            if value is not None:
                query = query.eq(column, value)
        for column, values in (in_ or {}).items():
            if values is not None:
                query = query.in_(column, list(values))
        for column, value in (gte or {}).items():
            if value is not None:
                query = query.gte(column, value)
        for column, value in (lte or {}).items():
            if value is not None:
                query = query.lte(column, value)
        for column in not_null or []:
            query = query.not_.is_(column, "null")
        for column in order or []:
            query = query.order(column)
        if range_ is not None:
            query = query.range(*range_)

        try:
            response = await query.execute()
        except Exception as e:
            raise StoreQueryError(self.table_name, operation, e) from e

        rows = response.data or []
        logger.debug(f"{self.table_name}.{operation} returned {len(rows)} rows")
        return rows

    async def select_all(
        self,
        columns: str,
        *,
        operation: str,
        order: Sequence[str],
        page_size: int,
        **filters: Any,
    ) -> List[Dict[str, Any]]:
        """
        Read every matching row in ordered pages of `page_size`.

        Paging stops at the first short page, so the result is complete
        and stable for a fixed `order` that ends in a unique column.

        Raises:
            ValueError: If page_size is not positive
            StoreQueryError: If any page read errors
        """
        if page_size < 1:
            raise ValueError(f"Page size must be positive, got {page_size}")

        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            page = await self.select(
                columns,
                operation=operation,
                order=order,
                range_=(start, start + page_size - 1),
                **filters,
            )
            rows.extend(page)
            if len(page) < page_size:
                break
            start += page_size

        if start:
            logger.debug(f"{self.table_name}.{operation} paged {len(rows)} rows ({start // page_size + 1} pages)")
        return rows

    async def count(self, *, operation: str, eq: Optional[Dict[str, Any]] = None) -> int:
        """
        Exact row count for equality filters, without transferring rows.

        Raises:
            StoreQueryError: If the store errors
        """
        query = self.client.table(self.table_name).select("id", count="exact", head=True)
        for column, value in (eq or {}).items():
            if value is not None:
                query = query.eq(column, value)

        try:
            response = await query.execute()
        except Exception as e:
            raise StoreQueryError(self.table_name, operation, e) from e

        return response.count or 0
