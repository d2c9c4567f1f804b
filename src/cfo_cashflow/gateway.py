"""Time-bounded table reads shared by every estimator."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import structlog

from cfo_cashflow.clients.postgrest import QueryTimeoutError, TableMissingError, TableQuery

logger = structlog.get_logger(__name__)

RowT = TypeVar("RowT")


class DataClient(Protocol):
    """Anything that can build and run a ``TableQuery``."""

    def table(self, name: str) -> TableQuery: ...

    async def execute(self, query: TableQuery) -> list[dict[str, Any]]: ...


class QueryGateway:
    """Runs table reads under a wall-clock budget and parses the rows.

    ``asyncio.wait_for`` cancels the in-flight read when the budget runs out,
    so the HTTP request is torn down rather than left running in the
    background. ``TableMissingError`` passes through untouched for callers to
    downgrade into a note; everything else is a hard failure.
    """

    def __init__(self, client: DataClient, timeout_ms: int = 30_000):
        self.client = client
        self.timeout_ms = timeout_ms

    def table(self, name: str) -> TableQuery:
        return self.client.table(name)

    async def fetch(
        self,
        query: TableQuery,
        parse: Callable[[dict[str, Any], str], RowT],
        timeout_ms: int | None = None,
    ) -> list[RowT]:
        """Run ``query`` and parse every row with ``parse(row, table)``."""
        budget_ms = timeout_ms or self.timeout_ms
        try:
            raw = await asyncio.wait_for(self.client.execute(query), budget_ms / 1000)
        except TimeoutError:
            logger.warning("query_timeout", table=query.table, timeout_ms=budget_ms)
            raise QueryTimeoutError(
                f"Query on {query.table} timed out after {budget_ms} ms",
                details={"table": query.table, "timeout_ms": budget_ms},
            ) from None
        except TableMissingError:
            logger.warning("table_missing", table=query.table)
            raise

        logger.debug("query_completed", table=query.table, rows=len(raw))
        return [parse(row, query.table) for row in raw]
