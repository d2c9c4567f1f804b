"""In-memory data client used across the test suite."""

import asyncio
import re
from typing import Any

from cfo_cashflow.clients.postgrest import TableMissingError, TableQuery


def _like(pattern: str) -> re.Pattern[str]:
    regex = "".join(
        ".*" if ch == "%" else "." if ch == "_" else re.escape(ch) for ch in pattern
    )
    return re.compile(regex, re.IGNORECASE | re.DOTALL)


def _matches(row: dict[str, Any], filters: list[tuple[str, str, Any]]) -> bool:
    for column, op, value in filters:
        cell = row.get(column)
        if op == "in":
            if cell is None or str(cell) not in {str(v) for v in value}:
                return False
            continue
        if cell is None:
            return False
        cell_text, value_text = str(cell), str(value)
        if op == "eq" and cell_text != value_text:
            return False
        if op == "gte" and cell_text < value_text:
            return False
        if op == "lte" and cell_text > value_text:
            return False
        if op == "lt" and cell_text >= value_text:
            return False
        if op == "ilike" and not _like(value_text).fullmatch(cell_text):
            return False
    return True


class FakeDataClient:
    """Stand-in for the Supabase client that honours TableQuery filters."""

    def __init__(
        self,
        tables: dict[str, list[dict[str, Any]]] | None = None,
        missing: tuple[str, ...] = (),
        errors: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ):
        self.tables = tables or {}
        self.missing = set(missing)
        self.errors = errors or {}
        self.delays = delays or {}
        self.queries: list[TableQuery] = []

    def table(self, name: str) -> TableQuery:
        return TableQuery(name)

    def queried_tables(self) -> list[str]:
        return [q.table for q in self.queries]

    async def execute(self, query: TableQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        if query.table in self.delays:
            await asyncio.sleep(self.delays[query.table])
        if query.table in self.missing:
            raise TableMissingError(
                f'relation "public.{query.table}" does not exist',
                code="42P01",
                status_code=404,
            )
        if query.table in self.errors:
            raise self.errors[query.table]

        rows = [
            dict(row)
            for row in self.tables.get(query.table, [])
            if _matches(row, query.filters)
        ]
        if query.order_by:
            column, ascending = query.order_by
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=not ascending)
        if query.limit_count is not None:
            rows = rows[: query.limit_count]
        return rows
