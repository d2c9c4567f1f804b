"""Async read-only client for the Supabase REST (PostgREST) API."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from cfo_cashflow.config import get_settings

logger = structlog.get_logger(__name__)

# undefined_table from Postgres, and PostgREST's schema-cache miss
TABLE_MISSING_CODES = frozenset({"42P01", "PGRST205"})


class PostgrestError(Exception):
    """Base exception for data access failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
        hint: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.hint = hint

    def to_details(self) -> dict[str, Any]:
        """Return a JSON-safe description of the failure."""
        return {
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
            "hint": self.hint,
        }


class TableMissingError(PostgrestError):
    """The requested table or view does not exist."""

    pass


class QueryTimeoutError(PostgrestError):
    """A read did not finish within its time budget and was cancelled."""

    pass


def error_from_response(status_code: int, body: Any) -> PostgrestError:
    """Build the typed error for a PostgREST error payload."""
    if not isinstance(body, dict):
        body = {"message": str(body)}
    code = body.get("code")
    message = body.get("message") or f"API error: {status_code}"
    error_cls = TableMissingError if code in TABLE_MISSING_CODES else PostgrestError
    return error_cls(
        message,
        code=code,
        status_code=status_code,
        details=body.get("details"),
        hint=body.get("hint"),
    )


def _quote(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class TableQuery:
    """Fluent description of a read against one table or view.

    Methods mutate and return the query so calls can be chained the same way
    the Supabase client libraries read::

        client.table("invoices").select("invoice_id, amount").eq("status", "open")
    """

    def __init__(self, table: str):
        self.table = table
        self.columns = "*"
        self.filters: list[tuple[str, str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.limit_count: int | None = None

    def select(self, columns: str) -> TableQuery:
        self.columns = ",".join(c.strip() for c in columns.split(","))
        return self

    def _filter(self, column: str, op: str, value: Any) -> TableQuery:
        self.filters.append((column, op, value))
        return self

    def eq(self, column: str, value: Any) -> TableQuery:
        return self._filter(column, "eq", value)

    def gte(self, column: str, value: Any) -> TableQuery:
        return self._filter(column, "gte", value)

    def lte(self, column: str, value: Any) -> TableQuery:
        return self._filter(column, "lte", value)

    def lt(self, column: str, value: Any) -> TableQuery:
        return self._filter(column, "lt", value)

    def ilike(self, column: str, pattern: str) -> TableQuery:
        return self._filter(column, "ilike", pattern)

    def in_(self, column: str, values: list[Any]) -> TableQuery:
        return self._filter(column, "in", list(values))

    def order(self, column: str, ascending: bool = True) -> TableQuery:
        self.order_by = (column, ascending)
        return self

    def limit(self, count: int) -> TableQuery:
        self.limit_count = count
        return self

    def to_params(self) -> list[tuple[str, str]]:
        """Render the query as PostgREST URL parameters."""
        params = [("select", self.columns)]
        for column, op, value in self.filters:
            if op == "in":
                rendered = "(" + ",".join(_quote(v) for v in value) + ")"
            else:
                rendered = str(value)
            params.append((column, f"{op}.{rendered}"))
        if self.order_by:
            column, ascending = self.order_by
            params.append(("order", f"{column}.{'asc' if ascending else 'desc'}"))
        if self.limit_count is not None:
            params.append(("limit", str(self.limit_count)))
        return params

    def __repr__(self) -> str:
        return f"TableQuery({self.table!r}, filters={self.filters!r})"


class SupabaseClient:
    """Async client for the Supabase REST endpoint using the service-role key."""

    def __init__(
        self,
        base_url: str | None = None,
        service_role_key: str | None = None,
        timeout_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self._key = (
            service_role_key or settings.supabase_service_role_key.get_secret_value()
        )
        self._timeout_ms = timeout_ms or settings.supabase_timeout_ms
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client for the running event loop.

        Pooled connections belong to the loop that opened them, so a client
        left over from a finished loop is dropped and rebuilt.
        """
        loop = asyncio.get_running_loop()
        if self._client is None or self._client.is_closed or self._loop is not loop:
            if self._client is not None:
                logger.debug("http_client_rebuilt", base_url=self.base_url)
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                timeout=httpx.Timeout(self._timeout_ms / 1000),
                transport=self._transport,
            )
            self._loop = loop
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._loop = None

    async def __aenter__(self) -> SupabaseClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Accept": "application/json",
        }

    def table(self, name: str) -> TableQuery:
        """Start a query against a table or view."""
        return TableQuery(name)

    async def execute(self, query: TableQuery) -> list[dict[str, Any]]:
        """Run a query and return its rows."""
        client = await self._get_client()
        try:
            response = await client.get(
                f"/{query.table}",
                params=query.to_params(),
                headers=self._get_headers(),
            )
        except httpx.TimeoutException as e:
            raise QueryTimeoutError(f"Request to {query.table} timed out") from e
        except httpx.RequestError as e:
            raise PostgrestError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json() if response.content else {}
            except ValueError:
                body = {"message": response.text[:500] if response.text else "empty response"}
            error = error_from_response(response.status_code, body)
            logger.debug(
                "postgrest_error",
                table=query.table,
                status=response.status_code,
                code=error.code,
            )
            raise error

        rows = response.json() if response.content else []
        if not isinstance(rows, list):
            raise PostgrestError(
                f"Unexpected response shape from {query.table}",
                status_code=response.status_code,
            )
        return rows
