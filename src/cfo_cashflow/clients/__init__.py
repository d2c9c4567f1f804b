"""Data access clients."""

from cfo_cashflow.clients.postgrest import (
    PostgrestError,
    QueryTimeoutError,
    SupabaseClient,
    TableMissingError,
    TableQuery,
)

__all__ = [
    "PostgrestError",
    "QueryTimeoutError",
    "SupabaseClient",
    "TableMissingError",
    "TableQuery",
]
