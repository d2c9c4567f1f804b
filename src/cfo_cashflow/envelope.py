"""Result envelope shared by every public operation.

Each operation resolves to either ``{"ok": True, "data": ...}`` or
``{"ok": False, "error": {"code", "message", "details"?}}``.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

CENT = Decimal("0.01")


class ErrorCode(str, Enum):
    """Error codes carried by a failed envelope."""

    INVALID_INPUT = "invalid_input"
    DB_ERROR = "db_error"
    MALFORMED_ROW = "malformed_row"
    UNKNOWN_TOOL = "unknown_tool"
    INTERNAL_ERROR = "internal_error"


def ok(data: dict[str, Any]) -> dict[str, Any]:
    return {"ok": True, "data": data}


def fail(code: ErrorCode, message: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code.value, "message": message}
    if details is not None:
        error["details"] = details
    return {"ok": False, "error": error}


def money(amount: Decimal) -> float:
    """Round an accumulated amount to cents for output."""
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def optional_money(amount: Decimal | None) -> float | None:
    return None if amount is None else money(amount)
