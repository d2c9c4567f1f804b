"""Typed records for the ledger tables read by the forecasting module.

Rows come back from PostgREST as loosely typed JSON objects. Each record type
parses one row shape at the data-access boundary so the estimators only ever
see Decimals and dates. A row that cannot be parsed raises
``MalformedRowError`` instead of being coerced to zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any


class MalformedRowError(Exception):
    """A fetched row does not match the shape its table promises."""

    def __init__(self, table: str, message: str, row: Any = None):
        super().__init__(f"Malformed row in {table}: {message}")
        self.table = table
        self.row = row


def _money(row: dict[str, Any], key: str, table: str) -> Decimal:
    value = row.get(key)
    # bool is an int subclass and would silently parse as 0/1
    if value is None or isinstance(value, bool):
        raise MalformedRowError(table, f"{key} is missing", row)
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise MalformedRowError(table, f"{key} is not numeric: {value!r}", row) from None
    if not amount.is_finite():
        raise MalformedRowError(table, f"{key} is not finite: {value!r}", row)
    return amount


def _date(row: dict[str, Any], key: str, table: str) -> date | None:
    value = row.get(key)
    if value is None or value == "":
        return None
    try:
        # timestamp columns arrive as full ISO strings; only the calendar date matters
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise MalformedRowError(table, f"{key} is not a date: {value!r}", row) from None


def _required_date(row: dict[str, Any], key: str, table: str) -> date:
    value = _date(row, key, table)
    if value is None:
        raise MalformedRowError(table, f"{key} is missing", row)
    return value


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class AgingRow:
    """One bucket balance from an AR aging snapshot."""

    bucket: str
    balance: Decimal
    as_of_date: date

    @classmethod
    def from_row(cls, row: dict[str, Any], table: str = "ar_aging") -> AgingRow:
        bucket = _text(row.get("bucket"))
        if bucket is None:
            raise MalformedRowError(table, "bucket is missing", row)
        as_of = _required_date(row, "as_of_date", table)
        return cls(bucket=bucket, balance=_money(row, "balance", table), as_of_date=as_of)


@dataclass(frozen=True)
class InvoiceRow:
    """An invoice as seen by the forecasting module."""

    invoice_id: str
    customer_id: str | None
    customer_name: str | None
    due_date: date
    amount: Decimal
    status: str | None

    @classmethod
    def from_row(cls, row: dict[str, Any], table: str = "invoices") -> InvoiceRow:
        invoice_id = _text(row.get("invoice_id"))
        if invoice_id is None:
            raise MalformedRowError(table, "invoice_id is missing", row)
        due = _required_date(row, "due_date", table)
        return cls(
            invoice_id=invoice_id,
            customer_id=_text(row.get("customer_id")),
            customer_name=_text(row.get("customer_name")),
            due_date=due,
            amount=_money(row, "amount", table),
            status=_text(row.get("status")),
        )


@dataclass(frozen=True)
class PaymentRow:
    """A received payment, optionally linked to an invoice."""

    amount: Decimal
    payment_date: date | None = None
    invoice_id: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any], table: str = "payments") -> PaymentRow:
        return cls(
            amount=_money(row, "amount", table),
            payment_date=_date(row, "payment_date", table),
            invoice_id=_text(row.get("invoice_id")),
        )


@dataclass(frozen=True)
class PayrollComponentRow:
    """A labor, contractor or salary cost line, optionally tied to a customer."""

    amount: Decimal
    customer_id: str | None = None
    customer_name: str | None = None
    txn_date: date | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any], table: str = "payroll") -> PayrollComponentRow:
        return cls(
            amount=_money(row, "amount", table),
            customer_id=_text(row.get("customer_id")),
            customer_name=_text(row.get("customer_name")),
            txn_date=_date(row, "txn_date", table),
        )

    @property
    def customer_key(self) -> str | None:
        """Grouping key: customer id, else name, else None."""
        return self.customer_id or self.customer_name
