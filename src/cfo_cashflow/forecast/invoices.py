"""Invoice-exact estimator: open invoices falling due inside the window."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from cfo_cashflow.envelope import money
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.records import InvoiceRow

INVOICES_TABLE = "invoices"
INVOICE_COLUMNS = "invoice_id,customer_id,customer_name,due_date,amount,status"
TOP_PAYERS_LIMIT = 5


@dataclass
class PayerDue:
    """Amount one customer owes inside the window."""

    customer_id: str
    customer_name: str
    amount: Decimal
    due_date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "amount": money(self.amount),
            "due_date": self.due_date.isoformat(),
        }


async def fetch_open_invoices_due(
    gateway: QueryGateway, start: date, end: date
) -> list[InvoiceRow]:
    """Open invoices with ``due_date`` in ``[start, end]``.

    Raises ``TableMissingError`` when the invoices table is absent; callers
    decide how to degrade.
    """
    return await gateway.fetch(
        gateway.table(INVOICES_TABLE)
        .select(INVOICE_COLUMNS)
        .eq("status", "open")
        .gte("due_date", start.isoformat())
        .lte("due_date", end.isoformat()),
        InvoiceRow.from_row,
    )


def total_due(invoices: list[InvoiceRow]) -> Decimal:
    return sum((inv.amount for inv in invoices), Decimal("0"))


def top_payers(invoices: list[InvoiceRow], limit: int = TOP_PAYERS_LIMIT) -> list[PayerDue]:
    """Largest customers by amount due; ties keep first-seen order."""
    by_customer: dict[str, PayerDue] = {}
    for inv in invoices:
        key = inv.customer_id or inv.customer_name or "unknown"
        payer = by_customer.get(key)
        if payer is None:
            payer = PayerDue(
                customer_id=inv.customer_id or key,
                customer_name=inv.customer_name or key,
                amount=Decimal("0"),
                due_date=inv.due_date,
            )
            by_customer[key] = payer
        payer.amount += inv.amount
    return sorted(by_customer.values(), key=lambda p: p.amount, reverse=True)[:limit]
