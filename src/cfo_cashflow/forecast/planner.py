"""Invoice planner behind ``getExpectedCashFromInvoicing``."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from cfo_cashflow.clients.postgrest import TableMissingError
from cfo_cashflow.config.settings import BlendWeights, RecoveryCurve
from cfo_cashflow.envelope import money
from cfo_cashflow.forecast.aging import load_latest_snapshot
from cfo_cashflow.forecast.history import PAYMENTS_TABLE
from cfo_cashflow.forecast.incoming import forecast_incoming_cash
from cfo_cashflow.forecast.invoices import fetch_open_invoices_due, total_due
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.records import InvoiceRow, PaymentRow

logger = structlog.get_logger(__name__)

BASIS_INVOICES = "invoices"
BASIS_AGING_FALLBACK = "aging_forecast"


@dataclass(frozen=True)
class InvoiceLine:
    invoice_id: str
    customer_id: str | None
    customer_name: str | None
    due_date: date
    amount: Decimal
    # No per-invoice probability model exists; collection risk is only
    # applied through the past-due cure term.
    expected_probability: float = 1.0

    @classmethod
    def from_invoice(cls, invoice: InvoiceRow) -> InvoiceLine:
        return cls(
            invoice_id=invoice.invoice_id,
            customer_id=invoice.customer_id,
            customer_name=invoice.customer_name,
            due_date=invoice.due_date,
            amount=invoice.amount,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoice_id": self.invoice_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "due_date": self.due_date.isoformat(),
            "amount": money(self.amount),
            "expected_probability": self.expected_probability,
        }


@dataclass
class ExpectedInvoicesResult:
    week_start: date
    week_end: date
    expected_from_invoices: Decimal
    basis: str
    detail: list[InvoiceLine] = field(default_factory=list)
    past_due_cure: Decimal = Decimal("0")
    already_paid: Decimal = Decimal("0")
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": {
                "start": self.week_start.isoformat(),
                "end": self.week_end.isoformat(),
            },
            "expected_from_invoices": money(self.expected_from_invoices),
            "basis": self.basis,
            "detail": [line.to_dict() for line in self.detail],
            "adjustments": {
                "past_due_cure": money(self.past_due_cure),
                "already_paid": money(self.already_paid),
            },
            "notes": list(self.notes),
        }


async def sum_payments_against(
    gateway: QueryGateway, invoice_ids: list[str], notes: list[str]
) -> Decimal:
    """Total already received against the given invoices."""
    if not invoice_ids:
        return Decimal("0")
    try:
        payments = await gateway.fetch(
            gateway.table(PAYMENTS_TABLE)
            .select("invoice_id,amount")
            .in_("invoice_id", invoice_ids),
            PaymentRow.from_row,
        )
    except TableMissingError:
        notes.append("payments table missing; already_paid not deducted")
        return Decimal("0")
    return sum((p.amount for p in payments), Decimal("0"))


async def forecast_from_invoicing(
    gateway: QueryGateway,
    week_start: date,
    week_end: date,
    as_of: date,
    include_late: bool,
    curve: RecoveryCurve,
    weights: BlendWeights,
) -> ExpectedInvoicesResult:
    """Exact invoice projection plus past-due cure, net of payments received."""
    notes: list[str] = []
    try:
        invoices = await fetch_open_invoices_due(gateway, week_start, week_end)
    except TableMissingError:
        fallback = await forecast_incoming_cash(
            gateway, week_start, week_end, as_of, False, curve, weights
        )
        logger.info("invoice_planner_fallback", week_start=week_start.isoformat())
        return ExpectedInvoicesResult(
            week_start=week_start,
            week_end=week_end,
            expected_from_invoices=fallback.expected_collections,
            basis=BASIS_AGING_FALLBACK,
            notes=["invoices table missing; used aging forecast"] + fallback.notes,
        )

    detail = [InvoiceLine.from_invoice(inv) for inv in invoices]
    base = total_due(invoices)
    invoice_ids = list(dict.fromkeys(inv.invoice_id for inv in invoices))
    already_paid = await sum_payments_against(gateway, invoice_ids, notes)

    past_due_cure = Decimal("0")
    if include_late:
        snapshot = await load_latest_snapshot(gateway, as_of, notes)
        past_due_cure = snapshot.past_due_cure(curve)

    expected = base + past_due_cure - already_paid
    logger.info(
        "invoice_planner_forecast",
        week_start=week_start.isoformat(),
        invoices=len(detail),
        expected=str(expected),
    )
    return ExpectedInvoicesResult(
        week_start=week_start,
        week_end=week_end,
        expected_from_invoices=expected,
        basis=BASIS_INVOICES,
        detail=detail,
        past_due_cure=past_due_cure,
        already_paid=already_paid,
        notes=notes,
    )
