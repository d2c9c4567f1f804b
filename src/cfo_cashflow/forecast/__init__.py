"""Cash collection estimators."""

from cfo_cashflow.forecast.aging import AgingSnapshot, load_latest_snapshot
from cfo_cashflow.forecast.history import (
    ReceiptVelocity,
    estimate_historical_receipts,
    receipt_velocity,
)
from cfo_cashflow.forecast.incoming import IncomingCashResult, forecast_incoming_cash
from cfo_cashflow.forecast.invoices import PayerDue, fetch_open_invoices_due, top_payers
from cfo_cashflow.forecast.planner import (
    ExpectedInvoicesResult,
    InvoiceLine,
    forecast_from_invoicing,
)

__all__ = [
    "AgingSnapshot",
    "load_latest_snapshot",
    "ReceiptVelocity",
    "estimate_historical_receipts",
    "receipt_velocity",
    "IncomingCashResult",
    "forecast_incoming_cash",
    "PayerDue",
    "fetch_open_invoices_due",
    "top_payers",
    "ExpectedInvoicesResult",
    "InvoiceLine",
    "forecast_from_invoicing",
]
