"""Blend combiner behind ``getIncomingCashThisWeek``.

Invoices due in the window are the preferred base figure. When the invoices
table is absent (or the caller opts out) the aging recovery forecast stands in.
The base is then blended with trailing receipt velocity when that signal
exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from cfo_cashflow.clients.postgrest import TableMissingError
from cfo_cashflow.config.settings import BlendWeights, RecoveryCurve
from cfo_cashflow.envelope import money, optional_money
from cfo_cashflow.forecast.aging import AgingSnapshot, load_latest_snapshot
from cfo_cashflow.forecast.history import estimate_historical_receipts
from cfo_cashflow.forecast.invoices import (
    PayerDue,
    fetch_open_invoices_due,
    top_payers,
    total_due,
)
from cfo_cashflow.gateway import QueryGateway

logger = structlog.get_logger(__name__)

SEVERE_AGING_THRESHOLD = Decimal("0.35")
CONCENTRATION_THRESHOLD = Decimal("0.35")

FLAG_SEVERE_AGING = "High 60+/90+ share"
FLAG_CONCENTRATION = "Payer concentration > 35%"


@dataclass
class IncomingCashResult:
    week_start: date
    week_end: date
    expected_collections: Decimal
    invoices_due: Decimal | None
    aging_forecast: Decimal
    historical_blend: Decimal | None
    recovery_curve: RecoveryCurve
    blend_weights: BlendWeights
    notes: list[str] = field(default_factory=list)
    top_payers_due: list[PayerDue] = field(default_factory=list)
    risk_flags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": {
                "start": self.week_start.isoformat(),
                "end": self.week_end.isoformat(),
            },
            "expected_collections": money(self.expected_collections),
            "components": {
                "invoices_due": optional_money(self.invoices_due),
                "aging_forecast": money(self.aging_forecast),
                "historical_receipts_blend": optional_money(self.historical_blend),
            },
            "assumptions": {
                "recovery_curve": self.recovery_curve.as_dict(),
                "blend_weights": self.blend_weights.as_dict(),
                "notes": list(self.notes),
            },
            "top_payers_due": [p.to_dict() for p in self.top_payers_due],
            "risk_flags": list(self.risk_flags),
        }


def blend(base: Decimal, historical: Decimal | None, weights: BlendWeights) -> Decimal:
    if historical is None:
        return base
    return (
        base * Decimal(str(weights.invoices_or_aging))
        + historical * Decimal(str(weights.history))
    )


def compute_risk_flags(
    snapshot: AgingSnapshot, payers: list[PayerDue], base: Decimal
) -> list[str]:
    flags: list[str] = []
    share = snapshot.severe_share()
    if share is not None and share > SEVERE_AGING_THRESHOLD:
        flags.append(FLAG_SEVERE_AGING)
    if payers and base > 0 and payers[0].amount / base > CONCENTRATION_THRESHOLD:
        flags.append(FLAG_CONCENTRATION)
    return flags


async def forecast_incoming_cash(
    gateway: QueryGateway,
    week_start: date,
    week_end: date,
    as_of: date,
    use_invoices: bool,
    curve: RecoveryCurve,
    weights: BlendWeights,
) -> IncomingCashResult:
    """Estimate collections for ``[week_start, week_end]``.

    Hard data errors propagate; missing tables only add notes.
    """
    notes: list[str] = []
    invoices_due: Decimal | None = None
    payers: list[PayerDue] = []

    if use_invoices:
        try:
            invoices = await fetch_open_invoices_due(gateway, week_start, week_end)
        except TableMissingError:
            notes.append("invoices table missing; using aging forecast")
        else:
            invoices_due = total_due(invoices)
            payers = top_payers(invoices)

    # Aging is always loaded: it backs the fallback and the risk flags
    snapshot = await load_latest_snapshot(gateway, as_of, notes)
    aging_forecast = snapshot.forecast(curve)

    historical = await estimate_historical_receipts(gateway, week_start, week_end, notes)

    base = invoices_due if invoices_due is not None else aging_forecast
    expected = blend(base, historical, weights)

    result = IncomingCashResult(
        week_start=week_start,
        week_end=week_end,
        expected_collections=expected,
        invoices_due=invoices_due,
        aging_forecast=aging_forecast,
        historical_blend=historical,
        recovery_curve=curve,
        blend_weights=weights,
        notes=notes,
        top_payers_due=payers,
        risk_flags=compute_risk_flags(snapshot, payers, base),
    )
    logger.info(
        "incoming_cash_forecast",
        week_start=week_start.isoformat(),
        expected=str(expected),
        base_source="invoices" if invoices_due is not None else "aging",
        notes=len(notes),
    )
    return result
