"""Historical velocity estimator: trailing receipts projected onto the target week."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

import structlog

from cfo_cashflow.clients.postgrest import TableMissingError
from cfo_cashflow.dates import business_days_between
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.records import PaymentRow

logger = structlog.get_logger(__name__)

PAYMENTS_TABLE = "payments"
LOOKBACK_DAYS = 56


@dataclass(frozen=True)
class ReceiptVelocity:
    """Average daily collections over the lookback and its projection."""

    lookback_start: date
    lookback_end: date
    total_received: Decimal
    lookback_business_days: int
    target_business_days: int

    @property
    def avg_daily(self) -> Decimal:
        if not self.lookback_business_days:
            return Decimal("0")
        return self.total_received / self.lookback_business_days

    @property
    def projected(self) -> Decimal:
        return self.avg_daily * self.target_business_days


def receipt_velocity(
    payments: list[PaymentRow], week_start: date, week_end: date
) -> ReceiptVelocity:
    """Compute velocity from payments dated in ``[week_start - 56d, week_start)``."""
    lookback_start = week_start - timedelta(days=LOOKBACK_DAYS)
    lookback_end = week_start - timedelta(days=1)
    total = sum(
        (
            p.amount
            for p in payments
            if p.payment_date is not None
            and lookback_start <= p.payment_date <= lookback_end
        ),
        Decimal("0"),
    )
    return ReceiptVelocity(
        lookback_start=lookback_start,
        lookback_end=lookback_end,
        total_received=total,
        lookback_business_days=business_days_between(lookback_start, lookback_end),
        target_business_days=business_days_between(week_start, week_end),
    )


async def estimate_historical_receipts(
    gateway: QueryGateway, week_start: date, week_end: date, notes: list[str]
) -> Decimal | None:
    """Project trailing collection velocity onto ``[week_start, week_end]``.

    Returns None (no signal) rather than zero when the payments table is
    missing.
    """
    lookback_start = week_start - timedelta(days=LOOKBACK_DAYS)
    try:
        payments = await gateway.fetch(
            gateway.table(PAYMENTS_TABLE)
            .select("payment_date,amount")
            .gte("payment_date", lookback_start.isoformat())
            .lt("payment_date", week_start.isoformat()),
            PaymentRow.from_row,
        )
    except TableMissingError:
        notes.append("payments table missing; historical blend skipped")
        return None

    velocity = receipt_velocity(payments, week_start, week_end)
    logger.debug(
        "receipt_velocity",
        total=str(velocity.total_received),
        business_days=velocity.lookback_business_days,
        target_days=velocity.target_business_days,
    )
    return velocity.projected
