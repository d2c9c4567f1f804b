"""Aging recovery estimator: AR aging snapshot to probability-weighted cash."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import structlog

from cfo_cashflow.clients.postgrest import TableMissingError
from cfo_cashflow.config.settings import AGING_BUCKETS, RecoveryCurve
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.records import AgingRow

logger = structlog.get_logger(__name__)

AGING_TABLE = "ar_aging"
AGING_COLUMNS = "bucket,balance,as_of_date"
PAST_DUE_BUCKETS = ("30", "60", "90")


def _empty_totals() -> dict[str, Decimal]:
    return {bucket: Decimal("0") for bucket in AGING_BUCKETS}


@dataclass
class AgingSnapshot:
    """Bucket totals from the latest snapshot on or before the as-of date."""

    as_of_date: date | None = None
    totals: dict[str, Decimal] = field(default_factory=_empty_totals)

    @classmethod
    def from_rows(cls, rows: list[AgingRow]) -> AgingSnapshot:
        """Sum balances per bucket for the single latest ``as_of_date`` in ``rows``."""
        snapshot = cls()
        if not rows:
            return snapshot
        latest = max(row.as_of_date for row in rows)
        snapshot.as_of_date = latest
        for row in rows:
            if row.as_of_date != latest:
                continue
            bucket = row.bucket.strip().rstrip("+").lower()
            if bucket not in snapshot.totals:
                logger.debug("unknown_aging_bucket", bucket=row.bucket)
                continue
            snapshot.totals[bucket] += row.balance
        return snapshot

    @property
    def is_empty(self) -> bool:
        return self.as_of_date is None

    @property
    def total_ar(self) -> Decimal:
        return sum(self.totals.values(), Decimal("0"))

    def forecast(self, curve: RecoveryCurve) -> Decimal:
        """Recovery-weighted sum across all four buckets."""
        return sum(
            (self.totals[b] * curve.weight(b) for b in AGING_BUCKETS), Decimal("0")
        )

    def past_due_cure(self, curve: RecoveryCurve) -> Decimal:
        """Recovery-weighted sum across the overdue buckets only."""
        return sum(
            (self.totals[b] * curve.weight(b) for b in PAST_DUE_BUCKETS), Decimal("0")
        )

    def severe_share(self) -> Decimal | None:
        """Share of AR sitting in the 60 and 90 buckets.

        None unless total AR is positive; a net-credit book has no meaningful share.
        """
        total = self.total_ar
        if total <= 0:
            return None
        return (self.totals["60"] + self.totals["90"]) / total


async def load_latest_snapshot(
    gateway: QueryGateway, as_of: date, notes: list[str]
) -> AgingSnapshot:
    """Fetch the most recent aging snapshot dated on or before ``as_of``.

    A missing ``ar_aging`` table or an empty one yields an empty snapshot and a
    note; neither is an error.
    """
    try:
        latest = await gateway.fetch(
            gateway.table(AGING_TABLE)
            .select(AGING_COLUMNS)
            .lte("as_of_date", as_of.isoformat())
            .order("as_of_date", ascending=False)
            .limit(1),
            AgingRow.from_row,
        )
        if not latest:
            notes.append("no AR aging snapshot found")
            return AgingSnapshot()

        rows = await gateway.fetch(
            gateway.table(AGING_TABLE)
            .select(AGING_COLUMNS)
            .eq("as_of_date", latest[0].as_of_date.isoformat()),
            AgingRow.from_row,
        )
    except TableMissingError:
        notes.append("ar_aging table missing; aging forecast set to 0")
        return AgingSnapshot()

    snapshot = AgingSnapshot.from_rows(rows)
    logger.debug(
        "aging_snapshot_loaded",
        as_of_date=str(snapshot.as_of_date),
        total_ar=str(snapshot.total_ar),
    )
    return snapshot
