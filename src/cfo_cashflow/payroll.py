"""Payroll allocator behind ``getPayrollByCustomer``.

Three ledgers feed one per-customer rollup:

- ``v_cogs_labor``: direct labor cost tagged to customers
- ``v_cogs_contractors``: contractor cost tagged to customers
- ``journal_entry_lines``: salary expense lines; lines without any customer
  tag are reported as unallocated overhead instead of a customer row

Any of the three sources may be missing, in which case its column is zero and
a note says so.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

import structlog

from cfo_cashflow.clients.postgrest import TableMissingError, TableQuery
from cfo_cashflow.envelope import money
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.records import PayrollComponentRow

logger = structlog.get_logger(__name__)

LABOR_TABLE = "v_cogs_labor"
CONTRACTORS_TABLE = "v_cogs_contractors"
SALARIES_TABLE = "journal_entry_lines"
COMPONENT_COLUMNS = "customer_id,customer_name,amount,txn_date"
UNASSIGNED_KEY = "unassigned"


@dataclass
class CustomerPayroll:
    customer_id: str | None
    customer_name: str | None
    direct_labor: Decimal = Decimal("0")
    contractors: Decimal = Decimal("0")
    corporate_salaries_allocated: Decimal = Decimal("0")

    @property
    def total_payroll(self) -> Decimal:
        return self.direct_labor + self.contractors + self.corporate_salaries_allocated

    def to_dict(self) -> dict[str, Any]:
        return {
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "direct_labor": money(self.direct_labor),
            "contractors": money(self.contractors),
            "corporate_salaries_allocated": money(self.corporate_salaries_allocated),
            "total_payroll": money(self.total_payroll),
        }


@dataclass
class PayrollByCustomerResult:
    start_date: date
    end_date: date
    rows: list[CustomerPayroll] = field(default_factory=list)
    unallocated_salaries: Decimal = Decimal("0")
    notes: list[str] = field(default_factory=list)

    def column_total(self, column: str) -> Decimal:
        return sum((getattr(row, column) for row in self.rows), Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        direct_labor = self.column_total("direct_labor")
        contractors = self.column_total("contractors")
        salaries = self.column_total("corporate_salaries_allocated")
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "rows": [row.to_dict() for row in self.rows],
            "totals": {
                "direct_labor": money(direct_labor),
                "contractors": money(contractors),
                "corporate_salaries_allocated": money(salaries),
                "total": money(direct_labor + contractors + salaries),
            },
            "unallocated_opex": {"corporate_salaries": money(self.unallocated_salaries)},
            "notes": list(self.notes),
        }


class PayrollRollup:
    """Accumulates component lines into customer rows, in first-seen order."""

    def __init__(self) -> None:
        self._rows: dict[str, CustomerPayroll] = {}
        self.unallocated_salaries = Decimal("0")

    def _row_for(self, key: str, line: PayrollComponentRow) -> CustomerPayroll:
        row = self._rows.get(key)
        if row is None:
            row = CustomerPayroll(customer_id=line.customer_id, customer_name=line.customer_name)
            self._rows[key] = row
        return row

    def add_labor(self, lines: list[PayrollComponentRow]) -> None:
        for line in lines:
            self._row_for(line.customer_key or UNASSIGNED_KEY, line).direct_labor += line.amount

    def add_contractors(self, lines: list[PayrollComponentRow]) -> None:
        for line in lines:
            self._row_for(line.customer_key or UNASSIGNED_KEY, line).contractors += line.amount

    def add_salaries(self, lines: list[PayrollComponentRow]) -> None:
        for line in lines:
            key = line.customer_key
            if key is None:
                self.unallocated_salaries += line.amount
                continue
            self._row_for(key, line).corporate_salaries_allocated += line.amount

    @property
    def rows(self) -> list[CustomerPayroll]:
        return list(self._rows.values())


async def _fetch_component(
    gateway: QueryGateway, query: TableQuery, notes: list[str], missing_note: str
) -> list[PayrollComponentRow]:
    try:
        return await gateway.fetch(query, PayrollComponentRow.from_row)
    except TableMissingError:
        notes.append(missing_note)
        return []


def _component_query(
    gateway: QueryGateway, table: str, start: date, end: date
) -> TableQuery:
    return (
        gateway.table(table)
        .select(COMPONENT_COLUMNS)
        .gte("txn_date", start.isoformat())
        .lte("txn_date", end.isoformat())
    )


async def payroll_by_customer(
    gateway: QueryGateway, start: date, end: date, include_contractors: bool
) -> PayrollByCustomerResult:
    """Roll labor, contractor and salary cost up to customers for ``[start, end]``."""
    notes: list[str] = []
    rollup = PayrollRollup()

    rollup.add_labor(
        await _fetch_component(
            gateway,
            _component_query(gateway, LABOR_TABLE, start, end),
            notes,
            "v_cogs_labor view missing",
        )
    )

    if include_contractors:
        rollup.add_contractors(
            await _fetch_component(
                gateway,
                _component_query(gateway, CONTRACTORS_TABLE, start, end),
                notes,
                "v_cogs_contractors view missing",
            )
        )

    rollup.add_salaries(
        await _fetch_component(
            gateway,
            _component_query(gateway, SALARIES_TABLE, start, end)
            .eq("account_type", "Expense")
            .ilike("account_name", "%salary%"),
            notes,
            "journal_entry_lines table missing for salaries",
        )
    )

    result = PayrollByCustomerResult(
        start_date=start,
        end_date=end,
        rows=rollup.rows,
        unallocated_salaries=rollup.unallocated_salaries,
        notes=notes,
    )
    logger.info(
        "payroll_by_customer",
        start=start.isoformat(),
        end=end.isoformat(),
        customers=len(result.rows),
        unallocated=str(result.unallocated_salaries),
    )
    return result
