"""Tests for getPayrollByCustomer."""

import pytest

from tests.fakes import FakeDataClient

RANGE = {"startDate": "2024-01-01", "endDate": "2024-01-31"}


def _line(customer_id, amount, name=None, txn_date="2024-01-15", **extra):
    return {
        "customer_id": customer_id,
        "customer_name": name if name is not None else (customer_id and f"Cust {customer_id}"),
        "amount": amount,
        "txn_date": txn_date,
        **extra,
    }


def _salary(customer_id, amount, account_name="Salary Expense", account_type="Expense", **extra):
    return _line(
        customer_id,
        amount,
        account_type=account_type,
        account_name=account_name,
        **extra,
    )


@pytest.fixture
def ledger():
    return FakeDataClient(
        {
            "v_cogs_labor": [_line("C1", 100), _line("C2", 200)],
            "v_cogs_contractors": [_line("C1", 50)],
            "journal_entry_lines": [
                _salary("C1", 30),
                _salary(None, 20),
                _salary("C2", 999, account_name="Rent Expense"),
                _salary("C2", 999, account_type="Asset", account_name="Prepaid Salary"),
            ],
        }
    )


class TestPayrollRollup:
    @pytest.mark.asyncio
    async def test_rolls_up_per_customer(self, make_forecaster, ledger):
        result = await make_forecaster(ledger).get_payroll_by_customer(RANGE)

        assert result["ok"] is True
        data = result["data"]
        assert data["startDate"] == "2024-01-01"
        assert data["endDate"] == "2024-01-31"
        assert data["rows"] == [
            {
                "customer_id": "C1",
                "customer_name": "Cust C1",
                "direct_labor": 100.0,
                "contractors": 50.0,
                "corporate_salaries_allocated": 30.0,
                "total_payroll": 180.0,
            },
            {
                "customer_id": "C2",
                "customer_name": "Cust C2",
                "direct_labor": 200.0,
                "contractors": 0.0,
                "corporate_salaries_allocated": 0.0,
                "total_payroll": 200.0,
            },
        ]

    @pytest.mark.asyncio
    async def test_untagged_salaries_are_unallocated(self, make_forecaster, ledger):
        result = await make_forecaster(ledger).get_payroll_by_customer(RANGE)

        data = result["data"]
        assert data["unallocated_opex"] == {"corporate_salaries": 20.0}
        assert data["totals"] == {
            "direct_labor": 300.0,
            "contractors": 50.0,
            "corporate_salaries_allocated": 30.0,
            "total": 380.0,
        }
        assert data["notes"] == []

    @pytest.mark.asyncio
    async def test_salary_query_filters_expense_salary_lines(self, make_forecaster, ledger):
        await make_forecaster(ledger).get_payroll_by_customer(RANGE)

        salaries = next(q for q in ledger.queries if q.table == "journal_entry_lines")
        assert ("account_type", "eq", "Expense") in salaries.filters
        assert ("account_name", "ilike", "%salary%") in salaries.filters
        assert ("txn_date", "gte", "2024-01-01") in salaries.filters
        assert ("txn_date", "lte", "2024-01-31") in salaries.filters

    @pytest.mark.asyncio
    async def test_exclude_contractors(self, make_forecaster, ledger):
        result = await make_forecaster(ledger).get_payroll_by_customer(
            {**RANGE, "includeContractors": False}
        )

        assert "v_cogs_contractors" not in ledger.queried_tables()
        assert result["data"]["totals"]["contractors"] == 0.0
        assert result["data"]["rows"][0]["total_payroll"] == 130.0

    @pytest.mark.asyncio
    async def test_lines_outside_range_are_ignored(self, make_forecaster):
        client = FakeDataClient(
            {
                "v_cogs_labor": [
                    _line("C1", 100),
                    _line("C1", 500, txn_date="2024-02-01"),
                    _line("C1", 500, txn_date="2023-12-31"),
                ]
            }
        )

        result = await make_forecaster(client).get_payroll_by_customer(RANGE)

        assert result["data"]["totals"]["direct_labor"] == 100.0

    @pytest.mark.asyncio
    async def test_name_only_customers_and_unassigned_labor(self, make_forecaster):
        client = FakeDataClient(
            {
                "v_cogs_labor": [
                    _line(None, 40, name="Walk-in Co"),
                    _line(None, 10, name=""),
                ],
                "journal_entry_lines": [_salary(None, 5, name="Walk-in Co")],
            }
        )

        result = await make_forecaster(client).get_payroll_by_customer(RANGE)

        rows = result["data"]["rows"]
        assert [(r["customer_id"], r["customer_name"]) for r in rows] == [
            (None, "Walk-in Co"),
            (None, None),
        ]
        assert rows[0]["total_payroll"] == 45.0
        assert rows[1]["direct_labor"] == 10.0
        assert result["data"]["unallocated_opex"]["corporate_salaries"] == 0.0


class TestMissingSources:
    @pytest.mark.asyncio
    async def test_every_source_missing(self, make_forecaster):
        client = FakeDataClient(
            missing=("v_cogs_labor", "v_cogs_contractors", "journal_entry_lines")
        )

        result = await make_forecaster(client).get_payroll_by_customer(RANGE)

        data = result["data"]
        assert data["rows"] == []
        assert data["totals"]["total"] == 0.0
        assert data["notes"] == [
            "v_cogs_labor view missing",
            "v_cogs_contractors view missing",
            "journal_entry_lines table missing for salaries",
        ]

    @pytest.mark.asyncio
    async def test_hard_error_aborts(self, make_forecaster, hard_error):
        client = FakeDataClient(errors={"v_cogs_contractors": hard_error})

        result = await make_forecaster(client).get_payroll_by_customer(RANGE)

        assert result["error"]["code"] == "db_error"
        assert "journal_entry_lines" not in client.queried_tables()


class TestRounding:
    @pytest.mark.asyncio
    async def test_totals_sum_unrounded_amounts(self, make_forecaster):
        client = FakeDataClient(
            {
                "v_cogs_labor": [
                    _line("C1", "0.005"),
                    _line("C2", "0.005"),
                    _line("C3", "0.005"),
                ]
            }
        )

        result = await make_forecaster(client).get_payroll_by_customer(RANGE)

        data = result["data"]
        assert [r["direct_labor"] for r in data["rows"]] == [0.01, 0.01, 0.01]
        assert data["totals"]["direct_labor"] == 0.02

    @pytest.mark.asyncio
    async def test_invalid_range_input(self, make_forecaster):
        client = FakeDataClient()

        result = await make_forecaster(client).get_payroll_by_customer(
            {"startDate": "2024-02-30", "endDate": "2024-03-01"}
        )

        assert result["error"]["code"] == "invalid_input"
        assert client.queries == []


class TestDeterminism:
    @pytest.mark.asyncio
    async def test_repeated_calls_are_identical(self, make_forecaster, ledger):
        forecaster = make_forecaster(ledger)

        first = await forecaster.get_payroll_by_customer(RANGE)
        second = await forecaster.get_payroll_by_customer(RANGE)

        assert first["ok"] is True
        assert first == second
        assert [r["customer_id"] for r in second["data"]["rows"]] == ["C1", "C2"]
