"""Tests for tool definitions and the tool executor."""

import re

import pytest

from cfo_cashflow.tools import CFO_TOOLS, TOOLS_BY_NAME, ToolExecutor
from cfo_cashflow.validation import DATE_PATTERN
from tests.fakes import FakeDataClient


class TestToolDefinitions:
    def test_all_tools_have_required_fields(self):
        for tool in CFO_TOOLS:
            assert "name" in tool
            assert "description" in tool
            assert "input_schema" in tool
            assert tool["input_schema"]["type"] == "object"
            assert "properties" in tool["input_schema"]

    def test_tool_names_are_unique(self):
        names = [tool["name"] for tool in CFO_TOOLS]
        assert len(names) == len(set(names))
        assert set(TOOLS_BY_NAME) == set(names)

    def test_required_fields_are_declared_properties(self):
        for tool in CFO_TOOLS:
            schema = tool["input_schema"]
            for field in schema.get("required", []):
                assert field in schema["properties"], f"{tool['name']}: {field}"

    def test_date_pattern_matches_validator(self):
        schema = TOOLS_BY_NAME["getIncomingCashThisWeek"]["input_schema"]
        assert schema["properties"]["weekStart"]["pattern"] == DATE_PATTERN.pattern
        assert re.match(schema["properties"]["weekStart"]["pattern"], "2024-01-01")


class TestToolExecutor:
    def test_executor_covers_every_definition(self, make_forecaster):
        executor = ToolExecutor(make_forecaster(FakeDataClient()))

        assert sorted(executor.tool_names) == sorted(TOOLS_BY_NAME)

    @pytest.mark.asyncio
    async def test_dispatches_to_operation(self, make_forecaster, aging_rows):
        client = FakeDataClient({"ar_aging": aging_rows}, missing=("invoices", "payments"))
        executor = ToolExecutor(make_forecaster(client))

        result = await executor.execute(
            "getIncomingCashThisWeek",
            {"weekStart": "2024-01-01", "weekEnd": "2024-01-07", "asOfDate": "2024-01-05"},
        )

        assert result["ok"] is True
        assert result["data"]["expected_collections"] == 1200.0

    @pytest.mark.asyncio
    async def test_payroll_tool(self, make_forecaster):
        client = FakeDataClient(
            {"v_cogs_labor": [{"customer_id": "C1", "amount": 10, "txn_date": "2024-01-02"}]}
        )
        executor = ToolExecutor(make_forecaster(client))

        result = await executor.execute(
            "getPayrollByCustomer", {"startDate": "2024-01-01", "endDate": "2024-01-31"}
        )

        assert result["data"]["totals"]["total"] == 10.0

    @pytest.mark.asyncio
    async def test_unknown_tool(self, make_forecaster):
        executor = ToolExecutor(make_forecaster(FakeDataClient()))

        result = await executor.execute("unknown_tool", {})

        assert result == {
            "ok": False,
            "error": {"code": "unknown_tool", "message": "Unknown tool: unknown_tool"},
        }

    @pytest.mark.asyncio
    async def test_missing_arguments_are_invalid_input(self, make_forecaster):
        executor = ToolExecutor(make_forecaster(FakeDataClient()))

        result = await executor.execute("getExpectedCashFromInvoicing", None)

        assert result["ok"] is False
        assert result["error"]["code"] == "invalid_input"
        fields = {d["field"] for d in result["error"]["details"]}
        assert fields == {"weekStart", "weekEnd"}
