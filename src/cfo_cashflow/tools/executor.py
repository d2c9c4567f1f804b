"""Tool executor that bridges LLM tool calls to the forecasting operations."""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from cfo_cashflow.envelope import ErrorCode, fail
from cfo_cashflow.service import CashForecaster

logger = structlog.get_logger(__name__)


class ToolExecutor:
    """Executes tool calls by name against a ``CashForecaster``."""

    def __init__(self, forecaster: CashForecaster):
        self.forecaster = forecaster
        self._tool_handlers: dict[str, Callable[[Any], Awaitable[dict[str, Any]]]] = {
            "getIncomingCashThisWeek": forecaster.get_incoming_cash_this_week,
            "getExpectedCashFromInvoicing": forecaster.get_expected_cash_from_invoicing,
            "getPayrollByCustomer": forecaster.get_payroll_by_customer,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._tool_handlers)

    async def execute(self, tool_name: str, arguments: Any) -> dict[str, Any]:
        """Execute a tool call and return the operation's envelope."""
        handler = self._tool_handlers.get(tool_name)
        if not handler:
            logger.warning("unknown_tool", tool=tool_name)
            return fail(ErrorCode.UNKNOWN_TOOL, f"Unknown tool: {tool_name}")

        logger.info("executing_tool", tool=tool_name, args=arguments)
        result = await handler(arguments if arguments is not None else {})
        logger.info("tool_executed", tool=tool_name, success=result["ok"])
        return result
