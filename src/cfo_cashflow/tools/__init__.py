"""Tool-calling surface for the forecasting operations."""

from cfo_cashflow.tools.definitions import (
    CFO_TOOLS,
    EXPECTED_INVOICES_TOOL,
    INCOMING_CASH_TOOL,
    PAYROLL_BY_CUSTOMER_TOOL,
    TOOLS_BY_NAME,
)
from cfo_cashflow.tools.executor import ToolExecutor

__all__ = [
    # Tool Definitions
    "CFO_TOOLS",
    "TOOLS_BY_NAME",
    "INCOMING_CASH_TOOL",
    "EXPECTED_INVOICES_TOOL",
    "PAYROLL_BY_CUSTOMER_TOOL",
    # Tool Executor
    "ToolExecutor",
]
