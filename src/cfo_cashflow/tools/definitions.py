"""Tool definitions for LLM function calling with the CFO forecasting operations.

Each tool maps one-to-one onto a public operation in ``cfo_cashflow.service``
and uses the operation's camelCase argument names.
"""

from typing import Any

_DATE: dict[str, Any] = {"type": "string", "pattern": "^[0-9]{4}-[0-9]{2}-[0-9]{2}$"}

INCOMING_CASH_TOOL: dict[str, Any] = {
    "name": "getIncomingCashThisWeek",
    "description": (
        "Forecast cash collections for a week. Blends open invoices due in the "
        "window (or the AR aging recovery forecast when invoices are unavailable) "
        "with trailing 8-week receipt velocity, and reports payer concentration "
        "and aging risk flags."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "weekStart": {**_DATE, "description": "First day of the window (YYYY-MM-DD)"},
            "weekEnd": {**_DATE, "description": "Last day of the window (YYYY-MM-DD)"},
            "asOfDate": {
                **_DATE,
                "description": "Use the latest AR aging snapshot on or before this date; defaults to today",
            },
            "useInvoices": {
                "type": "boolean",
                "description": "Use open invoices as the base figure when available",
                "default": True,
            },
        },
        "required": ["weekStart", "weekEnd"],
    },
}

EXPECTED_INVOICES_TOOL: dict[str, Any] = {
    "name": "getExpectedCashFromInvoicing",
    "description": (
        "Project cash from open invoices due in a window, net of payments already "
        "received against them, optionally adding the expected cure of past-due AR."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "weekStart": {**_DATE, "description": "First day of the window (YYYY-MM-DD)"},
            "weekEnd": {**_DATE, "description": "Last day of the window (YYYY-MM-DD)"},
            "includeLate": {
                "type": "boolean",
                "description": "Add expected collections on 30/60/90-day past-due balances",
                "default": True,
            },
            "asOfDate": {
                **_DATE,
                "description": "AR aging snapshot date bound for the past-due cure; defaults to today",
            },
        },
        "required": ["weekStart", "weekEnd"],
    },
}

PAYROLL_BY_CUSTOMER_TOOL: dict[str, Any] = {
    "name": "getPayrollByCustomer",
    "description": (
        "Summarize payroll cost by customer for a date range: direct labor, "
        "contractors and allocated salaries, plus salaries that could not be "
        "attributed to any customer."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "startDate": {**_DATE, "description": "First day of the range (YYYY-MM-DD)"},
            "endDate": {**_DATE, "description": "Last day of the range (YYYY-MM-DD)"},
            "includeContractors": {
                "type": "boolean",
                "description": "Include contractor cost",
                "default": True,
            },
        },
        "required": ["startDate", "endDate"],
    },
}

CFO_TOOLS: list[dict[str, Any]] = [
    INCOMING_CASH_TOOL,
    EXPECTED_INVOICES_TOOL,
    PAYROLL_BY_CUSTOMER_TOOL,
]

TOOLS_BY_NAME: dict[str, dict[str, Any]] = {tool["name"]: tool for tool in CFO_TOOLS}
