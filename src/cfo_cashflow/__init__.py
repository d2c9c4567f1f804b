"""CFO cash forecasting and payroll allocation over Supabase ledger tables."""

__version__ = "0.1.0"

from cfo_cashflow.clients import SupabaseClient, TableMissingError, TableQuery
from cfo_cashflow.config import configure_logging, get_settings
from cfo_cashflow.envelope import ErrorCode
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.service import (
    CashForecaster,
    get_expected_cash_from_invoicing,
    get_incoming_cash_this_week,
    get_payroll_by_customer,
)
from cfo_cashflow.tools import CFO_TOOLS, ToolExecutor

__all__ = [
    # Version
    "__version__",
    # Operations
    "CashForecaster",
    "get_incoming_cash_this_week",
    "get_expected_cash_from_invoicing",
    "get_payroll_by_customer",
    "ErrorCode",
    # Data access
    "QueryGateway",
    "SupabaseClient",
    "TableMissingError",
    "TableQuery",
    # Tools
    "CFO_TOOLS",
    "ToolExecutor",
    # Config
    "get_settings",
    "configure_logging",
]
