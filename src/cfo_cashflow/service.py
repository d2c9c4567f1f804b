"""Public entry points for cash forecasting and payroll allocation.

Every operation takes a JSON-shaped mapping and resolves to the result
envelope; no exception escapes. ``CashForecaster`` takes its gateway
explicitly. The module-level functions build one on demand around a
process-wide Supabase client.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date
from functools import lru_cache
from typing import Any, TypeVar

import structlog

from cfo_cashflow.clients.postgrest import PostgrestError, SupabaseClient
from cfo_cashflow.config import Settings, get_settings
from cfo_cashflow.dates import today_in
from cfo_cashflow.envelope import ErrorCode, fail, ok
from cfo_cashflow.forecast.incoming import forecast_incoming_cash
from cfo_cashflow.forecast.planner import forecast_from_invoicing
from cfo_cashflow.gateway import QueryGateway
from cfo_cashflow.payroll import payroll_by_customer
from cfo_cashflow.records import MalformedRowError
from cfo_cashflow.validation import (
    ExpectedInvoicesArgs,
    IncomingCashArgs,
    InvalidInputError,
    OperationArgs,
    PayrollByCustomerArgs,
    parse_args,
)

logger = structlog.get_logger(__name__)

ArgsT = TypeVar("ArgsT", bound=OperationArgs)
Envelope = dict[str, Any]


class CashForecaster:
    """Runs the three operations against one gateway and one set of assumptions."""

    def __init__(
        self,
        gateway: QueryGateway,
        settings: Settings | None = None,
        today: Callable[[], date] | None = None,
    ):
        settings = settings or get_settings()
        self.gateway = gateway
        self.recovery_curve = settings.recovery_curve
        self.blend_weights = settings.blend_weights
        self._timezone = settings.timezone
        self._today = today or self._local_today

    def _local_today(self) -> date:
        return today_in(self._timezone)

    async def _run(
        self,
        operation: str,
        model: type[ArgsT],
        raw: Any,
        handler: Callable[[ArgsT], Awaitable[dict[str, Any]]],
    ) -> Envelope:
        log = logger.bind(operation=operation)
        try:
            params = parse_args(model, raw)
        except InvalidInputError as e:
            log.info("invalid_input", error=e.message)
            return fail(ErrorCode.INVALID_INPUT, e.message, e.details)

        try:
            return ok(await handler(params))
        except PostgrestError as e:
            log.warning("db_error", error=e.message, code=e.code, status=e.status_code)
            return fail(ErrorCode.DB_ERROR, e.message, e.to_details())
        except MalformedRowError as e:
            log.warning("malformed_row", table=e.table, error=str(e))
            return fail(ErrorCode.MALFORMED_ROW, str(e), {"table": e.table, "row": e.row})
        except Exception as e:
            log.exception("operation_failed")
            return fail(ErrorCode.INTERNAL_ERROR, str(e) or type(e).__name__)

    # === Operations ===

    async def get_incoming_cash_this_week(self, args: Any) -> Envelope:
        """Forecast collections for a week from invoices, aging and history."""
        return await self._run(
            "getIncomingCashThisWeek", IncomingCashArgs, args, self._incoming_cash
        )

    async def get_expected_cash_from_invoicing(self, args: Any) -> Envelope:
        """Project collections from invoices due, plus past-due cure, less payments."""
        return await self._run(
            "getExpectedCashFromInvoicing",
            ExpectedInvoicesArgs,
            args,
            self._expected_from_invoicing,
        )

    async def get_payroll_by_customer(self, args: Any) -> Envelope:
        """Roll payroll cost up to customers for a date range."""
        return await self._run(
            "getPayrollByCustomer", PayrollByCustomerArgs, args, self._payroll
        )

    # === Handlers ===

    async def _incoming_cash(self, params: IncomingCashArgs) -> dict[str, Any]:
        result = await forecast_incoming_cash(
            self.gateway,
            params.week_start,
            params.week_end,
            params.as_of_date or self._today(),
            params.use_invoices,
            self.recovery_curve,
            self.blend_weights,
        )
        return result.to_dict()

    async def _expected_from_invoicing(self, params: ExpectedInvoicesArgs) -> dict[str, Any]:
        result = await forecast_from_invoicing(
            self.gateway,
            params.week_start,
            params.week_end,
            params.as_of_date or self._today(),
            params.include_late,
            self.recovery_curve,
            self.blend_weights,
        )
        return result.to_dict()

    async def _payroll(self, params: PayrollByCustomerArgs) -> dict[str, Any]:
        result = await payroll_by_customer(
            self.gateway,
            params.start_date,
            params.end_date,
            params.include_contractors,
        )
        return result.to_dict()


@lru_cache
def get_data_client() -> SupabaseClient:
    """Process-wide Supabase client, created on first use."""
    return SupabaseClient()


def default_forecaster() -> CashForecaster:
    settings = get_settings()
    gateway = QueryGateway(get_data_client(), timeout_ms=settings.supabase_timeout_ms)
    return CashForecaster(gateway, settings)


async def _with_default(
    call: Callable[[CashForecaster], Awaitable[Envelope]],
) -> Envelope:
    try:
        forecaster = default_forecaster()
    except Exception as e:
        logger.exception("forecaster_setup_failed")
        return fail(ErrorCode.INTERNAL_ERROR, f"configuration error: {e}")
    return await call(forecaster)


async def get_incoming_cash_this_week(args: Any) -> Envelope:
    return await _with_default(lambda f: f.get_incoming_cash_this_week(args))


async def get_expected_cash_from_invoicing(args: Any) -> Envelope:
    return await _with_default(lambda f: f.get_expected_cash_from_invoicing(args))


async def get_payroll_by_customer(args: Any) -> Envelope:
    return await _with_default(lambda f: f.get_payroll_by_customer(args))
