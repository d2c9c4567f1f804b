#!/usr/bin/env python3
"""Run one CFO forecasting operation and print its result envelope as JSON.

Usage:
    python scripts/run_forecast.py incoming-cash --week-start 2024-01-01 --week-end 2024-01-07
    python scripts/run_forecast.py expected-invoices --week-start 2024-01-01 --week-end 2024-01-07 --no-late
    python scripts/run_forecast.py payroll --start-date 2024-01-01 --end-date 2024-01-31

Reads SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY (and the other CFO_* settings)
from the environment or a .env file.
"""

import argparse
import asyncio
import json
import sys
from typing import Any

from cfo_cashflow.config import configure_logging
from cfo_cashflow.service import (
    get_data_client,
    get_expected_cash_from_invoicing,
    get_incoming_cash_this_week,
    get_payroll_by_customer,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    incoming = sub.add_parser("incoming-cash", help="Blended collections forecast")
    incoming.add_argument("--week-start", required=True)
    incoming.add_argument("--week-end", required=True)
    incoming.add_argument("--as-of-date")
    incoming.add_argument(
        "--no-invoices",
        action="store_true",
        help="Ignore open invoices and use the aging forecast as the base",
    )

    expected = sub.add_parser("expected-invoices", help="Invoice-driven projection")
    expected.add_argument("--week-start", required=True)
    expected.add_argument("--week-end", required=True)
    expected.add_argument("--as-of-date")
    expected.add_argument(
        "--no-late", action="store_true", help="Skip the past-due cure adjustment"
    )

    payroll = sub.add_parser("payroll", help="Payroll cost by customer")
    payroll.add_argument("--start-date", required=True)
    payroll.add_argument("--end-date", required=True)
    payroll.add_argument("--no-contractors", action="store_true")

    return parser


async def run(args: argparse.Namespace) -> dict[str, Any]:
    try:
        if args.command == "incoming-cash":
            payload: dict[str, Any] = {
                "weekStart": args.week_start,
                "weekEnd": args.week_end,
                "useInvoices": not args.no_invoices,
            }
            if args.as_of_date:
                payload["asOfDate"] = args.as_of_date
            return await get_incoming_cash_this_week(payload)

        if args.command == "expected-invoices":
            payload = {
                "weekStart": args.week_start,
                "weekEnd": args.week_end,
                "includeLate": not args.no_late,
            }
            if args.as_of_date:
                payload["asOfDate"] = args.as_of_date
            return await get_expected_cash_from_invoicing(payload)

        return await get_payroll_by_customer(
            {
                "startDate": args.start_date,
                "endDate": args.end_date,
                "includeContractors": not args.no_contractors,
            }
        )
    finally:
        if get_data_client.cache_info().currsize:
            await get_data_client().close()


def main() -> int:
    args = build_parser().parse_args()
    configure_logging(level=args.log_level)
    result = asyncio.run(run(args))
    print(json.dumps(result, indent=2))
    return 0 if result["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
