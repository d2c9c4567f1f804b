"""Pytest configuration and fixtures."""

import os
from datetime import date
from typing import Any

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test")

from cfo_cashflow.clients.postgrest import PostgrestError  # noqa: E402
from cfo_cashflow.config.settings import Settings, get_settings  # noqa: E402
from cfo_cashflow.gateway import QueryGateway  # noqa: E402
from cfo_cashflow.service import CashForecaster  # noqa: E402
from tests.fakes import FakeDataClient  # noqa: E402

TODAY = date(2024, 1, 5)


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def make_forecaster(settings):
    """Build a CashForecaster around a FakeDataClient with a fixed clock."""

    def _make(client: FakeDataClient, timeout_ms: int = 30_000, **overrides: Any) -> CashForecaster:
        effective = settings.model_copy(update=overrides) if overrides else settings
        return CashForecaster(
            QueryGateway(client, timeout_ms=timeout_ms),
            effective,
            today=lambda: TODAY,
        )

    return _make


@pytest.fixture
def aging_rows():
    """Two snapshots; the later one is the one forecasts should use."""
    return [
        {"bucket": "current", "balance": 9999, "as_of_date": "2023-12-29"},
        {"bucket": "current", "balance": 1000, "as_of_date": "2024-01-05"},
        {"bucket": "30", "balance": 2000, "as_of_date": "2024-01-05"},
    ]


@pytest.fixture
def hard_error():
    return PostgrestError(
        "permission denied for table invoices",
        code="42501",
        status_code=401,
    )
