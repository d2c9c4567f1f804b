"""Configuration module for the CFO cash and payroll module."""

from cfo_cashflow.config.logging import configure_logging
from cfo_cashflow.config.settings import (
    AGING_BUCKETS,
    BlendWeights,
    RecoveryCurve,
    Settings,
    get_settings,
)

__all__ = [
    "AGING_BUCKETS",
    "BlendWeights",
    "RecoveryCurve",
    "Settings",
    "get_settings",
    "configure_logging",
]
