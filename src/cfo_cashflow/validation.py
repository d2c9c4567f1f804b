"""Argument validation for the public operations.

Arguments arrive as JSON-shaped mappings with camelCase keys. They are checked
here, before any data source is touched.
"""

import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictBool, ValidationError

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


class InvalidInputError(Exception):
    """Arguments failed validation."""

    def __init__(self, message: str, details: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


def _calendar_date(value: Any) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("expected a date formatted YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{value} is not a valid calendar date") from None


CalendarDate = Annotated[date, BeforeValidator(_calendar_date)]
# May be omitted, but an explicit null is rejected like any other non-date
OmittableDate = Annotated[date | None, BeforeValidator(_calendar_date)]


class OperationArgs(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class IncomingCashArgs(OperationArgs):
    week_start: CalendarDate = Field(alias="weekStart")
    week_end: CalendarDate = Field(alias="weekEnd")
    as_of_date: OmittableDate = Field(default=None, alias="asOfDate")
    use_invoices: StrictBool = Field(default=True, alias="useInvoices")


class ExpectedInvoicesArgs(OperationArgs):
    week_start: CalendarDate = Field(alias="weekStart")
    week_end: CalendarDate = Field(alias="weekEnd")
    include_late: StrictBool = Field(default=True, alias="includeLate")
    as_of_date: OmittableDate = Field(default=None, alias="asOfDate")


class PayrollByCustomerArgs(OperationArgs):
    start_date: CalendarDate = Field(alias="startDate")
    end_date: CalendarDate = Field(alias="endDate")
    include_contractors: StrictBool = Field(default=True, alias="includeContractors")


ArgsT = TypeVar("ArgsT", bound=OperationArgs)


def parse_args(model: type[ArgsT], raw: Any) -> ArgsT:
    """Validate ``raw`` against ``model`` or raise ``InvalidInputError``."""
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            "arguments must be an object",
            [{"field": "", "message": f"got {type(raw).__name__}"}],
        )
    try:
        return model.model_validate(dict(raw))
    except ValidationError as e:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        message = "; ".join(f"{d['field']}: {d['message']}" for d in details)
        raise InvalidInputError(message, details) from None
