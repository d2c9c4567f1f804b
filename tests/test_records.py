"""Tests for row parsing at the data-access boundary."""

from datetime import date
from decimal import Decimal

import pytest

from cfo_cashflow.records import (
    AgingRow,
    InvoiceRow,
    MalformedRowError,
    PaymentRow,
    PayrollComponentRow,
)


def test_numeric_strings_and_floats_parse_exactly():
    assert PaymentRow.from_row({"amount": "1234.56"}).amount == Decimal("1234.56")
    assert PaymentRow.from_row({"amount": 0.1}).amount == Decimal("0.1")


@pytest.mark.parametrize("amount", [None, True, "abc", "NaN", "Infinity"])
def test_bad_amounts_are_malformed(amount):
    with pytest.raises(MalformedRowError):
        PaymentRow.from_row({"amount": amount})


def test_missing_amount_key_is_malformed():
    with pytest.raises(MalformedRowError, match="amount is missing"):
        PayrollComponentRow.from_row({"customer_id": "C1"}, "v_cogs_labor")


def test_invoice_requires_id_and_due_date():
    with pytest.raises(MalformedRowError, match="invoice_id"):
        InvoiceRow.from_row({"due_date": "2024-01-03", "amount": 1})
    with pytest.raises(MalformedRowError, match="due_date"):
        InvoiceRow.from_row({"invoice_id": "1", "amount": 1})


def test_invoice_parses_optional_customer_fields():
    invoice = InvoiceRow.from_row(
        {
            "invoice_id": 42,
            "customer_id": "",
            "customer_name": "Acme",
            "due_date": "2024-01-03",
            "amount": "100",
            "status": "open",
        }
    )

    assert invoice.invoice_id == "42"
    assert invoice.customer_id is None
    assert invoice.customer_name == "Acme"
    assert invoice.due_date == date(2024, 1, 3)


def test_timestamps_keep_calendar_date():
    payment = PaymentRow.from_row({"amount": 1, "payment_date": "2024-01-02T23:15:00+00:00"})

    assert payment.payment_date == date(2024, 1, 2)


def test_bad_date_is_malformed():
    with pytest.raises(MalformedRowError, match="not a date"):
        AgingRow.from_row({"bucket": "30", "balance": 1, "as_of_date": "yesterday"})


def test_aging_bucket_numbers_become_labels():
    row = AgingRow.from_row({"bucket": 30, "balance": "10", "as_of_date": "2024-01-05"})

    assert row.bucket == "30"


def test_customer_key_prefers_id_then_name():
    assert PayrollComponentRow.from_row(
        {"customer_id": "C1", "customer_name": "Cust", "amount": 1}
    ).customer_key == "C1"
    assert PayrollComponentRow.from_row(
        {"customer_id": None, "customer_name": "Cust", "amount": 1}
    ).customer_key == "Cust"
    assert PayrollComponentRow.from_row({"amount": 1}).customer_key is None
