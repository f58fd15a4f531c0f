"""Statement-line extraction from raw PDF bytes."""

from __future__ import annotations

import pytest

from pdf_parser import PdfParser

STATEMENT = (
    b"%PDF-1.4\n"
    b"\x00\x01binary\xff\n"
    b"15/01/2024 Payment to Supplier REF1234567 1,500.00\n"
    b"16/01/2024 Opening\r\n"
    b"17-01-2024 Salary 45,000.00 balance 120,000.00\n"
    b"18/01/2024 Fee 0.00\n"
)


@pytest.fixture
def parser() -> PdfParser:
    return PdfParser()


def test_statement_lines(parser):
    first, second = [record.to_dict() for record in parser.parse(STATEMENT)]

    assert first == {
        "Date": "2024-01-15",
        "Amount": 1500.0,
        "Type": "Bank Statement",
        "Reference": "REF1234567",
        "Paid By": "Bank",
        "Paid To": "",
        "Purpose": "Payment to Supplier REF1234567",
    }
    # The trailing figure wins, even when it is a running balance
    assert second["Amount"] == 120000.0
    assert second["Date"] == "2024-01-17"
    assert second["Reference"] == "PDF"
    assert second["Purpose"] == "Salary 45,000.00 balance"


def test_date_digits_are_not_amounts(parser):
    assert parser.parse(b"16/01/2024 Opening\n") == []


def test_no_dates_no_records(parser):
    assert parser.parse(b"Total 1,500.00\n") == []
    assert parser.parse(b"") == []
