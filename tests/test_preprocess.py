"""Text cleanup and date normalization."""

from __future__ import annotations

from datetime import datetime

import pytest

from preprocess import EPOCH, DataPreprocessor


@pytest.fixture
def preprocessor() -> DataPreprocessor:
    return DataPreprocessor()


def test_clean_message_strips_formatting_and_whitespace(preprocessor):
    assert preprocessor.clean_message("Hello\u200b  world\n\tok") == "Hello world ok"
    assert preprocessor.clean_message("") == ""


@pytest.mark.parametrize(
    "date_str, time_str, expected",
    [
        ("12/5/2024", "10:30", "2024-05-12 10:30"),
        ("1/2/24", "1:22 in the afternoon", "2024-02-01 13:22"),
        ("3/4/2024", "9:05 pm", "2024-04-03 21:05"),
        ("15/5/2024", "9:15 in the morning", "2024-05-15 09:15"),
    ],
)
def test_format_chat_datetime(preprocessor, date_str, time_str, expected):
    assert preprocessor.format_chat_datetime(date_str, time_str) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15/01/2024", "2024-01-15"),
        ("2024-03-05", "2024-03-05"),
        ("Mon, 15 Jan 2024 10:30:00 +0300", "2024-01-15 10:30"),
    ],
)
def test_normalize_date(preprocessor, raw, expected):
    assert preprocessor.normalize_date(raw) == expected


def test_normalize_date_rejects_garbage(preprocessor):
    assert preprocessor.normalize_date("???") is None
    assert preprocessor.normalize_date("   ") is None


def test_sort_key(preprocessor):
    assert preprocessor.sort_key("2024-05-12 10:30") == datetime(2024, 5, 12, 10, 30)
    assert preprocessor.sort_key("12/05/2024") == datetime(2024, 5, 12)
    assert preprocessor.sort_key("Mon, 15 Jan 2024 10:30:00 +0300") == datetime(2024, 1, 15, 7, 30)


@pytest.mark.parametrize("value", ["", None, "unknown"])
def test_sort_key_falls_back_to_epoch(preprocessor, value):
    assert preprocessor.sort_key(value) == EPOCH


def test_printable_ascii_keeps_line_breaks(preprocessor):
    assert preprocessor.printable_ascii(b"A\x00B\nC\xff\r") == "AB\nC\r"


def test_decode_text_handles_bom_and_invalid_bytes(preprocessor):
    assert preprocessor.decode_text(b"\xef\xbb\xbfKsh 100") == "Ksh 100"
    assert preprocessor.decode_text(b"Ksh \xff100") == "Ksh \ufffd100"
