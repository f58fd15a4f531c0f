"""Custom template driven extraction."""

from __future__ import annotations

import pytest

from schema import CustomTemplate
from template_parser import TemplateParser

TEXT = "\n".join([
    "Date 15-01-2024",
    "To: John Doe",
    "Amount: 2,500",
    "Ref: ABC123",
    "some noise",
    "16-01-2024 Amount: 300 To: Mary",
])


def _template(**patterns) -> CustomTemplate:
    return CustomTemplate(name="Test", **patterns)


@pytest.fixture
def template() -> CustomTemplate:
    return _template(
        datePattern=r"\d{2}-\d{2}-\d{4}",
        amountPattern=r"Amount:\s*([0-9,]+(?:\.\d+)?)",
        referencePattern=r"Ref:\s*([A-Z0-9]+)",
        paidToPattern=r"To:\s*([A-Za-z ]+)",
    )


def test_fields_accumulate_across_lines(template, fixed_clock):
    first, second = [record.to_dict() for record in TemplateParser(template, clock=fixed_clock).parse(TEXT)]

    assert first == {
        "Date": "15-01-2024",
        "Amount": 2500.0,
        "Type": "Custom",
        "Reference": "Test",
        "Paid By": "",
        "Paid To": "John Doe",
        "Purpose": "Amount: 2,500",
    }
    assert second["Date"] == "16-01-2024"
    assert second["Amount"] == 300.0
    assert second["Reference"] == "ABC123"
    assert second["Paid To"] == "Mary"
    assert second["Purpose"] == "16-01-2024 Amount: 300 To: Mary"


def test_without_amount_pattern_nothing_is_emitted(fixed_clock):
    template = _template(datePattern=r"\d{2}-\d{2}-\d{4}", referencePattern=r"Ref:\s*(\w+)")
    assert TemplateParser(template, clock=fixed_clock).parse(TEXT) == []


def test_malformed_pattern_disables_only_that_field(template, fixed_clock, caplog):
    broken = template.model_copy(update={"reference_pattern": "([A-Z"})
    records = TemplateParser(broken, clock=fixed_clock).parse(TEXT)

    assert "Reference pattern error" in caplog.text
    assert [record.reference for record in records] == ["Test", "Test"]


def test_reference_without_date_uses_clock(fixed_clock):
    template = _template(amountPattern=r"Amount:\s*(\d+)", referencePattern=r"Ref:\s*(\w+)")
    [record] = TemplateParser(template, clock=fixed_clock).parse("Ref: X1 Amount: 50")

    assert record.date == "2024-03-01 12:00"
    assert record.reference == "X1"
    assert record.amount == 50.0


def test_pattern_without_group_uses_whole_match(fixed_clock):
    template = _template(amountPattern=r"\d+\.\d{2}", datePattern=r"\d{4}-\d{2}-\d{2}")
    [record] = TemplateParser(template, clock=fixed_clock).parse("2024-02-02 paid 75.50")
    assert record.amount == 75.5


def test_zero_amount_is_ignored(template, fixed_clock):
    assert TemplateParser(template, clock=fixed_clock).parse("15-01-2024 Amount: 0") == []


def test_overflowing_amount_is_ignored(template, fixed_clock):
    text = "15-01-2024 Amount: " + "9" * 400
    assert TemplateParser(template, clock=fixed_clock).parse(text) == []
