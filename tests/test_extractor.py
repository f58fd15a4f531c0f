"""Amount, reference code, entity and purpose extraction."""

from __future__ import annotations

import pytest

from extractor import FieldExtractor


@pytest.fixture
def extractor() -> FieldExtractor:
    return FieldExtractor()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Paid 90k to the fundi", 90000),
        ("Sent 10.5K yesterday", 10500),
        ("Ksh 12,500.50 received", 12500.50),
        ("KES2000 sent to Ann", 2000),
        ("Ksh. 500 for lunch", 500),
        ("usd 40 for hosting", 40),
        ("Paid 1,500 KES to the shop", 1500),
        ("2000/- for transport", 2000),
    ],
)
def test_extract_amount_notations(extractor, text, expected):
    assert extractor.extract_amount(text) == pytest.approx(expected)


def test_shorthand_does_not_fire_inside_codes(extractor):
    assert extractor.extract_amount("Order AB20K9 is ready") is None


def test_shorthand_takes_precedence_by_default(extractor):
    assert extractor.extract_amount("Ksh 2,000 or maybe 5k") == 5000


def test_currency_first_order(extractor):
    text = "Ksh 2,000 or maybe 5k"
    assert extractor.extract_amount(text, order=FieldExtractor.CURRENCY_FIRST) == 2000


def test_zero_and_missing_amounts_are_rejected(extractor):
    assert extractor.extract_amount("Ksh 0 balance") is None
    assert extractor.extract_amount("no money mentioned") is None
    assert extractor.extract_amount("") is None


def test_extract_code(extractor):
    assert extractor.extract_code("QK12ABC345 Confirmed. Ksh 500") == "QK12ABC345"
    assert extractor.extract_code("short ABC123 code") is None
    assert extractor.extract_code("lowercase abcdefghij") is None


def test_entities_with_amount_between_verb_and_direction(extractor):
    text = "Sent Ksh 2,000 to Bob for school fees"
    assert extractor.extract_entities(text, "Alice") == ("Alice", "Bob")


def test_entities_received_from_sets_payer(extractor):
    text = "Received Ksh 500 from Jane   Doe on 12/5/24"
    assert extractor.extract_entities(text, "Me") == ("Jane Doe", "")


def test_entities_stop_before_phone_number(extractor):
    text = "Confirmed. Ksh1,000.00 sent to JOHN DOE 0712345678 on 1/2/24"
    assert extractor.extract_entities(text, "Alice") == ("Alice", "JOHN DOE")


def test_later_anchor_overwrites_payee(extractor):
    text = "sent to Tom, then given to Jerry"
    assert extractor.extract_entities(text, "Alice") == ("Alice", "Jerry")


def test_bill_payment_destination(extractor):
    text = "Confirmed. Ksh1,000.00 paid to KCB BANK for account 1234567 on 1/2/24"
    assert extractor.extract_entities(text, "Alice") == ("Alice", "KCB BANK - Account No: 1234567")


def test_paybill_number_destination_is_cleaned(extractor):
    text = "Ksh 2,500 paid to EQUITY PAYBILL ACCOUNT, 247247 for account number 0116382281"
    assert extractor.extract_entities(text, "Alice") == ("Alice", "EQUITY - Account No: 0116382281")


def test_for_accommodation_is_not_an_account(extractor):
    assert extractor.extract_paybill_destination("sent to John for accommodation") is None


def test_purpose_from_for_clause(extractor):
    assert extractor.extract_purpose("Sent Ksh 2,000 to Bob for school fees") == "school fees"


def test_purpose_for_clause_keeps_decimal_amounts(extractor):
    assert extractor.extract_purpose("Paid for Ksh 1,500.50 worth of cement.") == "Ksh 1,500.50 worth of cement"


def test_purpose_from_next_message(extractor):
    assert extractor.extract_purpose("Sent Ksh 500 to Bob", "cement") == "cement"


def test_purpose_ignores_next_transaction(extractor):
    result = extractor.extract_purpose("Ksh 500 sent to Bob", "Ksh 300 sent to Ann")
    assert result == FieldExtractor.PURPOSE_FALLBACK


def test_purpose_long_note_needs_keywords(extractor):
    long_note = "word " * 40
    assert extractor.extract_purpose("Ksh 500", long_note) == FieldExtractor.PURPOSE_FALLBACK
    assert extractor.extract_purpose("Ksh 500", long_note + "transport").startswith("word")


def test_purpose_fallback_without_next_message(extractor):
    assert extractor.extract_purpose("Ksh 500 sent to Bob") == "General / See Reference"


def test_overflowing_amounts_are_rejected(extractor):
    assert extractor.parse_number("9" * 400) is None
    assert extractor.extract_amount("9" * 400 + "k") is None
    assert extractor.extract_amount("9" * 308 + "k") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Sent Ksh 500 to Dr. Mwangi", ("Alice", "Dr. Mwangi")),
        ("Received Ksh 200 from J. Otieno on 3/4/24", ("J. Otieno", "")),
        ("Paid 300 to Ann. Thanks for the help", ("Alice", "Ann")),
    ],
)
def test_names_keep_titles_and_initials(extractor, text, expected):
    assert extractor.extract_entities(text, "Alice") == expected
