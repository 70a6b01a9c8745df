from datetime import date, datetime, timezone

import pytest

from services.expense_validation import (
    AMOUNT_ERROR,
    DATE_ERROR,
    TITLE_ERROR,
    ValidationErrors,
    ValidationMode,
    ValidationOk,
    validate_expense,
)

VALID = {"title": "Coffee", "amount": 4.5, "date": "2024-01-01"}


def test_full_valid_input_is_normalized():
    result = validate_expense({"title": "  Coffee  ", "amount": "4.5", "date": "2024-01-01", "category": " Food "})
    assert isinstance(result, ValidationOk)
    assert result.payload == {
        "title": "Coffee",
        "amount": 4.5,
        "date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "category": "Food",
    }


def test_full_mode_without_category_leaves_it_out():
    result = validate_expense(VALID)
    assert isinstance(result, ValidationOk)
    assert "category" not in result.payload


def test_full_mode_reports_every_missing_field():
    result = validate_expense({})
    assert isinstance(result, ValidationErrors)
    assert result.errors == [TITLE_ERROR, AMOUNT_ERROR, DATE_ERROR]


@pytest.mark.parametrize("title", ["", "ab", "  ab  ", "   ", None, 123, ["Coffee"]])
@pytest.mark.parametrize("mode", [ValidationMode.FULL, ValidationMode.PARTIAL])
def test_short_or_non_text_title_is_rejected(title, mode):
    result = validate_expense({**VALID, "title": title}, mode)
    assert isinstance(result, ValidationErrors)
    assert result.errors == [TITLE_ERROR]


@pytest.mark.parametrize(
    "amount",
    [0, -1, "-3", "abc", "", None, True, float("nan"), float("inf"), "Infinity", "nan", "1_000", "12abc", "0x", 10**400, "1e400", [5], {}],
)
def test_bad_amount_is_rejected(amount):
    result = validate_expense({**VALID, "amount": amount})
    assert isinstance(result, ValidationErrors)
    assert result.errors == [AMOUNT_ERROR]


@pytest.mark.parametrize(
    "amount,expected",
    [(5, 5.0), ("12", 12.0), (" 0.01 ", 0.01), ("1e2", 100.0), (".5", 0.5), ("+7", 7.0), ("0x1A", 26.0)],
)
def test_amount_is_coerced_to_float(amount, expected):
    result = validate_expense({**VALID, "amount": amount})
    assert isinstance(result, ValidationOk)
    assert result.payload["amount"] == expected
    assert isinstance(result.payload["amount"], float)


@pytest.mark.parametrize(
    "value",
    ["not a date", "2024-13-01", "2024/02/30", "Mon, 32 Jan 2024 00:00:00 GMT", "", None, True, {}, float("nan"), 10**400],
)
def test_unparsable_date_is_rejected(value):
    result = validate_expense({**VALID, "date": value}, ValidationMode.PARTIAL)
    assert isinstance(result, ValidationErrors)
    assert result.errors == [DATE_ERROR]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-01-01", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("2024-01-01T10:30:00Z", datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)),
        ("2024-01-01T12:00:00+02:00", datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)),
        (date(2024, 3, 5), datetime(2024, 3, 5, tzinfo=timezone.utc)),
        (datetime(2024, 3, 5, 8, 0), datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)),
        (1704067200000, datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("Mon, 01 Jan 2024 00:00:00 GMT", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("Mon, 01 Jan 2024 02:00:00 +0200", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("2024/01/01", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("2024/01/01 09:15:00", datetime(2024, 1, 1, 9, 15, tzinfo=timezone.utc)),
        ("01/31/2024", datetime(2024, 1, 31, tzinfo=timezone.utc)),
        ("January 1, 2024", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("Jan 1 2024", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ],
)
def test_date_forms_are_parsed_to_utc(value, expected):
    result = validate_expense({**VALID, "date": value})
    assert isinstance(result, ValidationOk)
    assert result.payload["date"] == expected
    assert result.payload["date"].tzinfo is not None


def test_partial_mode_ignores_absent_fields():
    result = validate_expense({"amount": 50}, ValidationMode.PARTIAL)
    assert isinstance(result, ValidationOk)
    assert result.payload == {"amount": 50.0}


def test_partial_mode_with_nothing_present_is_empty_payload():
    result = validate_expense({"unknown": "x"}, ValidationMode.PARTIAL)
    assert isinstance(result, ValidationOk)
    assert result.payload == {}


def test_partial_mode_treats_explicit_null_as_present():
    result = validate_expense({"title": None}, ValidationMode.PARTIAL)
    assert isinstance(result, ValidationErrors)
    assert result.errors == [TITLE_ERROR]


@pytest.mark.parametrize("category,expected", [(None, None), ("", None), (0, None), ("  Travel ", "Travel"), (42, "42")])
@pytest.mark.parametrize("mode", [ValidationMode.FULL, ValidationMode.PARTIAL])
def test_category_is_trimmed_or_null(category, expected, mode):
    result = validate_expense({**VALID, "category": category}, mode)
    assert isinstance(result, ValidationOk)
    assert result.payload["category"] == expected


def test_errors_never_come_with_a_partial_payload():
    result = validate_expense({"title": "Coffee", "amount": -1, "date": "2024-01-01"})
    assert isinstance(result, ValidationErrors)
    assert not hasattr(result, "payload")


def test_validation_does_not_mutate_input():
    data = {"title": "  Coffee ", "amount": "4.5", "date": "2024-01-01"}
    validate_expense(data)
    assert data == {"title": "  Coffee ", "amount": "4.5", "date": "2024-01-01"}
