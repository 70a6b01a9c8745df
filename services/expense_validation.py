"""Validation and normalization of incoming expense fields."""
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from models.expense import ExpenseInput

TITLE_ERROR = "Title is required and must be at least 3 characters."
AMOUNT_ERROR = "Amount is required and must be a number greater than 0."
DATE_ERROR = "Date is required and must be a valid date."

MIN_TITLE_LENGTH = 3

# Decimal or exponent notation only; no digit separators, no nan/inf words
DECIMAL_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
# 0x1A, 0b101, 0o17
PREFIXED_INT_PATTERN = re.compile(r"0([xX][0-9a-fA-F]+|[bB][01]+|[oO][0-7]+)")

# Non-ISO layouts accepted besides RFC 2822 (e.g. "2024/01/31", "January 31, 2024")
DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


class ValidationMode(str, Enum):
    FULL = "full"
    PARTIAL = "partial"


@dataclass(frozen=True)
class ValidationOk:
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationErrors:
    errors: List[str]


ValidationResult = Union[ValidationOk, ValidationErrors]


def _clean_title(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if len(stripped) >= MIN_TITLE_LENGTH else None


def _to_number(value: Any) -> Optional[float]:
    """Coerces ints, floats and numeric strings. Returns None when not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                return 0.0
            if PREFIXED_INT_PATTERN.fullmatch(text):
                number = float(int(text, 0))
            elif DECIMAL_PATTERN.fullmatch(text):
                number = float(text)
            else:
                return None
        else:
            return None
    except OverflowError:
        # Integers beyond float range
        return None
    return number if math.isfinite(number) else None


def _clean_amount(value: Any) -> Optional[float]:
    number = _to_number(value)
    if number is None or number <= 0:
        return None
    return number


def _parse_date_text(text: str) -> Optional[datetime]:
    """ISO-8601 first, then RFC 2822 ("Mon, 01 Jan 2024 00:00:00 GMT"), then DATE_FORMATS."""
    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(iso_text), time.min)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_date(value: Any) -> Optional[datetime]:
    """
    Parses the accepted date representations into a UTC-aware datetime.

    Strings may be ISO-8601, RFC 2822 or one of DATE_FORMATS; numbers are
    milliseconds since the Unix epoch.
    """
    if isinstance(value, bool) or value is None:
        return None
    parsed: Optional[datetime] = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                return None
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = _parse_date_text(text)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def _clean_category(value: Any) -> Optional[str]:
    return str(value).strip() if value else None


def validate_expense(data: Mapping[str, Any], mode: ValidationMode = ValidationMode.FULL) -> ValidationResult:
    """
    Checks an expense body and builds the payload to persist.

    In FULL mode title, amount and date are required. In PARTIAL mode only the
    keys present in `data` are checked, and absent keys never produce errors.
    `category` is normalized whenever present. If any error is found, no
    payload is returned at all.
    """
    expense_input = ExpenseInput.model_validate(dict(data))
    present = expense_input.model_fields_set
    partial = mode == ValidationMode.PARTIAL
    errors: List[str] = []
    payload: Dict[str, Any] = {}

    if not partial or "title" in present:
        title = _clean_title(expense_input.title)
        if title is None:
            errors.append(TITLE_ERROR)
        else:
            payload["title"] = title

    if not partial or "amount" in present:
        amount = _clean_amount(expense_input.amount)
        if amount is None:
            errors.append(AMOUNT_ERROR)
        else:
            payload["amount"] = amount

    if not partial or "date" in present:
        parsed_date = _parse_date(expense_input.date)
        if parsed_date is None:
            errors.append(DATE_ERROR)
        else:
            payload["date"] = parsed_date

    if "category" in present:
        payload["category"] = _clean_category(expense_input.category)

    if errors:
        return ValidationErrors(errors=errors)
    return ValidationOk(payload=payload)
