"""Business rules for the Department domain — field validation and normalisation."""
from __future__ import annotations
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping

from registrar.domain.common.result import Result
from registrar.domain.department.models import MUTABLE_FIELDS

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-&]+$")
NAME_MAX_LENGTH = 50

BUDGET_MIN = Decimal("0")
BUDGET_MAX = Decimal("999999999")
_CENTS = Decimal("0.01")

EARLIEST_START_DATE = date(1900, 1, 1)

REQUIRED_FIELDS = ("name", "budget", "start_date")


# ------------------------------------------------------------------
# Coercion helpers (also used by the conflict detector)
# ------------------------------------------------------------------
def parse_budget(value: Any) -> Decimal:
    """Money amount rounded to cents. Raises ValueError on anything non-numeric."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"not a number: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def parse_date(value: Any) -> date:
    """Calendar date from a date, datetime or ISO-8601 string; time of day is dropped."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    raise ValueError(f"not a date: {value!r}")


# ------------------------------------------------------------------
# Per-field rules
# ------------------------------------------------------------------
def _validate_name(value: Any) -> Result[str]:
    if not isinstance(value, str):
        return Result.fail("'name' must be a string.")
    name = value.strip()
    if not name:
        return Result.fail("'name' is required and cannot be empty.")
    if len(name) > NAME_MAX_LENGTH:
        return Result.fail(f"'name' cannot exceed {NAME_MAX_LENGTH} characters.")
    if not NAME_PATTERN.match(name):
        return Result.fail("'name' can only contain letters, spaces, hyphens, and ampersands.")
    return Result.ok(name)


def _validate_budget(value: Any) -> Result[Decimal]:
    try:
        budget = parse_budget(value)
    except ValueError:
        return Result.fail("'budget' must be a valid number.")
    if budget < BUDGET_MIN or budget > BUDGET_MAX:
        return Result.fail("'budget' must be between 0 and 999,999,999.")
    return Result.ok(budget)


def _validate_start_date(value: Any) -> Result[date]:
    try:
        start = parse_date(value)
    except ValueError:
        return Result.fail("'start_date' must be a valid date (YYYY-MM-DD).")
    if start < EARLIEST_START_DATE or start > date.today():
        return Result.fail("'start_date' must be between 1900 and today.")
    return Result.ok(start)


def _validate_instructor_id(value: Any) -> Result[Any]:
    if value is None:
        return Result.ok(None)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return Result.fail("'instructor_id' must be a positive integer.")
    return Result.ok(value)


_FIELD_RULES = {
    "name": _validate_name,
    "budget": _validate_budget,
    "start_date": _validate_start_date,
    "instructor_id": _validate_instructor_id,
}


# ------------------------------------------------------------------
# Whole-payload rules
# ------------------------------------------------------------------
def validate_patch(patch: Mapping[str, Any]) -> Result[Dict[str, Any]]:
    """
    Validates a partial update. Only mutable fields may appear; each present
    field is normalised. Returns every problem found, not just the first.
    """
    errors = []
    unknown = [k for k in patch if k not in MUTABLE_FIELDS]
    if unknown:
        errors.append(f"Fields cannot be patched: {sorted(unknown)}.")

    normalised: Dict[str, Any] = {}
    for field_name in MUTABLE_FIELDS:
        if field_name not in patch:
            continue
        result = _FIELD_RULES[field_name](patch[field_name])
        if result.is_success:
            normalised[field_name] = result.value
        else:
            errors.extend(result.errors)

    if errors:
        return Result.fail(*errors)
    return Result.ok(normalised)


def validate_department_content(data: Mapping[str, Any]) -> Result[Dict[str, Any]]:
    """Validates a full department payload for creation."""
    missing = [f for f in REQUIRED_FIELDS if data.get(f) is None]
    if missing:
        return Result.fail(*(f"'{f}' is required." for f in missing))
    return validate_patch(data)


def validate_expected_version(expected_version: Any) -> Result[int]:
    if isinstance(expected_version, bool) or not isinstance(expected_version, int):
        return Result.fail("'version' must be an integer.")
    if expected_version < 1:
        return Result.fail("'version' must be a positive integer.")
    return Result.ok(expected_version)
