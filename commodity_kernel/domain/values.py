"""
Values -- Numeric and date coercion at the engine boundary.

Responsibility:
    Converts caller-supplied amounts, rates, day counts and dates into the
    canonical types the engines compute with (``Decimal``, ``int``,
    ``date``), and applies the single currency rounding rule.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str`` so that
      ``0.1`` becomes ``Decimal("0.1")``, never its binary expansion.
    - Non-finite values (NaN, Infinity) are rejected at the boundary.
    - Currency rounding is 2 decimal places, ROUND_HALF_UP (half away from
      zero), applied once per output figure.

Failure modes:
    - InvalidArgumentError for non-numeric, non-finite, negative (where
      forbidden), fractional day counts, or unparseable dates.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from commodity_kernel.exceptions import InvalidArgumentError

NumberLike = Union[Decimal, int, float, str]
DateLike = Union[date, datetime, str]

CURRENCY_PLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")
DAYS_PER_MONTH = Decimal("30")
DAYS_PER_YEAR = Decimal("365")


def to_decimal(argument: str, value: NumberLike) -> Decimal:
    """
    Convert ``value`` to a finite Decimal.

    Raises:
        InvalidArgumentError: if ``value`` is not numeric or not finite.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidArgumentError(argument, value, "must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise InvalidArgumentError(argument, value, "must be a number") from e
    if not result.is_finite():
        raise InvalidArgumentError(argument, value, "must be finite")
    return result


def to_non_negative_decimal(argument: str, value: NumberLike) -> Decimal:
    """Convert ``value`` to a finite Decimal that is >= 0."""
    result = to_decimal(argument, value)
    if result < ZERO:
        raise InvalidArgumentError(argument, value, "cannot be negative")
    return result


def to_non_negative_days(argument: str, value: int) -> int:
    """Validate a whole, non-negative count (days, bales, samples)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(argument, value, "must be a whole number")
    if value < 0:
        raise InvalidArgumentError(argument, value, "cannot be negative")
    return value


def coerce_date(argument: str, value: DateLike) -> date:
    """
    Parse a calendar date from a ``date``, ``datetime`` or ISO string.

    Datetimes are truncated to their date; day arithmetic is whole-day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError as e:
            raise InvalidArgumentError(argument, value, "not an ISO date") from e
    raise InvalidArgumentError(argument, value, "must be a date")


def round_currency(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half away from zero."""
    return amount.quantize(CURRENCY_PLACES, rounding=ROUND_HALF_UP)
