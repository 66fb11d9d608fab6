"""General utilities for CashPlan

Contents
--------
- Validation helpers
- Date parsing (ISO dates, YYYY-MM keys)
- Month arithmetic (month start, add months, month keys, day-based spans)
- Index builders (first-of-month DatetimeIndex)
- Text formatting (currency)
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Optional, Union

import pandas as pd

from .constants import DAYS_PER_MONTH, DEFAULT_CURRENCY_SYMBOL
from .exceptions import TimeIndexError, ValidationError

__all__ = [
    # Validation
    "check_non_negative",
    "check_finite",
    "coerce_enum",
    # Parsing
    "parse_date",
    "parse_year_month",
    # Month arithmetic
    "month_start",
    "month_end",
    "add_months",
    "month_key",
    "months_between",
    "months_until",
    # Index
    "month_index",
    # Formatting
    "format_currency",
]

DateLike = Union[date, datetime, str]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative or not a finite number."""
    check_finite(name, value)
    if value < 0:
        raise ValidationError(f"{name} must be non-negative (got {value}).")


def check_finite(name: str, value: float) -> None:
    """Raise if *value* is NaN or infinite."""
    try:
        ok = math.isfinite(float(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number (got {value!r}).") from None
    if not ok:
        raise ValidationError(f"{name} must be finite (got {value}).")


def coerce_enum(enum_cls, value, *, name: str):
    """Return *value* as a member of *enum_cls*, raising ValidationError if it is not one."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}; got {value!r}") from None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_date(value: DateLike, *, name: str = "date") -> date:
    """Coerce a date, datetime or ISO string to a ``datetime.date``.

    Strings may carry an ISO time part (``2024-01-01T00:00:00Z``); only the
    calendar date is kept. Any other trailing text is rejected.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10 and text[10] in "Tt ":
                if text[-1] in "Zz":
                    text = text[:-1] + "+00:00"
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError:
            raise TimeIndexError(
                f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}"
            ) from None
    raise TimeIndexError(f"{name} must be a date or ISO string, got {type(value).__name__}")


def parse_year_month(value: str, *, name: str = "month") -> date:
    """Parse a ``YYYY-MM`` key into the first day of that month."""
    if not isinstance(value, str):
        raise TimeIndexError(f"{name} must be a YYYY-MM string, got {value!r}")
    parts = value.strip().split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or not all(p.isdigit() for p in parts):
        raise TimeIndexError(f"{name} must be YYYY-MM, got {value!r}")
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        raise TimeIndexError(f"{name} has month out of range 1..12: {value!r}")
    return date(year, month, 1)


# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------

def month_start(d: date) -> date:
    """First day of the month containing *d*."""
    return date(d.year, d.month, 1)


def month_end(d: date) -> date:
    """Last day of the month containing *d*."""
    return add_months(d, 1) - timedelta(days=1)


def add_months(d: date, n: int) -> date:
    """Shift *d* by *n* calendar months, normalized to the 1st."""
    total = d.year * 12 + (d.month - 1) + int(n)
    return date(total // 12, total % 12 + 1, 1)


def month_key(d: date) -> str:
    """Return the ``YYYY-MM`` key of *d*."""
    return f"{d.year:04d}-{d.month:02d}"


def months_between(start: date, end: date) -> int:
    """Whole calendar months from *start*'s month to *end*'s month (may be negative)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def months_until(target: date, current: date) -> int:
    """
    Average-length months from *current* to *target*, at least 1.

    Uses ceil(days / 30.44) so a target three weeks away still counts as
    one month of saving.
    """
    days = (target - current).days
    return max(1, math.ceil(days / DAYS_PER_MONTH))


# ---------------------------------------------------------------------------
# Index helpers
# ---------------------------------------------------------------------------

def month_index(start: date, months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods."""
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    first = pd.Timestamp(start.year, start.month, 1)
    return pd.date_range(start=first, periods=months, freq="MS")


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_currency(value: float, decimals: int = 2, symbol: Optional[str] = None) -> str:
    """
    Format a monetary amount for guidance and suggestion text.

    Examples
    --------
    >>> format_currency(1234.5)
    '$1,234.50'
    >>> format_currency(-50, decimals=0)
    '-$50'
    """
    sym = DEFAULT_CURRENCY_SYMBOL if symbol is None else symbol
    sign = "-" if value < 0 else ""
    return f"{sign}{sym}{abs(value):,.{decimals}f}"
