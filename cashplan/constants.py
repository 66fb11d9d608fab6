"""
Global constants for CashPlan.

Purpose
-------
Centralizes multiplier tables and tuning values used by the forecast
engine and goal allocator. Keeping them here makes the allocation policy
explicit and lets tests reference the same numbers the engine uses.

Usage
-----
>>> from cashplan.constants import DAYS_PER_MONTH, PRIORITY_WEIGHTS
>>> from cashplan.types import Priority
>>> PRIORITY_WEIGHTS[Priority.CRITICAL]
1.5

Categories
----------
- Calendar: average month length, months per year
- Frequency: monthly-equivalent multipliers
- Conservative mode: income/expense stress factors
- Allocation: priority weights, floor/catch-up shares, balance scaling
- Forecast: default horizon and limits
- Suggestions: rule thresholds
"""

from typing import Dict, Tuple

from .types import Frequency, Priority

__all__ = [
    # Calendar
    "DAYS_PER_MONTH",
    "MONTHS_PER_YEAR",
    # Frequency
    "FREQUENCY_MULTIPLIERS",
    "DEFAULT_FREQUENCY_MULTIPLIER",
    # Conservative mode
    "CONSERVATIVE_INCOME_FACTOR",
    "CONSERVATIVE_EXPENSE_FACTOR",
    # Allocation
    "PRIORITY_WEIGHTS",
    "OPEN_ENDED_BASE_SHARE",
    "MINIMUM_FLOOR_SHARE",
    "CATCH_UP_BASE_SHARE",
    "CATCH_UP_MAX_SHARE",
    "BALANCE_REFERENCE_SURPLUS",
    "BALANCE_MULTIPLIER_BOUNDS",
    "UNORDERED_PRIORITY",
    # Forecast
    "DEFAULT_MONTHS",
    "MAX_MONTHS",
    "DEFAULT_CURRENCY_SYMBOL",
    # Suggestions
    "EMERGENCY_FUND_MONTHS",
    "TARGET_SAVINGS_RATE",
    "TOP_CATEGORY_SHARE_THRESHOLD",
    "ACCELERATE_PROGRESS_CEILING",
    "EMERGENCY_FUND_READY_SHARE",
    "INVESTING_MIN_MONTHLY_NET",
]


# =============================================================================
# Calendar
# =============================================================================

DAYS_PER_MONTH: float = 30.44
"""Average Gregorian month length in days."""

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""


# =============================================================================
# Frequency Multipliers
# =============================================================================

FREQUENCY_MULTIPLIERS: Dict[Frequency, float] = {
    Frequency.DAILY: DAYS_PER_MONTH,
    Frequency.WEEKLY: 4.33,
    Frequency.BIWEEKLY: 2.17,
    Frequency.MONTHLY: 1.0,
    Frequency.QUARTERLY: 1.0 / 3.0,
    Frequency.YEARLY: 1.0 / 12.0,
    Frequency.ONE_TIME: 0.0,
}
"""Monthly-equivalent multiplier per frequency.

One-time amounts normalize to 0: they are booked as a lump sum in the
single month selected by the activity predicate.
"""

DEFAULT_FREQUENCY_MULTIPLIER: float = 1.0
"""Multiplier applied to unrecognized frequencies (treated as monthly)."""


# =============================================================================
# Conservative Mode
# =============================================================================

CONSERVATIVE_INCOME_FACTOR: float = 0.9
"""Income scale in conservative mode (-10%)."""

CONSERVATIVE_EXPENSE_FACTOR: float = 1.1
"""Expense scale in conservative mode (+10%)."""


# =============================================================================
# Goal Allocation
# =============================================================================

PRIORITY_WEIGHTS: Dict[Priority, float] = {
    Priority.CRITICAL: 1.5,
    Priority.HIGH: 1.2,
    Priority.MEDIUM: 1.0,
    Priority.LOW: 0.7,
}
"""Weight applied to minimum floors and open-ended shares."""

OPEN_ENDED_BASE_SHARE: float = 0.2
"""Fraction of remaining surplus offered to an open-ended goal before weighting."""

MINIMUM_FLOOR_SHARE: float = 0.1
"""Fraction of remaining surplus used as a fixed-amount goal's minimum floor."""

CATCH_UP_BASE_SHARE: float = 0.4
"""Fraction of remaining surplus given to an overdue goal before balance scaling."""

CATCH_UP_MAX_SHARE: float = 0.6
"""Upper bound on the catch-up fraction for overdue goals."""

BALANCE_REFERENCE_SURPLUS: float = 1_000.0
"""Monthly surplus at which the balance multiplier equals 1.0."""

BALANCE_MULTIPLIER_BOUNDS: Tuple[float, float] = (0.5, 1.5)
"""Lower and upper clamp for the balance multiplier."""

UNORDERED_PRIORITY: int = 999
"""Sort key for goals without an explicit priority order."""


# =============================================================================
# Forecast Defaults
# =============================================================================

DEFAULT_MONTHS: int = 12
"""Default forecast horizon (one year)."""

MAX_MONTHS: int = 600
"""Longest accepted forecast horizon (50 years)."""

DEFAULT_CURRENCY_SYMBOL: str = "$"
"""Symbol used in guidance and suggestion text."""


# =============================================================================
# Suggestion Thresholds
# =============================================================================

EMERGENCY_FUND_MONTHS: int = 6
"""Months of expenses an emergency fund should cover."""

TARGET_SAVINGS_RATE: float = 20.0
"""Recommended savings rate, in percent of income."""

TOP_CATEGORY_SHARE_THRESHOLD: float = 30.0
"""Expense category share (percent) above which a reduction is suggested."""

ACCELERATE_PROGRESS_CEILING: float = 80.0
"""On-track goals projected below this percentage may be accelerated."""

EMERGENCY_FUND_READY_SHARE: float = 0.8
"""Funded share of the emergency fund after which investing is suggested."""

INVESTING_MIN_MONTHLY_NET: float = 500.0
"""Average monthly net cash flow required before suggesting investing."""
