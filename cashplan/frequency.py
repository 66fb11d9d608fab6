"""
Frequency normalization for CashPlan.

Converts an amount tagged with a recurrence frequency into its
monthly-equivalent amount using fixed calendar-average multipliers
(daily x30.44, weekly x4.33, biweekly x2.17, quarterly x1/3, yearly x1/12).

One-time amounts normalize to zero; the forecast engine books them as a
lump sum in the single month chosen by the activity predicate.

Example
-------
>>> from cashplan.frequency import monthly_amount
>>> monthly_amount(1200, "yearly")
100.0
"""

from __future__ import annotations

import logging
from typing import Union

from .constants import DEFAULT_FREQUENCY_MULTIPLIER, FREQUENCY_MULTIPLIERS
from .types import Frequency

__all__ = [
    "coerce_frequency",
    "monthly_multiplier",
    "monthly_amount",
]

logger = logging.getLogger(__name__)


def coerce_frequency(value: Union[Frequency, str, None]) -> Union[Frequency, None]:
    """Return *value* as a Frequency, or None if it is None or unrecognized."""
    if value is None or isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError:
        return None


def monthly_multiplier(frequency: Union[Frequency, str]) -> float:
    """
    Monthly-equivalent multiplier for *frequency*.

    Unrecognized frequencies are treated as monthly and logged at WARNING.
    """
    freq = coerce_frequency(frequency)
    if freq is None:
        logger.warning(
            "Unknown frequency %r, treating amount as monthly", frequency
        )
        return DEFAULT_FREQUENCY_MULTIPLIER
    return FREQUENCY_MULTIPLIERS[freq]


def monthly_amount(amount: float, frequency: Union[Frequency, str]) -> float:
    """Convert *amount* paid at *frequency* into a monthly-equivalent amount."""
    return float(amount) * monthly_multiplier(frequency)
