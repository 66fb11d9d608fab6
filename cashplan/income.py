"""
Income records and activity rules for CashPlan.

Purpose
-------
Captures where the money comes from. An ``Income`` is a stream with an
amount per frequency period and an active window [start_date, end_date].
The forecast engine asks two questions per month: is the stream active,
and what does it contribute.

Key rules
---------
- A recurring income contributes its monthly-equivalent amount in every
  month of its window, whatever its frequency. A quarterly bonus of 3,000
  is credited as 1,000 per month rather than 3,000 every third month.
- The window compares the first of the month against the dates, so an
  income starting mid-month is first credited the following month.
- A one-time income is credited in full, once, in the month containing
  its start date.

Example
-------
>>> from datetime import date
>>> from cashplan.income import Income, income_amount_for_month, is_income_active_in_month
>>> salary = Income(id="inc-1", name="Salary", amount=5_000, start_date="2024-01-01")
>>> is_income_active_in_month(salary, date(2024, 3, 1))
True
>>> income_amount_for_month(salary)
5000.0
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from .exceptions import TimeIndexError
from .frequency import coerce_frequency, monthly_amount
from .types import Frequency
from .utils import check_non_negative, month_start, parse_date

__all__ = [
    "Income",
    "is_income_active_in_month",
    "income_amount_for_month",
]


@dataclass(frozen=True)
class Income:
    """
    Income source.

    Parameters
    ----------
    id : str
        Unique identifier.
    name : str
        Display name, copied into forecast breakdowns.
    amount : float
        Amount received per frequency period. Must be non-negative.
    start_date : date or str
        First day of the stream (ISO string accepted).
    frequency : Frequency or str, default "monthly"
        Recurrence of ``amount``. Unrecognized strings are kept and
        normalized as monthly with a warning.
    end_date : date or str, optional
        Last day of the stream; must not precede ``start_date``.
    is_active : bool, default True
        Inactive streams never contribute.
    description : str, default ""

    Examples
    --------
    >>> Income(id="b", name="Bonus", amount=6_000, frequency="yearly",
    ...        start_date="2024-01-01", end_date="2024-12-31")
    """
    id: str
    name: str
    amount: float
    start_date: date
    frequency: Union[Frequency, str] = Frequency.MONTHLY
    end_date: Optional[date] = None
    is_active: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "frequency", coerce_frequency(self.frequency) or self.frequency)
        start = parse_date(self.start_date, name="start_date")
        object.__setattr__(self, "start_date", start)
        if self.end_date is not None:
            end = parse_date(self.end_date, name="end_date")
            if end < start:
                raise TimeIndexError(
                    f"Income {self.id!r}: end_date {end} precedes start_date {start}"
                )
            object.__setattr__(self, "end_date", end)

    @property
    def is_one_time(self) -> bool:
        return self.frequency is Frequency.ONE_TIME


def is_income_active_in_month(income: Income, month_date: date) -> bool:
    """
    Whether *income* contributes cash in the month starting at *month_date*.

    Parameters
    ----------
    income : Income
    month_date : date
        First day of the projected month.

    Returns
    -------
    bool
        False if inactive, if *month_date* precedes the start date, or if it
        is after the end date. One-time incomes are active only in the month
        containing their start date.
    """
    if not income.is_active:
        return False
    if income.is_one_time:
        return month_start(month_date) == month_start(income.start_date)
    if month_date < income.start_date:
        return False
    if income.end_date is not None and month_date > income.end_date:
        return False
    return True


def income_amount_for_month(income: Income) -> float:
    """Cash credited by *income* in a month where it is active."""
    if income.is_one_time:
        return income.amount
    return monthly_amount(income.amount, income.frequency)
