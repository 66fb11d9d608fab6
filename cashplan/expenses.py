"""
Expense records and activity rules for CashPlan.

Purpose
-------
Models monthly obligations that reduce the surplus available for goals.
Users enter three temporal shapes of expense, and each resolves to an
``ExpenseSchedule``:

- INSTALLMENT: a total obligation spread evenly over N months starting at
  ``installment_start_month`` (a financed purchase).
- RECURRING: active every month from the month of ``due_date`` onward,
  never expiring (rent, subscriptions).
- ONE_TIME: active only in the month containing ``due_date`` and booked
  in full there (a single purchase).
- PERIODIC: recurring flag left unspecified with an explicit non-monthly
  frequency; quarterly and yearly amounts are booked in full every 3 or
  12 months from ``due_date``, sub-monthly ones every month.

An unspecified recurring flag otherwise means one-time, so an expense built
with defaults is still charged once in its due month.

The classification order matters: installments are detected first since
an installment is usually also marked non-recurring.

Example
-------
>>> from datetime import date
>>> from cashplan.expenses import Expense, expense_amount_for_month, is_expense_active_in_month
>>> car = Expense(id="e1", name="Car", amount=12_000, due_date="2024-01-01",
...               recurring=False, is_installment=True,
...               installment_months=12, installment_start_month="2024-01")
>>> is_expense_active_in_month(car, date(2024, 12, 1))
True
>>> is_expense_active_in_month(car, date(2025, 1, 1))
False
>>> expense_amount_for_month(car)
1000.0
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from .exceptions import ValidationError
from .frequency import coerce_frequency, monthly_amount
from .types import ExpenseCategory, ExpenseSchedule, Frequency, Priority
from .utils import (
    add_months,
    check_non_negative,
    coerce_enum,
    month_start,
    months_between,
    parse_date,
    parse_year_month,
)

__all__ = [
    "Expense",
    "classify_expense",
    "is_expense_active_in_month",
    "expense_amount_for_month",
]

_SUB_MONTHLY = (Frequency.DAILY, Frequency.WEEKLY, Frequency.BIWEEKLY)
_PERIOD_MONTHS = {Frequency.QUARTERLY: 3, Frequency.YEARLY: 12}


@dataclass(frozen=True)
class Expense:
    """
    Expense item.

    Parameters
    ----------
    id : str
        Unique identifier.
    name : str
        Display name, copied into forecast breakdowns.
    amount : float
        Amount per frequency period, or the total obligation for an
        installment expense. Must be non-negative.
    due_date : date or str
        Due date; start reference for recurring and periodic expenses.
    category : ExpenseCategory or str, default "miscellaneous"
        Display tag only.
    recurring : bool, optional
        True for recurring, False for one-time. None leaves the shape to
        the frequency: periodic for an explicit non-monthly frequency,
        one-time otherwise.
    frequency : Frequency or str, optional
        Recurrence of ``amount``. Defaults to monthly for normalization.
    priority : Priority or str, default "medium"
        Ranking hint only; never used for cash-flow math.
    is_active : bool, default True
    is_installment : bool, default False
    installment_months : int, optional
        Number of monthly payments; required and positive for installments.
    installment_start_month : str, optional
        First payment month as ``YYYY-MM``; required for installments.
    description : str, default ""
    """
    id: str
    name: str
    amount: float
    due_date: date
    category: Union[ExpenseCategory, str] = ExpenseCategory.MISCELLANEOUS
    recurring: Optional[bool] = None
    frequency: Optional[Union[Frequency, str]] = None
    priority: Union[Priority, str] = Priority.MEDIUM
    is_active: bool = True
    is_installment: bool = False
    installment_months: Optional[int] = None
    installment_start_month: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)
        object.__setattr__(self, "amount", float(self.amount))
        object.__setattr__(self, "due_date", parse_date(self.due_date, name="due_date"))
        object.__setattr__(self, "category", coerce_enum(ExpenseCategory, self.category, name="category"))
        object.__setattr__(self, "priority", coerce_enum(Priority, self.priority, name="priority"))
        if self.frequency is not None:
            object.__setattr__(self, "frequency", coerce_frequency(self.frequency) or self.frequency)

        if self.is_installment:
            if self.installment_months is None or int(self.installment_months) <= 0:
                raise ValidationError(
                    f"Expense {self.id!r}: installment_months must be > 0 for an "
                    f"installment expense, got {self.installment_months}"
                )
            if self.installment_start_month is None:
                raise ValidationError(
                    f"Expense {self.id!r}: installment_start_month is required "
                    f"for an installment expense"
                )
            object.__setattr__(self, "installment_months", int(self.installment_months))
        if self.installment_start_month is not None:
            # Validate the key even when the installment flag is off
            parse_year_month(self.installment_start_month, name="installment_start_month")

    @property
    def installment_start(self) -> Optional[date]:
        """First day of the first installment month."""
        if self.installment_start_month is None:
            return None
        return parse_year_month(self.installment_start_month, name="installment_start_month")

    @property
    def installment_end(self) -> Optional[date]:
        """First day of the month after the last installment (exclusive bound)."""
        start = self.installment_start
        if start is None or not self.installment_months:
            return None
        return add_months(start, self.installment_months)

    @property
    def schedule(self) -> ExpenseSchedule:
        return classify_expense(self)


def classify_expense(expense: Expense) -> ExpenseSchedule:
    """Resolve the temporal shape of *expense* (see module docstring)."""
    if expense.is_installment and expense.installment_start_month and expense.installment_months:
        return ExpenseSchedule.INSTALLMENT
    if expense.recurring is True:
        return ExpenseSchedule.RECURRING
    if expense.frequency is Frequency.ONE_TIME or expense.recurring is False:
        return ExpenseSchedule.ONE_TIME
    if expense.frequency in _SUB_MONTHLY or expense.frequency in _PERIOD_MONTHS:
        return ExpenseSchedule.PERIODIC
    # Unstated flag with no usable non-monthly frequency
    return ExpenseSchedule.ONE_TIME


def is_expense_active_in_month(expense: Expense, month_date: date) -> bool:
    """
    Whether *expense* is charged in the month containing *month_date*.

    Parameters
    ----------
    expense : Expense
    month_date : date
        Any day of the projected month; compared at first-of-month.

    Returns
    -------
    bool
    """
    if not expense.is_active:
        return False

    month = month_start(month_date)
    due_month = month_start(expense.due_date)
    schedule = classify_expense(expense)

    if schedule is ExpenseSchedule.INSTALLMENT:
        # Half-open window [start, start + installment_months)
        return expense.installment_start <= month < expense.installment_end

    if schedule is ExpenseSchedule.RECURRING:
        return month >= due_month

    if schedule is ExpenseSchedule.ONE_TIME:
        return month == due_month

    if schedule is ExpenseSchedule.PERIODIC:
        elapsed = months_between(due_month, month)
        if elapsed < 0:
            return False
        if expense.frequency in _SUB_MONTHLY:
            return True
        return elapsed % _PERIOD_MONTHS[expense.frequency] == 0

    return False


def expense_amount_for_month(expense: Expense) -> float:
    """
    Cash charged by *expense* in a month where it is active.

    Installments charge ``amount / installment_months``. One-time and
    quarterly/yearly periodic expenses charge the full amount in their
    month. Everything else is frequency-normalized (monthly by default).
    """
    schedule = classify_expense(expense)
    if schedule is ExpenseSchedule.INSTALLMENT:
        return expense.amount / expense.installment_months
    if schedule is ExpenseSchedule.ONE_TIME:
        return expense.amount
    if schedule is ExpenseSchedule.PERIODIC and expense.frequency in _PERIOD_MONTHS:
        return expense.amount
    return monthly_amount(expense.amount, expense.frequency or Frequency.MONTHLY)
