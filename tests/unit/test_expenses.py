"""
Unit tests for expenses.py module.

Tests validation, schedule classification, the expense activity predicate
and per-month amounts.
"""

from dataclasses import replace
from datetime import date

import pytest

from cashplan.exceptions import TimeIndexError, ValidationError
from cashplan.expenses import (
    Expense,
    classify_expense,
    expense_amount_for_month,
    is_expense_active_in_month,
)
from cashplan.types import ExpenseCategory, ExpenseSchedule, Frequency, Priority


def _months(year=2024):
    return [date(year, m, 1) for m in range(1, 13)]


class TestExpenseValidation:
    """Tests for Expense construction."""

    def test_defaults(self):
        exp = Expense(id="e", name="Misc", amount=10, due_date="2024-01-01")
        assert exp.category is ExpenseCategory.MISCELLANEOUS
        assert exp.priority is Priority.MEDIUM
        assert exp.recurring is None
        assert exp.frequency is None

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Expense(id="e", name="Bad", amount=-5, due_date="2024-01-01")

    def test_installment_requires_positive_months(self):
        with pytest.raises(ValidationError, match="installment_months"):
            Expense(id="e", name="Bad", amount=100, due_date="2024-01-01",
                    is_installment=True, installment_months=0,
                    installment_start_month="2024-01")

    def test_installment_requires_start_month(self):
        with pytest.raises(ValidationError, match="installment_start_month"):
            Expense(id="e", name="Bad", amount=100, due_date="2024-01-01",
                    is_installment=True, installment_months=3)

    @pytest.mark.parametrize("bad", ["2024-13", "2024/01", "Jan 2024", "24-01"])
    def test_malformed_installment_month_rejected(self, bad):
        with pytest.raises(TimeIndexError):
            Expense(id="e", name="Bad", amount=100, due_date="2024-01-01",
                    is_installment=True, installment_months=3,
                    installment_start_month=bad)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError, match="category"):
            Expense(id="e", name="Bad", amount=1, due_date="2024-01-01", category="yachts")


class TestClassification:
    """Tests for classify_expense() priority order."""

    def test_installment_wins_over_non_recurring(self, laptop):
        assert laptop.recurring is False
        assert classify_expense(laptop) is ExpenseSchedule.INSTALLMENT

    def test_recurring(self, rent):
        assert classify_expense(rent) is ExpenseSchedule.RECURRING

    def test_recurring_flag_beats_one_time_frequency(self):
        exp = Expense(id="e", name="x", amount=1, due_date="2024-01-01",
                      recurring=True, frequency="one_time")
        assert classify_expense(exp) is ExpenseSchedule.RECURRING

    def test_one_time_by_flag_or_frequency(self):
        by_flag = Expense(id="a", name="x", amount=1, due_date="2024-01-01", recurring=False)
        by_freq = Expense(id="b", name="x", amount=1, due_date="2024-01-01", frequency="one-time")
        assert classify_expense(by_flag) is ExpenseSchedule.ONE_TIME
        assert classify_expense(by_freq) is ExpenseSchedule.ONE_TIME

    def test_periodic_when_recurring_unspecified(self):
        exp = Expense(id="e", name="x", amount=1, due_date="2024-01-01", frequency="quarterly")
        assert classify_expense(exp) is ExpenseSchedule.PERIODIC

    def test_unstated_flag_is_one_time(self):
        exp = Expense(id="e", name="x", amount=1, due_date="2024-01-01")
        assert classify_expense(exp) is ExpenseSchedule.ONE_TIME
        exp = Expense(id="e", name="x", amount=1, due_date="2024-01-01", frequency="monthly")
        assert exp.schedule is ExpenseSchedule.ONE_TIME

    def test_unknown_frequency_is_one_time(self):
        exp = Expense(id="e", name="x", amount=1, due_date="2024-01-01", frequency="fortnightly")
        assert exp.schedule is ExpenseSchedule.ONE_TIME


class TestExpenseActivity:
    """Tests for is_expense_active_in_month()."""

    def test_inactive_never_charged(self, rent):
        off = replace(rent, is_active=False)
        assert not any(is_expense_active_in_month(off, m) for m in _months())

    def test_installment_half_open_window(self):
        exp = Expense(id="e", name="Sofa", amount=900, due_date="2024-01-01",
                      is_installment=True, installment_months=3,
                      installment_start_month="2024-03")
        active = [m.month for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == [3, 4, 5]

    def test_installment_window_crosses_year(self):
        exp = Expense(id="e", name="Phone", amount=600, due_date="2024-11-01",
                      is_installment=True, installment_months=4,
                      installment_start_month="2024-11")
        assert is_expense_active_in_month(exp, date(2025, 2, 1))
        assert not is_expense_active_in_month(exp, date(2025, 3, 1))

    def test_recurring_never_expires(self):
        exp = Expense(id="e", name="Gym", amount=50, due_date="2024-03-20", recurring=True)
        assert not is_expense_active_in_month(exp, date(2024, 2, 1))
        assert is_expense_active_in_month(exp, date(2024, 3, 1))
        assert is_expense_active_in_month(exp, date(2040, 3, 1))

    def test_one_time_only_in_due_month(self):
        exp = Expense(id="e", name="TV", amount=800, due_date="2024-06-18", recurring=False)
        active = [m.month for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == [6]

    def test_quarterly_periodic(self):
        exp = Expense(id="e", name="Water", amount=90, due_date="2024-02-10", frequency="quarterly")
        active = [m.month for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == [2, 5, 8, 11]

    def test_yearly_periodic(self):
        exp = Expense(id="e", name="Insurance", amount=1_200, due_date="2023-09-01", frequency="yearly")
        active = [m for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == [date(2024, 9, 1)]

    def test_weekly_periodic_every_month_from_due(self):
        exp = Expense(id="e", name="Groceries", amount=100, due_date="2024-04-01", frequency="weekly")
        active = [m.month for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == list(range(4, 13))

    def test_unstated_flag_charged_in_due_month(self):
        exp = Expense(id="e", name="Rent", amount=3_000, due_date="2024-03-05")
        active = [m.month for m in _months() if is_expense_active_in_month(exp, m)]
        assert active == [3]
        assert expense_amount_for_month(exp) == 3_000

    def test_any_day_of_month_accepted(self):
        exp = Expense(id="e", name="TV", amount=800, due_date="2024-06-18", recurring=False)
        assert is_expense_active_in_month(exp, date(2024, 6, 30))


class TestExpenseAmount:
    """Tests for expense_amount_for_month()."""

    def test_installment_divides_total(self, laptop):
        assert expense_amount_for_month(laptop) == pytest.approx(1_000)

    def test_installment_conservation(self):
        exp = Expense(id="e", name="Car", amount=10_000, due_date="2024-01-01",
                      is_installment=True, installment_months=7,
                      installment_start_month="2024-02")
        months = [date(2024, m, 1) for m in range(1, 13)] + [date(2025, m, 1) for m in range(1, 13)]
        total = sum(expense_amount_for_month(exp) for m in months if is_expense_active_in_month(exp, m))
        assert total == pytest.approx(10_000)

    def test_one_time_full_amount(self):
        exp = Expense(id="e", name="TV", amount=800, due_date="2024-06-18", frequency="one_time")
        assert expense_amount_for_month(exp) == 800

    def test_quarterly_periodic_full_amount(self):
        exp = Expense(id="e", name="Water", amount=90, due_date="2024-02-10", frequency="quarterly")
        assert expense_amount_for_month(exp) == 90

    def test_recurring_weekly_normalized(self):
        exp = Expense(id="e", name="Groceries", amount=100, due_date="2024-01-01",
                      recurring=True, frequency=Frequency.WEEKLY)
        assert expense_amount_for_month(exp) == pytest.approx(433)

    def test_recurring_without_frequency_is_monthly(self, rent):
        assert expense_amount_for_month(rent) == 3_000
