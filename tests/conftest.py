"""
Pytest configuration and fixtures for CashPlan test suite.

This module provides reusable fixtures for testing all CashPlan components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import json
from datetime import date

import pytest

from cashplan.config import ForecastConfig, default_config
from cashplan.expenses import Expense
from cashplan.goals import Goal
from cashplan.income import Income
from cashplan.plan import UserPlan


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start_date() -> date:
    """Standard reference date for tests (a January, so both anchors agree)."""
    return date(2024, 1, 1)


@pytest.fixture
def config(start_date) -> ForecastConfig:
    """Standard 12-month configuration."""
    return default_config(start_date)


# ---------------------------------------------------------------------------
# Record Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary() -> Income:
    """5,000/month salary from January 2024."""
    return Income(id="salary", name="Salary", amount=5_000, start_date=date(2024, 1, 1))


@pytest.fixture
def rent() -> Expense:
    """3,000/month recurring rent from January 2024."""
    return Expense(
        id="rent", name="Rent", amount=3_000, due_date=date(2024, 1, 1),
        category="housing", recurring=True, frequency="monthly",
    )


@pytest.fixture
def laptop() -> Expense:
    """12,000 laptop financed over 12 months from 2024-01."""
    return Expense(
        id="laptop", name="Laptop", amount=12_000, due_date=date(2024, 1, 1),
        category="shopping", recurring=False, is_installment=True,
        installment_months=12, installment_start_month="2024-01",
    )


@pytest.fixture
def emergency_fund() -> Goal:
    """Fixed 12,000 goal due end of 2024, served first."""
    return Goal(
        id="emergency", name="Emergency Fund", target_amount=12_000,
        target_date=date(2024, 12, 31), category="emergency_fund",
        priority="high", priority_order=1,
    )


@pytest.fixture
def vacation() -> Goal:
    """Fixed 12,000 goal due end of 2024, served second."""
    return Goal(
        id="vacation", name="Vacation", target_amount=12_000,
        target_date=date(2024, 12, 31), category="vacation",
        priority="high", priority_order=2,
    )


@pytest.fixture
def investing() -> Goal:
    """Open-ended investing goal, served last."""
    return Goal(
        id="invest", name="Investing", target_amount=0,
        target_date=date(2030, 1, 1), category="investment",
        goal_type="open_ended", priority="medium", priority_order=3,
    )


# ---------------------------------------------------------------------------
# Plan Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def simple_plan(salary, rent) -> UserPlan:
    """Salary and rent only, 1,000 on hand."""
    return UserPlan(income=[salary], expenses=[rent], current_balance=1_000)


@pytest.fixture
def goal_plan(salary, rent, emergency_fund, vacation) -> UserPlan:
    """2,000/month surplus competing for two fixed goals."""
    return UserPlan(
        income=[salary], expenses=[rent],
        goals=[emergency_fund, vacation], current_balance=0,
    )


@pytest.fixture
def full_plan(salary, rent, laptop, emergency_fund, investing) -> UserPlan:
    """Installment expense plus one fixed and one open-ended goal."""
    return UserPlan(
        income=[salary], expenses=[rent, laptop],
        goals=[emergency_fund, investing], current_balance=2_500,
    )


# ---------------------------------------------------------------------------
# File Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def plan_dict() -> dict:
    """Plan in the planner app's camelCase export layout."""
    return {
        "metadata": {"version": "1.0.0", "appName": "Finance Planner"},
        "userPlan": {
            "id": "plan-1",
            "currentBalance": 1000,
            "income": [
                {
                    "id": "salary", "name": "Salary", "amount": 5000,
                    "frequency": "monthly", "startDate": "2024-01-01T00:00:00.000Z",
                    "isActive": True, "createdAt": "2024-01-01T00:00:00.000Z",
                }
            ],
            "expenses": [
                {
                    "id": "rent", "name": "Rent", "amount": 3000,
                    "category": "housing", "dueDate": "2024-01-01",
                    "recurring": True, "frequency": "monthly",
                    "priority": "high", "isActive": True,
                }
            ],
            "goals": [
                {
                    "id": "emergency", "name": "Emergency Fund",
                    "targetAmount": 12000, "currentAmount": 0,
                    "targetDate": "2024-12-31", "category": "emergency_fund",
                    "priority": "high", "priorityOrder": 1,
                    "goalType": "fixed_amount", "isActive": True,
                }
            ],
            "forecastConfig": {"months": 12},
        },
    }


@pytest.fixture
def plan_file(tmp_path, plan_dict):
    """Plan written to a temporary JSON file."""
    path = tmp_path / "plan.json"
    with open(path, "w") as f:
        json.dump(plan_dict, f)
    return path
