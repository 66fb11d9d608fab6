"""
Forecast engine for CashPlan.

Purpose
-------
Projects a household's cash position month by month over a fixed horizon.
Each month runs the same pipeline:

1. ``month = base + i`` months, first of month
2. income    = sum of active income lines        (x0.9 in conservative mode)
3. expenses  = sum of active expense lines       (x1.1 in conservative mode)
4. budget    = min(income - expenses, balance + income - expenses)
5. goals     = allocate_goals(goals as of this month, budget)  if budget > 0
6. net       = income - expenses - goals
7. ending    = starting + net

The engine is a pure function of ``(UserPlan, ForecastConfig)``: it never
mutates the plan, reads no global state and does no I/O. Goal progress is
tracked on private copies, so a fixed-amount goal stops receiving money
once its target is met inside the horizon.

Base date
---------
With ``anchor="january"`` (default) the horizon starts on January 1 of the
reference date's year, so multi-month reports share a calendar anchor.
With ``anchor="start"`` it starts on the month containing the reference date.

Example
-------
>>> from datetime import date
>>> from cashplan import Income, Expense, UserPlan, generate_forecast
>>> plan = UserPlan(
...     income=[Income(id="i", name="Salary", amount=5_000, start_date="2024-01-01")],
...     expenses=[Expense(id="e", name="Rent", amount=3_000, due_date="2024-01-01", recurring=True)],
...     current_balance=1_000,
... )
>>> result = generate_forecast(plan, {"months": 3, "start_date": date(2024, 1, 1)})
>>> [m.ending_balance for m in result.monthly_forecasts]
[3000.0, 5000.0, 7000.0]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import ForecastConfig, coerce_config
from .constants import CONSERVATIVE_EXPENSE_FACTOR, CONSERVATIVE_INCOME_FACTOR
from .expenses import expense_amount_for_month, is_expense_active_in_month
from .goals import GoalAllocation, allocate_goals
from .income import income_amount_for_month, is_income_active_in_month
from .plan import UserPlan
from .progress import GoalProgress, project_goal_progress
from .types import ForecastSummaryDict, LineItemDict, MonthlyForecastDict
from .utils import add_months, month_index, month_key, month_start

__all__ = [
    "LineItem",
    "MonthlyForecast",
    "ForecastSummary",
    "ForecastResult",
    "forecast_base_date",
    "generate_forecast",
]

logger = logging.getLogger(__name__)

# Relative slack before an over-budget allocation list is rescaled
_BUDGET_TOLERANCE = 1e-9


# ---------------------------------------------------------------------------
# Output records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineItem:
    """One income, expense or goal line within a month."""
    id: str
    name: str
    amount: float

    def to_dict(self) -> LineItemDict:
        return {"id": self.id, "name": self.name, "amount": self.amount}


@dataclass(frozen=True)
class MonthlyForecast:
    """
    One projected month.

    Attributes
    ----------
    month : str
        ``YYYY-MM`` key.
    starting_balance, ending_balance : float
        ``ending_balance == starting_balance + net_change``.
    income, expenses, goal_contributions : float
        Totals of the three breakdowns.
    net_change : float
        ``income - expenses - goal_contributions``.
    income_breakdown, expense_breakdown, goal_breakdown : tuple of LineItem
    """
    month: str
    starting_balance: float
    income: float
    expenses: float
    goal_contributions: float
    net_change: float
    ending_balance: float
    income_breakdown: Tuple[LineItem, ...] = ()
    expense_breakdown: Tuple[LineItem, ...] = ()
    goal_breakdown: Tuple[LineItem, ...] = ()

    @property
    def surplus(self) -> float:
        """Income minus expenses, before goal contributions."""
        return self.income - self.expenses

    def goal_amount(self, goal_id: str) -> float:
        """Amount routed to *goal_id* this month (0 if none)."""
        return sum(line.amount for line in self.goal_breakdown if line.id == goal_id)

    def to_dict(self) -> MonthlyForecastDict:
        return {
            "month": self.month,
            "starting_balance": self.starting_balance,
            "income": self.income,
            "expenses": self.expenses,
            "goal_contributions": self.goal_contributions,
            "net_change": self.net_change,
            "ending_balance": self.ending_balance,
            "income_breakdown": [line.to_dict() for line in self.income_breakdown],
            "expense_breakdown": [line.to_dict() for line in self.expense_breakdown],
            "goal_breakdown": [line.to_dict() for line in self.goal_breakdown],
        }


@dataclass(frozen=True)
class ForecastSummary:
    """Aggregate statistics over the horizon."""
    total_income: float
    total_expenses: float
    total_goal_contributions: float
    final_balance: float
    average_monthly_income: float
    average_monthly_expenses: float
    average_monthly_net: float
    lowest_balance: float
    highest_balance: float
    months_with_negative_balance: int

    def to_dict(self) -> ForecastSummaryDict:
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "total_goal_contributions": self.total_goal_contributions,
            "final_balance": self.final_balance,
            "average_monthly_income": self.average_monthly_income,
            "average_monthly_expenses": self.average_monthly_expenses,
            "average_monthly_net": self.average_monthly_net,
            "lowest_balance": self.lowest_balance,
            "highest_balance": self.highest_balance,
            "months_with_negative_balance": self.months_with_negative_balance,
        }


@dataclass(frozen=True)
class ForecastResult:
    """
    Output of one forecast run.

    Attributes
    ----------
    monthly_forecasts : tuple of MonthlyForecast
        Chronological, one per horizon month.
    summary : ForecastSummary
    goal_progress : tuple of GoalProgress
        One per plan goal, in plan order.
    base_date : date
        First day of the first projected month.
    config : ForecastConfig
        Validated configuration of the run.
    """
    monthly_forecasts: Tuple[MonthlyForecast, ...]
    summary: ForecastSummary
    goal_progress: Tuple[GoalProgress, ...]
    base_date: date
    config: ForecastConfig

    @property
    def months(self) -> int:
        return len(self.monthly_forecasts)

    def progress_for(self, goal_id: str) -> Optional[GoalProgress]:
        """Projection of *goal_id*, or None if the plan has no such goal."""
        for progress in self.goal_progress:
            if progress.id == goal_id:
                return progress
        return None

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain-dictionary form, ready for ``json.dump``.

        Returns
        -------
        dict
            Keys ``monthly_forecasts``, ``summary``, ``goal_progress``,
            ``base_date`` (ISO) and ``config``.
        """
        return {
            "monthly_forecasts": [m.to_dict() for m in self.monthly_forecasts],
            "summary": self.summary.to_dict(),
            "goal_progress": [g.to_dict() for g in self.goal_progress],
            "base_date": self.base_date.isoformat(),
            "config": self.config.model_dump(mode="json"),
        }

    def to_frame(self) -> pd.DataFrame:
        """
        Monthly totals as a DataFrame indexed by first-of-month timestamps.

        Columns: starting_balance, income, expenses, goal_contributions,
        net_change, ending_balance.
        """
        columns = [
            "starting_balance", "income", "expenses",
            "goal_contributions", "net_change", "ending_balance",
        ]
        rows = [[getattr(m, c) for c in columns] for m in self.monthly_forecasts]
        index = month_index(self.base_date, self.months)
        index.name = "month"
        return pd.DataFrame(rows, index=index, columns=columns, dtype=float)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def forecast_base_date(config: ForecastConfig) -> date:
    """First day of the first projected month for *config*."""
    if config.anchor == "january":
        return date(config.start_date.year, 1, 1)
    return month_start(config.start_date)


def _income_lines(plan: UserPlan, month: date, factor: float) -> List[LineItem]:
    lines = []
    for income in plan.income:
        if is_income_active_in_month(income, month):
            lines.append(LineItem(income.id, income.name, income_amount_for_month(income) * factor))
    return lines


def _expense_lines(plan: UserPlan, month: date, factor: float) -> List[LineItem]:
    lines = []
    for expense in plan.expenses:
        if not is_expense_active_in_month(expense, month):
            continue
        amount = expense_amount_for_month(expense) * factor
        if amount < 0:
            logger.warning(
                "Expense %r computed negative amount %.2f in %s; clamped to 0",
                expense.id, amount, month_key(month),
            )
            amount = 0.0
        lines.append(LineItem(expense.id, expense.name, amount))
    return lines


def _fit_to_budget(allocations: Sequence[GoalAllocation], budget: float) -> List[GoalAllocation]:
    """Scale allocations down proportionally if they would overdraw *budget*."""
    total = sum(a.amount for a in allocations)
    if total <= budget * (1 + _BUDGET_TOLERANCE):
        return list(allocations)
    ratio = budget / total
    logger.warning(
        "Goal allocations %.2f exceed budget %.2f; scaling by %.6f", total, budget, ratio
    )
    return [replace(a, amount=a.amount * ratio) for a in allocations]


def _summarize(forecasts: Sequence[MonthlyForecast], months: int) -> ForecastSummary:
    income = np.array([m.income for m in forecasts], dtype=float)
    expenses = np.array([m.expenses for m in forecasts], dtype=float)
    contributions = np.array([m.goal_contributions for m in forecasts], dtype=float)
    balances = np.array([m.ending_balance for m in forecasts], dtype=float)

    total_income = float(income.sum())
    total_expenses = float(expenses.sum())
    total_contributions = float(contributions.sum())

    return ForecastSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        total_goal_contributions=total_contributions,
        final_balance=float(balances[-1]),
        average_monthly_income=total_income / months,
        average_monthly_expenses=total_expenses / months,
        average_monthly_net=(total_income - total_expenses - total_contributions) / months,
        lowest_balance=float(balances.min()),
        highest_balance=float(balances.max()),
        months_with_negative_balance=int((balances < 0).sum()),
    )


def generate_forecast(
    plan: UserPlan,
    config: Union[ForecastConfig, Mapping[str, Any]],
) -> ForecastResult:
    """
    Run the month-by-month forecast.

    Parameters
    ----------
    plan : UserPlan
        Snapshot to project. Not modified.
    config : ForecastConfig or mapping
        Run configuration; a mapping is validated into a ``ForecastConfig``.

    Returns
    -------
    ForecastResult

    Raises
    ------
    ValidationError
        If *config* is structurally invalid (for example ``months <= 0`` or
        a malformed ``start_date``).

    Notes
    -----
    Degenerate financial states (zero income, negative balances, no goals,
    overdue goals) never raise; they are reported in the result.
    """
    cfg = coerce_config(config)
    base = forecast_base_date(cfg)
    starting_balance = plan.current_balance if cfg.starting_balance is None else cfg.starting_balance
    income_factor = CONSERVATIVE_INCOME_FACTOR if cfg.conservative_mode else 1.0
    expense_factor = CONSERVATIVE_EXPENSE_FACTOR if cfg.conservative_mode else 1.0

    logger.info(
        "Forecasting %d months from %s (anchor=%s, conservative=%s)",
        cfg.months, month_key(base), cfg.anchor, cfg.conservative_mode,
    )

    # Goal progress within this run only; the plan keeps its own amounts
    saved = {goal.id: goal.current_amount for goal in plan.goals}

    forecasts: List[MonthlyForecast] = []
    balance = float(starting_balance)

    for i in range(cfg.months):
        month = add_months(base, i)

        income_lines = _income_lines(plan, month, income_factor)
        expense_lines = _expense_lines(plan, month, expense_factor)
        income = sum((line.amount for line in income_lines), 0.0)
        expenses = sum((line.amount for line in expense_lines), 0.0)

        goal_lines: List[LineItem] = []
        if cfg.include_goal_contributions and plan.goals:
            surplus = income - expenses
            budget = min(surplus, balance + surplus)
            if budget > 0:
                goals_now = [replace(g, current_amount=saved[g.id]) for g in plan.goals]
                allocations = _fit_to_budget(allocate_goals(goals_now, budget, month), budget)
                for allocation in allocations:
                    saved[allocation.goal_id] += allocation.amount
                    goal_lines.append(LineItem(allocation.goal_id, allocation.name, allocation.amount))

        contributions = sum((line.amount for line in goal_lines), 0.0)
        net_change = income - expenses - contributions
        ending_balance = balance + net_change

        forecasts.append(MonthlyForecast(
            month=month_key(month),
            starting_balance=balance,
            income=income,
            expenses=expenses,
            goal_contributions=contributions,
            net_change=net_change,
            ending_balance=ending_balance,
            income_breakdown=tuple(income_lines),
            expense_breakdown=tuple(expense_lines),
            goal_breakdown=tuple(goal_lines),
        ))
        logger.debug(
            "%s: income=%.2f expenses=%.2f goals=%.2f ending=%.2f",
            month_key(month), income, expenses, contributions, ending_balance,
        )
        balance = ending_balance

    summary = _summarize(forecasts, cfg.months)
    progress = project_goal_progress(plan.goals, forecasts, reference_date=cfg.start_date)

    return ForecastResult(
        monthly_forecasts=tuple(forecasts),
        summary=summary,
        goal_progress=progress,
        base_date=base,
        config=cfg,
    )
