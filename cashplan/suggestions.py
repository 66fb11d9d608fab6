"""
Rule-based financial suggestions.

Purpose
-------
Runs a forecast of the plan and evaluates a fixed set of rules against it
(behind-schedule goals, dominant expense category, negative balances,
emergency fund coverage, savings rate, goal acceleration, debt payoff,
investing readiness). Each triggered rule yields one ``Suggestion`` with
an estimated monthly impact.

Results are filtered by focus area and minimum impact, sorted by priority
(critical first) then by absolute impact, and truncated.

Example
-------
>>> from datetime import date
>>> from cashplan.suggestions import generate_suggestions
>>> for s in generate_suggestions(plan, date(2024, 1, 1)):
...     print(s.priority.value, s.title)
critical Address Negative Cash Flow
high Build Your Emergency Fund
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import SuggestionConfig, default_config
from .constants import (
    ACCELERATE_PROGRESS_CEILING,
    EMERGENCY_FUND_MONTHS,
    EMERGENCY_FUND_READY_SHARE,
    INVESTING_MIN_MONTHLY_NET,
    TARGET_SAVINGS_RATE,
    TOP_CATEGORY_SHARE_THRESHOLD,
)
from .exceptions import ValidationError
from .expenses import Expense, classify_expense, expense_amount_for_month
from .forecast import ForecastResult, generate_forecast
from .frequency import monthly_amount
from .goals import Goal
from .plan import UserPlan
from .progress import GoalProgress
from .types import ExpenseCategory, ExpenseSchedule, Frequency, GoalCategory, GoalType, Priority
from .utils import format_currency

__all__ = ["Suggestion", "SuggestionRule", "RULES", "generate_suggestions"]

logger = logging.getLogger(__name__)

# Fractions used to size suggested amounts
_CATEGORY_REDUCTION = 0.1
_ACCELERATE_REMAINING_SHARE = 0.2
_ACCELERATE_NET_SHARE = 0.5
_DEBT_NET_SHARE = 0.3
_INVEST_NET_SHARE = 0.4


@dataclass(frozen=True)
class Suggestion:
    """
    One actionable recommendation.

    Attributes
    ----------
    id : str
        Id of the rule that produced it.
    category : {"income", "expense", "goal", "general"}
    priority : Priority
    estimated_impact : float
        Monthly amount the suggestion is about.
    """
    id: str
    title: str
    description: str
    category: str
    priority: Priority
    estimated_impact: float
    actionable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority.value,
            "estimated_impact": self.estimated_impact,
            "actionable": self.actionable,
        }


@dataclass(frozen=True)
class _Context:
    """Plan, forecast and derived monthly rates shared by all rules."""
    plan: UserPlan
    forecast: ForecastResult
    monthly_income: float
    monthly_expenses: float
    symbol: Optional[str]

    def money(self, value: float) -> str:
        return format_currency(value, symbol=self.symbol)

    @property
    def average_net(self) -> float:
        return self.forecast.summary.average_monthly_net

    def active_goal(self, category: GoalCategory) -> Optional[Goal]:
        for goal in self.plan.goals:
            if goal.is_active and goal.category is category:
                return goal
        return None

    def behind_goals(self) -> List[GoalProgress]:
        return [p for p in self.forecast.goal_progress if not p.on_track]


@dataclass(frozen=True)
class SuggestionRule:
    id: str
    category: str
    priority: Priority
    condition: Callable[[_Context], bool]
    build: Callable[[_Context], Tuple[str, str, float]]


def _monthly_rate(item: Any) -> float:
    """Monthly-equivalent amount of an income or expense item."""
    if isinstance(item, Expense):
        schedule = classify_expense(item)
        if schedule is ExpenseSchedule.INSTALLMENT:
            return expense_amount_for_month(item)
        if schedule is ExpenseSchedule.ONE_TIME:
            # Not a monthly cost
            return 0.0
    return monthly_amount(item.amount, item.frequency or Frequency.MONTHLY)


def _recurring_total(items: Iterable[Any]) -> float:
    """Monthly-equivalent total of active income or expense items."""
    return sum((_monthly_rate(item) for item in items if item.is_active), 0.0)


def _category_shares(ctx: _Context) -> List[Tuple[ExpenseCategory, float, float]]:
    """(category, monthly amount, percent of total), largest first."""
    totals: Dict[ExpenseCategory, float] = defaultdict(float)
    for expense in ctx.plan.expenses:
        if expense.is_active:
            totals[expense.category] += _monthly_rate(expense)
    grand_total = sum(totals.values())
    shares = [
        (category, amount, amount / grand_total * 100 if grand_total > 0 else 0.0)
        for category, amount in totals.items()
        if amount > 0
    ]
    return sorted(shares, key=lambda s: s[1], reverse=True)


def _savings_rate(ctx: _Context) -> float:
    return ctx.average_net / ctx.monthly_income * 100


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _increase_income(ctx: _Context) -> Tuple[str, str, float]:
    shortfall = sum(p.target_amount - p.projected_amount for p in ctx.behind_goals())
    needed = shortfall / ctx.forecast.months
    return (
        "Consider Increasing Your Income",
        f"To stay on track with your goals, consider increasing your monthly income "
        f"by {ctx.money(needed)}. This could be through a side hustle, freelancing, "
        f"or asking for a raise.",
        needed,
    )


def _reduce_top_category(ctx: _Context) -> Tuple[str, str, float]:
    category, amount, share = _category_shares(ctx)[0]
    reduction = amount * _CATEGORY_REDUCTION
    label = category.value.replace("_", " ")
    return (
        f"Reduce {label.capitalize()} Spending",
        f"Your {label} expenses account for {share:.1f}% of your total spending. "
        f"Consider reducing this by {ctx.money(reduction)} per month to improve "
        f"your financial position.",
        reduction,
    )


def _negative_balance(ctx: _Context) -> Tuple[str, str, float]:
    months = ctx.forecast.summary.months_with_negative_balance
    deficit = abs(ctx.average_net)
    return (
        "Address Negative Cash Flow",
        f"Your forecast shows {months} months with negative balance. Consider "
        f"reducing expenses by {ctx.money(deficit)} per month or increasing income "
        f"to avoid financial stress.",
        deficit,
    )


def _emergency_fund_short(ctx: _Context) -> bool:
    fund = ctx.active_goal(GoalCategory.EMERGENCY_FUND)
    return fund is None or fund.target_amount < ctx.monthly_expenses * EMERGENCY_FUND_MONTHS


def _build_emergency_fund(ctx: _Context) -> Tuple[str, str, float]:
    fund = ctx.active_goal(GoalCategory.EMERGENCY_FUND)
    recommended = ctx.monthly_expenses * EMERGENCY_FUND_MONTHS
    shortfall = recommended - (fund.current_amount if fund else 0.0)
    per_month = shortfall / 12
    return (
        "Build Your Emergency Fund",
        f"Financial experts recommend having {EMERGENCY_FUND_MONTHS} months of expenses "
        f"saved. You need {ctx.money(shortfall)} more to reach this goal. Consider "
        f"saving {ctx.money(per_month)} per month.",
        per_month,
    )


def _improve_savings_rate(ctx: _Context) -> Tuple[str, str, float]:
    rate = _savings_rate(ctx)
    additional = ctx.monthly_income * (TARGET_SAVINGS_RATE - rate) / 100
    return (
        "Improve Your Savings Rate",
        f"Your current savings rate is {rate:.1f}%. Financial experts recommend saving "
        f"at least {TARGET_SAVINGS_RATE:.0f}% of income. Try to save an additional "
        f"{ctx.money(additional)} per month.",
        additional,
    )


def _accelerable(ctx: _Context) -> Optional[GoalProgress]:
    for progress in ctx.forecast.goal_progress:
        if progress.goal_type is not GoalType.FIXED_AMOUNT:
            continue
        if progress.on_track and progress.projected_progress < ACCELERATE_PROGRESS_CEILING:
            return progress
    return None


def _accelerate_goal(ctx: _Context) -> Tuple[str, str, float]:
    progress = _accelerable(ctx)
    remaining = progress.target_amount - progress.projected_amount
    extra = min(remaining * _ACCELERATE_REMAINING_SHARE, ctx.average_net * _ACCELERATE_NET_SHARE)
    return (
        "Accelerate Your Goal Progress",
        f'You\'re on track with "{progress.name}" but could reach it faster. Consider '
        f"contributing an extra {ctx.money(extra)} per month to complete it ahead of "
        f"schedule.",
        extra,
    )


def _has_debt(ctx: _Context) -> bool:
    has_goal = ctx.active_goal(GoalCategory.DEBT_PAYOFF) is not None
    has_payments = any(
        e.is_active and e.category is ExpenseCategory.DEBT_PAYMENTS for e in ctx.plan.expenses
    )
    return has_goal and has_payments


def _prioritize_debt(ctx: _Context) -> Tuple[str, str, float]:
    extra = ctx.average_net * _DEBT_NET_SHARE
    return (
        "Prioritize Debt Payoff",
        f"Consider allocating {ctx.money(extra)} extra per month toward debt repayment. "
        f"Paying off high-interest debt should be a priority to reduce long-term "
        f"financial burden.",
        extra,
    )


def _ready_to_invest(ctx: _Context) -> bool:
    fund_ready = any(
        g.category is GoalCategory.EMERGENCY_FUND
        and g.current_amount >= g.target_amount * EMERGENCY_FUND_READY_SHARE
        for g in ctx.plan.goals
    )
    return (
        fund_ready
        and ctx.active_goal(GoalCategory.INVESTMENT) is None
        and ctx.average_net > INVESTING_MIN_MONTHLY_NET
    )


def _start_investing(ctx: _Context) -> Tuple[str, str, float]:
    amount = ctx.average_net * _INVEST_NET_SHARE
    return (
        "Consider Starting to Invest",
        f"With a solid emergency fund in place, consider investing {ctx.money(amount)} "
        f"per month for long-term wealth building. Look into index funds or retirement "
        f"accounts.",
        amount,
    )


RULES: Tuple[SuggestionRule, ...] = (
    SuggestionRule(
        "increase-income-for-goals", "income", Priority.HIGH,
        lambda ctx: bool(ctx.behind_goals()) and ctx.monthly_income > 0,
        _increase_income,
    ),
    SuggestionRule(
        "reduce-top-expense-category", "expense", Priority.MEDIUM,
        lambda ctx: bool(_category_shares(ctx))
        and _category_shares(ctx)[0][2] > TOP_CATEGORY_SHARE_THRESHOLD,
        _reduce_top_category,
    ),
    SuggestionRule(
        "negative-cash-flow-warning", "general", Priority.CRITICAL,
        lambda ctx: ctx.forecast.summary.months_with_negative_balance > 0,
        _negative_balance,
    ),
    SuggestionRule(
        "build-emergency-fund", "goal", Priority.HIGH,
        _emergency_fund_short,
        _build_emergency_fund,
    ),
    SuggestionRule(
        "improve-savings-rate", "general", Priority.MEDIUM,
        lambda ctx: ctx.monthly_income > 0 and _savings_rate(ctx) < TARGET_SAVINGS_RATE,
        _improve_savings_rate,
    ),
    SuggestionRule(
        "accelerate-goal-progress", "goal", Priority.MEDIUM,
        lambda ctx: _accelerable(ctx) is not None and ctx.average_net > 0,
        _accelerate_goal,
    ),
    SuggestionRule(
        "prioritize-debt-payoff", "goal", Priority.HIGH,
        _has_debt,
        _prioritize_debt,
    ),
    SuggestionRule(
        "consider-investing", "goal", Priority.MEDIUM,
        _ready_to_invest,
        _start_investing,
    ),
)


def _coerce_suggestion_config(config: Union[SuggestionConfig, Mapping[str, Any], None]) -> SuggestionConfig:
    if config is None:
        return SuggestionConfig()
    if isinstance(config, SuggestionConfig):
        return config
    try:
        return SuggestionConfig.model_validate(dict(config))
    except ValueError as exc:
        raise ValidationError(f"Invalid suggestion config: {exc}") from exc


def generate_suggestions(
    plan: UserPlan,
    start_date: Any,
    config: Union[SuggestionConfig, Mapping[str, Any], None] = None,
    *,
    symbol: Optional[str] = None,
) -> List[Suggestion]:
    """
    Evaluate every rule against a 12-month forecast of *plan*.

    Parameters
    ----------
    plan : UserPlan
    start_date : date or str
        Reference date of the underlying forecast.
    config : SuggestionConfig or mapping, optional
    symbol : str, optional
        Currency symbol used in descriptions.

    Returns
    -------
    list of Suggestion
        Highest priority first, at most ``config.max_suggestions``.
    """
    cfg = _coerce_suggestion_config(config)
    forecast = generate_forecast(
        plan, default_config(start_date, conservative_mode=cfg.conservative_mode)
    )
    ctx = _Context(
        plan=plan,
        forecast=forecast,
        monthly_income=_recurring_total(plan.income),
        monthly_expenses=_recurring_total(plan.expenses),
        symbol=symbol,
    )
    focus = set(cfg.focus_areas)

    suggestions = []
    for rule in RULES:
        if focus and rule.category not in focus:
            continue
        if not rule.condition(ctx):
            continue
        title, description, impact = rule.build(ctx)
        if abs(impact) < cfg.min_impact_threshold:
            logger.debug("Rule %s below impact threshold (%.2f)", rule.id, impact)
            continue
        suggestions.append(Suggestion(
            id=rule.id,
            title=title,
            description=description,
            category=rule.category,
            priority=rule.priority,
            estimated_impact=impact,
        ))

    suggestions.sort(key=lambda s: (-s.priority.rank, -abs(s.estimated_impact)))
    return suggestions[: cfg.max_suggestions]
