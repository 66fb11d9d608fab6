"""
Monthly goal allocation schedule.

Turns a forecast run into a month-by-month savings plan: how much of each
month's surplus goes to which goal, whether that goal is on track, and a
one-line instruction for the month.

Example
-------
>>> from datetime import date
>>> from cashplan.schedule import build_allocation_schedule
>>> schedule = build_allocation_schedule(plan, {"start_date": date(2024, 1, 1)})
>>> schedule.months[0].guidance
'Allocate $1,000.00 to Emergency Fund.'
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .config import ForecastConfig
from .forecast import ForecastResult, MonthlyForecast, generate_forecast
from .plan import UserPlan
from .types import Priority
from .utils import format_currency

__all__ = [
    "ScheduledAllocation",
    "MonthlySchedule",
    "ScheduleSummary",
    "AllocationSchedule",
    "build_allocation_schedule",
    "month_guidance",
]

NO_SURPLUS_GUIDANCE = "No surplus available for goal contributions this month."
NO_GOALS_GUIDANCE = "Surplus available but no active goals to allocate to."


@dataclass(frozen=True)
class ScheduledAllocation:
    """One goal's share of a month's surplus, with context for display."""
    goal_id: str
    goal_name: str
    amount: float
    priority: Priority
    priority_order: Optional[int]
    is_on_track: bool
    remaining_amount: float
    target_date: Optional[date]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id": self.goal_id,
            "goal_name": self.goal_name,
            "amount": self.amount,
            "priority": self.priority.value,
            "priority_order": self.priority_order,
            "is_on_track": self.is_on_track,
            "remaining_amount": self.remaining_amount,
            "target_date": self.target_date.isoformat() if self.target_date else None,
        }


@dataclass(frozen=True)
class MonthlySchedule:
    month: str
    total_surplus: float
    allocations: Tuple[ScheduledAllocation, ...]
    guidance: str

    @property
    def total_allocated(self) -> float:
        return sum(a.amount for a in self.allocations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "total_surplus": self.total_surplus,
            "allocations": [a.to_dict() for a in self.allocations],
            "guidance": self.guidance,
        }


@dataclass(frozen=True)
class ScheduleSummary:
    """
    Totals over the schedule.

    ``goals_on_track`` and ``goals_behind_schedule`` count allocation
    entries, so a goal funded in six months counts six times.
    """
    total_allocated: float
    goals_on_track: int
    goals_behind_schedule: int
    average_monthly_allocation: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_allocated": self.total_allocated,
            "goals_on_track": self.goals_on_track,
            "goals_behind_schedule": self.goals_behind_schedule,
            "average_monthly_allocation": self.average_monthly_allocation,
        }


@dataclass(frozen=True)
class AllocationSchedule:
    months: Tuple[MonthlySchedule, ...]
    summary: ScheduleSummary
    forecast: ForecastResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "months": [m.to_dict() for m in self.months],
            "summary": self.summary.to_dict(),
        }


def month_guidance(
    surplus: float,
    allocations: Sequence[ScheduledAllocation],
    symbol: Optional[str] = None,
) -> str:
    """
    One-line instruction for a month.

    Parameters
    ----------
    surplus : float
        Income minus expenses for the month.
    allocations : sequence of ScheduledAllocation
    symbol : str, optional
        Currency symbol (default ``$``).

    Returns
    -------
    str
    """
    if surplus <= 0:
        return NO_SURPLUS_GUIDANCE
    if not allocations:
        return NO_GOALS_GUIDANCE

    # First of equal maxima wins
    top = allocations[0]
    for allocation in allocations[1:]:
        if allocation.amount > top.amount:
            top = allocation

    if len(allocations) == 1:
        return f"Allocate {format_currency(top.amount, symbol=symbol)} to {top.goal_name}."
    total = sum(a.amount for a in allocations)
    return (
        f"Allocate {format_currency(total, symbol=symbol)} across {len(allocations)} goals. "
        f"Focus on {top.goal_name} ({format_currency(top.amount, symbol=symbol)})."
    )


def _schedule_month(
    month: MonthlyForecast,
    plan: UserPlan,
    forecast: ForecastResult,
    symbol: Optional[str],
) -> MonthlySchedule:
    goals = plan.goal_by_id()
    allocations = []
    for line in month.goal_breakdown:
        goal = goals[line.id]
        progress = forecast.progress_for(goal.id)
        allocations.append(ScheduledAllocation(
            goal_id=line.id,
            goal_name=line.name,
            amount=line.amount,
            priority=goal.priority,
            priority_order=goal.priority_order,
            is_on_track=bool(progress and progress.on_track),
            remaining_amount=goal.remaining_amount,
            target_date=goal.target_date,
        ))
    return MonthlySchedule(
        month=month.month,
        total_surplus=month.surplus,
        allocations=tuple(allocations),
        guidance=month_guidance(month.surplus, allocations, symbol),
    )


def build_allocation_schedule(
    plan: UserPlan,
    config: Union[ForecastConfig, Mapping[str, Any]],
    *,
    symbol: Optional[str] = None,
) -> AllocationSchedule:
    """
    Run a forecast and lay out its goal allocations month by month.

    Parameters
    ----------
    plan : UserPlan
    config : ForecastConfig or mapping
    symbol : str, optional
        Currency symbol used in guidance text.

    Returns
    -------
    AllocationSchedule
    """
    forecast = generate_forecast(plan, config)
    months = tuple(_schedule_month(m, plan, forecast, symbol) for m in forecast.monthly_forecasts)

    entries = [a for m in months for a in m.allocations]
    total = sum(a.amount for a in entries)
    on_track = sum(1 for a in entries if a.is_on_track)
    summary = ScheduleSummary(
        total_allocated=total,
        goals_on_track=on_track,
        goals_behind_schedule=len(entries) - on_track,
        average_monthly_allocation=total / max(len(months), 1),
    )
    return AllocationSchedule(months=months, summary=summary, forecast=forecast)
