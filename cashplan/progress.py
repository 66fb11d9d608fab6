"""
Goal progress projection.

Post-processes a run's monthly goal breakdowns into one ``GoalProgress``
per goal: projected amount and percentage at the end of the horizon, the
month the target is reached, and whether that happens by the target date.

Completion month
----------------
Contributions are accumulated month by month on top of ``current_amount``;
the first month where the running total reaches the target is the
completion month. If the horizon ends first, a closed-form estimate is
used instead::

    months_needed = ceil(remaining / average_monthly_allocation)

counted forward from the reference month of the run, which receives the
first contribution. A goal with no
allocations at all gets no estimate and is reported behind schedule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

from .goals import Goal
from .types import GoalProgressDict, GoalType
from .utils import add_months, month_key, month_start, parse_year_month

if TYPE_CHECKING:
    from .forecast import MonthlyForecast

__all__ = ["GoalProgress", "project_goal_progress", "estimate_completion"]


@dataclass(frozen=True)
class GoalProgress:
    """
    Projected state of one goal at the end of a forecast horizon.

    Attributes
    ----------
    projected_amount : float
        ``current_amount + total_contributions``.
    projected_progress : float
        Percentage of target (0 when the target is 0).
    estimated_completion_month : str, optional
        ``YYYY-MM`` in which the target is reached, if derivable.
    on_track : bool
        Always True for open-ended goals.
    average_monthly_allocation : float
        ``total_contributions / months``.
    """
    id: str
    name: str
    goal_type: GoalType
    target_amount: float
    current_amount: float
    projected_amount: float
    projected_progress: float
    total_contributions: float
    estimated_completion_month: Optional[str]
    on_track: bool
    average_monthly_allocation: float

    def to_dict(self) -> GoalProgressDict:
        return {
            "id": self.id,
            "name": self.name,
            "goal_type": self.goal_type.value,
            "target_amount": self.target_amount,
            "current_amount": self.current_amount,
            "projected_amount": self.projected_amount,
            "projected_progress": self.projected_progress,
            "total_contributions": self.total_contributions,
            "estimated_completion_month": self.estimated_completion_month,
            "on_track": self.on_track,
            "average_monthly_allocation": self.average_monthly_allocation,
        }


def estimate_completion(
    goal: Goal,
    average_monthly_allocation: float,
    reference_date: date,
) -> Tuple[Optional[str], bool]:
    """
    Closed-form completion estimate for *goal*.

    Parameters
    ----------
    goal : Goal
    average_monthly_allocation : float
    reference_date : date
        "Now" of the estimate.

    Returns
    -------
    (month, achievable) : (str or None, bool)
        ``month`` is the ``YYYY-MM`` of the estimated completion; None for
        open-ended, already complete or unfunded goals. ``achievable`` is
        whether that month starts on or before ``goal.target_date``.
    """
    if goal.goal_type is GoalType.OPEN_ENDED:
        return None, True
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return None, True
    if not (average_monthly_allocation > 0):
        return None, False

    months_needed = math.ceil(remaining / average_monthly_allocation)
    # The reference month itself receives the first contribution
    completion = add_months(month_start(reference_date), months_needed - 1)
    return month_key(completion), completion <= goal.target_date


def _project_one(
    goal: Goal,
    contributions: Sequence[float],
    months: Sequence[str],
    reference_date: date,
) -> GoalProgress:
    total = float(sum(contributions))
    projected = goal.current_amount + total
    progress = projected / goal.target_amount * 100 if goal.target_amount > 0 else 0.0
    average = total / len(contributions) if contributions else 0.0

    completion_month = None
    if goal.goal_type is GoalType.FIXED_AMOUNT:
        running = goal.current_amount
        for month, amount in zip(months, contributions):
            if amount <= 0:
                continue
            running += amount
            if running >= goal.target_amount:
                completion_month = month
                break

    if goal.goal_type is GoalType.OPEN_ENDED or goal.is_complete:
        on_track = True
    elif completion_month is not None:
        on_track = parse_year_month(completion_month) <= goal.target_date
    else:
        completion_month, on_track = estimate_completion(goal, average, reference_date)

    return GoalProgress(
        id=goal.id,
        name=goal.name,
        goal_type=goal.goal_type,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        projected_amount=projected,
        projected_progress=progress,
        total_contributions=total,
        estimated_completion_month=completion_month,
        on_track=on_track,
        average_monthly_allocation=average,
    )


def project_goal_progress(
    goals: Iterable[Goal],
    monthly_forecasts: Sequence["MonthlyForecast"],
    *,
    reference_date: date,
) -> Tuple[GoalProgress, ...]:
    """
    Project every goal over the allocation history of a run.

    Parameters
    ----------
    goals : iterable of Goal
        Goals as they stood at the start of the run.
    monthly_forecasts : sequence of MonthlyForecast
    reference_date : date
        Base of the closed-form estimate (the run's start date).

    Returns
    -------
    tuple of GoalProgress
        In the order of *goals*.
    """
    months = [m.month for m in monthly_forecasts]
    results = []
    for goal in goals:
        contributions = [m.goal_amount(goal.id) for m in monthly_forecasts]
        results.append(_project_one(goal, contributions, months, reference_date))
    return tuple(results)
