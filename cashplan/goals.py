"""
Savings goals and surplus allocation for CashPlan.

Purpose
-------
Domain-level abstractions for savings goals that compete for the same
monthly surplus, and the allocator that splits that surplus among them.

Goal types
----------
- FIXED_AMOUNT: finite target reached by ``target_date``; stops receiving
  money once ``current_amount >= target_amount``.
- OPEN_ENDED: no finite target; always eligible for a priority-weighted
  share of what is left.

Allocation policy
-----------------
Goals are served strictly in ascending ``priority_order`` (ties keep input
order). Walking that order with the remaining surplus S:

    fixed, on schedule:  max(remaining / months_left, floor), capped at remaining
    fixed, overdue:      S * min(0.6, 0.4 * b), capped at remaining
    open-ended:          S * 0.2 * w

where ``floor = S * 0.1 * w * b``, ``w`` is the priority weight
(critical 1.5, high 1.2, medium 1.0, low 0.7) and ``b`` is the balance
multiplier: the month's total surplus relative to a 1,000 reference,
clamped to [0.5, 1.5]. Each allocation is clamped to S before it is
subtracted, so the total never exceeds the surplus passed in.

Example
-------
>>> from datetime import date
>>> from cashplan.goals import Goal, allocate_goals
>>> fund = Goal(id="g1", name="Emergency Fund", target_amount=12_000,
...             target_date="2024-12-31", priority_order=1)
>>> allocate_goals([fund], 2_000, date(2024, 1, 1))
[GoalAllocation(goal_id='g1', name='Emergency Fund', amount=1000.0)]
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Union

from .constants import (
    BALANCE_MULTIPLIER_BOUNDS,
    BALANCE_REFERENCE_SURPLUS,
    CATCH_UP_BASE_SHARE,
    CATCH_UP_MAX_SHARE,
    MINIMUM_FLOOR_SHARE,
    OPEN_ENDED_BASE_SHARE,
    PRIORITY_WEIGHTS,
    UNORDERED_PRIORITY,
)
from .exceptions import ValidationError
from .types import GoalCategory, GoalType, Priority
from .utils import check_non_negative, coerce_enum, months_until, parse_date

__all__ = [
    "Goal",
    "GoalAllocation",
    "priority_multiplier",
    "balance_multiplier",
    "required_monthly_contribution",
    "allocate_goals",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Goal Definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Goal:
    """
    Savings goal.

    Parameters
    ----------
    id : str
        Unique identifier.
    name : str
        Display name, copied into allocation breakdowns.
    target_amount : float
        Amount to reach. Must be > 0 for fixed-amount goals; may be 0 for
        open-ended goals.
    target_date : date or str
        Date by which a fixed-amount goal should be reached.
    current_amount : float, default 0.0
        Amount already saved; the fixed starting point of a forecast run.
    category : GoalCategory or str, default "other"
        Display tag only.
    priority : Priority or str, default "medium"
        Allocation weight.
    priority_order : int, optional
        Service order, lower first. Goals without one are served last.
    goal_type : GoalType or str, default "fixed_amount"
    is_active : bool, default True
    description : str, default ""

    Examples
    --------
    >>> Goal(id="v", name="Vacation", target_amount=5_000,
    ...      target_date="2025-06-30", priority="low", priority_order=2)
    """
    id: str
    name: str
    target_amount: float
    target_date: date
    current_amount: float = 0.0
    category: Union[GoalCategory, str] = GoalCategory.OTHER
    priority: Union[Priority, str] = Priority.MEDIUM
    priority_order: Optional[int] = None
    goal_type: Union[GoalType, str] = GoalType.FIXED_AMOUNT
    is_active: bool = True
    description: str = ""

    def __post_init__(self):
        """Validate goal parameters."""
        object.__setattr__(self, "goal_type", coerce_enum(GoalType, self.goal_type, name="goal_type"))
        object.__setattr__(self, "priority", coerce_enum(Priority, self.priority, name="priority"))
        object.__setattr__(self, "category", coerce_enum(GoalCategory, self.category, name="category"))
        object.__setattr__(self, "target_date", parse_date(self.target_date, name="target_date"))

        check_non_negative("current_amount", self.current_amount)
        check_non_negative("target_amount", self.target_amount)
        if self.goal_type is GoalType.FIXED_AMOUNT and self.target_amount <= 0:
            raise ValidationError(
                f"Goal {self.id!r}: target_amount must be > 0 for a fixed_amount goal, "
                f"got {self.target_amount}"
            )
        object.__setattr__(self, "target_amount", float(self.target_amount))
        object.__setattr__(self, "current_amount", float(self.current_amount))

    @property
    def is_fixed(self) -> bool:
        return self.goal_type is GoalType.FIXED_AMOUNT

    @property
    def remaining_amount(self) -> float:
        """Amount still missing to reach the target (0 once reached)."""
        return max(0.0, self.target_amount - self.current_amount)

    @property
    def is_complete(self) -> bool:
        """True for a fixed-amount goal whose target is already reached."""
        return self.is_fixed and self.current_amount >= self.target_amount

    @property
    def sort_key(self) -> int:
        return UNORDERED_PRIORITY if self.priority_order is None else int(self.priority_order)


@dataclass(frozen=True)
class GoalAllocation:
    """Money routed to one goal in one month."""
    goal_id: str
    name: str
    amount: float


# ---------------------------------------------------------------------------
# Multipliers
# ---------------------------------------------------------------------------

def priority_multiplier(priority: Union[Priority, str]) -> float:
    """Allocation weight for *priority* (critical > high > medium > low)."""
    return PRIORITY_WEIGHTS[Priority(priority)]


def balance_multiplier(surplus: float) -> float:
    """
    Scale factor for floors and catch-up shares.

    Proportional to the month's surplus relative to
    ``BALANCE_REFERENCE_SURPLUS``, clamped to ``BALANCE_MULTIPLIER_BOUNDS``.
    A thin month makes the allocator gentler, a fat month more aggressive.
    """
    low, high = BALANCE_MULTIPLIER_BOUNDS
    return min(high, max(low, surplus / BALANCE_REFERENCE_SURPLUS))


def required_monthly_contribution(goal: Goal, current_month: date) -> float:
    """
    Even monthly saving that reaches a fixed goal's target by its date.

    Parameters
    ----------
    goal : Goal
    current_month : date
        First day of the month being allocated.

    Returns
    -------
    float
        ``remaining / max(1, ceil(days_to_target / 30.44))``; 0 for open-ended
        or completed goals.
    """
    if not goal.is_fixed or goal.is_complete:
        return 0.0
    return goal.remaining_amount / months_until(goal.target_date, current_month)


# ---------------------------------------------------------------------------
# Allocator
# ---------------------------------------------------------------------------

def _fixed_goal_amount(goal: Goal, remaining_surplus: float, current_month: date, scale: float) -> float:
    remaining = goal.remaining_amount
    weight = priority_multiplier(goal.priority)

    if goal.target_date < current_month:
        # Overdue: catch up with a large slice of what is left
        share = min(CATCH_UP_MAX_SHARE, CATCH_UP_BASE_SHARE * scale)
        return min(remaining, remaining_surplus * share)

    required = required_monthly_contribution(goal, current_month)
    floor = remaining_surplus * MINIMUM_FLOOR_SHARE * weight * scale
    return min(max(required, floor), remaining)


def _open_ended_amount(goal: Goal, remaining_surplus: float) -> float:
    return remaining_surplus * OPEN_ENDED_BASE_SHARE * priority_multiplier(goal.priority)


def allocate_goals(
    goals: Iterable[Goal],
    available_surplus: float,
    current_month: date,
) -> List[GoalAllocation]:
    """
    Split one month's surplus among active goals.

    Parameters
    ----------
    goals : iterable of Goal
        Goals as of the start of the month. Not modified.
    available_surplus : float
        Cash that may be distributed. Nothing outside it is ever touched.
    current_month : date
        First day of the month being allocated.

    Returns
    -------
    list of GoalAllocation
        In service order, positive amounts only. Empty when
        ``available_surplus <= 0``. The sum never exceeds
        ``available_surplus``.

    Notes
    -----
    Strict precedence: a goal's required amount is funded before any later
    goal is considered, so a lower ``priority_order`` is never sunk below its
    need to fund a goal behind it.
    """
    if not (available_surplus > 0 and math.isfinite(available_surplus)):
        return []

    # sorted() is stable, so equal priority_order keeps input order
    ordered = sorted((g for g in goals if g.is_active), key=lambda g: g.sort_key)
    scale = balance_multiplier(available_surplus)
    remaining_surplus = float(available_surplus)
    allocations: List[GoalAllocation] = []

    for goal in ordered:
        if remaining_surplus <= 0:
            break

        if goal.is_fixed:
            if goal.is_complete:
                continue
            amount = _fixed_goal_amount(goal, remaining_surplus, current_month, scale)
        else:
            amount = _open_ended_amount(goal, remaining_surplus)

        amount = min(amount, remaining_surplus)
        if not (amount > 0):
            continue

        allocations.append(GoalAllocation(goal_id=goal.id, name=goal.name, amount=amount))
        remaining_surplus -= amount

    logger.debug(
        "Allocated %.2f of %.2f across %d goals for %s",
        available_surplus - remaining_surplus, available_surplus,
        len(allocations), current_month.isoformat(),
    )
    return allocations
