"""
User plan snapshot.

A ``UserPlan`` bundles everything the forecast engine reads: income
streams, expenses, goals and the current balance. It is immutable, so the
same snapshot can be reused across quick successive forecast runs (for
example toggling conservative mode) without any risk of one run leaking
state into the next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from .exceptions import ValidationError
from .expenses import Expense
from .goals import Goal
from .income import Income
from .utils import check_finite

__all__ = ["UserPlan"]


@dataclass(frozen=True)
class UserPlan:
    """
    Immutable snapshot of a household plan.

    Parameters
    ----------
    income : sequence of Income
    expenses : sequence of Expense
    goals : sequence of Goal
    current_balance : float, default 0.0
        Cash on hand; the default forecast starting balance.
    id : str, optional
        Plan identifier, carried through serialization.

    Notes
    -----
    Sequences are stored as tuples. Record ids must be unique within each
    collection; duplicates would make breakdown lookups ambiguous.

    Examples
    --------
    >>> from cashplan import Income, UserPlan
    >>> plan = UserPlan(
    ...     income=[Income(id="i1", name="Salary", amount=5_000, start_date="2024-01-01")],
    ...     current_balance=1_000,
    ... )
    >>> plan.goals
    ()
    """
    income: Sequence[Income] = field(default_factory=tuple)
    expenses: Sequence[Expense] = field(default_factory=tuple)
    goals: Sequence[Goal] = field(default_factory=tuple)
    current_balance: float = 0.0
    id: Optional[str] = None

    def __post_init__(self) -> None:
        check_finite("current_balance", self.current_balance)
        object.__setattr__(self, "current_balance", float(self.current_balance))
        for attr, kind in (("income", Income), ("expenses", Expense), ("goals", Goal)):
            items = tuple(getattr(self, attr))
            for item in items:
                if not isinstance(item, kind):
                    raise ValidationError(
                        f"UserPlan.{attr} must contain {kind.__name__} records, "
                        f"got {type(item).__name__}"
                    )
            ids = [item.id for item in items]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValidationError(f"Duplicate {attr} ids: {duplicates}")
            object.__setattr__(self, attr, items)

    @property
    def active_goals(self) -> Tuple[Goal, ...]:
        return tuple(g for g in self.goals if g.is_active)

    def goal_by_id(self) -> Dict[str, Goal]:
        """Map of goal id to goal."""
        return {g.id: g for g in self.goals}
