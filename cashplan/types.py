"""
Type definitions for CashPlan.

Purpose
-------
Provides the enumerations shared by plan records and the TypedDict
definitions for the plain-dictionary form of forecast output. Using
TypedDicts documents the structures that presentation layers and the
JSON writer consume.

Usage
-----
>>> from cashplan.types import Frequency, MonthlyForecastDict
>>> Frequency("one-time") is Frequency.ONE_TIME
True

Type Definitions
----------------
Frequency, Priority, GoalType, ExpenseCategory, GoalCategory
    String enums matching the values stored by the planning UI.

ExpenseSchedule
    Temporal shape of an expense as resolved by the activity predicate.

LineItemDict, MonthlyForecastDict, ForecastSummaryDict, GoalProgressDict
    Dictionary form of the forecast output records.
"""

from enum import Enum
from typing import List, Optional

from typing_extensions import TypedDict

__all__ = [
    "Frequency",
    "Priority",
    "GoalType",
    "ExpenseCategory",
    "GoalCategory",
    "ExpenseSchedule",
    "LineItemDict",
    "MonthlyForecastDict",
    "ForecastSummaryDict",
    "GoalProgressDict",
]


class Frequency(str, Enum):
    """Recurrence of an income or expense amount."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"

    @classmethod
    def _missing_(cls, value):
        # Accept "one-time", "One Time" and similar spellings
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == key:
                    return member
        return None


class Priority(str, Enum):
    """Goal or expense priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal rank, higher is more urgent (low=1 .. critical=4)."""
        return {
            Priority.LOW: 1,
            Priority.MEDIUM: 2,
            Priority.HIGH: 3,
            Priority.CRITICAL: 4,
        }[self]


class GoalType(str, Enum):
    """Allocation behavior of a savings goal."""

    FIXED_AMOUNT = "fixed_amount"
    OPEN_ENDED = "open_ended"


class ExpenseCategory(str, Enum):
    """Display category of an expense (not used for cash-flow math)."""

    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    FOOD = "food"
    UTILITIES = "utilities"
    INSURANCE = "insurance"
    HEALTHCARE = "healthcare"
    ENTERTAINMENT = "entertainment"
    PERSONAL_CARE = "personal_care"
    EDUCATION = "education"
    DEBT_PAYMENTS = "debt_payments"
    SAVINGS = "savings"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    KIDS = "kids"
    MISCELLANEOUS = "miscellaneous"


class GoalCategory(str, Enum):
    """Display category of a goal."""

    EMERGENCY_FUND = "emergency_fund"
    RETIREMENT = "retirement"
    EDUCATION = "education"
    HOME_PURCHASE = "home_purchase"
    VACATION = "vacation"
    DEBT_PAYOFF = "debt_payoff"
    MAJOR_PURCHASE = "major_purchase"
    INVESTMENT = "investment"
    OTHER = "other"


class ExpenseSchedule(str, Enum):
    """
    Temporal shape of an expense.

    Resolved once per expense, in this order: installment, recurring,
    one-time, periodic (explicit non-monthly frequency with the recurring
    flag unspecified). An unspecified flag without such a frequency
    resolves to one-time.
    """

    INSTALLMENT = "installment"
    RECURRING = "recurring"
    ONE_TIME = "one_time"
    PERIODIC = "periodic"


class LineItemDict(TypedDict):
    """Single income, expense or goal line within a month."""

    id: str
    name: str
    amount: float


class MonthlyForecastDict(TypedDict):
    """
    One projected month.

    Examples
    --------
    >>> row: MonthlyForecastDict = result.monthly_forecasts[0].to_dict()
    >>> row["ending_balance"] - row["starting_balance"] == row["net_change"]
    True
    """

    month: str
    starting_balance: float
    income: float
    expenses: float
    goal_contributions: float
    net_change: float
    ending_balance: float
    income_breakdown: List[LineItemDict]
    expense_breakdown: List[LineItemDict]
    goal_breakdown: List[LineItemDict]


class ForecastSummaryDict(TypedDict):
    """Aggregate statistics over the whole horizon."""

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


class GoalProgressDict(TypedDict):
    """Projected state of one goal at the end of the horizon."""

    id: str
    name: str
    goal_type: str
    target_amount: float
    current_amount: float
    projected_amount: float
    projected_progress: float
    total_contributions: float
    estimated_completion_month: Optional[str]
    on_track: bool
    average_monthly_allocation: float
