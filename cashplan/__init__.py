"""
CashPlan - Household cash-flow forecasting and goal planning

Projects a household's cash position month by month from irregular income,
recurring/one-time/installment expenses and prioritized savings goals that
compete for the same monthly surplus.

Modules
-------
- frequency    : Monthly-equivalent amounts for every recurrence
- income       : Income records and activity predicate
- expenses     : Expense records, schedules and activity predicate
- goals        : Goal records and the surplus allocator
- forecast     : Month-by-month forecast engine
- progress     : Goal completion projection
- schedule     : Monthly goal allocation plan with guidance
- suggestions  : Rule-based recommendations
- config       : Pydantic configuration models
- serialization: JSON plans and results
- utils        : Shared utilities (validation, month arithmetic, formatting)

"""

from .income import Income
from .expenses import Expense
from .goals import Goal, GoalAllocation, allocate_goals
from .plan import UserPlan
from .config import ForecastConfig, default_config, merge_config
from .forecast import ForecastResult, MonthlyForecast, generate_forecast
from .progress import GoalProgress
from .schedule import build_allocation_schedule
from .suggestions import generate_suggestions
from .types import ExpenseCategory, Frequency, GoalCategory, GoalType, Priority
from .exceptions import CashPlanError, ValidationError
from . import utils
