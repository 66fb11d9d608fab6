"""
Serialization module for CashPlan persistence.

Purpose
-------
JSON loading and saving of user plans, and JSON export of forecast
results, allocation schedules and suggestions.

Accepted plan layouts
---------------------
- CashPlan files: ``{"schema_version": ..., "plan": {...}}``
- Planner app exports: ``{"metadata": {"version": ...}, "userPlan": {...}}``
- A bare plan object: ``{"income": [...], "expenses": [...], ...}``

Record keys may be snake_case or camelCase; unknown keys are ignored.

Example
-------
>>> from pathlib import Path
>>> from cashplan.serialization import load_plan, save_plan
>>> plan = load_plan(Path("plan.json"))
>>> save_plan(plan, Path("copy.json"))
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Tuple
from pathlib import Path
import json
import warnings

from pydantic import ValidationError as PydanticValidationError

from .config import PlanConfig
from .exceptions import ConfigurationError, ValidationError
from .expenses import Expense
from .forecast import ForecastResult
from .goals import Goal
from .income import Income
from .plan import UserPlan

__all__ = [
    "SCHEMA_VERSION",
    "plan_from_dict",
    "plan_to_dict",
    "load_plan",
    "save_plan",
    "result_to_dict",
    "save_result",
    "save_json",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Plan Serialization
# ---------------------------------------------------------------------------

def _unwrap(data: Mapping[str, Any]) -> Tuple[Mapping[str, Any], str]:
    """Return (plan mapping, schema version) for any accepted layout."""
    if "userPlan" in data:
        metadata = data.get("metadata") or {}
        return data["userPlan"], str(metadata.get("version", "0.0.0"))
    if "plan" in data:
        return data["plan"], str(data.get("schema_version", "0.0.0"))
    return data, str(data.get("schema_version", SCHEMA_VERSION))


def plan_from_dict(data: Mapping[str, Any]) -> UserPlan:
    """
    Create a UserPlan from its dictionary representation.

    Parameters
    ----------
    data : dict
        Any accepted layout (see module docstring).

    Returns
    -------
    UserPlan

    Raises
    ------
    ValidationError
        If a record is missing fields or violates an invariant.
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Plan must be a JSON object, got {type(data).__name__}")

    plan_data, schema_version = _unwrap(data)
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Plan schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )

    try:
        config = PlanConfig.model_validate(plan_data)
    except PydanticValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(f"Invalid plan: {details}") from exc
    return config.to_plan()


def _income_to_dict(income: Income) -> Dict[str, Any]:
    return {
        "id": income.id,
        "name": income.name,
        "amount": income.amount,
        "frequency": getattr(income.frequency, "value", income.frequency),
        "start_date": income.start_date.isoformat(),
        "end_date": income.end_date.isoformat() if income.end_date else None,
        "is_active": income.is_active,
        "description": income.description,
    }


def _expense_to_dict(expense: Expense) -> Dict[str, Any]:
    return {
        "id": expense.id,
        "name": expense.name,
        "amount": expense.amount,
        "due_date": expense.due_date.isoformat(),
        "category": expense.category.value,
        "recurring": expense.recurring,
        "frequency": getattr(expense.frequency, "value", expense.frequency),
        "priority": expense.priority.value,
        "is_active": expense.is_active,
        "is_installment": expense.is_installment,
        "installment_months": expense.installment_months,
        "installment_start_month": expense.installment_start_month,
        "description": expense.description,
    }


def _goal_to_dict(goal: Goal) -> Dict[str, Any]:
    return {
        "id": goal.id,
        "name": goal.name,
        "target_amount": goal.target_amount,
        "target_date": goal.target_date.isoformat(),
        "current_amount": goal.current_amount,
        "category": goal.category.value,
        "priority": goal.priority.value,
        "priority_order": goal.priority_order,
        "goal_type": goal.goal_type.value,
        "is_active": goal.is_active,
        "description": goal.description,
    }


def plan_to_dict(plan: UserPlan) -> Dict[str, Any]:
    """
    Convert a UserPlan to the CashPlan file layout.

    Returns
    -------
    dict
        ``{"schema_version": ..., "plan": {...}}`` with snake_case keys.
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "plan": {
            "id": plan.id,
            "current_balance": plan.current_balance,
            "income": [_income_to_dict(i) for i in plan.income],
            "expenses": [_expense_to_dict(e) for e in plan.expenses],
            "goals": [_goal_to_dict(g) for g in plan.goals],
        },
    }


def load_plan(path: Path) -> UserPlan:
    """
    Load a UserPlan from a JSON file.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or is not valid JSON.
    ValidationError
        If the content is not a valid plan.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read plan file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Plan file {path} is not valid JSON: {exc}") from exc
    return plan_from_dict(data)


def save_json(data: Any, path: Path) -> None:
    """Write *data* as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def save_plan(plan: UserPlan, path: Path) -> None:
    """
    Save a UserPlan to a JSON file.

    Examples
    --------
    >>> from pathlib import Path
    >>> save_plan(plan, Path("plans/household.json"))
    """
    save_json(plan_to_dict(plan), path)


# ---------------------------------------------------------------------------
# ForecastResult Serialization
# ---------------------------------------------------------------------------

def result_to_dict(result: ForecastResult) -> Dict[str, Any]:
    """ForecastResult as a versioned dictionary."""
    return {"schema_version": SCHEMA_VERSION, **result.to_dict()}


def save_result(result: ForecastResult, path: Path) -> None:
    """
    Save a ForecastResult to a JSON file.

    Examples
    --------
    >>> from pathlib import Path
    >>> save_result(result, Path("forecast.json"))
    """
    save_json(result_to_dict(result), path)
