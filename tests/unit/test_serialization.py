"""
Unit tests for serialization.py module.

Tests plan loading from every accepted layout, saving, versioning and
forecast result export.
"""

import json
import warnings
from datetime import date

import pytest

from cashplan.exceptions import ConfigurationError, ValidationError
from cashplan.forecast import generate_forecast
from cashplan.serialization import (
    SCHEMA_VERSION,
    load_plan,
    plan_from_dict,
    plan_to_dict,
    result_to_dict,
    save_plan,
    save_result,
)
from cashplan.types import ExpenseCategory, Frequency, GoalCategory


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestPlanFromDict:
    """Tests for plan_from_dict()."""

    def test_planner_export(self, plan_file):
        plan = load_plan(plan_file)
        assert plan.id == "plan-1"
        assert plan.current_balance == 1000
        (salary,) = plan.income
        assert salary.start_date == date(2024, 1, 1)
        assert salary.frequency is Frequency.MONTHLY
        (rent,) = plan.expenses
        assert rent.category is ExpenseCategory.HOUSING
        assert rent.recurring is True
        (goal,) = plan.goals
        assert goal.category is GoalCategory.EMERGENCY_FUND
        assert goal.priority_order == 1

    def test_matching_version_does_not_warn(self, plan_dict):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            plan_from_dict(plan_dict)

    def test_bare_plan_does_not_warn(self, plan_dict):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            plan = plan_from_dict(plan_dict["userPlan"])
        assert len(plan.income) == 1

    def test_version_mismatch_warns(self, plan_dict):
        plan_dict["metadata"]["version"] = "2.0.0"
        with pytest.warns(UserWarning, match="2.0.0"):
            plan = plan_from_dict(plan_dict)
        assert plan.id == "plan-1"

    def test_missing_field(self, plan_dict):
        del plan_dict["userPlan"]["goals"][0]["targetAmount"]
        with pytest.raises(ValidationError, match="targetAmount|target_amount"):
            plan_from_dict(plan_dict)

    def test_record_invariant(self, plan_dict):
        plan_dict["userPlan"]["goals"][0]["targetAmount"] = 0
        with pytest.raises(ValidationError, match="target_amount"):
            plan_from_dict(plan_dict)

    def test_duplicate_ids(self, plan_dict):
        income = plan_dict["userPlan"]["income"]
        income.append(dict(income[0]))
        with pytest.raises(ValidationError):
            plan_from_dict(plan_dict)

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            plan_from_dict([1, 2, 3])

    def test_expense_without_recurring_flag_is_charged(self):
        plan = plan_from_dict({
            "income": [{"id": "i", "name": "Salary", "amount": 5000, "startDate": "2024-01-01"}],
            "expenses": [{"id": "rent", "name": "Rent", "amount": 3000,
                          "dueDate": "2024-01-01", "frequency": "monthly"}],
        })
        result = generate_forecast(plan, {"start_date": "2024-01-01", "months": 3})
        assert [m.expenses for m in result.monthly_forecasts] == [3_000, 0, 0]


# ---------------------------------------------------------------------------
# Saving
# ---------------------------------------------------------------------------

class TestPlanToDict:
    """Tests for plan_to_dict() and file round-trips."""

    def test_layout(self, full_plan):
        data = plan_to_dict(full_plan)
        assert data["schema_version"] == SCHEMA_VERSION
        plan = data["plan"]
        assert plan["current_balance"] == 2500
        laptop = next(e for e in plan["expenses"] if e["id"] == "laptop")
        assert laptop["is_installment"] is True
        assert laptop["installment_start_month"] == "2024-01"
        invest = next(g for g in plan["goals"] if g["id"] == "invest")
        assert invest["goal_type"] == "open_ended"
        assert invest["target_date"] == "2030-01-01"

    def test_reload(self, full_plan):
        reloaded = plan_from_dict(plan_to_dict(full_plan))
        assert [e.id for e in reloaded.expenses] == ["rent", "laptop"]
        assert reloaded.expenses[1].installment_months == 12
        assert reloaded.goals[0].target_date == date(2024, 12, 31)
        assert reloaded.current_balance == full_plan.current_balance

    def test_save_and_load(self, full_plan, tmp_path):
        path = tmp_path / "nested" / "plan.json"
        save_plan(full_plan, path)
        assert path.exists()
        reloaded = load_plan(path)
        assert [g.id for g in reloaded.goals] == ["emergency", "invest"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_plan(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_plan(path)


class TestResultExport:
    """Tests for forecast result export."""

    def test_result_to_dict(self, simple_plan, config):
        data = result_to_dict(generate_forecast(simple_plan, config))
        assert data["schema_version"] == SCHEMA_VERSION
        assert len(data["monthly_forecasts"]) == 12
        assert data["base_date"] == "2024-01-01"
        assert data["config"]["start_date"] == "2024-01-01"

    def test_save_result(self, full_plan, config, tmp_path):
        result = generate_forecast(full_plan, config)
        path = tmp_path / "forecast.json"
        save_result(result, path)
        with open(path) as f:
            data = json.load(f)
        assert data["summary"]["final_balance"] == pytest.approx(result.summary.final_balance)
        assert {g["id"] for g in data["goal_progress"]} == {"emergency", "invest"}
