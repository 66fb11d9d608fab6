"""
Unit tests for goals.py module.

Tests Goal validation and the surplus allocator: precedence, floors,
catch-up for overdue goals, open-ended shares and the never-overdraw
guarantee.
"""

from dataclasses import replace
from datetime import date

import pytest

from cashplan.exceptions import ValidationError
from cashplan.goals import (
    Goal,
    allocate_goals,
    balance_multiplier,
    priority_multiplier,
    required_monthly_contribution,
)
from cashplan.types import GoalType, Priority

JAN = date(2024, 1, 1)


def _amounts(allocations):
    return {a.goal_id: a.amount for a in allocations}


class TestGoalValidation:
    """Tests for Goal construction."""

    def test_fixed_goal_requires_positive_target(self):
        with pytest.raises(ValidationError, match="target_amount"):
            Goal(id="g", name="Bad", target_amount=0, target_date="2024-12-31")

    def test_open_ended_goal_accepts_zero_target(self):
        goal = Goal(id="g", name="Invest", target_amount=0, target_date="2030-01-01",
                    goal_type="open_ended")
        assert goal.goal_type is GoalType.OPEN_ENDED
        assert not goal.is_complete

    def test_negative_current_amount_rejected(self):
        with pytest.raises(ValidationError):
            Goal(id="g", name="Bad", target_amount=100, target_date="2024-12-31",
                 current_amount=-1)

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError, match="priority"):
            Goal(id="g", name="Bad", target_amount=100, target_date="2024-12-31",
                 priority="urgent")

    def test_remaining_and_complete(self, emergency_fund):
        half = replace(emergency_fund, current_amount=6_000)
        done = replace(emergency_fund, current_amount=13_000)
        assert half.remaining_amount == 6_000
        assert not half.is_complete
        assert done.remaining_amount == 0
        assert done.is_complete


class TestMultipliers:
    """Tests for priority and balance multipliers."""

    @pytest.mark.parametrize("priority,expected", [
        (Priority.CRITICAL, 1.5),
        (Priority.HIGH, 1.2),
        (Priority.MEDIUM, 1.0),
        ("low", 0.7),
    ])
    def test_priority_weights(self, priority, expected):
        assert priority_multiplier(priority) == expected

    @pytest.mark.parametrize("surplus,expected", [
        (100, 0.5),
        (1_000, 1.0),
        (1_200, 1.2),
        (50_000, 1.5),
    ])
    def test_balance_multiplier_clamped(self, surplus, expected):
        assert balance_multiplier(surplus) == pytest.approx(expected)

    def test_required_monthly_contribution(self, emergency_fund):
        # 365 days / 30.44 -> 12 months
        assert required_monthly_contribution(emergency_fund, JAN) == pytest.approx(1_000)


class TestAllocateGoals:
    """Tests for allocate_goals()."""

    @pytest.mark.parametrize("surplus", [0, -500, float("nan")])
    def test_no_surplus_no_allocation(self, emergency_fund, surplus):
        assert allocate_goals([emergency_fund], surplus, JAN) == []

    def test_empty_goal_list(self):
        assert allocate_goals([], 2_000, JAN) == []

    def test_required_monthly_amount(self, emergency_fund):
        result = allocate_goals([emergency_fund], 2_000, JAN)
        assert len(result) == 1
        assert result[0].goal_id == "emergency"
        assert result[0].name == "Emergency Fund"
        assert result[0].amount == pytest.approx(1_000)

    def test_two_goals_share_surplus(self, emergency_fund, vacation):
        amounts = _amounts(allocate_goals([emergency_fund, vacation], 2_000, JAN))
        assert amounts["emergency"] == pytest.approx(1_000)
        assert amounts["vacation"] == pytest.approx(1_000)

    def test_priority_order_beats_input_order(self, emergency_fund, vacation):
        result = allocate_goals([vacation, emergency_fund], 1_500, JAN)
        assert [a.goal_id for a in result] == ["emergency", "vacation"]
        assert result[0].amount == pytest.approx(1_000)
        assert result[1].amount == pytest.approx(500)

    def test_first_goal_need_met_before_second(self, emergency_fund, vacation):
        result = allocate_goals([emergency_fund, vacation], 800, JAN)
        # First goal takes everything it needs (800 < 1,000 required)
        assert _amounts(result) == {"emergency": pytest.approx(800)}

    def test_ties_keep_input_order(self):
        a = Goal(id="a", name="A", target_amount=600, target_date="2024-06-30")
        b = Goal(id="b", name="B", target_amount=600, target_date="2024-06-30")
        assert [x.goal_id for x in allocate_goals([b, a], 5_000, JAN)] == ["b", "a"]

    def test_inactive_goal_skipped(self, emergency_fund, vacation):
        paused = replace(emergency_fund, is_active=False)
        assert list(_amounts(allocate_goals([paused, vacation], 2_000, JAN))) == ["vacation"]

    def test_complete_goal_skipped(self, emergency_fund, vacation):
        done = replace(emergency_fund, current_amount=12_000)
        assert "emergency" not in _amounts(allocate_goals([done, vacation], 2_000, JAN))

    def test_complete_overdue_goal_skipped(self):
        done = Goal(id="old", name="Old", target_amount=500, target_date="2023-01-01",
                    current_amount=500)
        assert allocate_goals([done], 2_000, JAN) == []

    def test_allocation_capped_at_remaining(self, emergency_fund):
        almost = replace(emergency_fund, current_amount=11_950)
        assert allocate_goals([almost], 2_000, JAN)[0].amount == pytest.approx(50)

    def test_floor_applies_to_distant_goal(self):
        far = Goal(id="far", name="Far", target_amount=1_200, target_date="2034-01-01")
        # required ~10/month, floor = 1000 * 0.1 * 1.0 * 1.0
        assert allocate_goals([far], 1_000, JAN)[0].amount == pytest.approx(100)

    def test_overdue_goal_catch_up(self):
        late = Goal(id="late", name="Late", target_amount=5_000, target_date="2023-06-30")
        assert allocate_goals([late], 2_000, JAN)[0].amount == pytest.approx(1_200)
        assert allocate_goals([late], 500, JAN)[0].amount == pytest.approx(100)

    @pytest.mark.parametrize("priority,expected", [
        ("critical", 300),
        ("medium", 200),
        ("low", 140),
    ])
    def test_open_ended_share(self, investing, priority, expected):
        goal = replace(investing, priority=priority)
        assert allocate_goals([goal], 1_000, JAN)[0].amount == pytest.approx(expected)

    def test_open_ended_after_fixed(self, emergency_fund, investing):
        amounts = _amounts(allocate_goals([emergency_fund, investing], 2_000, JAN))
        assert amounts["emergency"] == pytest.approx(1_000)
        assert amounts["invest"] == pytest.approx(200)

    @pytest.mark.parametrize("surplus", [1, 150, 999.99, 2_000, 25_000])
    def test_never_overdraws(self, emergency_fund, vacation, investing, surplus):
        late = Goal(id="late", name="Late", target_amount=50_000, target_date="2023-01-01",
                    priority="critical", priority_order=0)
        result = allocate_goals([late, emergency_fund, vacation, investing], surplus, JAN)
        assert all(a.amount > 0 for a in result)
        assert sum(a.amount for a in result) <= surplus + 1e-9

    def test_inputs_not_modified(self, emergency_fund):
        allocate_goals([emergency_fund], 2_000, JAN)
        assert emergency_fund.current_amount == 0
