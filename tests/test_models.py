"""Tests for Pydantic models."""
import pytest
from datetime import date, datetime
from pydantic import ValidationError


class TestGoalModel:
    """Tests for Goal models."""

    def test_goal_type_enum_values(self):
        """Test GoalType enum has correct values."""
        from pulse.models.goal import GoalType

        assert GoalType.READING.value == "reading"
        assert GoalType.FREQUENCY.value == "frequency"
        assert GoalType.NUMERIC.value == "numeric"

    def test_frequency_period_enum_values(self):
        """Test FrequencyPeriod enum has correct values."""
        from pulse.models.goal import FrequencyPeriod

        assert FrequencyPeriod.DAILY.value == "daily"
        assert FrequencyPeriod.WEEKLY.value == "weekly"
        assert FrequencyPeriod.MONTHLY.value == "monthly"

    def test_goal_create_minimal(self):
        """Test creating a goal with only a title."""
        from pulse.models.goal import GoalCreate, GoalType

        goal = GoalCreate(title="Run")

        assert goal.title == "Run"
        assert goal.goal_type == GoalType.FREQUENCY  # default
        assert goal.target_value == 0
        assert goal.unit == ""
        assert goal.total_pages is None
        assert goal.frequency_period is None
        assert goal.target_date is None
        assert goal.parent_id is None

    def test_goal_create_reading(self):
        """Test creating a reading goal with pages and a target date."""
        from pulse.models.goal import GoalCreate, GoalType

        goal = GoalCreate(
            title="Dune",
            goal_type="reading",
            total_pages=412,
            target_date=date(2024, 6, 1),
        )

        assert goal.goal_type == GoalType.READING
        assert goal.total_pages == 412
        assert goal.target_date == date(2024, 6, 1)

    def test_goal_create_requires_title(self):
        """Test that title is required and non-empty."""
        from pulse.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate()

        with pytest.raises(ValidationError):
            GoalCreate(title="")

    def test_goal_create_invalid_type(self):
        """Test that an unknown goal type is rejected."""
        from pulse.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="Run", goal_type="habit")

    def test_goal_update_all_optional(self):
        """Test that all update fields are optional."""
        from pulse.models.goal import GoalUpdate

        update = GoalUpdate()

        assert update.model_dump(exclude_unset=True) == {}

    def test_goal_update_ignores_goal_type(self):
        """Test that goal_type cannot be supplied in an update."""
        from pulse.models.goal import GoalUpdate

        update = GoalUpdate(goal_type="numeric", title="Renamed")

        assert not hasattr(update, "goal_type")
        assert update.model_dump(exclude_unset=True) == {"title": "Renamed"}

    def test_goal_serializes_id(self):
        """Test that the Mongo _id is exposed as id."""
        from pulse.models.goal import Goal

        goal = Goal(
            _id="507f1f77bcf86cd799439011",
            title="Run",
            goal_type="frequency",
            frequency_period="weekly",
            start_date=date(2024, 3, 1),
            created_at=datetime(2024, 3, 1, 9, 0),
        )

        data = goal.model_dump(by_alias=True)
        assert data["id"] == "507f1f77bcf86cd799439011"
        assert data["current_value"] == 0
        assert data["current_page"] == 0
        assert data["is_active"] is True


class TestGoalLogModel:
    """Tests for GoalLog models."""

    def test_goal_log_create_value_optional(self):
        """Test that value may be omitted at the model level."""
        from pulse.models.goal_log import GoalLogCreate

        log = GoalLogCreate(note="felt good")

        assert log.value is None
        assert log.note == "felt good"
        assert log.log_date is None

    def test_goal_log_create_parses_date(self):
        """Test that log_date is parsed from an ISO string."""
        from pulse.models.goal_log import GoalLogCreate

        log = GoalLogCreate(value=1, log_date="2024-03-04")

        assert log.log_date == date(2024, 3, 4)

    def test_goal_log_rejects_non_integer_value(self):
        """Test that value must be an integer."""
        from pulse.models.goal_log import GoalLogCreate

        with pytest.raises(ValidationError):
            GoalLogCreate(value="lots")


class TestGoalStatsModel:
    """Tests for GoalStats model."""

    def test_goal_stats_defaults(self):
        """Test the defaults of an otherwise empty stats bundle."""
        from pulse.models.goal import Goal
        from pulse.models.goal_stats import GoalStats

        goal = Goal(
            _id="507f1f77bcf86cd799439011",
            title="Save",
            goal_type="numeric",
            start_date=date(2024, 3, 1),
            created_at=datetime(2024, 3, 1, 9, 0),
        )
        stats = GoalStats(goal=goal)

        assert stats.logs == []
        assert stats.sub_goals == []
        assert stats.velocity is None
        assert stats.estimated_finish_date is None
        assert stats.days_remaining is None
        assert stats.progress_percent == 0
        assert stats.streak == 0
        assert stats.period_progress is None
