"""Goal statistics model definitions."""
from datetime import date
from typing import Optional

from pydantic import BaseModel

from pulse.models.goal import Goal
from pulse.models.goal_log import GoalLog


class PeriodProgress(BaseModel):
    """Completed occurrences in the current period against the target."""

    current: int
    target: int


class GoalStats(BaseModel):
    """Statistics derived from a goal, its recent logs and its sub-goals."""

    goal: Goal
    logs: list[GoalLog] = []
    sub_goals: list[Goal] = []
    sub_goals_completed: int = 0
    velocity: Optional[float] = None
    estimated_finish_date: Optional[date] = None
    days_remaining: Optional[int] = None
    progress_percent: int = 0
    streak: int = 0
    period_progress: Optional[PeriodProgress] = None
