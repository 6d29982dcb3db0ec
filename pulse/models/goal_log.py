"""Goal progress log model definitions."""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from pulse.models.goal import Goal


class GoalLogCreate(BaseModel):
    """
    Progress log creation model.

    value is optional here so a missing value reaches the service, which
    reports it as a validation error rather than a schema error.
    """

    value: Optional[int] = None
    note: Optional[str] = None
    log_date: Optional[date] = None


class GoalLogUpdate(BaseModel):
    """Progress log edit model - all fields optional."""

    value: Optional[int] = None
    note: Optional[str] = None
    log_date: Optional[date] = None


class GoalLog(BaseModel):
    """Full progress log model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    goal_id: str
    log_date: date
    value: int
    note: Optional[str] = None
    created_at: datetime

    model_config = {"populate_by_name": True}


class LogProgressResult(BaseModel):
    """A written log together with the goal snapshot it produced."""

    log: GoalLog
    goal: Goal
