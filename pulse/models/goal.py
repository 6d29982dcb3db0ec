"""Goal model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class GoalType(str, Enum):
    """Goal types. Fixed for the life of a goal."""

    READING = "reading"
    FREQUENCY = "frequency"
    NUMERIC = "numeric"


class FrequencyPeriod(str, Enum):
    """Rolling window a frequency goal's target is measured against."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class GoalBase(BaseModel):
    """Base goal fields."""

    title: str = Field(min_length=1)
    goal_type: GoalType = GoalType.FREQUENCY
    target_value: int = 0
    unit: str = ""
    total_pages: Optional[int] = None
    frequency_period: Optional[FrequencyPeriod] = None
    target_date: Optional[date] = None


class GoalCreate(GoalBase):
    """Goal creation model. parent_id links the new goal as a sub-goal."""

    parent_id: Optional[str] = None


class GoalUpdate(BaseModel):
    """
    Goal update model - all fields optional.

    Has no goal_type field: a goal's type is fixed at creation. Unknown
    fields in the payload are ignored.
    """

    title: Optional[str] = Field(default=None, min_length=1)
    target_value: Optional[int] = None
    unit: Optional[str] = None
    total_pages: Optional[int] = None
    current_page: Optional[int] = None
    current_value: Optional[int] = None
    target_date: Optional[date] = None
    is_active: Optional[bool] = None


class Goal(GoalBase):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    current_value: int = 0
    current_page: int = 0
    start_date: date
    is_active: bool = True
    created_at: datetime

    model_config = {"populate_by_name": True}
