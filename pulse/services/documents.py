"""Conversions between MongoDB documents and goal models."""
from bson import ObjectId
from bson.errors import InvalidId

from pulse.errors import NotFoundError
from pulse.models.goal import Goal
from pulse.models.goal_log import GoalLog
from pulse.utils.dates import from_storage


def parse_object_id(value: str, not_found_message: str) -> ObjectId:
    """
    Parse a path id into an ObjectId.

    A malformed id cannot match any document, so it is reported the same way
    as an unknown one.
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(not_found_message)


def doc_to_goal(doc: dict) -> Goal:
    """
    Convert database document to Goal model.

    Handles datetime to date conversion for date fields.
    """
    return Goal(
        _id=str(doc["_id"]),
        title=doc["title"],
        goal_type=doc["goal_type"],
        target_value=doc.get("target_value", 0),
        unit=doc.get("unit", ""),
        current_value=doc.get("current_value", 0),
        total_pages=doc.get("total_pages"),
        current_page=doc.get("current_page", 0),
        frequency_period=doc.get("frequency_period"),
        start_date=from_storage(doc["start_date"]),
        target_date=from_storage(doc.get("target_date")),
        is_active=doc.get("is_active", True),
        created_at=doc["created_at"],
    )


def doc_to_log(doc: dict) -> GoalLog:
    """Convert database document to GoalLog model."""
    return GoalLog(
        _id=str(doc["_id"]),
        goal_id=str(doc["goal_id"]),
        log_date=from_storage(doc["log_date"]),
        value=doc["value"],
        note=doc.get("note"),
        created_at=doc["created_at"],
    )
