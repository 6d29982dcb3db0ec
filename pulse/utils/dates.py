"""Calendar date helpers for MongoDB storage.

BSON has no date type, so calendar dates are stored as midnight datetimes.
"""
from datetime import date, datetime
from typing import Optional


def to_storage(value: Optional[date]) -> Optional[datetime]:
    """
    Convert a calendar date to the midnight datetime stored in MongoDB.

    Examples:
        >>> to_storage(date(2024, 3, 4))
        datetime.datetime(2024, 3, 4, 0, 0)
        >>> to_storage(None) is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return datetime.combine(value.date(), datetime.min.time())
    return datetime.combine(value, datetime.min.time())


def from_storage(value) -> Optional[date]:
    """
    Convert a stored datetime back to a calendar date.

    Dates that are already plain dates pass through unchanged.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value
