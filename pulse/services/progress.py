"""Period boundaries and cached progress recomputation for goals.

Everything here is a pure function of its arguments; "today" is always
passed in explicitly as ``as_of``.
"""
from datetime import date, timedelta
from typing import Iterable, Optional

from pulse.models.goal import FrequencyPeriod, Goal, GoalType
from pulse.models.goal_log import GoalLog


def week_start(day: date) -> date:
    """
    Return the Monday of the week containing day.

    Examples:
        >>> week_start(date(2024, 3, 6))  # Wednesday
        datetime.date(2024, 3, 4)
        >>> week_start(date(2024, 3, 10))  # Sunday
        datetime.date(2024, 3, 4)
    """
    return day - timedelta(days=day.weekday())


def month_start(day: date) -> date:
    """Return the first day of day's month."""
    return day.replace(day=1)


def period_start(
    period: Optional[FrequencyPeriod],
    as_of: date,
    log_date: Optional[date] = None,
) -> date:
    """
    Return the first date of the current frequency period.

    Weekly periods start on the Monday of as_of's week and monthly periods
    on the 1st of as_of's month. A daily period starts at log_date when one
    is given (the write paths) and at as_of otherwise (statistics).
    """
    if period == FrequencyPeriod.WEEKLY:
        return week_start(as_of)
    if period == FrequencyPeriod.MONTHLY:
        return month_start(as_of)
    return log_date if log_date is not None else as_of


def count_completed(logs: Iterable[GoalLog], since: date) -> int:
    """Count logs on or after since that record a completed occurrence."""
    return sum(1 for log in logs if log.log_date >= since and log.value == 1)


def recompute_cached_value(
    goal: Goal,
    latest_value: Optional[int],
    period_logs: Iterable[GoalLog] = (),
) -> dict:
    """
    Compute the cached progress field for a goal after a log write.

    Args:
        goal: Goal whose cache is being refreshed
        latest_value: Value of the log that now represents the goal's
            position (the logged value, or the chronologically latest log)
        period_logs: Logs of the current frequency period, already filtered
            by the caller's period start

    Returns:
        Update document with the single field to set on the goal. Reading
        goals get current_page, the other types get current_value.
    """
    if goal.goal_type == GoalType.READING:
        return {"current_page": latest_value or 0}

    if goal.goal_type == GoalType.FREQUENCY:
        return {"current_value": sum(1 for log in period_logs if log.value == 1)}

    return {"current_value": latest_value or 0}
