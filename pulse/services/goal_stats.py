"""Goal statistics - derived numbers for a goal's detail view.

compute_stats is a pure function: it never touches the database and gives
the same answer for the same goal, logs, sub-goals and as_of date.
"""
import math
from datetime import date, timedelta
from typing import Optional

from pulse.models.goal import Goal, GoalType
from pulse.models.goal_log import GoalLog
from pulse.models.goal_stats import GoalStats, PeriodProgress
from pulse.services.progress import count_completed, period_start

STREAK_WINDOW_DAYS = 365


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round to digits decimals with halves rounded upward.

    Python's round() rounds halves to even, which would report 2 for 2.5.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(10.25, 1)
        10.3
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(current: int, target: int) -> int:
    """Whole-number percentage of target reached, 0 when there is no target."""
    if not target:
        return 0
    return int(round_half_up(current / target * 100))


def count_completed_sub_goals(sub_goals: list[Goal]) -> int:
    """
    Count sub-goals whose current_value has reached a positive target_value.

    The same rule applies to every goal type, so a reading sub-goal is judged
    by target_value/current_value rather than by its pages.
    """
    return sum(
        1
        for sub_goal in sub_goals
        if sub_goal.target_value > 0 and sub_goal.current_value >= sub_goal.target_value
    )


def calculate_streak(logs: list[GoalLog], as_of: date) -> int:
    """
    Count consecutive logged days, scanning backward from as_of.

    A missing log on as_of itself does not end the streak; the first gap on
    any earlier day does.
    """
    logged_days = {log.log_date for log in logs}
    streak = 0
    for offset in range(STREAK_WINDOW_DAYS):
        day = as_of - timedelta(days=offset)
        if day in logged_days:
            streak += 1
        elif offset > 0:
            break
    return streak


def _reading_projection(
    goal: Goal,
    logs: list[GoalLog],
    as_of: date,
) -> tuple[Optional[float], Optional[int], Optional[date]]:
    """Velocity, days remaining and finish date for a reading goal."""
    if len(logs) < 2:
        return None, None, None

    ordered = sorted(logs, key=lambda log: log.log_date)
    first, last = ordered[0], ordered[-1]
    days_diff = max(1, (last.log_date - first.log_date).days)
    pages_diff = last.value - first.value
    velocity = round_half_up(pages_diff / days_diff, 1)

    if velocity <= 0:
        return None, None, None

    days_remaining = math.ceil((goal.total_pages - goal.current_page) / velocity)
    return velocity, days_remaining, as_of + timedelta(days=days_remaining)


def compute_stats(
    goal: Goal,
    logs: list[GoalLog],
    sub_goals: list[Goal],
    as_of: date,
) -> GoalStats:
    """
    Derive statistics for a goal.

    Args:
        goal: Goal being summarized
        logs: The goal's most recent logs (newest first, up to 30)
        sub_goals: Active sub-goals of the goal
        as_of: The date treated as "today"

    Returns:
        GoalStats with progress_percent clamped to [0, 100]
    """
    sub_goals_completed = count_completed_sub_goals(sub_goals)
    velocity = None
    days_remaining = None
    estimated_finish_date = None
    period_progress = None
    progress_percent = 0

    if goal.goal_type == GoalType.READING:
        if goal.total_pages:
            progress_percent = percent(goal.current_page, goal.total_pages)
            velocity, days_remaining, estimated_finish_date = _reading_projection(
                goal, logs, as_of
            )

    elif goal.goal_type == GoalType.FREQUENCY:
        start = period_start(goal.frequency_period, as_of)
        completed = count_completed(logs, start)
        period_progress = PeriodProgress(current=completed, target=goal.target_value)
        progress_percent = percent(completed, goal.target_value)

    elif goal.goal_type == GoalType.NUMERIC:
        if sub_goals:
            progress_percent = percent(sub_goals_completed, len(sub_goals))
        else:
            progress_percent = percent(goal.current_value, goal.target_value)

    return GoalStats(
        goal=goal,
        logs=logs,
        sub_goals=sub_goals,
        sub_goals_completed=sub_goals_completed,
        velocity=velocity,
        estimated_finish_date=estimated_finish_date,
        days_remaining=days_remaining,
        progress_percent=max(0, min(progress_percent, 100)),
        streak=calculate_streak(logs, as_of),
        period_progress=period_progress,
    )
