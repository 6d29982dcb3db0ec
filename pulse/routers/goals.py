"""Goal router - API endpoints for goals, their logs and statistics."""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from pulse.database import get_database
from pulse.errors import NotFoundError
from pulse.models.goal import Goal, GoalCreate, GoalUpdate
from pulse.models.goal_log import GoalLog, GoalLogCreate, GoalLogUpdate, LogProgressResult
from pulse.models.goal_stats import GoalStats
from pulse.services.goal_log_service import GoalLogService
from pulse.services.goal_service import GoalService


router = APIRouter(prefix="/goals", tags=["goals"])


def _error_response(error: ValueError) -> HTTPException:
    """Map a service error to the matching HTTP error."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    db=Depends(get_database),
):
    """
    Create a new goal.

    - total_pages is kept for reading goals only
    - frequency goals default to a weekly period
    - parent_id links the new goal as a sub-goal; 404 if the parent is missing
    """
    service = GoalService(db)
    try:
        return await service.create_goal(goal_create=goal)
    except ValueError as e:
        raise _error_response(e)


@router.get("", response_model=list[Goal])
async def list_goals(db=Depends(get_database)):
    """
    List active top-level goals.

    - Sub-goals are excluded
    - Newest first
    """
    service = GoalService(db)
    return await service.list_top_level_goals()


@router.get("/active", response_model=list[Goal])
async def list_active_goals(db=Depends(get_database)):
    """List every active goal, sub-goals included."""
    service = GoalService(db)
    return await service.list_active_goals()


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(
    goal_id: str,
    db=Depends(get_database),
):
    """
    Get a single goal by id.

    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.get_goal(goal_id=goal_id)
    except ValueError as e:
        raise _error_response(e)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    goal_update: GoalUpdate,
    db=Depends(get_database),
):
    """
    Update a goal.

    - Only supplied fields change
    - The goal type cannot be changed
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.update_goal(goal_id=goal_id, goal_update=goal_update)
    except ValueError as e:
        raise _error_response(e)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    db=Depends(get_database),
):
    """
    Soft delete a goal.

    - Marks goal inactive, keeps it and its logs in the database
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        await service.delete_goal(goal_id=goal_id)
    except ValueError as e:
        raise _error_response(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{goal_id}/subgoals", response_model=list[Goal])
async def list_sub_goals(
    goal_id: str,
    db=Depends(get_database),
):
    """List active sub-goals of a goal, oldest first."""
    service = GoalService(db)
    return await service.list_sub_goals(parent_id=goal_id)


@router.get("/{goal_id}/stats", response_model=GoalStats)
async def get_goal_stats(
    goal_id: str,
    db=Depends(get_database),
):
    """
    Get derived statistics for a goal.

    - Velocity and projected finish for reading goals
    - Period progress for frequency goals
    - Sub-goal roll-up for numeric goals
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.get_stats(goal_id=goal_id)
    except ValueError as e:
        raise _error_response(e)


@router.get("/{goal_id}/logs", response_model=list[GoalLog])
async def list_goal_logs(
    goal_id: str,
    limit: int = Query(30, ge=1, le=365, description="Maximum number of logs"),
    db=Depends(get_database),
):
    """
    List a goal's logs, most recent first.

    - Returns 404 if goal not found
    """
    service = GoalLogService(db)
    try:
        return await service.list_logs(goal_id=goal_id, limit=limit)
    except ValueError as e:
        raise _error_response(e)


@router.post(
    "/{goal_id}/logs",
    response_model=LogProgressResult,
    status_code=status.HTTP_201_CREATED,
)
async def log_progress(
    goal_id: str,
    log_create: GoalLogCreate,
    db=Depends(get_database),
):
    """
    Log progress for a goal.

    - log_date defaults to today
    - A second log on the same date updates the value and keeps the earlier
      note unless a new one is given
    - Returns 404 if goal not found, 400 if value is missing
    """
    service = GoalLogService(db)
    try:
        return await service.log_progress(goal_id=goal_id, log_create=log_create)
    except ValueError as e:
        raise _error_response(e)


@router.patch("/{goal_id}/logs/{log_id}", response_model=LogProgressResult)
async def edit_log(
    goal_id: str,
    log_id: str,
    log_update: GoalLogUpdate,
    db=Depends(get_database),
):
    """
    Edit an existing log.

    - Supplied fields are written as given
    - Returns 404 if goal or log not found, 400 if the date is taken
    """
    service = GoalLogService(db)
    try:
        return await service.edit_log(goal_id=goal_id, log_id=log_id, log_update=log_update)
    except ValueError as e:
        raise _error_response(e)
