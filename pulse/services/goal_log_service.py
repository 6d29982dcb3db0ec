"""Goal log service - progress logging and cached progress upkeep."""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from bson import ObjectId

from pulse.errors import NotFoundError, ValidationError
from pulse.models.goal import Goal, GoalType
from pulse.models.goal_log import GoalLog, GoalLogCreate, GoalLogUpdate, LogProgressResult
from pulse.services.documents import doc_to_goal, doc_to_log, parse_object_id
from pulse.services.progress import period_start, recompute_cached_value
from pulse.utils.dates import to_storage
from pulse.utils.locks import KeyedLock

logger = logging.getLogger(__name__)

# Services are created per request, so the locks live at module level.
# Each log write and the recomputation that follows it run under the goal's
# lock.
goal_locks = KeyedLock()


class GoalLogService:
    """Service for writing goal progress logs."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db["goals"]
        self.logs = db["goal_logs"]

    async def _get_goal_doc(self, goal_id: str) -> dict:
        goal_oid = parse_object_id(goal_id, "Goal not found")
        goal_doc = await self.goals.find_one({"_id": goal_oid})

        if not goal_doc:
            raise NotFoundError("Goal not found")

        return goal_doc

    async def _period_logs(
        self,
        goal_oid: ObjectId,
        goal: Goal,
        as_of: date,
        log_date: date,
    ) -> list[GoalLog]:
        """Completed logs of the goal's current frequency period."""
        start = period_start(goal.frequency_period, as_of, log_date)
        cursor = self.logs.find({
            "goal_id": goal_oid,
            "log_date": {"$gte": to_storage(start)},
            "value": 1,
        })
        log_docs = await cursor.to_list(length=None)
        return [doc_to_log(doc) for doc in log_docs]

    async def _latest_value(self, goal_oid: ObjectId) -> Optional[int]:
        """Value of the chronologically latest log, newest id breaking ties."""
        latest = await self.logs.find_one(
            {"goal_id": goal_oid},
            sort=[("log_date", -1), ("_id", -1)],
        )
        return latest["value"] if latest else None

    async def _store_cached_value(self, goal_oid: ObjectId, update_doc: dict) -> Goal:
        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_oid},
            {"$set": update_doc},
            return_document=True,
        )
        return doc_to_goal(updated_doc)

    async def log_progress(
        self,
        goal_id: str,
        log_create: GoalLogCreate,
        as_of: Optional[date] = None,
    ) -> LogProgressResult:
        """
        Record progress for a goal on a date and refresh its cached progress.

        A second log for the same date is merged into the first: the value
        always replaces the stored one, the note only when non-empty.

        Args:
            goal_id: Goal ID
            log_create: Value, optional note and optional log date
            as_of: Date treated as today (defaults to today)

        Returns:
            The merged log and the updated goal

        Raises:
            NotFoundError: If goal not found
            ValidationError: If value is missing
        """
        goal_doc = await self._get_goal_doc(goal_id)

        if log_create.value is None:
            raise ValidationError("Value is required")

        as_of = as_of or date.today()
        log_date = log_create.log_date or as_of
        goal_oid = goal_doc["_id"]
        goal = doc_to_goal(goal_doc)

        set_doc = {"value": log_create.value}
        on_insert = {"created_at": datetime.now(timezone.utc)}
        if log_create.note:
            set_doc["note"] = log_create.note
        else:
            on_insert["note"] = None

        async with goal_locks.get(str(goal_oid)):
            log_doc = await self.logs.find_one_and_update(
                {"goal_id": goal_oid, "log_date": to_storage(log_date)},
                {"$set": set_doc, "$setOnInsert": on_insert},
                upsert=True,
                return_document=True,
            )

            period_logs = []
            if goal.goal_type == GoalType.FREQUENCY:
                period_logs = await self._period_logs(goal_oid, goal, as_of, log_date)

            update_doc = recompute_cached_value(goal, log_create.value, period_logs)
            updated_goal = await self._store_cached_value(goal_oid, update_doc)

        logger.debug("Logged %s for goal %s on %s", log_create.value, goal_oid, log_date)
        return LogProgressResult(log=doc_to_log(log_doc), goal=updated_goal)

    async def edit_log(
        self,
        goal_id: str,
        log_id: str,
        log_update: GoalLogUpdate,
        as_of: Optional[date] = None,
    ) -> LogProgressResult:
        """
        Edit an existing log in place and refresh the goal's cached progress.

        Unlike log_progress there is no merging: supplied fields are written
        as given. Reading and numeric goals then take their cached value from
        the chronologically latest log, which need not be the edited one.

        Args:
            goal_id: Goal ID
            log_id: Log ID (must belong to the goal)
            log_update: Fields to change
            as_of: Date treated as today (defaults to today)

        Returns:
            The edited log and the updated goal

        Raises:
            NotFoundError: If goal or log not found
            ValidationError: If the new date already holds another log
        """
        goal_doc = await self._get_goal_doc(goal_id)
        log_oid = parse_object_id(log_id, "Log not found")
        as_of = as_of or date.today()
        goal_oid = goal_doc["_id"]
        goal = doc_to_goal(goal_doc)

        async with goal_locks.get(str(goal_oid)):
            existing = await self.logs.find_one({"_id": log_oid, "goal_id": goal_oid})

            if not existing:
                raise NotFoundError("Log not found")

            update_doc = {}
            if log_update.value is not None:
                update_doc["value"] = log_update.value
            if log_update.note is not None:
                update_doc["note"] = log_update.note
            if log_update.log_date is not None:
                new_date = to_storage(log_update.log_date)
                clash = await self.logs.find_one({
                    "goal_id": goal_oid,
                    "log_date": new_date,
                    "_id": {"$ne": log_oid},
                })
                if clash:
                    raise ValidationError("A log already exists for that date")
                update_doc["log_date"] = new_date

            log_doc = existing
            if update_doc:
                log_doc = await self.logs.find_one_and_update(
                    {"_id": log_oid},
                    {"$set": update_doc},
                    return_document=True,
                )
            log = doc_to_log(log_doc)

            if goal.goal_type == GoalType.FREQUENCY:
                period_logs = await self._period_logs(goal_oid, goal, as_of, log.log_date)
                cached = recompute_cached_value(goal, None, period_logs)
            else:
                cached = recompute_cached_value(goal, await self._latest_value(goal_oid))

            updated_goal = await self._store_cached_value(goal_oid, cached)

        logger.debug("Edited log %s of goal %s", log_oid, goal_oid)
        return LogProgressResult(log=log, goal=updated_goal)

    async def list_logs(self, goal_id: str, limit: int = 30) -> list[GoalLog]:
        """
        List a goal's logs, most recent date first.

        Raises:
            NotFoundError: If goal not found
        """
        goal_doc = await self._get_goal_doc(goal_id)

        cursor = self.logs.find({"goal_id": goal_doc["_id"]}).sort("log_date", -1).limit(limit)
        log_docs = await cursor.to_list(length=None)

        return [doc_to_log(doc) for doc in log_docs]
