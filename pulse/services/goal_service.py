"""Goal service - business logic for goal lifecycle and queries."""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from bson import ObjectId

from pulse.config import settings
from pulse.errors import NotFoundError
from pulse.models.goal import FrequencyPeriod, Goal, GoalCreate, GoalType, GoalUpdate
from pulse.models.goal_stats import GoalStats
from pulse.services.documents import doc_to_goal, doc_to_log, parse_object_id
from pulse.services.goal_stats import compute_stats
from pulse.utils.dates import to_storage

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]
OLDEST_FIRST = [("created_at", 1), ("_id", 1)]


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db["goals"]
        self.relations = db["goal_relations"]
        self.logs = db["goal_logs"]

    async def create_goal(self, goal_create: GoalCreate) -> Goal:
        """
        Create a new goal, optionally as a sub-goal of an existing one.

        Args:
            goal_create: Goal creation data

        Returns:
            Created goal object

        Raises:
            NotFoundError: If parent_id is given but doesn't exist
        """
        parent_oid = None
        if goal_create.parent_id:
            parent_oid = parse_object_id(goal_create.parent_id, "Parent goal not found")
            parent = await self.goals.find_one({"_id": parent_oid})
            if not parent:
                raise NotFoundError("Parent goal not found")

        goal_type = goal_create.goal_type
        frequency_period = None
        if goal_type == GoalType.FREQUENCY:
            frequency_period = (goal_create.frequency_period or FrequencyPeriod.WEEKLY).value

        goal_doc = {
            "title": goal_create.title,
            "goal_type": goal_type.value,
            "target_value": goal_create.target_value,
            "unit": goal_create.unit,
            "current_value": 0,
            # Pages only mean something for reading goals
            "total_pages": goal_create.total_pages if goal_type == GoalType.READING else None,
            "current_page": 0,
            "frequency_period": frequency_period,
            "start_date": to_storage(date.today()),
            "target_date": to_storage(goal_create.target_date),
            "is_active": True,
            "created_at": datetime.now(timezone.utc),
        }

        result = await self.goals.insert_one(goal_doc)
        goal_doc["_id"] = result.inserted_id

        if parent_oid is not None:
            # The child is brand new, so this edge can't close a cycle or
            # give the child a second parent.
            await self.relations.insert_one({
                "parent_goal_id": parent_oid,
                "child_goal_id": result.inserted_id,
                "relation_type": "subgoal",
            })

        logger.info("Created %s goal %s", goal_type.value, result.inserted_id)
        return doc_to_goal(goal_doc)

    async def get_goal(self, goal_id: str) -> Goal:
        """
        Get a single goal by id, whether active or not.

        Raises:
            NotFoundError: If goal not found
        """
        goal_oid = parse_object_id(goal_id, "Goal not found")
        goal_doc = await self.goals.find_one({"_id": goal_oid})

        if not goal_doc:
            raise NotFoundError("Goal not found")

        return doc_to_goal(goal_doc)

    async def list_top_level_goals(self) -> list[Goal]:
        """
        List active goals that are not a sub-goal of anything.

        Returns:
            Goals ordered newest first
        """
        child_ids = await self.relations.distinct("child_goal_id")

        cursor = self.goals.find({
            "is_active": True,
            "_id": {"$nin": child_ids},
        }).sort(NEWEST_FIRST)
        goal_docs = await cursor.to_list(length=None)

        return [doc_to_goal(doc) for doc in goal_docs]

    async def list_active_goals(self) -> list[Goal]:
        """List every active goal, sub-goals included, newest first."""
        cursor = self.goals.find({"is_active": True}).sort(NEWEST_FIRST)
        goal_docs = await cursor.to_list(length=None)
        return [doc_to_goal(doc) for doc in goal_docs]

    async def list_sub_goals(self, parent_id: str) -> list[Goal]:
        """
        List the active sub-goals of a goal.

        Only direct children are returned, so the walk terminates even if
        the relation graph were to contain a cycle.

        Args:
            parent_id: Parent goal ID

        Returns:
            Sub-goals ordered oldest first (empty for an unknown parent)
        """
        try:
            parent_oid = parse_object_id(parent_id, "Goal not found")
        except NotFoundError:
            return []

        edges = await self.relations.find({"parent_goal_id": parent_oid}).to_list(length=None)
        child_ids = [edge["child_goal_id"] for edge in edges]
        if not child_ids:
            return []

        cursor = self.goals.find({
            "_id": {"$in": child_ids},
            "is_active": True,
        }).sort(OLDEST_FIRST)
        goal_docs = await cursor.to_list(length=None)

        return [doc_to_goal(doc) for doc in goal_docs]

    async def update_goal(self, goal_id: str, goal_update: GoalUpdate) -> Goal:
        """
        Update a goal. Only supplied fields change.

        Args:
            goal_id: Goal ID
            goal_update: Update data

        Returns:
            Updated goal

        Raises:
            NotFoundError: If goal not found
        """
        goal_oid = parse_object_id(goal_id, "Goal not found")
        existing = await self.goals.find_one({"_id": goal_oid})

        if not existing:
            raise NotFoundError("Goal not found")

        supplied = goal_update.model_dump(exclude_unset=True)
        update_doc = {}

        for field in ("title", "target_value", "unit", "current_page", "current_value", "is_active"):
            if supplied.get(field) is not None:
                update_doc[field] = supplied[field]

        # These two may be cleared with an explicit null
        if "total_pages" in supplied:
            update_doc["total_pages"] = supplied["total_pages"]
        if "target_date" in supplied:
            update_doc["target_date"] = to_storage(supplied["target_date"])

        if not update_doc:
            return doc_to_goal(existing)

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_oid},
            {"$set": update_doc},
            return_document=True,
        )

        return doc_to_goal(updated_doc)

    async def delete_goal(self, goal_id: str) -> None:
        """
        Soft delete a goal. Its logs and relations are kept.

        Deleting an already inactive goal succeeds.

        Raises:
            NotFoundError: If goal not found
        """
        goal_oid = parse_object_id(goal_id, "Goal not found")

        result = await self.goals.update_one(
            {"_id": goal_oid},
            {"$set": {"is_active": False}},
        )

        if result.matched_count == 0:
            raise NotFoundError("Goal not found")

        logger.info("Soft deleted goal %s", goal_id)

    async def get_stats(self, goal_id: str, as_of: Optional[date] = None) -> GoalStats:
        """
        Load a goal, its recent logs and its sub-goals and derive statistics.

        Args:
            goal_id: Goal ID
            as_of: Date treated as today (defaults to today)

        Raises:
            NotFoundError: If goal not found
        """
        goal = await self.get_goal(goal_id)

        cursor = (
            self.logs.find({"goal_id": ObjectId(goal.id)})
            .sort("log_date", -1)
            .limit(settings.stats_log_limit)
        )
        log_docs = await cursor.to_list(length=None)
        sub_goals = await self.list_sub_goals(goal.id)

        return compute_stats(
            goal,
            [doc_to_log(doc) for doc in log_docs],
            sub_goals,
            as_of or date.today(),
        )
