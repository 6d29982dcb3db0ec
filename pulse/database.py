"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from pulse.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure the goal indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        await ensure_indexes(self.db)
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


async def ensure_indexes(db) -> None:
    """
    Create the indexes the goal services rely on.

    - goal_logs: one log per (goal_id, log_date)
    - goal_relations: one edge per (parent_goal_id, child_goal_id)
    """
    await db["goal_logs"].create_index(
        [("goal_id", ASCENDING), ("log_date", ASCENDING)],
        unique=True,
        name="goal_log_date_unique",
    )
    await db["goal_relations"].create_index(
        [("parent_goal_id", ASCENDING), ("child_goal_id", ASCENDING)],
        unique=True,
        name="goal_relation_unique",
    )
    await db["goal_relations"].create_index("child_goal_id")


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
