"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from pulse.main import app
from pulse.config import settings
from pulse.database import ensure_indexes


@pytest_asyncio.fixture
async def app_client():
    """
    Create a test client with a clean test database.

    This fixture:
    - Skips the test when no MongoDB server is reachable
    - Creates a test database connection with the goal indexes
    - Yields an async HTTP client for testing
    - Cleans up the test database after each test
    """
    # Create test database client
    test_client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=1000)
    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip("MongoDB is not reachable")

    test_db_name = f"{settings.mongodb_db_name}_test"
    test_db = test_client[test_db_name]
    await ensure_indexes(test_db)

    # Override the database dependency
    from pulse.database import database
    original_db = database.db
    database.db = test_db

    # Create HTTP client
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    # Cleanup: drop test database
    await test_client.drop_database(test_db_name)

    # Restore original database
    database.db = original_db
    test_client.close()
