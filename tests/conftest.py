"""
Pytest configuration for the Random Users service.

Provides fixtures for:
- An in-memory users collection that mimics the pymongo async API, including
  the unique email index and real pymongo error types
- Settings with small sizes for fast tests
- A live MongoDB connection for integration tests (skipped when unreachable)
"""

from __future__ import annotations

import os
import uuid
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from pymongo import AsyncMongoClient, MongoClient
from pymongo.errors import PyMongoError

from src.config import Settings
from tests.fakes import FakeUsersCollection


@pytest.fixture
def users_collection() -> FakeUsersCollection:
    return FakeUsersCollection()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with small sizes so HTTP tests run instantly.
    """
    return Settings(
        _env_file=None,
        mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017/random_users_test"),
        populate_total_records=20,
        populate_batch_size=10,
        populate_concurrency=2,
        faker_seed=1234,
        page_size=10,
        delete_chunk_size=4,
        delete_pause_seconds=0,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def mongo_uri() -> str:
    return os.getenv("MONGODB_URI", "mongodb://localhost:27017/random_users_test")


@pytest.fixture(scope="session")
def mongo_available(mongo_uri: str) -> bool:
    """
    Check if MongoDB is reachable.

    Used to conditionally skip integration tests when MongoDB is not available.
    """
    client: MongoClient = MongoClient(mongo_uri, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
        return True
    except PyMongoError:
        return False
    finally:
        client.close()


@pytest_asyncio.fixture
async def mongo_collection(mongo_uri: str, mongo_available: bool) -> AsyncGenerator[Any, None]:
    """
    A throwaway collection on the live server, dropped after the test.

    Skips tests if MongoDB is not available.
    """
    if not mongo_available:
        pytest.skip("MongoDB not available for integration tests")

    client: AsyncMongoClient = AsyncMongoClient(mongo_uri, serverSelectionTimeoutMS=2000)
    database = client.get_default_database(default="random_users_test")
    collection = database[f"users_{uuid.uuid4().hex[:12]}"]
    try:
        yield collection
    finally:
        await collection.drop()
        await client.close()
