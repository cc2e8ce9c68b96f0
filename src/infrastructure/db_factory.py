"""
MongoDB connection factory utilities for the Random Users service.

Provides centralized management of the async MongoDB client with proper
lifecycle management. The MongoClientManager singleton hands out a single
`AsyncMongoClient` per process; the HTTP lifespan and the CLI close it on exit.

Includes retry logic for transient connection failures using tenacity, and
the unique email index that makes the store the authority on uniqueness.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import Settings, get_settings
from src.operations.abstract import UserCollection
from src.utils.logging import get_logger

log = get_logger(__name__)

EMAIL_INDEX_NAME = "email_1"


class MongoClientManager:
    """
    Thread-safe singleton for managing the async MongoDB client.
    """

    _instance: Optional["MongoClientManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "MongoClientManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._client = None
            return cls._instance

    def get_client(self, settings: Optional[Settings] = None) -> AsyncMongoClient:
        """
        Get or create the async client.

        Parameters
        ----------
        settings : Settings, optional
            Settings to build the client from. Defaults to the cached settings.

        Returns
        -------
        AsyncMongoClient
            The managed client instance. Connecting is lazy; call `ping` to
            fail fast on an unreachable server.
        """
        with self._lock:
            if self._client is None:
                settings = settings or get_settings()
                self._client = AsyncMongoClient(
                    settings.mongodb_uri,
                    serverSelectionTimeoutMS=settings.mongodb_connect_timeout_ms,
                    connectTimeoutMS=settings.mongodb_connect_timeout_ms,
                    retryWrites=True,
                )
            return self._client

    async def close(self) -> None:
        """
        Close the managed client and release its connection pool.
        """
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            await client.close()


def get_client(settings: Optional[Settings] = None) -> AsyncMongoClient:
    """Get or create the process-wide client via MongoClientManager."""
    return MongoClientManager().get_client(settings)


def get_users_collection(client: AsyncMongoClient, settings: Optional[Settings] = None) -> Any:
    """
    Resolve the users collection.

    The database comes from the connection string when it names one,
    otherwise from `settings.mongodb_database`.
    """
    settings = settings or get_settings()
    database = client.get_default_database(default=settings.mongodb_database)
    return database[settings.mongodb_collection]


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((ConnectionFailure, ServerSelectionTimeoutError)),
    reraise=True,
)
async def ping(client: AsyncMongoClient) -> Dict[str, Any]:
    """
    Round-trip a `ping` command with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    pymongo.errors.ConnectionFailure
        If the server is still unreachable after all retry attempts.
    """
    return await client.admin.command("ping")


async def ensure_indexes(collection: UserCollection) -> None:
    """
    Create the unique email index unless it already exists.
    """
    existing = await collection.index_information()
    if EMAIL_INDEX_NAME in existing:
        log.info("Email index already exists", extra={"index": EMAIL_INDEX_NAME})
        return
    log.info("Creating email index", extra={"index": EMAIL_INDEX_NAME})
    await collection.create_index([("email", ASCENDING)], unique=True, name=EMAIL_INDEX_NAME)


__all__ = [
    "EMAIL_INDEX_NAME",
    "MongoClientManager",
    "ensure_indexes",
    "get_client",
    "get_users_collection",
    "ping",
]
