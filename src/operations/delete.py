"""
Chunked deletion of every user.

The store has no "delete N arbitrary documents" primitive, so each chunk is
two round trips: fetch up to `chunk_size` ids, then delete exactly those ids.
A fixed pause follows every chunk that removed something.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from src.operations.abstract import DeleteResult, UserCollection
from src.utils.logging import get_logger

log = get_logger(__name__)


class BulkDeleter:
    """
    Empty the users collection in bounded chunks.
    """

    def __init__(
        self,
        collection: UserCollection,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.collection = collection
        self._sleep = sleep

    async def delete_all(self, chunk_size: int, pause_seconds: float) -> DeleteResult:
        """
        Delete users chunk by chunk until a fetch comes back short.

        Parameters
        ----------
        chunk_size : int
            Maximum ids fetched and deleted per chunk.
        pause_seconds : float
            Fixed delay after each chunk that deleted at least one user.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if pause_seconds < 0:
            raise ValueError("pause_seconds must be >= 0")

        total_deleted = 0
        chunks = 0
        while True:
            cursor = self.collection.find({}, {"_id": 1}).limit(chunk_size)
            ids = [document["_id"] for document in await cursor.to_list(length=None)]
            if not ids:
                break

            result = await self.collection.delete_many({"_id": {"$in": ids}})
            deleted = result.deleted_count
            total_deleted += deleted
            chunks += 1
            log.info(
                f"Deleted {total_deleted} records so far",
                extra={"chunk": chunks, "deleted": deleted, "total_deleted": total_deleted},
            )

            if deleted > 0:
                await self._sleep(pause_seconds)
            if len(ids) < chunk_size:
                break

        return DeleteResult(total_deleted=total_deleted, chunks=chunks)


__all__ = ["BulkDeleter"]
