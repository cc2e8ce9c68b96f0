"""
Bulk population of the users collection.

Intent:
- Split a target record count into fixed-size batches.
- Run a bounded pool of asyncio workers; each worker generates one batch at a
  time in a worker thread and inserts it unordered, so at most `concurrency`
  batches are held in memory at once.
- Tolerate uniqueness conflicts per batch; any other failure aborts the run.

The load is best-effort, not transactional: batches inserted before a failure
stay in the store.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Callable, Dict, List, Mapping, Tuple

from pymongo.errors import BulkWriteError, DuplicateKeyError

from src.operations.abstract import PopulateResult, UserCollection
from src.operations.generator import UserGenerator
from src.utils.logging import get_logger
from src.utils.profiler import profile_block

log = get_logger(__name__)

DUPLICATE_KEY_CODE = 11000


def is_duplicate_key_only(details: Mapping[str, Any]) -> bool:
    """
    True when a bulk write failed solely because of unique index violations.
    """
    write_errors = details.get("writeErrors") or []
    if not write_errors or details.get("writeConcernErrors"):
        return False
    return all(error.get("code") == DUPLICATE_KEY_CODE for error in write_errors)


class BatchLoader:
    """
    Generate synthetic users and bulk-insert them with bounded concurrency.
    """

    def __init__(
        self,
        collection: UserCollection,
        generator_factory: Callable[[], UserGenerator] = UserGenerator,
    ) -> None:
        self.collection = collection
        self._generator_factory = generator_factory

    async def populate(self, total_records: int, batch_size: int, concurrency: int = 1) -> PopulateResult:
        """
        Insert `ceil(total_records / batch_size)` batches of `batch_size` users.

        Parameters
        ----------
        total_records : int
            Target number of records.
        batch_size : int
            Records per `insert_many` call.
        concurrency : int
            Maximum number of batches generated/in flight at the same time.

        Returns
        -------
        PopulateResult
            Counts and timing of the run.

        Raises
        ------
        Exception
            Whatever non-conflict error the first failing batch raised.
        """
        if total_records < 1:
            raise ValueError("total_records must be >= 1")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")

        batch_count = math.ceil(total_records / batch_size)
        generator = self._generator_factory()
        pending: asyncio.Queue[int] = asyncio.Queue()
        for index in range(batch_count):
            pending.put_nowait(index)
        totals: Dict[str, int] = {"inserted": 0, "conflicts": 0}

        log.info(
            f"[POPULATE START] {batch_count} batches of {batch_size}",
            extra={"total_records": total_records, "batch_size": batch_size, "concurrency": concurrency},
        )
        with profile_block("populate") as stats:
            workers = [
                asyncio.create_task(
                    self._worker(pending, generator, batch_size, batch_count, totals),
                    name=f"populate-worker-{n}",
                )
                for n in range(min(concurrency, batch_count))
            ]
            try:
                await asyncio.gather(*workers)
            except BaseException:
                for worker in workers:
                    worker.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
                raise

        log.info(
            f"[POPULATE COMPLETE] {totals['inserted']} records in {stats.duration_seconds:.2f}s",
            extra={
                "records_inserted": totals["inserted"],
                "conflicts": totals["conflicts"],
                "duration_seconds": round(stats.duration_seconds, 2),
                "peak_rss_bytes": stats.peak_rss_bytes,
            },
        )
        return PopulateResult(
            records_inserted=totals["inserted"],
            batches=batch_count,
            conflicts=totals["conflicts"],
            duration_seconds=round(stats.duration_seconds, 2),
            peak_rss_bytes=stats.peak_rss_bytes,
        )

    async def _worker(
        self,
        pending: "asyncio.Queue[int]",
        generator: UserGenerator,
        batch_size: int,
        batch_count: int,
        totals: Dict[str, int],
    ) -> None:
        while True:
            try:
                index = pending.get_nowait()
            except asyncio.QueueEmpty:
                return
            # Generation is CPU-bound; keep the loop free for requests meanwhile.
            documents = await asyncio.to_thread(generator.documents, batch_size)
            inserted, conflicts = await self._insert_batch(index, documents)
            totals["inserted"] += inserted
            totals["conflicts"] += conflicts
            log.info(
                f"Batch {index + 1}/{batch_count} done. Total records inserted so far: {totals['inserted']}",
                extra={"batch": index + 1, "inserted": inserted, "conflicts": conflicts},
            )

    async def _insert_batch(self, index: int, documents: List[Dict[str, Any]]) -> Tuple[int, int]:
        """
        Insert one batch unordered and return `(inserted, conflicts)`.
        """
        log.debug(f"Starting to insert batch {index + 1} with {len(documents)} users")
        try:
            await self.collection.insert_many(documents, ordered=False)
        except BulkWriteError as exc:
            if not is_duplicate_key_only(exc.details):
                raise
            inserted = int(exc.details.get("nInserted", 0))
            conflicts = len(exc.details["writeErrors"])
            log.warning(
                "Duplicate key error, continuing with next batch",
                extra={"batch": index + 1, "inserted": inserted, "conflicts": conflicts},
            )
            return inserted, conflicts
        except DuplicateKeyError:
            log.warning("Duplicate key error, continuing with next batch", extra={"batch": index + 1})
            return 0, 1
        return len(documents), 0


__all__ = ["BatchLoader", "DUPLICATE_KEY_CODE", "is_duplicate_key_only"]
