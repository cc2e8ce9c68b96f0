"""
Store protocol and result contracts for the Random Users operations.

The populate, read, and delete operations only touch the handful of
collection methods listed in `UserCollection`. pymongo's `AsyncCollection`
satisfies it, and so does the in-memory fake used by the unit tests.
Operations return TypedDicts so the HTTP layer and the CLI can serialize
them directly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, TypedDict, runtime_checkable


class PopulateResult(TypedDict):
    """
    Outcome of one populate run.

    `records_inserted` counts full batches that succeeded plus the driver's
    `nInserted` for batches that hit uniqueness conflicts.
    """

    records_inserted: int
    batches: int
    conflicts: int
    duration_seconds: float
    peak_rss_bytes: Optional[int]


class DeleteResult(TypedDict):
    """Outcome of one delete-all run."""

    total_deleted: int
    chunks: int


@runtime_checkable
class AsyncCursorLike(Protocol):
    def sort(self, key: str, direction: int) -> "AsyncCursorLike": ...

    def skip(self, count: int) -> "AsyncCursorLike": ...

    def limit(self, count: int) -> "AsyncCursorLike": ...

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]: ...


@runtime_checkable
class UserCollection(Protocol):
    """
    Minimal async collection interface the operations depend on.
    """

    async def insert_many(self, documents: Sequence[Dict[str, Any]], ordered: bool = True) -> Any:
        """Insert documents; unordered inserts keep going past failed documents."""
        ...

    def find(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> AsyncCursorLike:
        """Return a lazily evaluated cursor."""
        ...

    async def delete_many(self, filter: Mapping[str, Any]) -> Any:
        """Delete matching documents; the result exposes `deleted_count`."""
        ...

    async def create_index(self, keys: Any, **kwargs: Any) -> str: ...

    async def index_information(self) -> Dict[str, Any]: ...


__all__ = [
    "AsyncCursorLike",
    "DeleteResult",
    "PopulateResult",
    "UserCollection",
]
