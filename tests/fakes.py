"""
In-memory doubles for the pymongo async collection API and for Faker.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from bson import ObjectId
from pymongo.errors import BulkWriteError

from src.infrastructure.db_factory import EMAIL_INDEX_NAME


class FakeInsertManyResult:
    def __init__(self, inserted_ids: List[ObjectId]) -> None:
        self.inserted_ids = inserted_ids


class FakeDeleteResult:
    def __init__(self, deleted_count: int) -> None:
        self.deleted_count = deleted_count


class FakeCursor:
    def __init__(self, collection: "FakeUsersCollection", projection: Optional[Mapping[str, Any]]) -> None:
        self._collection = collection
        self._projection = projection
        self._sort: Optional[tuple[str, int]] = None
        self._skip = 0
        self._limit = 0

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._sort = (key, direction)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if self._collection.fail_reads_with is not None:
            raise self._collection.fail_reads_with
        documents = list(self._collection.documents)
        if self._sort is not None:
            key, direction = self._sort
            documents.sort(key=lambda document: document[key], reverse=direction < 0)
        documents = documents[self._skip :]
        if self._limit:
            documents = documents[: self._limit]
        if self._projection:
            fields = [field for field, included in self._projection.items() if included]
            return [{field: document[field] for field in fields} for document in documents]
        return [dict(document) for document in documents]


class FakeUsersCollection:
    """
    In-memory stand-in for `AsyncCollection` covering what the operations use.

    `_id`s come from a counter so their order always matches insertion order.
    """

    def __init__(self, unique_email: bool = True) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.indexes: Dict[str, Dict[str, Any]] = {"_id_": {"key": [("_id", 1)]}}
        if unique_email:
            self.indexes[EMAIL_INDEX_NAME] = {"key": [("email", 1)], "unique": True}
        self.insert_calls: List[int] = []
        self.find_calls = 0
        self.delete_calls: List[int] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.fail_inserts_with: Optional[BaseException] = None
        self.fail_reads_with: Optional[BaseException] = None
        self.fail_indexes_with: Optional[BaseException] = None
        self.insert_delay = 0.0
        self._sequence = 0

    def _next_id(self) -> ObjectId:
        self._sequence += 1
        return ObjectId(f"{self._sequence:024x}")

    @property
    def emails(self) -> List[str]:
        return [document["email"] for document in self.documents]

    def seed(self, documents: Iterable[Dict[str, Any]]) -> None:
        for document in documents:
            stored = dict(document)
            stored.setdefault("_id", self._next_id())
            self.documents.append(stored)

    async def insert_many(self, documents: Sequence[Dict[str, Any]], ordered: bool = True) -> FakeInsertManyResult:
        self.insert_calls.append(len(documents))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.insert_delay)
            if self.fail_inserts_with is not None:
                raise self.fail_inserts_with

            unique_email = EMAIL_INDEX_NAME in self.indexes
            existing = set(self.emails)
            inserted_ids: List[ObjectId] = []
            write_errors: List[Dict[str, Any]] = []
            for index, document in enumerate(documents):
                document.setdefault("_id", self._next_id())
                if unique_email and document["email"] in existing:
                    write_errors.append(
                        {
                            "index": index,
                            "code": 11000,
                            "errmsg": "E11000 duplicate key error collection: users index: email_1",
                            "keyValue": {"email": document["email"]},
                        }
                    )
                    if ordered:
                        break
                    continue
                existing.add(document["email"])
                self.documents.append(dict(document))
                inserted_ids.append(document["_id"])

            if write_errors:
                raise BulkWriteError(
                    {
                        "writeErrors": write_errors,
                        "writeConcernErrors": [],
                        "nInserted": len(inserted_ids),
                        "nUpserted": 0,
                        "nMatched": 0,
                        "nModified": 0,
                        "nRemoved": 0,
                        "upserted": [],
                    }
                )
            return FakeInsertManyResult(inserted_ids)
        finally:
            self.in_flight -= 1

    def find(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> FakeCursor:
        self.find_calls += 1
        return FakeCursor(self, projection)

    async def delete_many(self, filter: Mapping[str, Any]) -> FakeDeleteResult:
        ids = set(filter["_id"]["$in"])
        self.delete_calls.append(len(ids))
        before = len(self.documents)
        self.documents = [document for document in self.documents if document["_id"] not in ids]
        return FakeDeleteResult(before - len(self.documents))

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        if self.fail_indexes_with is not None:
            raise self.fail_indexes_with
        name = kwargs.get("name") or "_".join(f"{field}_{direction}" for field, direction in keys)
        self.indexes[name] = {"key": list(keys), "unique": kwargs.get("unique", False)}
        return name

    async def index_information(self) -> Dict[str, Any]:
        return dict(self.indexes)


class SequenceFaker:
    """
    Deterministic Faker stand-in: emails come from a fixed sequence.
    """

    def __init__(self, emails: Iterable[str], user_name: str = "john.doe42") -> None:
        self._emails: Iterator[str] = iter(emails)
        self._user_name = user_name

    def user_name(self) -> str:
        return self._user_name

    def email(self) -> str:
        return next(self._emails)

    def numerify(self, text: str) -> str:
        return text.replace("#", "5")


def make_users(count: int, prefix: str = "user") -> List[Dict[str, Any]]:
    return [
        {"username": "Seeded", "email": f"{prefix}{n}@example.com", "phone": f"{n:010d}"}
        for n in range(count)
    ]


