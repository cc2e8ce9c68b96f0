"""
Offset pagination over the users collection.

Pages are 1-based and ordered by `_id` ascending, which follows insertion
order. Cost grows with the page number because the store still walks every
skipped document.
"""

from __future__ import annotations

from typing import List

from pymongo import ASCENDING

from src.domain.models import StoredUser
from src.operations.abstract import UserCollection
from src.utils.logging import get_logger

log = get_logger(__name__)

# Largest skip the server accepts (a signed 64-bit integer).
MAX_SKIP = 2**63 - 1


def skip_for_page(page: int, page_size: int) -> int:
    """Number of documents preceding `page`."""
    return (page - 1) * page_size


class PaginationReader:
    """
    Read users one fixed-size page at a time.
    """

    def __init__(self, collection: UserCollection) -> None:
        self.collection = collection

    async def list_users(self, page: int, page_size: int) -> List[StoredUser]:
        """
        Return page `page` of users; an empty list means the page does not exist.
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        skip = skip_for_page(page, page_size)
        if skip > MAX_SKIP:
            log.info("Requested page is beyond any possible collection size", extra={"page": page, "skip": skip})
            return []
        log.info(
            f"Requesting page {page} with limit {page_size}, skipping {skip} users",
            extra={"page": page, "limit": page_size, "skip": skip},
        )
        cursor = self.collection.find({}).sort("_id", ASCENDING).skip(skip).limit(page_size)
        documents = await cursor.to_list(length=None)

        if not documents:
            log.warning("No users found", extra={"page": page})
            return []

        log.info(f"Number of users retrieved: {len(documents)}", extra={"page": page, "rows": len(documents)})
        return [StoredUser.from_document(document) for document in documents]


__all__ = ["MAX_SKIP", "PaginationReader", "skip_for_page"]
