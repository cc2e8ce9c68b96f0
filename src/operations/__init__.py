"""
Operations package for the Random Users service.

Re-exports the store protocol, result contracts, and the populate/read/delete
operations so callers can import from `src.operations` directly.
"""

from src.operations.abstract import DeleteResult, PopulateResult, UserCollection
from src.operations.delete import BulkDeleter
from src.operations.generator import EmailGenerationError, UserGenerator
from src.operations.pagination import PaginationReader
from src.operations.populate import BatchLoader

__all__ = [
    # Contracts
    "DeleteResult",
    "PopulateResult",
    "UserCollection",
    # Operations
    "BatchLoader",
    "BulkDeleter",
    "EmailGenerationError",
    "PaginationReader",
    "UserGenerator",
]
