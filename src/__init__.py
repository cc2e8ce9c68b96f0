"""
Random Users - synthetic user generation and bulk loading for MongoDB.

This package provides a small HTTP service (and a matching CLI) that:

- Generates synthetic users with Faker (alphabetic username, unique email,
  ten digit phone)
- Bulk-loads them in unordered batches with a bounded worker pool
- Reads them back with fixed-size offset pagination
- Deletes them in throttled chunks
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from src.config import Settings, get_settings
from src.domain.models import StoredUser, User
from src.operations import (
    BatchLoader,
    BulkDeleter,
    DeleteResult,
    EmailGenerationError,
    PaginationReader,
    PopulateResult,
    UserGenerator,
)
from src.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "StoredUser",
    "User",
    # Operations
    "BatchLoader",
    "BulkDeleter",
    "DeleteResult",
    "EmailGenerationError",
    "PaginationReader",
    "PopulateResult",
    "UserGenerator",
    # Logging
    "configure_logging",
    "get_logger",
]
