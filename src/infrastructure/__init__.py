"""
Infrastructure package for the Random Users service.

Centralizes MongoDB connectivity concerns (client lifecycle, indexes).
Keep this layer focused on I/O and resource management, decoupled from
the operations and the HTTP layer.
"""

from src.infrastructure.db_factory import (
    MongoClientManager,
    ensure_indexes,
    get_client,
    get_users_collection,
    ping,
)

__all__ = [
    "MongoClientManager",
    "ensure_indexes",
    "get_client",
    "get_users_collection",
    "ping",
]
