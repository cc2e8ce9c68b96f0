"""
Domain package for the Random Users service.

Exports the user models shared by the generator, the operations, and the
HTTP layer. Keep this package focused on data definitions and validation.
"""

from src.domain.models import StoredUser, User

__all__ = [
    "StoredUser",
    "User",
]
