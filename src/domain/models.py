"""
Domain models for the Random Users service.

`User` is the generated record as it is inserted; `StoredUser` is the same
record read back from the store, carrying the store-assigned `_id` that
doubles as the stable insertion-order key for pagination.
"""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

USERNAME_PATTERN = r"^[A-Za-z]*$"
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"
PHONE_PATTERN = r"^\d{10}$"


class User(BaseModel):
    """
    A synthetic user record.

    The username may be empty: it is derived from a fake user name with every
    non-alphabetic character stripped, and no minimum length is enforced.
    """

    username: str = Field(..., pattern=USERNAME_PATTERN, description="Alphabetic user name.")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Unique email address.")
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Ten digit phone number.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    def to_document(self) -> Dict[str, Any]:
        """Return the dict handed to the store on insert."""
        return self.model_dump()


class StoredUser(User):
    """
    A user as persisted in the store, including its `_id`.
    """

    id: str = Field(..., alias="_id", description="Store-assigned identifier (ObjectId hex).")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value: Any) -> str:
        return str(value)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "StoredUser":
        return cls.model_validate(document)


__all__ = ["User", "StoredUser", "USERNAME_PATTERN", "EMAIL_PATTERN", "PHONE_PATTERN"]
