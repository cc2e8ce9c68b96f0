"""
Synthetic user generation backed by Faker.

Each generator tracks the emails it has handed out and retries Faker until it
produces one it has not seen. The retry loop is bounded; the unique index on
the store stays the authority across generator instances and processes.
"""

from __future__ import annotations

import re
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from faker import Faker

from src.domain.models import User
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.config import Settings

log = get_logger(__name__)

_NON_ALPHA = re.compile(r"[^A-Za-z]")
PHONE_DIGITS = 10


class EmailGenerationError(RuntimeError):
    """Raised when no unseen email turned up within the attempt budget."""


class UserGenerator:
    """
    Produce `User` records with alphabetic usernames, unique emails, and
    ten digit phone numbers.
    """

    def __init__(
        self,
        faker: Optional[Faker] = None,
        seed: Optional[int] = None,
        locale: str = "en_US",
        max_attempts: int = 100,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.faker = faker or Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)
        self.max_attempts = max_attempts
        self._seen_emails: Set[str] = set()
        # Guards the Faker instance and the email set; batches are built off the event loop.
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "UserGenerator":
        return cls(
            seed=settings.faker_seed,
            locale=settings.faker_locale,
            max_attempts=settings.email_max_attempts,
        )

    @property
    def seen_count(self) -> int:
        return len(self._seen_emails)

    def reset(self) -> None:
        """Forget every email generated so far."""
        with self._lock:
            self._seen_emails.clear()

    def username(self) -> str:
        # May come back empty; accepted as-is.
        return _NON_ALPHA.sub("", self.faker.user_name())

    def phone(self) -> str:
        return self.faker.numerify("#" * PHONE_DIGITS)

    def email(self) -> str:
        """
        Return an email not produced before by this generator and remember it.

        Raises
        ------
        EmailGenerationError
            If `max_attempts` candidates in a row were all duplicates.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.faker.email()
            if candidate not in self._seen_emails:
                self._seen_emails.add(candidate)
                if attempt > 1:
                    log.debug("Email retries needed", extra={"attempts": attempt})
                return candidate
        raise EmailGenerationError(
            f"No unseen email after {self.max_attempts} attempts "
            f"({len(self._seen_emails)} emails already generated)"
        )

    def next_user(self) -> User:
        with self._lock:
            return User(username=self.username(), email=self.email(), phone=self.phone())

    def documents(self, count: int) -> List[Dict[str, Any]]:
        """Generate `count` users as insertable documents."""
        with self._lock:
            return [
                User(username=self.username(), email=self.email(), phone=self.phone()).to_document()
                for _ in range(count)
            ]


__all__ = ["EmailGenerationError", "UserGenerator"]
