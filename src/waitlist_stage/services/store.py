"""Signup store contract shared by the persistence backends.

A store exclusively owns the registered emails and the running count. All
mutation goes through :meth:`SignupStore.try_add_signup`, which performs the
dedupe-and-increment step under a per-instance lock so that two concurrent
submissions can never both observe "not registered" for the same address.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock

from waitlist_stage.core.settings import Settings

# Configure logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignupRecord:
    """An accepted waitlist email and the moment it was accepted."""

    email: str
    submitted_at: datetime


@dataclass(frozen=True)
class SignupResult:
    """Outcome of a signup attempt."""

    accepted: bool
    count: int


@dataclass(frozen=True)
class WaitlistSnapshot:
    """Point-in-time view of the persisted waitlist, oldest signup first."""

    emails: tuple[SignupRecord, ...] = field(default_factory=tuple)
    total_count: int = 0


class SignupStore(ABC):
    """Durable, race-safe record of signups and the running count."""

    def __init__(self, seed_count: int) -> None:
        if seed_count < 0:
            raise ValueError("seed_count must be non-negative")
        self.seed_count = seed_count
        self._write_lock = RLock()

    def try_add_signup(self, email: str) -> SignupResult:
        """Register ``email`` if it is new and return the resulting count.

        Raises:
            DuplicateSignupError: the email is already registered; the
                error carries the unchanged count.
            StorageUnavailableError: the backend could not be read or
                written.
        """
        with self._write_lock:
            result = self._add_signup_locked(email)
        logger.info("Accepted waitlist signup, count is now %s", result.count)
        return result

    @abstractmethod
    def _add_signup_locked(self, email: str) -> SignupResult:
        """Dedupe and append ``email``; called with the write lock held."""

    @abstractmethod
    def get_count(self) -> int:
        """Return the current count, initializing it to the seed if needed."""

    @abstractmethod
    def list_signups(self) -> list[SignupRecord]:
        """Return every signup, most recent first."""

    @abstractmethod
    def snapshot(self) -> WaitlistSnapshot:
        """Return the persisted emails and total count."""

    def verify_invariant(self) -> bool:
        """Return True if the total equals the seed plus the number of emails."""
        snapshot = self.snapshot()
        return snapshot.total_count == self.seed_count + len(snapshot.emails)

    def close(self) -> None:
        """Release backend resources."""


def build_store(config: Settings) -> SignupStore:
    """Construct the storage backend selected by ``config.storage_backend``."""
    if config.storage_backend == "json":
        from waitlist_stage.services.json_store import JsonFileSignupStore

        logger.info("Using JSON signup store at %s", config.json_store_path)
        return JsonFileSignupStore(config.json_store_path, seed_count=config.seed_count)

    from waitlist_stage.db.session import build_engine
    from waitlist_stage.services.sql_store import SqlSignupStore

    logger.info("Using SQL signup store")
    engine = build_engine(config.database_url, echo=config.sql_debug)
    return SqlSignupStore(engine, seed_count=config.seed_count)
