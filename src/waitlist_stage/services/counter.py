"""Counter service: the public operations over the signup store."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Final

from waitlist_stage.services.broadcast import BroadcastChannel
from waitlist_stage.services.errors import (
    InvalidEmailError,
    ServiceUnavailableError,
    StorageUnavailableError,
)
from waitlist_stage.services.store import SignupRecord, SignupResult, SignupStore

# Configure logger for this module
logger = logging.getLogger(__name__)

EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str | None) -> bool:
    """Return True if ``email`` has the shape ``local@domain.tld``."""
    return email is not None and EMAIL_PATTERN.fullmatch(email) is not None


class CounterService:
    """Validates submissions, records them and announces count changes.

    Storage calls run in a worker thread so a slow disk or database never
    stalls the event loop that also serves the realtime channel.
    """

    def __init__(self, store: SignupStore, channel: BroadcastChannel) -> None:
        self.store = store
        self.channel = channel

    async def submit_email(self, email: str | None) -> SignupResult:
        """Register ``email`` and broadcast the new count.

        Raises:
            InvalidEmailError: the email is malformed; storage is untouched.
            DuplicateSignupError: the email is already registered.
            ServiceUnavailableError: the store could not record the signup.
        """
        if email is None or not is_valid_email(email):
            raise InvalidEmailError(email)

        try:
            result = await asyncio.to_thread(self.store.try_add_signup, email)
        except StorageUnavailableError as exc:
            logger.error("Signup could not be stored: %s", exc)
            raise ServiceUnavailableError("Signup storage is unavailable") from exc

        self.channel.notify(result.count)
        return result

    async def get_current_count(self) -> int:
        """Return the authoritative count."""
        try:
            return await asyncio.to_thread(self.store.get_count)
        except StorageUnavailableError as exc:
            logger.error("Count could not be read: %s", exc)
            raise ServiceUnavailableError("Signup storage is unavailable") from exc

    async def list_signups(self) -> tuple[int, list[SignupRecord]]:
        """Return the current count and every signup, most recent first.

        Both come from one snapshot, so the count always matches the entries.
        """
        try:
            snapshot = await asyncio.to_thread(self.store.snapshot)
        except StorageUnavailableError as exc:
            logger.error("Signups could not be listed: %s", exc)
            raise ServiceUnavailableError("Signup storage is unavailable") from exc
        return snapshot.total_count, list(reversed(snapshot.emails))

    def close(self) -> None:
        """Disconnect every subscriber and release the store."""
        self.channel.close_all()
        self.store.close()
