"""Exceptions raised by the waitlist services.

Every error is translated into an HTTP response at the API boundary; none of
them should escape to the server loop.
"""

from __future__ import annotations


class WaitlistError(RuntimeError):
    """Base exception for waitlist failures."""


class InvalidEmailError(WaitlistError):
    """Raised when a submitted email does not look like an address."""

    def __init__(self, email: str | None) -> None:
        super().__init__(f"Invalid email: {email!r}")
        self.email = email


class DuplicateSignupError(WaitlistError):
    """Raised when an email is already on the waitlist.

    The count is reported unchanged so callers can still show it.
    """

    def __init__(self, email: str, count: int) -> None:
        super().__init__(f"Email already registered: {email!r}")
        self.email = email
        self.count = count

    @property
    def result(self) -> "SignupResult":
        """Return the rejected outcome as a :class:`SignupResult`."""
        from waitlist_stage.services.store import SignupResult

        return SignupResult(accepted=False, count=self.count)


class StorageUnavailableError(WaitlistError):
    """Raised when the persistence layer cannot be read or written.

    A write that raised this must not be assumed to have happened.
    """


class ServiceUnavailableError(WaitlistError):
    """Raised by the counter service when storage is unavailable."""


class ChannelDeliveryError(WaitlistError):
    """Raised when a message cannot be handed to a realtime subscriber."""
