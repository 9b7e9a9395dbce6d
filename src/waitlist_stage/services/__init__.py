# src/waitlist_stage/services/__init__.py
"""Business logic services for the Waitlist Stage application."""

from .broadcast import BroadcastChannel, Subscriber, SubscriberState
from .counter import CounterService
from .errors import (
    ChannelDeliveryError,
    DuplicateSignupError,
    InvalidEmailError,
    ServiceUnavailableError,
    StorageUnavailableError,
    WaitlistError,
)
from .store import SignupRecord, SignupResult, SignupStore, WaitlistSnapshot, build_store

__all__ = [
    "BroadcastChannel",
    "ChannelDeliveryError",
    "CounterService",
    "DuplicateSignupError",
    "InvalidEmailError",
    "ServiceUnavailableError",
    "SignupRecord",
    "SignupResult",
    "SignupStore",
    "StorageUnavailableError",
    "Subscriber",
    "SubscriberState",
    "WaitlistError",
    "WaitlistSnapshot",
    "build_store",
]
