"""Pydantic schemas for the Waitlist Stage API."""

from .realtime import ClientMessage, CountUpdateMessage
from .signup import (
    CountResponse,
    ErrorResponse,
    SignupAccepted,
    SignupCreate,
    SignupEntry,
    SignupListing,
)

__all__ = [
    "ClientMessage",
    "CountResponse",
    "CountUpdateMessage",
    "ErrorResponse",
    "SignupAccepted",
    "SignupCreate",
    "SignupEntry",
    "SignupListing",
]
