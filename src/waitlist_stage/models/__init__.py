"""SQLAlchemy models for the Waitlist Stage service."""

from .counter import COUNTER_ROW_ID, CounterState
from .signup import Signup

__all__ = [
    "COUNTER_ROW_ID",
    "CounterState",
    "Signup",
]
