"""Async client that mirrors the live waitlist count."""

from .transport import CounterSource, CounterSourceError, HttpCounterSource
from .tween import CounterTween
from .view import CounterView

__all__ = [
    "CounterSource",
    "CounterSourceError",
    "CounterTween",
    "CounterView",
    "HttpCounterSource",
]
