# src/waitlist_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .count import router as count_router
from .realtime import router as realtime_router
from .signups import router as signups_router

__all__ = [
    "count_router",
    "realtime_router",
    "signups_router",
]
