"""Version 1 API endpoints."""

from .endpoints import count_router, realtime_router, signups_router

__all__ = [
    "count_router",
    "realtime_router",
    "signups_router",
]
