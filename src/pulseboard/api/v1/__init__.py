"""Version 1 of the Pulseboard API."""

from .endpoints import (
    categories_router,
    notifications_router,
    posts_router,
    realtime_router,
    users_router,
)

__all__ = [
    "categories_router",
    "notifications_router",
    "posts_router",
    "realtime_router",
    "users_router",
]
