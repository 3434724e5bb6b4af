"""Routers for the version 1 API."""

from .categories import router as categories_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .realtime import router as realtime_router
from .users import router as users_router

__all__ = [
    "categories_router",
    "notifications_router",
    "posts_router",
    "realtime_router",
    "users_router",
]
