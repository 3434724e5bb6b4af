# src/pulseboard/models/__init__.py
"""SQLAlchemy models for the Pulseboard application."""

from .notification import Notification
from .post import Category, Comment, Post, post_category
from .reaction import PostLike, PostUnlike
from .user import User, user_favorite

__all__ = [
    "Category", "Comment", "Post", "post_category",
    "Notification",
    "PostLike", "PostUnlike",
    "User", "user_favorite",
]
