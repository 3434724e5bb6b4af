# src/pulseboard/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentOut
from .notification import MarkReadResponse, NotificationOut
from .post import (
    CategoryOut,
    FavoriteResponse,
    PostCreate,
    PostOut,
    PostPage,
    PostStatusUpdate,
    PostUpdate,
    ReactionResponse,
)
from .user import LoginRequest, LoginResponse, RoleUpdate, UserCreate, UserOut, UserUpdate

__all__ = [
    "CategoryOut", "FavoriteResponse", "PostCreate", "PostOut", "PostPage",
    "PostStatusUpdate", "PostUpdate", "ReactionResponse",
    "CommentCreate", "CommentOut",
    "MarkReadResponse", "NotificationOut",
    "LoginRequest", "LoginResponse", "RoleUpdate", "UserCreate", "UserOut", "UserUpdate",
]
