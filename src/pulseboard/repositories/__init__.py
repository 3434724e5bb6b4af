"""Data access helpers wrapping SQLAlchemy sessions."""

from .engagement_repo import EngagementRepository
from .post_repo import PostRepository

__all__ = ["EngagementRepository", "PostRepository"]
