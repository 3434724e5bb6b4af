"""Atomic store primitives for reactions, comments and favorites.

Each method issues a single statement scoped to the affected row so that a
toggle never loads a whole post, mutates it in memory and writes it back.
Callers own the transaction boundary.
"""
from __future__ import annotations

from sqlalchemy import and_, delete, insert, or_, select, update
from sqlalchemy.orm import Session

from pulseboard.models import Comment, PostLike, PostUnlike, user_favorite

__all__ = ["EngagementRepository", "ReactionModel"]

ReactionModel = type[PostLike] | type[PostUnlike]


class EngagementRepository:
    """Thin wrapper around row-level engagement statements."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def remove_reaction(self, model: ReactionModel, post_id: int, user_id: int) -> int | None:
        """Delete the user's reaction row and return its id, or None if absent."""
        result = self.session.execute(
            delete(model)
            .where(model.post_id == post_id, model.user_id == user_id)
            .returning(model.id)
        )
        return result.scalar_one_or_none()

    def insert_reaction(self, model: ReactionModel, post_id: int, user_id: int) -> int:
        """Insert a reaction row and return its id."""
        result = self.session.execute(
            insert(model).values(post_id=post_id, user_id=user_id).returning(model.id)
        )
        return result.scalar_one()

    def has_reaction(self, model: ReactionModel, post_id: int, user_id: int) -> bool:
        stmt = select(model.id).where(model.post_id == post_id, model.user_id == user_id)
        return self.session.execute(stmt).first() is not None

    def get_comment(self, post_id: int, comment_id: int) -> Comment | None:
        stmt = select(Comment).where(Comment.id == comment_id, Comment.post_id == post_id)
        return self.session.execute(stmt).scalars().first()

    def list_comments(self, post_id: int) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return list(self.session.execute(stmt).scalars())

    def rewrite_comment(self, post_id: int, comment_id: int, user_id: int, text: str) -> bool | None:
        """Replace a comment's text and return the resulting ``edited`` flag.

        The flag is computed in the same UPDATE from the stored values: it stays
        true once set and becomes true when the text actually changes.
        """
        result = self.session.execute(
            update(Comment)
            .where(
                Comment.id == comment_id,
                Comment.post_id == post_id,
                Comment.user_id == user_id,
            )
            .values(
                edited=or_(Comment.edited.is_(True), Comment.text != text),
                text=text,
            )
            .returning(Comment.edited)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    def remove_comment(self, post_id: int, comment_id: int) -> bool:
        result = self.session.execute(
            delete(Comment)
            .where(Comment.id == comment_id, Comment.post_id == post_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def toggle_favorite(self, user_id: int, post_id: int) -> bool:
        """Flip favorite membership and return True when the post is now a favorite."""
        membership = and_(user_favorite.c.user_id == user_id, user_favorite.c.post_id == post_id)
        removed = self.session.execute(delete(user_favorite).where(membership)).rowcount
        if removed:
            return False
        self.session.execute(insert(user_favorite).values(user_id=user_id, post_id=post_id))
        return True

    def favorite_post_ids(self, user_id: int) -> list[int]:
        stmt = select(user_favorite.c.post_id).where(user_favorite.c.user_id == user_id)
        return list(self.session.execute(stmt).scalars())
