"""Data access helpers for working with posts."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from pulseboard.core.enums import PostStatus
from pulseboard.models import (
    Category,
    Comment,
    Notification,
    Post,
    PostLike,
    PostUnlike,
    post_category,
    user_favorite,
)

__all__ = ["PostCounts", "PostRepository"]

PostCounts = dict[str, int]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier with its creator and categories loaded."""
        stmt = (
            select(Post)
            .where(Post.id == post_id)
            .options(selectinload(Post.creator), selectinload(Post.categories))
        )
        return self.session.execute(stmt).scalars().first()

    def owner_of(self, post_id: int) -> int | None:
        """Return the creator id of a post without loading the row."""
        return self.session.execute(
            select(Post.creator_id).where(Post.id == post_id)
        ).scalar_one_or_none()

    def page(
        self,
        *,
        page: int,
        size: int,
        status: PostStatus | None = None,
        creator_id: int | None = None,
        category_id: int | None = None,
        search: str | None = None,
    ) -> tuple[list[Post], int]:
        """Return one page of posts, newest first, and the total match count."""
        filters = []
        if status is not None:
            filters.append(Post.status == status)
        if creator_id is not None:
            filters.append(Post.creator_id == creator_id)
        if category_id is not None:
            filters.append(
                Post.id.in_(
                    select(post_category.c.post_id).where(post_category.c.category_id == category_id)
                )
            )
        if search:
            filters.append(func.lower(Post.title).contains(search.lower(), autoescape=True))

        total = self.session.execute(
            select(func.count()).select_from(Post).where(*filters)
        ).scalar_one()
        stmt = (
            select(Post)
            .where(*filters)
            .options(selectinload(Post.creator), selectinload(Post.categories))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * size)
            .limit(size)
        )
        return list(self.session.execute(stmt).scalars()), int(total)

    def list_by_ids(self, post_ids: Sequence[int]) -> list[Post]:
        if not post_ids:
            return []
        stmt = (
            select(Post)
            .where(Post.id.in_(post_ids))
            .options(selectinload(Post.creator), selectinload(Post.categories))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def counts_for(self, post_ids: Sequence[int]) -> dict[int, PostCounts]:
        """Return like, unlike and comment counts keyed by post id."""
        counts: dict[int, PostCounts] = {
            post_id: {"likes": 0, "unlikes": 0, "comments": 0} for post_id in post_ids
        }
        if not post_ids:
            return counts
        for key, model in (("likes", PostLike), ("unlikes", PostUnlike), ("comments", Comment)):
            rows = self.session.execute(
                select(model.post_id, func.count())
                .where(model.post_id.in_(post_ids))
                .group_by(model.post_id)
            )
            for post_id, total in rows:
                counts[post_id][key] = int(total)
        return counts

    def categories_by_ids(self, category_ids: Sequence[int]) -> list[Category]:
        if not category_ids:
            return []
        stmt = select(Category).where(Category.id.in_(category_ids))
        return list(self.session.execute(stmt).scalars())

    def list_categories(self) -> list[Category]:
        return list(self.session.execute(select(Category).order_by(Category.name)).scalars())

    def purge(self, post_id: int) -> None:
        """Delete a post together with every row that hangs off it.

        Notifications keep their text but lose the post reference.
        """
        for model in (PostLike, PostUnlike, Comment):
            self.session.execute(
                delete(model)
                .where(model.post_id == post_id)
                .execution_options(synchronize_session=False)
            )
        self.session.execute(delete(user_favorite).where(user_favorite.c.post_id == post_id))
        self.session.execute(delete(post_category).where(post_category.c.post_id == post_id))
        self.session.execute(
            update(Notification)
            .where(Notification.post_id == post_id)
            .values(post_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Post).where(Post.id == post_id).execution_options(synchronize_session=False)
        )
