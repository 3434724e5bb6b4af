"""Read-side projections of posts and their engagement counts."""
from __future__ import annotations

from sqlalchemy.orm import Session

from pulseboard.core.enums import PostStatus
from pulseboard.core.errors import NotFound
from pulseboard.core.security import Identity
from pulseboard.models import Post
from pulseboard.repositories import EngagementRepository, PostRepository
from pulseboard.repositories.post_repo import PostCounts
from pulseboard.schemas.post import PostOut, PostPage
from pulseboard.services.authorization import Operation, authorize

_EMPTY_COUNTS: PostCounts = {"likes": 0, "unlikes": 0, "comments": 0}


def to_post_out(post: Post, counts: PostCounts | None = None) -> PostOut:
    """Convert a Post ORM instance to an API schema, exposing only public creator fields."""
    counts = counts or _EMPTY_COUNTS
    return PostOut(
        id=post.id,
        title=post.title,
        content=post.content,
        status=post.status,
        image_url=post.image_url,
        creator={"id": post.creator.id, "name": post.creator.name},
        categories=[{"id": c.id, "name": c.name} for c in post.categories],
        like_count=counts["likes"],
        unlike_count=counts["unlikes"],
        comment_count=counts["comments"],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


class PostQueryService:
    """Paginated and single-post reads."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.posts = PostRepository(db)

    def list_public(self, *, page: int, size: int) -> PostPage:
        """Public posts for anyone, authenticated or not."""
        return self._page(page=page, size=size, status=PostStatus.PUBLIC)

    def list_all(
        self,
        identity: Identity,
        *,
        page: int,
        size: int,
        category_id: int | None = None,
        search: str | None = None,
    ) -> PostPage:
        """Every post, optionally filtered by category and title substring; admin only."""
        authorize(
            identity,
            Operation.ADMINISTER,
            message="You do not have permission to all posts!",
        )
        return self._page(page=page, size=size, category_id=category_id, search=search)

    def list_private(self, identity: Identity, *, page: int, size: int) -> PostPage:
        """Posts owned by the caller, whatever their status."""
        authorize(identity, Operation.READ_PRIVATE)
        return self._page(page=page, size=size, creator_id=identity.user_id)

    def get_post(self, identity: Identity, post_id: int) -> PostOut:
        """Return one post with engagement counts.

        Public posts are open to everyone; private posts need any authenticated
        caller, ownership is not checked.
        """
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFound("No post found!")
        if post.status is not PostStatus.PUBLIC:
            authorize(identity, Operation.READ_PRIVATE)
        counts = self.posts.counts_for([post.id])
        return to_post_out(post, counts[post.id])

    def list_favorites(self, identity: Identity) -> list[PostOut]:
        authorize(identity, Operation.READ_PRIVATE)
        post_ids = EngagementRepository(self.db).favorite_post_ids(identity.user_id)
        posts = self.posts.list_by_ids(post_ids)
        counts = self.posts.counts_for([post.id for post in posts])
        return [to_post_out(post, counts[post.id]) for post in posts]

    def _page(self, *, page: int, size: int, **filters: object) -> PostPage:
        posts, total = self.posts.page(page=page, size=size, **filters)
        counts = self.posts.counts_for([post.id for post in posts])
        return PostPage(
            items=[to_post_out(post, counts[post.id]) for post in posts],
            total=total,
            page=page,
            size=size,
        )
