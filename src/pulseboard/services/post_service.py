"""Service-level helpers for creating, updating and deleting posts."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from pulseboard.core.enums import PostStatus
from pulseboard.core.errors import NotFound, Unauthenticated, ValidationFailed
from pulseboard.core.security import Identity
from pulseboard.models import Category, Post, User
from pulseboard.repositories import PostRepository
from pulseboard.schemas.post import PostCreate, PostOut
from pulseboard.services.authorization import Operation, authorize
from pulseboard.services.images import ImageStore
from pulseboard.services.post_query import to_post_out

logger = logging.getLogger(__name__)


def _require_inputs(data: PostCreate) -> None:
    if not data.title.strip() or not data.content.strip():
        raise ValidationFailed(data=["Please fill all inputs!"])


def _require_post(repo: PostRepository, post_id: int) -> Post:
    post = repo.get_by_id(post_id)
    if post is None:
        raise NotFound("No post found!")
    return post


def _resolve_categories(repo: PostRepository, category_ids: list[int]) -> list[Category]:
    wanted = set(category_ids)
    categories = repo.categories_by_ids(sorted(wanted))
    if len(categories) != len(wanted):
        raise NotFound("Category not found")
    return categories


def create_post(db: Session, identity: Identity, data: PostCreate) -> PostOut:
    """Persist a new post owned by the caller.

    Raises:
        Unauthenticated: No caller, or the caller's account no longer exists.
        ValidationFailed: Title or content is blank.
        NotFound: A referenced category does not exist.
    """
    authorize(identity, Operation.CREATE)
    _require_inputs(data)
    creator = db.get(User, identity.user_id)
    if creator is None:
        raise Unauthenticated("Invalid user.")

    repo = PostRepository(db)
    post = Post(
        title=data.title,
        content=data.content,
        status=data.status,
        image_url=data.image_url,
        creator=creator,
        categories=_resolve_categories(repo, data.category_ids),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return to_post_out(post)


def update_post(
    db: Session,
    identity: Identity,
    post_id: int,
    data: PostCreate,
    images: ImageStore,
) -> PostOut:
    """Replace a post's editable fields; owner or administrator only.

    A previous image that is replaced or dropped is released once, after the
    update is committed.
    """
    repo = PostRepository(db)
    post = _require_post(repo, post_id)
    authorize(
        identity,
        Operation.MUTATE,
        owner_id=post.creator_id,
        message="You do NOT have access to update this post!",
    )
    _require_inputs(data)

    stale_image = post.image_url if post.image_url and post.image_url != data.image_url else None
    post.title = data.title
    post.content = data.content
    post.status = data.status
    post.image_url = data.image_url
    post.categories = _resolve_categories(repo, data.category_ids)
    db.commit()
    db.refresh(post)

    if stale_image:
        images.release(stale_image)
    counts = repo.counts_for([post.id])
    return to_post_out(post, counts[post.id])


def update_status(db: Session, identity: Identity, post_id: int, status: PostStatus) -> PostOut:
    """Switch a post between public and private; owner or administrator only."""
    repo = PostRepository(db)
    post = _require_post(repo, post_id)
    authorize(identity, Operation.MUTATE, owner_id=post.creator_id)
    post.status = status
    db.commit()
    db.refresh(post)
    counts = repo.counts_for([post.id])
    return to_post_out(post, counts[post.id])


def delete_post(db: Session, identity: Identity, post_id: int, images: ImageStore) -> int:
    """Delete a post and everything attached to it; owner or administrator only.

    Returns:
        The deleted post's id.
    """
    repo = PostRepository(db)
    post = _require_post(repo, post_id)
    authorize(identity, Operation.DELETE, owner_id=post.creator_id)
    purge_post(db, post, images)
    return post_id


def purge_post(db: Session, post: Post, images: ImageStore) -> None:
    """Remove a post row and its dependants, then release its image exactly once."""
    post_id, image_url = post.id, post.image_url
    PostRepository(db).purge(post_id)
    db.commit()
    db.expunge(post)
    logger.info("Deleted post %s", post_id)
    if image_url:
        images.release(image_url)
