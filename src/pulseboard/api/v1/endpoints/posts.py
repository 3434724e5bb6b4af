# src/pulseboard/api/v1/endpoints/posts.py
"""Post, comment, reaction and favorite endpoints."""

from fastapi import APIRouter, Query, status

from pulseboard.api.v1.dependencies import IdentityDep, ImageStoreDep, LedgerDep, SessionDep
from pulseboard.core.errors import ValidationFailed
from pulseboard.core.settings import settings
from pulseboard.schemas.comment import CommentCreate, CommentOut
from pulseboard.schemas.post import (
    FavoriteResponse,
    PostCreate,
    PostOut,
    PostPage,
    PostStatusUpdate,
    PostUpdate,
    ReactionResponse,
)
from pulseboard.services import post_service
from pulseboard.services.authorization import Operation, authorize
from pulseboard.services.post_query import PostQueryService

router = APIRouter(prefix="/posts", tags=["posts"])

_LISTING_SCOPES = ("public", "private", "all")


@router.get("", response_model=PostPage)
async def list_posts(
    identity: IdentityDep,
    db: SessionDep,
    scope: str = Query("public", alias="status", description="public, private (own posts) or all"),
    page: int = Query(1, ge=1, description="1-based page number"),
    size: int | None = Query(None, ge=1, le=settings.max_page_size, description="Page size"),
    category_id: int | None = Query(None, description="Filter by category (all only)"),
    search: str | None = Query(None, description="Case-insensitive title substring (all only)"),
) -> PostPage:
    """List posts.

    ``status=public`` is open to anonymous callers, ``status=private`` returns
    the caller's own posts and ``status=all`` is reserved for administrators.
    """
    scope = scope.strip().lower()
    if scope not in _LISTING_SCOPES:
        raise ValidationFailed(data=[f"status must be one of: {', '.join(_LISTING_SCOPES)}"])
    page_size = size or settings.default_page_size
    queries = PostQueryService(db)

    if scope == "public":
        return queries.list_public(page=page, size=page_size)
    if scope == "private":
        return queries.list_private(identity, page=page, size=page_size)
    return queries.list_all(
        identity,
        page=page,
        size=page_size,
        category_id=category_id,
        search=search,
    )


@router.get("/favorites", response_model=list[PostOut])
async def list_favorites(identity: IdentityDep, db: SessionDep) -> list[PostOut]:
    """Return the caller's favorite posts."""
    return PostQueryService(db).list_favorites(identity)


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: int, identity: IdentityDep, db: SessionDep) -> PostOut:
    """Get a single post with its like, unlike and comment counts."""
    return PostQueryService(db).get_post(identity, post_id)


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(data: PostCreate, identity: IdentityDep, db: SessionDep) -> PostOut:
    """Create a post owned by the caller."""
    return post_service.create_post(db, identity, data)


@router.put("/{post_id}", response_model=PostOut)
async def update_post(
    post_id: int,
    data: PostUpdate,
    identity: IdentityDep,
    db: SessionDep,
    images: ImageStoreDep,
) -> PostOut:
    """Replace a post's fields; owner or administrator."""
    return post_service.update_post(db, identity, post_id, data, images)


@router.put("/{post_id}/status", response_model=PostOut)
async def update_post_status(
    post_id: int,
    data: PostStatusUpdate,
    identity: IdentityDep,
    db: SessionDep,
) -> PostOut:
    """Switch a post between public and private; owner or administrator."""
    return post_service.update_status(db, identity, post_id, data.status)


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    identity: IdentityDep,
    db: SessionDep,
    images: ImageStoreDep,
) -> dict[str, int]:
    """Delete a post, its engagement and its image; owner or administrator."""
    return {"id": post_service.delete_post(db, identity, post_id, images)}


@router.put("/{post_id}/like", response_model=ReactionResponse)
async def like_post(post_id: int, identity: IdentityDep, ledger: LedgerDep) -> ReactionResponse:
    """Like a post, or take the like back if it is already there."""
    authorize(identity, Operation.ENGAGE)
    result = ledger.like(post_id, identity.user_id)
    return ReactionResponse(id=result.reaction_id, post_id=result.post_id, active=result.active)


@router.put("/{post_id}/unlike", response_model=ReactionResponse)
async def unlike_post(post_id: int, identity: IdentityDep, ledger: LedgerDep) -> ReactionResponse:
    """Unlike a post, or take the unlike back if it is already there."""
    authorize(identity, Operation.ENGAGE)
    result = ledger.unlike(post_id, identity.user_id)
    return ReactionResponse(id=result.reaction_id, post_id=result.post_id, active=result.active)


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(
    post_id: int,
    identity: IdentityDep,
    db: SessionDep,
    ledger: LedgerDep,
) -> list[CommentOut]:
    """List a post's comments, oldest first; same visibility as the post."""
    PostQueryService(db).get_post(identity, post_id)
    return [CommentOut.model_validate(comment) for comment in ledger.list_comments(post_id)]


@router.put("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    identity: IdentityDep,
    ledger: LedgerDep,
) -> CommentOut:
    authorize(identity, Operation.ENGAGE)
    return CommentOut.model_validate(ledger.add_comment(post_id, identity.user_id, data.text))


@router.put("/{post_id}/comments/{comment_id}", response_model=CommentOut)
async def edit_comment(
    post_id: int,
    comment_id: int,
    data: CommentCreate,
    identity: IdentityDep,
    ledger: LedgerDep,
) -> CommentOut:
    """Edit the caller's own comment."""
    authorize(identity, Operation.ENGAGE)
    comment = ledger.edit_comment(post_id, comment_id, identity.user_id, data.text)
    return CommentOut.model_validate(comment)


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(
    post_id: int,
    comment_id: int,
    identity: IdentityDep,
    ledger: LedgerDep,
) -> dict[str, int]:
    """Delete the caller's own comment."""
    authorize(identity, Operation.ENGAGE)
    ledger.delete_comment(post_id, comment_id, identity.user_id)
    return {"post_id": post_id, "comment_id": comment_id}


@router.put("/{post_id}/favorite", response_model=FavoriteResponse)
async def favorite_post(post_id: int, identity: IdentityDep, ledger: LedgerDep) -> FavoriteResponse:
    """Add the post to the caller's favorites, or remove it if already there."""
    authorize(identity, Operation.ENGAGE)
    result = ledger.toggle_favorite(identity.user_id, post_id)
    return FavoriteResponse(post_id=result.post_id, favorited=result.favorited)
