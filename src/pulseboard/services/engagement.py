"""Engagement ledger: likes, unlikes, comments and favorites on posts.

The ledger is the single writer of reaction state. Like and unlike are
mutually exclusive per user and post; repeating the same reaction toggles it
off. Only a newly created like produces an :class:`EngagementEvent`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pulseboard.core.errors import Conflict, Forbidden, NotFound, Unauthenticated, ValidationFailed
from pulseboard.models import Comment, PostLike, PostUnlike, User
from pulseboard.repositories import EngagementRepository, PostRepository
from pulseboard.repositories.engagement_repo import ReactionModel


@dataclass(frozen=True)
class EngagementEvent:
    """Emitted when a user newly likes a post."""

    liker_id: int
    post_id: int
    post_owner_id: int
    liked: bool = True


@dataclass(frozen=True)
class ReactionResult:
    """Outcome of a like/unlike call.

    ``reaction_id`` is the id of the row that was created or, when the call
    toggled an existing reaction off, of the row that was removed.
    """

    reaction_id: int
    post_id: int
    active: bool
    event: EngagementEvent | None = None


@dataclass(frozen=True)
class FavoriteResult:
    post_id: int
    favorited: bool


EventListener = Callable[[EngagementEvent], None]


class EngagementLedger:
    """Owns reaction, comment and favorite state for posts."""

    def __init__(self, db: Session, listeners: Iterable[EventListener] = ()) -> None:
        self.db = db
        self.posts = PostRepository(db)
        self.repo = EngagementRepository(db)
        self._listeners = list(listeners)

    def like(self, post_id: int, user_id: int) -> ReactionResult:
        """Toggle the user's like; a new like clears any unlike and emits an event.

        Raises:
            NotFound: The post does not exist.
            Unauthenticated: The user no longer exists.
        """
        owner_id = self._require_post_owner(post_id)
        result = self._toggle(PostLike, PostUnlike, post_id, user_id)
        if not result.active:
            return result

        event = EngagementEvent(liker_id=user_id, post_id=post_id, post_owner_id=owner_id)
        self._emit(event)
        return ReactionResult(result.reaction_id, post_id, True, event)

    def unlike(self, post_id: int, user_id: int) -> ReactionResult:
        """Toggle the user's unlike; a new unlike clears any like. Never emits.

        Raises:
            NotFound: The post does not exist.
            Unauthenticated: The user no longer exists.
        """
        self._require_post_owner(post_id)
        return self._toggle(PostUnlike, PostLike, post_id, user_id)

    def add_comment(self, post_id: int, user_id: int, text: str) -> Comment:
        """Append a comment to a post.

        Raises:
            NotFound: The post does not exist.
            ValidationFailed: The text is empty.
        """
        self._require_post_owner(post_id)
        self._require_user(user_id)
        if not text or not text.strip():
            raise ValidationFailed(data=["Comment text can not be empty!"])

        comment = Comment(post_id=post_id, user_id=user_id, text=text, edited=False)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def edit_comment(self, post_id: int, comment_id: int, user_id: int, text: str) -> Comment:
        """Replace the text of the caller's own comment.

        ``edited`` turns true when the text changes and never turns back;
        re-submitting identical text leaves it as it was.

        Raises:
            NotFound: The post or comment does not exist.
            Forbidden: The caller did not author the comment.
            ValidationFailed: The text is empty.
        """
        comment = self._require_comment(post_id, comment_id)
        if comment.user_id != user_id:
            raise Forbidden("Not authorized.")
        if not text or not text.strip():
            raise ValidationFailed(data=["Comment text can not be empty!"])

        edited = self.repo.rewrite_comment(post_id, comment_id, user_id, text)
        if edited is None:
            # Removed between the read and the write.
            self.db.rollback()
            raise NotFound("This comment does not exist!")
        self.db.commit()
        self.db.refresh(comment)
        return comment

    def delete_comment(self, post_id: int, comment_id: int, user_id: int) -> int:
        """Remove the caller's own comment and return its id.

        Raises:
            NotFound: The post or comment does not exist.
            Forbidden: The caller did not author the comment.
        """
        comment = self._require_comment(post_id, comment_id)
        if comment.user_id != user_id:
            raise Forbidden("Not authorized.")

        self.repo.remove_comment(post_id, comment_id)
        self.db.commit()
        self.db.expunge(comment)
        return comment_id

    def list_comments(self, post_id: int) -> list[Comment]:
        self._require_post_owner(post_id)
        return self.repo.list_comments(post_id)

    def toggle_favorite(self, user_id: int, post_id: int) -> FavoriteResult:
        """Flip whether the post is in the user's favorites.

        Raises:
            NotFound: The post does not exist.
        """
        self._require_post_owner(post_id)
        self._require_user(user_id)
        favorited = self.repo.toggle_favorite(user_id, post_id)
        self.db.commit()
        return FavoriteResult(post_id=post_id, favorited=favorited)

    def reaction_state(self, post_id: int, user_id: int) -> tuple[bool, bool]:
        """Return ``(liked, unliked)`` for the user on the post."""
        return (
            self.repo.has_reaction(PostLike, post_id, user_id),
            self.repo.has_reaction(PostUnlike, post_id, user_id),
        )

    def _toggle(
        self,
        model: ReactionModel,
        opposite: ReactionModel,
        post_id: int,
        user_id: int,
    ) -> ReactionResult:
        self._require_user(user_id)
        removed_id = self.repo.remove_reaction(model, post_id, user_id)
        if removed_id is not None:
            self.db.commit()
            return ReactionResult(reaction_id=removed_id, post_id=post_id, active=False)

        self.repo.remove_reaction(opposite, post_id, user_id)
        try:
            created_id = self.repo.insert_reaction(model, post_id, user_id)
            self.db.commit()
        except IntegrityError as err:
            self.db.rollback()
            if self.repo.has_reaction(model, post_id, user_id):
                # A concurrent request from the same user won the insert.
                raise Conflict("Reaction already recorded") from err
            raise
        return ReactionResult(reaction_id=created_id, post_id=post_id, active=True)

    def _emit(self, event: EngagementEvent) -> None:
        for listener in self._listeners:
            listener(event)

    def _require_user(self, user_id: int) -> None:
        if self.db.execute(select(User.id).where(User.id == user_id)).first() is None:
            raise Unauthenticated("Invalid user.")

    def _require_post_owner(self, post_id: int) -> int:
        owner_id = self.posts.owner_of(post_id)
        if owner_id is None:
            raise NotFound("Post does not exist!")
        return owner_id

    def _require_comment(self, post_id: int, comment_id: int) -> Comment:
        self._require_post_owner(post_id)
        comment = self.repo.get_comment(post_id, comment_id)
        if comment is None:
            raise NotFound("This comment does not exist!")
        return comment
