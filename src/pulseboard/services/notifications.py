"""Notification pipeline: durable record first, best-effort real-time push second."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from pulseboard.core.enums import PostStatus
from pulseboard.core.errors import NotFound
from pulseboard.db.time import utcnow
from pulseboard.models import Notification, Post, User
from pulseboard.services.engagement import EngagementEvent
from pulseboard.services.push import PushDispatcher

logger = logging.getLogger(__name__)

_UNKNOWN_SENDER = "Someone"


def like_message(liker_name: str | None) -> str:
    return f"{liker_name or _UNKNOWN_SENDER} has liked your post"


class NotificationPipeline:
    """Turns like events into stored notifications and live pushes.

    The two stages are independent: a failed read or insert is logged and does not stop
    the push, and a push that finds no session changes nothing in the store.
    Self-likes are notified like any other like.
    """

    def __init__(self, db: Session, dispatcher: PushDispatcher | None = None) -> None:
        self.db = db
        self.dispatcher = dispatcher

    def handle(self, event: EngagementEvent) -> Notification | None:
        """Process one engagement event; never raises on persistence or push failure.

        A store error while reading the sender or the post, or while inserting the
        notification, is rolled back and logged. The push is still attempted,
        falling back to an anonymous sender when the name could not be read.
        """
        if not event.liked:
            return None

        sender_name: str | None = None
        post_status: PostStatus | None = None
        stored: Notification | None = None
        try:
            sender_name = self.db.execute(
                select(User.name).where(User.id == event.liker_id)
            ).scalar_one_or_none()
            post_status = self.db.execute(
                select(Post.status).where(Post.id == event.post_id)
            ).scalar_one_or_none()
            stored = self._persist(event, like_message(sender_name))
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to persist like notification for post %s (sender=%s, to=%s)",
                event.post_id,
                event.liker_id,
                event.post_owner_id,
            )

        self._push(
            event,
            like_message(sender_name),
            sender_name,
            post_status.value if post_status else None,
        )
        return stored

    def relay(self, sender_id: int, post_id: int) -> bool:
        """Push an ephemeral like signal to the post owner without storing anything.

        Raises:
            NotFound: The post does not exist.
        """
        row = self.db.execute(
            select(Post.creator_id, Post.status).where(Post.id == post_id)
        ).first()
        if row is None:
            raise NotFound("Post does not exist!")
        owner_id, post_status = row
        sender_name = self.db.execute(
            select(User.name).where(User.id == sender_id)
        ).scalar_one_or_none()
        event = EngagementEvent(liker_id=sender_id, post_id=post_id, post_owner_id=owner_id)
        return self._push(event, like_message(sender_name), sender_name, post_status.value)

    def _persist(self, event: EngagementEvent, message: str) -> Notification:
        notification = Notification(
            message=message,
            sender_id=event.liker_id,
            recipient_id=event.post_owner_id,
            post_id=event.post_id,
            is_read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def _push(
        self,
        event: EngagementEvent,
        message: str,
        sender_name: str | None,
        post_status: str | None,
    ) -> bool:
        if self.dispatcher is None:
            return False
        payload: dict[str, Any] = {
            # Delivery id; unrelated to the stored notification's id.
            "id": uuid.uuid4().hex,
            "message": message,
            "sender": {"id": event.liker_id, "name": sender_name},
            "to": event.post_owner_id,
            "post": {"id": event.post_id, "status": post_status},
            "is_read": False,
            "created_at": utcnow().isoformat(),
        }
        return self.dispatcher.publish(event.post_owner_id, payload)


def list_notifications(db: Session, user_id: int) -> list[Notification]:
    """Return the user's notifications, newest first, with the related post loaded."""
    stmt = (
        select(Notification)
        .where(Notification.recipient_id == user_id)
        .options(selectinload(Notification.post))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(db.execute(stmt).scalars())


def mark_all_read(db: Session, user_id: int) -> int:
    """Mark every unread notification addressed to ``user_id`` as read.

    Returns:
        Number of notifications that changed state.
    """
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    return int(result.rowcount or 0)
