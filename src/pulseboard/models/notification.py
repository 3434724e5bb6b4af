# src/pulseboard/models/notification.py
"""Durable notification records produced when a post is liked."""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulseboard.db.session import Base
from pulseboard.db.time import utcnow

from .post import Post
from .user import User


class Notification(Base):
    """Message addressed to a post owner about engagement with their post."""

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_recipient_read", "recipient_id", "is_read"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sender_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    recipient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    post_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    sender: Mapped[User | None] = relationship("User", foreign_keys=[sender_id])
    post: Mapped[Post | None] = relationship("Post")
