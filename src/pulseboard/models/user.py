# src/pulseboard/models/user.py
"""SQLAlchemy models for accounts and their favorites."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pulseboard.core.enums import Role
from pulseboard.db.session import Base
from pulseboard.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post

# Favorites are a plain membership set between users and posts.
user_favorite = Table(
    "user_favorite",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("user_account.id", ondelete="CASCADE"), primary_key=True),
    Column("post_id", Integer, ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Registered account that authors posts and engages with others."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=16, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    posts: Mapped[list[Post]] = relationship(
        "Post",
        back_populates="creator",
        order_by="Post.created_at",
    )
    favorites: Mapped[list[Post]] = relationship(
        "Post",
        secondary=user_favorite,
        viewonly=True,
    )
