"""Account registration, login and administration."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from pulseboard.core import security
from pulseboard.core.enums import Role
from pulseboard.core.errors import Conflict, NotFound, Unauthenticated, ValidationFailed
from pulseboard.core.security import Identity
from pulseboard.core.settings import settings
from pulseboard.models import Comment, Notification, Post, PostLike, PostUnlike, User, user_favorite
from pulseboard.repositories import EngagementRepository
from pulseboard.schemas.user import LoginResponse, UserCreate, UserOut, UserUpdate
from pulseboard.services.authorization import Operation, authorize
from pulseboard.services.images import ImageStore
from pulseboard.services.post_service import purge_post

__all__ = [
    "create_user",
    "login",
    "get_user",
    "get_users",
    "to_user_out",
    "update_profile",
    "set_role",
    "delete_user",
]

logger = logging.getLogger(__name__)


def _registration_errors(data: UserCreate) -> list[str]:
    errors: list[str] = []
    try:
        validate_email(data.email, check_deliverability=False)
    except EmailNotValidError:
        errors.append("E-Mail is invalid.")
    if not data.name.strip():
        errors.append("Name can not be empty!")
    if len(data.password) < settings.password_min_length:
        errors.append("Password too short!")
    return errors


def create_user(db: Session, data: UserCreate) -> User:
    """Register a new account.

    Raises:
        ValidationFailed: Malformed e-mail, blank name, short or mismatched password.
        Conflict: The e-mail is already registered.
    """
    errors = _registration_errors(data)
    if errors:
        raise ValidationFailed("Validation failed.", errors)
    email = data.email.strip().lower()
    if db.execute(select(User.id).where(User.email == email)).first() is not None:
        raise Conflict("User already exist!")
    if data.password != data.confirm_password:
        raise ValidationFailed("Validation failed.", ["Password does not match!"])

    user = User(
        email=email,
        name=data.name.strip(),
        password_hash=security.hash_password(data.password),
        image_url=data.image_url,
        role=Role.USER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def login(db: Session, email: str, password: str) -> LoginResponse:
    """Exchange credentials for a bearer token.

    Raises:
        NotFound: No account uses this e-mail.
        Unauthenticated: The password is wrong.
    """
    user = db.execute(select(User).where(User.email == email.strip().lower())).scalars().first()
    if user is None:
        raise NotFound("This user does not exist")
    if not security.verify_password(password, user.password_hash):
        raise Unauthenticated("Password is incorrect.")
    token = security.create_access_token(user.id, user.role)
    return LoginResponse(token=token, user_id=user.id)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("This user does not exist")
    return user


def get_users(db: Session, skip: int = 0, limit: int = 100) -> Sequence[User]:
    """Return users with simple offset-based pagination."""
    return db.execute(select(User).order_by(User.id).offset(skip).limit(limit)).scalars().all()


def to_user_out(db: Session, user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        image_url=user.image_url,
        role=user.role,
        favorites=EngagementRepository(db).favorite_post_ids(user.id),
    )


def update_profile(db: Session, identity: Identity, data: UserUpdate, images: ImageStore) -> User:
    """Replace the caller's e-mail, name, password and avatar.

    An avatar that is replaced or dropped is released once, after the commit.

    Raises:
        Unauthenticated: No caller.
        ValidationFailed: Malformed e-mail, blank name, short or mismatched password.
        Conflict: The new e-mail belongs to another account.
    """
    authorize(identity, Operation.MUTATE, owner_id=identity.user_id)
    errors = _registration_errors(data)
    if errors:
        raise ValidationFailed("Validation failed.", errors)
    if data.password != data.confirm_password:
        raise ValidationFailed("Validation failed.", ["Password does not match!"])

    user = get_user(db, identity.user_id)
    email = data.email.strip().lower()
    taken = db.execute(
        select(User.id).where(User.email == email, User.id != user.id)
    ).first()
    if taken is not None:
        raise Conflict("User already exist!")

    stale_image = user.image_url if user.image_url and user.image_url != data.image_url else None
    user.email = email
    user.name = data.name.strip()
    user.password_hash = security.hash_password(data.password)
    user.image_url = data.image_url
    db.commit()
    db.refresh(user)

    if stale_image:
        images.release(stale_image)
    logger.info("Updated profile of user %s", user.id)
    return user


def set_role(db: Session, identity: Identity, user_id: int, role: Role) -> User:
    """Change another user's role; administrators only."""
    authorize(identity, Operation.ADMINISTER)
    user = get_user(db, user_id)
    user.role = role
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, identity: Identity, user_id: int, images: ImageStore) -> int:
    """Delete an account with its posts and engagement; the account owner or an administrator."""
    authorize(identity, Operation.DELETE, owner_id=user_id)
    user = get_user(db, user_id)

    posts = db.execute(select(Post).where(Post.creator_id == user_id)).scalars().all()
    for post in posts:
        purge_post(db, post, images)

    for model in (PostLike, PostUnlike, Comment):
        db.execute(
            delete(model).where(model.user_id == user_id).execution_options(synchronize_session=False)
        )
    db.execute(delete(user_favorite).where(user_favorite.c.user_id == user_id))
    db.execute(
        delete(Notification)
        .where(Notification.recipient_id == user_id)
        .execution_options(synchronize_session=False)
    )
    db.execute(
        update(Notification)
        .where(Notification.sender_id == user_id)
        .values(sender_id=None)
        .execution_options(synchronize_session=False)
    )
    db.execute(delete(User).where(User.id == user_id).execution_options(synchronize_session=False))
    db.commit()
    db.expunge(user)
    logger.info("Deleted user %s", user_id)
    return user_id
