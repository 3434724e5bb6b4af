"""Password hashing and bearer token helpers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from pulseboard.core.enums import Role
from pulseboard.core.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_bcrypt_rounds,
)


@dataclass(frozen=True)
class Identity:
    """Caller identity derived from a bearer token.

    An absent or invalid token yields an unauthenticated identity rather than an
    error; authorization decides what an anonymous caller may do.
    """

    is_authenticated: bool = False
    user_id: int | None = None
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role is Role.ADMIN


ANONYMOUS = Identity()


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check ``password`` against a stored hash; malformed hashes never match."""
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, role: Role, expires_minutes: int | None = None) -> str:
    """Issue a signed JWT carrying the user id and role."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    claims = {"sub": str(user_id), "role": role.value, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_identity(token: str | None) -> Identity:
    """Resolve a bearer token into an :class:`Identity`; never raises."""
    if not token:
        return ANONYMOUS
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        user_id = int(payload["sub"])
        role = Role.parse(payload.get("role", Role.USER.value))
    except (JWTError, KeyError, TypeError, ValueError):
        return ANONYMOUS
    return Identity(is_authenticated=True, user_id=user_id, role=role)
