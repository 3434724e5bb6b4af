"""Closed vocabularies parsed at the API boundary."""

from __future__ import annotations

from enum import Enum


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def parse(cls, raw: object) -> _CaseInsensitiveEnum:
        """Return the member matching ``raw`` regardless of case.

        Raises:
            ValueError: If ``raw`` names no member.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            candidate = raw.strip().lower()
            for member in cls:
                if member.value.lower() == candidate:
                    return member
        allowed = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown {cls.__name__} {raw!r} (expected one of: {allowed})")


class Role(_CaseInsensitiveEnum):
    """Account role; administrators bypass ownership checks."""

    USER = "USER"
    ADMIN = "ADMIN"


class PostStatus(_CaseInsensitiveEnum):
    """Visibility of a post."""

    PUBLIC = "public"
    PRIVATE = "private"
