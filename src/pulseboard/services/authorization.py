"""Stateless authorization decisions for every write and restricted read."""

from __future__ import annotations

from enum import Enum

from pulseboard.core.errors import Forbidden, Unauthenticated
from pulseboard.core.security import Identity


class Operation(str, Enum):
    """Operation classes the gate distinguishes."""

    # Any authenticated identity may perform these.
    READ_PRIVATE = "read_private"
    ENGAGE = "engage"
    CREATE = "create"
    # Owner or administrator only.
    MUTATE = "mutate"
    DELETE = "delete"
    # Administrator only.
    ADMINISTER = "administer"


_IDENTITY_ONLY = frozenset({Operation.READ_PRIVATE, Operation.ENGAGE, Operation.CREATE})


def authorize(
    identity: Identity,
    operation: Operation,
    owner_id: int | None = None,
    *,
    message: str | None = None,
) -> None:
    """Raise unless ``identity`` may perform ``operation`` on a resource owned by ``owner_id``.

    Rules are evaluated in order: anonymous callers are rejected, administrators
    are always allowed, identity-only operations are allowed, an owner may
    mutate or delete their own resource, anything else is forbidden. Reads of
    public posts never reach the gate.

    Raises:
        Unauthenticated: The caller presented no valid credential.
        Forbidden: The caller is authenticated but not entitled.
    """
    if not identity.is_authenticated or identity.user_id is None:
        raise Unauthenticated()
    if identity.is_admin:
        return
    if operation in _IDENTITY_ONLY:
        return
    if operation is not Operation.ADMINISTER and owner_id is not None and identity.user_id == owner_id:
        return
    raise Forbidden(message)


def is_authorized(identity: Identity, operation: Operation, owner_id: int | None = None) -> bool:
    """Boolean form of :func:`authorize` for callers that branch instead of failing."""
    try:
        authorize(identity, operation, owner_id)
    except (Forbidden, Unauthenticated):
        return False
    return True
