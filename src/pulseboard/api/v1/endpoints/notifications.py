# src/pulseboard/api/v1/endpoints/notifications.py
"""Stored notification endpoints."""

from fastapi import APIRouter

from pulseboard.api.v1.dependencies import IdentityDep, SessionDep
from pulseboard.schemas.notification import MarkReadResponse, NotificationOut
from pulseboard.services.authorization import Operation, authorize
from pulseboard.services.notifications import list_notifications, mark_all_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def get_notifications(identity: IdentityDep, db: SessionDep) -> list[NotificationOut]:
    """Return the caller's notifications, newest first."""
    authorize(identity, Operation.READ_PRIVATE)
    return [NotificationOut.model_validate(n) for n in list_notifications(db, identity.user_id)]


@router.put("/read-all", response_model=MarkReadResponse)
async def read_all_notifications(identity: IdentityDep, db: SessionDep) -> MarkReadResponse:
    """Mark every notification addressed to the caller as read."""
    authorize(identity, Operation.READ_PRIVATE)
    return MarkReadResponse(updated=mark_all_read(db, identity.user_id))
