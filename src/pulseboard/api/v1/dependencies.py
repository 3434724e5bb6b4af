"""Shared API dependencies for authentication and service wiring."""

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pulseboard.core.security import ANONYMOUS, Identity, decode_identity
from pulseboard.db.session import SessionLocal, get_db
from pulseboard.services.engagement import EngagementLedger
from pulseboard.services.images import ImageStore
from pulseboard.services.notifications import NotificationPipeline
from pulseboard.services.presence import PresenceRegistry
from pulseboard.services.push import PushDispatcher

# Optional bearer: a missing header must not fail the request.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

SessionFactory = Callable[[], AbstractContextManager[Session]]


def get_session_factory() -> SessionFactory:
    """Return a factory for short-lived sessions used outside the request scope."""
    return SessionLocal


SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]


def get_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Identity:
    """Resolve the caller from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent

    Returns:
        The authenticated identity, or an anonymous one for a missing or invalid token
    """
    if credentials is None:
        return ANONYMOUS
    return decode_identity(credentials.credentials)


IdentityDep = Annotated[Identity, Depends(get_identity)]


def get_presence_registry(request: Request) -> PresenceRegistry:
    """Return the presence registry owned by the running application."""
    return request.app.state.presence


def get_push_dispatcher(request: Request) -> PushDispatcher:
    """Return the push dispatcher owned by the running application."""
    return request.app.state.dispatcher


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.images


PresenceDep = Annotated[PresenceRegistry, Depends(get_presence_registry)]
DispatcherDep = Annotated[PushDispatcher, Depends(get_push_dispatcher)]
ImageStoreDep = Annotated[ImageStore, Depends(get_image_store)]


def get_notification_pipeline(db: SessionDep, dispatcher: DispatcherDep) -> NotificationPipeline:
    return NotificationPipeline(db, dispatcher)


PipelineDep = Annotated[NotificationPipeline, Depends(get_notification_pipeline)]


def get_engagement_ledger(db: SessionDep, pipeline: PipelineDep) -> EngagementLedger:
    """Build a ledger whose like events feed the notification pipeline."""
    return EngagementLedger(db, listeners=[pipeline.handle])


LedgerDep = Annotated[EngagementLedger, Depends(get_engagement_ledger)]
