"""Business logic services for the Pulseboard application."""

from .authorization import Operation, authorize
from .engagement import EngagementEvent, EngagementLedger, ReactionResult
from .images import ImageStore
from .notifications import NotificationPipeline
from .post_query import PostQueryService
from .presence import PresenceEntry, PresenceRegistry
from .push import PushDispatcher, PushMessage

__all__ = [
    "Operation", "authorize",
    "EngagementEvent", "EngagementLedger", "ReactionResult",
    "ImageStore",
    "NotificationPipeline",
    "PostQueryService",
    "PresenceEntry", "PresenceRegistry",
    "PushDispatcher", "PushMessage",
]
