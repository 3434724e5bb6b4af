"""Fire-and-forget delivery of real-time pushes to connected sessions.

Producers call :meth:`PushDispatcher.publish`, which only enqueues. A single
background task drains the queue, resolves the recipient's session through the
presence registry and sends the frame. Nothing is retried: a recipient without
an open session reads the durable notification later.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any

from pulseboard.core.settings import settings
from pulseboard.services.presence import PresenceRegistry

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_EVENT = "newNotification"


@dataclass(frozen=True)
class PushMessage:
    """One ephemeral frame addressed to a user."""

    recipient_id: int
    payload: dict[str, Any] = field(default_factory=dict)
    event: str = NEW_NOTIFICATION_EVENT


class PushDispatcher:
    """Consumes queued pushes and sends each to the recipient's open session."""

    def __init__(self, registry: PresenceRegistry, maxsize: int | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Presence registry used to find the target session.
            maxsize: Queue bound; defaults to ``PUSH_QUEUE_MAXSIZE`` (0 = unbounded).
        """
        self.registry = registry
        self._maxsize = settings.push_queue_maxsize if maxsize is None else maxsize
        self._queue: asyncio.Queue[PushMessage] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background delivery loop on the running event loop."""
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self._maxsize)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the delivery loop; undelivered pushes are discarded."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._queue = None

    def publish(
        self,
        recipient_id: int,
        payload: dict[str, Any],
        event: str = NEW_NOTIFICATION_EVENT,
    ) -> bool:
        """Queue a push without waiting for delivery.

        Returns:
            True if the push was queued, False if it was dropped.
        """
        if not self.running or self._queue is None:
            logger.debug("Push dispatcher not running; dropping %s for user %s", event, recipient_id)
            return False
        try:
            self._queue.put_nowait(PushMessage(recipient_id=recipient_id, payload=payload, event=event))
        except asyncio.QueueFull:
            logger.warning("Push queue full; dropping %s for user %s", event, recipient_id)
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued push has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def deliver(self, message: PushMessage) -> bool:
        """Send one push to the recipient's session; absorb every transport failure."""
        entry = self.registry.lookup_by_user(message.recipient_id)
        if entry is None or entry.channel is None:
            logger.debug("No open session for user %s; push dropped", message.recipient_id)
            return False
        try:
            await entry.channel.send_json({"event": message.event, "data": message.payload})
        except Exception as exc:  # noqa: BLE001 - a vanished client is expected
            logger.warning(
                "Push to user %s on session %s failed: %s",
                message.recipient_id,
                entry.session_id,
                exc,
            )
            return False
        logger.debug("Pushed %s to user %s", message.event, message.recipient_id)
        return True

    async def _run(self) -> None:
        queue = self._queue
        if queue is None:  # pragma: no cover - start() always sets the queue
            return
        while True:
            message = await queue.get()
            try:
                await self.deliver(message)
            finally:
                queue.task_done()
