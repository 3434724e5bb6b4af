"""In-process registry of open real-time sessions.

The registry is owned by the application instance (``app.state.presence``) and
handed to callers through dependency injection, so a shared backing store can
replace it later without touching call sites. All operations are synchronous:
a session-close handler removes its entry without yielding to the event loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class PushChannel(Protocol):
    """Anything that can deliver a JSON frame to one connected client."""

    async def send_json(self, data: Any) -> None: ...


@dataclass
class PresenceEntry:
    """Binding between one open session and the user who opened it."""

    session_id: str
    user_id: int
    channel: PushChannel | None = field(default=None, repr=False, compare=False)


class PresenceRegistry:
    """Two consistent indices over open sessions: by session id and by user id."""

    def __init__(self) -> None:
        self._by_session: dict[str, PresenceEntry] = {}
        # Per user, session ids in registration order; the first one receives pushes.
        self._by_user: dict[int, list[str]] = {}

    def __len__(self) -> int:
        return len(self._by_session)

    def register(
        self,
        session_id: str,
        user_id: int,
        channel: PushChannel | None = None,
    ) -> PresenceEntry:
        """Record that ``user_id`` owns ``session_id``.

        Registering the same session twice keeps the original entry. A user may
        hold several sessions at once, one entry each.
        """
        existing = self._by_session.get(session_id)
        if existing is not None:
            if existing.user_id == user_id:
                return existing
            # The connection switched identity; drop the stale binding first.
            self.remove(session_id)

        entry = PresenceEntry(session_id=session_id, user_id=user_id, channel=channel)
        self._by_session[session_id] = entry
        self._by_user.setdefault(user_id, []).append(session_id)
        logger.info("Presence registered: user=%s session=%s", user_id, session_id)
        return entry

    def lookup_by_user(self, user_id: int) -> PresenceEntry | None:
        """Return the user's earliest still-open session, if any."""
        sessions = self._by_user.get(user_id)
        if not sessions:
            return None
        return self._by_session.get(sessions[0])

    def lookup_by_session(self, session_id: str) -> PresenceEntry | None:
        """Return the entry owning ``session_id``; resolves the acting user of a socket."""
        return self._by_session.get(session_id)

    def remove(self, session_id: str) -> PresenceEntry | None:
        """Forget a session on disconnect; unknown sessions are ignored."""
        entry = self._by_session.pop(session_id, None)
        if entry is None:
            return None
        sessions = self._by_user.get(entry.user_id, [])
        if session_id in sessions:
            sessions.remove(session_id)
        if not sessions:
            self._by_user.pop(entry.user_id, None)
        logger.info("Presence removed: user=%s session=%s", entry.user_id, session_id)
        return entry

    def online_user_ids(self) -> list[int]:
        return list(self._by_user)
