# src/pulseboard/api/v1/endpoints/realtime.py
"""WebSocket transport for presence registration and live notifications."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from pulseboard.api.v1.dependencies import SessionFactoryDep
from pulseboard.core.errors import PulseboardError
from pulseboard.core.security import ANONYMOUS, decode_identity
from pulseboard.services.authorization import Operation, is_authorized
from pulseboard.services.notifications import NotificationPipeline
from pulseboard.services.presence import PresenceRegistry
from pulseboard.services.push import PushDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

NEW_USER_EVENT = "newUser"
SEND_NOTIFICATION_EVENT = "sendNotification"
DISCONNECT_EVENT = "disconnect"
REGISTERED_EVENT = "registered"
ERROR_EVENT = "error"


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": ERROR_EVENT, "data": {"message": message}})


@router.websocket("/ws")
async def realtime(
    websocket: WebSocket,
    session_factory: SessionFactoryDep,
    token: str | None = Query(None, description="Bearer token of the connecting user"),
) -> None:
    """Serve one client session until it disconnects.

    Frames in both directions are ``{"event": <name>, "data": {...}}``.
    """
    registry: PresenceRegistry = websocket.app.state.presence
    dispatcher: PushDispatcher = websocket.app.state.dispatcher
    identity = decode_identity(token) if token else ANONYMOUS
    session_id = uuid.uuid4().hex

    await websocket.accept()
    logger.info("WebSocket session %s opened", session_id)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(websocket, "Invalid JSON frame.")
                continue
            if not isinstance(frame, dict):
                await _send_error(websocket, "Invalid frame.")
                continue

            event = frame.get("event")
            data: dict[str, Any] = frame.get("data") or {}

            if event == NEW_USER_EVENT:
                if not is_authorized(identity, Operation.ENGAGE):
                    await _send_error(websocket, "Not authenticated!")
                    continue
                registry.register(session_id, identity.user_id, websocket)
                await websocket.send_json(
                    {
                        "event": REGISTERED_EVENT,
                        "data": {"sessionId": session_id, "userId": identity.user_id},
                    }
                )
            elif event == SEND_NOTIFICATION_EVENT:
                entry = registry.lookup_by_session(session_id)
                if entry is None:
                    await _send_error(websocket, "Session is not registered.")
                    continue
                post_id = data.get("postId") if isinstance(data, dict) else None
                if not isinstance(post_id, int):
                    await _send_error(websocket, "postId is required.")
                    continue
                # Sessions are scoped to one frame, never to the socket.
                with session_factory() as db:
                    try:
                        NotificationPipeline(db, dispatcher).relay(entry.user_id, post_id)
                    except PulseboardError as exc:
                        await _send_error(websocket, exc.message)
            elif event == DISCONNECT_EVENT:
                await websocket.close()
                break
            else:
                await _send_error(websocket, f"Unknown event: {event}")
    except WebSocketDisconnect:
        logger.info("WebSocket session %s disconnected", session_id)
    finally:
        registry.remove(session_id)
