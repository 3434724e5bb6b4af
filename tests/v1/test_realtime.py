# tests/v1/test_realtime.py
"""Tests for the WebSocket transport and live like notifications."""

from contextlib import contextmanager

import pytest
from starlette.websockets import WebSocketDisconnect

from pulseboard.api.v1.dependencies import get_session_factory
from pulseboard.core.security import create_access_token


def _ws_url(user) -> str:
    return f"/ws?token={create_access_token(user.id, user.role)}"


def _register(ws) -> dict:
    ws.send_json({"event": "newUser", "data": {}})
    return ws.receive_json()


def test_new_user_registers_presence(client, app, test_user) -> None:
    with client.websocket_connect(_ws_url(test_user)) as ws:
        frame = _register(ws)
        assert frame["event"] == "registered"
        assert frame["data"]["userId"] == test_user.id
        assert app.state.presence.lookup_by_user(test_user.id) is not None

    assert app.state.presence.lookup_by_user(test_user.id) is None


def test_anonymous_socket_cannot_register(client, app) -> None:
    with client.websocket_connect("/ws") as ws:
        frame = _register(ws)
        assert frame == {"event": "error", "data": {"message": "Not authenticated!"}}
    assert len(app.state.presence) == 0


def test_like_pushes_notification_to_owner_session(client, test_post, test_user, other_user, other_auth_token) -> None:
    """A like by another user reaches the owner's open session with the liker's name."""
    with client.websocket_connect(_ws_url(test_user)) as ws:
        _register(ws)

        response = client.put(f"/api/v1/posts/{test_post.id}/like", headers=other_auth_token)
        assert response.status_code == 200

        frame = ws.receive_json()
        assert frame["event"] == "newNotification"
        assert frame["data"]["post"]["id"] == test_post.id
        assert frame["data"]["to"] == test_user.id
        assert "Other User" in frame["data"]["message"]


def test_send_notification_relays_without_storing(client, test_post, test_user, other_user, auth_token) -> None:
    with client.websocket_connect(_ws_url(test_user)) as owner_ws:
        _register(owner_ws)
        with client.websocket_connect(_ws_url(other_user)) as liker_ws:
            _register(liker_ws)
            liker_ws.send_json({"event": "sendNotification", "data": {"postId": test_post.id}})

            frame = owner_ws.receive_json()
            assert frame["event"] == "newNotification"
            assert frame["data"]["sender"] == {"id": other_user.id, "name": other_user.name}

    assert client.get("/api/v1/notifications", headers=auth_token).json() == []


def test_send_notification_requires_registration(client, test_post, other_user) -> None:
    with client.websocket_connect(_ws_url(other_user)) as ws:
        ws.send_json({"event": "sendNotification", "data": {"postId": test_post.id}})
        frame = ws.receive_json()
        assert frame["event"] == "error"


def test_send_notification_for_missing_post(client, other_user) -> None:
    with client.websocket_connect(_ws_url(other_user)) as ws:
        _register(ws)
        ws.send_json({"event": "sendNotification", "data": {"postId": 8080}})
        assert ws.receive_json() == {"event": "error", "data": {"message": "Post does not exist!"}}


def test_invalid_frame_gets_error(client, test_user) -> None:
    with client.websocket_connect(_ws_url(test_user)) as ws:
        ws.send_text("{not json")
        assert ws.receive_json()["event"] == "error"
        ws.send_json({"event": "dance"})
        assert ws.receive_json()["data"]["message"] == "Unknown event: dance"


def test_disconnect_event_closes_session(client, app, test_user) -> None:
    with client.websocket_connect(_ws_url(test_user)) as ws:
        _register(ws)
        ws.send_json({"event": "disconnect"})
        with pytest.raises(WebSocketDisconnect):
            ws.receive_json()

    assert app.state.presence.lookup_by_user(test_user.id) is None


def test_each_relay_frame_opens_and_closes_its_own_session(
    client, app, db_session, test_post, test_user, other_user
) -> None:
    events: list[str] = []

    @contextmanager
    def _scoped_session():
        events.append("open")
        yield db_session
        events.append("close")

    app.dependency_overrides[get_session_factory] = lambda: _scoped_session

    with client.websocket_connect(_ws_url(test_user)) as owner_ws:
        _register(owner_ws)
        with client.websocket_connect(_ws_url(other_user)) as liker_ws:
            _register(liker_ws)
            assert events == []

            for _ in range(2):
                liker_ws.send_json({"event": "sendNotification", "data": {"postId": test_post.id}})
                assert owner_ws.receive_json()["event"] == "newNotification"

    assert events == ["open", "close", "open", "close"]
