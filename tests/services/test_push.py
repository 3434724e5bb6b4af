# tests/services/test_push.py
"""Tests for the real-time push dispatcher."""

from typing import Any

import pytest

from pulseboard.services.presence import PresenceRegistry
from pulseboard.services.push import NEW_NOTIFICATION_EVENT, PushDispatcher, PushMessage


class FakeChannel:
    def __init__(self, fail: bool = False) -> None:
        self.frames: list[Any] = []
        self.fail = fail

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(data)


@pytest.fixture
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.mark.asyncio
async def test_published_push_reaches_registered_session(registry) -> None:
    channel = FakeChannel()
    registry.register("s1", 7, channel)
    dispatcher = PushDispatcher(registry)
    await dispatcher.start()
    try:
        assert dispatcher.publish(7, {"message": "hi"}) is True
        await dispatcher.join()
    finally:
        await dispatcher.stop()

    assert channel.frames == [{"event": NEW_NOTIFICATION_EVENT, "data": {"message": "hi"}}]


@pytest.mark.asyncio
async def test_publish_before_start_is_dropped(registry) -> None:
    dispatcher = PushDispatcher(registry)
    assert dispatcher.running is False
    assert dispatcher.publish(7, {"message": "hi"}) is False


@pytest.mark.asyncio
async def test_deliver_without_session_returns_false(registry) -> None:
    dispatcher = PushDispatcher(registry)
    assert await dispatcher.deliver(PushMessage(recipient_id=99, payload={})) is False


@pytest.mark.asyncio
async def test_transport_failure_is_absorbed_and_loop_continues(registry) -> None:
    broken = FakeChannel(fail=True)
    healthy = FakeChannel()
    registry.register("s1", 1, broken)
    registry.register("s2", 2, healthy)
    dispatcher = PushDispatcher(registry)
    await dispatcher.start()
    try:
        dispatcher.publish(1, {"n": 1})
        dispatcher.publish(2, {"n": 2})
        await dispatcher.join()
        assert dispatcher.running is True
    finally:
        await dispatcher.stop()

    assert broken.frames == []
    assert healthy.frames == [{"event": NEW_NOTIFICATION_EVENT, "data": {"n": 2}}]


@pytest.mark.asyncio
async def test_full_queue_drops_instead_of_blocking(registry) -> None:
    dispatcher = PushDispatcher(registry, maxsize=1)
    await dispatcher.start()
    try:
        assert dispatcher.publish(1, {"n": 1}) is True
        assert dispatcher.publish(1, {"n": 2}) is False
    finally:
        await dispatcher.stop()


@pytest.mark.asyncio
async def test_stop_is_idempotent(registry) -> None:
    dispatcher = PushDispatcher(registry)
    await dispatcher.stop()
    await dispatcher.start()
    await dispatcher.stop()
    await dispatcher.stop()
    assert dispatcher.running is False
