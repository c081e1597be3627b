"""Tests for the in-process change feed and what the API publishes to it."""

import json
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import bearer
from services.change_feed import ChangeFeed, feed, group_name


def test_publish_reaches_only_group_members():
    hub = ChangeFeed(queue_size=4)
    mine = hub.subscribe("application_a")
    other = hub.subscribe("application_b")

    assert hub.publish("application_a", {"type": "update"}) == 1
    assert mine.qsize() == 1
    assert other.qsize() == 0


def test_full_queue_drops_oldest():
    """Publishing never blocks; the oldest event makes room."""
    hub = ChangeFeed(queue_size=2)
    queue = hub.subscribe("g")
    for n in range(3):
        hub.publish("g", {"type": "update", "n": n})
    assert [queue.get_nowait()["n"] for _ in range(queue.qsize())] == [1, 2]


def test_unsubscribe_removes_empty_group():
    hub = ChangeFeed()
    queue = hub.subscribe("g")
    hub.unsubscribe("g", queue)
    assert hub.subscriber_count("g") == 0
    assert hub.publish("g", {"type": "update"}) == 0
    # Unsubscribing twice is harmless
    hub.unsubscribe("g", queue)


def test_group_name_is_per_owner():
    user_id = uuid.uuid4()
    assert group_name(user_id) == f"application_{user_id}"


@pytest.mark.asyncio
async def test_decision_publishes_exactly_one_update(api, register, make_admin, draft_payload):
    """One admin decision → one update event carrying new and old status."""
    admin = await register("boss@example.com")
    await make_admin("boss@example.com")
    ana = await register("ana@example.com")
    created = (await api.post("/api/applications/", json=draft_payload, headers=bearer(ana))).json()

    group = group_name(ana["user"]["id"])
    queue = feed.subscribe(group)
    try:
        resp = await api.put(
            f"/api/applications/{created['id']}/status",
            json={"status": "rejected", "admin_notes": "Incomplete hours"},
            headers=bearer(admin),
        )
        assert resp.status_code == 200

        assert queue.qsize() == 1
        event = queue.get_nowait()
        assert event["type"] == "update"
        assert event["new"]["status"] == "rejected"
        assert event["new"]["admin_notes"] == "Incomplete hours"
        assert event["old"]["status"] == "pending"
    finally:
        feed.unsubscribe(group, queue)


@pytest.mark.asyncio
async def test_insert_is_not_published(api, register, draft_payload):
    """Creating an application is not an update event."""
    ana = await register("ana@example.com")
    group = group_name(ana["user"]["id"])
    queue = feed.subscribe(group)
    try:
        await api.post("/api/applications/", json=draft_payload, headers=bearer(ana))
        assert queue.qsize() == 0

        await api.patch("/api/applications/own", json={"age": 30}, headers=bearer(ana))
        assert queue.qsize() == 1
    finally:
        feed.unsubscribe(group, queue)


# ── Redis relay (mocked Redis) ─────────────────────────────


@pytest.mark.asyncio
async def test_broadcast_goes_through_redis_when_configured(monkeypatch):
    from config import settings
    from services.change_feed import CHANGES_CHANNEL, broadcast_application_update

    monkeypatch.setattr(settings, "REDIS_URL", "redis://localhost:6379/0")
    user_id = uuid.uuid4()
    local = feed.subscribe(group_name(user_id))
    try:
        with patch("services.change_feed.get_redis") as mock_get_redis:
            mock_conn = AsyncMock()
            mock_conn.publish.return_value = 2
            mock_get_redis.return_value = mock_conn

            delivered = await broadcast_application_update(user_id, {"status": "approved"}, {"status": "pending"})

        assert delivered == 2
        channel, body = mock_conn.publish.await_args.args
        assert channel == CHANGES_CHANNEL
        assert json.loads(body) == {
            "group": group_name(user_id),
            "event": {"type": "update", "new": {"status": "approved"}, "old": {"status": "pending"}},
        }
        # Local delivery happens via the relay, not directly
        assert local.qsize() == 0
    finally:
        feed.unsubscribe(group_name(user_id), local)


@pytest.mark.asyncio
async def test_relay_copies_channel_messages_into_feed():
    from services.change_feed import CHANGES_CHANNEL, relay_from_redis

    event = {"type": "update", "new": {"status": "approved"}, "old": None}
    messages = [
        {"type": "subscribe", "data": 1},
        {"type": "message", "data": "not json"},
        {"type": "message", "data": json.dumps({"group": "application_x", "event": event})},
    ]

    async def listen():
        for message in messages:
            yield message

    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()
    pubsub.listen = listen
    conn = MagicMock()
    conn.pubsub.return_value = pubsub

    hub = ChangeFeed()
    queue = hub.subscribe("application_x")
    with patch("services.change_feed.get_redis", AsyncMock(return_value=conn)):
        await relay_from_redis(hub)

    pubsub.subscribe.assert_awaited_once_with(CHANGES_CHANNEL)
    pubsub.aclose.assert_awaited_once()
    assert queue.qsize() == 1
    assert queue.get_nowait() == event
