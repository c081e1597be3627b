"""
Change Feed — in-process broadcasting of application update events.

Each subscriber owns a bounded asyncio queue registered under a group name
(one group per owning profile: ``application_{user_id}``). Publishers never
block: when a subscriber's queue is full its oldest event is dropped.

Only UPDATE events are published; inserts are not part of the feed.

A single API process delivers straight into its own feed. Several workers
share events through a Redis pub/sub channel (REDIS_URL), each one relaying
the channel into its local feed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections import defaultdict

import redis.asyncio as aioredis

from config import settings

logger = logging.getLogger(__name__)


def group_name(user_id: uuid.UUID | str) -> str:
    return f"application_{user_id}"


class ChangeFeed:
    def __init__(self, queue_size: int = 32):
        self._queue_size = queue_size
        self._groups: dict[str, set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, group: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._groups[group].add(queue)
        logger.info("Change feed subscriber added: group=%s, total=%d", group, len(self._groups[group]))
        return queue

    def unsubscribe(self, group: str, queue: asyncio.Queue) -> None:
        members = self._groups.get(group)
        if not members:
            return
        members.discard(queue)
        if not members:
            del self._groups[group]
        logger.info("Change feed subscriber removed: group=%s", group)

    def subscriber_count(self, group: str) -> int:
        return len(self._groups.get(group, ()))

    def publish(self, group: str, event: dict) -> int:
        """Deliver event to every subscriber of group; returns delivery count."""
        delivered = 0
        for queue in list(self._groups.get(group, ())):
            if queue.full():
                dropped = queue.get_nowait()
                logger.warning(
                    "Change feed queue full, dropping oldest event: group=%s, type=%s",
                    group, dropped.get("type"),
                )
            queue.put_nowait(event)
            delivered += 1
        return delivered


feed = ChangeFeed(queue_size=settings.CHANGE_QUEUE_SIZE)

# ── Cross-worker relay ─────────────────────────────────────
# With REDIS_URL set, every worker publishes to one Redis channel and relays
# what it hears into its own in-process feed.

CHANGES_CHANNEL = "recruit:application_changes"

_redis: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Singleton Redis connection."""
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def broadcast_application_update(user_id: uuid.UUID, new: dict, old: dict | None) -> int:
    """
    Publish an update of the application owned by user_id.

    Returns the number of in-process subscribers reached, or the number of
    relaying workers when the Redis channel is in use.
    """
    group = group_name(user_id)
    event = {"type": "update", "new": new, "old": old}

    if settings.REDIS_URL:
        r = await get_redis()
        delivered = await r.publish(CHANGES_CHANNEL, json.dumps({"group": group, "event": event}))
    else:
        delivered = feed.publish(group, event)
    logger.debug("Application update broadcast: user_id=%s, delivered=%d", user_id, delivered)
    return delivered


async def relay_from_redis(hub: ChangeFeed = feed) -> None:
    """Copy events from the shared channel into this worker's feed until cancelled."""
    r = await get_redis()
    pubsub = r.pubsub()
    await pubsub.subscribe(CHANGES_CHANNEL)
    logger.info("Change relay listening on %s", CHANGES_CHANNEL)
    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                payload = json.loads(message["data"])
                hub.publish(payload["group"], payload["event"])
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Ignoring malformed change message: %s", e)
    finally:
        await pubsub.unsubscribe(CHANGES_CHANNEL)
        await pubsub.aclose()
        logger.info("Change relay stopped")
