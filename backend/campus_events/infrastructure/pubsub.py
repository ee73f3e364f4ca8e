"""
In-process publish/subscribe broker for live updates.

One broker is created at application startup and kept on app.state.
Topics are created when the first subscriber arrives and dropped when the
last one leaves. Delivery is at-most-once: nothing is stored for absent
subscribers, and a subscriber whose queue is full misses the message.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Set

from campus_events.core.logging import get_logger

logger = get_logger(__name__)


class Subscription:
    """A live feed of payloads published on one topic, in publish order."""

    def __init__(self, topic: str, max_queue_size: int):
        self.topic = topic
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)

    def _offer(self, payload: Any) -> bool:
        try:
            self._queue.put_nowait(payload)
            return True
        except asyncio.QueueFull:
            return False

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        return await self._queue.get()


class PubSub:
    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._topics: Dict[str, Set[Subscription]] = {}

    @asynccontextmanager
    async def subscribe(self, topic: str) -> AsyncIterator[Subscription]:
        subscription = Subscription(topic, self.max_queue_size)
        self._topics.setdefault(topic, set()).add(subscription)
        logger.info("pubsub_subscribed", topic=topic, subscribers=len(self._topics[topic]))
        try:
            yield subscription
        finally:
            subscribers = self._topics.get(topic)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._topics[topic]
            logger.info("pubsub_unsubscribed", topic=topic)

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver to every current subscriber without waiting. Returns deliveries."""
        delivered = 0
        for subscription in list(self._topics.get(topic, ())):
            if subscription._offer(payload):
                delivered += 1
            else:
                logger.warning("pubsub_subscriber_lagging", topic=topic)
        logger.debug("pubsub_published", topic=topic, delivered=delivered)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    @property
    def topics(self) -> list[str]:
        return list(self._topics)

    def close(self) -> None:
        self._topics.clear()
