"""In-process change fan-out to local subscribers."""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock
import logging
from uuid import uuid4

logger = logging.getLogger(__name__)

MEDIA_ITEMS_TOPIC = "media_items"

Subscriber = Callable[[str], None]


class ChangeNotifier:
    """Best-effort, at-most-once broadcast of change tokens per topic.

    Nothing is buffered: a subscriber registered after a publish never sees it
    and is expected to re-fetch state when it connects.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._subscribers: dict[str, tuple[str, Subscriber]] = {}
        self.published_count = 0

    def subscribe(self, topic: str, callback: Subscriber) -> str:
        subscription_id = f"sub-{uuid4()}"
        with self._lock:
            self._subscribers[subscription_id] = (topic, callback)
        logger.debug("notifier.subscribed topic=%s subscription_id=%s", topic, subscription_id)
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        with self._lock:
            removed = self._subscribers.pop(subscription_id, None)
        return removed is not None

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return sum(1 for subscribed_topic, _ in self._subscribers.values() if subscribed_topic == topic)

    def publish(self, topic: str, token: str) -> int:
        """Deliver ``token`` to the topic's current subscribers; returns how many received it."""
        with self._lock:
            targets = [
                (subscription_id, callback)
                for subscription_id, (subscribed_topic, callback) in self._subscribers.items()
                if subscribed_topic == topic
            ]
            self.published_count += 1

        delivered = 0
        for subscription_id, callback in targets:
            try:
                callback(token)
            except Exception as exc:
                logger.warning(
                    "notifier.delivery_failed topic=%s subscription_id=%s reason=%s",
                    topic,
                    subscription_id,
                    type(exc).__name__,
                )
                continue
            delivered += 1
        return delivered

    def notify(self, token: str) -> int:
        return self.publish(MEDIA_ITEMS_TOPIC, token)


__all__ = ["ChangeNotifier", "MEDIA_ITEMS_TOPIC", "Subscriber"]
