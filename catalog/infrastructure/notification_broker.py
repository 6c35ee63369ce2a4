"""Change Notification Broker — in-process fan-out of catalog events to live subscribers.

Invariants:
    - Each Subscription owns its own asyncio.Queue (independent cursor)
    - publish() never blocks and never raises for slow or absent subscribers
    - Every OPEN/DELIVERING subscription receives each publish exactly once,
      in publish order; CLOSED subscriptions receive nothing further
    - No replay: a subscription opened after a publish never sees it
    - close() is idempotent and drops events not yet consumed

Design Decisions:
    - Registry mutations and broadcast are synchronous methods on the event
      loop thread: they cannot interleave, so no lock is required
    - Broadcast iterates over a snapshot of the registry: a subscriber closing
      mid-publish cannot corrupt the iteration
    - Payload deep-copied per subscriber: consumers never share mutable state
    - Broker is an explicit instance owned by the app lifespan, not a module global
"""

import asyncio
import copy
import logging
from typing import Any
from uuid import UUID, uuid4

from catalog.core.domain_types import EventTopic, SubscriptionState

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """One subscriber's delivery channel for a single topic."""

    def __init__(self, broker: "NotificationBroker", topic: EventTopic):
        self.id: UUID = uuid4()
        self.topic = topic
        self.state = SubscriptionState.OPEN
        self._broker = broker
        self._queue: asyncio.Queue[Any] = asyncio.Queue()

    @property
    def closed(self) -> bool:
        return self.state is SubscriptionState.CLOSED

    @property
    def pending(self) -> int:
        """Events delivered but not yet consumed."""
        return 0 if self.closed else self._queue.qsize()

    def deliver(self, payload: dict) -> bool:
        """Enqueue payload unless closed. Returns whether it was accepted."""
        if self.closed:
            return False
        self._queue.put_nowait(payload)
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.state = SubscriptionState.CLOSED
        self._broker._deregister(self)
        while not self._queue.empty():
            self._queue.get_nowait()
        # wake a consumer blocked in __anext__
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> dict:
        if self.closed:
            raise StopAsyncIteration
        self.state = SubscriptionState.DELIVERING
        payload = await self._queue.get()
        if payload is _CLOSED or self.closed:
            raise StopAsyncIteration
        return payload

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class NotificationBroker:
    """Registry of live subscriptions keyed by topic."""

    def __init__(self):
        self._subscriptions: dict[EventTopic, dict[UUID, Subscription]] = {}
        self._shut_down = False

    @property
    def running(self) -> bool:
        return not self._shut_down

    def subscribe(self, topic: EventTopic = EventTopic.BOOK_ADDED) -> Subscription:
        """Register a new OPEN subscription for topic."""
        if self._shut_down:
            raise RuntimeError("Notification broker is shut down")
        subscription = Subscription(self, topic)
        self._subscriptions.setdefault(topic, {})[subscription.id] = subscription
        logger.info(
            f"Subscription {subscription.id} opened",
            extra={"topic": topic.value, "subscribers": self.subscriber_count(topic)},
        )
        return subscription

    def publish(self, topic: EventTopic, payload: dict) -> int:
        """Deliver payload to every live subscription. Returns delivery count."""
        delivered = 0
        for subscription in list(self._subscriptions.get(topic, {}).values()):
            if subscription.deliver(copy.deepcopy(payload)):
                delivered += 1
        logger.info(
            f"Published {topic.value} to {delivered} subscriber(s)",
            extra={"topic": topic.value, "subscribers": delivered},
        )
        return delivered

    def subscriber_count(self, topic: EventTopic = EventTopic.BOOK_ADDED) -> int:
        return len(self._subscriptions.get(topic, {}))

    def shutdown(self) -> None:
        """Close every subscription and refuse new ones."""
        self._shut_down = True
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions.values()):
                subscription.close()
        logger.info("Notification broker shut down")

    def _deregister(self, subscription: Subscription) -> None:
        self._subscriptions.get(subscription.topic, {}).pop(subscription.id, None)
        logger.info(
            f"Subscription {subscription.id} closed",
            extra={
                "topic": subscription.topic.value,
                "subscribers": self.subscriber_count(subscription.topic),
            },
        )
