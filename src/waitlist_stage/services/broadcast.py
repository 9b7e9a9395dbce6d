"""Realtime fan-out of count changes to connected viewers.

Each connected viewer is represented by a :class:`Subscriber` holding an
outgoing message queue. The channel only ever enqueues; the transport that
owns the subscriber drains the queue and writes to the wire. Delivery is
best-effort and at-most-once: there is no backlog for viewers that are not
connected and nothing is replayed on reconnect beyond a single sync message.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum

from waitlist_stage.schemas.realtime import CountUpdateMessage
from waitlist_stage.services.errors import ChannelDeliveryError

# Configure logger for this module
logger = logging.getLogger(__name__)

_SUBSCRIBER_IDS = itertools.count(1)


class SubscriberState(Enum):
    """Lifecycle of a subscriber connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(eq=False)
class Subscriber:
    """A single viewer connection and its pending outgoing messages."""

    queue_size: int = 64
    id: int = field(default_factory=lambda: next(_SUBSCRIBER_IDS))
    state: SubscriberState = SubscriberState.CONNECTING
    _queue: asyncio.Queue[CountUpdateMessage | None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._queue = asyncio.Queue(maxsize=self.queue_size)

    def deliver(self, message: CountUpdateMessage) -> None:
        """Enqueue ``message`` without waiting.

        Raises:
            ChannelDeliveryError: the subscriber is not open or its queue is
                full.
        """
        if self.state is not SubscriberState.OPEN:
            raise ChannelDeliveryError(f"Subscriber {self.id} is {self.state.value}")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull as exc:
            raise ChannelDeliveryError(f"Subscriber {self.id} is not keeping up") from exc

    async def next_message(self) -> CountUpdateMessage | None:
        """Wait for the next message; ``None`` means the subscriber was closed."""
        if self.state is SubscriberState.CLOSED and self._queue.empty():
            return None
        return await self._queue.get()

    def _mark_closed(self) -> None:
        self.state = SubscriberState.CLOSED
        # Wake a pending reader; drop stale updates if the queue is saturated.
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                self._queue.get_nowait()


class BroadcastChannel:
    """Set of open subscribers receiving ``count_update`` messages."""

    def __init__(self, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._subscribers: set[Subscriber] = set()
        self._latest_count: int | None = None

    @property
    def latest_count(self) -> int | None:
        """Highest count this channel has seen, if any."""
        return self._latest_count

    def _remember(self, count: int) -> int:
        if self._latest_count is None or count > self._latest_count:
            self._latest_count = count
        return self._latest_count

    @property
    def subscriber_count(self) -> int:
        """Number of currently open subscribers."""
        return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        """Create a subscriber in the ``CONNECTING`` state."""
        return Subscriber(queue_size=self._queue_size)

    def open(self, subscriber: Subscriber, count: int) -> None:
        """Activate ``subscriber`` and queue its single sync message."""
        if subscriber.state is not SubscriberState.CONNECTING:
            raise ChannelDeliveryError(
                f"Subscriber {subscriber.id} cannot open from {subscriber.state.value}"
            )
        subscriber.state = SubscriberState.OPEN
        self._subscribers.add(subscriber)
        logger.debug("Subscriber %s open (%s active)", subscriber.id, self.subscriber_count)
        self.sync(subscriber, count)

    def sync(self, subscriber: Subscriber, count: int) -> None:
        """Send the latest count to one subscriber, closing it if delivery fails.

        ``count`` is raised to the highest count already broadcast, so a
        stale storage read never moves a viewer backwards.
        """
        latest = self._remember(count)
        try:
            subscriber.deliver(CountUpdateMessage(count=latest))
        except ChannelDeliveryError as exc:
            logger.warning("Dropping subscriber %s: %s", subscriber.id, exc)
            self.close(subscriber)

    def notify(self, count: int) -> int:
        """Send ``count`` to every open subscriber.

        Returns the number of subscribers the message was queued for. A
        subscriber that cannot take the message is closed; the others are
        unaffected. Counts lower than one already broadcast are stale and
        are not sent.
        """
        if self._latest_count is not None and count < self._latest_count:
            logger.debug("Skipping stale count %s (latest %s)", count, self._latest_count)
            return 0
        message = CountUpdateMessage(count=self._remember(count))
        delivered = 0
        for subscriber in list(self._subscribers):
            try:
                subscriber.deliver(message)
            except ChannelDeliveryError as exc:
                logger.warning("Dropping subscriber %s: %s", subscriber.id, exc)
                self.close(subscriber)
                continue
            delivered += 1
        logger.debug("Broadcast count %s to %s subscribers", count, delivered)
        return delivered

    def close(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber`` from the channel. Safe to call repeatedly."""
        if subscriber.state is SubscriberState.CLOSED:
            return
        self._subscribers.discard(subscriber)
        subscriber._mark_closed()
        logger.debug("Subscriber %s closed (%s active)", subscriber.id, self.subscriber_count)

    def close_all(self) -> None:
        """Close every subscriber, typically on shutdown."""
        for subscriber in list(self._subscribers):
            self.close(subscriber)
