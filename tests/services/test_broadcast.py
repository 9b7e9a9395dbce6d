"""Tests for the realtime broadcast channel."""

import pytest

from waitlist_stage.services.broadcast import BroadcastChannel, Subscriber, SubscriberState
from waitlist_stage.services.errors import ChannelDeliveryError


async def drain(subscriber: Subscriber) -> list[int]:
    """Close-side helper: collect queued counts up to the close marker."""
    counts = []
    while True:
        message = await subscriber.next_message()
        if message is None:
            return counts
        counts.append(message.count)


@pytest.mark.asyncio
async def test_open_sends_single_sync_message(channel: BroadcastChannel) -> None:
    subscriber = channel.subscribe()
    assert subscriber.state is SubscriberState.CONNECTING

    channel.open(subscriber, 1247)
    assert subscriber.state is SubscriberState.OPEN
    assert channel.subscriber_count == 1

    channel.close(subscriber)
    assert await drain(subscriber) == [1247]


@pytest.mark.asyncio
async def test_late_subscriber_gets_latest_count_only(channel: BroadcastChannel) -> None:
    """Changes made while disconnected are not replayed."""
    for count in (1248, 1249, 1250):
        channel.notify(count)

    subscriber = channel.subscribe()
    channel.open(subscriber, 1250)
    channel.close(subscriber)

    assert await drain(subscriber) == [1250]


@pytest.mark.asyncio
async def test_notify_reaches_every_open_subscriber(channel: BroadcastChannel) -> None:
    first, second = channel.subscribe(), channel.subscribe()
    channel.open(first, 1247)
    channel.open(second, 1247)

    assert channel.notify(1248) == 2

    channel.close_all()
    assert await drain(first) == [1247, 1248]
    assert await drain(second) == [1247, 1248]
    assert channel.subscriber_count == 0


@pytest.mark.asyncio
async def test_closed_subscriber_receives_nothing_more(channel: BroadcastChannel) -> None:
    subscriber = channel.subscribe()
    channel.open(subscriber, 1247)
    channel.close(subscriber)
    channel.close(subscriber)

    assert channel.notify(1248) == 0
    assert subscriber.state is SubscriberState.CLOSED
    assert await drain(subscriber) == [1247]
    assert await subscriber.next_message() is None


@pytest.mark.asyncio
async def test_slow_subscriber_is_dropped_without_affecting_others() -> None:
    channel = BroadcastChannel(queue_size=2)
    slow, healthy = channel.subscribe(), channel.subscribe()
    channel.open(slow, 1)
    channel.open(healthy, 1)

    # Keep the healthy queue short so only the slow one overflows.
    assert (await healthy.next_message()).count == 1
    channel.notify(2)
    assert (await healthy.next_message()).count == 2
    channel.notify(3)

    assert slow.state is SubscriberState.CLOSED
    assert healthy.state is SubscriberState.OPEN
    assert channel.subscriber_count == 1
    assert (await healthy.next_message()).count == 3


@pytest.mark.asyncio
async def test_counts_never_go_backwards(channel: BroadcastChannel) -> None:
    subscriber = channel.subscribe()
    channel.open(subscriber, 1247)

    channel.notify(1249)
    assert channel.notify(1248) == 0
    # A stale read answering get_count is raised to the latest value.
    channel.sync(subscriber, 1247)

    channel.close(subscriber)
    assert await drain(subscriber) == [1247, 1249, 1249]
    assert channel.latest_count == 1249


@pytest.mark.asyncio
async def test_open_requires_connecting_state(channel: BroadcastChannel) -> None:
    subscriber = channel.subscribe()
    channel.open(subscriber, 1247)

    with pytest.raises(ChannelDeliveryError):
        channel.open(subscriber, 1247)
