"""Tests for the client counter view."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import pytest

from waitlist_stage.client.transport import CounterSourceError
from waitlist_stage.client.view import CounterView

from tests.conftest import make_settings


class FakeStream:
    def __init__(self) -> None:
        self.counts: asyncio.Queue[int | None] = asyncio.Queue()
        self.sync_requests = 0

    async def request_count(self) -> None:
        self.sync_requests += 1

    async def __aiter__(self) -> AsyncIterator[int]:
        while True:
            count = await self.counts.get()
            if count is None:
                return
            yield count


class FakeSource:
    """In-memory counter source whose channel can be switched on and off."""

    def __init__(self, count: int, *, channel_up: bool = True) -> None:
        self.count = count
        self.channel_up = channel_up
        self.fetches = 0
        self.connects = 0
        self.fetch_fails = False
        self.stream: FakeStream | None = None

    async def fetch_count(self) -> int:
        self.fetches += 1
        if self.fetch_fails:
            raise CounterSourceError("http down")
        return self.count

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[FakeStream]:
        self.connects += 1
        if not self.channel_up:
            raise CounterSourceError("channel down")
        self.stream = FakeStream()
        yield self.stream
        self.stream = None

    def drop_channel(self) -> None:
        self.channel_up = False
        if self.stream is not None:
            self.stream.counts.put_nowait(None)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


def make_view(source: FakeSource, **overrides: float) -> CounterView:
    options = {
        "poll_interval": 0.01,
        "reconnect_delay": 0.02,
        "tween_duration": 0.0,
    }
    options.update(overrides)
    return CounterView(source, **options)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_start_uses_baseline_then_channel() -> None:
    source = FakeSource(1250)
    view = make_view(source)
    try:
        await view.start()
        assert view.displayed == 1250
        assert source.fetches == 1

        await wait_until(lambda: view.connected)
        assert not view.polling
        assert source.stream.sync_requests == 1

        source.stream.counts.put_nowait(1251)
        await wait_until(lambda: view.displayed == 1251)
    finally:
        await view.stop()


@pytest.mark.asyncio
async def test_polls_while_channel_is_down_and_reconnects() -> None:
    source = FakeSource(1247, channel_up=False)
    view = make_view(source)
    try:
        await view.start()
        assert not view.connected

        source.count = 1249
        await wait_until(lambda: view.displayed == 1249)
        assert view.polling
        await wait_until(lambda: source.connects >= 2)

        source.channel_up = True
        await wait_until(lambda: view.connected)
        assert not view.polling
        assert source.stream.sync_requests == 1

        fetches = source.fetches
        await asyncio.sleep(0.05)
        assert source.fetches == fetches
    finally:
        await view.stop()


@pytest.mark.asyncio
async def test_channel_drop_falls_back_to_polling_and_keeps_value() -> None:
    source = FakeSource(1247)
    view = make_view(source)
    try:
        await view.start()
        await wait_until(lambda: view.connected)

        source.fetch_fails = True
        source.drop_channel()
        await wait_until(lambda: not view.connected)
        await wait_until(lambda: view.polling)
        await asyncio.sleep(0.05)
        # Last known value is kept while nothing can be reached.
        assert view.displayed == 1247

        source.fetch_fails = False
        source.count = 1300
        await wait_until(lambda: view.displayed == 1300)
    finally:
        await view.stop()


@pytest.mark.asyncio
async def test_baseline_failure_keeps_initial_value() -> None:
    source = FakeSource(1247, channel_up=False)
    source.fetch_fails = True
    view = CounterView(source, poll_interval=0.01, reconnect_delay=0.01, initial_count=1000)
    try:
        await view.start()
        assert view.displayed == 1000
    finally:
        await view.stop()


@pytest.mark.asyncio
async def test_stop_cancels_background_work() -> None:
    source = FakeSource(1247, channel_up=False)
    view = make_view(source)
    await view.start()
    await wait_until(lambda: view.polling)

    await view.stop()

    assert not view.running
    assert not view.polling
    connects, fetches = source.connects, source.fetches
    await asyncio.sleep(0.05)
    assert (source.connects, source.fetches) == (connects, fetches)


@pytest.mark.asyncio
async def test_tween_reports_each_step_and_latest_value_wins() -> None:
    source = FakeSource(1247, channel_up=False)
    view = make_view(source, tween_duration=0.05)
    seen: list[int] = []
    view.on_change(seen.append)
    try:
        await view.start()
        assert seen == [1247]

        source.count = 1250
        view.apply_count(1250)
        await wait_until(lambda: view.displayed == 1250)
        assert seen == [1247, 1248, 1249, 1250]

        source.count = 1255
        view.tween_duration = 10.0
        view.apply_count(1260)
        view.tween_duration = 0.0
        view.apply_count(1255)
        assert view.displayed == 1255
        assert view.target == 1255
    finally:
        await view.stop()


@pytest.mark.asyncio
async def test_from_settings_uses_configured_timings(tmp_path) -> None:
    config = make_settings(tmp_path, seed_count=42, counter_tween_max_steps=10)

    view = CounterView.from_settings(FakeSource(42), config)

    assert view.displayed == 42
    assert view.poll_interval == config.counter_poll_interval_seconds
    assert view.reconnect_delay == config.counter_reconnect_delay_seconds
    assert view.tween_max_steps == 10
