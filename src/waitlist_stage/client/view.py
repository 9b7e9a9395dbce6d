"""Client-side view of the live waitlist count.

The view keeps the last count it knows about and moves the displayed number
towards it with a short tween. It prefers the realtime channel; whenever the
channel is down it polls the count endpoint instead and retries the channel
after a fixed delay, forever, until it is stopped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from waitlist_stage.client.transport import CounterSource, CounterSourceError
from waitlist_stage.client.tween import CounterTween
from waitlist_stage.core.settings import Settings

# Configure logger for this module
logger = logging.getLogger(__name__)

CountListener = Callable[[int], None]


class CounterView:
    """Displays the waitlist count and keeps it in sync with the service."""

    def __init__(
        self,
        source: CounterSource,
        *,
        poll_interval: float = 5.0,
        reconnect_delay: float = 3.0,
        tween_duration: float = 0.8,
        tween_max_steps: int = 30,
        initial_count: int | None = None,
    ) -> None:
        self.source = source
        self.poll_interval = poll_interval
        self.reconnect_delay = reconnect_delay
        self.tween_duration = tween_duration
        self.tween_max_steps = tween_max_steps

        self.target: int | None = initial_count
        self.displayed: int | None = initial_count
        self.connected = False

        self._listeners: list[CountListener] = []
        self._connection_task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._tween_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, source: CounterSource, config: Settings) -> CounterView:
        """Build a view using the timings from ``config``."""
        return cls(
            source,
            poll_interval=config.counter_poll_interval_seconds,
            reconnect_delay=config.counter_reconnect_delay_seconds,
            tween_duration=config.counter_tween_duration_seconds,
            tween_max_steps=config.counter_tween_max_steps,
            initial_count=config.seed_count,
        )

    @property
    def running(self) -> bool:
        return self._connection_task is not None and not self._connection_task.done()

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def on_change(self, listener: CountListener) -> None:
        """Call ``listener`` with every displayed value."""
        self._listeners.append(listener)

    async def start(self) -> None:
        """Fetch a baseline count and start following the realtime channel."""
        if self.running:
            return
        try:
            self.apply_count(await self.source.fetch_count())
        except CounterSourceError as exc:
            logger.warning("Could not fetch baseline count: %s", exc)
        self._set_connected(False)
        self._connection_task = asyncio.create_task(self._follow_channel())

    async def stop(self) -> None:
        """Cancel polling, reconnect and tween work."""
        # The connection loop goes first so it cannot restart polling.
        for name in ("_connection_task", "_poll_task", "_tween_task"):
            task = getattr(self, name)
            if task is None:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._connection_task = self._poll_task = self._tween_task = None
        self.connected = False

    def apply_count(self, count: int) -> None:
        """Move the display towards ``count``.

        A new value replaces any transition still in progress.
        """
        if count == self.target:
            return
        self.target = count
        self._cancel_tween()

        if self.displayed is None or self.tween_duration <= 0:
            self._display(count)
            return

        tween = CounterTween(
            start=self.displayed,
            target=count,
            duration=self.tween_duration,
            max_steps=self.tween_max_steps,
        )
        self._tween_task = asyncio.create_task(self._run_tween(tween))

    def _display(self, value: int) -> None:
        if value == self.displayed:
            return
        self.displayed = value
        for listener in self._listeners:
            listener(value)

    def _cancel_tween(self) -> None:
        if self._tween_task is not None and not self._tween_task.done():
            self._tween_task.cancel()
        self._tween_task = None

    async def _run_tween(self, tween: CounterTween) -> None:
        for value in tween.frames():
            await asyncio.sleep(tween.step_duration)
            self._display(value)

    def _set_connected(self, connected: bool) -> None:
        self.connected = connected
        if connected:
            if self._poll_task is not None:
                self._poll_task.cancel()
                self._poll_task = None
        elif not self.polling:
            self._poll_task = asyncio.create_task(self._poll())

    async def _poll(self) -> None:
        while not self.connected:
            await asyncio.sleep(self.poll_interval)
            if self.connected:
                return
            try:
                self.apply_count(await self.source.fetch_count())
            except CounterSourceError as exc:
                logger.debug("Count poll failed: %s", exc)

    async def _follow_channel(self) -> None:
        while True:
            try:
                async with self.source.connect() as stream:
                    # Ask for the current count as soon as the channel opens.
                    await stream.request_count()
                    self._set_connected(True)
                    async for count in stream:
                        self.apply_count(count)
                logger.info("Count stream closed by server")
            except CounterSourceError as exc:
                logger.info("Count stream unavailable: %s", exc)
            self._set_connected(False)
            await asyncio.sleep(self.reconnect_delay)
