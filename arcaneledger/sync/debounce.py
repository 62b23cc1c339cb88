"""Trailing-edge debounce on the running asyncio loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Collapse bursts of schedule() calls into one callback run.

    Each schedule() cancels the pending timer and starts a new one, so the
    callback fires once, `delay` seconds after the last call. A callback
    that has already fired is never cancelled; if another burst ends while
    it is still running, a second run starts alongside it.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a timer is waiting to fire."""
        return self._handle is not None

    @property
    def in_flight(self) -> int:
        """Number of callback runs that have fired and not finished."""
        return len(self._in_flight)

    def schedule(self) -> None:
        """
        (Re)start the quiet-period timer.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self._delay, self._fire)
        logger.debug("Save scheduled in %.2fs", self._delay)

    def cancel(self) -> None:
        """Drop the pending timer without firing."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._callback())
        self._in_flight.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: "asyncio.Task[None]") -> None:
        self._in_flight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced callback failed: %s", task.exception())

    async def flush(self) -> None:
        """Fire a pending timer now and wait for every run in flight."""
        if self._handle is not None:
            self.cancel()
            self._fire()
        await self.wait()

    async def wait(self) -> None:
        """Wait for callback runs that have already fired."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
