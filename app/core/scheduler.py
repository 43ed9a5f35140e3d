from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None:  # pragma: no cover
        ...


class Scheduler(Protocol):
    """Runs a callback once after a fixed delay. The returned handle cancels it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:  # pragma: no cover
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio loop.

    Callbacks run on the loop thread, so they never interleave with request handlers.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class DeferredNotice:
    """At-most-once completion notice fired after a fixed delay.

    `cancel()` stops a pending notice and prevents any later scheduling, so a torn-down
    owner can never reach its listener.
    """

    def __init__(self, *, scheduler: Scheduler, callback: Callable[[], None]) -> None:
        self._scheduler = scheduler
        self._callback = callback
        self._handle: ScheduledTask | None = None
        self._scheduled = False
        self._cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, delay: float) -> None:
        if self._scheduled or self._cancelled:
            return
        self._scheduled = True
        self._handle = self._scheduler.call_later(delay, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._cancelled or self.fired:
            return
        self.fired = True
        self._callback()
