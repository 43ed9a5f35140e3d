from __future__ import annotations

from typing import Callable

from app.core.scheduler import ScheduledTask, Scheduler


class StagedReveal:
    """Sequence of fire-once timers: item i appears at i * interval, then a closing step.

    Presentation-only; nothing in the stage machine waits on it. `cancel()` drops
    every pending timer and makes late callbacks no-ops.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        count: int,
        interval_s: float,
        final_pause_s: float,
        on_item: Callable[[int], None],
        on_done: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._count = count
        self._interval_s = interval_s
        self._final_pause_s = final_pause_s
        self._on_item = on_item
        self._on_done = on_done
        self._handles: list[ScheduledTask] = []
        self._cancelled = False

        self.revealed: list[int] = []
        self.done = False

    def begin(self) -> None:
        if self._handles or self.done:
            return
        for i in range(self._count):
            self._handles.append(self._scheduler.call_later(i * self._interval_s, self._make_item_callback(i)))
        self._handles.append(
            self._scheduler.call_later(self._count * self._interval_s + self._final_pause_s, self._finish)
        )

    def cancel(self) -> None:
        self._cancelled = True
        for h in self._handles:
            h.cancel()
        self._handles.clear()

    def _make_item_callback(self, index: int) -> Callable[[], None]:
        def _fire() -> None:
            if self._cancelled or index in self.revealed:
                return
            self.revealed.append(index)
            self._on_item(index)

        return _fire

    def _finish(self) -> None:
        if self._cancelled or self.done:
            return
        self.done = True
        self._on_done()
