from __future__ import annotations

from collections import deque
from typing import Sequence

KONAMI_CODE: tuple[str, ...] = (
    "ArrowUp",
    "ArrowUp",
    "ArrowDown",
    "ArrowDown",
    "ArrowLeft",
    "ArrowRight",
    "ArrowLeft",
    "ArrowRight",
    "b",
    "a",
)


class SequenceDetector:
    """Fixed-length sliding-window matcher over a token stream.

    Keeps the last N tokens (N = pattern length). A full in-order match clears the window.
    A mismatch just slides the window; it never restarts the scan.
    """

    def __init__(self, pattern: Sequence[str] = KONAMI_CODE) -> None:
        if not pattern:
            raise ValueError("pattern must not be empty")
        self.pattern: tuple[str, ...] = tuple(pattern)
        self._window: deque[str] = deque(maxlen=len(self.pattern))

    @property
    def buffer(self) -> tuple[str, ...]:
        return tuple(self._window)

    def observe(self, token: str) -> bool:
        self._window.append(token)
        if len(self._window) == len(self.pattern) and tuple(self._window) == self.pattern:
            self._window.clear()
            return True
        return False
