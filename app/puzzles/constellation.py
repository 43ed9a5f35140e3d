from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from app.assets.registry import Star, StarChart
from app.core.scheduler import DeferredNotice, Scheduler

logger = logging.getLogger(__name__)


HINT_TEXT = "💡 Hint: Start from the top center and trace a heart shape"
SOLVED_TEXT = "✨ Beautiful! You found the hidden heart ✨"


class SelectionOutcome(StrEnum):
    advanced = "advanced"
    reset = "reset"
    completed = "completed"
    ignored = "ignored"


@dataclass(frozen=True, slots=True)
class SelectionResult:
    outcome: SelectionOutcome
    # Word revealed by this pick, if the star carries one.
    word: str | None = None


class ConstellationPuzzle:
    """Ordered-selection matcher: stars must be picked in the one accepted order.

    Any out-of-order pick wipes all progress and counts as a failed attempt. After
    `hint_threshold` failures the hint turns on for good.
    """

    def __init__(
        self,
        *,
        chart: StarChart,
        scheduler: Scheduler,
        on_complete: Callable[[], None],
        advance_delay_s: float = 2.0,
        hint_threshold: int = 3,
    ) -> None:
        self._chart = chart
        self._advance_delay_s = advance_delay_s
        self._hint_threshold = hint_threshold
        self._notice = DeferredNotice(scheduler=scheduler, callback=on_complete)

        self.selected: list[int] = []
        self.revealed_words: list[str] = []
        self.incorrect_attempts = 0
        self.hint_enabled = False
        self.completed = False

    @property
    def required_order(self) -> tuple[int, ...]:
        return self._chart.required_order

    @property
    def next_expected(self) -> int | None:
        if self.completed:
            return None
        return self.required_order[len(self.selected)]

    @property
    def message(self) -> str:
        return " ".join(self.revealed_words)

    @property
    def completion_pending(self) -> bool:
        return self._notice.pending

    def segments(self) -> list[tuple[Star, Star]]:
        """Consecutive selected-star pairs, in pick order, for drawing the traced lines."""

        out: list[tuple[Star, Star]] = []
        for a, b in zip(self.selected, self.selected[1:]):
            s1, s2 = self._chart.get(a), self._chart.get(b)
            if s1 is not None and s2 is not None:
                out.append((s1, s2))
        return out

    def select(self, star_id: int) -> SelectionResult:
        if self.completed:
            return SelectionResult(outcome=SelectionOutcome.ignored)

        expected = self.required_order[len(self.selected)]

        if star_id != expected:
            self.incorrect_attempts += 1
            self.selected.clear()
            self.revealed_words.clear()
            if self.incorrect_attempts >= self._hint_threshold and not self.hint_enabled:
                self.hint_enabled = True
                logger.info("Constellation hint enabled after %d wrong picks", self.incorrect_attempts)
            return SelectionResult(outcome=SelectionOutcome.reset)

        self.selected.append(star_id)

        star = self._chart.get(star_id)
        word = star.word if star is not None and star.word else None
        if word:
            self.revealed_words.append(word)

        if len(self.selected) == len(self.required_order):
            self.completed = True
            logger.info("Constellation traced (%d failed attempts)", self.incorrect_attempts)
            self._notice.schedule(self._advance_delay_s)
            return SelectionResult(outcome=SelectionOutcome.completed, word=word)

        return SelectionResult(outcome=SelectionOutcome.advanced, word=word)

    def close(self) -> None:
        self._notice.cancel()
