from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from app.assets.registry import CellKind, Coord, MazeLayout
from app.core.scheduler import DeferredNotice, Scheduler

logger = logging.getLogger(__name__)


FLOWER_MESSAGES: tuple[str, ...] = (
    "You're doing great!",
    "Almost there...",
    "Keep going!",
    "So close!",
    "Beautiful!",
)

KEY_DIRECTIONS: dict[str, Coord] = {
    "ArrowUp": (0, -1),
    "w": (0, -1),
    "W": (0, -1),
    "ArrowDown": (0, 1),
    "s": (0, 1),
    "S": (0, 1),
    "ArrowLeft": (-1, 0),
    "a": (-1, 0),
    "A": (-1, 0),
    "ArrowRight": (1, 0),
    "d": (1, 0),
    "D": (1, 0),
}

NAMED_DIRECTIONS: dict[str, Coord] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}

_UNIT_STEPS = frozenset(NAMED_DIRECTIONS.values())


def direction_for_key(key: str) -> Coord | None:
    return KEY_DIRECTIONS.get(key)


class MoveOutcome(StrEnum):
    blocked = "blocked"
    moved = "moved"
    collected = "collected"
    reached = "reached"


@dataclass(frozen=True, slots=True)
class MoveResult:
    outcome: MoveOutcome
    position: Coord
    # Encouragement shown on a flower pickup.
    message: str | None = None


class GardenMaze:
    """Grid navigator over a static walled maze.

    Tracks visited cells and flower pickups; reaching the goal completes the maze and
    schedules the stage hand-off.
    """

    def __init__(
        self,
        *,
        layout: MazeLayout,
        scheduler: Scheduler,
        on_complete: Callable[[], None],
        advance_delay_s: float = 1.5,
    ) -> None:
        self._layout = layout
        self._advance_delay_s = advance_delay_s
        self._notice = DeferredNotice(scheduler=scheduler, callback=on_complete)

        self.position: Coord = layout.start
        self.visited: set[Coord] = {layout.start}
        # Pickup order matters for the encouragement rotation.
        self.collected: list[Coord] = []
        self.completed = False

    @property
    def layout(self) -> MazeLayout:
        return self._layout

    @property
    def total_collectibles(self) -> int:
        return len(self._layout.collectibles())

    @property
    def completion_pending(self) -> bool:
        return self._notice.pending

    def move(self, dx: int, dy: int) -> MoveResult:
        if self.completed or (dx, dy) not in _UNIT_STEPS:
            return MoveResult(outcome=MoveOutcome.blocked, position=self.position)

        x, y = self.position[0] + dx, self.position[1] + dy
        if not self._layout.in_bounds(x, y) or self._layout.kind_at(x, y) == CellKind.wall:
            return MoveResult(outcome=MoveOutcome.blocked, position=self.position)

        target = (x, y)
        self.position = target
        self.visited.add(target)
        kind = self._layout.kind_at(x, y)

        if kind == CellKind.collectible and target not in self.collected:
            message = FLOWER_MESSAGES[len(self.collected) % len(FLOWER_MESSAGES)]
            self.collected.append(target)
            logger.debug("Flower %d/%d collected at %s", len(self.collected), self.total_collectibles, target)
            return MoveResult(outcome=MoveOutcome.collected, position=target, message=message)

        if kind == CellKind.goal:
            self.completed = True
            logger.info(
                "Maze exit reached (%d cells visited, %d flowers)", len(self.visited), len(self.collected)
            )
            self._notice.schedule(self._advance_delay_s)
            return MoveResult(outcome=MoveOutcome.reached, position=target)

        return MoveResult(outcome=MoveOutcome.moved, position=target)

    def press(self, key: str) -> MoveResult | None:
        """Translate a key token into a move. Returns None for keys that aren't directions."""

        step = direction_for_key(key)
        if step is None:
            return None
        return self.move(*step)

    def close(self) -> None:
        self._notice.cancel()
