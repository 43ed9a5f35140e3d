from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable

from statemachine.exceptions import TransitionNotAllowed

from app.api.models import (
    CampaignState,
    CampaignView,
    Choice,
    ConstellationView,
    FinaleView,
    MazeView,
    Stage,
    StarView,
    TerminalView,
)
from app.assets.registry import PuzzleAssets
from app.config import CampaignConfig
from app.core.events import CampaignEvent, EventType
from app.core.reveals import StagedReveal
from app.core.scheduler import Scheduler
from app.fsm import StageFSM
from app.puzzles.constellation import HINT_TEXT, ConstellationPuzzle, SelectionOutcome, SelectionResult
from app.puzzles.maze import GardenMaze, MoveOutcome, MoveResult
from app.puzzles.sequence import SequenceDetector
from app.puzzles.terminal import SubmitResult, TerminalSession

logger = logging.getLogger(__name__)


SECRET_TOAST: dict[str, str] = {
    "title": "🎮 Konami Code Activated!",
    "description": "You found the secret! A true developer at heart 💕",
}

CELEBRATION_HEADLINES: dict[Choice, str] = {
    Choice.yes: "You made my day!",
    Choice.absolutely: "I knew it!",
}

# Developer-console notes, logged when their stage opens.
CONSOLE_NOTES: dict[Stage, tuple[str, ...]] = {
    Stage.landing: (
        "🌸 Oh, you found me! 🌸",
        "A developer who checks the console... I like that about you.",
        "There are more secrets hidden in this app. Keep your eyes open 👀",
        "Try the Konami code if you're feeling nostalgic...",
    ),
    Stage.maze: (
        "🌸 Garden Secret: There are 5 flowers hidden in the maze!",
        "Collect them all for a special feeling... or just find the exit!",
    ),
    Stage.finale: (
        "💕 This is the moment...",
        "You made it through all the puzzles.",
        "Now there's just one question left to answer.",
    ),
    Stage.celebration: (
        "This was built with love, every line of code. ❤️",
        "Good luck on your date! You've got this.",
    ),
}

SECRET_NOTES: tuple[str, ...] = (
    "🎮 KONAMI CODE UNLOCKED! 🎮",
    "You're amazing. I knew you'd try this.",
)


def _now() -> datetime:
    return datetime.now(tz=UTC)


class StageError(ValueError):
    """A stage signal arrived while the campaign was in the wrong stage."""


@dataclass(frozen=True, slots=True)
class KeyPress:
    secret_unlocked: bool
    move: MoveResult | None = None


class Campaign:
    """Stage controller.

    Activates exactly one puzzle at a time and advances only on that puzzle's completion
    signal. The Konami detector sees every key regardless of stage and never touches
    stage state.

    Contract:
      - gameplay input (commands, star picks, moves, keys) never raises; misses are outcomes.
      - stage signals sent in the wrong stage raise `StageError`.
      - `close()` cancels every pending timer; nothing mutates afterwards.
    """

    def __init__(
        self,
        *,
        assets: PuzzleAssets,
        scheduler: Scheduler,
        config: CampaignConfig | None = None,
        listener: Callable[[CampaignEvent], None] | None = None,
    ) -> None:
        now = _now()
        self.state = CampaignState(created_at=now, last_updated_at=now)
        self._fsm = StageFSM(self.state)
        self._assets = assets
        self._scheduler = scheduler
        self._config = config or CampaignConfig()
        self._listener = listener

        self.detector = SequenceDetector()
        self.events: deque[CampaignEvent] = deque(maxlen=self._config.event_log_size or None)

        self.terminal: TerminalSession | None = None
        self.constellation: ConstellationPuzzle | None = None
        self.maze: GardenMaze | None = None
        self.reveal: StagedReveal | None = None

        # Bumped on every activation so completions from a torn-down puzzle are dropped.
        self._generation = 0
        self._closed = False

        self._log_console_notes(Stage.landing)

    @property
    def stage(self) -> Stage:
        return self.state.stage

    @property
    def closed(self) -> bool:
        return self._closed

    # Stage signals

    def start(self) -> None:
        self._require_stage(Stage.landing)
        self._advance(self._fsm.accept_challenge)

    def continue_terminal(self) -> None:
        terminal = self._require_terminal()
        if not terminal.completed:
            raise StageError("Terminal challenge is not complete")
        self._advance(self._fsm.leave_terminal)

    def choose(self, choice: Choice | str) -> None:
        self._require_stage(Stage.finale)
        picked = Choice(choice) if not isinstance(choice, Choice) else choice
        self.state.choice = picked
        logger.info("🎉🎉🎉 %s! 🎉🎉🎉", picked.value.upper())
        self._advance(self._fsm.answer, extra={"choice": picked.value})

    # Gameplay input

    def submit_command(self, text: str) -> SubmitResult:
        terminal = self._require_terminal()
        was_complete = terminal.completed
        result = terminal.submit(text)
        if result.completed and not was_complete:
            self._emit("PUZZLE_SOLVED", {"puzzle": Stage.terminal.value})
        return result

    def select_star(self, star_id: int) -> SelectionResult:
        result = self._require_constellation().select(star_id)
        if result.outcome == SelectionOutcome.completed:
            self._emit("PUZZLE_SOLVED", {"puzzle": Stage.constellation.value})
        return result

    def move(self, dx: int, dy: int) -> MoveResult:
        return self._after_move(self._require_maze().move(dx, dy))

    def press_key(self, key: str) -> KeyPress:
        """Feed one key token to the detector, and to the maze while it is active."""

        self._require_open()
        unlocked = self.detector.observe(key)
        if unlocked:
            self.state.secrets_found += 1
            for note in SECRET_NOTES:
                logger.info(note)
            self._emit("SECRET_UNLOCKED", dict(SECRET_TOAST))

        move: MoveResult | None = None
        if self.stage == Stage.maze and self.maze is not None:
            pressed = self.maze.press(key)
            if pressed is not None:
                move = self._after_move(pressed)

        return KeyPress(secret_unlocked=unlocked, move=move)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._deactivate()
        logger.info("Campaign closed at stage %s", self.stage.value)

    # Presentation snapshot

    def view(self) -> CampaignView:
        out = CampaignView(
            stage=self.stage,
            choice=self.state.choice,
            secrets_found=self.state.secrets_found,
        )
        if self.state.choice is not None:
            out.headline = CELEBRATION_HEADLINES[self.state.choice]

        if self.terminal is not None:
            t = self.terminal
            out.terminal = TerminalView(
                lines=list(t.lines),
                decoded_files=list(t.decoded_files),
                tracked_files=list(t.tracked_files),
                completed=t.completed,
            )

        if self.constellation is not None:
            c = self.constellation
            selected = set(c.selected)
            out.constellation = ConstellationView(
                stars=[StarView(id=s.id, x=s.x, y=s.y, selected=s.id in selected) for s in self._assets.stars.stars],
                selected=list(c.selected),
                revealed_words=list(c.revealed_words),
                message=c.message,
                segments=[(a.id, b.id) for a, b in c.segments()],
                incorrect_attempts=c.incorrect_attempts,
                hint_enabled=c.hint_enabled,
                hint=HINT_TEXT if c.hint_enabled else None,
                next_expected=c.next_expected if c.hint_enabled else None,
                # The closing pick back to the first star isn't its own progress dot.
                total_steps=len(c.required_order) - 1,
                completed=c.completed,
            )

        if self.maze is not None:
            m = self.maze
            out.maze = MazeView(
                grid=[[int(k) for k in row] for row in m.layout.cells],
                position=m.position,
                visited=sorted(m.visited),
                collected=list(m.collected),
                total_collectibles=m.total_collectibles,
                completed=m.completed,
            )

        if self.reveal is not None:
            out.finale = FinaleView(bloomed=list(self.reveal.revealed), question_visible=self.reveal.done)

        return out

    # Internals

    def _require_open(self) -> None:
        if self._closed:
            raise StageError("Campaign is closed")

    def _require_stage(self, stage: Stage) -> None:
        self._require_open()
        if self.stage != stage:
            raise StageError(f"Campaign is in stage '{self.stage.value}', not '{stage.value}'")

    def _require_terminal(self) -> TerminalSession:
        self._require_stage(Stage.terminal)
        if self.terminal is None:
            raise StageError("Terminal is not active")
        return self.terminal

    def _require_constellation(self) -> ConstellationPuzzle:
        self._require_stage(Stage.constellation)
        if self.constellation is None:
            raise StageError("Constellation is not active")
        return self.constellation

    def _require_maze(self) -> GardenMaze:
        self._require_stage(Stage.maze)
        if self.maze is None:
            raise StageError("Maze is not active")
        return self.maze

    def _after_move(self, result: MoveResult) -> MoveResult:
        if result.outcome == MoveOutcome.collected:
            self._emit("FLOWER_COLLECTED", {"position": list(result.position), "message": result.message})
        elif result.outcome == MoveOutcome.reached:
            self._emit("PUZZLE_SOLVED", {"puzzle": Stage.maze.value})
        return result

    def _advance(self, event: Callable[[], Any], *, extra: dict[str, Any] | None = None) -> None:
        previous = self.stage
        try:
            event()
        except TransitionNotAllowed as e:
            raise StageError(f"Cannot advance from stage '{previous.value}'") from e

        self._fsm.sync_stage_to_model()
        self.state.last_updated_at = _now()

        self._deactivate()
        self._activate(self.stage)

        logger.info("Stage %s -> %s", previous.value, self.stage.value)
        self._emit("STAGE_CHANGED", {"from": previous.value, "to": self.stage.value, **(extra or {})})
        self._log_console_notes(self.stage)

        # Started after the STAGE_CHANGED event so a zero-delay scheduler can't reorder them.
        if self.reveal is not None:
            self.reveal.begin()

    def _activate(self, stage: Stage) -> None:
        self._generation += 1
        generation = self._generation

        if stage == Stage.terminal:
            self.terminal = TerminalSession(commands=self._assets.commands)
        elif stage == Stage.constellation:
            self.constellation = ConstellationPuzzle(
                chart=self._assets.stars,
                scheduler=self._scheduler,
                on_complete=lambda: self._on_puzzle_complete(Stage.constellation, generation),
                advance_delay_s=self._config.constellation_advance_delay_s,
                hint_threshold=self._config.hint_threshold,
            )
        elif stage == Stage.maze:
            self.maze = GardenMaze(
                layout=self._assets.maze,
                scheduler=self._scheduler,
                on_complete=lambda: self._on_puzzle_complete(Stage.maze, generation),
                advance_delay_s=self._config.maze_advance_delay_s,
            )
        elif stage == Stage.finale:
            self.reveal = StagedReveal(
                scheduler=self._scheduler,
                count=self._config.bloom_count,
                interval_s=self._config.bloom_interval_s,
                final_pause_s=self._config.question_pause_s,
                on_item=lambda i: self._emit("FLOWER_BLOOMED", {"index": i}),
                on_done=lambda: self._emit("QUESTION_REVEALED", {}),
            )

    def _deactivate(self) -> None:
        # Deactivated puzzles are discarded, never resumed.
        if self.constellation is not None:
            self.constellation.close()
        if self.maze is not None:
            self.maze.close()
        if self.reveal is not None:
            self.reveal.cancel()
        self.terminal = None
        self.constellation = None
        self.maze = None
        self.reveal = None

    def _on_puzzle_complete(self, stage: Stage, generation: int) -> None:
        if self._closed or generation != self._generation or self.stage != stage:
            logger.debug("Dropping stale completion from %s", stage.value)
            return
        if stage == Stage.constellation:
            self._advance(self._fsm.chart_constellation)
        elif stage == Stage.maze:
            self._advance(self._fsm.escape_maze)

    def _emit(self, type: EventType, payload: dict[str, Any]) -> None:
        event = CampaignEvent.now(type=type, stage=self.stage.value, payload=payload)
        self.events.append(event)
        if self._listener is not None:
            self._listener(event)

    def _log_console_notes(self, stage: Stage) -> None:
        for note in CONSOLE_NOTES.get(stage, ()):
            logger.info(note)
