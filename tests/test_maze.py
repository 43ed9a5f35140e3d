from __future__ import annotations

import pytest

from app.assets.registry import CellKind, MazeLayout
from app.puzzles.maze import FLOWER_MESSAGES, GardenMaze, MoveOutcome, direction_for_key

# Start (1,1) to goal (9,9), picking up the flower at (1,4) on the way.
SHORT_ROUTE = [(0, 1)] * 4 + [(1, 0)] * 4 + [(0, 1)] * 2 + [(1, 0)] * 4 + [(0, 1)] * 2


@pytest.fixture()
def completions() -> list[str]:
    return []


@pytest.fixture()
def maze(assets, scheduler, completions: list[str]) -> GardenMaze:
    return GardenMaze(
        layout=assets.maze,
        scheduler=scheduler,
        on_complete=lambda: completions.append("done"),
        advance_delay_s=1.5,
    )


def test_initial_state(maze: GardenMaze) -> None:
    assert maze.position == (1, 1)
    assert maze.visited == {(1, 1)}
    assert maze.collected == []
    assert maze.total_collectibles == 5
    assert maze.completed is False


@pytest.mark.parametrize("step", [(0, -1), (-1, 0)])
def test_walls_block_without_state_change(maze: GardenMaze, step: tuple[int, int]) -> None:
    result = maze.move(*step)

    assert result.outcome == MoveOutcome.blocked
    assert result.position == (1, 1)
    assert maze.visited == {(1, 1)}


@pytest.mark.parametrize("step", [(0, 0), (1, 1), (2, 0), (0, -2)])
def test_non_unit_steps_are_blocked(maze: GardenMaze, step: tuple[int, int]) -> None:
    assert maze.move(*step).outcome == MoveOutcome.blocked
    assert maze.position == (1, 1)


def test_out_of_bounds_is_blocked(scheduler) -> None:
    layout = MazeLayout(cells=((CellKind.path, CellKind.goal),), start=(0, 0), goal=(1, 0))
    maze = GardenMaze(layout=layout, scheduler=scheduler, on_complete=lambda: None)

    assert maze.move(-1, 0).outcome == MoveOutcome.blocked
    assert maze.move(0, 1).outcome == MoveOutcome.blocked
    assert maze.position == (0, 0)
    assert maze.visited == {(0, 0)}

    assert maze.move(1, 0).outcome == MoveOutcome.reached


def test_flower_collected_once(maze: GardenMaze) -> None:
    for _ in range(2):
        maze.move(0, 1)

    first = maze.move(0, 1)
    assert first.outcome == MoveOutcome.collected
    assert first.position == (1, 4)
    assert first.message == FLOWER_MESSAGES[0]

    maze.move(0, -1)
    again = maze.move(0, 1)
    assert again.outcome == MoveOutcome.moved
    assert again.message is None
    assert maze.collected == [(1, 4)]


def test_encouragement_rotates_with_pickups(maze: GardenMaze) -> None:
    messages = []
    for step in SHORT_ROUTE[:-2] + [(0, -1), (0, -1)]:
        result = maze.move(*step)
        if result.outcome == MoveOutcome.collected:
            messages.append(result.message)

    # (1,4) then (9,5)
    assert maze.collected == [(1, 4), (9, 5)]
    assert messages == [FLOWER_MESSAGES[0], FLOWER_MESSAGES[1]]


def test_reaching_goal_completes_and_notifies_after_delay(maze: GardenMaze, scheduler, completions) -> None:
    outcomes = [maze.move(*s).outcome for s in SHORT_ROUTE]

    assert outcomes[-1] == MoveOutcome.reached
    assert maze.position == (9, 9)
    assert maze.completed is True
    assert len(maze.visited) == len(SHORT_ROUTE) + 1

    scheduler.advance(1.4)
    assert completions == []
    scheduler.advance(0.1)
    assert completions == ["done"]


def test_moves_after_completion_are_blocked(maze: GardenMaze) -> None:
    for s in SHORT_ROUTE:
        maze.move(*s)
    visited = set(maze.visited)

    result = maze.move(0, -1)

    assert result.outcome == MoveOutcome.blocked
    assert maze.position == (9, 9)
    assert maze.visited == visited


def test_visited_only_grows(maze: GardenMaze) -> None:
    sizes = []
    for s in [(0, 1), (0, -1), (1, 0), (1, 0), (-1, 0), (0, -1)]:
        maze.move(*s)
        sizes.append(len(maze.visited))

    assert sizes == sorted(sizes)
    assert maze.visited == {(1, 1), (1, 2), (2, 1), (3, 1)}


@pytest.mark.parametrize(
    "key,step",
    [
        ("ArrowUp", (0, -1)),
        ("w", (0, -1)),
        ("W", (0, -1)),
        ("ArrowDown", (0, 1)),
        ("s", (0, 1)),
        ("ArrowLeft", (-1, 0)),
        ("A", (-1, 0)),
        ("ArrowRight", (1, 0)),
        ("d", (1, 0)),
    ],
)
def test_key_bindings(key: str, step: tuple[int, int]) -> None:
    assert direction_for_key(key) == step


def test_press_ignores_non_direction_keys(maze: GardenMaze) -> None:
    assert maze.press("b") is None
    assert maze.press("Enter") is None

    moved = maze.press("s")
    assert moved is not None
    assert moved.position == (1, 2)


def test_close_cancels_pending_notice(maze: GardenMaze, scheduler, completions) -> None:
    for s in SHORT_ROUTE:
        maze.move(*s)
    assert maze.completion_pending is True

    maze.close()
    scheduler.advance(10)

    assert completions == []
