from __future__ import annotations

import csv
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


CLEAR_COMMAND = "clear"
DECODE_PREFIX = "decode "
UNLOCK_COMMAND = "decode final_key.enc"


def normalize_command(text: str) -> str:
    return text.strip().lower()


class AssetLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class CommandTable:
    """Static terminal command table.

    Keys are normalized command strings. Built once at startup and never mutated.
    """

    entries: Mapping[str, tuple[str, ...]]

    @staticmethod
    def from_rows(rows: list[tuple[str, str]]) -> "CommandTable":
        build: dict[str, list[str]] = {}
        for command, line in rows:
            build.setdefault(normalize_command(command), []).append(line)

        if CLEAR_COMMAND not in build:
            raise AssetLoadError(f"Command table is missing the reserved '{CLEAR_COMMAND}' entry")
        if UNLOCK_COMMAND not in build:
            raise AssetLoadError(f"Command table is missing the '{UNLOCK_COMMAND}' entry")

        return CommandTable(entries=MappingProxyType({k: tuple(v) for k, v in build.items()}))

    def get(self, command: str) -> tuple[str, ...] | None:
        return self.entries.get(normalize_command(command))

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and normalize_command(item) in self.entries

    def decodable_files(self) -> tuple[str, ...]:
        """Files reachable through the `decode <file>` family, in table order."""

        return tuple(k[len(DECODE_PREFIX) :] for k in self.entries if k.startswith(DECODE_PREFIX))


@dataclass(frozen=True, slots=True)
class Star:
    id: int
    x: int
    y: int
    word: str


@dataclass(frozen=True, slots=True)
class StarChart:
    """Constellation stars plus the single accepted tracing order.

    The order is the chart order with the first star repeated to close the shape.
    """

    stars: tuple[Star, ...]
    required_order: tuple[int, ...]
    _by_id: Mapping[int, Star]

    @staticmethod
    def from_rows(rows: list[Star]) -> "StarChart":
        if not rows:
            raise AssetLoadError("Star chart is empty")

        by_id: dict[int, Star] = {}
        for s in rows:
            if s.id in by_id:
                raise AssetLoadError(f"Duplicate star id: {s.id}")
            by_id[s.id] = s

        order = tuple(s.id for s in rows) + (rows[0].id,)
        return StarChart(stars=tuple(rows), required_order=order, _by_id=MappingProxyType(by_id))

    def get(self, star_id: int) -> Star | None:
        return self._by_id.get(star_id)


class CellKind(IntEnum):
    path = 0
    wall = 1
    collectible = 2
    goal = 3


Coord = tuple[int, int]


@dataclass(frozen=True, slots=True)
class MazeLayout:
    """Static walled grid. Cells are indexed `cells[y][x]`."""

    cells: tuple[tuple[CellKind, ...], ...]
    start: Coord
    goal: Coord

    @property
    def width(self) -> int:
        return len(self.cells[0])

    @property
    def height(self) -> int:
        return len(self.cells)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def kind_at(self, x: int, y: int) -> CellKind:
        return self.cells[y][x]

    def collectibles(self) -> tuple[Coord, ...]:
        return tuple(
            (x, y)
            for y, row in enumerate(self.cells)
            for x, kind in enumerate(row)
            if kind == CellKind.collectible
        )


@dataclass(frozen=True, slots=True)
class PuzzleAssets:
    commands: CommandTable
    stars: StarChart
    maze: MazeLayout


def _read_csv_rows(path: Path, *, strip: bool = True) -> list[list[str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as fh:
            raw = fh.read()
    except FileNotFoundError as e:
        raise AssetLoadError(f"Asset file not found: {path}") from e

    reader = csv.reader(raw.splitlines())
    if strip:
        rows = [[c.strip() for c in row] for row in reader]
    else:
        rows = [list(row) for row in reader]
    # Output lines may be blank on purpose; only drop rows with nothing at all.
    return [row for row in rows if any(cell.strip() for cell in row)]


def load_command_table_csv(path: Path) -> CommandTable:
    rows = _read_csv_rows(path, strip=False)
    if not rows:
        raise AssetLoadError(f"Empty command CSV: {path}")

    header = [c.strip().casefold() for c in rows[0]]
    if header[:2] != ["command", "line"]:
        raise AssetLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[tuple[str, str]] = []
    for row in rows[1:]:
        command = row[0].strip()
        if not command:
            continue
        line = row[1] if len(row) > 1 else ""
        out.append((command, line))

    return CommandTable.from_rows(out)


def load_star_chart_csv(path: Path) -> StarChart:
    rows = _read_csv_rows(path)
    if not rows:
        raise AssetLoadError(f"Empty star CSV: {path}")

    header = [c.casefold() for c in rows[0]]
    if header[:4] != ["id", "x", "y", "word"]:
        raise AssetLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[Star] = []
    for row in rows[1:]:
        if len(row) < 3:
            continue
        try:
            sid, x, y = int(row[0]), int(row[1]), int(row[2])
        except ValueError as e:
            raise AssetLoadError(f"Bad star row in {path}: {row}") from e
        word = row[3] if len(row) > 3 else ""
        out.append(Star(id=sid, x=x, y=y, word=word))

    return StarChart.from_rows(out)


_START_MARK = "S"


def load_maze_csv(path: Path) -> MazeLayout:
    rows = _read_csv_rows(path)
    if not rows:
        raise AssetLoadError(f"Empty maze CSV: {path}")

    width = len(rows[0])
    start: Coord | None = None
    goals: list[Coord] = []
    cells: list[tuple[CellKind, ...]] = []

    for y, row in enumerate(rows):
        if len(row) != width:
            raise AssetLoadError(f"Maze row {y} has {len(row)} cells, expected {width}")
        kinds: list[CellKind] = []
        for x, raw in enumerate(row):
            if raw.upper() == _START_MARK:
                if start is not None:
                    raise AssetLoadError(f"Maze has more than one start cell: {path}")
                start = (x, y)
                kinds.append(CellKind.path)
                continue
            try:
                kind = CellKind(int(raw))
            except ValueError as e:
                raise AssetLoadError(f"Unknown maze cell {raw!r} at ({x},{y})") from e
            if kind == CellKind.goal:
                goals.append((x, y))
            kinds.append(kind)
        cells.append(tuple(kinds))

    if start is None:
        raise AssetLoadError(f"Maze has no start cell: {path}")
    if len(goals) != 1:
        raise AssetLoadError(f"Maze must have exactly one goal cell, found {len(goals)}")

    return MazeLayout(cells=tuple(cells), start=start, goal=goals[0])


def load_puzzle_assets(*, root: Path) -> PuzzleAssets:
    assets_dir = root / "assets"
    return PuzzleAssets(
        commands=load_command_table_csv(assets_dir / "terminal_commands.csv"),
        stars=load_star_chart_csv(assets_dir / "constellation_stars.csv"),
        maze=load_maze_csv(assets_dir / "garden_maze.csv"),
    )
