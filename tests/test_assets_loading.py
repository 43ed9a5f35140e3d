from __future__ import annotations

from pathlib import Path

import pytest

from app.assets.registry import (
    AssetLoadError,
    CellKind,
    load_command_table_csv,
    load_maze_csv,
    load_puzzle_assets,
    load_star_chart_csv,
)


def _write(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_repo_assets_load_and_lookup() -> None:
    root = Path(__file__).resolve().parents[1]
    assets = load_puzzle_assets(root=root)

    # Commands (normalized lookup: case + surrounding whitespace)
    assert "help" in assets.commands
    assert "  Decode FINAL_KEY.enc " in assets.commands
    assert assets.commands.get("clear") is not None
    assert "" in assets.commands.get("help")  # blank spacer line survives loading
    assert assets.commands.decodable_files() == ("feelings.txt", "reasons.js", "confession.md", "final_key.enc")

    # Stars
    assert len(assets.stars.stars) == 10
    assert assets.stars.required_order == (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 1)
    assert assets.stars.get(1).word == "Every"  # type: ignore[union-attr]
    assert assets.stars.get(9).word == ""  # type: ignore[union-attr]
    assert assets.stars.get(42) is None

    # Maze
    maze = assets.maze
    assert (maze.width, maze.height) == (11, 11)
    assert maze.start == (1, 1)
    assert maze.goal == (9, 9)
    assert maze.kind_at(1, 1) == CellKind.path
    assert maze.kind_at(0, 0) == CellKind.wall
    assert len(maze.collectibles()) == 5
    assert not maze.in_bounds(11, 0)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(AssetLoadError):
        load_star_chart_csv(tmp_path / "nope.csv")


def test_command_table_requires_reserved_entries(tmp_path: Path) -> None:
    no_clear = _write(tmp_path, "a.csv", 'command,line\nhelp,"hi"\ndecode final_key.enc,"ok"\n')
    no_unlock = _write(tmp_path, "b.csv", 'command,line\nhelp,"hi"\nclear,""\n')

    with pytest.raises(AssetLoadError):
        load_command_table_csv(no_clear)
    with pytest.raises(AssetLoadError):
        load_command_table_csv(no_unlock)


def test_command_lines_keep_leading_spaces(tmp_path: Path) -> None:
    p = _write(tmp_path, "c.csv", 'command,line\nclear,""\nls,"   ├── a.txt"\ndecode final_key.enc,"ok"\n')

    table = load_command_table_csv(p)

    assert table.get("LS") == ("   ├── a.txt",)


def test_star_chart_rejects_bad_input(tmp_path: Path) -> None:
    bad_header = _write(tmp_path, "h.csv", "star,x,y,word\n1,0,0,a\n")
    dup = _write(tmp_path, "d.csv", "id,x,y,word\n1,0,0,a\n1,5,5,b\n")
    non_numeric = _write(tmp_path, "n.csv", "id,x,y,word\none,0,0,a\n")

    for p in (bad_header, dup, non_numeric):
        with pytest.raises(AssetLoadError):
            load_star_chart_csv(p)


@pytest.mark.parametrize(
    "grid",
    [
        "1,1,1\n1,S,3,1\n",  # ragged
        "S,S,3\n",  # two starts
        "S,0,0\n",  # no goal
        "S,3,3\n",  # two goals
        "S,x,3\n",  # unknown cell
        "0,0,3\n",  # no start
    ],
)
def test_maze_rejects_malformed_grids(tmp_path: Path, grid: str) -> None:
    p = _write(tmp_path, "m.csv", grid)

    with pytest.raises(AssetLoadError):
        load_maze_csv(p)


def test_loader_reads_bom_and_crlf_files(tmp_path: Path) -> None:
    p = tmp_path / "crlf.csv"
    p.write_bytes("\ufeffid,x,y,word\r\n1,10,20,Every\r\n2,30,40,\r\n".encode("utf-8"))

    chart = load_star_chart_csv(p)

    assert [s.id for s in chart.stars] == [1, 2]
    assert chart.get(1).word == "Every"  # type: ignore[union-attr]
    assert chart.get(2).word == ""  # type: ignore[union-attr]
