from __future__ import annotations

from pathlib import Path

from app.assets.registry import PuzzleAssets, load_puzzle_assets


_ASSETS: PuzzleAssets | None = None


def init_assets(*, project_root: Path) -> PuzzleAssets:
    """Load puzzle content once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    """

    global _ASSETS
    if _ASSETS is None:
        _ASSETS = load_puzzle_assets(root=project_root)
    return _ASSETS


def reset_assets_for_tests() -> None:
    global _ASSETS
    _ASSETS = None


def get_assets() -> PuzzleAssets:
    if _ASSETS is None:
        raise RuntimeError("Assets not initialized. Call init_assets() at startup.")
    return _ASSETS
