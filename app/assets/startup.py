from __future__ import annotations

import logging
from pathlib import Path

from app.assets.singleton import init_assets

logger = logging.getLogger(__name__)


def init_assets_for_app() -> None:
    # project root is two levels up from this file: app/assets/startup.py
    project_root = Path(__file__).resolve().parents[2]
    assets = init_assets(project_root=project_root)
    logger.info(
        "Loaded puzzle assets: %d commands, %d stars, %dx%d maze",
        len(assets.commands.entries),
        len(assets.stars.stars),
        assets.maze.width,
        assets.maze.height,
    )
