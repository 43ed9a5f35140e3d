from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def _init_assets_for_tests() -> None:
    """Load the repo's puzzle content once for the whole session."""

    from app.assets.singleton import init_assets, reset_assets_for_tests

    reset_assets_for_tests()
    init_assets(project_root=Path(__file__).resolve().parents[1])


@dataclass(slots=True)
class _ManualTask:
    when: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for the asyncio scheduler: time only moves on `advance()`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_ManualTask] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTask:
        task = _ManualTask(when=self.now + delay, callback=callback)
        self._queue.append(task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self._queue if not t.cancelled and t.when <= target + 1e-9]
            if not due:
                break
            # min() keeps insertion order among equal deadlines.
            task = min(due, key=lambda t: t.when)
            self._queue.remove(task)
            self.now = max(self.now, task.when)
            task.callback()
        self.now = target


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def assets():
    from app.assets.singleton import get_assets

    return get_assets()


@pytest.fixture()
def campaign(assets, scheduler: ManualScheduler):
    from app.campaign import Campaign

    c = Campaign(assets=assets, scheduler=scheduler)
    yield c
    c.close()


@pytest.fixture()
def client_and_campaign(campaign) -> Generator[tuple, None, None]:
    """TestClient whose single campaign is the `campaign` fixture (manual clock, no hub)."""

    from fastapi.testclient import TestClient

    from app.api.deps import get_campaign
    from app.main import app

    app.dependency_overrides[get_campaign] = lambda: campaign
    with TestClient(app) as c:
        yield c, campaign
    app.dependency_overrides.clear()
