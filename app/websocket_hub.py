from __future__ import annotations

import asyncio

from fastapi import WebSocket


class CampaignWebSocketHub:
    """In-process WebSocket fan-out for campaign events.

    Contract:
      - register a presentation client via `connect(websocket)`.
      - push events with `broadcast(payload)` from async code, or `publish_nowait(payload)`
        from synchronous callbacks running on the event loop (timers, controller hooks).

    Payloads should be JSON-serializable dicts.
    """

    def __init__(self) -> None:
        self._conns: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._conns.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._conns.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        async with self._lock:
            conns = list(self._conns)

        if not conns:
            return

        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._conns.discard(ws)

    def publish_nowait(self, payload: dict[str, object]) -> None:
        # Must be called on the loop thread; keep a reference so the task isn't collected early.
        task = asyncio.get_running_loop().create_task(self.broadcast(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


hub = CampaignWebSocketHub()
