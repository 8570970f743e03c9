from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import deque
from dataclasses import asdict, dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Set

import pygame
import yaml
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from ..config import AppConfig, SimulationConfig, load_app_config
from ..render.renderer import Renderer
from ..sim.core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """
    Drives one `World` from an asyncio task and fans snapshots out to websocket clients.

    All world mutation happens on the event loop under `_lock`; stop and reset
    cancel the loop task before touching state.
    """

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque()
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None
        self._renderer: Renderer | None = None
        self._last_broadcast = -1

    @property
    def running(self) -> bool:
        return self.world.running

    @property
    def tick(self) -> int:
        return self.world.tick

    async def start(self) -> None:
        await self._cancel_loop()
        async with self._lock:
            self.world.start()
        await self._clear_queue()
        self._loop_task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        await self._cancel_loop()
        async with self._lock:
            self.world.stop()

    async def reset(self) -> None:
        await self._cancel_loop()
        async with self._lock:
            self.world.reset()
        await self._clear_queue()
        await self._broadcast_snapshot()

    async def shutdown(self) -> None:
        await self._cancel_loop()

    async def drop_drug(self, x: float, y: float) -> dict | None:
        async with self._lock:
            drug = self.world.add_drug(x, y)
        if drug is None:
            return None
        return {"id": drug.id, "x": drug.position.x, "y": drug.position.y, "created_at": drug.created_at}

    async def render_png(self) -> bytes:
        if self._renderer is None:
            self._renderer = Renderer(self.config)
        async with self._lock:
            surface = self._renderer.render(self.world)
        buffer = BytesIO()
        pygame.image.save(surface, buffer, "frame.png")
        return buffer.getvalue()

    async def _cancel_loop(self) -> None:
        task = self._loop_task
        self._loop_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _clear_queue(self) -> None:
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        self._last_broadcast = -1

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()
        while True:
            await asyncio.sleep(self.config.time_step)
            now = loop.time()
            elapsed = now - last
            last = now
            async with self._lock:
                self.world.advance(elapsed)
                tick = self.world.tick
            if tick - self._last_broadcast >= self.broadcast_interval:
                await self._broadcast_snapshot()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot()
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "agents": snapshot.agents,
                "drugs": snapshot.drugs,
                "effects": snapshot.effects,
                "captions": snapshot.captions,
                "arena": snapshot.arena,
                "metadata": asdict(snapshot.metadata),
                "ending": asdict(snapshot.ending) if snapshot.ending is not None else None,
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        self._last_broadcast = queued.tick
        async with self._queue_lock:
            if self._snapshot_queue and self._snapshot_queue[-1].tick >= queued.tick:
                self._snapshot_queue[-1] = queued
            else:
                self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def _load_settings() -> AppConfig:
    path = os.environ.get("INCUBATOR_CONFIG")
    if not path:
        return AppConfig()
    raw = yaml.safe_load(Path(path).read_text()) or {}
    return load_app_config(raw)


settings = _load_settings()
app = FastAPI(title="Incubator Observation")
controller = SimulationController(settings.simulation, broadcast_interval=settings.broadcast_interval)
static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.shutdown()


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    world = controller.world
    snapshot = world.snapshot()
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "phase": world.phase.value,
            "ended": world.ended,
            "population": len(world.agents),
            "metrics": asdict(snapshot.metrics),
            "ending": asdict(snapshot.ending) if snapshot.ending is not None else None,
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": True, "tick": controller.tick})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/drug")
async def drop_drug(payload: dict) -> JSONResponse:
    try:
        x = float(payload["x"])
        y = float(payload["y"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=422, detail="x and y must be numbers")
    drug = await controller.drop_drug(x, y)
    return JSONResponse({"accepted": drug is not None, "drug": drug})


@app.get("/api/frame.png")
async def frame() -> Response:
    return Response(content=await controller.render_png(), media_type="image/png")


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


__all__ = ["app", "controller"]
