"""HTTP + WebSocket surface for typing clients (FastAPI, served by uvicorn)."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from typecast.engine import Engine
    from typecast.router import SubmitResult

log = logging.getLogger(__name__)

app = FastAPI(title="typecast API", version="0.1.0")

# Engine reference — set by start_api()
_engine: Engine | None = None


def get_engine() -> Engine:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Engine not ready")
    return _engine


# ── REST endpoints ────────────────────────────────────────────────

@app.get("/api/targets")
async def api_targets() -> JSONResponse:
    """Live targets with typing progress."""
    engine = get_engine()
    snap = engine.snapshot()
    return JSONResponse({"targets": snap["targets"], "count": len(snap["targets"])})


@app.get("/api/stats")
async def api_stats() -> JSONResponse:
    engine = get_engine()
    snap = engine.snapshot()
    return JSONResponse({
        "tick": snap["tick"],
        "language": "korean" if engine.korean_mode else "english",
        "queue": snap["queue"],
        "phase": snap["phase"],
        "player_hp": snap["player_hp"],
        "score": snap["score"],
        "words": engine.words.stats(),
    })


@app.post("/api/reload")
async def api_reload() -> JSONResponse:
    """Reload word lists at the next tick boundary."""
    engine = get_engine()
    engine.words.queue_reload()
    return JSONResponse({"status": "queued"})


# ── WebSocket endpoint ────────────────────────────────────────────

def _summarize(results: list[SubmitResult]) -> dict[str, Any]:
    return {
        "accepted": sum(len(r.accepted) for r in results),
        "typos": sum(len(r.typos) for r in results),
        "global_typo": any(r.global_typo for r in results),
        "completed": [tid for r in results for tid in r.completed],
    }


def handle_frame(engine: Engine, data: str) -> dict[str, Any]:
    """Apply one client frame.

    Frames are plain typed text, ``"backspace"``, or a JSON key event
    ``{"key": "R", "shift": true}``.
    """
    if data == "backspace":
        engine.handle_key("backspace")
        results: list[SubmitResult] = []
    elif data.startswith("{"):
        try:
            msg = json.loads(data)
        except json.JSONDecodeError:
            return {"error": "bad frame"}
        key = msg.get("key", "") if isinstance(msg, dict) else ""
        if not isinstance(key, str) or not key:
            return {"error": "missing key"}
        result = engine.handle_key(key, bool(msg.get("shift", False)))
        results = [result] if result is not None else []
    else:
        results = engine.handle_input(data)
    return {"input": _summarize(results), "state": engine.snapshot()}


_ws_id_counter = 0


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    """Typing client endpoint: every frame is keystrokes, every reply is state."""
    global _ws_id_counter
    engine = get_engine()

    await ws.accept()
    _ws_id_counter += 1
    conn_id = _ws_id_counter
    log.info("WebSocket connection #%d", conn_id)

    try:
        await ws.send_json({"state": engine.snapshot()})
        while True:
            data = await ws.receive_text()
            await ws.send_json(handle_frame(engine, data))
    except WebSocketDisconnect:
        pass
    finally:
        log.info("WebSocket connection #%d closed", conn_id)


# ── Server lifecycle ──────────────────────────────────────────────

_server: Any = None
_serve_task: asyncio.Task | None = None


async def start_api(engine: Engine, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Bind the engine and serve the app on the running loop."""
    global _engine, _server, _serve_task
    _engine = engine

    import uvicorn

    _server = uvicorn.Server(uvicorn.Config(
        app, host=host, port=port,
        log_level="warning",
        access_log=False,
    ))
    _serve_task = asyncio.create_task(_server.serve())
    log.info("Typing API listening on %s:%d", host, port)


async def stop_api(grace: float = 2.0) -> None:
    """Ask uvicorn to exit; cancel it if it does not within ``grace`` seconds."""
    global _engine, _server, _serve_task
    if _serve_task is not None:
        if _server is not None:
            _server.should_exit = True
        try:
            await asyncio.wait_for(_serve_task, timeout=grace)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            log.warning("API server did not exit in %.1fs, cancelled", grace)
        _serve_task = None
        _server = None
    _engine = None
    log.info("Typing API stopped")
