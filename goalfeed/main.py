from __future__ import annotations

import asyncio
import logging

from fastapi import Depends, FastAPI, HTTPException
from sqlalchemy import desc
from sqlalchemy.orm import Session

from goalfeed.db import get_db
from goalfeed.engine import Engine, build_engine, run_engine
from goalfeed.log_buffer import get_buffer_handler, install_buffer_handler
from goalfeed.models import Goal
from goalfeed.monitor import RefreshSignal
from goalfeed.registry import ActiveGameRegistry, GameNotFound, RegistryError
from goalfeed.schemas import ActiveGameOut, GoalOut
from goalfeed.settings import load_settings
from goalfeed.telemetry import init_sentry

app = FastAPI(title="Goalfeed")
logger = logging.getLogger(__name__)
_engine: Engine | None = None
_engine_task: asyncio.Task | None = None
_engine_stop: asyncio.Event | None = None


async def _run_engine_guarded(engine: Engine, stop_event: asyncio.Event) -> None:
    try:
        await run_engine(engine, stop_event)
    except Exception:
        logger.exception("Engine crashed.")


@app.on_event("startup")
async def start_engine() -> None:
    global _engine, _engine_task, _engine_stop
    install_buffer_handler()
    settings = load_settings()
    init_sentry(settings.sentry_dsn, settings.release_stage)
    logger.info("App starting up, leagues=%s", ",".join(settings.leagues))
    _engine = build_engine(settings)
    _engine_stop = asyncio.Event()
    _engine_task = asyncio.create_task(_run_engine_guarded(_engine, _engine_stop))


@app.on_event("shutdown")
async def stop_engine() -> None:
    global _engine, _engine_task, _engine_stop
    if _engine_stop:
        _engine_stop.set()
    if _engine_task:
        await _engine_task
    _engine = None
    _engine_task = None
    _engine_stop = None


def get_registry() -> ActiveGameRegistry:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Engine not running")
    return _engine.registry


def get_refresh_signal() -> RefreshSignal:
    if _engine is None:
        raise HTTPException(status_code=503, detail="Engine not running")
    return _engine.monitor.refresh


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/games/active", response_model=list[ActiveGameOut])
def api_active_games(registry: ActiveGameRegistry = Depends(get_registry)):
    try:
        game_keys = registry.get_active_game_keys()
        games = []
        for game_key in sorted(game_keys):
            try:
                games.append(ActiveGameOut.from_game(registry.get_game(game_key)))
            except GameNotFound:
                continue
    except RegistryError as exc:
        logger.error("Active games lookup failed: %s", exc)
        raise HTTPException(status_code=503, detail="Registry unavailable") from exc
    return games


@app.get("/api/goals", response_model=list[GoalOut])
def api_goals(limit: int = 50, db: Session = Depends(get_db)):
    goals = db.query(Goal).order_by(desc(Goal.created_at), desc(Goal.id)).limit(limit).all()
    return [GoalOut.model_validate(goal) for goal in goals]


@app.post("/api/refresh")
def api_refresh(refresh: RefreshSignal = Depends(get_refresh_signal)):
    refresh.request()
    return {"requested": True}


@app.get("/api/logs")
def api_logs(limit: int = 100):
    handler = get_buffer_handler()
    return {"entries": handler.entries(limit=limit)}
