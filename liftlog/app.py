# app.py
# =============================================================================
# Lift-Log API — Workouts (FastAPI + Pydantic v2, SQLAlchemy 2.x async optional)
# One document per finished workout: exercises and their sets in order.
# =============================================================================

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path as OSPath
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from liftlog.models import Workout
from liftlog.store import InMemoryWorkoutStore, SqlWorkoutStore, WorkoutStore

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
log = logging.getLogger("liftlog-api")

# -----------------------------------------------------------------------------
# Store selection
#   LIFTLOG_STORE=memory (default) keeps workouts in process memory.
#   LIFTLOG_STORE=sql uses, in order:
#     1) env LIFTLOG_DATABASE_URL (any SQLAlchemy async URL)
#     2) env LIFTLOG_DB (path to a SQLite file)
#     3) ./data/liftlog.db
# -----------------------------------------------------------------------------
STORE_KIND = os.getenv("LIFTLOG_STORE", "memory").strip().lower()


def _sql_url() -> str:
    url = os.getenv("LIFTLOG_DATABASE_URL")
    if url:
        return url
    db_path = os.getenv("LIFTLOG_DB") or str(
        (OSPath(__file__).resolve().parent.parent / "data" / "liftlog.db")
    )
    OSPath(db_path).parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{db_path}"


def build_store(kind: str = STORE_KIND) -> WorkoutStore:
    if kind == "sql":
        url = _sql_url()
        log.info(f"Using SQL store: {url.split('@')[-1]}")  # no credentials in logs
        return SqlWorkoutStore(url)
    if kind != "memory":
        log.warning(f"Unknown LIFTLOG_STORE '{kind}', falling back to memory")
    log.info("Using in-memory store")
    return InMemoryWorkoutStore()


store: WorkoutStore = build_store()


# -----------------------------------------------------------------------------
# Response schemas
# -----------------------------------------------------------------------------
class HealthOut(BaseModel):
    ok: bool = True
    store: str
    workouts: int
    timestamp: str


class GenericResponse(BaseModel):
    message: str


# -----------------------------------------------------------------------------
# App (with lifespan)
# -----------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    await store.init()
    yield
    await store.close()


app = FastAPI(
    title="Lift-Log API",
    description="Gym workout tracker. Stores finished workouts and lists them newest first.",
    version="1.0.0",
    lifespan=lifespan,
)


# -----------------------------------------------------------------------------
# Rate limiting middleware (in-memory sliding window, per client IP)
#   RATE_LIMIT_REQUESTS requests per RATE_LIMIT_WINDOW seconds. Clients with no
#   request inside the window are dropped so the table only holds active IPs.
# -----------------------------------------------------------------------------
_rate_limit_store: Dict[str, List[float]] = {}
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "60"))
RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "60"))  # seconds


def _sweep_rate_limits(window_start: float) -> None:
    for ip in list(_rate_limit_store):
        hits = [t for t in _rate_limit_store[ip] if t > window_start]
        if hits:
            _rate_limit_store[ip] = hits
        else:
            del _rate_limit_store[ip]


def _take_rate_limit_slot(client_ip: str, now: float) -> Optional[int]:
    """Record a request from ``client_ip``; returns the requests left, or None when over the limit."""
    _sweep_rate_limits(now - RATE_LIMIT_WINDOW)
    hits = _rate_limit_store.get(client_ip, [])
    if len(hits) >= RATE_LIMIT_REQUESTS:
        return None
    _rate_limit_store[client_ip] = hits + [now]
    return RATE_LIMIT_REQUESTS - len(hits) - 1


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    client_ip = request.client.host if request.client else "unknown"
    remaining = _take_rate_limit_slot(client_ip, time.time())
    if remaining is None:
        log.warning(f"Rate limit exceeded for {client_ip}")
        return JSONResponse(
            {"detail": "Rate limit exceeded. Try again later."},
            status_code=429,
            headers={"Retry-After": str(RATE_LIMIT_WINDOW)},
        )

    response = await call_next(request)
    response.headers["X-RateLimit-Limit"] = str(RATE_LIMIT_REQUESTS)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    return response


# -----------------------------------------------------------------------------
# Health / Root
# -----------------------------------------------------------------------------
@app.get("/health", response_model=HealthOut)
async def health() -> HealthOut:
    ok = True
    workouts = 0
    try:
        workouts = await store.count()
    except Exception as e:
        ok = False
        log.error(f"Health check store query failed: {e}")
    return HealthOut(
        ok=ok,
        store=store.name,
        workouts=workouts,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/", response_model=GenericResponse)
async def root() -> GenericResponse:
    return GenericResponse(message="Lift-Log API v1 is running")


# -----------------------------------------------------------------------------
# Workouts
# -----------------------------------------------------------------------------
@app.get(
    "/api/workouts",
    response_model=List[Workout],
    response_model_exclude_none=True,
)
async def list_workouts() -> List[Workout]:
    return await store.list()


@app.get(
    "/api/workouts/{workout_id}",
    response_model=Workout,
    response_model_exclude_none=True,
)
async def get_workout(workout_id: str) -> Workout:
    w = await store.get(workout_id)
    if w is None:
        raise HTTPException(404, "Workout not found")
    return w


@app.post(
    "/api/workouts",
    response_model=Workout,
    response_model_exclude_none=True,
    status_code=201,
)
async def create_workout(body: Workout, request: Request, response: Response) -> Workout:
    created = await store.create(body)
    response.headers["Location"] = str(request.url_for("get_workout", workout_id=created.id))
    log.info(
        f"Workout {created.id} saved: {len(created.exercises)} exercises, "
        f"{sum(len(e.sets) for e in created.exercises)} sets"
    )
    return created
