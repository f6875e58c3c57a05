"""Dashboard routes — one-shot stats and a live SSE stream."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from recruit_portal.auth import get_current_user
from recruit_portal.config import load_config
from recruit_portal.errors import InitErrorLog
from recruit_portal.live import DashboardSession, read_snapshot
from recruit_portal.models import AppUser, DashboardStats
from recruit_portal.pipeline import compute_dashboard_stats
from recruit_portal.scheduler import Debouncer

log = logging.getLogger(__name__)

router = APIRouter()

KEEPALIVE_SECONDS = 15


def _stats_event(stats: DashboardStats) -> dict:
    return {"event": "stats", "data": json.dumps(stats.model_dump(by_alias=True, mode="json"))}


@router.get("/stats")
async def dashboard_stats(user: AppUser = Depends(get_current_user)):
    errors = InitErrorLog()
    snapshot, settings = read_snapshot(user, errors)
    stats = compute_dashboard_stats(snapshot, user, settings)
    return {"stats": stats.model_dump(by_alias=True), "errors": errors.messages}


@router.get("/stream")
async def dashboard_stream(request: Request, user: AppUser = Depends(get_current_user)):
    """Push recomputed stats whenever an underlying collection changes.

    The session is closed, and its subscriptions dropped, when the client
    disconnects.
    """
    loop = asyncio.get_running_loop()
    q: asyncio.Queue[DashboardStats] = asyncio.Queue()

    session = DashboardSession(
        hub=request.app.state.hub,
        viewer=user,
        on_stats=lambda stats: loop.call_soon_threadsafe(q.put_nowait, stats),
        debouncer=Debouncer(load_config().dashboard_debounce_ms),
    )

    async def event_generator():
        try:
            await asyncio.to_thread(session.open)
            for message in session.errors.messages:
                yield {"event": "error", "data": json.dumps({"message": message})}
            while True:
                if await request.is_disconnected():
                    break
                try:
                    stats = await asyncio.wait_for(q.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    continue
                # Only the newest pending result matters
                while not q.empty():
                    stats = q.get_nowait()
                yield _stats_event(stats)
        finally:
            session.close()

    return EventSourceResponse(event_generator())
