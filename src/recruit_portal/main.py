"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recruit_portal import __version__
from recruit_portal import database as db
from recruit_portal.config import load_config
from recruit_portal.errors import AuthError, PermissionDeniedError, PortalError, WriteError
from recruit_portal.live import SnapshotHub
from recruit_portal.routes import (
    auth,
    candidates,
    complaints,
    dashboard,
    demo_requests,
    jobs,
    requirements,
    settings,
    supervisors,
    team,
)
from recruit_portal.scheduler import init_scheduler, shutdown_scheduler

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = load_config()
    db.DB_PATH = cfg.db_path
    db.init_db()

    hub = SnapshotHub()
    db.add_change_listener(hub.publish)
    app.state.hub = hub

    init_scheduler()
    log.info("Recruit portal started (db=%s)", cfg.db_path)

    yield

    db.remove_change_listener(hub.publish)
    shutdown_scheduler()


app = FastAPI(title="Recruit Portal API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if isinstance(exc, AuthError):
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc), "code": exc.code})
    if isinstance(exc, PermissionDeniedError):
        return JSONResponse(status_code=403, content={"detail": str(exc)})
    if isinstance(exc, WriteError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})
    log.warning("Unhandled portal error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])
app.include_router(requirements.router, prefix="/api/requirements", tags=["requirements"])
app.include_router(team.router, prefix="/api/team", tags=["team"])
app.include_router(complaints.router, prefix="/api/complaints", tags=["complaints"])
app.include_router(supervisors.router, prefix="/api/supervisors", tags=["supervisors"])
app.include_router(demo_requests.router, prefix="/api/demo-requests", tags=["demo-requests"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(settings.router, prefix="/api/settings", tags=["settings"])


@app.get("/health")
async def health():
    return {"status": "ok"}
