# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Session Manager Service
=======================
Tracks attendance and speaking time for a recurring group session: a roster
of members, a rotating speaker slot with its own countdown, an overall
session countdown, and a roster persisted to whichever backend the
environment provides:

    relational (PostgREST) ─► key-value (KV REST) ─► local JSON file

Port: 8000
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from session_manager.controllers import member_controller, session_controller, system_controller
from session_manager.core.config import settings
from session_manager.core.dependencies import get_meeting_session
from session_manager.core.errors import BackendRequestFailed, ConfigMissing
from session_manager.core.logging import get_logger
from session_manager.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Load (or seed) the roster and start ticking; final flush on shutdown."""
    session = get_meeting_session()
    try:
        if settings.SEED_ON_STARTUP:
            result = session.seed(force=False)
            logger.info("Startup roster ready: seeded=%s, members=%d", result.seeded, len(result.members))
        else:
            session.load()
            logger.info("Startup roster loaded: members=%d", len(session.members))
    except Exception as exc:
        logger.error(
            "Roster load FAILED, roster will load on first change: %s", exc, exc_info=True
        )
    if settings.AUTO_TICK:
        session.start_ticking()
    yield
    session.close()
    logger.info("Session closed, pending changes flushed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Session Manager",
    description="Attendance, speaker rotation and session timing with pluggable persistence.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Exception handlers ───────────────────────────────────────────────────
@app.exception_handler(BackendRequestFailed)
async def backend_failed_handler(request: Request, exc: BackendRequestFailed):
    req_id = getattr(request.state, "request_id", None)
    logger.error("Backend request failed: %s", exc, extra={"request_id": req_id, "backend": exc.backend})
    return JSONResponse(
        status_code=502,
        content={
            "error": "backend_request_failed",
            "detail": str(exc),
            "backend": exc.backend,
            "status": exc.status,
            "request_id": req_id,
        },
    )


@app.exception_handler(ConfigMissing)
async def config_missing_handler(request: Request, exc: ConfigMissing):
    req_id = getattr(request.state, "request_id", None)
    logger.error("Backend misconfigured: %s", exc, extra={"request_id": req_id, "backend": exc.backend})
    return JSONResponse(
        status_code=500,
        content={"error": "config_missing", "detail": str(exc), "request_id": req_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(member_controller.router)
app.include_router(session_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
