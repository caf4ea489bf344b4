# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: liveness, readiness and Prometheus scrape endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from session_manager.core.config import settings
from session_manager.core.dependencies import get_meeting_session, get_member_store
from session_manager.core.errors import SessionManagerError
from session_manager.repositories.member_store import MemberStore
from session_manager.services.meeting_session import MeetingSession

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check(session: MeetingSession = Depends(get_meeting_session)):
    """In-memory view only; never touches the backend."""
    snapshot = session.snapshot()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "members_count": snapshot["stats"]["total"],
        "ticking": session.ticking,
        "pending_sync": snapshot["pendingSync"],
    }


@router.get("/health/ready")
def readiness_check(store: MemberStore = Depends(get_member_store)):
    """Ready once the backend the environment currently selects can be read."""
    selected = store.describe()
    try:
        stored = store.load()
    except (SessionManagerError, OSError, ValueError) as exc:
        raise HTTPException(
            status_code=503,
            detail=f"{selected['backend']} backend unavailable: {exc}",
        )
    return {"status": "ready", **selected, "stored_members": len(stored)}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
