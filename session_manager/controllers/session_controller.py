# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Session, speaker and per-member actions.
Thin HTTP layer — delegates ALL logic to MeetingSession.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from session_manager.core.dependencies import get_meeting_session
from session_manager.core.errors import MemberNotFound, ValidationFailed
from session_manager.schemas.members import MemberResponse, MembersResponse
from session_manager.schemas.session import (
    AttendanceRequest,
    ReorderRequest,
    RoleRequest,
    SpeakerConfigRequest,
    SpeakerSelectRequest,
    TimerStartRequest,
)
from session_manager.services.meeting_session import MeetingSession

router = APIRouter(prefix="/session", tags=["Session"])


@router.get("")
def get_session(session: MeetingSession = Depends(get_meeting_session)):
    """Timers, active speaker, queue and attendance stats."""
    return session.snapshot()


# ── Session timer ──

@router.post("/timer/start")
def start_session_timer(
    payload: TimerStartRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    return session.start_session(payload.minutes)


@router.post("/timer/pause")
def pause_session_timer(session: MeetingSession = Depends(get_meeting_session)):
    return session.pause_session()


@router.post("/timer/resume")
def resume_session_timer(session: MeetingSession = Depends(get_meeting_session)):
    return session.resume_session()


@router.post("/timer/reset")
def reset_session_timer(session: MeetingSession = Depends(get_meeting_session)):
    return session.reset_session()


# ── Speaker ──

@router.post("/speaker/select")
def select_speaker(
    payload: SpeakerSelectRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    try:
        return session.select_speaker(payload.id)
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/speaker/start")
def start_speaker(session: MeetingSession = Depends(get_meeting_session)):
    return session.start_speaker()


@router.post("/speaker/pause")
def pause_speaker(session: MeetingSession = Depends(get_meeting_session)):
    return session.pause_speaker()


@router.post("/speaker/reset")
def reset_speaker(session: MeetingSession = Depends(get_meeting_session)):
    """Zero the active speaker's elapsed time."""
    try:
        return session.reset_speaker()
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/speaker/config")
def configure_speaker(
    payload: SpeakerConfigRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    """Set role/limit of the active speaker, or the role default when none is selected."""
    try:
        return session.apply_speaker_config(payload.role, payload.minutes)
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/speaker/queue")
def enqueue_speaker(
    payload: SpeakerSelectRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    try:
        return {"queue": session.enqueue_speaker(payload.id)}
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/speaker/queue")
def dequeue_speaker(
    member_id: str = Query(..., alias="id", min_length=1),
    session: MeetingSession = Depends(get_meeting_session),
):
    return {"queue": session.dequeue_speaker(member_id)}


@router.post("/speaker/advance")
def advance_speaker(session: MeetingSession = Depends(get_meeting_session)):
    """Hand the floor to the next queued member still on the roster."""
    return session.advance_speaker()


# ── Per-member actions ──

@router.post("/members/{member_id}/attendance", response_model=MemberResponse)
def set_attendance(
    member_id: str,
    payload: AttendanceRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    try:
        return MemberResponse(member=session.set_attendance(member_id, payload.attendance))
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/members/{member_id}/role", response_model=MemberResponse)
def set_role(
    member_id: str,
    payload: RoleRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    try:
        return MemberResponse(member=session.set_role(member_id, payload.role))
    except MemberNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/reorder", response_model=MembersResponse)
def reorder_members(
    payload: ReorderRequest,
    session: MeetingSession = Depends(get_meeting_session),
):
    """Move sourceId to targetId's position; unknown ids leave the order as is."""
    return MembersResponse(members=session.reorder(payload.source_id, payload.target_id))
