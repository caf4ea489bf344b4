# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Roster endpoints.
Thin HTTP layer — validates body shape, delegates ALL logic to MeetingSession.
Backend failures propagate to the app-level handlers (5xx).
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from starlette.concurrency import run_in_threadpool

from session_manager.core.dependencies import get_meeting_session
from session_manager.core.errors import MemberConflict, ValidationFailed
from session_manager.schemas.members import (
    MemberResponse,
    MembersResponse,
    OkResponse,
    SeedResponse,
    parse_force,
    parse_members,
    parse_name,
)
from session_manager.services.meeting_session import MeetingSession

router = APIRouter(tags=["Members"])


@router.get("/members", response_model=MembersResponse)
def list_members(session: MeetingSession = Depends(get_meeting_session)):
    """Roster ordered by queueOrder, as stored."""
    return MembersResponse(members=session.reload())


@router.post("/members", status_code=201, response_model=MemberResponse)
def create_member(
    body: Any = Body(default=None),
    session: MeetingSession = Depends(get_meeting_session),
):
    """Append a member at the end of the queue."""
    try:
        member = session.add_member(parse_name(body))
    except MemberConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    return MemberResponse(member=member)


@router.put("/members", response_model=OkResponse)
def replace_members(
    body: Any = Body(default=None),
    session: MeetingSession = Depends(get_meeting_session),
):
    """Full normalize + replace of the roster in the given order."""
    try:
        members = parse_members(body)
    except ValidationFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    session.replace_members(members)
    return OkResponse()


@router.delete("/members", response_model=OkResponse)
def delete_member(
    member_id: Optional[str] = Query(default=None, alias="id"),
    session: MeetingSession = Depends(get_meeting_session),
):
    """Remove a member. Unknown ids are a no-op."""
    if not member_id:
        raise HTTPException(status_code=400, detail="id is required")
    session.remove_member(member_id)
    return OkResponse()


@router.post("/members/seed", response_model=SeedResponse)
async def seed_members(
    request: Request,
    session: MeetingSession = Depends(get_meeting_session),
):
    """Seed the default roster; only overwrites a non-empty store when force is true."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    result = await run_in_threadpool(session.seed, parse_force(body))
    return SeedResponse(seeded=result.seeded, count=len(result.members))
