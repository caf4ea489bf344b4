# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the store, sync engine and session.
"""

from session_manager.repositories.member_store import MemberStore
from session_manager.services.meeting_session import MeetingSession
from session_manager.services.scheduler import ThreadScheduler
from session_manager.services.sync_engine import SyncEngine

# ── Singleton instances (one session per process, single writer) ──
_member_store = MemberStore()
_scheduler = ThreadScheduler()
_sync_engine = SyncEngine(_member_store, _scheduler)
_meeting_session = MeetingSession(_sync_engine, _scheduler)


# ── FastAPI dependency functions ──
def get_member_store() -> MemberStore:
    return _member_store


def get_meeting_session() -> MeetingSession:
    return _meeting_session
