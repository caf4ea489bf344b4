# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Speaker timer state machine.

    idle ─select─► paused ─start─► running ─tick→0─► expired
                     ▲               │                  │
                     └────pause──────┘◄─────start───────┘

Owns no roster: tick() takes the working copy and returns the updated one,
so persistence stays with the caller. No I/O, no scheduling.
"""

from collections import deque
from typing import Any, Optional

from session_manager.models.domain import Member, WorkingCopy

IDLE = "idle"
PAUSED = "paused"
RUNNING = "running"
EXPIRED = "expired"


def remaining_for(member: Member) -> int:
    return max(0, member.speak_limit - member.elapsed_time)


class SpeakerTimer:
    """Countdown for whichever member currently holds the floor."""

    def __init__(self) -> None:
        self.state: str = IDLE
        self.member_id: Optional[str] = None
        self.remaining: int = 0
        self.pending_role: Optional[str] = None
        self.pending_minutes: Optional[int] = None
        self._queue: deque[str] = deque()

    @property
    def running(self) -> bool:
        return self.state == RUNNING

    @property
    def queue(self) -> list[str]:
        return list(self._queue)

    # ── Transitions ──

    def select(self, member: Member) -> None:
        """Any state → paused, with the member's remaining allotment."""
        self.member_id = member.id
        self.state = PAUSED
        self.remaining = remaining_for(member)
        self.pending_role = member.role
        self.pending_minutes = max(1, round(member.speak_limit / 60))

    def start(self) -> None:
        if self.state in (PAUSED, EXPIRED):
            self.state = RUNNING

    def pause(self) -> None:
        if self.state == RUNNING:
            self.state = PAUSED

    def tick(self, copy: WorkingCopy) -> WorkingCopy:
        """One second of speaking: count down and charge the selected member."""
        if self.state != RUNNING or self.member_id is None:
            return copy
        member = copy.find(self.member_id)
        if member is None:
            self.clear()
            return copy
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.state = EXPIRED
        return copy.update_member(member.id, elapsed_time=member.elapsed_time + 1)

    def refresh(self, member: Member) -> None:
        """Recompute remaining after the member's limit or elapsed time changed."""
        if member.id == self.member_id:
            self.remaining = remaining_for(member)
            if self.state == EXPIRED and self.remaining > 0:
                self.state = PAUSED

    def reset(self, member: Member) -> None:
        """Elapsed time was zeroed: paused with the full allotment."""
        if member.id == self.member_id:
            self.state = PAUSED
            self.remaining = member.speak_limit

    def remove(self, member_id: str) -> None:
        """Evict from the queue; stop and clear if it is the active speaker."""
        self.dequeue(member_id)
        if member_id == self.member_id:
            self.clear()

    def clear(self) -> None:
        self.state = IDLE
        self.member_id = None
        self.remaining = 0
        self.pending_role = None
        self.pending_minutes = None

    # ── Queue ──

    def enqueue(self, member_id: str) -> None:
        if member_id not in self._queue:
            self._queue.append(member_id)

    def dequeue(self, member_id: str) -> None:
        if member_id in self._queue:
            self._queue.remove(member_id)

    def advance(self, copy: WorkingCopy) -> Optional[Member]:
        """Select the next queued member still on the roster; None when exhausted."""
        while self._queue:
            member = copy.find(self._queue.popleft())
            if member is not None:
                self.select(member)
                return member
        self.clear()
        return None

    def retain(self, copy: WorkingCopy) -> None:
        """Drop queued ids and the selection that no longer exist in ``copy``."""
        self._queue = deque(mid for mid in self._queue if copy.find(mid) is not None)
        if self.member_id is not None and copy.find(self.member_id) is None:
            self.clear()

    def snapshot(self, copy: WorkingCopy) -> dict[str, Any]:
        member = copy.find(self.member_id) if self.member_id else None
        return {
            "state": self.state,
            "memberId": self.member_id,
            "member": member.to_json() if member else None,
            "remaining": self.remaining,
            "pendingRole": self.pending_role,
            "pendingMinutes": self.pending_minutes,
            "queue": self.queue,
        }
