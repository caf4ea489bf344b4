# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Meeting session — owner of the working copy and both timers.

Explicit actions mutate the working copy optimistically, then write it
through SyncEngine.push() before returning. Timer ticks only touch the
working copy and leave the write to the debounced path.

One re-entrant lock serializes every action and tick, so the working copy
is never mutated by two callers at once (ticker thread vs. request threads).
"""

import threading
import uuid
from typing import Any, Optional

from session_manager.core.config import settings
from session_manager.core.errors import MemberConflict, MemberNotFound, ValidationFailed
from session_manager.core.logging import get_logger
from session_manager.metrics.prometheus import ROSTER_MEMBERS, SPEAKER_TICKS
from session_manager.models.domain import (
    ROLE_LIMITS,
    VALID_ATTENDANCE,
    VALID_ROLES,
    Member,
    WorkingCopy,
)
from session_manager.services.queue import reorder
from session_manager.services.scheduler import Scheduler, TaskHandle
from session_manager.services.seeder import RosterSeeder, SeedResult
from session_manager.services.session_timer import SessionTimer
from session_manager.services.speaker_timer import SpeakerTimer
from session_manager.services.sync_engine import SyncEngine

logger = get_logger(__name__)

# Placeholder value for "no selection"; never a real member name.
RESERVED_NAMES: frozenset[str] = frozenset({"none"})


class MeetingSession:
    """Business logic for one running session: roster, speaker, countdown."""

    def __init__(
        self,
        sync_engine: SyncEngine,
        scheduler: Scheduler,
        seeder: Optional[RosterSeeder] = None,
        tick_interval: Optional[float] = None,
    ) -> None:
        self._sync = sync_engine
        self._store = sync_engine.store
        self._scheduler = scheduler
        self._seeder = seeder or RosterSeeder(self._store)
        self._tick_interval = tick_interval or settings.TICK_INTERVAL_SECONDS
        self._lock = threading.RLock()
        self._copy = WorkingCopy()
        self._loaded = False
        self._ticker: Optional[TaskHandle] = None
        self._role_limits: dict[str, int] = {
            **ROLE_LIMITS,
            "participant": settings.DEFAULT_SPEAK_LIMIT,
        }
        self.speaker = SpeakerTimer()
        self.session_timer = SessionTimer()

    # ── Queries ──

    @property
    def members(self) -> list[Member]:
        return list(self._copy.members)

    @property
    def working_copy(self) -> WorkingCopy:
        return self._copy

    @property
    def ticking(self) -> bool:
        return self._ticker is not None

    @property
    def role_limits(self) -> dict[str, int]:
        return dict(self._role_limits)

    def get_member(self, member_id: str) -> Member:
        member = self._copy.find(member_id)
        if member is None:
            raise MemberNotFound(member_id)
        return member

    def stats(self) -> dict[str, int]:
        members = self._copy.members
        return {
            "total": len(members),
            "present": sum(1 for m in members if m.attendance == "present"),
            "absent": sum(1 for m in members if m.attendance == "absent"),
        }

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "version": self._copy.version,
                "session": self.session_timer.snapshot(),
                "speaker": self.speaker.snapshot(self._copy),
                "stats": self.stats(),
                "roleLimits": self.role_limits,
                "pendingSync": self._sync.has_pending,
            }

    # ── Load / reconcile ──

    def load(self) -> list[Member]:
        """Replace the working copy with the store's roster (store is the source of truth)."""
        with self._lock:
            self._set_copy(self._copy.with_members(self._store.load()))
            self._loaded = True
            self.speaker.retain(self._copy)
            return self.members

    def reload(self) -> list[Member]:
        """
        Flush pending ambient changes, then reload from the store.
        While a failed write is unpersisted the working copy is newer than the
        store, so it is returned as is.
        """
        with self._lock:
            if not self._sync.flush() and self._loaded:
                logger.warning("Store behind working copy, serving in-memory roster")
                return self.members
            return self.load()

    def seed(self, force: bool = False) -> SeedResult:
        with self._lock:
            if not self._sync.flush() and self._loaded and not force:
                return SeedResult(seeded=False, members=self.members)
            result = self._seeder.seed(force)
            self._set_copy(self._copy.with_members(result.members))
            self._loaded = True
            self.speaker.retain(self._copy)
            return result

    # ── Roster actions (immediate write) ──

    def add_member(self, name: Optional[str]) -> Member:
        safe_name = (name or "").strip()
        if not safe_name:
            raise ValidationFailed("name is required")
        if safe_name.casefold() in RESERVED_NAMES:
            raise ValidationFailed(f"'{safe_name}' is not a valid member name")
        with self._lock:
            self._ensure_loaded()
            key = safe_name.casefold()
            if any(m.name.casefold() == key for m in self._copy.members):
                raise MemberConflict(f"A member named '{safe_name}' already exists")
            member = Member(
                id=str(uuid.uuid4()),
                name=safe_name,
                speak_limit=self._role_limits["participant"],
            )
            self._commit(self._copy.with_members([*self._copy.members, member]))
            logger.info("Member added: %s", safe_name, extra={"member_id": member.id})
            return self.get_member(member.id)

    def remove_member(self, member_id: str) -> bool:
        """Remove a member; an unknown id is a no-op (returns False, no write)."""
        with self._lock:
            self._ensure_loaded()
            if self._copy.find(member_id) is None:
                return False
            self.speaker.remove(member_id)
            self._commit(
                self._copy.with_members(m for m in self._copy.members if m.id != member_id)
            )
            logger.info("Member removed", extra={"member_id": member_id})
            return True

    def replace_members(self, members: list[Member]) -> list[Member]:
        with self._lock:
            self._commit(self._copy.with_members(members))
            self._loaded = True
            self.speaker.retain(self._copy)
            return self.members

    def reorder(self, source_id: str, target_id: str) -> list[Member]:
        with self._lock:
            self._ensure_loaded()
            current = self.members
            ordered = reorder(current, source_id, target_id)
            if [m.id for m in ordered] == [m.id for m in current]:
                return current
            return self._commit(self._copy.with_members(ordered))

    def set_attendance(self, member_id: str, attendance: str) -> Member:
        if attendance not in VALID_ATTENDANCE:
            raise ValidationFailed(f"attendance must be one of {VALID_ATTENDANCE}")
        with self._lock:
            self._ensure_loaded()
            self.get_member(member_id)
            self._commit(self._copy.update_member(member_id, attendance=attendance))
            return self.get_member(member_id)

    def set_role(self, member_id: str, role: str) -> Member:
        """Assign a role and that role's current default allotment."""
        self._check_role(role)
        with self._lock:
            self._ensure_loaded()
            self.get_member(member_id)
            self._commit(
                self._copy.update_member(
                    member_id, role=role, speak_limit=self._role_limits[role]
                )
            )
            member = self.get_member(member_id)
            self.speaker.refresh(member)
            return member

    # ── Speaker actions ──

    def select_speaker(self, member_id: str) -> dict[str, Any]:
        with self._lock:
            self._ensure_loaded()
            self.speaker.select(self.get_member(member_id))
            return self.speaker.snapshot(self._copy)

    def start_speaker(self) -> dict[str, Any]:
        with self._lock:
            self.speaker.start()
            return self.speaker.snapshot(self._copy)

    def pause_speaker(self) -> dict[str, Any]:
        with self._lock:
            self.speaker.pause()
            return self.speaker.snapshot(self._copy)

    def reset_speaker(self) -> dict[str, Any]:
        """Zero the selected member's elapsed time (immediate write)."""
        with self._lock:
            self._ensure_loaded()
            if self.speaker.member_id is None:
                raise ValidationFailed("no speaker selected")
            member_id = self.speaker.member_id
            self.get_member(member_id)
            self._commit(self._copy.update_member(member_id, elapsed_time=0))
            self.speaker.reset(self.get_member(member_id))
            return self.speaker.snapshot(self._copy)

    def apply_speaker_config(self, role: str, minutes: int) -> dict[str, Any]:
        """
        With a selected speaker: set that member's role and limit.
        Without one: set the default limit of ``role`` and apply it to every
        member currently holding that role.
        """
        self._check_role(role)
        limit = max(1, minutes) * 60
        with self._lock:
            self._ensure_loaded()
            member_id = self.speaker.member_id
            if member_id is not None:
                self.get_member(member_id)
                self._commit(self._copy.update_member(member_id, role=role, speak_limit=limit))
                self.speaker.refresh(self.get_member(member_id))
                self.speaker.pending_role = role
                self.speaker.pending_minutes = max(1, minutes)
            else:
                self._role_limits[role] = limit
                self._commit(
                    self._copy.with_members(
                        m.model_copy(update={"speak_limit": limit}) if m.role == role else m
                        for m in self._copy.members
                    )
                )
                logger.info("Default limit for role=%s set to %ds", role, limit)
            return self.speaker.snapshot(self._copy)

    def enqueue_speaker(self, member_id: str) -> list[str]:
        with self._lock:
            self._ensure_loaded()
            self.get_member(member_id)
            self.speaker.enqueue(member_id)
            return self.speaker.queue

    def dequeue_speaker(self, member_id: str) -> list[str]:
        with self._lock:
            self.speaker.dequeue(member_id)
            return self.speaker.queue

    def advance_speaker(self) -> dict[str, Any]:
        with self._lock:
            self.speaker.advance(self._copy)
            return self.speaker.snapshot(self._copy)

    # ── Session timer ──

    def start_session(self, minutes: Optional[int] = None) -> dict[str, Any]:
        with self._lock:
            self.session_timer.start(settings.DEFAULT_SESSION_MINUTES if minutes is None else minutes)
            return self.session_timer.snapshot()

    def pause_session(self) -> dict[str, Any]:
        with self._lock:
            self.session_timer.pause()
            return self.session_timer.snapshot()

    def resume_session(self) -> dict[str, Any]:
        with self._lock:
            self.session_timer.resume()
            return self.session_timer.snapshot()

    def reset_session(self) -> dict[str, Any]:
        with self._lock:
            self.session_timer.reset()
            return self.session_timer.snapshot()

    # ── Ticking ──

    def tick(self) -> None:
        """One second: both timers advance independently; speaker time is synced lazily."""
        with self._lock:
            self.session_timer.tick()
            if not self.speaker.running:
                return
            updated = self.speaker.tick(self._copy)
            if updated is self._copy:
                return
            self._set_copy(updated)
            SPEAKER_TICKS.inc()
            self._sync.schedule(updated)

    def start_ticking(self) -> None:
        with self._lock:
            if self._ticker is None:
                self._ticker = self._scheduler.call_every(self._tick_interval, self.tick)
                logger.info("Session ticker started: interval=%.2fs", self._tick_interval)

    def stop_ticking(self) -> None:
        with self._lock:
            if self._ticker is not None:
                self._ticker.cancel()
                self._ticker = None
                logger.info("Session ticker stopped")

    def close(self) -> None:
        """Stop ticking and write whatever is still pending."""
        self.stop_ticking()
        with self._lock:
            self._sync.close()

    # ── Internal ──

    @staticmethod
    def _check_role(role: str) -> None:
        if role not in VALID_ROLES:
            raise ValidationFailed(f"role must be one of {VALID_ROLES}")

    def _ensure_loaded(self) -> None:
        """Roster writes are full overwrites, so never build one from an unloaded copy."""
        if not self._loaded:
            self.load()

    def _set_copy(self, copy: WorkingCopy) -> None:
        self._copy = copy
        ROSTER_MEMBERS.set(len(copy.members))

    def _commit(self, copy: WorkingCopy) -> list[Member]:
        """Adopt ``copy`` optimistically, write it now, keep the normalized result."""
        self._set_copy(copy)
        normalized = self._sync.push(copy)
        self._set_copy(WorkingCopy(members=tuple(normalized), version=copy.version))
        return normalized
