# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Sync engine — reconciles the in-memory working copy with the store.

Two paths into MemberStore.replace():
  * push()     — explicit user actions; written before the action returns,
                 errors propagate to the caller.
  * schedule() — ambient changes (timer ticks); coalesced behind a single
                 trailing-edge debounce, errors logged and dropped.

Writes are serialized; a snapshot older than the last one written is skipped.
A failed write marks the engine unpersisted until the next successful one.
"""

import threading
from typing import Optional

from session_manager.core.config import settings
from session_manager.core.logging import get_logger
from session_manager.metrics.prometheus import SYNC_COALESCED
from session_manager.models.domain import Member, WorkingCopy
from session_manager.repositories.member_store import MemberStore
from session_manager.services.queue import normalize
from session_manager.services.scheduler import Scheduler, TaskHandle

logger = get_logger(__name__)


class SyncEngine:
    def __init__(
        self,
        store: MemberStore,
        scheduler: Scheduler,
        delay: Optional[float] = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._delay = settings.SYNC_DEBOUNCE_SECONDS if delay is None else delay
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._pending: Optional[WorkingCopy] = None
        self._handle: Optional[TaskHandle] = None
        self._last_written_version = -1
        self._unpersisted = False

    @property
    def store(self) -> MemberStore:
        return self._store

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def unpersisted(self) -> bool:
        """True while the working copy holds changes whose last write failed."""
        return self._unpersisted

    @property
    def last_written_version(self) -> int:
        return self._last_written_version

    # ── Immediate path ──

    def push(self, copy: WorkingCopy) -> list[Member]:
        """Normalize and replace now. Supersedes any armed debounced flush."""
        with self._state_lock:
            self._cancel_armed()
            self._pending = None
        return self._write(copy, trigger="immediate")

    # ── Debounced path ──

    def schedule(self, copy: WorkingCopy) -> None:
        """Remember ``copy`` and (re)arm the trailing-edge flush."""
        with self._state_lock:
            if self._handle is not None:
                SYNC_COALESCED.inc()
            self._cancel_armed()
            self._pending = copy
            self._handle = self._scheduler.call_later(self._delay, self.flush)

    def flush(self) -> bool:
        """
        Write the pending snapshot, if any. Failures are logged, not raised.
        Returns False while the last attempted write is still unpersisted.
        """
        with self._state_lock:
            copy = self._pending
            self._pending = None
            self._cancel_armed()
        if copy is None:
            return not self._unpersisted
        try:
            self._write(copy, trigger="debounced")
        except Exception as exc:
            logger.error(
                "Debounced flush failed (version=%d), in-memory state kept: %s",
                copy.version,
                exc,
                exc_info=True,
            )
            return False
        return True

    def close(self) -> None:
        """Final flush, then nothing stays armed."""
        self.flush()
        with self._state_lock:
            self._cancel_armed()

    # ── Internal ──

    def _cancel_armed(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _write(self, copy: WorkingCopy, trigger: str) -> list[Member]:
        normalized = normalize(copy.members)
        with self._write_lock:
            if copy.version < self._last_written_version:
                logger.debug(
                    "Skipping stale %s write: version=%d < last written=%d",
                    trigger,
                    copy.version,
                    self._last_written_version,
                )
                return normalized
            try:
                self._store.replace(normalized, trigger=trigger)
            except Exception:
                self._unpersisted = True
                raise
            self._last_written_version = copy.version
            self._unpersisted = False
        return normalized
