# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Record Store facade.
Picks the backend on EVERY call, then delegates load / replace to it.
NO business rules here — callers normalize before calling replace().
"""

import os
import time
from typing import Callable, Mapping, Optional

import httpx

from session_manager.core.config import settings
from session_manager.core.logging import get_logger
from session_manager.metrics.prometheus import STORE_LATENCY, STORE_READS, STORE_WRITES, STORE_WRITE_FAILURES
from session_manager.models.domain import Member
from session_manager.repositories.base import MemberBackend
from session_manager.repositories.file_store import FileBackend
from session_manager.repositories.kv_store import KeyValueBackend
from session_manager.repositories.relational_store import RelationalBackend
from session_manager.repositories.selector import KEY_VALUE, RELATIONAL, BackendChoice, select_backend

logger = get_logger(__name__)


class MemberStore:
    """Roster persistence with environment-driven backend selection."""

    def __init__(
        self,
        env: Callable[[], Mapping[str, str]] = lambda: os.environ,
        file_path: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._env = env
        self._file_path = file_path or settings.DATA_FILE_PATH
        self._transport = transport

    # ── Selection ──

    def choice(self) -> BackendChoice:
        return select_backend(self._env())

    def backend(self) -> MemberBackend:
        choice = self.choice()
        logger.debug("Backend selected: %s", choice.describe())
        if choice.kind == RELATIONAL:
            return RelationalBackend(
                choice.url,
                choice.token,
                table=settings.MEMBERS_TABLE,
                timeout=settings.BACKEND_TIMEOUT,
                transport=self._transport,
            )
        if choice.kind == KEY_VALUE:
            return KeyValueBackend(
                choice.url,
                choice.token,
                key=settings.KV_MEMBERS_KEY,
                timeout=settings.BACKEND_TIMEOUT,
                transport=self._transport,
            )
        return FileBackend(self._file_path)

    def describe(self) -> dict[str, Optional[str]]:
        return self.choice().describe()

    # ── Read ──

    def load(self) -> list[Member]:
        backend = self.backend()
        start = time.time()
        members = backend.load()
        STORE_LATENCY.labels(backend=backend.name, operation="load").observe(time.time() - start)
        STORE_READS.labels(backend=backend.name).inc()
        return members

    # ── Write ──

    def replace(self, members: list[Member], trigger: str = "immediate") -> None:
        backend = self.backend()
        start = time.time()
        try:
            backend.replace(members)
        except Exception:
            STORE_WRITE_FAILURES.labels(backend=backend.name, trigger=trigger).inc()
            raise
        STORE_LATENCY.labels(backend=backend.name, operation="replace").observe(time.time() - start)
        STORE_WRITES.labels(backend=backend.name, trigger=trigger).inc()
        logger.info(
            "Roster replaced: members=%d",
            len(members),
            extra={"backend": backend.name, "trigger": trigger},
        )
