# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Roster seeding — fills an empty store with the default membership.
Forced seeding always overwrites; it never merges.
"""

import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from session_manager.core.config import settings
from session_manager.core.logging import get_logger
from session_manager.metrics.prometheus import SEED_RUNS
from session_manager.models.domain import Member
from session_manager.repositories.member_store import MemberStore
from session_manager.services.queue import normalize

logger = get_logger(__name__)


@dataclass(frozen=True)
class SeedResult:
    seeded: bool
    members: list[Member]


def dedupe_names(names: Iterable[str]) -> list[str]:
    """Trim, drop blanks, and keep the first spelling of each name (case-insensitive)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in names:
        name = raw.strip()
        key = name.casefold()
        if not name or key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


def build_default_roster(names: Iterable[str], speak_limit: int) -> list[Member]:
    return normalize(
        Member(
            id=str(uuid.uuid4()),
            name=name,
            role="participant",
            attendance="unmarked",
            speak_limit=speak_limit,
            elapsed_time=0,
        )
        for name in dedupe_names(names)
    )


class RosterSeeder:
    """Populate the store with the canonical roster."""

    def __init__(
        self,
        store: MemberStore,
        names: Optional[list[str]] = None,
        speak_limit: Optional[int] = None,
    ) -> None:
        self._store = store
        self._names = names if names is not None else settings.DEFAULT_ROSTER
        self._speak_limit = speak_limit or settings.DEFAULT_SPEAK_LIMIT

    def seed(self, force: bool = False) -> SeedResult:
        if not force:
            existing = self._store.load()
            if existing:
                SEED_RUNS.labels(seeded="false").inc()
                logger.info("Seed skipped: store already holds %d members", len(existing))
                return SeedResult(seeded=False, members=existing)

        roster = build_default_roster(self._names, self._speak_limit)
        self._store.replace(roster)
        SEED_RUNS.labels(seeded="true").inc()
        logger.info("Seeded %d default members (force=%s)", len(roster), force)
        return SeedResult(seeded=True, members=roster)
