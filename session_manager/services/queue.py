# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Queue normalization — pure computation, no side effects.
The single path every roster passes through before it is written.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from session_manager.models.domain import Member


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize(members: Iterable[Member], now: Optional[str] = None) -> list[Member]:
    """
    Renumber queue_order to 1..N in the given order and stamp updated_at.
    created_at is kept when present, otherwise initialised to ``now``.
    """
    stamp = now or utc_now_iso()
    return [
        member.model_copy(
            update={
                "queue_order": index + 1,
                "updated_at": stamp,
                "created_at": member.created_at or stamp,
            }
        )
        for index, member in enumerate(members)
    ]


def reorder(members: list[Member], source_id: str, target_id: str) -> list[Member]:
    """
    Move ``source_id`` to the position currently held by ``target_id``.
    Unknown ids or source == target leave the order untouched.
    """
    ordered = list(members)
    if source_id == target_id:
        return ordered
    ids = [m.id for m in ordered]
    if source_id not in ids or target_id not in ids:
        return ordered
    target_index = ids.index(target_id)
    moved = ordered.pop(ids.index(source_id))
    ordered.insert(target_index, moved)
    return ordered
