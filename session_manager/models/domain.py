# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["participant", "presenter", "cohost", "host"]
Attendance = Literal["present", "absent", "unmarked"]

VALID_ROLES: tuple[str, ...] = ("participant", "presenter", "cohost", "host")
VALID_ATTENDANCE: tuple[str, ...] = ("present", "absent", "unmarked")

# Default speaking allotment per role, in seconds.
ROLE_LIMITS: dict[str, int] = {
    "participant": 120,
    "presenter": 180,
    "cohost": 300,
    "host": 600,
}


class Member(BaseModel):
    """A single roster entry.

    Attribute names are snake_case (and so are relational columns); the
    JSON form used on the wire, in the file and in the key-value blob is
    camelCase. Either spelling is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = "participant"
    attendance: Attendance = "unmarked"
    speak_limit: int = Field(default=ROLE_LIMITS["participant"], ge=1)
    elapsed_time: int = Field(default=0, ge=0)
    queue_order: int = Field(default=0, ge=0)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump()


@dataclass(frozen=True)
class WorkingCopy:
    """Immutable, versioned snapshot of the in-memory roster.

    Every mutation returns a new copy with ``version + 1``; the sync engine
    compares versions so an older snapshot never overwrites a newer write.
    """

    members: tuple[Member, ...] = field(default_factory=tuple)
    version: int = 0

    def find(self, member_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def with_members(self, members: Iterable[Member]) -> "WorkingCopy":
        return WorkingCopy(members=tuple(members), version=self.version + 1)

    def update_member(self, member_id: str, **changes: Any) -> "WorkingCopy":
        """Return a new copy with ``changes`` applied to one member."""
        return self.with_members(
            m.model_copy(update=changes) if m.id == member_id else m
            for m in self.members
        )
