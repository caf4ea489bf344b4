# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request schemas for the /session routes.
Enum-like fields stay plain strings; the service layer validates them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimerStartRequest(BaseModel):
    minutes: Optional[int] = Field(default=None, ge=1, le=1440, description="Session length")


class SpeakerSelectRequest(BaseModel):
    id: str = Field(..., min_length=1, description="Member id")


class SpeakerConfigRequest(BaseModel):
    role: str
    minutes: int = Field(..., description="Speaking allotment; values below 1 count as 1")


class AttendanceRequest(BaseModel):
    attendance: str


class RoleRequest(BaseModel):
    role: str


class ReorderRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
