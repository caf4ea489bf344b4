# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas for the /members routes.
Request bodies are validated by hand in the controller so shape errors
answer 400 rather than FastAPI's default 422.
"""

from typing import Any

from pydantic import BaseModel, ValidationError

from session_manager.core.errors import ValidationFailed
from session_manager.models.domain import Member


class MembersResponse(BaseModel):
    members: list[Member]


class MemberResponse(BaseModel):
    member: Member


class OkResponse(BaseModel):
    ok: bool = True


class SeedResponse(BaseModel):
    ok: bool = True
    seeded: bool
    count: int


def parse_name(body: Any) -> str:
    name = body.get("name") if isinstance(body, dict) else None
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailed("name is required")
    return name


def parse_members(body: Any) -> list[Member]:
    items = body.get("members") if isinstance(body, dict) else None
    if not isinstance(items, list):
        raise ValidationFailed("members array is required")
    try:
        return [Member.model_validate(item) for item in items]
    except ValidationError as exc:
        raise ValidationFailed(f"invalid member: {exc.errors()[0].get('msg')}") from exc


def parse_force(body: Any) -> bool:
    return isinstance(body, dict) and body.get("force") is True
