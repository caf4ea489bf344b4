# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy shared by the store, the services and the HTTP layer.

Validation and lookup errors subclass ValueError / KeyError so callers that
only know the built-ins still catch them; controllers map them to 4xx.
Backend errors propagate to the app-level handlers and become 5xx.
"""

from typing import Optional


class SessionManagerError(Exception):
    """Base class for every error raised on purpose by this service."""


class ConfigMissing(SessionManagerError):
    """A remote backend was built without a complete credential pair."""

    def __init__(self, backend: str, missing: list[str]):
        self.backend = backend
        self.missing = missing
        super().__init__(f"{backend} config missing: {', '.join(missing)}")


class BackendRequestFailed(SessionManagerError):
    """Non-success response or transport error from a remote backend."""

    def __init__(self, backend: str, status: Optional[int], body: str):
        self.backend = backend
        self.status = status
        self.body = body
        label = status if status is not None else "transport error"
        super().__init__(f"{backend} request failed ({label}): {body}")


class ValidationFailed(SessionManagerError, ValueError):
    """Caller supplied an unusable value (empty name, bad payload, ...)."""


class MemberConflict(ValidationFailed):
    """A member with the same name (case-insensitive) already exists."""


class MemberNotFound(SessionManagerError, KeyError):
    """An action referenced a member id that is not in the roster."""

    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Member '{member_id}' not found")

    def __str__(self) -> str:
        return f"Member '{self.member_id}' not found"
