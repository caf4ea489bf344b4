# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: backend strategy interface.
Every backend stores the WHOLE roster — there is no partial-field update API.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from session_manager.core.errors import BackendRequestFailed
from session_manager.models.domain import Member


def sort_by_queue_order(members: list[Member]) -> list[Member]:
    return sorted(members, key=lambda m: m.queue_order)


class MemberBackend(ABC):
    """Durable roster storage: full load, full replace."""

    name: str = "abstract"

    @abstractmethod
    def load(self) -> list[Member]:
        """Return every member ordered by queue_order ascending."""
        raise NotImplementedError

    @abstractmethod
    def replace(self, members: list[Member]) -> None:
        """Overwrite the stored roster with ``members``."""
        raise NotImplementedError


class RestBackend(MemberBackend):
    """Shared httpx plumbing for the REST-speaking backends."""

    def __init__(self, timeout: float, transport: Optional[httpx.BaseTransport] = None):
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {}

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send one request; any non-2xx or transport failure raises BackendRequestFailed."""
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                resp = client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise BackendRequestFailed(self.name, None, str(exc)) from exc
        if not resp.is_success:
            raise BackendRequestFailed(self.name, resp.status_code, resp.text[:500])
        return resp
