# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: relational backend over a PostgREST-compatible REST API.
Replace is delete-all followed by one bulk insert.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from session_manager.core.errors import BackendRequestFailed, ConfigMissing
from session_manager.models.domain import Member
from session_manager.repositories.base import RestBackend, sort_by_queue_order


class RelationalBackend(RestBackend):
    name = "relational"

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "members",
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        missing = [label for label, value in (("url", url), ("key", key)) if not value]
        if missing:
            raise ConfigMissing(self.name, missing)
        super().__init__(timeout, transport)
        self._base = f"{url.rstrip('/')}/rest/v1/{table}"
        self._key = key

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
        }

    def load(self) -> list[Member]:
        resp = self._request(
            "GET", self._base, params={"select": "*", "order": "queue_order.asc"}
        )
        rows = resp.json() or []
        try:
            return sort_by_queue_order([Member.model_validate(r) for r in rows])
        except ValidationError as exc:
            raise BackendRequestFailed(self.name, resp.status_code, f"invalid member row: {exc}")

    def replace(self, members: list[Member]) -> None:
        self._request("DELETE", self._base, params={"id": "not.is.null"})
        if not members:
            return
        self._request(
            "POST",
            self._base,
            json=[m.to_row() for m in members],
            headers={"Prefer": "return=minimal"},
        )
