# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: key-value backend (Upstash / Vercel KV REST API).
The whole roster lives in ONE JSON blob under a fixed key.
"""

import json
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from session_manager.core.errors import BackendRequestFailed, ConfigMissing
from session_manager.models.domain import Member
from session_manager.repositories.base import RestBackend, sort_by_queue_order


class KeyValueBackend(RestBackend):
    name = "kv"

    def __init__(
        self,
        url: str,
        token: str,
        key: str = "tafsir:members",
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        missing = [label for label, value in (("url", url), ("token", token)) if not value]
        if missing:
            raise ConfigMissing(self.name, missing)
        super().__init__(timeout, transport)
        self._url = url.rstrip("/")
        self._token = token
        self._key = quote(key, safe="")

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def load(self) -> list[Member]:
        resp = self._request("GET", f"{self._url}/get/{self._key}")
        result = resp.json().get("result")
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except json.JSONDecodeError as exc:
                raise BackendRequestFailed(self.name, resp.status_code, f"stored value is not JSON: {exc}")
        if not result:
            return []
        if not isinstance(result, list):
            raise BackendRequestFailed(
                self.name, resp.status_code, f"stored value is a {type(result).__name__}, not a list"
            )
        try:
            return sort_by_queue_order([Member.model_validate(r) for r in result])
        except ValidationError as exc:
            raise BackendRequestFailed(self.name, resp.status_code, f"invalid stored member: {exc}")

    def replace(self, members: list[Member]) -> None:
        payload = json.dumps([m.to_json() for m in members])
        self._request("POST", f"{self._url}/set/{self._key}", content=payload)
