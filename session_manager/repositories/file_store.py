# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: local JSON file backend — always available, last in precedence.
"""

import json
import os

from pydantic import ValidationError

from session_manager.core.logging import get_logger
from session_manager.models.domain import Member
from session_manager.repositories.base import MemberBackend, sort_by_queue_order

logger = get_logger(__name__)


class FileBackend(MemberBackend):
    name = "file"

    def __init__(self, path: str):
        self._path = path

    def load(self) -> list[Member]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as exc:
            logger.warning("Unreadable roster file %s, treating as empty: %s", self._path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Roster file %s does not hold a list, treating as empty", self._path)
            return []
        try:
            return sort_by_queue_order([Member.model_validate(item) for item in data])
        except ValidationError as exc:
            logger.warning("Roster file %s holds an invalid member, treating as empty: %s", self._path, exc)
            return []

    def replace(self, members: list[Member]) -> None:
        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        temp_path = f"{self._path}.tmp"
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump([m.to_json() for m in members], f, indent=2)
        os.replace(temp_path, self._path)
