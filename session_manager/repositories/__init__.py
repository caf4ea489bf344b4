# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports the store facade and its backends."""
from session_manager.repositories.file_store import FileBackend
from session_manager.repositories.kv_store import KeyValueBackend
from session_manager.repositories.member_store import MemberStore
from session_manager.repositories.relational_store import RelationalBackend

__all__ = ["FileBackend", "KeyValueBackend", "MemberStore", "RelationalBackend"]
