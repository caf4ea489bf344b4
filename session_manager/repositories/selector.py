# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Backend selection — pure computation over an environment snapshot.

Precedence: relational > key-value > local file. Only complete credential
pairs count; a half-configured pair is skipped and selection falls through.
Nothing is cached, so every store call sees the environment as it is now.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from session_manager.core.logging import get_logger

logger = get_logger(__name__)

RELATIONAL = "relational"
KEY_VALUE = "kv"
FILE = "file"

RELATIONAL_ENV_PAIRS: tuple[tuple[str, str], ...] = (
    ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"),
    ("SUPABASE_URL", "SUPABASE_ANON_KEY"),
    ("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"),
    ("NEXT_PUBLIC_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
)

KV_ENV_PAIRS: tuple[tuple[str, str], ...] = (
    ("KV_REST_API_URL", "KV_REST_API_TOKEN"),
    ("UPSTASH_REDIS_REST_URL", "UPSTASH_REDIS_REST_TOKEN"),
)

KV_URL_SUFFIXES: tuple[str, ...] = ("_REST_API_URL", "_REST_URL")


@dataclass(frozen=True)
class BackendChoice:
    kind: str
    url: str = ""
    token: str = ""
    url_var: Optional[str] = None
    token_var: Optional[str] = None

    def describe(self) -> dict[str, Optional[str]]:
        """Safe summary for logs and health output — never includes the token."""
        return {"backend": self.kind, "url_var": self.url_var, "token_var": self.token_var}


def _value(env: Mapping[str, str], name: str) -> str:
    return (env.get(name) or "").strip()


def _first_complete_pair(
    env: Mapping[str, str], pairs: tuple[tuple[str, str], ...]
) -> Optional[tuple[str, str]]:
    for url_var, token_var in pairs:
        url, token = _value(env, url_var), _value(env, token_var)
        if url and token:
            return url_var, token_var
        if url or token:
            logger.debug("Skipping incomplete credential pair %s/%s", url_var, token_var)
    return None


def _scan_kv_pairs(env: Mapping[str, str]) -> Optional[tuple[str, str]]:
    """Generic fallback: any *_REST_API_URL / *_REST_URL with a sibling *_TOKEN."""
    for url_var in sorted(env):
        if not url_var.endswith(KV_URL_SUFFIXES):
            continue
        token_var = url_var[: -len("URL")] + "TOKEN"
        if _value(env, url_var) and _value(env, token_var):
            return url_var, token_var
    return None


def select_backend(env: Mapping[str, str]) -> BackendChoice:
    """Deterministically choose the active backend for this call."""
    pair = _first_complete_pair(env, RELATIONAL_ENV_PAIRS)
    if pair:
        return BackendChoice(RELATIONAL, _value(env, pair[0]), _value(env, pair[1]), *pair)

    pair = _first_complete_pair(env, KV_ENV_PAIRS) or _scan_kv_pairs(env)
    if pair:
        return BackendChoice(KEY_VALUE, _value(env, pair[0]), _value(env, pair[1]), *pair)

    return BackendChoice(FILE)
