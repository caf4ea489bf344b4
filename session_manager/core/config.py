# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.

Backend credentials are NOT captured here: the store re-reads the live
environment on every access (see repositories/selector.py).
"""

import os

BUILTIN_ROSTER: tuple[str, ...] = (
    "Abdullah",
    "Aisha",
    "Bilal",
    "Fatima",
    "Hamza",
    "Khadija",
    "Maryam",
    "Omar",
    "Yusuf",
    "Zainab",
)


def _split_names(raw: str) -> list[str]:
    return [n.strip() for n in raw.split(",") if n.strip()]


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "session-manager")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8000"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ── Storage ──
    DATA_FILE_PATH: str = os.getenv(
        "DATA_FILE_PATH", os.path.join(os.getcwd(), ".data", "members.json")
    )
    KV_MEMBERS_KEY: str = os.getenv("KV_MEMBERS_KEY", "tafsir:members")
    MEMBERS_TABLE: str = os.getenv("MEMBERS_TABLE", "members")
    BACKEND_TIMEOUT: float = float(os.getenv("BACKEND_TIMEOUT", "5.0"))

    # ── Timers & sync ──
    SYNC_DEBOUNCE_SECONDS: float = float(os.getenv("SYNC_DEBOUNCE_SECONDS", "0.7"))
    TICK_INTERVAL_SECONDS: float = float(os.getenv("TICK_INTERVAL_SECONDS", "1.0"))
    AUTO_TICK: bool = os.getenv("AUTO_TICK", "true").lower() == "true"
    DEFAULT_SPEAK_LIMIT: int = int(os.getenv("DEFAULT_SPEAK_LIMIT", "120"))
    DEFAULT_SESSION_MINUTES: int = int(os.getenv("DEFAULT_SESSION_MINUTES", "45"))

    # ── Seeding ──
    SEED_ON_STARTUP: bool = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
    DEFAULT_ROSTER: list[str] = (
        _split_names(os.getenv("DEFAULT_ROSTER", "")) or list(BUILTIN_ROSTER)
    )


settings = Settings()
