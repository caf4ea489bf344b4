# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Session timer — one countdown for the whole meeting.
"""

from typing import Any

from session_manager.core.errors import ValidationFailed


class SessionTimer:
    def __init__(self) -> None:
        self.running: bool = False
        self.initial: int = 0
        self.remaining: int = 0

    def start(self, minutes: int) -> None:
        if minutes < 1:
            raise ValidationFailed("minutes must be at least 1")
        self.initial = minutes * 60
        self.remaining = self.initial
        self.running = True

    def pause(self) -> None:
        self.running = False

    def resume(self) -> None:
        if self.remaining > 0:
            self.running = True

    def reset(self) -> None:
        self.running = False
        self.remaining = 0
        self.initial = 0

    def tick(self) -> None:
        if not self.running:
            return
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.running = False

    @property
    def progress(self) -> float:
        if self.initial <= 0:
            return 0.0
        return min(1.0, max(0.0, (self.initial - self.remaining) / self.initial))

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": "running" if self.running else "stopped",
            "initial": self.initial,
            "remaining": self.remaining,
            "progress": self.progress,
        }
