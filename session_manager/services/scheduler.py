# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Scheduling primitives for ticks and debounced flushes.

ThreadScheduler drives tasks off the wall clock; ManualScheduler is a
simulated clock advanced explicitly (tests, or hosts that tick themselves).
Task exceptions are logged, never propagated into the scheduling loop.
"""

import threading
from typing import Callable, Optional

from session_manager.core.logging import get_logger

logger = get_logger(__name__)

Task = Callable[[], None]


def _run_safely(fn: Task) -> None:
    try:
        fn()
    except Exception as exc:
        logger.exception("Scheduled task failed: %s", exc)


class TaskHandle:
    """Cancellable reference to a scheduled task."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None) -> None:
        self._on_cancel = on_cancel
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._on_cancel:
            self._on_cancel()


class Scheduler:
    def call_later(self, delay: float, fn: Task) -> TaskHandle:
        raise NotImplementedError

    def call_every(self, interval: float, fn: Task) -> TaskHandle:
        raise NotImplementedError


class ThreadScheduler(Scheduler):
    """Real-time scheduler: threading.Timer one-shots, daemon loop for repeats."""

    def call_later(self, delay: float, fn: Task) -> TaskHandle:
        timer = threading.Timer(delay, _run_safely, args=(fn,))
        timer.daemon = True
        handle = TaskHandle(timer.cancel)
        timer.start()
        return handle

    def call_every(self, interval: float, fn: Task) -> TaskHandle:
        stop_event = threading.Event()

        def _loop() -> None:
            while not stop_event.wait(interval):
                _run_safely(fn)

        thread = threading.Thread(target=_loop, name="SessionTicker", daemon=True)
        handle = TaskHandle(stop_event.set)
        thread.start()
        return handle


class ManualScheduler(Scheduler):
    """Simulated clock; nothing runs until advance() is called."""

    _EPSILON = 1e-9

    def __init__(self) -> None:
        self.now: float = 0.0
        self._seq = 0
        # [due, seq, fn, interval, handle]
        self._tasks: list[list] = []

    def _add(self, due: float, fn: Task, interval: Optional[float]) -> TaskHandle:
        handle = TaskHandle()
        self._seq += 1
        self._tasks.append([due, self._seq, fn, interval, handle])
        return handle

    def call_later(self, delay: float, fn: Task) -> TaskHandle:
        return self._add(self.now + delay, fn, None)

    def call_every(self, interval: float, fn: Task) -> TaskHandle:
        return self._add(self.now + interval, fn, interval)

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t[4].cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every task that falls due, in order."""
        target = self.now + seconds
        while True:
            self._tasks = [t for t in self._tasks if not t[4].cancelled]
            due = [t for t in self._tasks if t[0] <= target + self._EPSILON]
            if not due:
                break
            task = min(due, key=lambda t: (t[0], t[1]))
            self.now = max(self.now, task[0])
            if task[3] is None:
                self._tasks.remove(task)
            else:
                task[0] += task[3]
            _run_safely(task[2])
        self.now = target
