"""Time and cancellation primitives for the poll loops."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod


class CancellationToken:
    """Thread-safe cancel signal that also serves as an interruptible sleep."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block up to ``seconds``; return True if cancelled meanwhile."""
        return self._event.wait(seconds)


class Clock(ABC):
    @abstractmethod
    def now(self) -> float:
        """Monotonic seconds."""

    @abstractmethod
    def sleep(self, seconds: float, cancellation: CancellationToken | None = None) -> None:
        """Suspend the caller; return early when ``cancellation`` fires."""


class SystemClock(Clock):
    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancellation: CancellationToken | None = None) -> None:
        if seconds <= 0:
            return
        if cancellation is None:
            time.sleep(seconds)
            return
        cancellation.wait(seconds)


class ManualClock(Clock):
    """Clock that advances only when slept on. Records every requested sleep."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def sleep(self, seconds: float, cancellation: CancellationToken | None = None) -> None:
        self.sleeps.append(seconds)
        self._now += max(seconds, 0.0)


__all__ = ["CancellationToken", "Clock", "ManualClock", "SystemClock"]
