"""Bounded retry for idempotent media service calls."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TypeVar

from encoding_orchestrator.core.clock import Clock
from encoding_orchestrator.errors import TransientServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retries ``TransientServiceError`` with exponential backoff.

    Only lookups and create-or-update calls go through this; non-idempotent
    submissions are invoked directly.
    """

    def __init__(self, clock: Clock, *, attempts: int = 3, backoff_seconds: float = 2.0) -> None:
        self._clock = clock
        self._attempts = max(attempts, 1)
        self._backoff_seconds = backoff_seconds

    def call(self, operation: str, func: Callable[[], T]) -> T:
        attempt = 1
        while True:
            try:
                return func()
            except TransientServiceError as exc:
                if attempt >= self._attempts:
                    logger.warning(
                        "retry.exhausted operation=%s attempts=%s code=%s",
                        operation,
                        attempt,
                        exc.payload.code,
                    )
                    raise
                delay = self._backoff_seconds * (2 ** (attempt - 1))
                logger.info(
                    "retry.scheduled operation=%s attempt=%s delay_seconds=%s",
                    operation,
                    attempt,
                    delay,
                )
                self._clock.sleep(delay)
                attempt += 1


__all__ = ["RetryPolicy"]
