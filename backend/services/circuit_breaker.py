"""Consecutive-failure circuit breaker for a degradable dependency."""

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Opens after `threshold` consecutive failures; closes again after `reset_seconds`.

    While open, callers should skip the dependency and use their fallback.
    A single success resets the failure count.
    """

    def __init__(
        self,
        name: str,
        threshold: int = 3,
        reset_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.threshold = threshold
        self.reset_seconds = reset_seconds
        self._clock = clock
        self._failures = 0
        self._opened_at: float | None = None
        self._lock = threading.Lock()

    @property
    def failures(self) -> int:
        return self._failures

    def is_closed(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return True
            if self._clock() - self._opened_at > self.reset_seconds:
                logger.info("Circuit %s reset after %.0fs", self.name, self.reset_seconds)
                self._opened_at = None
                self._failures = 0
                return True
            return False

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._opened_at = None

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            if self._failures >= self.threshold and self._opened_at is None:
                self._opened_at = self._clock()
                logger.warning(
                    "Circuit %s opened after %d consecutive failures", self.name, self._failures
                )
