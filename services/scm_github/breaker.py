"""Circuit breaker guarding calls to the provider API.

Counts consecutive failed calls. Once ``max_failures`` is reached the breaker
opens and rejects calls until ``reset_timeout`` seconds have passed, then lets
a single trial call through (half-open). The trial's outcome either closes the
breaker or re-opens it with a fresh cooldown.
"""

import threading
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from scm_github.errors import BreakerOpen
from scm_github.logging_config import get_logger

logger = get_logger(__name__)


class BreakerState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        max_failures: int = 5,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_failures = max(1, max_failures)
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._state = BreakerState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: float | None = None
        self._trial_started_at: float | None = None

    @property
    def state(self) -> BreakerState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state == BreakerState.CLOSED

    def acquire(self) -> None:
        """Admit a call or raise BreakerOpen.

        While open, the first call after the cooldown becomes the half-open
        trial; every other call is rejected until the trial settles. Rejections
        during a trial report the time left before the trial is given up.
        """
        with self._lock:
            if self._state == BreakerState.CLOSED:
                return

            now = self._clock()
            if self._state == BreakerState.HALF_OPEN:
                # A trial that never settled is abandoned after another cooldown
                since = self._trial_started_at
            else:
                since = self._opened_at
            since = now if since is None else since
            remaining = since + self.reset_timeout - now

            if remaining <= 0:
                if self._state == BreakerState.HALF_OPEN:
                    logger.warning("Circuit breaker trial call never settled, admitting another")
                else:
                    logger.info("Circuit breaker half-open, admitting trial call")
                self._state = BreakerState.HALF_OPEN
                self._trial_started_at = now
                return

            raise BreakerOpen(remaining)

    def release_trial(self) -> None:
        """Give up an in-flight trial without an outcome.

        The breaker goes back to open with its original cooldown, which has
        already elapsed, so the next call becomes the new trial.
        """
        with self._lock:
            if self._state != BreakerState.HALF_OPEN:
                return
            logger.info("Circuit breaker trial released without an outcome")
            self._state = BreakerState.OPEN
            self._trial_started_at = None

    def record_success(self) -> None:
        with self._lock:
            if self._state != BreakerState.CLOSED:
                logger.info("Circuit breaker closed", previous_state=self._state.value)
            self._state = BreakerState.CLOSED
            self._consecutive_failures = 0
            self._opened_at = None
            self._trial_started_at = None

    def record_failure(self) -> None:
        with self._lock:
            self._consecutive_failures += 1
            if (
                self._state == BreakerState.HALF_OPEN
                or self._consecutive_failures >= self.max_failures
            ):
                if self._state != BreakerState.OPEN:
                    logger.warning(
                        "Circuit breaker opened",
                        consecutive_failures=self._consecutive_failures,
                        reset_timeout=self.reset_timeout,
                    )
                self._state = BreakerState.OPEN
                self._opened_at = self._clock()
                self._trial_started_at = None

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "isClosed": self._state == BreakerState.CLOSED,
                "state": self._state.value,
                "consecutiveFailures": self._consecutive_failures,
                "openedAt": self._opened_at,
            }
