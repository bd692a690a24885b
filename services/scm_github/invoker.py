"""Resilient invocation of provider API calls.

Every outbound call made by the adapter goes through a single
ResilientInvoker so that statistics and breaker state are shared by all
operations. Each call:

1. is rejected immediately with BreakerOpen while the breaker is open,
2. authenticates the provider with the caller's token before each attempt,
3. runs each attempt under a timeout,
4. retries transient failures with exponential backoff,
5. records exactly one outcome (success, failure or timeout) in the stats.

The last error is re-raised unchanged once retries are exhausted.
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from scm_github.breaker import CircuitBreaker
from scm_github.config import BreakerConfig, RetryConfig
from scm_github.errors import ProviderError, ProviderTimeout, ScmError
from scm_github.logging_config import get_logger
from scm_github.provider import GitHubProvider

logger = get_logger(__name__)


class Outcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


class InvocationStats:
    """Cumulative request counters, safe to update from concurrent calls."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total = 0
        self.timeouts = 0
        self.success = 0
        self.failure = 0
        self.concurrent = 0
        self._elapsed_ms = 0.0

    def started(self) -> None:
        with self._lock:
            self.total += 1
            self.concurrent += 1

    def finished(self, outcome: Outcome, elapsed_ms: float) -> None:
        with self._lock:
            self.concurrent -= 1
            self._elapsed_ms += elapsed_ms
            match outcome:
                case Outcome.SUCCESS:
                    self.success += 1
                case Outcome.TIMEOUT:
                    self.timeouts += 1
                case Outcome.FAILURE:
                    self.failure += 1

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            completed = self.success + self.failure + self.timeouts
            return {
                "total": self.total,
                "timeouts": self.timeouts,
                "success": self.success,
                "failure": self.failure,
                "concurrent": self.concurrent,
                "averageTime": round(self._elapsed_ms / completed, 3) if completed else 0,
            }


def backoff_delay(attempt: int, retry: RetryConfig) -> float:
    """Seconds to wait before retry number ``attempt`` (1-based)."""
    return min(retry.min_timeout * retry.factor ** (attempt - 1), retry.max_timeout)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ProviderError):
        return exc.retryable
    if isinstance(exc, ScmError):
        return False
    # Errors the provider did not classify are assumed to be network trouble
    return True


class ResilientInvoker:
    def __init__(
        self,
        provider: GitHubProvider,
        retry: RetryConfig | None = None,
        breaker: BreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.retry = retry or RetryConfig()
        self.breaker_config = breaker or BreakerConfig()
        self.breaker = CircuitBreaker(
            max_failures=self.breaker_config.max_failures,
            reset_timeout=self.breaker_config.reset_timeout,
            clock=clock,
        )
        self._stats = InvocationStats()
        self._clock = clock
        self._sleep = sleep

    async def invoke(self, operation: str, token: str, **params: Any) -> Any:
        """Call ``provider.<operation>(**params)`` with auth, retries and the breaker."""
        self._stats.started()
        started_at = self._clock()
        outcome = Outcome.FAILURE
        try:
            self.breaker.acquire()
            try:
                result = await self._call_with_retry(operation, token, params)
            except ProviderTimeout:
                outcome = Outcome.TIMEOUT
                self.breaker.record_failure()
                raise
            except Exception as exc:
                if is_transient(exc):
                    self.breaker.record_failure()
                else:
                    # The provider answered (4xx), so it is reachable
                    self.breaker.record_success()
                raise
            except BaseException:
                # Cancelled mid-call; the outcome is unknown
                self.breaker.release_trial()
                raise
            outcome = Outcome.SUCCESS
            self.breaker.record_success()
            return result
        finally:
            elapsed_ms = (self._clock() - started_at) * 1000
            self._stats.finished(outcome, elapsed_ms)

    async def _call_with_retry(self, operation: str, token: str, params: dict[str, Any]) -> Any:
        timeout = self.breaker_config.timeout
        attempt = 0

        while True:
            attempt += 1
            self.provider.authenticate({"type": "oauth", "token": token})
            method = getattr(self.provider, operation)

            try:
                async with asyncio.timeout(timeout):
                    return await method(**params)
            except TimeoutError:
                error: Exception = ProviderTimeout(f"{operation} timed out after {timeout}s")
            except Exception as exc:
                error = exc

            if attempt > self.retry.retries or not is_transient(error):
                logger.warning(
                    "Provider call failed",
                    operation=operation,
                    attempts=attempt,
                    error=str(error),
                )
                raise error

            delay = backoff_delay(attempt, self.retry)
            logger.debug(
                "Retrying provider call",
                operation=operation,
                attempt=attempt,
                delay=delay,
                error=str(error),
            )
            await self._sleep(delay)

    def stats(self) -> dict[str, Any]:
        return {
            "requests": self._stats.snapshot(),
            "breaker": self.breaker.snapshot(),
        }
