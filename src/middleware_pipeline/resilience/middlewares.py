"""
Resilience Middlewares - Retry, Circuit Breaker, Fallback and Timeout.

Fault tolerance is supplied by middlewares plugged into a pipeline, not
by the combinators. Each policy object exposes a sync and an async
middleware over any context:

    retry = RetryPolicy(RetryConfig(max_attempts=3))
    pipeline = sync_middleware.combine(fetch, retry.sync_middleware())

Design Notes:
    - Retry calls ``call_next`` up to max_attempts times with backoff
    - Circuit breaker fails fast while open
    - Fallback is the only place a fault is turned into a result
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Any, Callable, Optional, Tuple, Type

from middleware_pipeline.config.models import (
    CircuitBreakerConfig,
    RetryConfig,
    TimeoutConfig,
)
from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.domain.exceptions import OperationCancelledError
from middleware_pipeline.pipeline.types import (
    AsyncMiddleware,
    AsyncMiddlewareFunc,
    SyncMiddleware,
    SyncMiddlewareFunc,
    resolve,
)

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if recovered


class CircuitBreakerOpen(Exception):
    """Raised when circuit breaker is open."""
    pass


class RetryExhausted(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


class TimeoutExceeded(Exception):
    """Raised when the rest of the pipeline did not finish in time."""
    pass


# =============================================================================
# Retry
# =============================================================================


class RetryPolicy:
    """Retries ``call_next`` with exponential backoff."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        retryable_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
        operation_name: str = "operation",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize retry policy.

        Args:
            config: Attempts and backoff settings
            retryable_exceptions: Exceptions that trigger another attempt
            operation_name: Name for logging
            sleep: Blocking sleep used by the sync middleware
        """
        self.config = config or RetryConfig()
        self.retryable_exceptions = retryable_exceptions
        self.operation_name = operation_name
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay with exponential backoff."""
        delay = self.config.base_delay_seconds * (
            self.config.exponential_base ** (attempt - 1)
        )
        return min(delay, self.config.max_delay_seconds)

    def sync_middleware(self) -> SyncMiddleware:
        def retry(context: Any, call_next: SyncMiddlewareFunc) -> Any:
            last_exception: Optional[BaseException] = None
            for attempt in range(1, self.config.max_attempts + 1):
                try:
                    result = call_next(context)
                except OperationCancelledError:
                    raise
                except self.retryable_exceptions as e:
                    last_exception = e
                    delay = self._on_failure(attempt, e)
                    if delay is not None:
                        self._sleep(delay)
                else:
                    self._on_success(attempt)
                    return result
            raise self._exhausted() from last_exception

        return retry

    def async_middleware(self) -> AsyncMiddleware:
        async def retry(
            context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
        ) -> Any:
            last_exception: Optional[BaseException] = None
            for attempt in range(1, self.config.max_attempts + 1):
                try:
                    result = await call_next(context, token)
                except OperationCancelledError:
                    raise
                except self.retryable_exceptions as e:
                    last_exception = e
                    token.raise_if_cancellation_requested()
                    delay = self._on_failure(attempt, e)
                    if delay is not None:
                        await asyncio.sleep(delay)
                        token.raise_if_cancellation_requested()
                else:
                    self._on_success(attempt)
                    return result
            raise self._exhausted() from last_exception

        return retry

    def _on_failure(self, attempt: int, error: BaseException) -> Optional[float]:
        """Log a failed attempt; returns the delay before the next one."""
        if attempt >= self.config.max_attempts:
            logger.error(f"{self.operation_name} failed after {attempt} attempts: {error}")
            return None
        delay = self.calculate_delay(attempt)
        logger.warning(
            f"{self.operation_name} failed (attempt {attempt}/{self.config.max_attempts}), "
            f"retrying in {delay:.2f}s: {error}"
        )
        return delay

    def _on_success(self, attempt: int) -> None:
        if attempt > 1:
            logger.info(f"{self.operation_name} succeeded on attempt {attempt}")

    def _exhausted(self) -> RetryExhausted:
        return RetryExhausted(
            f"{self.operation_name} failed after {self.config.max_attempts} attempts"
        )


# =============================================================================
# Circuit breaker
# =============================================================================


@dataclass
class CircuitBreakerState:
    """Mutable state for circuit breaker."""
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    last_failure_time: Optional[datetime] = None


class CircuitBreaker:
    """
    Fails fast after repeated failures of the rest of the pipeline.

    CLOSED -> OPEN after ``failure_threshold`` consecutive failures;
    OPEN -> HALF_OPEN once ``recovery_timeout_seconds`` elapsed;
    HALF_OPEN -> CLOSED after ``success_threshold`` successes, or back
    to OPEN on the first failure.
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None) -> None:
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._state = CircuitBreakerState()
        self._lock = Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state.state

    def reset(self) -> None:
        """Reset to closed state."""
        with self._lock:
            self._state = CircuitBreakerState()
        logger.info(f"Circuit {self.name} reset to closed state")

    def sync_middleware(self) -> SyncMiddleware:
        def breaker(context: Any, call_next: SyncMiddlewareFunc) -> Any:
            self._before_call()
            try:
                result = call_next(context)
            except Exception:
                self._record_failure()
                raise
            self._record_success()
            return result

        return breaker

    def async_middleware(self) -> AsyncMiddleware:
        async def breaker(
            context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
        ) -> Any:
            self._before_call()
            try:
                result = await call_next(context, token)
            except Exception:
                self._record_failure()
                raise
            self._record_success()
            return result

        return breaker

    def _before_call(self) -> None:
        with self._lock:
            state = self._state
            if state.state != CircuitState.OPEN:
                return
            if not self._should_attempt_recovery(state):
                raise CircuitBreakerOpen(f"Circuit {self.name} is open, rejecting call")
            state.state = CircuitState.HALF_OPEN
        logger.info(f"Circuit {self.name} entering half-open state")

    def _should_attempt_recovery(self, state: CircuitBreakerState) -> bool:
        if state.last_failure_time is None:
            return True
        elapsed = datetime.now() - state.last_failure_time
        return elapsed.total_seconds() >= self.config.recovery_timeout_seconds

    def _record_success(self) -> None:
        with self._lock:
            state = self._state
            if state.state != CircuitState.HALF_OPEN:
                state.failure_count = 0
                return
            state.success_count += 1
            if state.success_count < self.config.success_threshold:
                return
            state.state = CircuitState.CLOSED
            state.failure_count = 0
            state.success_count = 0
        logger.info(f"Circuit {self.name} closed after recovery")

    def _record_failure(self) -> None:
        with self._lock:
            state = self._state
            state.failure_count += 1
            state.last_failure_time = datetime.now()
            state.success_count = 0

            if state.state == CircuitState.HALF_OPEN:
                state.state = CircuitState.OPEN
                logger.warning(f"Circuit {self.name} re-opened after failed recovery")
            elif (
                state.state == CircuitState.CLOSED
                and state.failure_count >= self.config.failure_threshold
            ):
                state.state = CircuitState.OPEN
                logger.warning(
                    f"Circuit {self.name} opened after {state.failure_count} failures"
                )


# =============================================================================
# Fallback and timeout
# =============================================================================


def fallback_middleware(
    fallback: Callable[[Any, BaseException], Any],
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
) -> SyncMiddleware:
    """
    Substitute ``fallback(context, error)`` when ``call_next`` raises.

    Only the listed exceptions are caught; others propagate.
    """

    def middleware(context: Any, call_next: SyncMiddlewareFunc) -> Any:
        try:
            return call_next(context)
        except exceptions as e:
            logger.warning(f"Falling back after {type(e).__name__}: {e}")
            return fallback(context, e)

    return middleware


def async_fallback_middleware(
    fallback: Callable[[Any, BaseException], Any],
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
) -> AsyncMiddleware:
    """Async fallback_middleware(); ``fallback`` may return an awaitable."""

    async def middleware(
        context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> Any:
        try:
            return await call_next(context, token)
        except exceptions as e:
            logger.warning(f"Falling back after {type(e).__name__}: {e}")
            return await resolve(fallback(context, e))

    return middleware


def timeout_middleware(seconds: float) -> AsyncMiddleware:
    """
    Bound the rest of the pipeline to ``seconds``.

    Raises:
        TimeoutExceeded: If ``call_next`` does not finish in time
    """
    if seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {seconds}")

    async def middleware(
        context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> Any:
        try:
            return await asyncio.wait_for(call_next(context, token), timeout=seconds)
        except asyncio.TimeoutError as e:
            raise TimeoutExceeded(f"Pipeline did not complete within {seconds}s") from e

    return middleware


def timeout_middleware_from_config(config: TimeoutConfig) -> AsyncMiddleware:
    """
    Build the timeout middleware described by ``config``.

    A disabled timeout yields a middleware that only calls ``call_next``,
    so the pipeline layout does not depend on the setting.
    """
    if config.enabled:
        return timeout_middleware(config.seconds)

    logger.debug("Timeout disabled, using pass-through middleware")

    async def passthrough(
        context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> Any:
        return await call_next(context, token)

    return passthrough
