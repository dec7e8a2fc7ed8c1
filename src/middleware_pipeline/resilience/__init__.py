"""
Resilience Package - Fault Tolerance as Middlewares.

    - RetryPolicy: retry with exponential backoff
    - CircuitBreaker: fail fast on persistent failures
    - fallback_middleware / async_fallback_middleware: substitute results
    - timeout_middleware: bound async pipelines in time

Design Principles:
    - Fail fast for permanent errors
    - Retry with backoff for transient errors
    - Circuit breaker for persistent failures
"""

from middleware_pipeline.resilience.middlewares import (
    CircuitBreaker,
    CircuitBreakerOpen,
    CircuitState,
    RetryExhausted,
    RetryPolicy,
    TimeoutExceeded,
    async_fallback_middleware,
    fallback_middleware,
    timeout_middleware,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerOpen",
    "CircuitState",
    "RetryExhausted",
    "RetryPolicy",
    "TimeoutExceeded",
    "async_fallback_middleware",
    "fallback_middleware",
    "timeout_middleware",
]
