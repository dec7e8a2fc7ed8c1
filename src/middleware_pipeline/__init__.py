"""
Middleware Pipeline - Composable Chain-of-Responsibility Pipelines.

A family of combinators that build execution pipelines over an arbitrary
context value, with short-circuiting, dynamic routing and first-match
selection, in four execution shapes:

    - sync valued  (pipeline.sync_middleware)
    - sync void    (pipeline.void_middleware)
    - async valued (pipeline.async_middleware)
    - async void   (pipeline.task_middleware)

plus an invocation bridge that turns any call into a pipeline terminal.

Main Components:
    - domain: Outcome, CancellationToken, usage faults
    - pipeline: combine / compose / switch / choose per shape
    - invocation: InvocationContext and bridge terminals
    - interception: method interceptors, call logging and tracing
    - resilience: retry, circuit breaker, fallback, timeout middlewares
    - registry: named, config-driven middleware composition
    - observability: metrics collector and timing middlewares
    - config: Pydantic models and YAML loader

Example:
    >>> from middleware_pipeline.pipeline import sync_middleware as sm
    >>> def log(ctx, call_next):
    ...     ctx["trail"].append("log")
    ...     return call_next(ctx)
    >>> pipeline = sm.combine(lambda ctx: ctx["value"] * 2, sm.compose([log]))
    >>> pipeline({"value": 5, "trail": []})
    10
"""

import logging

from middleware_pipeline.domain import (
    CancellationToken,
    CancellationTokenSource,
    InvocationAlreadyInvokedError,
    InvocationWithoutResultError,
    OperationCancelledError,
    TargetInvocationError,
)
from middleware_pipeline.invocation import (
    InvocationContext,
    call_async_func,
    call_invoke,
    call_invoke_async,
    call_sync_func,
)
from middleware_pipeline.pipeline import (
    async_middleware,
    sync_middleware,
    task_middleware,
    void_middleware,
)

__version__ = "0.1.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for Middleware Pipeline.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import middleware_pipeline
        >>> middleware_pipeline.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("middleware_pipeline").setLevel(level)


__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "InvocationAlreadyInvokedError",
    "InvocationContext",
    "InvocationWithoutResultError",
    "OperationCancelledError",
    "TargetInvocationError",
    "async_middleware",
    "call_async_func",
    "call_invoke",
    "call_invoke_async",
    "call_sync_func",
    "configure_logging",
    "sync_middleware",
    "task_middleware",
    "void_middleware",
]
