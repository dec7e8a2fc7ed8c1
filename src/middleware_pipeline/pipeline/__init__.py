"""
Pipeline Package - Middleware Composition Algebra.

One module per execution shape, each exposing the same operations
(combine, combine_with, compose, chain, switch, choose):

    - sync_middleware: synchronous, value returning
    - void_middleware: synchronous, no result
    - async_middleware: asynchronous with cancellation, value returning
    - task_middleware: asynchronous with cancellation, no result

Import the shape module you need:

    from middleware_pipeline.pipeline import sync_middleware as sm
    pipeline = sm.combine(terminal, sm.compose([log, auth]))
"""

from middleware_pipeline.pipeline import (
    async_middleware,
    sync_middleware,
    task_middleware,
    void_middleware,
)

__all__ = [
    "async_middleware",
    "sync_middleware",
    "task_middleware",
    "void_middleware",
]
