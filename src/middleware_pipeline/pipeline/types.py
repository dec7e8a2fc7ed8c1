"""
Pipeline Shapes - Callable Signatures for the Four Execution Shapes.

    sync valued:  func(context) -> R
                  middleware(context, call_next) -> R
    sync void:    same, returning None
    async valued: func(context, token) -> Awaitable[R]
                  simple func(context) -> Awaitable[R]
                  middleware(context, call_next, token) -> Awaitable[R]
    async void:   same, resolving to None ("task" shape)
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, TypeVar, Union

from middleware_pipeline.domain.cancellation import CancellationToken

TContext = TypeVar("TContext")
TResult = TypeVar("TResult")

# Sync valued
SyncMiddlewareFunc = Callable[[TContext], TResult]
SyncMiddleware = Callable[[TContext, SyncMiddlewareFunc], TResult]

# Sync void
VoidSyncMiddlewareFunc = Callable[[TContext], None]
VoidSyncMiddleware = Callable[[TContext, VoidSyncMiddlewareFunc], None]

# Async valued
AsyncMiddlewareFunc = Callable[[TContext, CancellationToken], Awaitable[TResult]]
SimpleAsyncMiddlewareFunc = Callable[[TContext], Awaitable[TResult]]
AsyncMiddleware = Callable[
    [TContext, AsyncMiddlewareFunc, CancellationToken], Awaitable[TResult]
]

# Async void
TaskMiddlewareFunc = Callable[[TContext, CancellationToken], Awaitable[None]]
SimpleTaskMiddlewareFunc = Callable[[TContext], Awaitable[None]]
TaskMiddleware = Callable[
    [TContext, TaskMiddlewareFunc, CancellationToken], Awaitable[None]
]

MaybeAwaitable = Union[TResult, Awaitable[TResult]]


async def resolve(value: MaybeAwaitable[Any]) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value
