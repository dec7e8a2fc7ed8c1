"""
Task Middlewares - Combinators for the Asynchronous Void Shape.

Reuses the async valued algebra with a None result. choose() takes a
context-only predicate, sync or awaitable.
"""

from __future__ import annotations

from typing import Callable, Iterable

from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.pipeline.async_middleware import (
    chain,
    combine,
    combine_simple,
    combine_with,
    combine_with_simple,
    compose,
    lift_simple,
    switch,
    switch_with_token,
)
from middleware_pipeline.pipeline.types import (
    MaybeAwaitable,
    TaskMiddleware,
    TaskMiddlewareFunc,
    TContext,
    resolve,
)

__all__ = [
    "chain",
    "choose",
    "combine",
    "combine_simple",
    "combine_with",
    "combine_with_simple",
    "compose",
    "lift_simple",
    "switch",
    "switch_with_token",
]


def choose(
    choices: Iterable[TaskMiddleware],
    was_chosen: Callable[[TContext], MaybeAwaitable[bool]],
    default: TaskMiddleware,
) -> TaskMiddleware:
    """Run candidates in order until ``was_chosen(context)`` holds."""

    async def chosen(
        context: TContext, call_next: TaskMiddlewareFunc, token: CancellationToken
    ) -> None:
        for middleware in choices:
            await middleware(context, call_next, token)
            if await resolve(was_chosen(context)):
                return

        await default(context, call_next, token)

    return chosen
