"""
Async Middlewares - Combinators for the Asynchronous Valued Shape.

Same algebra as the synchronous shape, with coroutines and an explicit
CancellationToken threaded through every call:

    async def middleware(ctx, call_next, token):
        return await call_next(ctx, token)

The combinators pass the token through untouched and never poll it.
Selectors and predicates may be plain functions or return awaitables.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.pipeline.types import (
    AsyncMiddleware,
    AsyncMiddlewareFunc,
    MaybeAwaitable,
    SimpleAsyncMiddlewareFunc,
    TContext,
    TResult,
    resolve,
)

_EXHAUSTED = object()


# Constants


def constant_func(result: TResult) -> AsyncMiddlewareFunc:
    """Terminal that resolves to ``result``."""

    async def func(_context: Any, _token: CancellationToken) -> TResult:
        return result

    return func


def constant(result: TResult) -> AsyncMiddleware:
    """Middleware that short-circuits with ``result``."""

    async def middleware(
        _context: Any, _call_next: AsyncMiddlewareFunc, _token: CancellationToken
    ) -> TResult:
        return result

    return middleware


# Combine a func with a middleware


def lift_simple(func: SimpleAsyncMiddlewareFunc) -> AsyncMiddlewareFunc:
    """Adapt a terminal without a token parameter by ignoring the token."""

    def lifted(context: TContext, _token: CancellationToken):
        return func(context)

    return lifted


def combine(func: AsyncMiddlewareFunc, middleware: AsyncMiddleware) -> AsyncMiddlewareFunc:
    """Bind ``func`` as the ``call_next`` of ``middleware``."""

    def combined(context: TContext, token: CancellationToken):
        return middleware(context, func, token)

    return combined


def combine_with(middleware: AsyncMiddleware, func: AsyncMiddlewareFunc) -> AsyncMiddlewareFunc:
    """Same as combine(), with the middleware given first."""
    return combine(func, middleware)


def combine_simple(
    func: SimpleAsyncMiddlewareFunc, middleware: AsyncMiddleware
) -> AsyncMiddlewareFunc:
    """combine() for a terminal that takes only the context."""
    return combine(lift_simple(func), middleware)


def combine_with_simple(
    middleware: AsyncMiddleware, func: SimpleAsyncMiddlewareFunc
) -> AsyncMiddlewareFunc:
    """Same as combine_simple(), with the middleware given first."""
    return combine(lift_simple(func), middleware)


# Compose multiple middlewares into one


def compose(middlewares: Iterable[AsyncMiddleware]) -> AsyncMiddleware:
    """
    Fold an ordered sequence of async middlewares into one.

    Each invocation iterates ``middlewares`` afresh; the first is
    outermost and the outer ``call_next`` runs after the last.
    """

    async def composed(
        context: TContext, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> TResult:
        cursor = iter(middlewares)

        async def advance(ctx: TContext, ct: CancellationToken) -> TResult:
            current = next(cursor, _EXHAUSTED)
            if current is _EXHAUSTED:
                return await call_next(ctx, ct)
            return await current(ctx, advance, ct)

        return await advance(context, token)

    return composed


def chain(middleware: AsyncMiddleware, *middlewares: AsyncMiddleware) -> AsyncMiddleware:
    return compose([middleware, *middlewares])


# Switch


def switch(selector: Callable[[TContext], MaybeAwaitable[AsyncMiddleware]]) -> AsyncMiddleware:
    """
    Choose the middleware at invocation time.

    ``selector`` may return the middleware directly or an awaitable
    resolving to it.
    """

    async def switched(
        context: TContext, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> TResult:
        middleware = await resolve(selector(context))
        return await middleware(context, call_next, token)

    return switched


def switch_with_token(
    selector: Callable[[TContext, CancellationToken], MaybeAwaitable[AsyncMiddleware]],
) -> AsyncMiddleware:
    """Like switch(), passing the cancellation token to ``selector``."""

    async def switched(
        context: TContext, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> TResult:
        middleware = await resolve(selector(context, token))
        return await middleware(context, call_next, token)

    return switched


# Choose


def choose(
    choices: Iterable[AsyncMiddleware],
    was_chosen: Callable[[TResult, TContext], MaybeAwaitable[bool]],
    default: AsyncMiddleware,
) -> AsyncMiddleware:
    """
    Try candidates in order and keep the first accepted result.

    Each candidate is awaited to completion with the original
    ``call_next`` before ``was_chosen`` is evaluated. Candidates after
    the accepted one never run; ``default`` runs once if none is
    accepted.
    """

    async def chosen(
        context: TContext, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> TResult:
        for middleware in choices:
            result = await middleware(context, call_next, token)
            if await resolve(was_chosen(result, context)):
                return result

        return await default(context, call_next, token)

    return chosen
