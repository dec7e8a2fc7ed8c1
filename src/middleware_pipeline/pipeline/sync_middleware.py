"""
Sync Middlewares - Combinators for the Synchronous Valued Shape.

A middleware receives the context and ``call_next``, the rest of the
pipeline from its position, and returns a result. It may call
``call_next`` zero times (short-circuit), once (decorate) or many times
(fan-out, retry).

Usage:
    def log(ctx, call_next):
        ctx.trail.append("log")
        return call_next(ctx)

    pipeline = combine(terminal, compose([log, auth]))
    result = pipeline(ctx)

Design Notes:
    - No combinator catches exceptions; faults abort the traversal
    - compose() takes a fresh cursor per invocation, so a composed
      pipeline can be invoked repeatedly and concurrently
"""

from __future__ import annotations

from typing import Callable, Iterable

from middleware_pipeline.pipeline.types import (
    SyncMiddleware,
    SyncMiddlewareFunc,
    TContext,
    TResult,
)

_EXHAUSTED = object()


# Constants


def constant_func(result: TResult) -> SyncMiddlewareFunc:
    """Terminal that ignores the context and returns ``result``."""
    return lambda _context: result


def constant(result: TResult) -> SyncMiddleware:
    """Middleware that short-circuits with ``result``."""
    return lambda _context, _call_next: result


# Combine a func with a middleware


def combine(func: SyncMiddlewareFunc, middleware: SyncMiddleware) -> SyncMiddlewareFunc:
    """
    Bind ``func`` as the ``call_next`` of ``middleware``.

    Nothing is invoked until the returned terminal is called.

    Args:
        func: Terminal used as the middleware's continuation
        middleware: Middleware to wrap around ``func``

    Returns:
        Terminal equivalent to ``middleware(context, func)``
    """

    def combined(context: TContext) -> TResult:
        return middleware(context, func)

    return combined


def combine_with(middleware: SyncMiddleware, func: SyncMiddlewareFunc) -> SyncMiddlewareFunc:
    """Same as combine(), with the middleware given first."""
    return combine(func, middleware)


# Compose multiple middlewares into one


def compose(middlewares: Iterable[SyncMiddleware]) -> SyncMiddleware:
    """
    Fold an ordered sequence of middlewares into one.

    The first middleware is outermost; the ``call_next`` given to the
    composed middleware runs after the last one. An empty sequence
    forwards straight to ``call_next``.

    The sequence is iterated afresh on every invocation. A one-shot
    iterator therefore only serves a single invocation.

    The cursor is shared by the whole invocation: a middleware that calls
    ``call_next`` again after the inner layers consumed the cursor goes
    straight to the outer ``call_next``.

    Args:
        middlewares: Middlewares in execution order

    Returns:
        Composed middleware
    """

    def composed(context: TContext, call_next: SyncMiddlewareFunc) -> TResult:
        cursor = iter(middlewares)

        def advance(ctx: TContext) -> TResult:
            current = next(cursor, _EXHAUSTED)
            if current is _EXHAUSTED:
                return call_next(ctx)
            return current(ctx, advance)

        return advance(context)

    return composed


def chain(middleware: SyncMiddleware, *middlewares: SyncMiddleware) -> SyncMiddleware:
    """Compose ``middleware`` followed by ``middlewares``."""
    return compose([middleware, *middlewares])


# Switch


def switch(selector: Callable[[TContext], SyncMiddleware]) -> SyncMiddleware:
    """
    Choose the middleware at invocation time.

    Args:
        selector: Maps the current context to the middleware to run

    Returns:
        Middleware that delegates to the selected one with the original
        context and ``call_next``
    """

    def switched(context: TContext, call_next: SyncMiddlewareFunc) -> TResult:
        return selector(context)(context, call_next)

    return switched


# Choose


def choose(
    choices: Iterable[SyncMiddleware],
    was_chosen: Callable[[TResult, TContext], bool],
    default: SyncMiddleware,
) -> SyncMiddleware:
    """
    Try candidates in order and keep the first accepted result.

    Every candidate receives the same original ``call_next``. A candidate
    runs to completion before ``was_chosen`` sees its result, so every
    candidate up to the accepted one executes with its side effects.
    Candidates after the accepted one never run. When none is accepted,
    ``default`` runs once.

    Args:
        choices: Candidate middlewares in order
        was_chosen: Acceptance predicate over (result, context)
        default: Middleware run when no candidate is accepted

    Returns:
        Choosing middleware
    """

    def chosen(context: TContext, call_next: SyncMiddlewareFunc) -> TResult:
        for middleware in choices:
            result = middleware(context, call_next)
            if was_chosen(result, context):
                return result

        return default(context, call_next)

    return chosen
