"""
Void Sync Middlewares - Combinators for the Synchronous Void Shape.

Void pipelines communicate through the (usually mutable) context and
return None. Combine, compose, chain and switch are the valued
combinators with a None result; only choose() differs, because there is
no result to accept and the predicate inspects the context instead.
"""

from __future__ import annotations

from typing import Callable, Iterable

from middleware_pipeline.pipeline.sync_middleware import (
    chain,
    combine,
    combine_with,
    compose,
    switch,
)
from middleware_pipeline.pipeline.types import (
    TContext,
    VoidSyncMiddleware,
    VoidSyncMiddlewareFunc,
)

__all__ = ["chain", "choose", "combine", "combine_with", "compose", "switch"]


def choose(
    choices: Iterable[VoidSyncMiddleware],
    was_chosen: Callable[[TContext], bool],
    default: VoidSyncMiddleware,
) -> VoidSyncMiddleware:
    """
    Run candidates in order until the context reports one was chosen.

    ``was_chosen`` is checked after each candidate completes. If no
    candidate is chosen, ``default`` runs once with the original
    ``call_next``.
    """

    def chosen(context: TContext, call_next: VoidSyncMiddlewareFunc) -> None:
        for middleware in choices:
            middleware(context, call_next)
            if was_chosen(context):
                return

        default(context, call_next)

    return chosen
