"""
Stream Observation - Intercept Generator and Async Generator Methods.

A generator method returns before any of its body runs, so a call
pipeline would only see the generator object. Stream methods are
observed instead: the observers are told when the call is made, after
every item, when the stream is exhausted, and when it fails part way.

Usage:
    class Counter:
        def on_start(self, context): return 0
        def on_next(self, state, context, item): ...
        def on_complete(self, state, context): ...
        def on_error(self, state, context, error): ...

    options = InterceptorOptions.DEFAULT.add_stream(Counter())
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Iterator, List, Protocol, Sequence, Tuple, Union

from middleware_pipeline.domain.exceptions import TargetInvocationError
from middleware_pipeline.invocation.context import InvocationContext

logger = logging.getLogger(__name__)


class StreamObserver(Protocol):
    """Callbacks for one intercepted stream call."""

    def on_start(self, context: InvocationContext) -> Any:
        """Called when the method is called; returns per-call state."""
        ...

    def on_next(self, state: Any, context: InvocationContext, item: Any) -> None:
        ...

    def on_complete(self, state: Any, context: InvocationContext) -> None:
        ...

    def on_error(
        self, state: Any, context: InvocationContext, error: BaseException
    ) -> None:
        ...


_Started = List[Tuple[StreamObserver, Any]]


def observe_stream(
    context: InvocationContext,
    observers: Sequence[StreamObserver],
    wrap_faults: bool = False,
) -> Union[Iterator[Any], AsyncIterator[Any]]:
    """
    Call a stream target and return an observed copy of its stream.

    ``on_start`` runs right away; the other callbacks run as the
    returned stream is consumed. A fault raised while producing an item
    is recorded on the context, reported to ``on_error`` and re-raised.

    Args:
        context: Invocation of a generator or async generator function
        observers: Observers, notified in order
        wrap_faults: Raise TargetInvocationError around faults

    Returns:
        Generator or async generator, matching the target
    """
    context.mark_invoked()
    started: _Started = [(observer, observer.on_start(context)) for observer in observers]
    try:
        items = context.invoke_target()
    except Exception as e:
        _fail(context, started, e, wrap_faults)

    if context.shape.is_async:
        return _observe_async(items, context, started, wrap_faults)
    return _observe_sync(items, context, started, wrap_faults)


def _observe_sync(
    items: Iterator[Any],
    context: InvocationContext,
    started: _Started,
    wrap_faults: bool,
) -> Iterator[Any]:
    try:
        for item in items:
            _notify_next(started, context, item)
            yield item
    except Exception as e:
        _fail(context, started, e, wrap_faults)
    _complete(context, started)


async def _observe_async(
    items: AsyncIterator[Any],
    context: InvocationContext,
    started: _Started,
    wrap_faults: bool,
) -> AsyncIterator[Any]:
    try:
        async for item in items:
            _notify_next(started, context, item)
            yield item
    except Exception as e:
        _fail(context, started, e, wrap_faults)
    _complete(context, started)


def _notify_next(started: _Started, context: InvocationContext, item: Any) -> None:
    for observer, state in started:
        observer.on_next(state, context, item)


def _complete(context: InvocationContext, started: _Started) -> None:
    context.set_result(None)
    for observer, state in started:
        observer.on_complete(state, context)


def _fail(
    context: InvocationContext,
    started: _Started,
    error: Exception,
    wrap_faults: bool,
) -> None:
    if isinstance(error, TargetInvocationError):
        error = error.inner
    context.set_exception(error)
    logger.debug(f"Stream {context.shape.name} failed: {type(error).__name__}")
    for observer, state in started:
        observer.on_error(state, context, error)
    if wrap_faults:
        raise TargetInvocationError(error) from error
    raise error
