"""
Tracing Interceptor - One OpenTelemetry Span per Intercepted Call.

Spans are named ``Type.method`` and carry the static attributes given
at construction, attributes derived from the target object, and
optionally the call arguments and result. A recorded fault marks the
span as failed and is attached as an exception event:

    tracer = trace.get_tracer("orders")
    tracing = TracingInterceptor(tracer, attributes={"db.system": "postgresql"})
    service = tracing.intercept(OrderService())

Generator methods get a span that stays open until the stream ends.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from middleware_pipeline.config.models import InterceptionConfig, TracingInterceptorOptions
from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.interception.interceptor import (
    Interceptor,
    InterceptorOptions,
    method_name,
    owner_name,
)
from middleware_pipeline.invocation.context import InvocationContext
from middleware_pipeline.pipeline.types import TaskMiddlewareFunc, VoidSyncMiddlewareFunc

logger = logging.getLogger(__name__)

AttributeSource = Callable[[Any], Mapping[str, Any]]

_PRIMITIVES = (str, bool, int, float)


@dataclass
class _StreamSpan:
    span: Span
    items: int = 0


class TracingInterceptor:
    """Provides tracing middlewares for InvocationContext pipelines."""

    def __init__(
        self,
        tracer: Optional[Tracer] = None,
        options: Optional[TracingInterceptorOptions] = None,
        kind: SpanKind = SpanKind.INTERNAL,
        type_name: Optional[str] = None,
        attributes: Optional[Mapping[str, Any]] = None,
        target_attributes: Optional[AttributeSource] = None,
        result_attributes: Optional[AttributeSource] = None,
        error_attributes: Optional[Callable[[BaseException], Mapping[str, Any]]] = None,
    ) -> None:
        """
        Initialize tracing interceptor.

        Args:
            tracer: Tracer to start spans with (default: global provider)
            options: Span naming and argument/result recording
            kind: Kind of every span
            type_name: Fixed owner name instead of the target's type
            attributes: Attributes added to every span
            target_attributes: Maps the receiver object to attributes
            result_attributes: Maps a successful result to attributes
            error_attributes: Maps a fault to attributes
        """
        self._tracer = tracer or trace.get_tracer(__name__)
        self._options = options or TracingInterceptorOptions()
        self._kind = kind
        self._type_name = type_name
        self._attributes = dict(attributes or {})
        self._target_attributes = target_attributes
        self._result_attributes = result_attributes
        self._error_attributes = error_attributes

    @property
    def options(self) -> TracingInterceptorOptions:
        return self._options

    def sync_middleware(
        self, context: InvocationContext, call_next: VoidSyncMiddlewareFunc
    ) -> None:
        """Void sync middleware running ``call_next`` inside a span."""
        with self._tracer.start_as_current_span(
            self.span_name(context), kind=self._kind, attributes=self._start_attributes(context)
        ) as span:
            call_next(context)
            self._finish(span, context)

    async def async_middleware(
        self,
        context: InvocationContext,
        call_next: TaskMiddlewareFunc,
        token: CancellationToken,
    ) -> None:
        """Task middleware running ``call_next`` inside a span."""
        with self._tracer.start_as_current_span(
            self.span_name(context), kind=self._kind, attributes=self._start_attributes(context)
        ) as span:
            await call_next(context, token)
            self._finish(span, context)

    def intercept(self, target: Any, options: Optional[InterceptorOptions] = None) -> Any:
        """Wrap ``target`` so each call runs inside a span."""
        options = (options or InterceptorOptions.DEFAULT).add_sync(self.sync_middleware)
        options = options.add_async(self.async_middleware).add_stream(self)
        return Interceptor(target, options)

    @classmethod
    def from_config(
        cls, config: InterceptionConfig, tracer: Optional[Tracer] = None
    ) -> TracingInterceptor:
        return cls(tracer=tracer, options=config.tracing)

    def span_name(self, context: InvocationContext) -> str:
        owner = self._type_name or owner_name(context, self._options.unknown_type_name)
        return f"{self._options.span_prefix}{owner}.{method_name(context)}"

    # =========================================================================
    # Stream observer
    # =========================================================================

    def on_start(self, context: InvocationContext) -> _StreamSpan:
        span = self._tracer.start_span(
            self.span_name(context), kind=self._kind, attributes=self._start_attributes(context)
        )
        return _StreamSpan(span)

    def on_next(self, state: _StreamSpan, context: InvocationContext, item: Any) -> None:
        state.items += 1

    def on_complete(self, state: _StreamSpan, context: InvocationContext) -> None:
        state.span.set_attribute("stream.items", state.items)
        state.span.set_status(Status(StatusCode.OK))
        state.span.end()

    def on_error(
        self, state: _StreamSpan, context: InvocationContext, error: BaseException
    ) -> None:
        state.span.set_attribute("stream.items", state.items)
        self._record_error(state.span, error)
        state.span.end()

    # =========================================================================
    # Attributes
    # =========================================================================

    def _start_attributes(self, context: InvocationContext) -> Dict[str, Any]:
        attributes = {
            "code.namespace": owner_name(context, self._options.unknown_type_name),
            "code.function": method_name(context),
            **self._attributes,
        }
        if self._target_attributes is not None and context.instance is not None:
            attributes.update(self._target_attributes(context.instance))
        if self._options.record_arguments:
            attributes.update(_argument_attributes(context))
        return _attribute_values(attributes)

    def _finish(self, span: Span, context: InvocationContext) -> None:
        if context.has_exception:
            self._record_error(span, context.exception)
            return

        if context.shape.returns_value:
            result = context.result
            if self._options.record_result:
                span.set_attribute("code.result", _attribute_value(result))
            if self._result_attributes is not None and result is not None:
                span.set_attributes(_attribute_values(self._result_attributes(result)))
        span.set_status(Status(StatusCode.OK))

    def _record_error(self, span: Span, error: BaseException) -> None:
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, f"{type(error).__name__}: {error}"))
        span.set_attribute("error.type", type(error).__qualname__)
        if self._error_attributes is not None:
            span.set_attributes(_attribute_values(self._error_attributes(error)))


def _argument_attributes(context: InvocationContext) -> Dict[str, Any]:
    arguments = context.arguments
    if context.instance is not None:
        arguments = (context.instance, *arguments)
    try:
        bound = inspect.signature(context.target).bind_partial(*arguments, **context.keywords)
    except (TypeError, ValueError):
        logger.debug(f"Cannot bind arguments of {context.shape.name}")
        return {}

    names = list(bound.arguments)
    if context.instance is not None:
        names = names[1:]
    return {f"code.argument.{name}": bound.arguments[name] for name in names}


def _attribute_values(attributes: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _attribute_value(value) for key, value in attributes.items()}


def _attribute_value(value: Any) -> Any:
    if isinstance(value, _PRIMITIVES):
        return value
    return repr(value)
