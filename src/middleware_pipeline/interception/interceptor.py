"""
Interceptor - Route Method Calls of an Object Through Pipelines.

An Interceptor stands in for a target object. Public methods looked up
on it are wrapped so every call becomes an InvocationContext that flows
through a void pipeline (sync methods) or a task pipeline (coroutine
methods) before reaching the real method.
Generator and async generator methods are handed to stream observers
instead, which see every item as it is produced.

Usage:
    options = InterceptorOptions.DEFAULT.add_sync(audit).add_async(audit_async)
    service = create_interceptor(RealService(), options)
    service.get("key")  # runs audit, then RealService.get
"""

from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, ClassVar, Mapping, Optional, Sequence, Tuple

from middleware_pipeline.config.models import InterceptionConfig
from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.invocation.invoke import (
    call_async_func,
    call_invoke,
    call_invoke_async,
    call_sync_func,
)
from middleware_pipeline.interception.streams import StreamObserver, observe_stream
from middleware_pipeline.invocation.context import InvocationContext
from middleware_pipeline.invocation.target import describe_target
from middleware_pipeline.pipeline import task_middleware, void_middleware
from middleware_pipeline.pipeline.types import TaskMiddleware, VoidSyncMiddleware

logger = logging.getLogger(__name__)

# (target object, method name) -> intercept?
MethodFilter = Callable[[Any, str], bool]


@dataclass(frozen=True)
class InterceptorOptions:
    """Immutable interceptor setup; the ``add``/``prepend`` methods return copies."""

    display_name: str = "default"
    sync_middlewares: Tuple[VoidSyncMiddleware, ...] = ()
    async_middlewares: Tuple[TaskMiddleware, ...] = ()
    stream_observers: Tuple[StreamObserver, ...] = ()
    method_filter: Optional[MethodFilter] = None
    intercept_async: bool = True
    intercept_streams: bool = True
    wrap_faults: bool = False

    DEFAULT: ClassVar["InterceptorOptions"]

    def add_sync(self, middleware: VoidSyncMiddleware) -> InterceptorOptions:
        return replace(self, sync_middlewares=(*self.sync_middlewares, middleware))

    def prepend_sync(self, middleware: VoidSyncMiddleware) -> InterceptorOptions:
        return replace(self, sync_middlewares=(middleware, *self.sync_middlewares))

    def add_async(self, middleware: TaskMiddleware) -> InterceptorOptions:
        return replace(self, async_middlewares=(*self.async_middlewares, middleware))

    def prepend_async(self, middleware: TaskMiddleware) -> InterceptorOptions:
        return replace(self, async_middlewares=(middleware, *self.async_middlewares))

    def add_stream(self, observer: StreamObserver) -> InterceptorOptions:
        return replace(self, stream_observers=(*self.stream_observers, observer))

    def with_filter(self, method_filter: MethodFilter) -> InterceptorOptions:
        return replace(self, method_filter=method_filter)

    def should_intercept(self, target: Any, method_name: str) -> bool:
        if method_name.startswith("_"):
            return False
        if self.method_filter is None:
            return True
        return self.method_filter(target, method_name)

    @classmethod
    def from_config(cls, config: InterceptionConfig) -> InterceptorOptions:
        """
        Build options from configuration.

        ``include_methods`` (when set) and ``exclude_methods`` become the
        method filter.
        """
        include = set(config.include_methods) if config.include_methods is not None else None
        exclude = set(config.exclude_methods)

        def method_filter(_target: Any, name: str) -> bool:
            if name in exclude:
                return False
            return include is None or name in include

        return cls(
            display_name=config.display_name,
            method_filter=method_filter,
            intercept_async=config.intercept_async,
            intercept_streams=config.intercept_streams,
            wrap_faults=config.wrap_faults,
        )


InterceptorOptions.DEFAULT = InterceptorOptions()


def find_token(
    arguments: Sequence[Any], keywords: Mapping[str, Any]
) -> CancellationToken:
    """First CancellationToken among the call arguments, else NONE."""
    for value in (*arguments, *keywords.values()):
        if isinstance(value, CancellationToken):
            return value
    return CancellationToken.NONE


class Interceptor:
    """Proxy that runs the target's public methods through pipelines."""

    def __init__(self, target: Any, options: Optional[InterceptorOptions] = None) -> None:
        """
        Initialize interceptor.

        Args:
            target: Object whose methods are intercepted
            options: Middlewares and filter; defaults to no middlewares
        """
        if target is None:
            raise ValueError("target must not be None")

        options = options or InterceptorOptions.DEFAULT
        self._interceptor_target = target
        self._interceptor_options = options
        self._sync_call = void_middleware.combine_with(
            void_middleware.compose(options.sync_middlewares), call_sync_func
        )
        self._async_call = task_middleware.combine_with(
            task_middleware.compose(options.async_middlewares), call_async_func
        )
        logger.debug(
            f"Interceptor '{options.display_name}' created for {type(target).__name__} "
            f"({len(options.sync_middlewares)} sync, "
            f"{len(options.async_middlewares)} async middlewares)"
        )

    def __getattr__(self, name: str) -> Any:
        target = self.__dict__.get("_interceptor_target")
        if target is None:
            raise AttributeError(name)

        attribute = getattr(target, name)
        options: InterceptorOptions = self._interceptor_options
        if not (inspect.ismethod(attribute) or inspect.isfunction(attribute)):
            return attribute
        if not options.should_intercept(target, name):
            return attribute

        func = getattr(attribute, "__func__", attribute)
        instance = getattr(attribute, "__self__", None)

        shape = describe_target(func)
        if shape.is_stream:
            if not options.intercept_streams:
                return attribute
            return self._wrap_stream(attribute, func, instance)
        if shape.is_async:
            if not options.intercept_async:
                return attribute
            return self._wrap_async(attribute, func, instance)
        return self._wrap_sync(attribute, func, instance)

    def _wrap_sync(self, attribute: Any, func: Any, instance: Any) -> Callable[..., Any]:
        options: InterceptorOptions = self._interceptor_options

        @functools.wraps(attribute)
        def intercepted(*args: Any, **kwargs: Any) -> Any:
            return call_invoke(
                self._sync_call,
                func,
                *args,
                instance=instance,
                keywords=kwargs,
                wrap_faults=options.wrap_faults,
            )

        return intercepted

    def _wrap_async(self, attribute: Any, func: Any, instance: Any) -> Callable[..., Any]:
        options: InterceptorOptions = self._interceptor_options

        @functools.wraps(attribute)
        async def intercepted(*args: Any, **kwargs: Any) -> Any:
            return await call_invoke_async(
                self._async_call,
                func,
                *args,
                instance=instance,
                keywords=kwargs,
                token=find_token(args, kwargs),
                wrap_faults=options.wrap_faults,
            )

        return intercepted

    def _wrap_stream(self, attribute: Any, func: Any, instance: Any) -> Callable[..., Any]:
        options: InterceptorOptions = self._interceptor_options

        @functools.wraps(attribute)
        def intercepted(*args: Any, **kwargs: Any) -> Any:
            context = InvocationContext(func, args, instance, kwargs)
            return observe_stream(context, options.stream_observers, options.wrap_faults)

        return intercepted

    def __repr__(self) -> str:
        return (
            f"Interceptor({self._interceptor_options.display_name!r}, "
            f"{self._interceptor_target!r})"
        )


def owner_name(context: InvocationContext, default: str = "UnknownType") -> str:
    """Name of the type a call was made on, for logs and spans."""
    instance = context.instance
    if isinstance(instance, type):
        return instance.__name__
    if instance is not None:
        return type(instance).__name__
    owner, _, _ = context.shape.name.rpartition(".")
    return owner or default


def method_name(context: InvocationContext) -> str:
    return getattr(context.target, "__name__", context.shape.name)


def create_interceptor(target: Any, options: Optional[InterceptorOptions] = None) -> Any:
    """Wrap ``target`` in an Interceptor."""
    return Interceptor(target, options)
