"""
Invoke - Bridge Terminals and Call Helpers.

call_sync_func and call_async_func are the innermost steps of void
pipelines over InvocationContext. They never raise target faults:
faults are recorded in the context and surface when it is read.

Usage:
    call = void_middleware.combine_with(logging_mw, call_sync_func)
    value = call_invoke(call, Service.get, "key", instance=service)
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Type

from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.domain.exceptions import TargetInvocationError
from middleware_pipeline.invocation.context import InvocationContext
from middleware_pipeline.pipeline.types import (
    TaskMiddlewareFunc,
    VoidSyncMiddlewareFunc,
    resolve,
)


def call_sync_func(context: InvocationContext) -> None:
    """
    Invoke a synchronous target and record its outcome.

    A TargetInvocationError raised by the target is unwrapped one level
    so the recorded fault is the original one.
    """
    context.mark_invoked()
    try:
        result = context.invoke_target()
    except TargetInvocationError as e:
        context.set_exception(e.inner)
    except Exception as e:
        context.set_exception(e)
    else:
        context.set_result(result if context.shape.returns_value else None)


async def call_async_func(context: InvocationContext, token: CancellationToken) -> None:
    """
    Invoke a target, await its awaitable and record the outcome.

    Faults raised when calling and faults raised while awaiting are
    recorded the same way. The target gets its token, if any, through
    its own arguments.
    """
    context.mark_invoked()
    try:
        result = await resolve(context.invoke_target())
    except TargetInvocationError as e:
        context.set_exception(e.inner)
    except Exception as e:
        context.set_exception(e)
    else:
        context.set_result(result if context.shape.returns_value else None)


def call_invoke(
    func: VoidSyncMiddlewareFunc,
    target: Callable[..., Any],
    *arguments: Any,
    instance: Optional[Any] = None,
    keywords: Optional[Mapping[str, Any]] = None,
    result_type: Optional[Type[Any]] = None,
    wrap_faults: bool = False,
) -> Any:
    """
    Run ``target`` through a sync bridge pipeline and return its result.

    Args:
        func: Pipeline terminating in call_sync_func
        target: Callable to invoke
        *arguments: Positional arguments for the target
        instance: Optional receiver
        keywords: Optional keyword arguments
        result_type: Expected result type
        wrap_faults: Raise TargetInvocationError instead of the fault

    Returns:
        The target's result
    """
    context = InvocationContext(target, arguments, instance, keywords)
    func(context)
    return context.return_value(result_type, wrap_faults=wrap_faults)


def call_invoke_void(
    func: VoidSyncMiddlewareFunc,
    target: Callable[..., Any],
    *arguments: Any,
    instance: Optional[Any] = None,
    keywords: Optional[Mapping[str, Any]] = None,
    wrap_faults: bool = False,
) -> None:
    """Like call_invoke(), for targets without a result."""
    context = InvocationContext(target, arguments, instance, keywords)
    func(context)
    context.return_void(wrap_faults=wrap_faults)


async def call_invoke_async(
    func: TaskMiddlewareFunc,
    target: Callable[..., Any],
    *arguments: Any,
    instance: Optional[Any] = None,
    keywords: Optional[Mapping[str, Any]] = None,
    token: CancellationToken = CancellationToken.NONE,
    result_type: Optional[Type[Any]] = None,
    wrap_faults: bool = False,
) -> Any:
    """Run ``target`` through an async bridge pipeline and return its result."""
    context = InvocationContext(target, arguments, instance, keywords)
    await func(context, token)
    return context.return_value(result_type, wrap_faults=wrap_faults)


async def call_invoke_void_async(
    func: TaskMiddlewareFunc,
    target: Callable[..., Any],
    *arguments: Any,
    instance: Optional[Any] = None,
    keywords: Optional[Mapping[str, Any]] = None,
    token: CancellationToken = CancellationToken.NONE,
    wrap_faults: bool = False,
) -> None:
    context = InvocationContext(target, arguments, instance, keywords)
    await func(context, token)
    context.return_void(wrap_faults=wrap_faults)
