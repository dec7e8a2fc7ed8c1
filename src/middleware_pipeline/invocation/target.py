"""
Target Shape - What Kind of Call an Invocation Target Is.

Resolved once per callable and cached:
    - is_async: the call runs asynchronously (coroutine or async generator)
    - is_stream: the call returns a generator that yields items lazily
    - returns_value: False when the return annotation is None

The cache is keyed by the underlying function, so bound methods of
different instances share an entry. Entries are immutable.
"""

from __future__ import annotations

import inspect
from collections.abc import Hashable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable

_VOID_ANNOTATIONS = (None, "None", type(None))


@dataclass(frozen=True)
class TargetShape:
    """Call shape of an invocation target."""

    name: str
    is_async: bool
    returns_value: bool
    is_stream: bool = False

    @property
    def kind(self) -> str:
        """Short label, e.g. ``async/valued`` or ``sync/stream``."""
        execution = "async" if self.is_async else "sync"
        if self.is_stream:
            return f"{execution}/stream"
        result = "valued" if self.returns_value else "void"
        return f"{execution}/{result}"


def describe_target(target: Callable[..., Any]) -> TargetShape:
    """
    Get the call shape of ``target``.

    Args:
        target: Function, bound method or callable object

    Returns:
        TargetShape for the target
    """
    func = getattr(target, "__func__", target)
    if isinstance(func, Hashable):
        return _describe_cached(func)
    return _describe(func)


@lru_cache(maxsize=1024)
def _describe_cached(func: Callable[..., Any]) -> TargetShape:
    return _describe(func)


def _describe(func: Callable[..., Any]) -> TargetShape:
    name = getattr(func, "__qualname__", None) or type(func).__name__
    call = getattr(func, "__call__", None)
    is_async_stream = inspect.isasyncgenfunction(func) or inspect.isasyncgenfunction(call)
    is_stream = is_async_stream or inspect.isgeneratorfunction(func) or (
        inspect.isgeneratorfunction(call)
    )
    is_async = is_async_stream or inspect.iscoroutinefunction(func) or (
        inspect.iscoroutinefunction(call)
    )

    try:
        annotation = inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        # Builtins without signature metadata
        annotation = inspect.Signature.empty

    return TargetShape(
        name=name,
        is_async=is_async,
        returns_value=annotation not in _VOID_ANNOTATIONS,
        is_stream=is_stream,
    )
