"""
Invocation Package - Bridge Between Dynamic Calls and Pipelines.

Components:
    - InvocationContext: call description plus recorded outcome
    - call_sync_func / call_async_func: bridge terminals
    - call_invoke* helpers: build a context, run a pipeline, read it
    - describe_target: cached call-shape resolution
"""

from middleware_pipeline.invocation.context import InvocationContext
from middleware_pipeline.invocation.invoke import (
    call_async_func,
    call_invoke,
    call_invoke_async,
    call_invoke_void,
    call_invoke_void_async,
    call_sync_func,
)
from middleware_pipeline.invocation.target import TargetShape, describe_target

__all__ = [
    "InvocationContext",
    "TargetShape",
    "call_async_func",
    "call_invoke",
    "call_invoke_async",
    "call_invoke_void",
    "call_invoke_void_async",
    "call_sync_func",
    "describe_target",
]
