"""
Unit Tests for target shape resolution.

Test Aspects Covered:
    ✅ Business Logic: sync/async, valued/void detection
    ✅ Business Logic: generator and async generator streams
    ✅ Edge Cases: bound methods, callable objects, builtins
"""

from __future__ import annotations

from middleware_pipeline.invocation.target import describe_target


def valued() -> int:
    return 1


def void() -> None:
    pass


def unannotated():
    return 1


async def valued_async() -> str:
    return "x"


async def void_async() -> None:
    pass


def numbers():
    yield 1


async def numbers_async():
    yield 1


class Handler:
    def handle(self) -> None:
        pass

    async def __call__(self) -> int:
        return 1


class TestDescribeTarget:
    """Test cases for describe_target."""

    def test_sync_shapes(self) -> None:
        assert describe_target(valued).kind == "sync/valued"
        assert describe_target(void).kind == "sync/void"

    def test_unannotated_is_valued(self) -> None:
        """
        SCENARIO: No return annotation
        EXPECTED: Treated as value returning
        """
        assert describe_target(unannotated).returns_value is True

    def test_async_shapes(self) -> None:
        assert describe_target(valued_async).kind == "async/valued"
        assert describe_target(void_async).kind == "async/void"

    def test_bound_method_shares_entry_with_function(self) -> None:
        """
        SCENARIO: Bound methods of two instances
        EXPECTED: Same cached shape as the underlying function
        """
        first = describe_target(Handler().handle)
        second = describe_target(Handler().handle)

        assert first is second
        assert first is describe_target(Handler.handle)
        assert first.name == "Handler.handle"

    def test_async_callable_object(self) -> None:
        assert describe_target(Handler()).is_async is True

    def test_builtin_without_signature(self) -> None:
        shape = describe_target(len)

        assert shape.is_async is False
        assert shape.returns_value is True

    def test_stream_shapes(self) -> None:
        """
        SCENARIO: Generator and async generator functions
        EXPECTED: Both are streams; only the async one is async
        """
        sync_stream = describe_target(numbers)
        async_stream = describe_target(numbers_async)

        assert sync_stream.is_stream is True
        assert sync_stream.kind == "sync/stream"
        assert async_stream.is_stream is True
        assert async_stream.kind == "async/stream"
        assert describe_target(valued_async).is_stream is False
