"""
Unit Tests for TracingInterceptor.

Test Aspects Covered:
    ✅ Business Logic: one span per call, named Type.method
    ✅ Attributes: static, target, arguments, result and error attributes
    ✅ Error Handling: faults recorded as exception events, span status ERROR
    ✅ Streams: span kept open until the generator ends
"""

from __future__ import annotations

import pytest
from opentelemetry.trace import SpanKind, StatusCode

from middleware_pipeline.config.models import (
    InterceptionConfig,
    TracingInterceptorOptions,
)
from middleware_pipeline.interception.interceptor import Interceptor, InterceptorOptions
from middleware_pipeline.interception.tracing_interceptor import TracingInterceptor


class TestSyncTracing:
    """Test cases for spans around sync methods."""

    def test_call_produces_named_span(self, tracing_interceptor, span_exporter, calculator) -> None:
        """
        SCENARIO: add(1, 2) through the tracing interceptor
        EXPECTED: One finished span Calculator.add with status OK
        """
        # Arrange
        proxy = tracing_interceptor.intercept(calculator)

        # Act
        result = proxy.add(1, 2)

        # Assert
        assert result == 3
        spans = span_exporter.get_finished_spans()
        assert len(spans) == 1
        span = spans[0]
        assert span.name == "Calculator.add"
        assert span.kind == SpanKind.INTERNAL
        assert span.status.status_code == StatusCode.OK
        assert span.attributes["code.namespace"] == "Calculator"
        assert span.attributes["code.function"] == "add"

    def test_fault_recorded_on_span(self, tracing_interceptor, span_exporter, calculator) -> None:
        """
        SCENARIO: divide by zero
        EXPECTED: Span status ERROR with an exception event; fault reaches the caller
        """
        # Arrange
        proxy = tracing_interceptor.intercept(calculator)

        # Act
        with pytest.raises(ZeroDivisionError):
            proxy.divide(1, 0)

        # Assert
        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert span.attributes["error.type"] == "ZeroDivisionError"
        assert [event.name for event in span.events] == ["exception"]

    def test_configured_attributes(self, tracer, span_exporter, calculator) -> None:
        """
        SCENARIO: Custom type name, kind, static, target and result attributes
        EXPECTED: All of them on the span
        """
        # Arrange
        tracing = TracingInterceptor(
            tracer,
            options=TracingInterceptorOptions(record_arguments=True, record_result=True),
            kind=SpanKind.CONSUMER,
            type_name="CustomType",
            attributes={"common.tag": "common value"},
            target_attributes=lambda calc: {"calculator.label": calc.label},
            result_attributes=lambda result: {"result.even": result % 2 == 0},
        )
        proxy = tracing.intercept(calculator)

        # Act
        proxy.add(1, b=2)

        # Assert
        span = span_exporter.get_finished_spans()[0]
        assert span.name == "CustomType.add"
        assert span.kind == SpanKind.CONSUMER
        assert span.attributes["common.tag"] == "common value"
        assert span.attributes["calculator.label"] == "calculator"
        assert span.attributes["code.argument.a"] == 1
        assert span.attributes["code.argument.b"] == 2
        assert span.attributes["code.result"] == 3
        assert span.attributes["result.even"] is False

    def test_error_attributes(self, tracer, span_exporter, calculator) -> None:
        tracing = TracingInterceptor(
            tracer, error_attributes=lambda error: {"error.message": str(error)}
        )
        proxy = tracing.intercept(calculator)

        with pytest.raises(ZeroDivisionError):
            proxy.divide(1, 0)

        span = span_exporter.get_finished_spans()[0]
        assert span.attributes["error.message"] == "division by zero"

    def test_void_method_records_no_result(self, tracer, span_exporter, calculator) -> None:
        tracing = TracingInterceptor(tracer, TracingInterceptorOptions(record_result=True))

        tracing.intercept(calculator).reset()

        span = span_exporter.get_finished_spans()[0]
        assert "code.result" not in span.attributes
        assert span.status.status_code == StatusCode.OK

    def test_middleware_fault_inside_span(
        self, tracing_interceptor, span_exporter, calculator
    ) -> None:
        """
        SCENARIO: A middleware after the tracing one raises
        EXPECTED: Span still ends with status ERROR; fault propagates
        """
        # Arrange
        def broken(context, call_next):
            raise RuntimeError("middleware broke")

        options = InterceptorOptions.DEFAULT.add_sync(tracing_interceptor.sync_middleware)
        proxy = Interceptor(calculator, options.add_sync(broken))

        # Act
        with pytest.raises(RuntimeError):
            proxy.add(1, 1)

        # Assert
        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert calculator.calls == []


class TestAsyncTracing:
    """Test cases for spans around coroutine methods."""

    @pytest.mark.asyncio
    async def test_async_call_and_fault(
        self, tracing_interceptor, span_exporter, calculator
    ) -> None:
        proxy = tracing_interceptor.intercept(calculator)

        assert await proxy.add_async(2, 3) == 5
        with pytest.raises(KeyError):
            await proxy.fail_async()

        first, second = span_exporter.get_finished_spans()
        assert first.name == "Calculator.add_async"
        assert first.status.status_code == StatusCode.OK
        assert second.name == "Calculator.fail_async"
        assert second.status.status_code == StatusCode.ERROR


class TestStreamTracing:
    """Test cases for spans around generator methods."""

    def test_span_ends_with_stream(self, tracing_interceptor, span_exporter, feed) -> None:
        """
        SCENARIO: ticks(3) consumed item by item
        EXPECTED: No finished span until exhaustion, then one with the item count
        """
        # Arrange
        stream = tracing_interceptor.intercept(feed).ticks(3)

        # Act
        first = next(stream)
        open_spans = span_exporter.get_finished_spans()
        rest = list(stream)

        # Assert
        assert [first, *rest] == [0, 1, 2]
        assert len(open_spans) == 0
        span = span_exporter.get_finished_spans()[0]
        assert span.name == "Feed.ticks"
        assert span.attributes["stream.items"] == 3
        assert span.status.status_code == StatusCode.OK

    def test_fault_mid_stream(self, tracing_interceptor, span_exporter, feed) -> None:
        with pytest.raises(ValueError):
            list(tracing_interceptor.intercept(feed).items())

        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert span.attributes["stream.items"] == 1


class TestConfiguration:
    """Test cases for configuration."""

    def test_from_config_uses_span_prefix(self, tracer, span_exporter, calculator) -> None:
        config = InterceptionConfig(tracing=TracingInterceptorOptions(span_prefix="calc:"))

        tracing = TracingInterceptor.from_config(config, tracer=tracer)
        tracing.intercept(calculator).add(1, 1)

        assert tracing.options.span_prefix == "calc:"
        assert span_exporter.get_finished_spans()[0].name == "calc:Calculator.add"
