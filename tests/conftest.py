"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Iterator, List

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from middleware_pipeline.config.models import (
    CircuitBreakerConfig,
    PipelineConfig,
    RetryConfig,
)
from middleware_pipeline.domain.cancellation import CancellationTokenSource
from middleware_pipeline.interception.logging_interceptor import LoggingInterceptor
from middleware_pipeline.interception.tracing_interceptor import TracingInterceptor
from middleware_pipeline.observability.metrics import InMemoryMetricsCollector
from middleware_pipeline.registry.middleware_registry import MiddlewareRegistry


@dataclass
class RequestContext:
    """Mutable context used by pipeline tests."""

    value: int = 0
    user: str = "anonymous"
    trail: List[str] = field(default_factory=list)
    handled: bool = False


class Calculator:
    """Target object for interception tests."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def add(self, a: int, b: int) -> int:
        self.calls.append("add")
        return a + b

    def reset(self) -> None:
        self.calls.append("reset")

    def divide(self, a: int, b: int) -> float:
        self.calls.append("divide")
        return a / b

    async def add_async(self, a: int, b: int) -> int:
        self.calls.append("add_async")
        return a + b

    async def reset_async(self) -> None:
        self.calls.append("reset_async")

    async def fail_async(self) -> int:
        self.calls.append("fail_async")
        raise KeyError("missing")

    def _private(self) -> str:
        return "private"

    label = "calculator"


class Feed:
    """Target object with generator methods."""

    def items(self) -> Iterator[int]:
        yield 1
        raise ValueError("feed broken")

    def ticks(self, count: int) -> Iterator[int]:
        yield from range(count)

    async def ticks_async(self, count: int) -> AsyncIterator[int]:
        for tick in range(count):
            yield tick

    async def items_async(self) -> AsyncIterator[int]:
        yield 1
        raise ValueError("feed broken")


@pytest.fixture
def request_context() -> RequestContext:
    """Fresh pipeline context."""
    return RequestContext(value=5, user="alice")


@pytest.fixture
def calculator() -> Calculator:
    return Calculator()


@pytest.fixture
def feed() -> Feed:
    return Feed()


@pytest.fixture
def token_source() -> CancellationTokenSource:
    return CancellationTokenSource()


@pytest.fixture
def metrics_collector() -> InMemoryMetricsCollector:
    """Create metrics collector for testing."""
    return InMemoryMetricsCollector()


@pytest.fixture
def registry() -> MiddlewareRegistry:
    return MiddlewareRegistry()


@pytest.fixture
def fast_retry_config() -> RetryConfig:
    """Retry config without real waiting."""
    return RetryConfig(max_attempts=3, base_delay_seconds=0.0, max_delay_seconds=0.0)


@pytest.fixture
def breaker_config() -> CircuitBreakerConfig:
    return CircuitBreakerConfig(
        failure_threshold=2,
        recovery_timeout_seconds=0.0,
        success_threshold=1,
    )


@pytest.fixture
def default_config() -> PipelineConfig:
    """Create default pipeline configuration."""
    return PipelineConfig()


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def test_logger() -> logging.Logger:
    logger = logging.getLogger("tests.interception")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def logging_interceptor(test_logger: logging.Logger) -> LoggingInterceptor:
    return LoggingInterceptor(logger=test_logger)


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Collects finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("tests.tracing")


@pytest.fixture
def tracing_interceptor(tracer) -> TracingInterceptor:
    return TracingInterceptor(tracer=tracer)
