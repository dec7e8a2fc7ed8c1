"""
Observability Package - Metrics for Pipelines.

    - InMemoryMetricsCollector: timing / count / gauge store
    - timing_middleware / async_timing_middleware: duration and fault counts
"""

from middleware_pipeline.observability.metrics import (
    InMemoryMetricsCollector,
    MetricsCollectorProtocol,
    async_timing_middleware,
    timing_middleware,
)

__all__ = [
    "InMemoryMetricsCollector",
    "MetricsCollectorProtocol",
    "async_timing_middleware",
    "timing_middleware",
]
