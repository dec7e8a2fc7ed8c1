"""
Metrics - In-Memory Collector and Timing Middlewares.

timing_middleware / async_timing_middleware record how long the rest of
the pipeline took and count the faults that passed through, without
handling them:

    pipeline = sync_middleware.combine(
        handler, timing_middleware(collector, "orders")
    )
    collector.get_metrics()["orders_duration_seconds"]["count"]
"""

from __future__ import annotations

import time
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.pipeline.types import (
    AsyncMiddleware,
    AsyncMiddlewareFunc,
    SyncMiddleware,
    SyncMiddlewareFunc,
)


class MetricsCollectorProtocol(Protocol):
    """Protocol for metrics collectors."""

    def record_timing(
        self, name: str, duration_seconds: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def record_count(
        self, name: str, value: int, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...


class InMemoryMetricsCollector:
    """Thread-safe in-memory metrics store."""

    def __init__(self) -> None:
        self._metrics: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = Lock()

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, "timing", duration_seconds, tags)

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, "count", value, tags)

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self._record(name, "gauge", value, tags)

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Summary per metric: count, total and last value."""
        with self._lock:
            return {
                name: {
                    "count": len(entries),
                    "total": sum(e["value"] for e in entries),
                    "last": entries[-1]["value"],
                }
                for name, entries in self._metrics.items()
                if entries
            }

    def get_entries(self, name: str) -> List[Dict[str, Any]]:
        """Raw entries recorded under ``name``."""
        with self._lock:
            return list(self._metrics.get(name, []))

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def _record(
        self,
        name: str,
        metric_type: str,
        value: float,
        tags: Optional[Dict[str, str]],
    ) -> None:
        entry = {
            "type": metric_type,
            "value": value,
            "tags": tags or {},
            "timestamp": datetime.now().isoformat(),
        }
        with self._lock:
            self._metrics.setdefault(name, []).append(entry)


def timing_middleware(
    collector: MetricsCollectorProtocol,
    name: str,
    tags: Optional[Dict[str, str]] = None,
) -> SyncMiddleware:
    """
    Time ``call_next`` and count faults.

    Records ``<name>_duration_seconds`` on every call and
    ``<name>_errors_total`` when ``call_next`` raises. Faults propagate.
    """

    def middleware(context: Any, call_next: SyncMiddlewareFunc) -> Any:
        started = time.perf_counter()
        try:
            return call_next(context)
        except Exception as e:
            collector.record_count(f"{name}_errors_total", 1, _error_tags(tags, e))
            raise
        finally:
            collector.record_timing(
                f"{name}_duration_seconds", time.perf_counter() - started, tags
            )

    return middleware


def async_timing_middleware(
    collector: MetricsCollectorProtocol,
    name: str,
    tags: Optional[Dict[str, str]] = None,
) -> AsyncMiddleware:
    async def middleware(
        context: Any, call_next: AsyncMiddlewareFunc, token: CancellationToken
    ) -> Any:
        started = time.perf_counter()
        try:
            return await call_next(context, token)
        except Exception as e:
            collector.record_count(f"{name}_errors_total", 1, _error_tags(tags, e))
            raise
        finally:
            collector.record_timing(
                f"{name}_duration_seconds", time.perf_counter() - started, tags
            )

    return middleware


def _error_tags(tags: Optional[Dict[str, str]], error: BaseException) -> Dict[str, str]:
    return {**(tags or {}), "error": type(error).__name__}
