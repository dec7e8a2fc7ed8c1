"""
Logging Interceptor - Log Every Intercepted Call.

Logs a START line before the call and, once the bridge recorded the
outcome, a RESULT (value-returning target), DONE (void target) or ERROR
line with the elapsed time:

    OrderService.place() | START
    OrderService.place() | RESULT. Elapsed: (12.4ms)

Generator methods log START when called, NEXT per item (at the next
level) and COMPLETE or ERROR when the stream ends:

    OrderService.pending() | NEXT. Elapsed: (0.3ms)
    OrderService.pending() | COMPLETE. Elapsed: (1.1ms)

Faults stay recorded in the InvocationContext; the interceptor only
observes them.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from middleware_pipeline.config.models import InterceptionConfig, LoggingInterceptorOptions
from middleware_pipeline.domain.cancellation import CancellationToken
from middleware_pipeline.interception.interceptor import (
    Interceptor,
    InterceptorOptions,
    method_name,
    owner_name,
)
from middleware_pipeline.invocation.context import InvocationContext
from middleware_pipeline.pipeline.types import TaskMiddlewareFunc, VoidSyncMiddlewareFunc


class LoggingInterceptor:
    """Provides logging middlewares for InvocationContext pipelines."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        options: Optional[LoggingInterceptorOptions] = None,
    ) -> None:
        """
        Initialize logging interceptor.

        Args:
            logger: Logger to write to (default: this module's logger)
            options: Levels and stage labels
        """
        self._logger = logger or logging.getLogger(__name__)
        self._options = options or LoggingInterceptorOptions()

    @property
    def options(self) -> LoggingInterceptorOptions:
        return self._options

    def sync_middleware(
        self, context: InvocationContext, call_next: VoidSyncMiddlewareFunc
    ) -> None:
        """Void sync middleware logging around ``call_next``."""
        started = self._before(context)
        try:
            call_next(context)
        except Exception as e:
            self._log_error(context, started, e)
            raise
        self._after(context, started)

    async def async_middleware(
        self,
        context: InvocationContext,
        call_next: TaskMiddlewareFunc,
        token: CancellationToken,
    ) -> None:
        """Task middleware logging around ``call_next``."""
        started = self._before(context)
        try:
            await call_next(context, token)
        except Exception as e:
            self._log_error(context, started, e)
            raise
        self._after(context, started)

    def intercept(self, target: Any, options: Optional[InterceptorOptions] = None) -> Any:
        """
        Wrap ``target`` so its calls are logged.

        The logging middlewares are appended after any middlewares in
        ``options``.
        """
        options = (options or InterceptorOptions.DEFAULT).add_sync(self.sync_middleware)
        options = options.add_async(self.async_middleware).add_stream(self)
        return Interceptor(target, options)

    # =========================================================================
    # Stream observer
    # =========================================================================

    def on_start(self, context: InvocationContext) -> float:
        return self._before(context)

    def on_next(self, started: float, context: InvocationContext, item: Any) -> None:
        level = self._options.level_of(self._options.next_level)
        if not self._logger.isEnabledFor(level):
            return
        stage = self._options.next_stage
        if self._options.log_result:
            stage = f"{stage} = ({item!r})"
        self._log_stage(level, context, stage, started)

    def on_complete(self, started: float, context: InvocationContext) -> None:
        level = self._options.level_of(self._options.done_level)
        if self._logger.isEnabledFor(level):
            self._log_stage(level, context, self._options.complete_stage, started)

    def on_error(
        self, started: float, context: InvocationContext, error: BaseException
    ) -> None:
        self._log_error(context, started, error)

    @classmethod
    def from_config(
        cls, config: InterceptionConfig, logger: Optional[logging.Logger] = None
    ) -> LoggingInterceptor:
        return cls(logger=logger, options=config.logging)

    # =========================================================================
    # Formatting
    # =========================================================================

    def _before(self, context: InvocationContext) -> float:
        level = self._options.level_of(self._options.start_level)
        if self._logger.isEnabledFor(level):
            self._logger.log(level, f"{self._describe(context)} | {self._options.start_stage}")
        return time.perf_counter()

    def _after(self, context: InvocationContext, started: float) -> None:
        if context.has_exception:
            self._log_error(context, started, context.exception)
            return

        level = self._options.level_of(self._options.done_level)
        if not self._logger.isEnabledFor(level):
            return

        if context.shape.returns_value:
            stage = self._options.result_stage
            if self._options.log_result:
                stage = f"{stage} = ({context.result!r})"
        else:
            stage = self._options.done_stage
        self._log_stage(level, context, stage, started)

    def _log_stage(
        self, level: int, context: InvocationContext, stage: str, started: float
    ) -> None:
        elapsed = self._elapsed_ms(started)
        self._logger.log(level, f"{self._describe(context)} | {stage}. Elapsed: ({elapsed:.1f}ms)")

    def _log_error(
        self, context: InvocationContext, started: float, error: Optional[BaseException]
    ) -> None:
        level = self._options.level_of(self._options.error_level)
        self._logger.log(
            level,
            f"{self._describe(context)} | {self._options.error_stage}. "
            f"Elapsed: ({self._elapsed_ms(started):.1f}ms)",
            exc_info=error,
        )

    def _describe(self, context: InvocationContext) -> str:
        parameters = ""
        if self._options.log_parameters:
            parts = [repr(a) for a in context.arguments]
            parts += [f"{k}={v!r}" for k, v in context.keywords.items()]
            parameters = ", ".join(parts)
        owner = owner_name(context, self._options.unknown_type_name)
        return f"{owner}.{method_name(context)}({parameters})"

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000
