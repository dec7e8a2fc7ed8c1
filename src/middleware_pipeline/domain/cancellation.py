"""
Cancellation - Cooperative Cancellation Signal for Async Pipelines.

Asynchronous pipeline shapes thread a CancellationToken end-to-end.
The combinators never poll it; terminals and middlewares observe it at
their own suspension points.

Usage:
    source = CancellationTokenSource()
    result = await pipeline(context, source.token)
    ...
    source.cancel()  # from elsewhere
"""

from __future__ import annotations

import asyncio
import logging
from threading import Lock
from typing import Callable, List, Optional

from middleware_pipeline.domain.exceptions import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Read-only view of a cancellation signal."""

    NONE: "CancellationToken"

    def __init__(self, source: Optional[CancellationTokenSource] = None) -> None:
        self._source = source

    @property
    def can_be_cancelled(self) -> bool:
        """False for tokens that are not backed by a source."""
        return self._source is not None

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source is not None and self._source.is_cancellation_requested

    def raise_if_cancellation_requested(self) -> None:
        """
        Raise if cancellation was requested.

        Raises:
            OperationCancelledError: If the source has been cancelled
        """
        if self.is_cancellation_requested:
            raise OperationCancelledError("The operation was cancelled")

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run on cancellation.

        Runs immediately when cancellation was already requested.
        No-op for tokens that can never be cancelled.

        Returns:
            Function that removes the callback again; safe to call
            more than once and after cancellation
        """
        if self._source is None:
            return _noop
        return self._source._register(callback)

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        if self.is_cancellation_requested:
            return

        loop = asyncio.get_running_loop()
        event = asyncio.Event()
        unregister = self.register(lambda: loop.call_soon_threadsafe(event.set))
        try:
            await event.wait()
        finally:
            unregister()

    def __repr__(self) -> str:
        if self._source is None:
            return "CancellationToken.NONE"
        return f"CancellationToken(cancelled={self.is_cancellation_requested})"


CancellationToken.NONE = CancellationToken()


class CancellationTokenSource:
    """Owner side of a cancellation signal."""

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: List[Callable[[], None]] = []
        self._lock = Lock()
        self._token = CancellationToken(self)

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def is_cancellation_requested(self) -> bool:
        with self._lock:
            return self._cancelled

    def cancel(self) -> None:
        """
        Request cancellation and run registered callbacks once.

        Calling cancel() again is a no-op.
        """
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []

        logger.debug(f"Cancellation requested, running {len(callbacks)} callbacks")
        for callback in callbacks:
            callback()

    def cancel_after(self, seconds: float) -> asyncio.TimerHandle:
        """
        Schedule cancellation on the running event loop.

        Args:
            seconds: Delay before cancelling

        Returns:
            Timer handle that can be used to call off the cancellation
        """
        if seconds < 0:
            raise ValueError(f"Delay must be non-negative, got {seconds}")
        loop = asyncio.get_running_loop()
        return loop.call_later(seconds, self.cancel)

    def _register(self, callback: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return _noop

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


def _noop() -> None:
    pass
