"""
Exceptions shared across the package.

Usage faults (reading a pending outcome, invoking twice) are programming
errors and are never retried. TargetInvocationError is the marker used to
tell "the invoked call failed" apart from other faults.
"""

from __future__ import annotations

from typing import Optional


class InvocationWithoutResultError(Exception):
    """Raised when an invocation outcome is read before the call completed."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message or "Invocation has neither a result nor an exception; was it invoked?"
        )


class InvocationAlreadyInvokedError(Exception):
    """Raised when an invocation context is invoked more than once."""


class TargetInvocationError(Exception):
    """Marks a fault raised by an invoked target. The original is in ``inner``."""

    def __init__(self, inner: BaseException) -> None:
        super().__init__(f"Invoked target raised {type(inner).__name__}: {inner}")
        self.inner = inner


class OperationCancelledError(Exception):
    """Raised when an operation observes a cancelled token."""
