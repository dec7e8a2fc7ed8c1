"""
Domain Layer - Outcomes, Cancellation and Faults.

This package contains the small value types shared by the pipeline
algebra and the invocation bridge.

Types:
    - Outcome: Pending | Success | Fault tagged union
    - CancellationToken / CancellationTokenSource: cooperative cancellation
    - Exceptions: usage faults and the invocation-fault marker

Design Principles:
    - Immutable where possible (frozen dataclasses)
    - No dependencies on the rest of the package
"""

from middleware_pipeline.domain.cancellation import (
    CancellationToken,
    CancellationTokenSource,
)
from middleware_pipeline.domain.exceptions import (
    InvocationAlreadyInvokedError,
    InvocationWithoutResultError,
    OperationCancelledError,
    TargetInvocationError,
)
from middleware_pipeline.domain.outcome import (
    PENDING,
    Fault,
    Outcome,
    Pending,
    Success,
    is_pending,
)

__all__ = [
    "CancellationToken",
    "CancellationTokenSource",
    "Fault",
    "InvocationAlreadyInvokedError",
    "InvocationWithoutResultError",
    "OperationCancelledError",
    "Outcome",
    "PENDING",
    "Pending",
    "Success",
    "TargetInvocationError",
    "is_pending",
]
