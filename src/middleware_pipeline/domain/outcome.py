"""
Outcome - Single-Slot Result of an Invocation.

An outcome is exactly one of:
    - Pending: no call has completed yet
    - Success: the call returned (value may be None for void targets)
    - Fault: the call raised

Modelled as a tagged union so a "result and fault at once" state
cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Pending:
    """No call has completed yet."""

    def __repr__(self) -> str:
        return "Pending()"


@dataclass(frozen=True)
class Success:
    """The call completed normally."""

    value: Any = None


@dataclass(frozen=True)
class Fault:
    """The call completed with an error."""

    error: BaseException


Outcome = Union[Pending, Success, Fault]

PENDING = Pending()


def is_pending(outcome: Outcome) -> bool:
    """Check whether an outcome is still pending."""
    return isinstance(outcome, Pending)
