"""
Unit Tests for the Outcome union and shared exceptions.

Test Aspects Covered:
    ✅ Business Logic: Pending / Success / Fault
    ✅ Edge Cases: Success with None, default messages
"""

from __future__ import annotations

import pytest

from middleware_pipeline.domain.exceptions import (
    InvocationWithoutResultError,
    TargetInvocationError,
)
from middleware_pipeline.domain.outcome import PENDING, Fault, Pending, Success, is_pending


class TestOutcome:
    """Test cases for outcome values."""

    def test_pending_singleton_is_pending(self) -> None:
        assert is_pending(PENDING)
        assert PENDING == Pending()

    def test_success_may_hold_none(self) -> None:
        """
        SCENARIO: Void call completed
        EXPECTED: Success(None) is not pending
        """
        outcome = Success()

        assert outcome.value is None
        assert not is_pending(outcome)

    def test_outcomes_are_immutable(self) -> None:
        outcome = Fault(ValueError("x"))

        with pytest.raises(AttributeError):
            outcome.error = KeyError("y")  # type: ignore[misc]


class TestExceptions:
    """Test cases for shared exceptions."""

    def test_without_result_has_default_message(self) -> None:
        assert "neither a result nor an exception" in str(InvocationWithoutResultError())

    def test_target_invocation_error_keeps_inner(self) -> None:
        """
        SCENARIO: Wrap a KeyError
        EXPECTED: inner is the original, message names its type
        """
        inner = KeyError("k")

        error = TargetInvocationError(inner)

        assert error.inner is inner
        assert "KeyError" in str(error)
