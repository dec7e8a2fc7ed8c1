"""
Invocation Context - The Invocation Bridge State.

Describes one dynamically resolved call (target, arguments, optional
receiver) and records its outcome so that any method, of any signature,
sync or async, can flow through a void pipeline as its context.

Lifecycle:
    constructed -> invoked once -> outcome read (or not) -> discarded
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Type

from middleware_pipeline.domain.exceptions import (
    InvocationAlreadyInvokedError,
    InvocationWithoutResultError,
    TargetInvocationError,
)
from middleware_pipeline.domain.outcome import PENDING, Fault, Outcome, Success
from middleware_pipeline.invocation.target import TargetShape, describe_target


class InvocationContext:
    """
    A single call routed through a pipeline.

    ``set_result`` and ``set_exception`` may be called by middlewares to
    substitute an outcome; each replaces whatever was recorded before.
    """

    def __init__(
        self,
        target: Callable[..., Any],
        arguments: Sequence[Any] = (),
        instance: Optional[Any] = None,
        keywords: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Initialize an invocation context.

        Args:
            target: Callable to invoke
            arguments: Positional arguments, in order
            instance: Receiver passed as first argument, or None for
                      free functions and already bound methods
            keywords: Keyword arguments
        """
        self._target = target
        self._arguments = tuple(arguments)
        self._instance = instance
        self._keywords: Dict[str, Any] = dict(keywords or {})
        self._outcome: Outcome = PENDING
        self._invoked = False
        self._shape: Optional[TargetShape] = None

    @property
    def target(self) -> Callable[..., Any]:
        return self._target

    @property
    def arguments(self) -> tuple:
        return self._arguments

    @property
    def instance(self) -> Optional[Any]:
        return self._instance

    @property
    def keywords(self) -> Dict[str, Any]:
        return self._keywords

    @property
    def shape(self) -> TargetShape:
        if self._shape is None:
            self._shape = describe_target(self._target)
        return self._shape

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def invoked(self) -> bool:
        return self._invoked

    @property
    def has_result(self) -> bool:
        return isinstance(self._outcome, Success)

    @property
    def has_exception(self) -> bool:
        return isinstance(self._outcome, Fault)

    @property
    def result(self) -> Any:
        """Recorded result, or None when there is none."""
        if isinstance(self._outcome, Success):
            return self._outcome.value
        return None

    @property
    def exception(self) -> Optional[BaseException]:
        """Recorded fault, or None when there is none."""
        if isinstance(self._outcome, Fault):
            return self._outcome.error
        return None

    def set_result(self, result: Any) -> None:
        """Record success; clears any recorded fault."""
        self._outcome = Success(result)

    def set_exception(self, exception: BaseException) -> None:
        """Record a fault; clears any recorded result."""
        if exception is None:
            raise ValueError("exception must not be None")
        self._outcome = Fault(exception)

    def mark_invoked(self) -> None:
        """
        Flag the context as invoked.

        Raises:
            InvocationAlreadyInvokedError: If it was invoked before
        """
        if self._invoked:
            raise InvocationAlreadyInvokedError(
                f"{self.shape.name} was already invoked with this context"
            )
        self._invoked = True

    def invoke_target(self) -> Any:
        """Call the target with the receiver and arguments."""
        if self._instance is None:
            return self._target(*self._arguments, **self._keywords)
        return self._target(self._instance, *self._arguments, **self._keywords)

    def return_value(
        self,
        result_type: Optional[Type[Any]] = None,
        wrap_faults: bool = False,
    ) -> Any:
        """
        Read the outcome of a completed invocation.

        Args:
            result_type: Expected type of the result (None result allowed)
            wrap_faults: Raise TargetInvocationError around the fault
                         instead of the fault itself

        Returns:
            The recorded result

        Raises:
            InvocationWithoutResultError: If the outcome is still pending
            TypeError: If the result is not a ``result_type``
        """
        outcome = self._outcome
        if isinstance(outcome, Fault):
            self._raise_fault(outcome.error, wrap_faults)
        if isinstance(outcome, Success):
            value = outcome.value
            if (
                result_type is not None
                and value is not None
                and not isinstance(value, result_type)
            ):
                raise TypeError(
                    f"{self.shape.name} returned {type(value).__name__}, "
                    f"expected {result_type.__name__}"
                )
            return value
        raise InvocationWithoutResultError()

    def return_void(self, wrap_faults: bool = False) -> None:
        """Like return_value(), discarding the result."""
        self.return_value(wrap_faults=wrap_faults)

    @staticmethod
    def _raise_fault(error: BaseException, wrap_faults: bool) -> None:
        if wrap_faults:
            raise TargetInvocationError(error) from error
        raise error

    def __repr__(self) -> str:
        return (
            f"InvocationContext(target={self.shape.name}, "
            f"arguments={self._arguments!r}, outcome={self._outcome!r})"
        )
