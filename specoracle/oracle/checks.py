"""
Outcome checkers.

A checker is built before the call executes and classifies the call's
execution outcome afterwards. Checkers are single-use: each one consumes
exactly one outcome.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .outcome import (
    BehaviorType,
    Classification,
    ExceptionalExecution,
    ExecutionOutcome,
    qualified_name,
)


class CheckerReuseError(RuntimeError):
    """Raised when a checker is asked to classify a second outcome."""


class OutcomeChecker(ABC):
    """Base class for outcome checkers."""

    def __init__(self):
        self._used = False

    def check(self, outcome: ExecutionOutcome) -> Classification:
        """Classify an execution outcome. May be called once."""
        if self._used:
            raise CheckerReuseError(f"{type(self).__name__} has already classified an outcome")
        self._used = True
        return self._classify(outcome)

    @abstractmethod
    def _classify(self, outcome: ExecutionOutcome) -> Classification:
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


class ExpectedExceptionChecker(OutcomeChecker):
    """
    Requires the call to raise one of the sanctioned exception types.

    A raised subclass of a sanctioned type counts as sanctioned.
    """

    def __init__(self, exception_sets: Iterable[Sequence[Any]]):
        super().__init__()
        self.throws_clauses = [clause for clauses in exception_sets for clause in clauses]

    def _classify(self, outcome: ExecutionOutcome) -> Classification:
        expected = ", ".join(str(c) for c in self.throws_clauses)

        if not isinstance(outcome, ExceptionalExecution):
            return Classification(
                BehaviorType.ERROR,
                reason=f"Expected exception not raised; expected one of: {expected}",
                checker=self.name,
            )

        raised = outcome.exception_type
        for clause in self.throws_clauses:
            if clause.matches(raised):
                return Classification(
                    BehaviorType.EXPECTED,
                    reason=f"Raised sanctioned exception {qualified_name(raised)}",
                    checker=self.name,
                )

        return Classification(
            BehaviorType.ERROR,
            reason=f"Raised {qualified_name(raised)}; expected one of: {expected}",
            checker=self.name,
        )


class InvalidInputChecker(OutcomeChecker):
    """Classifies every outcome as invalid input."""

    def _classify(self, outcome: ExecutionOutcome) -> Classification:
        return Classification(
            BehaviorType.INVALID,
            reason="Pre-state satisfies no specification's precondition",
            checker=self.name,
        )


class PostconditionChecker(OutcomeChecker):
    """
    Checks postconditions on normal return, then defers to ``next_checker``.

    Postconditions are evaluated against the pre-state bindings extended
    with ``result``. An exceptional outcome goes straight to the next checker.
    A postcondition that fails to evaluate classifies the call as an error.
    """

    def __init__(
        self,
        postconditions: Sequence[Any],
        next_checker: OutcomeChecker,
        prestate: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__()
        self.postconditions: List[Any] = list(postconditions)
        self.next_checker = next_checker
        self.prestate = dict(prestate or {})

    def _classify(self, outcome: ExecutionOutcome) -> Classification:
        if not outcome.is_normal():
            return self.next_checker.check(outcome)

        bindings = dict(self.prestate)
        bindings["result"] = outcome.value
        for postcondition in self.postconditions:
            try:
                holds = postcondition.check(bindings)
            except Exception as e:
                return Classification(
                    BehaviorType.ERROR,
                    reason=f"Postcondition '{postcondition}' could not be evaluated: {e}",
                    checker=self.name,
                )
            if not holds:
                return Classification(
                    BehaviorType.ERROR,
                    reason=f"Postcondition violated: {postcondition}",
                    checker=self.name,
                )

        return self.next_checker.check(outcome)


class DefaultContractChecker(OutcomeChecker):
    """
    Ambient contract for calls no specification constrains.

    A normal return is expected. A flaky exception (one whose occurrence
    depends on the environment rather than the inputs) makes the call
    invalid; any other exception is classified as ``exception_behavior``.
    """

    def __init__(
        self,
        exception_behavior: BehaviorType = BehaviorType.ERROR,
        flaky_exceptions: Sequence[type] = (),
    ):
        super().__init__()
        self.exception_behavior = exception_behavior
        self.flaky_exceptions = tuple(flaky_exceptions)

    def _classify(self, outcome: ExecutionOutcome) -> Classification:
        if outcome.is_normal():
            return Classification(
                BehaviorType.EXPECTED,
                reason="Returned normally",
                checker=self.name,
                deferred=True,
            )

        raised = outcome.exception_type
        if self.flaky_exceptions and issubclass(raised, self.flaky_exceptions):
            return Classification(
                BehaviorType.INVALID,
                reason=f"Raised flaky exception {qualified_name(raised)}",
                checker=self.name,
                deferred=True,
            )

        return Classification(
            self.exception_behavior,
            reason=f"Raised unspecified exception {qualified_name(raised)}",
            checker=self.name,
            deferred=True,
        )
