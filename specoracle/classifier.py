"""
Classification of a single generated call.

Drives one call site end to end: bind the arguments, check every applicable
specification against the pre-state, compile the outcome checker, execute
the call, and classify the outcome.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .oracle.checks import OutcomeChecker
from .oracle.execution import execute
from .oracle.outcome import BehaviorType, Classification, ExecutionOutcome
from .specification.operation_conditions import OperationConditions
from .utils.config import Config
from .utils.logging import get_logger, log_classification


@dataclass
class CallReport:
    """Result of classifying one call."""
    operation: str
    classification: Classification
    outcome: Optional[ExecutionOutcome] = None
    invalid_prestate: bool = False
    table: Dict[str, Any] = field(default_factory=dict)

    @property
    def executed(self) -> bool:
        return self.outcome is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "operation": self.operation,
            "classification": self.classification.to_dict(),
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "invalid_prestate": self.invalid_prestate,
            "table": self.table,
        }


def bind_arguments(
    func: Callable[..., Any],
    args: Sequence[Any] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Map call arguments to parameter names.

    Falls back to ``arg0``, ``arg1``, ... when the callable has no usable
    signature or the arguments do not fit it.
    """
    kwargs = dict(kwargs or {})
    try:
        bound = inspect.signature(func).bind(*args, **kwargs)
    except (TypeError, ValueError):
        bindings = {f"arg{i}": value for i, value in enumerate(args)}
        bindings.update(kwargs)
        return bindings
    bound.apply_defaults()
    return dict(bound.arguments)


class CallClassifier:
    """
    Classifies calls of one operation against its specification closure.

    Args:
        conditions: specifications of the operation and the declarations it overrides
        config: oracle configuration; provides the default contract
        fallback_factory: builds the checker used when no specification
            constrains a call; defaults to ``config.default_checker``
    """

    def __init__(
        self,
        conditions: OperationConditions,
        config: Optional[Config] = None,
        fallback_factory: Optional[Callable[[], OutcomeChecker]] = None,
    ):
        self.conditions = conditions
        self.config = config or Config()
        self.fallback_factory = fallback_factory or self.config.default_checker

    def classify(
        self,
        func: Callable[..., Any],
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        bindings: Optional[Mapping[str, Any]] = None,
    ) -> CallReport:
        """
        Execute ``func(*args, **kwargs)`` and classify what it did.

        Args:
            func: callable under test
            args: positional arguments
            kwargs: keyword arguments
            bindings: pre-state values by name; derived from the signature if omitted

        Returns:
            CallReport with the classification and the execution outcome
        """
        logger = get_logger()
        operation = getattr(func, "__qualname__", repr(func))
        if bindings is None:
            bindings = bind_arguments(func, args, kwargs)

        table = self.conditions.check_prestate(bindings)
        invalid_prestate = table.is_invalid_prestate()
        summary = table.to_dict()
        logger.debug(f"Outcome table for {operation}: {summary}")

        if invalid_prestate and self.config.oracle.skip_invalid:
            classification = Classification(
                BehaviorType.INVALID,
                reason="Pre-state satisfies no specification's precondition; call skipped",
                checker="ExpectedOutcomeTable",
            )
            report = CallReport(operation, classification, None, True, summary)
            log_classification(logger, report)
            return report

        checker = table.add_post_check(self.fallback_factory())
        outcome = execute(func, args, kwargs)
        classification = checker.check(outcome)

        report = CallReport(operation, classification, outcome, invalid_prestate, summary)
        log_classification(logger, report)
        return report
