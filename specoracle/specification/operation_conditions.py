"""
Specifications applicable to one operation.

An operation is bound by the specification on its own declaration and by
the specifications on every declaration it overrides or implements. The
closure is kept as an ordered list, declared-first then overridden, so the
rows of an outcome table always come out in the same order.
"""

from typing import Any, List, Mapping, Optional, Sequence

from .evaluator import ConditionEvaluator
from .spec_language import BooleanExpression, OperationSpecification, ThrowsClause
from ..oracle.outcome_table import ExpectedOutcomeTable
from ..utils.logging import get_logger


class OperationConditions:
    """Ordered closure of the specifications that govern one operation."""

    def __init__(
        self,
        specifications: Optional[Sequence[OperationSpecification]] = None,
        evaluator: Optional[ConditionEvaluator] = None,
    ):
        self.specifications: List[OperationSpecification] = list(specifications or [])
        self.evaluator = evaluator or ConditionEvaluator()

    @classmethod
    def from_files(
        cls,
        paths: Sequence[str],
        evaluator: Optional[ConditionEvaluator] = None,
    ) -> "OperationConditions":
        """Load the closure from specification files, in the given order."""
        return cls([OperationSpecification.load(p) for p in paths], evaluator)

    def is_empty(self) -> bool:
        return not self.specifications

    def check_prestate(self, bindings: Mapping[str, Any]) -> ExpectedOutcomeTable:
        """
        Check every specification against the pre-state.

        Args:
            bindings: argument values of the call, by parameter name

        Returns:
            ExpectedOutcomeTable with one row per specification
        """
        logger = get_logger()
        table = ExpectedOutcomeTable(prestate=bindings)

        for spec in self.specifications:
            guard_is_satisfied = all(
                self.evaluator.evaluate(pre, bindings) for pre in spec.preconditions
            )

            postcondition = None
            for pair in spec.post_pairs:
                if self.evaluator.evaluate(pair.guard, bindings):
                    postcondition = BooleanExpression(pair.property, self.evaluator, pair.description)
                    break

            throws_clauses: List[ThrowsClause] = [
                pair.throws_clause
                for pair in spec.throws_pairs
                if self.evaluator.evaluate(pair.guard, bindings)
            ]

            logger.debug(
                f"{spec.operation} [{spec.declared_in or 'declared'}]: "
                f"guard={guard_is_satisfied} post={postcondition} throws={len(throws_clauses)}"
            )
            table.add(guard_is_satisfied, postcondition, throws_clauses)

        return table

    def __len__(self) -> int:
        return len(self.specifications)

    def __iter__(self):
        return iter(self.specifications)
