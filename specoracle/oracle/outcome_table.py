"""
Expected outcome table for one call site.

A method implementation must satisfy not only the specification written on
it, but also the specifications on every declaration it overrides or
implements. The table collects, for a single pre-state, the result of
checking each of those specifications and compiles them into one checker.

The table does not keep one record per specification. It keeps:

1. whether the preconditions of at least one specification held;
2. the postconditions whose specification's preconditions held;
3. every non-empty set of throws clauses whose guards held, whether or not
   that specification's preconditions held.

The compiled checker classifies the call as follows:

1. If any exception set was recorded, the call must raise one of the
   sanctioned exceptions (expected); raising anything else or returning
   normally is an error.
2. Otherwise, if no specification's preconditions held, the call is invalid.
3. Otherwise, every recorded postcondition must hold on normal return;
   a violated postcondition is an error.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .checks import (
    ExpectedExceptionChecker,
    InvalidInputChecker,
    OutcomeChecker,
    PostconditionChecker,
)


class OutcomeTableFrozenError(RuntimeError):
    """Raised when a row is added to a table that has already been queried."""


class ExpectedOutcomeTable:
    """
    Collects the permitted outcomes for a set of overriding declarations.

    Rows are added with :meth:`add`. The first query
    (:meth:`is_invalid_prestate` or :meth:`add_post_check`) freezes the table.
    """

    def __init__(self, prestate: Optional[Mapping[str, Any]] = None):
        self.prestate: Dict[str, Any] = dict(prestate or {})
        self.is_empty = True
        self.has_satisfied_precondition = False
        self.postconditions: List[Any] = []
        self.exception_sets: List[List[Any]] = []
        self._frozen = False

    def add(
        self,
        guard_is_satisfied: bool,
        postcondition: Optional[Any],
        throws_clauses: Sequence[Any],
    ) -> None:
        """
        Add the outcome of checking the pre-state part of one specification.

        Args:
            guard_is_satisfied: whether all preconditions of the specification hold
            postcondition: property that must hold in the post-state if no
                exception is raised, or None
            throws_clauses: exceptions sanctioned for this pre-state; may be empty
        """
        if self._frozen:
            raise OutcomeTableFrozenError("Cannot add a row after the table has been queried")

        # A table with one vacuous row can be invalid; an empty one never is.
        self.is_empty = False
        if guard_is_satisfied:
            if postcondition is not None:
                self.postconditions.append(postcondition)
            self.has_satisfied_precondition = True
        if throws_clauses:
            self.exception_sets.append(list(throws_clauses))

    def is_invalid_prestate(self) -> bool:
        """
        Check whether the pre-state is definitely invalid.

        True when rows were added, none of them had satisfied preconditions,
        and no exception is sanctioned. Must be called after all rows are added.
        """
        self._frozen = True
        return (
            not self.is_empty
            and not self.has_satisfied_precondition
            and not self.exception_sets
        )

    def add_post_check(self, fallback: OutcomeChecker) -> OutcomeChecker:
        """
        Build the checker for this table.

        Args:
            fallback: checker to use when no specification constrains the call

        Returns:
            - ``fallback`` itself if the table is empty
            - an ExpectedExceptionChecker if any exception is sanctioned
            - an InvalidInputChecker if no precondition held
            - a PostconditionChecker in front of ``fallback`` if there are postconditions
            - ``fallback`` otherwise
        """
        self._frozen = True

        if self.is_empty:
            return fallback

        # Sanctioned exceptions override everything else
        if self.exception_sets:
            return ExpectedExceptionChecker(self.exception_sets)

        if not self.has_satisfied_precondition:
            return InvalidInputChecker()

        if self.postconditions:
            return PostconditionChecker(self.postconditions, fallback, self.prestate)

        return fallback

    def to_dict(self) -> Dict[str, Any]:
        """Summarize the table for logging and reports."""
        return {
            "is_empty": self.is_empty,
            "has_satisfied_precondition": self.has_satisfied_precondition,
            "postconditions": [str(p) for p in self.postconditions],
            "exception_sets": [[str(c) for c in clauses] for clauses in self.exception_sets],
            "invalid_prestate": (
                not self.is_empty
                and not self.has_satisfied_precondition
                and not self.exception_sets
            ),
        }
