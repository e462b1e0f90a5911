"""
Outcome classification for generated calls.

Components:
- Execution outcomes and behavior classifications
- Outcome checkers (expected exception, invalid input, postcondition, default contract)
- Expected outcome table combining the specifications of overriding declarations
"""

from .outcome import (
    BehaviorType,
    Classification,
    ExecutionOutcome,
    NormalExecution,
    ExceptionalExecution,
)
from .checks import (
    OutcomeChecker,
    ExpectedExceptionChecker,
    InvalidInputChecker,
    PostconditionChecker,
    DefaultContractChecker,
    CheckerReuseError,
)
from .outcome_table import ExpectedOutcomeTable, OutcomeTableFrozenError
from .execution import execute

__all__ = [
    # Outcomes
    "BehaviorType",
    "Classification",
    "ExecutionOutcome",
    "NormalExecution",
    "ExceptionalExecution",
    # Checkers
    "OutcomeChecker",
    "ExpectedExceptionChecker",
    "InvalidInputChecker",
    "PostconditionChecker",
    "DefaultContractChecker",
    "CheckerReuseError",
    # Table
    "ExpectedOutcomeTable",
    "OutcomeTableFrozenError",
    # Execution
    "execute",
]
