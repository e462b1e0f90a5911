"""
Specification module for spec-oracle.
Describes the contracts written on operation declarations and checks them
against a call's pre-state.
"""

from .spec_language import (
    Condition,
    ConditionType,
    Expression,
    Variable,
    Constant,
    BinaryOp,
    FunctionCall,
    BooleanExpression,
    Predicate,
    ThrowsClause,
    GuardPropertyPair,
    GuardThrowsPair,
    OperationSpecification,
    resolve_exception_type,
)
from .evaluator import ConditionEvaluator, ConditionEvaluationError
from .operation_conditions import OperationConditions

__all__ = [
    # Condition language
    "Condition",
    "ConditionType",
    "Expression",
    "Variable",
    "Constant",
    "BinaryOp",
    "FunctionCall",
    "BooleanExpression",
    "Predicate",
    # Specifications
    "ThrowsClause",
    "GuardPropertyPair",
    "GuardThrowsPair",
    "OperationSpecification",
    "resolve_exception_type",
    # Evaluation
    "ConditionEvaluator",
    "ConditionEvaluationError",
    "OperationConditions",
]
