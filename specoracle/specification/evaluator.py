"""
Concrete evaluation of specification conditions with Z3.

Every variable in a condition is replaced by the Z3 literal of its bound
value, so the resulting formula is ground. Z3's simplifier decides most
formulas directly; anything left over is settled by the solver.
"""

from fractions import Fraction
from typing import Any, Mapping

import z3

from .spec_language import (
    BinaryOp,
    Condition,
    ConditionType,
    Constant,
    Expression,
    FunctionCall,
    Variable,
)


class ConditionEvaluationError(ValueError):
    """Raised when a condition cannot be decided for the given bindings."""


# Measure functions available to FunctionCall expressions
MEASURES = {
    "len": len,
    "abs": abs,
    "min": min,
    "max": max,
}


class ConditionEvaluator:
    """
    Decides conditions against concrete pre-state and post-state bindings.

    Supported value types are bool, int, float and str. Integer division and
    modulo follow SMT-LIB ``div``/``mod``.
    """

    def __init__(self, timeout_ms: int = 5000):
        self.timeout_ms = timeout_ms

    def evaluate(self, condition: Condition, bindings: Mapping[str, Any]) -> bool:
        """
        Evaluate a condition.

        Args:
            condition: Condition to decide
            bindings: Values of the variables the condition mentions

        Returns:
            True if the condition holds for the bindings

        Raises:
            ConditionEvaluationError: if a variable is unbound, a value has
                an unsupported type, or the condition is ill-sorted
        """
        try:
            term = self._condition_to_z3(condition, bindings)
            simplified = z3.simplify(term)
        except z3.Z3Exception as e:
            raise ConditionEvaluationError(f"Cannot evaluate '{condition}': {e}") from e

        if z3.is_true(simplified):
            return True
        if z3.is_false(simplified):
            return False
        return self._decide(term, condition)

    def _decide(self, term: z3.BoolRef, condition: Condition) -> bool:
        solver = z3.Solver()
        solver.set("timeout", self.timeout_ms)

        solver.add(z3.Not(term))
        if solver.check() == z3.unsat:
            return True

        solver.reset()
        solver.set("timeout", self.timeout_ms)
        solver.add(term)
        if solver.check() == z3.unsat:
            return False

        raise ConditionEvaluationError(f"Condition is indeterminate for the given values: {condition}")

    def _condition_to_z3(self, condition: Condition, bindings: Mapping[str, Any]) -> z3.BoolRef:
        t = condition.cond_type
        ops = condition.operands

        if t == ConditionType.IS_VALID:
            return z3.BoolVal(self._python_value(ops[0], bindings) is not None)

        if t in (ConditionType.AND, ConditionType.OR, ConditionType.NOT, ConditionType.IMPLIES):
            subterms = [self._operand_to_z3(op, bindings) for op in ops]
            if t == ConditionType.AND:
                return z3.And(*subterms) if subterms else z3.BoolVal(True)
            if t == ConditionType.OR:
                return z3.Or(*subterms) if subterms else z3.BoolVal(False)
            if t == ConditionType.NOT:
                return z3.Not(subterms[0])
            return z3.Implies(subterms[0], subterms[1])

        terms = [self._expr_to_z3(op, bindings) for op in ops]
        if t == ConditionType.EQUALITY:
            return terms[0] == terms[1]
        elif t == ConditionType.INEQUALITY:
            return terms[0] != terms[1]
        elif t == ConditionType.LESS_THAN:
            return terms[0] < terms[1]
        elif t == ConditionType.LESS_EQUAL:
            return terms[0] <= terms[1]
        elif t == ConditionType.GREATER_THAN:
            return terms[0] > terms[1]
        elif t == ConditionType.GREATER_EQUAL:
            return terms[0] >= terms[1]
        elif t == ConditionType.IS_IN_RANGE:
            var, lo, hi = terms
            return z3.And(lo <= var, var <= hi)
        elif t == ConditionType.IS_IN_SET:
            var = terms[0]
            return z3.Or(*[var == m for m in terms[1:]]) if len(terms) > 1 else z3.BoolVal(False)

        raise ConditionEvaluationError(f"Unknown condition type: {t}")

    def _operand_to_z3(self, operand, bindings: Mapping[str, Any]) -> z3.BoolRef:
        if isinstance(operand, Condition):
            return self._condition_to_z3(operand, bindings)
        term = self._expr_to_z3(operand, bindings)
        if not z3.is_bool(term):
            raise ConditionEvaluationError(f"Operand is not boolean: {operand}")
        return term

    def _expr_to_z3(self, expr: Expression, bindings: Mapping[str, Any]) -> z3.ExprRef:
        if isinstance(expr, BinaryOp):
            left = self._expr_to_z3(expr.left, bindings)
            right = self._expr_to_z3(expr.right, bindings)
            if expr.op == "+":
                return left + right
            elif expr.op == "-":
                return left - right
            elif expr.op == "*":
                return left * right
            elif expr.op in ("/", "%"):
                if z3.is_true(z3.simplify(right == 0)):
                    raise ConditionEvaluationError(f"Division by zero in {expr}")
                return left / right if expr.op == "/" else left % right
            raise ConditionEvaluationError(f"Unknown operator: {expr.op}")
        return self._to_z3(self._python_value(expr, bindings), expr)

    def _python_value(self, expr: Expression, bindings: Mapping[str, Any]) -> Any:
        if isinstance(expr, Constant):
            return expr.value
        if isinstance(expr, Variable):
            return self._lookup(expr.name, bindings)
        if isinstance(expr, FunctionCall):
            func = MEASURES.get(expr.name)
            if func is None:
                raise ConditionEvaluationError(f"Unknown function: {expr.name}")
            args = [self._python_value(arg, bindings) for arg in expr.args]
            try:
                return func(*args)
            except (TypeError, ValueError) as e:
                raise ConditionEvaluationError(f"Cannot evaluate {expr}: {e}") from e
        raise ConditionEvaluationError(f"Expression has no concrete value: {expr}")

    def _lookup(self, name: str, bindings: Mapping[str, Any]) -> Any:
        root, *attrs = name.split(".")
        if root not in bindings:
            raise ConditionEvaluationError(f"Unbound variable: {root}")
        value = bindings[root]
        for attr in attrs:
            try:
                value = getattr(value, attr)
            except AttributeError as e:
                raise ConditionEvaluationError(f"Cannot read {name}: {e}") from e
        return value

    def _to_z3(self, value: Any, expr: Expression) -> z3.ExprRef:
        # bool first: bool is a subclass of int
        if isinstance(value, bool):
            return z3.BoolVal(value)
        if isinstance(value, int):
            return z3.IntVal(value)
        if isinstance(value, float):
            if value != value or value in (float("inf"), float("-inf")):
                raise ConditionEvaluationError(f"Non-finite value for {expr}: {value}")
            frac = Fraction(value)
            return z3.RealVal(f"{frac.numerator}/{frac.denominator}")
        if isinstance(value, str):
            return z3.StringVal(value)
        raise ConditionEvaluationError(
            f"Unsupported value type for {expr}: {type(value).__name__}"
        )
