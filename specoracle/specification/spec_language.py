"""
Specification language for operations under test.

A specification is written on one method declaration and consists of
preconditions, guarded postconditions (guard => property) and guarded
throws clauses (guard => exception is sanctioned).
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Union, Callable, Mapping
from enum import Enum
from abc import ABC, abstractmethod
from pathlib import Path
import builtins
import importlib
import json

import yaml

from ..oracle.outcome import qualified_name


class ConditionType(Enum):
    """Types of conditions in specifications."""
    EQUALITY = "eq"           # a == b
    INEQUALITY = "neq"        # a != b
    LESS_THAN = "lt"          # a < b
    LESS_EQUAL = "le"         # a <= b
    GREATER_THAN = "gt"       # a > b
    GREATER_EQUAL = "ge"      # a >= b
    IS_VALID = "valid"        # x is not None
    IS_IN_RANGE = "range"     # lo <= x <= hi
    IS_IN_SET = "in_set"      # x in {a, b, c}
    IMPLIES = "implies"       # a => b
    AND = "and"               # a && b
    OR = "or"                 # a || b
    NOT = "not"               # !a


@dataclass
class Expression(ABC):
    """Base class for expressions in specifications."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        pass

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expression":
        """Create expression from dictionary."""
        expr_type = data.get("type")
        if expr_type == "variable":
            return Variable(name=data["name"])
        elif expr_type == "constant":
            return Constant(value=data["value"])
        elif expr_type == "binary_op":
            return BinaryOp(
                op=data["op"],
                left=Expression.from_dict(data["left"]),
                right=Expression.from_dict(data["right"])
            )
        elif expr_type == "function_call":
            return FunctionCall(
                name=data["name"],
                args=[Expression.from_dict(arg) for arg in data.get("args", [])]
            )
        else:
            raise ValueError(f"Unknown expression type: {expr_type}")


@dataclass
class Variable(Expression):
    """
    Variable bound in the call's pre-state or post-state.

    Dotted names (``receiver.size``) read an attribute of a bound value.
    The return value of the call is bound as ``result``.
    """
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "variable", "name": self.name}

    def __str__(self) -> str:
        return self.name


@dataclass
class Constant(Expression):
    """Constant value in specification."""
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "constant", "value": self.value}

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return repr(self.value)
        return str(self.value)


@dataclass
class BinaryOp(Expression):
    """Arithmetic expression over two operands."""
    op: str  # +, -, *, /, %
    left: Expression
    right: Expression

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "binary_op",
            "op": self.op,
            "left": self.left.to_dict(),
            "right": self.right.to_dict()
        }

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass
class FunctionCall(Expression):
    """Call of a builtin measure function such as ``len`` or ``abs``."""
    name: str
    args: List[Expression] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "function_call",
            "name": self.name,
            "args": [arg.to_dict() for arg in self.args]
        }

    def __str__(self) -> str:
        args_str = ", ".join(str(arg) for arg in self.args)
        return f"{self.name}({args_str})"


@dataclass
class Condition:
    """
    Boolean condition over pre-state and post-state values.
    Can be atomic (comparison, validity check) or composite (and, or, implies).
    """
    cond_type: ConditionType
    operands: List[Union[Expression, "Condition"]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "type": self.cond_type.value,
            "operands": []
        }

        for op in self.operands:
            if isinstance(op, Condition):
                result["operands"].append({"condition": op.to_dict()})
            else:
                result["operands"].append({"expression": op.to_dict()})

        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        """Create condition from dictionary."""
        cond_type = ConditionType(data["type"])
        operands = []

        for op in data.get("operands", []):
            if "condition" in op:
                operands.append(Condition.from_dict(op["condition"]))
            elif "expression" in op:
                operands.append(Expression.from_dict(op["expression"]))

        return cls(cond_type=cond_type, operands=operands)

    def __str__(self) -> str:
        """Human-readable string representation."""
        t = self.cond_type
        ops = self.operands
        if t == ConditionType.EQUALITY:
            return f"{ops[0]} == {ops[1]}"
        elif t == ConditionType.INEQUALITY:
            return f"{ops[0]} != {ops[1]}"
        elif t == ConditionType.LESS_THAN:
            return f"{ops[0]} < {ops[1]}"
        elif t == ConditionType.LESS_EQUAL:
            return f"{ops[0]} <= {ops[1]}"
        elif t == ConditionType.GREATER_THAN:
            return f"{ops[0]} > {ops[1]}"
        elif t == ConditionType.GREATER_EQUAL:
            return f"{ops[0]} >= {ops[1]}"
        elif t == ConditionType.IS_VALID:
            return f"{ops[0]} is not None"
        elif t == ConditionType.IS_IN_RANGE:
            return f"{ops[1]} <= {ops[0]} <= {ops[2]}"
        elif t == ConditionType.IS_IN_SET:
            members = ", ".join(str(m) for m in ops[1:])
            return f"{ops[0]} in {{{members}}}"
        elif t == ConditionType.IMPLIES:
            return f"{ops[0]} => {ops[1]}"
        elif t == ConditionType.AND:
            return " && ".join(str(op) for op in ops) if ops else "true"
        elif t == ConditionType.OR:
            return " || ".join(str(op) for op in ops) if ops else "false"
        elif t == ConditionType.NOT:
            return f"!({ops[0]})"
        else:
            return f"Condition({t}, {ops})"

    # Convenience constructors
    @classmethod
    def eq(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.EQUALITY, [left, right])

    @classmethod
    def neq(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.INEQUALITY, [left, right])

    @classmethod
    def lt(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.LESS_THAN, [left, right])

    @classmethod
    def le(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.LESS_EQUAL, [left, right])

    @classmethod
    def gt(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.GREATER_THAN, [left, right])

    @classmethod
    def ge(cls, left: Expression, right: Expression) -> "Condition":
        return cls(ConditionType.GREATER_EQUAL, [left, right])

    @classmethod
    def valid(cls, expr: Expression) -> "Condition":
        return cls(ConditionType.IS_VALID, [expr])

    @classmethod
    def in_range(cls, var: Expression, lo: Expression, hi: Expression) -> "Condition":
        return cls(ConditionType.IS_IN_RANGE, [var, lo, hi])

    @classmethod
    def in_set(cls, var: Expression, *members: Expression) -> "Condition":
        return cls(ConditionType.IS_IN_SET, [var, *members])

    @classmethod
    def implies(cls, antecedent: "Condition", consequent: "Condition") -> "Condition":
        return cls(ConditionType.IMPLIES, [antecedent, consequent])

    @classmethod
    def and_(cls, *conditions: "Condition") -> "Condition":
        return cls(ConditionType.AND, list(conditions))

    @classmethod
    def or_(cls, *conditions: "Condition") -> "Condition":
        return cls(ConditionType.OR, list(conditions))

    @classmethod
    def not_(cls, condition: "Condition") -> "Condition":
        return cls(ConditionType.NOT, [condition])


class BooleanExpression:
    """
    A condition bound to the evaluator that decides it.

    This is the form in which postconditions reach the outcome table: the
    table only needs ``check(bindings)`` and a printable description.
    """

    def __init__(self, condition: Condition, evaluator=None, description: str = ""):
        self.condition = condition
        self.description = description or str(condition)
        if evaluator is None:
            from .evaluator import ConditionEvaluator
            evaluator = ConditionEvaluator()
        self.evaluator = evaluator

    def check(self, bindings: Mapping[str, Any]) -> bool:
        return self.evaluator.evaluate(self.condition, bindings)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"BooleanExpression({self.description!r})"


class Predicate:
    """Boolean expression backed by a Python callable over the bindings."""

    def __init__(self, func: Callable[[Mapping[str, Any]], bool], description: str = ""):
        self.func = func
        self.description = description or getattr(func, "__name__", "predicate")

    def check(self, bindings: Mapping[str, Any]) -> bool:
        return bool(self.func(bindings))

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"Predicate({self.description!r})"


def resolve_exception_type(name: str) -> type:
    """
    Resolve an exception class from its name.

    Builtin exceptions are found by bare name; anything else needs a dotted
    import path such as ``json.JSONDecodeError``.
    """
    if "." not in name:
        candidate = getattr(builtins, name, None)
    else:
        module_name, _, attr = name.rpartition(".")
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ValueError(f"Cannot import module for exception type {name}: {e}") from e
        candidate = getattr(module, attr, None)

    if not (isinstance(candidate, type) and issubclass(candidate, BaseException)):
        raise ValueError(f"Unknown exception type: {name}")
    return candidate


@dataclass(frozen=True)
class ThrowsClause:
    """An exception type sanctioned as an outcome, with an explanatory comment."""
    exception_type: type
    comment: str = ""

    def matches(self, raised: type) -> bool:
        """Check if a raised exception type is sanctioned by this clause."""
        return issubclass(raised, self.exception_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exception": qualified_name(self.exception_type),
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThrowsClause":
        return cls(
            exception_type=resolve_exception_type(data["exception"]),
            comment=data.get("comment", ""),
        )

    def __str__(self) -> str:
        name = self.exception_type.__name__
        return f"{name} ({self.comment})" if self.comment else name


@dataclass
class GuardPropertyPair:
    """If ``guard`` holds in the pre-state, ``property`` must hold in the post-state."""
    guard: Condition
    property: Condition
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guard": self.guard.to_dict(),
            "property": self.property.to_dict(),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuardPropertyPair":
        return cls(
            guard=Condition.from_dict(data["guard"]),
            property=Condition.from_dict(data["property"]),
            description=data.get("description", ""),
        )


@dataclass
class GuardThrowsPair:
    """If ``guard`` holds in the pre-state, the call is expected to raise."""
    guard: Condition
    throws_clause: ThrowsClause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guard": self.guard.to_dict(),
            "throws": self.throws_clause.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuardThrowsPair":
        return cls(
            guard=Condition.from_dict(data["guard"]),
            throws_clause=ThrowsClause.from_dict(data["throws"]),
        )


@dataclass
class OperationSpecification:
    """
    Specification written on a single declaration of an operation.

    Contains:
    - Preconditions: all must hold for the call to be a legitimate input
    - Post pairs: guarded properties of the normal post-state
    - Throws pairs: guarded exceptions the call is expected to raise
    """
    operation: str
    declared_in: str = ""
    preconditions: List[Condition] = field(default_factory=list)
    post_pairs: List[GuardPropertyPair] = field(default_factory=list)
    throws_pairs: List[GuardThrowsPair] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "operation": self.operation,
            "declared_in": self.declared_in,
            "preconditions": [c.to_dict() for c in self.preconditions],
            "post_pairs": [p.to_dict() for p in self.post_pairs],
            "throws_pairs": [p.to_dict() for p in self.throws_pairs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OperationSpecification":
        """Create specification from dictionary."""
        return cls(
            operation=data["operation"],
            declared_in=data.get("declared_in", ""),
            preconditions=[Condition.from_dict(c) for c in data.get("preconditions", [])],
            post_pairs=[GuardPropertyPair.from_dict(p) for p in data.get("post_pairs", [])],
            throws_pairs=[GuardThrowsPair.from_dict(p) for p in data.get("throws_pairs", [])],
        )

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "OperationSpecification":
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def save(self, filepath: str) -> None:
        """Save specification to a JSON or YAML file."""
        path = Path(filepath)
        with open(path, 'w') as f:
            if path.suffix in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str) -> "OperationSpecification":
        """Load specification from a JSON or YAML file."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Specification file not found: {filepath}")
        with open(path, 'r') as f:
            if path.suffix in (".yaml", ".yml"):
                return cls.from_dict(yaml.safe_load(f))
            return cls.from_json(f.read())

    def __str__(self) -> str:
        """Human-readable representation."""
        where = f" ({self.declared_in})" if self.declared_in else ""
        lines = [f"Specification for {self.operation}{where}"]

        if self.preconditions:
            lines.append("\nPreconditions:")
            for pre in self.preconditions:
                lines.append(f"  - {pre}")

        if self.post_pairs:
            lines.append("\nPostconditions:")
            for pair in self.post_pairs:
                lines.append(f"  - {pair.guard} => {pair.property}")

        if self.throws_pairs:
            lines.append("\nThrows:")
            for pair in self.throws_pairs:
                lines.append(f"  - {pair.guard} => {pair.throws_clause}")

        return "\n".join(lines)
