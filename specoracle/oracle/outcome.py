"""
Execution outcomes and behavior classifications.

An execution outcome is what the call under test actually did: it either
returned a value or raised an exception. A classification is the verdict
an outcome checker renders for that outcome.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class BehaviorType(Enum):
    """Verdict categories for a classified call."""
    EXPECTED = "expected"  # Behavior permitted by the specifications
    ERROR = "error"        # Specification violation
    INVALID = "invalid"    # Illegitimate input, not a test of behavior

    @classmethod
    def from_string(cls, name: str) -> "BehaviorType":
        """Parse a behavior type from string."""
        behavior_map = {member.value: member for member in cls}
        if name.lower() not in behavior_map:
            raise ValueError(
                f"Unknown behavior type: {name}. Valid types: {list(behavior_map.keys())}"
            )
        return behavior_map[name.lower()]


class ExecutionOutcome(ABC):
    """Base class for the result of executing a call."""

    @abstractmethod
    def is_normal(self) -> bool:
        """Check if the call returned normally."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        pass


@dataclass(frozen=True)
class NormalExecution(ExecutionOutcome):
    """The call returned ``value``."""
    value: Any = None
    time_ns: int = 0

    def is_normal(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "normal",
            "value": repr(self.value),
            "time_ns": self.time_ns,
        }

    def __str__(self) -> str:
        return f"returned {self.value!r}"


@dataclass(frozen=True)
class ExceptionalExecution(ExecutionOutcome):
    """The call raised ``exception``."""
    exception: BaseException
    time_ns: int = 0

    @property
    def exception_type(self) -> type:
        return type(self.exception)

    def is_normal(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "exceptional",
            "exception_type": qualified_name(self.exception_type),
            "message": str(self.exception),
            "time_ns": self.time_ns,
        }

    def __str__(self) -> str:
        return f"raised {self.exception_type.__name__}: {self.exception}"


@dataclass(frozen=True)
class Classification:
    """
    Verdict for one execution outcome.

    ``deferred`` marks a verdict rendered by the fallback (ambient) contract
    rather than by any specification.
    """
    behavior: BehaviorType
    reason: str = ""
    checker: str = ""
    deferred: bool = False

    def is_expected(self) -> bool:
        return self.behavior == BehaviorType.EXPECTED

    def is_error(self) -> bool:
        return self.behavior == BehaviorType.ERROR

    def is_invalid(self) -> bool:
        return self.behavior == BehaviorType.INVALID

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "behavior": self.behavior.value,
            "reason": self.reason,
            "checker": self.checker,
            "deferred": self.deferred,
        }

    def __str__(self) -> str:
        origin = " (default contract)" if self.deferred else ""
        return f"{self.behavior.value.upper()}{origin}: {self.reason}"


def qualified_name(cls: type) -> str:
    """Dotted name of a class, without the module for builtins."""
    module = getattr(cls, "__module__", "builtins")
    if module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"
