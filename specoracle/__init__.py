"""
spec-oracle: Specification-based test oracle for generated call sequences

This package classifies the observed behavior of a generated call against
every specification that applies to the invoked operation, including the
specifications inherited from overridden or implemented declarations.

Verdicts:
    - expected: behavior permitted by the applicable specifications
    - error: behavior that violates a specification
    - invalid: the inputs are outside every specification's domain
"""

__version__ = "0.1.0"
__author__ = "spec-oracle Team"

from .oracle.outcome import BehaviorType, Classification

__all__ = ["BehaviorType", "Classification"]
