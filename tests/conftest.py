"""Shared fixtures for spec-oracle tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from specoracle.oracle.checks import DefaultContractChecker
from specoracle.specification.spec_language import Predicate, ThrowsClause


@pytest.fixture
def fallback():
    """Default contract: returns are expected, exceptions are errors."""
    return DefaultContractChecker()


@pytest.fixture
def result_positive():
    return Predicate(lambda b: b["result"] > 0, "result > 0")


@pytest.fixture
def illegal_state():
    return [ThrowsClause(RuntimeError, "object is closed")]
