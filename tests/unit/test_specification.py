"""
Unit tests for specification module.
"""

import json

import pytest

from specoracle.oracle.outcome import BehaviorType, ExceptionalExecution, NormalExecution
from specoracle.oracle.checks import DefaultContractChecker
from specoracle.oracle.outcome_table import ExpectedOutcomeTable
from specoracle.specification.evaluator import ConditionEvaluationError, ConditionEvaluator
from specoracle.specification.operation_conditions import OperationConditions
from specoracle.specification.spec_language import (
    BinaryOp,
    BooleanExpression,
    Condition,
    ConditionType,
    Constant,
    FunctionCall,
    GuardPropertyPair,
    GuardThrowsPair,
    OperationSpecification,
    Predicate,
    ThrowsClause,
    Variable,
    resolve_exception_type,
)


class TestCondition:
    """Tests for Condition class."""

    def test_eq_condition(self):
        cond = Condition.eq(Variable("x"), Constant(5))

        assert cond.cond_type == ConditionType.EQUALITY
        assert cond.operands[0].name == "x"
        assert cond.operands[1].value == 5

    def test_string_constant_is_quoted(self):
        cond = Condition.in_set(Variable("mode"), Constant("r"), Constant(1))

        assert str(cond) == "mode in {'r', 1}"

    def test_expression_dict_carries_value_only(self):
        assert Constant("w").to_dict() == {"type": "constant", "value": "w"}
        assert Variable("x").to_dict() == {"type": "variable", "name": "x"}

    def test_str(self):
        cond = Condition.and_(
            Condition.ge(Variable("index"), Constant(0)),
            Condition.lt(Variable("index"), FunctionCall("len", [Variable("items")])),
        )

        assert str(cond) == "index >= 0 && index < len(items)"

    def test_dict_round_trip(self):
        cond = Condition.or_(
            Condition.in_range(Variable("x"), Constant(0), Constant(9)),
            Condition.not_(Condition.valid(Variable("y"))),
        )

        assert Condition.from_dict(cond.to_dict()) == cond


class TestEvaluator:
    """Tests for concrete condition evaluation."""

    @pytest.fixture
    def evaluator(self):
        return ConditionEvaluator()

    def test_comparison(self, evaluator):
        cond = Condition.gt(Variable("x"), Constant(3))

        assert evaluator.evaluate(cond, {"x": 4}) is True
        assert evaluator.evaluate(cond, {"x": 3}) is False

    def test_arithmetic(self, evaluator):
        cond = Condition.eq(Variable("result"), BinaryOp("+", Variable("a"), Variable("b")))

        assert evaluator.evaluate(cond, {"a": 2, "b": 3, "result": 5})
        assert not evaluator.evaluate(cond, {"a": 2, "b": 3, "result": 6})

    def test_mixed_int_and_float(self, evaluator):
        cond = Condition.le(Variable("x"), Constant(2.5))

        assert evaluator.evaluate(cond, {"x": 2})

    def test_length_and_attribute(self, evaluator):
        class Stack:
            def __init__(self, items):
                self.items = items

        cond = Condition.lt(Variable("i"), FunctionCall("len", [Variable("stack.items")]))

        assert evaluator.evaluate(cond, {"i": 1, "stack": Stack([1, 2])})
        assert not evaluator.evaluate(cond, {"i": 2, "stack": Stack([1, 2])})

    def test_strings(self, evaluator):
        cond = Condition.in_set(Variable("mode"), Constant("r"), Constant("w"))

        assert evaluator.evaluate(cond, {"mode": "w"})
        assert not evaluator.evaluate(cond, {"mode": "a"})

    def test_valid_checks_none(self, evaluator):
        cond = Condition.valid(Variable("ptr"))

        assert evaluator.evaluate(cond, {"ptr": object()})
        assert not evaluator.evaluate(cond, {"ptr": None})

    def test_boolean_connectives(self, evaluator):
        cond = Condition.implies(
            Condition.eq(Variable("flag"), Constant(True)),
            Condition.gt(Variable("n"), Constant(0)),
        )

        assert evaluator.evaluate(cond, {"flag": False, "n": -1})
        assert not evaluator.evaluate(cond, {"flag": True, "n": -1})

    def test_empty_and_is_true(self, evaluator):
        assert evaluator.evaluate(Condition.and_(), {})

    def test_unbound_variable(self, evaluator):
        with pytest.raises(ConditionEvaluationError, match="Unbound variable"):
            evaluator.evaluate(Condition.gt(Variable("x"), Constant(0)), {})

    def test_unsupported_value(self, evaluator):
        with pytest.raises(ConditionEvaluationError, match="Unsupported value type"):
            evaluator.evaluate(Condition.gt(Variable("x"), Constant(0)), {"x": [1]})

    def test_sort_mismatch(self, evaluator):
        with pytest.raises(ConditionEvaluationError):
            evaluator.evaluate(Condition.eq(Variable("x"), Constant(0)), {"x": "zero"})

    def test_division_by_zero(self, evaluator):
        cond = Condition.eq(BinaryOp("/", Variable("a"), Variable("b")), Constant(1))

        with pytest.raises(ConditionEvaluationError, match="Division by zero"):
            evaluator.evaluate(cond, {"a": 1, "b": 0})


class TestThrowsClause:
    """Tests for ThrowsClause and exception resolution."""

    def test_resolve_builtin(self):
        assert resolve_exception_type("ValueError") is ValueError

    def test_resolve_dotted(self):
        assert resolve_exception_type("json.JSONDecodeError") is json.JSONDecodeError

    def test_resolve_unknown(self):
        with pytest.raises(ValueError):
            resolve_exception_type("NoSuchError")

    def test_resolve_non_exception(self):
        with pytest.raises(ValueError):
            resolve_exception_type("dict")

    def test_matches_subclass(self):
        clause = ThrowsClause(ArithmeticError)

        assert clause.matches(ZeroDivisionError)
        assert not clause.matches(KeyError)

    def test_dict_round_trip(self):
        clause = ThrowsClause(json.JSONDecodeError, "malformed input")

        assert clause.to_dict() == {"exception": "json.decoder.JSONDecodeError", "comment": "malformed input"}
        assert ThrowsClause.from_dict(clause.to_dict()) == clause


def _pop_specification(declared_in: str) -> OperationSpecification:
    """Specification of ``pop(items)``: non-empty input returns the last item."""
    return OperationSpecification(
        operation="pop",
        declared_in=declared_in,
        preconditions=[Condition.gt(FunctionCall("len", [Variable("items")]), Constant(0))],
        post_pairs=[
            GuardPropertyPair(
                guard=Condition.and_(),
                property=Condition.valid(Variable("result")),
                description="result is not None",
            )
        ],
    )


def _empty_pop_specification() -> OperationSpecification:
    """Overridden declaration: popping an empty sequence raises IndexError."""
    return OperationSpecification(
        operation="pop",
        declared_in="Sequence",
        throws_pairs=[
            GuardThrowsPair(
                guard=Condition.eq(FunctionCall("len", [Variable("items")]), Constant(0)),
                throws_clause=ThrowsClause(IndexError, "empty sequence"),
            )
        ],
    )


class TestOperationSpecification:
    """Tests for OperationSpecification serialization."""

    def test_json_round_trip(self):
        spec = _pop_specification("Stack")

        assert OperationSpecification.from_json(spec.to_json()) == spec

    def test_save_and_load_yaml(self, tmp_path):
        spec = _empty_pop_specification()
        path = tmp_path / "pop.yaml"
        spec.save(str(path))

        assert OperationSpecification.load(str(path)) == spec

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            OperationSpecification.load(str(tmp_path / "missing.json"))

    def test_str(self):
        text = str(_empty_pop_specification())

        assert "Specification for pop (Sequence)" in text
        assert "IndexError (empty sequence)" in text


class TestOperationConditions:
    """Tests for checking an override closure against a pre-state."""

    def test_empty_closure_gives_empty_table(self):
        table = OperationConditions().check_prestate({"items": [1]})

        assert table.is_empty
        assert not table.is_invalid_prestate()

    def test_one_row_per_specification(self):
        conditions = OperationConditions([_pop_specification("Stack"), _empty_pop_specification()])
        table = conditions.check_prestate({"items": [1, 2]})

        assert not table.is_empty
        assert table.has_satisfied_precondition
        assert len(table.postconditions) == 1
        assert isinstance(table.postconditions[0], BooleanExpression)
        assert table.exception_sets == []

    def test_throws_guard_fires_without_precondition(self):
        """The overriding declaration's precondition fails but the exception is sanctioned."""
        conditions = OperationConditions([_pop_specification("Stack"), _empty_pop_specification()])
        table = conditions.check_prestate({"items": []})

        assert table.exception_sets == [[ThrowsClause(IndexError, "empty sequence")]]
        assert not table.is_invalid_prestate()
        checker = table.add_post_check(DefaultContractChecker())
        assert checker.check(ExceptionalExecution(IndexError("pop"))).behavior == BehaviorType.EXPECTED

    def test_no_precondition_holds(self):
        conditions = OperationConditions([_pop_specification("Stack")])
        table = conditions.check_prestate({"items": []})

        assert table.is_invalid_prestate()

    def test_first_satisfied_post_pair_is_used(self):
        spec = OperationSpecification(
            operation="abs",
            post_pairs=[
                GuardPropertyPair(
                    Condition.lt(Variable("x"), Constant(0)),
                    Condition.eq(Variable("result"), BinaryOp("-", Constant(0), Variable("x"))),
                    "result == -x",
                ),
                GuardPropertyPair(
                    Condition.and_(),
                    Condition.eq(Variable("result"), Variable("x")),
                    "result == x",
                ),
            ],
        )
        table = OperationConditions([spec]).check_prestate({"x": -4})

        assert [str(p) for p in table.postconditions] == ["result == -x"]
        checker = table.add_post_check(DefaultContractChecker())
        assert checker.check(NormalExecution(4)).is_expected()

    def test_from_files(self, tmp_path):
        paths = []
        for i, spec in enumerate([_pop_specification("Stack"), _empty_pop_specification()]):
            path = tmp_path / f"spec{i}.json"
            spec.save(str(path))
            paths.append(str(path))

        conditions = OperationConditions.from_files(paths)

        assert [s.declared_in for s in conditions] == ["Stack", "Sequence"]

    @pytest.mark.parametrize("items", [[], [1, 2]])
    @pytest.mark.parametrize(
        "outcome",
        [NormalExecution(7), NormalExecution(None), ExceptionalExecution(IndexError("pop"))],
    )
    def test_override_chain_matches_hand_assembled_table(self, items, outcome):
        """Checking the closure gives the same verdicts as adding its rows by hand."""
        non_empty = len(items) > 0
        hand_table = ExpectedOutcomeTable(prestate={"items": items})
        hand_table.add(
            non_empty,
            Predicate(lambda b: b["result"] is not None, "result is not None"),
            [],
        )
        hand_table.add(
            True,
            None,
            [] if non_empty else [ThrowsClause(IndexError, "empty sequence")],
        )

        conditions = OperationConditions([_pop_specification("Stack"), _empty_pop_specification()])
        table = conditions.check_prestate({"items": items})

        assert table.is_invalid_prestate() == hand_table.is_invalid_prestate()
        assert table.exception_sets == hand_table.exception_sets
        expected = hand_table.add_post_check(DefaultContractChecker()).check(outcome)
        actual = table.add_post_check(DefaultContractChecker()).check(outcome)
        assert actual.behavior == expected.behavior
        assert actual.checker == expected.checker
