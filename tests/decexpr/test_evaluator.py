"""
Tests for the expression evaluator.
"""

# pyright: reportArgumentType=false

from decimal import Decimal

import pytest

from decexpr.arithmetic import ONE, PrecisionContext
from decexpr.ast import BinaryOpNode, NumberLiteralNode, UnaryOpNode
from decexpr.errors import (
    DivisionByZeroError,
    DomainError,
    InvalidOperatorError,
    LimitExceededError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from decexpr.evaluator import (
    EvaluationContext,
    Evaluator,
    VariableEnvironment,
    evaluate,
)
from decexpr.parser import parse


def eval_expr(
    expression: str,
    variables: VariableEnvironment | None = None,
    precision: PrecisionContext | None = None,
) -> Decimal:
    """Helper to evaluate an expression, raising the first failure."""
    precision = precision or PrecisionContext()
    ast = parse(expression, precision)
    context = EvaluationContext(
        variables=variables if variables is not None else VariableEnvironment(),
        precision=precision,
        source=expression,
    )
    return Evaluator(context).evaluate(ast)


class TestArithmetic:
    """Tests for arithmetic operators."""

    def test_precedence(self):
        assert eval_expr("2+3*4") == 14

    def test_grouping_overrides_precedence(self):
        assert eval_expr("(2+3)*4") == 20

    def test_exponent_is_right_associative(self):
        assert eval_expr("2^3^2") == 512

    def test_unary_minus_and_power(self):
        assert eval_expr("-2^2") == -4
        assert eval_expr("(-2)^2") == 4
        assert eval_expr("2^-1") == Decimal("0.5")

    def test_double_negation(self):
        assert eval_expr("--3") == 3

    def test_division(self):
        assert eval_expr("7/2") == Decimal("3.5")

    def test_remainder(self):
        assert eval_expr("10 % 3") == 1
        assert eval_expr("-10 % 3") == -1

    def test_multiplication_is_exact(self):
        assert eval_expr("0.1 * 0.2") == Decimal("0.02")
        assert eval_expr("0.1 + 0.2") == Decimal("0.3")

    def test_addition_is_exact_beyond_precision(self):
        result = eval_expr("123456 + 1", precision=PrecisionContext(5))
        assert result == Decimal("123461")

    def test_division_rounds_to_precision(self):
        result = eval_expr("1/3", precision=PrecisionContext(10))
        assert result == Decimal("0.3333333333")

    def test_fractional_power(self):
        assert eval_expr("4^0.5") == 2
        assert abs(eval_expr("27^(1/3)") - 3) < Decimal("1e-12")


class TestComparisons:
    """Tests for comparison and equality operators."""

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("1 < 2", 1),
            ("2 < 1", 0),
            ("3 >= 3", 1),
            ("3 > 3", 0),
            ("2 <= 1", 0),
            ("2 == 2.00", 1),
            ("1 != 1", 0),
            ("1 != 2", 1),
        ],
    )
    def test_comparisons_yield_one_or_zero(self, expression, expected):
        assert eval_expr(expression) == expected


class TestLogical:
    """Tests for short-circuiting logical operators."""

    def test_or(self):
        assert eval_expr("0 || 2") == 1
        assert eval_expr("0 || 0.0") == 0

    def test_and(self):
        assert eval_expr("2 && 3") == 1
        assert eval_expr("2 && 0") == 0

    def test_or_skips_right_operand(self):
        variables = VariableEnvironment()
        assert eval_expr("1 || (x = 5)", variables) == 1
        assert "x" not in variables

    def test_and_skips_right_operand(self):
        variables = VariableEnvironment()
        assert eval_expr("0 && (x = 5)", variables) == 0
        assert "x" not in variables

    def test_right_operand_errors_are_skipped(self):
        assert eval_expr("1 || 1/0") == 1
        assert eval_expr("0 && undefined_name") == 0

    def test_right_operand_evaluated_when_needed(self):
        variables = VariableEnvironment()
        assert eval_expr("0 || (x = 5)", variables) == 1
        assert variables.lookup("x") == 5


class TestVariables:
    """Tests for variables and assignment."""

    def test_assignment_returns_and_stores_value(self):
        variables = VariableEnvironment()
        assert eval_expr("x = 4", variables) == 4
        assert eval_expr("x * 2", variables) == 8

    def test_lookup_is_case_insensitive(self):
        variables = VariableEnvironment({"Rate": Decimal("0.5")})
        assert eval_expr("RATE * 4", variables) == 2
        assert eval_expr("rate * 4", variables) == 2

    def test_chained_assignment(self):
        variables = VariableEnvironment()
        assert eval_expr("x = y = 3", variables) == 3
        assert variables.snapshot() == {"x": Decimal(3), "y": Decimal(3)}

    def test_undefined_variable(self):
        with pytest.raises(UndefinedVariableError) as exc_info:
            eval_expr("1 + foo")
        assert exc_info.value.name == "foo"
        assert exc_info.value.position == 4
        assert exc_info.value.message == "Undefined variable 'foo'"

    def test_failed_assignment_leaves_variable_undefined(self):
        variables = VariableEnvironment()
        with pytest.raises(DivisionByZeroError):
            eval_expr("x = 1/0", variables)
        assert "x" not in variables


class TestErrors:
    """Tests for evaluation errors."""

    def test_division_by_zero_is_located(self):
        with pytest.raises(DivisionByZeroError) as exc_info:
            eval_expr("1 + 5/0")
        assert exc_info.value.position == 5
        assert exc_info.value.expression == "1 + 5/0"

    def test_remainder_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            eval_expr("5 % 0")

    def test_zero_to_negative_power(self):
        with pytest.raises(DivisionByZeroError):
            eval_expr("0^-1")

    def test_negative_base_fractional_power(self):
        with pytest.raises(DomainError):
            eval_expr("(-8)^0.5")

    def test_integer_exponent_limit(self):
        with pytest.raises(LimitExceededError) as exc_info:
            eval_expr("2^1000000000")
        assert exc_info.value.position == 1

    def test_undefined_function_skips_arguments(self):
        variables = VariableEnvironment()
        with pytest.raises(UndefinedFunctionError) as exc_info:
            eval_expr("foo(x = 1)", variables)
        assert exc_info.value.name == "foo"
        assert "x" not in variables

    def test_invalid_binary_operator(self):
        node = BinaryOpNode(
            position=0,
            operator="**",
            left=NumberLiteralNode(position=0, value=ONE),
            right=NumberLiteralNode(position=3, value=ONE),
        )
        context = EvaluationContext(variables=VariableEnvironment())
        with pytest.raises(InvalidOperatorError):
            Evaluator(context).evaluate(node)

    def test_invalid_unary_operator(self):
        node = UnaryOpNode(
            position=0,
            operator="+",
            operand=NumberLiteralNode(position=1, value=ONE),
        )
        context = EvaluationContext(variables=VariableEnvironment())
        with pytest.raises(InvalidOperatorError):
            Evaluator(context).evaluate(node)


class TestEvaluateFunction:
    """Tests for the result-returning evaluate helper."""

    def test_success(self):
        context = EvaluationContext(variables=VariableEnvironment())
        result = evaluate(parse("1 + 1"), context)
        assert result.success
        assert result.value == 2
        assert result.error is None

    def test_failure(self):
        context = EvaluationContext(variables=VariableEnvironment())
        result = evaluate(parse("1/0"), context)
        assert not result.success
        assert result.value is None
        assert result.error == "Division by zero"


class TestImmutability:
    """Tests for tree immutability and idempotence."""

    def test_reevaluation_is_idempotent(self):
        variables = VariableEnvironment({"x": Decimal(4)})
        ast = parse("x * 2 + 1 / 3")
        context = EvaluationContext(variables=variables)
        evaluator = Evaluator(context)
        first = evaluator.evaluate(ast)
        assert all(evaluator.evaluate(ast) == first for _ in range(5))

    def test_evaluation_does_not_modify_tree(self):
        ast = parse("y = 2 * 3")
        Evaluator(EvaluationContext(variables=VariableEnvironment())).evaluate(ast)
        assert ast == parse("y = 2 * 3")


class TestVariableEnvironment:
    """Tests for VariableEnvironment."""

    def test_define_and_lookup(self):
        env = VariableEnvironment()
        env.define("Total", Decimal(3))
        assert env.lookup("TOTAL") == 3
        assert "total" in env
        assert list(env) == ["total"]
        assert len(env) == 1

    def test_lookup_missing(self):
        assert VariableEnvironment().lookup("x") is None

    def test_redefine_replaces(self):
        env = VariableEnvironment({"x": Decimal(1)})
        env.define("X", Decimal(2))
        assert env.snapshot() == {"x": Decimal(2)}

    def test_snapshot_is_a_copy(self):
        env = VariableEnvironment({"x": Decimal(1)})
        env.snapshot()["y"] = Decimal(2)
        assert "y" not in env
