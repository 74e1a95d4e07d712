"""
Expression evaluator.

Walks an AST and computes a Decimal under the active precision context.

Evaluation semantics:
- Variables and functions are resolved case-insensitively.
- Binary operators evaluate both operands; comparisons yield 1 or 0.
- ``||`` and ``&&`` short-circuit: the right operand (and any assignment
  inside it) is skipped when the left operand decides the result.
- Function arguments are always evaluated, left to right, after the
  function name has been resolved.
- The tree is never modified; assignments only change the variable
  environment.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, Optional, cast

from .arithmetic import (
    DEFAULT_PRECISION_CONTEXT,
    ONE,
    ZERO,
    PrecisionContext,
    add,
    compare,
    divide,
    from_bool,
    is_truthy,
    multiply,
    negate,
    power,
    remainder,
    subtract,
    values_equal,
)
from .ast import (
    AssignNode,
    AstNode,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    GroupingNode,
    LogicalOpNode,
    NumberLiteralNode,
    UnaryOpNode,
    VariableNode,
)
from .builtins import BuiltinContext, FunctionRegistry, create_function_registry
from .errors import (
    ExpressionError,
    InvalidOperatorError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

logger = logging.getLogger("decexpr.evaluator")


class VariableEnvironment:
    """Mutable, case-insensitive name -> Decimal bindings."""

    def __init__(self, initial: Optional[Dict[str, Decimal]] = None):
        self._values: Dict[str, Decimal] = {}
        for name, value in (initial or {}).items():
            self.define(name, value)

    def define(self, name: str, value: Decimal) -> None:
        self._values[name.lower()] = value

    def lookup(self, name: str) -> Optional[Decimal]:
        return self._values.get(name.lower())

    def snapshot(self) -> Dict[str, Decimal]:
        """Returns a copy of the bindings keyed by lowercase name."""
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


@dataclass
class EvaluationContext:
    """Evaluation context with variable bindings and functions."""

    variables: VariableEnvironment
    """Variable bindings; assignments write here."""

    functions: Optional[FunctionRegistry] = None
    """Function registry for built-ins and registered functions."""

    precision: PrecisionContext = DEFAULT_PRECISION_CONTEXT
    """Precision and rounding for division, remainder and power."""

    limits: Optional[ExpressionLimits] = None
    """Expression limits."""

    source: Optional[str] = None
    """Source expression for error reporting."""


@dataclass
class EvaluationResult:
    """Result of expression evaluation."""

    value: Optional[Decimal]
    """The evaluated value (None on failure)."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""


class Evaluator:
    """Evaluates an AST node and returns the result."""

    def __init__(self, context: EvaluationContext):
        self._variables = context.variables
        self._functions = (
            context.functions
            if context.functions is not None
            else create_function_registry()
        )
        self._precision = context.precision
        self._limits = context.limits or DEFAULT_EXPRESSION_LIMITS
        self._source = context.source

    def evaluate(self, node: AstNode) -> Decimal:
        """Evaluates an AST node and returns the value."""
        node_type = node.type

        if node_type == "NumberLiteral":
            return cast(NumberLiteralNode, node).value

        if node_type == "Variable":
            return self._evaluate_variable(cast(VariableNode, node))

        if node_type == "Grouping":
            return self.evaluate(cast(GroupingNode, node).expression)

        if node_type == "Assign":
            return self._evaluate_assign(cast(AssignNode, node))

        if node_type == "FunctionCall":
            return self._evaluate_function_call(cast(FunctionCallNode, node))

        if node_type == "UnaryOp":
            return self._evaluate_unary_op(cast(UnaryOpNode, node))

        if node_type == "BinaryOp":
            return self._evaluate_binary_op(cast(BinaryOpNode, node))

        if node_type == "LogicalOp":
            return self._evaluate_logical_op(cast(LogicalOpNode, node))

        raise InvalidOperatorError(node_type, node.position, self._source)

    def _locate(self, error: ExpressionError, position: int) -> ExpressionError:
        """Attaches the node position to errors raised without one."""
        if error.position is None:
            error.position = position
            error.expression = self._source
        return error

    def _evaluate_variable(self, node: VariableNode) -> Decimal:
        value = self._variables.lookup(node.name)
        if value is None:
            raise UndefinedVariableError(node.name, node.position, self._source)
        return value

    def _evaluate_assign(self, node: AssignNode) -> Decimal:
        value = self.evaluate(node.value)
        self._variables.define(node.name, value)
        logger.debug(
            "variable_assigned",
            extra={"variable": node.name, "value": str(value)},
        )
        return value

    def _evaluate_function_call(self, node: FunctionCallNode) -> Decimal:
        """Evaluates a function call."""
        descriptor = self._functions.get(node.name)
        if descriptor is None:
            raise UndefinedFunctionError(node.name, node.position, self._source)

        args = [self.evaluate(arg) for arg in node.args]

        builtin_context = BuiltinContext(
            precision=self._precision,
            limits=self._limits,
            position=node.position,
            source=self._source,
        )

        try:
            return descriptor(args, builtin_context)
        except ExpressionError as error:
            raise self._locate(error, node.position)

    def _evaluate_unary_op(self, node: UnaryOpNode) -> Decimal:
        """Evaluates a unary operation."""
        value = self.evaluate(node.operand)

        if node.operator == "-":
            return negate(value)

        raise InvalidOperatorError(node.operator, node.position, self._source)

    def _evaluate_logical_op(self, node: LogicalOpNode) -> Decimal:
        """Evaluates || and && with short-circuiting."""
        left_value = self.evaluate(node.left)

        if node.operator == "||":
            if is_truthy(left_value):
                return ONE
            return from_bool(is_truthy(self.evaluate(node.right)))

        if node.operator == "&&":
            if not is_truthy(left_value):
                return ZERO
            return from_bool(is_truthy(self.evaluate(node.right)))

        raise InvalidOperatorError(node.operator, node.position, self._source)

    def _evaluate_binary_op(self, node: BinaryOpNode) -> Decimal:
        """Evaluates a binary operation (both operands, left first)."""
        left_value = self.evaluate(node.left)
        right_value = self.evaluate(node.right)

        try:
            return self._apply_binary(node.operator, left_value, right_value)
        except ExpressionError as error:
            raise self._locate(error, node.position)

    def _apply_binary(
        self, operator: BinaryOperator, left: Decimal, right: Decimal
    ) -> Decimal:
        # Arithmetic operators
        if operator == "+":
            return add(left, right)

        if operator == "-":
            return subtract(left, right)

        if operator == "*":
            return multiply(left, right)

        if operator == "/":
            return divide(left, right, self._precision)

        if operator == "%":
            return remainder(left, right, self._precision)

        if operator == "^":
            return power(left, right, self._precision, self._limits)

        # Equality operators (numeric, scale-insensitive)
        if operator == "==":
            return from_bool(values_equal(left, right))

        if operator == "!=":
            return from_bool(not values_equal(left, right))

        # Comparison operators
        order = compare(left, right)

        if operator == ">":
            return from_bool(order > 0)

        if operator == ">=":
            return from_bool(order >= 0)

        if operator == "<":
            return from_bool(order < 0)

        if operator == "<=":
            return from_bool(order <= 0)

        raise InvalidOperatorError(operator)


def evaluate(ast: AstNode, context: EvaluationContext) -> EvaluationResult:
    """
    Evaluates an AST against a context and returns the result.

    Expression errors are captured in the result instead of being raised.

    Args:
        ast: The AST to evaluate
        context: The evaluation context with variables and functions

    Returns:
        The evaluation result with value and success status
    """
    try:
        evaluator = Evaluator(context)
        value = evaluator.evaluate(ast)
        return EvaluationResult(value=value, success=True)
    except ExpressionError as error:
        return EvaluationResult(value=None, success=False, error=str(error))
