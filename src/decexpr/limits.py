"""
Resource limits for expression parsing and evaluation.

These limits keep scanning, parsing and tree-walking within the
interpreter's recursion depth and bound the cost of integer powers.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum nesting of parentheses, call arguments and unary/exponent chains
    max_nesting_depth: int = 48

    # Maximum AST depth (nesting level)
    max_ast_depth: int = 256

    # Maximum number of AST nodes
    max_ast_nodes: int = 2048

    # Maximum function call arguments
    max_function_args: int = 64

    # Maximum magnitude of the integer part of an exponent
    max_integer_exponent: int = 999_999_999

    # Maximum magnitude of round()'s decimal places argument
    max_round_places: int = 10_000


# Default expression limits.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_nesting_depth(
    depth: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates parser nesting depth while descending."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_nesting_depth:
        raise LimitExceededError("max_nesting_depth", limits.max_nesting_depth, depth)


def check_ast_depth(depth: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates AST depth after parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth)


def check_ast_node_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates AST node count after parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_function_arg_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates function argument count."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_function_args:
        raise LimitExceededError("max_function_args", limits.max_function_args, count)


def check_integer_exponent(
    magnitude: Union[int, Decimal], limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates the (non-negative) integer part of a power's exponent."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if magnitude > limits.max_integer_exponent:
        raise LimitExceededError(
            "max_integer_exponent", limits.max_integer_exponent, magnitude
        )


def check_round_places(
    magnitude: Union[int, Decimal], limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates the magnitude of round()'s decimal places argument."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if magnitude > limits.max_round_places:
        raise LimitExceededError(
            "max_round_places", limits.max_round_places, magnitude
        )
