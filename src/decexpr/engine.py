"""
Expression engine facade.

Owns the per-instance state (precision context, variables, functions) and
runs the tokenize -> parse -> evaluate pipeline over it.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from .arithmetic import (
    PrecisionContext,
    RoundingMode,
    compute_e,
    compute_pi,
    round_to_context,
    to_display_string,
)
from .ast import AstNode
from .builtins import UserFunction, create_function_registry, user_function
from .config import EngineConfig, load_config
from .errors import ExpressionError
from .evaluator import EvaluationContext, Evaluator, VariableEnvironment
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .parser import parse

logger = logging.getLogger("decexpr.engine")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

DefinableValue = Union[int, float, Decimal, str]


class ExpressionEngine:
    """
    Evaluates arithmetic expressions with arbitrary-precision decimals.

    Each instance has its own variables and function registry, so engines
    never observe each other's assignments or registrations. Variables
    assigned inside an expression persist across calls on the same engine.

    Example:
        engine = ExpressionEngine({"precision": 10})
        engine.evaluate("x = 1 / 3")      # Decimal('0.3333333333')
        engine.evaluate("X * 3")          # Decimal('0.9999999999')
    """

    def __init__(self, config: Optional[Union[EngineConfig, Dict[str, Any]]] = None):
        config = load_config(config)

        self._precision = PrecisionContext(config.precision, config.rounding_mode)
        self._limits = config.expression_limits or DEFAULT_EXPRESSION_LIMITS
        self._variables = VariableEnvironment()
        self._functions = create_function_registry()

        self._variables.define("pi", compute_pi(self._precision))
        self._variables.define("e", compute_e(self._precision))

        for name, value in config.variables.items():
            self.define(name, value)

        logger.debug(
            "expression_engine_created",
            extra={
                "precision": self._precision.precision,
                "rounding_mode": self._precision.rounding_mode.value,
                "variable_count": len(self._variables),
            },
        )

    # ============================================================
    # Configuration
    # ============================================================

    @property
    def precision(self) -> PrecisionContext:
        return self._precision

    @property
    def rounding_mode(self) -> RoundingMode:
        return self._precision.rounding_mode

    @property
    def limits(self) -> ExpressionLimits:
        return self._limits

    @property
    def variables(self) -> Dict[str, Decimal]:
        """Snapshot of the current variables, keyed by lowercase name."""
        return self._variables.snapshot()

    def set_precision(self, precision: int) -> "ExpressionEngine":
        """
        Sets the number of significant digits for lossy operations.

        Already-defined values (including pi and e) are kept as they are.
        """
        self._precision = self._precision.with_precision(precision)
        logger.debug("precision_changed", extra={"precision": precision})
        return self

    def set_rounding_mode(
        self, rounding_mode: Union[RoundingMode, str]
    ) -> "ExpressionEngine":
        self._precision = self._precision.with_rounding_mode(rounding_mode)
        logger.debug(
            "rounding_mode_changed",
            extra={"rounding_mode": self._precision.rounding_mode.value},
        )
        return self

    # ============================================================
    # Variables and functions
    # ============================================================

    def define(self, name: str, value: DefinableValue) -> "ExpressionEngine":
        """
        Defines (or replaces) a variable.

        Numbers are rounded to the active precision context. A string is
        evaluated as an expression on this engine and its result stored.

        Raises:
            ValueError: If the name is not an identifier or a float is not finite
            TypeError: If the value has an unsupported type
            ExpressionError: If a string value fails to evaluate
        """
        if not isinstance(name, str) or not _IDENTIFIER.fullmatch(name):
            raise ValueError(f"Invalid variable name: {name!r}")

        self._variables.define(name, self._to_decimal(value))
        return self

    def _to_decimal(self, value: DefinableValue) -> Decimal:
        if isinstance(value, bool):
            raise TypeError("Boolean values cannot be defined as variables")
        if isinstance(value, str):
            return self.evaluate(value)
        if isinstance(value, float):
            value = Decimal(repr(value))
            if not value.is_finite():
                raise ValueError(f"Cannot define non-finite value {value}")
        elif isinstance(value, int):
            value = Decimal(value)
        elif not isinstance(value, Decimal):
            raise TypeError(f"Unsupported variable value type: {type(value).__name__}")
        elif not value.is_finite():
            raise ValueError(f"Cannot define non-finite value {value}")
        return round_to_context(value, self._precision)

    def register_function(
        self,
        name: str,
        function: UserFunction,
        min_args: Optional[int] = None,
        max_args: Optional[int] = None,
    ) -> "ExpressionEngine":
        """
        Registers (or replaces) a function on this engine only.

        The callable receives the evaluated arguments as a list of Decimals.
        """
        if not isinstance(name, str) or not _IDENTIFIER.fullmatch(name):
            raise ValueError(f"Invalid function name: {name!r}")
        if min_args is not None and max_args is not None and min_args > max_args:
            raise ValueError(
                f"min_args ({min_args}) cannot exceed max_args ({max_args})"
            )

        self._functions.register(user_function(name, function, min_args, max_args))
        logger.debug("function_registered", extra={"function": name})
        return self

    def has_function(self, name: str) -> bool:
        return name in self._functions

    # ============================================================
    # Evaluation
    # ============================================================

    def compile(self, text: str) -> AstNode:
        """Parses an expression into a reusable AST."""
        return parse(text, self._precision, self._limits)

    def evaluate_ast(self, ast: AstNode, source: Optional[str] = None) -> Decimal:
        """Evaluates a compiled AST against this engine's state."""
        context = EvaluationContext(
            variables=self._variables,
            functions=self._functions,
            precision=self._precision,
            limits=self._limits,
            source=source,
        )
        return Evaluator(context).evaluate(ast)

    def evaluate(self, text: str) -> Decimal:
        """
        Evaluates an expression and returns its value.

        Raises:
            ExpressionError: The first tokenizer, parser, limit or evaluation
                failure, unchanged
        """
        return self.evaluate_ast(self.compile(text), text)

    def evaluate_to_display_string(self, text: str) -> str:
        """
        Evaluates an expression and renders the result for display.

        Never raises: failures are returned as their message.
        """
        try:
            value = self.evaluate(text)
            return to_display_string(value, self._precision)
        except ExpressionError as e:
            logger.debug(
                "expression_failed",
                extra={"error_type": type(e).__name__, "error": e.message},
            )
            return e.message
        except Exception as e:
            logger.warning(
                "unexpected_evaluation_error",
                extra={"error_type": type(e).__name__},
                exc_info=True,
            )
            return str(e) or "unknown error"
