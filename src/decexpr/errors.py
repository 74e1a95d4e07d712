"""
Error types for the expression engine.

All expression errors extend ExpressionError for consistent handling.
"""

from decimal import Decimal
from typing import Optional, Union


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class TokenizerError(ExpressionError):
    """
    Error thrown during tokenization (lexical analysis).
    """

    pass


class InvalidTokenError(TokenizerError):
    """
    Unrecognized character or malformed number literal.
    """

    def __init__(
        self,
        character: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Invalid token '{character}'", position, expression)
        self.character = character


class ParseError(ExpressionError):
    """
    Error thrown during parsing (syntax analysis).
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
        lexeme: Optional[str] = None,
    ):
        super().__init__(message, position, expression)
        self.lexeme = lexeme


class ExpectedExpressionError(ParseError):
    pass


class ExpectedClosingParenError(ParseError):
    pass


class ExpectedEndOfExpressionError(ParseError):
    pass


class InvalidAssignmentTargetError(ParseError):
    pass


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation (runtime error).
    """

    pass


class UndefinedVariableError(EvaluationError):
    def __init__(
        self,
        name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Undefined variable '{name}'", position, expression)
        self.name = name


class UndefinedFunctionError(EvaluationError):
    def __init__(
        self,
        name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Undefined function '{name}'", position, expression)
        self.name = name


class DivisionByZeroError(EvaluationError):
    """
    Error thrown when dividing (or taking a remainder) by zero.
    """

    def __init__(
        self,
        message: str = "Division by zero",
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message, position, expression)


class InvalidArgumentsError(EvaluationError):
    """
    Error thrown when a function receives the wrong number or kind of
    arguments.
    """

    def __init__(
        self,
        function_name: str,
        detail: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"{function_name}: {detail}", position, expression)
        self.function_name = function_name
        self.detail = detail


class InvalidOperatorError(EvaluationError):
    """
    Internal consistency failure: an operator the grammar cannot produce.
    """

    def __init__(
        self,
        operator: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Invalid operator '{operator}'", position, expression)
        self.operator = operator


class DomainError(EvaluationError):
    """
    Error thrown when an arithmetic operation has no representable result
    (negative base with a fractional exponent, overflow, required rounding
    under the UNNECESSARY rounding mode).
    """

    pass


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(self, limit_name: str, limit: int, actual: Union[int, Decimal]):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual
