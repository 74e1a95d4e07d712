"""
Arbitrary-precision decimal expression engine.

This package tokenizes, parses and evaluates arithmetic expressions over
``decimal.Decimal`` values under a configurable precision context, with
per-engine variables and an extensible function registry.
"""

# Arithmetic
from .arithmetic import (
    DEFAULT_PRECISION_CONTEXT,
    PrecisionContext,
    RoundingMode,
    to_display_string,
)

# Core types and utilities
from .ast import (
    AssignNode,
    AstNode,
    AstNodeBase,
    BinaryOperator,
    BinaryOpNode,
    FunctionCallNode,
    GroupingNode,
    LogicalOperator,
    LogicalOpNode,
    NumberLiteralNode,
    UnaryOperator,
    UnaryOpNode,
    VariableNode,
    ast_to_string,
    calculate_ast_depth,
    count_ast_nodes,
)

# Builtins
from .builtins import (
    BUILTIN_FUNCTIONS,
    BuiltinContext,
    FunctionDescriptor,
    FunctionRegistry,
    create_function_registry,
    user_function,
)
from .config import EngineConfig
from .engine import ExpressionEngine
from .errors import (
    DivisionByZeroError,
    DomainError,
    EvaluationError,
    ExpectedClosingParenError,
    ExpectedEndOfExpressionError,
    ExpectedExpressionError,
    ExpressionError,
    InvalidArgumentsError,
    InvalidAssignmentTargetError,
    InvalidOperatorError,
    InvalidTokenError,
    LimitExceededError,
    ParseError,
    TokenizerError,
    UndefinedFunctionError,
    UndefinedVariableError,
)

# Evaluator
from .evaluator import (
    EvaluationContext,
    EvaluationResult,
    Evaluator,
    VariableEnvironment,
    evaluate,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
)

# Parser
from .parser import (
    Parser,
    parse,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenType,
    tokenize,
)

__all__ = [
    # Engine
    "ExpressionEngine",
    "EngineConfig",
    # Arithmetic
    "PrecisionContext",
    "RoundingMode",
    "DEFAULT_PRECISION_CONTEXT",
    "to_display_string",
    # AST types
    "AstNode",
    "AstNodeBase",
    "NumberLiteralNode",
    "VariableNode",
    "GroupingNode",
    "AssignNode",
    "FunctionCallNode",
    "UnaryOpNode",
    "BinaryOpNode",
    "LogicalOpNode",
    "UnaryOperator",
    "LogicalOperator",
    "BinaryOperator",
    "count_ast_nodes",
    "calculate_ast_depth",
    "ast_to_string",
    # Errors
    "ExpressionError",
    "TokenizerError",
    "InvalidTokenError",
    "ParseError",
    "ExpectedExpressionError",
    "ExpectedClosingParenError",
    "ExpectedEndOfExpressionError",
    "InvalidAssignmentTargetError",
    "EvaluationError",
    "UndefinedVariableError",
    "UndefinedFunctionError",
    "DivisionByZeroError",
    "InvalidArgumentsError",
    "InvalidOperatorError",
    "DomainError",
    "LimitExceededError",
    # Limits
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # Evaluator
    "EvaluationContext",
    "EvaluationResult",
    "Evaluator",
    "VariableEnvironment",
    "evaluate",
    # Builtins
    "BuiltinContext",
    "FunctionDescriptor",
    "FunctionRegistry",
    "BUILTIN_FUNCTIONS",
    "create_function_registry",
    "user_function",
]
