"""
Parser for the expression language.

Parses a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Precedence (lowest to highest):
1. Assignment: = (right-associative, target must be a variable)
2. Logical OR: ||
3. Logical AND: &&
4. Equality: ==, !=
5. Comparison: >, >=, <, <=
6. Additive: +, -
7. Multiplicative: *, /, %
8. Unary: -
9. Exponent: ^ (right-associative, right operand parsed as unary)
10. Call: name(args)
11. Primary: numbers, variables, parentheses
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .arithmetic import PrecisionContext
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
    calculate_ast_depth,
    count_ast_nodes,
)
from .errors import (
    ExpectedClosingParenError,
    ExpectedEndOfExpressionError,
    ExpectedExpressionError,
    InvalidAssignmentTargetError,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_function_arg_count,
    check_nesting_depth,
)
from .tokenizer import Token, TokenType, tokenize

EQUALITY_OPERATORS: Dict[TokenType, BinaryOperator] = {
    TokenType.EQ: "==",
    TokenType.NE: "!=",
}

COMPARISON_OPERATORS: Dict[TokenType, BinaryOperator] = {
    TokenType.GT: ">",
    TokenType.GE: ">=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
}

ADDITIVE_OPERATORS: Dict[TokenType, BinaryOperator] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
}

MULTIPLICATIVE_OPERATORS: Dict[TokenType, BinaryOperator] = {
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.PERCENT: "%",
}


class Parser:
    """Parser for expression token streams."""

    def __init__(
        self,
        tokens: List[Token],
        source: str,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._tokens = tokens
        self._source = source
        self._limits = limits
        self._current = 0
        self._depth = 0

    def parse(self) -> AstNode:
        """Parses the token stream into an AST."""
        ast = self._parse_expression()

        if not self._is_at_end():
            token = self._peek()
            raise ExpectedEndOfExpressionError(
                f"Expected end of expression, found '{token.lexeme}'",
                token.position,
                self._source,
                token.lexeme,
            )

        # Validate AST limits
        check_ast_node_count(count_ast_nodes(ast), self._limits)
        check_ast_depth(calculate_ast_depth(ast), self._limits)

        return ast

    # ============================================================
    # Token Helpers
    # ============================================================

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self._tokens[self._current]

    def _previous(self) -> Token:
        return self._tokens[self._current - 1]

    def _advance(self) -> Token:
        if not self._is_at_end():
            self._current += 1
        return self._previous()

    def _check(self, token_type: TokenType) -> bool:
        if self._is_at_end():
            return False
        return self._peek().type == token_type

    def _match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _match_pair(self, first: TokenType, second: TokenType) -> bool:
        """Matches two consecutive tokens, rolling back if only one matches."""
        start = self._current
        if self._match(first) and self._match(second):
            return True
        self._current = start
        return False

    def _consume_closing_paren(self, message: str) -> Token:
        if self._check(TokenType.RPAREN):
            return self._advance()
        token = self._peek()
        raise ExpectedClosingParenError(
            message, token.position, self._source, token.lexeme
        )

    @contextmanager
    def _nested(self) -> Iterator[None]:
        """Tracks recursion through groups, arguments and unary chains."""
        self._depth += 1
        try:
            check_nesting_depth(self._depth, self._limits)
            yield
        finally:
            self._depth -= 1

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_expression(self) -> AstNode:
        with self._nested():
            return self._parse_assignment()

    def _parse_assignment(self) -> AstNode:
        """Parses assignment: name = value"""
        node = self._parse_or()

        if self._match(TokenType.ASSIGN):
            equals = self._previous()
            value = self._parse_expression()

            if isinstance(node, VariableNode):
                return AssignNode(position=node.position, name=node.name, value=value)

            raise InvalidAssignmentTargetError(
                "Invalid assignment target",
                equals.position,
                self._source,
                equals.lexeme,
            )

        return node

    def _parse_or(self) -> AstNode:
        """Parses logical OR: ||"""
        node = self._parse_and()

        while self._match(TokenType.OR):
            position = self._previous().position
            right = self._parse_and()
            node = LogicalOpNode(
                position=position,
                operator="||",
                left=node,
                right=right,
            )

        return node

    def _parse_and(self) -> AstNode:
        """Parses logical AND: &&"""
        node = self._parse_equality()

        while self._match(TokenType.AND):
            position = self._previous().position
            right = self._parse_equality()
            node = LogicalOpNode(
                position=position,
                operator="&&",
                left=node,
                right=right,
            )

        return node

    def _parse_equality(self) -> AstNode:
        """Parses equality: ==, !="""
        node = self._parse_comparison()

        while self._match(*EQUALITY_OPERATORS):
            token = self._previous()
            right = self._parse_comparison()
            node = BinaryOpNode(
                position=token.position,
                operator=EQUALITY_OPERATORS[token.type],
                left=node,
                right=right,
            )

        return node

    def _parse_comparison(self) -> AstNode:
        """Parses comparison: >, >=, <, <="""
        node = self._parse_additive()

        while self._match(*COMPARISON_OPERATORS):
            token = self._previous()
            right = self._parse_additive()
            node = BinaryOpNode(
                position=token.position,
                operator=COMPARISON_OPERATORS[token.type],
                left=node,
                right=right,
            )

        return node

    def _parse_additive(self) -> AstNode:
        """Parses additive: +, -"""
        node = self._parse_multiplicative()

        while self._match(*ADDITIVE_OPERATORS):
            token = self._previous()
            right = self._parse_multiplicative()
            node = BinaryOpNode(
                position=token.position,
                operator=ADDITIVE_OPERATORS[token.type],
                left=node,
                right=right,
            )

        return node

    def _parse_multiplicative(self) -> AstNode:
        """Parses multiplicative: *, /, %"""
        node = self._parse_unary()

        while self._match(*MULTIPLICATIVE_OPERATORS):
            token = self._previous()
            right = self._parse_unary()
            node = BinaryOpNode(
                position=token.position,
                operator=MULTIPLICATIVE_OPERATORS[token.type],
                left=node,
                right=right,
            )

        return node

    def _parse_unary(self) -> AstNode:
        """Parses unary: -"""
        if self._match(TokenType.MINUS):
            position = self._previous().position
            with self._nested():
                operand = self._parse_unary()
            return UnaryOpNode(position=position, operator="-", operand=operand)

        return self._parse_exponent()

    def _parse_exponent(self) -> AstNode:
        """Parses exponent: ^ (right-associative via the unary rule)"""
        node = self._parse_call()

        if self._match(TokenType.CARET):
            position = self._previous().position
            with self._nested():
                right = self._parse_unary()
            node = BinaryOpNode(position=position, operator="^", left=node, right=right)

        return node

    def _parse_call(self) -> AstNode:
        """Parses function calls: name(arg, ...)"""
        if self._match_pair(TokenType.IDENTIFIER, TokenType.LPAREN):
            name = self._tokens[self._current - 2]
            args = self._parse_argument_list()
            check_function_arg_count(len(args), self._limits)
            return FunctionCallNode(
                position=name.position,
                name=name.lexeme,
                args=tuple(args),
            )

        return self._parse_primary()

    def _parse_argument_list(self) -> List[AstNode]:
        """Parses function argument list (already consumed opening paren)."""
        args: List[AstNode] = []

        if not self._check(TokenType.RPAREN):
            args.append(self._parse_expression())
            while self._match(TokenType.COMMA):
                args.append(self._parse_expression())

        self._consume_closing_paren("Expected ')' after function arguments")
        return args

    def _parse_primary(self) -> AstNode:
        """Parses primary expressions: numbers, variables, parentheses."""
        token = self._peek()
        position = token.position

        if self._match(TokenType.NUMBER):
            return NumberLiteralNode(position=position, value=token.literal)

        if self._match(TokenType.IDENTIFIER):
            return VariableNode(position=position, name=token.lexeme)

        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._consume_closing_paren("Expected ')' after expression")
            return GroupingNode(position=position, expression=expr)

        if token.type == TokenType.EOF:
            message = "Expected expression, found end of expression"
        else:
            message = f"Expected expression, found '{token.lexeme}'"
        raise ExpectedExpressionError(message, position, self._source, token.lexeme)


def parse(
    source: str,
    context: Optional[PrecisionContext] = None,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> AstNode:
    """
    Parses an expression string into an AST.

    Args:
        source: The expression string to parse
        context: Precision context for number literals
        limits: Optional expression limits

    Returns:
        The parsed AST

    Raises:
        TokenizerError: If tokenization fails
        ParseError: If parsing fails
        LimitExceededError: If the expression exceeds a limit
    """
    tokens = tokenize(source, context, limits)
    parser = Parser(tokens, source, limits)
    return parser.parse()
