"""
Tokenizer (lexer) for the expression language.

Converts expression strings into a stream of tokens for the parser.
Number literals are parsed into Decimals under the precision context
active at scan time.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from .arithmetic import DEFAULT_PRECISION_CONTEXT, PrecisionContext, parse_decimal
from .errors import InvalidTokenError
from .limits import ExpressionLimits, check_expression_length


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Arithmetic operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    PERCENT = "PERCENT"
    CARET = "CARET"
    ASSIGN = "ASSIGN"

    # Comparison and logical operators
    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    GE = "GE"
    LT = "LT"
    LE = "LE"
    OR = "OR"
    AND = "AND"

    # Delimiters
    COMMA = "COMMA"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"

    # Literals
    NUMBER = "NUMBER"
    IDENTIFIER = "IDENTIFIER"

    # Special
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    lexeme: str
    position: int
    literal: Optional[Decimal] = None


SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "^": TokenType.CARET,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_identifier_start(ch: str) -> bool:
    """Checks if a character can start an identifier."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_identifier_part(ch: str) -> bool:
    """Checks if a character can continue an identifier."""
    return _is_identifier_start(ch) or _is_digit(ch)


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is skippable whitespace."""
    return ch in (" ", "\t", "\r")


def _is_number_part(ch: str, previous: str, following: str, after: str) -> bool:
    """
    Checks if ch continues a number literal.

    The decimal point is always accepted. An exponent marker needs a digit
    before it and either a digit or a sign-then-digit after it; a sign is
    only accepted right after an exponent marker and before a digit.
    """
    if _is_digit(ch) or ch == ".":
        return True
    if ch in ("e", "E"):
        return _is_digit(previous) and (
            _is_digit(following) or (following in ("+", "-") and _is_digit(after))
        )
    if ch in ("+", "-"):
        return previous in ("e", "E") and _is_digit(following)
    return False


class Tokenizer:
    """Tokenizer for expression strings."""

    def __init__(
        self,
        source: str,
        context: Optional[PrecisionContext] = None,
        limits: Optional[ExpressionLimits] = None,
    ):
        self._source = source
        self._context = context or DEFAULT_PRECISION_CONTEXT
        self._limits = limits
        self._position = 0
        self._tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenizes the source expression and returns all tokens."""
        check_expression_length(self._source, self._limits)

        while not self._is_at_end():
            self._scan_token()

        self._tokens.append(Token(TokenType.EOF, "", self._position))
        return self._tokens

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _char_at(self, index: int) -> str:
        if 0 <= index < len(self._source):
            return self._source[index]
        return "\0"

    def _peek(self) -> str:
        return self._char_at(self._position)

    def _advance(self) -> str:
        ch = self._source[self._position]
        self._position += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self._peek() != expected:
            return False
        self._position += 1
        return True

    def _add_token(
        self, token_type: TokenType, start: int, literal: Optional[Decimal] = None
    ) -> None:
        lexeme = self._source[start : self._position]
        self._tokens.append(Token(token_type, lexeme, start, literal))

    def _invalid(self, character: str, position: int) -> InvalidTokenError:
        return InvalidTokenError(character, position, self._source)

    def _scan_token(self) -> None:
        start = self._position
        ch = self._advance()

        # Skip whitespace
        if _is_whitespace(ch):
            return

        if ch in SINGLE_CHAR_TOKENS:
            self._add_token(SINGLE_CHAR_TOKENS[ch], start)
            return

        if ch == "=":
            token_type = TokenType.EQ if self._match("=") else TokenType.ASSIGN
            self._add_token(token_type, start)
            return

        if ch == ">":
            self._add_token(TokenType.GE if self._match("=") else TokenType.GT, start)
            return

        if ch == "<":
            self._add_token(TokenType.LE if self._match("=") else TokenType.LT, start)
            return

        # Two-character operators with no single-character form
        if ch == "!":
            if not self._match("="):
                raise self._invalid(ch, start)
            self._add_token(TokenType.NE, start)
            return

        if ch == "|":
            if not self._match("|"):
                raise self._invalid(ch, start)
            self._add_token(TokenType.OR, start)
            return

        if ch == "&":
            if not self._match("&"):
                raise self._invalid(ch, start)
            self._add_token(TokenType.AND, start)
            return

        if _is_digit(ch) or ch == ".":
            self._scan_number(start)
            return

        if _is_identifier_start(ch):
            self._scan_identifier(start)
            return

        raise self._invalid(ch, start)

    def _scan_number(self, start: int) -> None:
        while _is_number_part(
            self._peek(),
            self._char_at(self._position - 1),
            self._char_at(self._position + 1),
            self._char_at(self._position + 2),
        ):
            self._advance()

        lexeme = self._source[start : self._position]
        try:
            value = parse_decimal(lexeme, self._context)
        except ValueError as e:
            raise self._invalid(lexeme, start) from e

        self._add_token(TokenType.NUMBER, start, value)

    def _scan_identifier(self, start: int) -> None:
        while _is_identifier_part(self._peek()):
            self._advance()

        self._add_token(TokenType.IDENTIFIER, start)


def tokenize(
    source: str,
    context: Optional[PrecisionContext] = None,
    limits: Optional[ExpressionLimits] = None,
) -> List[Token]:
    """
    Tokenizes an expression string into tokens.

    Args:
        source: The expression string to tokenize
        context: Precision context used to parse number literals
        limits: Optional expression limits

    Returns:
        List of tokens, terminated by an EOF token

    Raises:
        InvalidTokenError: If the expression contains invalid tokens
        LimitExceededError: If the expression is too long
    """
    tokenizer = Tokenizer(source, context, limits)
    return tokenizer.tokenize()
