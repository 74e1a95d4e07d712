"""
Tests for the expression tokenizer.
"""

from decimal import Decimal

import pytest

from decexpr.arithmetic import PrecisionContext
from decexpr.errors import InvalidTokenError, LimitExceededError
from decexpr.limits import ExpressionLimits
from decexpr.tokenizer import TokenType, tokenize


def token_types(source: str) -> list[TokenType]:
    return [token.type for token in tokenize(source)]


def lexemes(source: str) -> list[str]:
    return [token.lexeme for token in tokenize(source)]


class TestOperators:
    """Tests for operator tokens."""

    def test_single_character_operators(self):
        assert token_types("+ - * / % ^ , ( )") == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.PERCENT,
            TokenType.CARET,
            TokenType.COMMA,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    def test_two_character_operators(self):
        assert token_types("== != >= <= || &&") == [
            TokenType.EQ,
            TokenType.NE,
            TokenType.GE,
            TokenType.LE,
            TokenType.OR,
            TokenType.AND,
            TokenType.EOF,
        ]

    def test_single_equals_is_assignment(self):
        assert token_types("x = 1") == [
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_greater_and_less_than(self):
        assert token_types("1>2<3") == [
            TokenType.NUMBER,
            TokenType.GT,
            TokenType.NUMBER,
            TokenType.LT,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    @pytest.mark.parametrize("source", ["!", "a | b", "a & b", "1 ! 2"])
    def test_incomplete_two_character_operators(self, source):
        with pytest.raises(InvalidTokenError):
            tokenize(source)


class TestNumbers:
    """Tests for number literals."""

    def test_integer_literal(self):
        token = tokenize("42")[0]
        assert token.type == TokenType.NUMBER
        assert token.literal == Decimal(42)

    def test_decimal_literal(self):
        assert tokenize("3.14")[0].literal == Decimal("3.14")

    def test_leading_decimal_point(self):
        token = tokenize(".5")[0]
        assert token.lexeme == ".5"
        assert token.literal == Decimal("0.5")

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("1e3", Decimal(1000)),
            ("1E+3", Decimal(1000)),
            ("2.5e-2", Decimal("0.025")),
        ],
    )
    def test_exponent_literals(self, source, expected):
        tokens = tokenize(source)
        assert len(tokens) == 2
        assert tokens[0].lexeme == source
        assert tokens[0].literal == expected

    def test_exponent_marker_needs_digits(self):
        assert lexemes("2e") == ["2", "e", ""]
        assert lexemes("1e+x") == ["1", "e", "+", "x", ""]

    def test_exponent_marker_after_decimal_point(self):
        assert lexemes("1.e3") == ["1.", "e3", ""]

    def test_minus_is_not_part_of_number(self):
        assert token_types("1-2") == [
            TokenType.NUMBER,
            TokenType.MINUS,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_malformed_number(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            tokenize("1 + 1.2.3")
        assert exc_info.value.character == "1.2.3"
        assert exc_info.value.position == 4
        assert exc_info.value.message == "Invalid token '1.2.3'"

    def test_lone_decimal_point(self):
        with pytest.raises(InvalidTokenError):
            tokenize(".")

    def test_literal_rounded_to_context(self):
        token = tokenize("1.23456789", PrecisionContext(4))[0]
        assert token.lexeme == "1.23456789"
        assert token.literal == Decimal("1.235")


class TestIdentifiers:
    """Tests for identifiers."""

    def test_identifier(self):
        token = tokenize("_rate2")[0]
        assert token.type == TokenType.IDENTIFIER
        assert token.lexeme == "_rate2"
        assert token.literal is None

    def test_number_followed_by_identifier(self):
        assert lexemes("2x") == ["2", "x", ""]


class TestWhitespaceAndPositions:
    """Tests for whitespace handling and token positions."""

    def test_positions(self):
        tokens = tokenize("12 + x")
        assert [t.position for t in tokens] == [0, 3, 5, 6]

    def test_tabs_and_carriage_returns_are_skipped(self):
        assert token_types("1\t+\r2") == [
            TokenType.NUMBER,
            TokenType.PLUS,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_newline_is_invalid(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            tokenize("1\n+2")
        assert exc_info.value.position == 1

    def test_empty_source(self):
        tokens = tokenize("")
        assert [t.type for t in tokens] == [TokenType.EOF]
        assert tokens[0].position == 0

    @pytest.mark.parametrize("source", ["#", "1 $ 2", "é"])
    def test_unknown_characters(self, source):
        with pytest.raises(InvalidTokenError):
            tokenize(source)


class TestLimits:
    """Tests for tokenizer limits."""

    def test_expression_length(self):
        limits = ExpressionLimits(max_expression_length=5)
        assert len(tokenize("1+2+3", limits=limits)) == 6
        with pytest.raises(LimitExceededError) as exc_info:
            tokenize("1+2+3+4", limits=limits)
        assert exc_info.value.limit_name == "max_expression_length"
        assert exc_info.value.actual == 7
