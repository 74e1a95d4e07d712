"""
Decimal values and the precision context they are computed under.

Values are plain ``decimal.Decimal`` instances. Addition, subtraction,
multiplication and negation are exact; division, remainder and power are
rounded to an explicit PrecisionContext so that non-terminating expansions
stop at a bounded number of significant digits.

Power semantics:
- The exponent is split into sign, integer part and fractional part.
- ``a ** int`` is computed with decimal arithmetic under the context.
- ``a ** frac`` is approximated with binary floating point and converted
  back to a Decimal, so results for non-integer exponents are NOT exact.
- A negative exponent takes the reciprocal of the combined result.
"""

import decimal
import math
from contextlib import contextmanager
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Union

from .errors import DivisionByZeroError, DomainError
from .limits import ExpressionLimits, check_integer_exponent


class RoundingMode(str, Enum):
    """Rounding modes available to the precision context."""

    UP = "UP"
    DOWN = "DOWN"
    CEILING = "CEILING"
    FLOOR = "FLOOR"
    HALF_UP = "HALF_UP"
    HALF_DOWN = "HALF_DOWN"
    HALF_EVEN = "HALF_EVEN"

    # Any operation that would need to round fails instead.
    UNNECESSARY = "UNNECESSARY"

    @classmethod
    def from_name(cls, name: Union["RoundingMode", str]) -> "RoundingMode":
        """Resolves a mode from an enum member or a case-insensitive name."""
        if isinstance(name, RoundingMode):
            return name
        try:
            return cls(name.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown rounding mode: {name!r}") from None

    @property
    def decimal_rounding(self) -> str:
        """The matching ``decimal`` module rounding constant."""
        return _DECIMAL_ROUNDING[self]


_DECIMAL_ROUNDING = {
    RoundingMode.UP: decimal.ROUND_UP,
    RoundingMode.DOWN: decimal.ROUND_DOWN,
    RoundingMode.CEILING: decimal.ROUND_CEILING,
    RoundingMode.FLOOR: decimal.ROUND_FLOOR,
    RoundingMode.HALF_UP: decimal.ROUND_HALF_UP,
    RoundingMode.HALF_DOWN: decimal.ROUND_HALF_DOWN,
    RoundingMode.HALF_EVEN: decimal.ROUND_HALF_EVEN,
    # Never consulted: Inexact is trapped for this mode.
    RoundingMode.UNNECESSARY: decimal.ROUND_HALF_EVEN,
}

_TRAPS = [decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow]

# Unbounded context for operations that must not round.
_EXACT = decimal.Context(
    prec=decimal.MAX_PREC,
    rounding=decimal.ROUND_HALF_EVEN,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    traps=_TRAPS,
)

ZERO = Decimal(0)
ONE = Decimal(1)


@dataclass(frozen=True)
class PrecisionContext:
    """Significant-digit count and rounding mode for lossy arithmetic."""

    precision: int = 16
    rounding_mode: RoundingMode = RoundingMode.HALF_EVEN

    def __post_init__(self) -> None:
        if isinstance(self.precision, bool) or not isinstance(self.precision, int):
            raise ValueError(f"precision must be an integer, got {self.precision!r}")
        if self.precision <= 0:
            raise ValueError(f"precision must be positive, got {self.precision}")
        object.__setattr__(
            self, "rounding_mode", RoundingMode.from_name(self.rounding_mode)
        )

    def with_precision(self, precision: int) -> "PrecisionContext":
        return replace(self, precision=precision)

    def with_rounding_mode(
        self, rounding_mode: Union[RoundingMode, str]
    ) -> "PrecisionContext":
        return replace(self, rounding_mode=RoundingMode.from_name(rounding_mode))

    def to_decimal_context(self) -> decimal.Context:
        """Builds a fresh ``decimal.Context`` for this precision and mode."""
        traps = list(_TRAPS)
        if self.rounding_mode is RoundingMode.UNNECESSARY:
            traps.append(decimal.Inexact)
        return decimal.Context(
            prec=self.precision,
            rounding=self.rounding_mode.decimal_rounding,
            Emax=decimal.MAX_EMAX,
            Emin=decimal.MIN_EMIN,
            traps=traps,
        )


DEFAULT_PRECISION_CONTEXT = PrecisionContext()


@contextmanager
def _decimal_errors() -> Iterator[None]:
    """Translates ``decimal`` signals into expression errors."""
    try:
        yield
    except decimal.DivisionByZero as e:
        raise DivisionByZeroError() from e
    except decimal.Overflow as e:
        raise DomainError("Arithmetic overflow") from e
    except decimal.Inexact as e:
        raise DomainError("Rounding necessary") from e
    except decimal.InvalidOperation as e:
        raise DomainError("Invalid decimal operation") from e


# ============================================================
# Conversion
# ============================================================


def parse_decimal(text: str, context: PrecisionContext) -> Decimal:
    """
    Parses literal text into a Decimal rounded to the context.

    Raises ValueError for malformed text and DomainError when rounding is
    required under the UNNECESSARY mode.
    """
    with _decimal_errors():
        try:
            exact = _EXACT.create_decimal(text)
        except decimal.InvalidOperation:
            raise ValueError(f"Malformed number: {text!r}") from None
    if not exact.is_finite():
        raise ValueError(f"Malformed number: {text!r}")
    return round_to_context(exact, context)


def from_bool(flag: bool) -> Decimal:
    return ONE if flag else ZERO


def is_truthy(value: Decimal) -> bool:
    """A value is truthy iff it is not zero."""
    return not value.is_zero()


# ============================================================
# Exact operations
# ============================================================


def add(left: Decimal, right: Decimal) -> Decimal:
    with _decimal_errors():
        return _EXACT.add(left, right)


def subtract(left: Decimal, right: Decimal) -> Decimal:
    with _decimal_errors():
        return _EXACT.subtract(left, right)


def multiply(left: Decimal, right: Decimal) -> Decimal:
    with _decimal_errors():
        return _EXACT.multiply(left, right)


def negate(value: Decimal) -> Decimal:
    return _EXACT.minus(value)


def absolute(value: Decimal) -> Decimal:
    return _EXACT.abs(value)


def compare(left: Decimal, right: Decimal) -> int:
    """Returns -1, 0 or 1 by numeric ordering (scale is ignored)."""
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def values_equal(left: Decimal, right: Decimal) -> bool:
    """Numeric equality: ``2.0`` equals ``2.00``."""
    return compare(left, right) == 0


# ============================================================
# Rounded operations
# ============================================================


def divide(left: Decimal, right: Decimal, context: PrecisionContext) -> Decimal:
    if right.is_zero():
        raise DivisionByZeroError()
    with _decimal_errors():
        return context.to_decimal_context().divide(left, right)


def remainder(left: Decimal, right: Decimal, context: PrecisionContext) -> Decimal:
    """Remainder of truncated division; takes the sign of the dividend."""
    if right.is_zero():
        raise DivisionByZeroError("Remainder by zero")
    with _decimal_errors():
        return context.to_decimal_context().remainder(left, right)


def power(
    base: Decimal,
    exponent: Decimal,
    context: PrecisionContext,
    limits: Optional[ExpressionLimits] = None,
) -> Decimal:
    """
    Raises base to exponent using the hybrid integer/float algorithm.

    Exact (correctly rounded) for integer exponents; an approximation
    through binary floating point whenever the exponent has a fractional
    part.
    """
    negative = exponent < 0
    magnitude = exponent.copy_abs()
    integer_part = magnitude.to_integral_value(rounding=decimal.ROUND_DOWN)
    fraction = _EXACT.subtract(magnitude, integer_part)
    check_integer_exponent(integer_part, limits)

    ctx = context.to_decimal_context()
    with _decimal_errors():
        if integer_part.is_zero():
            integer_power = ONE
        else:
            integer_power = ctx.power(base, int(integer_part))
        result = ctx.multiply(integer_power, _fractional_power(base, fraction))

    if negative:
        return divide(ONE, result, context)
    return result


def _fractional_power(base: Decimal, fraction: Decimal) -> Decimal:
    if fraction.is_zero():
        return ONE
    if base < 0:
        raise DomainError(
            f"Cannot raise negative value {base} to a fractional power"
        )
    approximation = float(base) ** float(fraction)
    if not math.isfinite(approximation):
        raise DomainError(f"Power of {base} is out of floating-point range")
    return Decimal(approximation)


def set_scale(
    value: Decimal, places: int, rounding_mode: RoundingMode
) -> Decimal:
    """
    Rounds to a fixed number of decimal places.

    Negative places round to the left of the decimal point, so
    ``set_scale(1234, -2, HALF_UP)`` is ``1.2E+3``.
    """
    quantum = Decimal((0, (1,), -places))
    digits = max(value.adjusted(), 0) + places + 2
    ctx = PrecisionContext(max(digits, 1), rounding_mode).to_decimal_context()
    with _decimal_errors():
        return value.quantize(quantum, context=ctx)


def round_to_context(value: Decimal, context: PrecisionContext) -> Decimal:
    with _decimal_errors():
        return context.to_decimal_context().plus(value)


def to_display_string(value: Decimal, context: PrecisionContext) -> str:
    """
    Rounds to the context, strips trailing zeros and renders the value in
    engineering notation (exponents are multiples of three). Negative zero
    is shown as ``0``.
    """
    with _decimal_errors():
        normalized = value.normalize(context.to_decimal_context())
    if normalized.is_zero():
        normalized = normalized.copy_abs()
    return normalized.to_eng_string()


# ============================================================
# Constants
# ============================================================


def compute_pi(context: PrecisionContext) -> Decimal:
    """Pi correctly rounded (half-even) to the context's precision."""
    ctx = decimal.Context(prec=context.precision + 4)
    three = Decimal(3)
    last, total, term = ZERO, three, three
    n, na, d, da = 1, 0, 0, 24
    while total != last:
        last = total
        n, na = n + na, na + 8
        d, da = d + da, da + 32
        term = ctx.divide(ctx.multiply(term, n), d)
        total = ctx.add(total, term)
    return _round_half_even(total, context.precision)


def compute_e(context: PrecisionContext) -> Decimal:
    """Euler's number correctly rounded (half-even) to the context's precision."""
    ctx = decimal.Context(prec=context.precision + 4)
    return _round_half_even(ctx.exp(ONE), context.precision)


def _round_half_even(value: Decimal, precision: int) -> Decimal:
    return decimal.Context(prec=precision, rounding=decimal.ROUND_HALF_EVEN).plus(
        value
    )
