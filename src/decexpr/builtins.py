"""
Built-in functions for the expression language.

Functions are described by a static table of FunctionDescriptor entries
(name, arity bounds, implementation). Each engine copies the table into its
own FunctionRegistry at construction, so registering a function on one
engine never affects another.

Names are resolved case-insensitively. Arguments are always evaluated
before the call, including for ``if``: unlike ``&&`` and ``||``, function
calls never short-circuit.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .arithmetic import (
    PrecisionContext,
    RoundingMode,
    absolute,
    add,
    is_truthy,
    set_scale,
)
from .errors import EvaluationError, InvalidArgumentsError
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits, check_round_places


class BuiltinContext:
    """Context passed to built-in functions."""

    def __init__(
        self,
        precision: PrecisionContext,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
        position: Optional[int] = None,
        source: Optional[str] = None,
    ):
        self.precision = precision
        self.limits = limits
        self.position = position
        self.source = source


# Signature of a built-in function implementation.
BuiltinImplementation = Callable[[Sequence[Decimal], BuiltinContext], Decimal]

# Signature of a user-registered function.
UserFunction = Callable[[List[Decimal]], Decimal]


@dataclass(frozen=True)
class FunctionDescriptor:
    """A named function with its arity constraint."""

    name: str
    implementation: BuiltinImplementation
    min_args: int = 0
    max_args: Optional[int] = None

    def check_arity(self, args: Sequence[Decimal]) -> None:
        count = len(args)
        if self.max_args is None:
            if count < self.min_args:
                raise InvalidArgumentsError(
                    self.name,
                    f"expected at least {self.min_args} argument(s), got {count}",
                )
        elif self.min_args == self.max_args:
            if count != self.min_args:
                raise InvalidArgumentsError(
                    self.name, f"expected {self.min_args} argument(s), got {count}"
                )
        elif count < self.min_args or count > self.max_args:
            raise InvalidArgumentsError(
                self.name,
                f"expected {self.min_args}-{self.max_args} argument(s), got {count}",
            )

    def __call__(self, args: Sequence[Decimal], context: BuiltinContext) -> Decimal:
        self.check_arity(args)
        return self.implementation(args, context)


class FunctionRegistry:
    """Case-insensitive name -> FunctionDescriptor table."""

    def __init__(self, functions: Iterable[FunctionDescriptor] = ()):
        self._functions: Dict[str, FunctionDescriptor] = {}
        for descriptor in functions:
            self.register(descriptor)

    def register(self, descriptor: FunctionDescriptor) -> None:
        """Adds or replaces a function."""
        self._functions[descriptor.name.lower()] = descriptor

    def get(self, name: str) -> Optional[FunctionDescriptor]:
        return self._functions.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._functions

    def __iter__(self) -> Iterator[FunctionDescriptor]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)


# ============================================================
# Numeric Helpers
# ============================================================


def _abs(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """abs(x) - Absolute value."""
    return absolute(args[0])


def _sum(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """sum(x, ...) - Exact sum of all arguments."""
    return reduce(add, args)


def _floor(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """floor(x) - Rounds toward negative infinity to an integer."""
    return set_scale(args[0], 0, RoundingMode.FLOOR)


def _ceil(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """ceil(x) - Rounds toward positive infinity to an integer."""
    return set_scale(args[0], 0, RoundingMode.CEILING)


def _round(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """
    round(x, places = 0)

    Rounds to the given number of decimal places with the active rounding
    mode. A fractional places argument is truncated toward zero; negative
    places round to tens, hundreds, and so on.
    """
    places = 0
    if len(args) == 2:
        check_round_places(args[1].copy_abs(), ctx.limits)
        places = int(args[1])
    return set_scale(args[0], places, ctx.precision.rounding_mode)


def _min(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """min(x, ...) - Smallest argument."""
    return min(args)


def _max(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """max(x, ...) - Largest argument."""
    return max(args)


def _if(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
    """if(condition, then, else) - Selects by truthiness of condition."""
    condition, then_value, else_value = args
    return then_value if is_truthy(condition) else else_value


# ============================================================
# Registry
# ============================================================

# Static table of all built-in functions.
BUILTIN_FUNCTIONS: tuple[FunctionDescriptor, ...] = (
    FunctionDescriptor("abs", _abs, 1, 1),
    FunctionDescriptor("sum", _sum, 1),
    FunctionDescriptor("floor", _floor, 1, 1),
    FunctionDescriptor("ceil", _ceil, 1, 1),
    FunctionDescriptor("round", _round, 1, 2),
    FunctionDescriptor("min", _min, 1),
    FunctionDescriptor("max", _max, 1),
    FunctionDescriptor("if", _if, 3, 3),
)


def create_function_registry() -> FunctionRegistry:
    """Creates a fresh registry holding every built-in function."""
    return FunctionRegistry(BUILTIN_FUNCTIONS)


def user_function(
    name: str,
    function: UserFunction,
    min_args: Optional[int] = None,
    max_args: Optional[int] = None,
) -> FunctionDescriptor:
    """
    Wraps a plain ``f(arguments) -> Decimal`` callable as a descriptor.

    Without bounds the callable validates its own arguments; an ``int``
    result is accepted and converted to a Decimal.
    """

    def implementation(args: Sequence[Decimal], ctx: BuiltinContext) -> Decimal:
        result = function(list(args))
        if isinstance(result, Decimal):
            return result
        if isinstance(result, int):
            return Decimal(result)
        raise EvaluationError(
            f"Function '{name}' returned {type(result).__name__}, expected Decimal"
        )

    return FunctionDescriptor(name, implementation, min_args or 0, max_args)

