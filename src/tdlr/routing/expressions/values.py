"""Value model for the routing expression DSL.

Expressions compute with exactly three kinds of value, represented by plain
Python objects:

- Number: a finite float (a double); ints are accepted on input and widened
- String: str
- Bool: bool

There is no null, and no infinity or NaN. Combining kinds is only allowed
where an explicit rule exists; everything else is an ExpressionTypeError
raised by the evaluator.
"""

import math
from enum import Enum
from typing import Union

Value = Union[int, float, str, bool]


class Kind(Enum):
    """The three value kinds."""

    NUMBER = "Number"
    STRING = "String"
    BOOL = "Bool"


def kind_of(value: object) -> Kind:
    """Return the kind of a runtime value.

    Raises:
        ValueError: If the object is not a valid expression value
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, (int, float)):
        return Kind.NUMBER
    if isinstance(value, str):
        return Kind.STRING
    raise ValueError(f"Not an expression value: {value!r} ({type(value).__name__})")


def kind_name(value: object) -> str:
    """Kind name for diagnostics, tolerant of non-values."""
    try:
        return kind_of(value).value
    except ValueError:
        return type(value).__name__


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_number(value: int | float) -> float:
    """Widen a Number to a finite double.

    Raises:
        ValueError: If the value is infinite, NaN, or too large for a double
    """
    try:
        number = float(value)
    except OverflowError:
        raise ValueError("Number out of range") from None
    if not math.isfinite(number):
        raise ValueError("Number out of range")
    return number


def normalize(value: Value) -> Value:
    """Canonical runtime form of a value: Numbers become finite floats.

    Raises:
        ValueError: If the object is not a valid expression value
    """
    if kind_of(value) is Kind.NUMBER:
        return as_number(value)
    return value


def format_number(value: int | float) -> str:
    """Format a number with the minimum digits needed.

    Integral values print without a fractional part (3.0 -> "3"); other
    values use the shortest representation that round-trips (0.1 -> "0.1").
    """
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value == math.floor(value) and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def to_display_string(value: Value) -> str:
    """Canonical string form of a value (the str::from rules)."""
    kind = kind_of(value)
    if kind is Kind.BOOL:
        return "true" if value else "false"
    if kind is Kind.NUMBER:
        return format_number(value)
    return value


def values_equal(left: Value, right: Value) -> bool:
    """Value equality; values of different kinds are never equal."""
    if kind_of(left) is not kind_of(right):
        return False
    return left == right


# Size constants bound in every evaluation context
KB = 1024
MB = 1024 * 1024
GB = 1024 * 1024 * 1024

CONSTANTS: dict[str, Value] = {"KB": float(KB), "MB": float(MB), "GB": float(GB)}
