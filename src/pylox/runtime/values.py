"""
Runtime values for the pylox interpreter.

A Value pairs the raw Python datum with its kind. Values are immutable, so
they can be shared freely between the environment and evaluation results.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """The four runtime value kinds."""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    NIL = "nil"


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its kind.

    The `data` field holds a float, str, bool or None depending on `kind`.
    """
    data: Any
    kind: ValueKind

    def __repr__(self) -> str:
        return f"Value({self.data!r}, {self.kind.name})"

    def __str__(self) -> str:
        return stringify(self)

    @property
    def is_number(self) -> bool:
        return self.kind == ValueKind.NUMBER

    @property
    def is_string(self) -> bool:
        return self.kind == ValueKind.STRING

    def is_truthy(self) -> bool:
        """Only nil and false are falsy; 0 and "" are truthy."""
        if self.kind == ValueKind.NIL:
            return False
        if self.kind == ValueKind.BOOLEAN:
            return self.data
        return True


# Convenience constructors

def number_val(x: float) -> Value:
    """Create a number value."""
    return Value(float(x), ValueKind.NUMBER)


def string_val(s: str) -> Value:
    """Create a string value."""
    return Value(str(s), ValueKind.STRING)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return TRUE if b else FALSE


TRUE = Value(True, ValueKind.BOOLEAN)
FALSE = Value(False, ValueKind.BOOLEAN)
NIL = Value(None, ValueKind.NIL)


def is_equal(left: Value, right: Value) -> bool:
    """
    Language equality. Total over every pair of values: values of different
    kinds are never equal, and the comparison never raises.
    """
    if left.kind != right.kind:
        return False
    if left.kind == ValueKind.NIL:
        return True
    return left.data == right.data


def format_number(x: float) -> str:
    """Render a number in plain decimal form: 20, 2.5, 0.0001, -0, NaN, inf."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    if x == 0:
        return "-0" if math.copysign(1.0, x) < 0 else "0"
    # Shortest round-tripping digits, without exponent notation or a trailing .0
    return format(Decimal(repr(x)).normalize(), "f")


def stringify(value: Value) -> str:
    """Render a value the way `print` shows it."""
    if value.kind == ValueKind.NIL:
        return "nil"
    if value.kind == ValueKind.BOOLEAN:
        return "true" if value.data else "false"
    if value.kind == ValueKind.NUMBER:
        return format_number(value.data)
    return value.data
