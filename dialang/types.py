"""Runtime values for Dialang.

Scripts work with four kinds of values: 32-bit signed integers, single
precision floats, strings and booleans. Integers and floats are both
numbers. Arithmetic wraps integers to 32 bits and rounds every float
result to single precision, so values behave the same regardless of the
host's native number types.

Helpers in this module convert host values into runtime values
(`from_native`), name value kinds for error messages (`type_name`) and
produce the display text used by output and string interpolation
(`to_string`).
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

# smallest positive single precision value
FLOAT32_EPSILON = 1.401298464324817e-45

_FLOAT32 = struct.Struct('<f')


def to_float32(value: float) -> float:
    """Round a Python float to the nearest single precision value."""
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def wrap_int32(value: int) -> int:
    return (value - INT32_MIN) % 2 ** 32 + INT32_MIN


@dataclass(frozen=True)
class Value:
    """Base class for runtime values."""


@dataclass(frozen=True)
class NumberVal(Value):
    """Integer or float value."""

    def is_zero(self) -> bool:
        return self.value == 0

    def as_float(self) -> float:
        return to_float32(self.value)


@dataclass(frozen=True)
class IntegerVal(NumberVal):
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f'integer value expected, got {self.value!r}')
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f'integer {self.value} does not fit in 32 bits')


@dataclass(frozen=True)
class FloatVal(NumberVal):
    value: float

    def __post_init__(self):
        object.__setattr__(self, 'value', to_float32(float(self.value)))


@dataclass(frozen=True)
class StringVal(Value):
    value: str


@dataclass(frozen=True)
class BooleanVal(Value):
    value: bool


TRUE = BooleanVal(True)
FALSE = BooleanVal(False)


def type_name(value: Value) -> str:
    if isinstance(value, IntegerVal):
        return 'integer'
    if isinstance(value, FloatVal):
        return 'float'
    if isinstance(value, StringVal):
        return 'string'
    if isinstance(value, BooleanVal):
        return 'boolean'
    return type(value).__name__


def format_float(value: float) -> str:
    """Shortest text that reads back as the same single precision value."""
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value == 0:
        return '-0' if math.copysign(1.0, value) < 0 else '0'
    sign = '-' if value < 0 else ''
    magnitude = abs(value)
    for precision in range(1, 10):
        text = f'{magnitude:.{precision - 1}e}'
        if to_float32(float(text)) == magnitude:
            break
    mantissa, exponent = text.split('e')
    exponent = int(exponent)
    if -5 < exponent < 7:
        return sign + format(Decimal(text).normalize(), 'f')
    digits = mantissa.replace('.', '').rstrip('0') or '0'
    mantissa = digits[0] + ('.' + digits[1:] if len(digits) > 1 else '')
    return f"{sign}{mantissa}E{'-' if exponent < 0 else '+'}{abs(exponent):02d}"


def to_string(value: Value) -> str:
    """Display text of a value, as used by output and interpolation."""
    if isinstance(value, StringVal):
        return value.value
    if isinstance(value, BooleanVal):
        return 'true' if value.value else 'false'
    if isinstance(value, IntegerVal):
        return str(value.value)
    if isinstance(value, FloatVal):
        return format_float(value.value)
    return str(value)


def from_native(value: Any) -> Value:
    """Convert a host value into a runtime value.

    Raises TypeError for unsupported types and ValueError for integers
    that do not fit in 32 bits.
    """
    if isinstance(value, Value):
        return value
    if isinstance(value, bool):
        return BooleanVal(value)
    if isinstance(value, int):
        return IntegerVal(value)
    if isinstance(value, float):
        return FloatVal(value)
    if isinstance(value, str):
        return StringVal(value)
    raise TypeError(f'cannot convert {type(value).__name__} to a script value')
