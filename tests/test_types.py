import math

import pytest

from dialang.types import (
    BooleanVal, FloatVal, IntegerVal, StringVal, format_float, from_native,
    to_float32, to_string, type_name, wrap_int32,
)


@pytest.mark.parametrize('value, text', [
    (1.0, '1'),
    (2.5, '2.5'),
    (0.1, '0.1'),
    (-0.5, '-0.5'),
    (0.0001, '0.0001'),
    (0.00001, '1E-05'),
    (1234567.0, '1234567'),
    (16777216.0, '1.6777216E+07'),
    (3.4028234663852886e38, '3.4028235E+38'),
    (math.inf, 'Infinity'),
    (-math.inf, '-Infinity'),
    (math.nan, 'NaN'),
])
def test_format_float(value, text):
    assert format_float(to_float32(value)) == text


def test_to_string():
    assert to_string(IntegerVal(-3)) == '-3'
    assert to_string(FloatVal(2.5)) == '2.5'
    assert to_string(StringVal('hi')) == 'hi'
    assert to_string(BooleanVal(True)) == 'true'
    assert to_string(BooleanVal(False)) == 'false'


def test_type_names():
    assert [type_name(v) for v in (IntegerVal(1), FloatVal(1), StringVal(''), BooleanVal(False))] == [
        'integer', 'float', 'string', 'boolean',
    ]


def test_float_values_are_rounded():
    assert FloatVal(0.1).value == to_float32(0.1)
    assert FloatVal(1e39).value == math.inf


def test_integer_range():
    with pytest.raises(ValueError):
        IntegerVal(2 ** 31)
    assert wrap_int32(2 ** 31) == -2 ** 31
    assert wrap_int32(-2 ** 31 - 1) == 2 ** 31 - 1


def test_number_helpers():
    assert IntegerVal(0).is_zero()
    assert FloatVal(-0.0).is_zero()
    assert not FloatVal(0.5).is_zero()
    assert IntegerVal(3).as_float() == 3.0


def test_from_native():
    assert from_native(True) == BooleanVal(True)
    assert from_native(42) == IntegerVal(42)
    assert from_native(1.5) == FloatVal(1.5)
    assert from_native('x') == StringVal('x')
    assert from_native(IntegerVal(1)) == IntegerVal(1)
    with pytest.raises(ValueError):
        from_native(2 ** 40)
    with pytest.raises(TypeError):
        from_native(None)
