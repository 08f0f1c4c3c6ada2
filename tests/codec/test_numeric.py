import math

import numpy as np
import pytest

from wobj.codec.half import float_to_half, half_to_float
from wobj.codec.numeric import (
    ELEMENT_INFO,
    ElementType,
    decode_element,
    element_info,
    encode_element,
    normalize_value,
)

INTEGER_TYPES = [t for t, info in ELEMENT_INFO.items() if not info.is_float]


def _widening_pairs(signed: bool):
    types = [t for t in INTEGER_TYPES if ELEMENT_INFO[t].signed == signed]
    return [
        (small, large)
        for small in types
        for large in types
        if ELEMENT_INFO[small].size <= ELEMENT_INFO[large].size
    ]


def test_widening_shifts_into_top_bits():
    assert normalize_value(0xFF, ElementType.UCHAR, ElementType.USHORT) == 0xFF00
    assert normalize_value(0xFF, ElementType.UCHAR, ElementType.UINT) == 0xFF000000
    assert normalize_value(65535, ElementType.USHORT, ElementType.UINT) == 4294901760
    assert normalize_value(-128, ElementType.CHAR, ElementType.SHORT) == -32768
    assert normalize_value(127, ElementType.CHAR, ElementType.INT) == 127 << 24


def test_narrowing_keeps_top_bits():
    assert normalize_value(0xFFFF, ElementType.USHORT, ElementType.UCHAR) == 0xFF
    assert normalize_value(0x1234, ElementType.USHORT, ElementType.UCHAR) == 0x12
    assert normalize_value(-32768, ElementType.SHORT, ElementType.CHAR) == -128
    assert normalize_value(-1, ElementType.INT, ElementType.SHORT) == -1


@pytest.mark.parametrize("small, large", _widening_pairs(False) + _widening_pairs(True))
def test_same_signedness_round_trip(small, large):
    info = element_info(small)
    for value in {info.min_value, info.max_value, 0, info.max_value // 3, info.min_value // 5}:
        widened = normalize_value(value, small, large)
        assert normalize_value(widened, large, small) == value


@pytest.mark.parametrize(
    "value, source, expected",
    [
        (255, ElementType.UCHAR, 1.0),
        (0, ElementType.USHORT, 0.0),
        (127, ElementType.CHAR, 1.0),
        (-127, ElementType.CHAR, -1.0),
        (32767, ElementType.SHORT, 1.0),
        (4294967295, ElementType.UINT, 1.0),
    ],
)
def test_integer_to_float(value, source, expected):
    assert normalize_value(value, source, ElementType.FLOAT) == pytest.approx(expected)


@pytest.mark.parametrize(
    "value, target, expected",
    [
        (1.0, ElementType.UINT, 4294967295),
        (2.0, ElementType.UCHAR, 255),
        (-3.0, ElementType.UCHAR, 0),
        (-3.0, ElementType.SHORT, -32767),
        (0.5, ElementType.UCHAR, 127),
        (-0.5, ElementType.CHAR, -63),
    ],
)
def test_float_to_integer_clamps(value, target, expected):
    assert normalize_value(value, ElementType.FLOAT, target) == expected


def test_cross_signedness_rescales():
    assert normalize_value(255, ElementType.UCHAR, ElementType.CHAR) == 127
    assert normalize_value(0, ElementType.UCHAR, ElementType.CHAR) == -127
    assert normalize_value(127, ElementType.CHAR, ElementType.UCHAR) == 255
    assert normalize_value(-127, ElementType.CHAR, ElementType.UCHAR) == 0
    assert normalize_value(65535, ElementType.USHORT, ElementType.INT) == 2147483647


def test_identity_and_float_casts():
    assert normalize_value(0.1, ElementType.DOUBLE, ElementType.DOUBLE) == 0.1
    assert normalize_value(0.1, ElementType.FLOAT, ElementType.DOUBLE) == 0.1
    assert normalize_value(0.1, ElementType.DOUBLE, ElementType.FLOAT) == float(np.float32(0.1))
    third = normalize_value(1.0 / 3.0, ElementType.FLOAT, ElementType.HALF_FLOAT)
    assert third == half_to_float(float_to_half(1.0 / 3.0))


def test_nan_has_no_integer_image():
    assert normalize_value(math.nan, ElementType.FLOAT, ElementType.UCHAR) == 0
    assert encode_element(math.nan, ElementType.SHORT, False) == 0


@pytest.mark.parametrize("element_type", INTEGER_TYPES)
def test_normalized_element_round_trip(element_type):
    info = element_info(element_type)
    low = -1.0 if info.signed else 0.0
    for x in np.linspace(low, 1.0, 41):
        raw = encode_element(float(x), element_type, True)
        assert info.min_value <= raw <= info.max_value
        assert decode_element(raw, element_type, True) == pytest.approx(x, abs=1.0 / info.max_value)


def test_unnormalized_elements_clamp_to_range():
    assert encode_element(300.0, ElementType.UCHAR, False) == 255
    assert encode_element(-5.5, ElementType.SHORT, False) == -5
    assert encode_element(-1e12, ElementType.INT, False) == -2147483648
    assert decode_element(200, ElementType.UCHAR, False) == 200.0


def test_half_elements_store_bit_patterns():
    assert encode_element(1.0, ElementType.HALF_FLOAT, True) == 0x3C00
    assert decode_element(0xC000, ElementType.HALF_FLOAT, False) == -2.0


def test_unknown_element_type():
    with pytest.raises(ValueError, match="Unknown element type"):
        normalize_value(1, 42, ElementType.FLOAT)
