# wobj/codec/numeric.py
"""
Normalized value conversion between primitive element types.

Integer types are read as fixed point: signed [min, max] maps to [-1, 1]
and unsigned [0, max] maps to [0, 1]. Between integer types of equal
signedness the value is shifted so the top bits keep carrying magnitude.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Union

import numpy as np

from wobj.codec.half import float_to_half, half_to_float

Number = Union[int, float]


class ElementType(IntEnum):
    CHAR = 0
    UCHAR = 1
    SHORT = 2
    USHORT = 3
    INT = 4
    UINT = 5
    HALF_FLOAT = 6
    FLOAT = 7
    DOUBLE = 8


@dataclass(frozen=True, slots=True)
class ElementInfo:
    size: int  # bytes
    signed: bool
    is_float: bool
    struct_code: str  # half floats are stored as their raw bit pattern

    @property
    def bits(self) -> int:
        return self.size * 8

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1 if self.signed else self.bits)) - 1

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0


ELEMENT_INFO: Dict[ElementType, ElementInfo] = {
    ElementType.CHAR: ElementInfo(1, True, False, "b"),
    ElementType.UCHAR: ElementInfo(1, False, False, "B"),
    ElementType.SHORT: ElementInfo(2, True, False, "h"),
    ElementType.USHORT: ElementInfo(2, False, False, "H"),
    ElementType.INT: ElementInfo(4, True, False, "i"),
    ElementType.UINT: ElementInfo(4, False, False, "I"),
    ElementType.HALF_FLOAT: ElementInfo(2, True, True, "H"),
    ElementType.FLOAT: ElementInfo(4, True, True, "f"),
    ElementType.DOUBLE: ElementInfo(8, True, True, "d"),
}


def element_info(element_type: ElementType) -> ElementInfo:
    try:
        return ELEMENT_INFO[ElementType(element_type)]
    except ValueError:
        raise ValueError(f"Unknown element type: {element_type!r}") from None


def _cast_float(value: float, target: ElementType) -> float:
    """Direct cast between floating types, no renormalization."""
    if target == ElementType.HALF_FLOAT:
        return half_to_float(float_to_half(value))
    if target == ElementType.FLOAT:
        with np.errstate(over="ignore"):
            return float(np.float32(value))
    return float(value)


def _int_to_unit(value: int, info: ElementInfo) -> float:
    return value / info.max_value


def _unit_to_int(value: float, info: ElementInfo) -> int:
    if math.isnan(value):
        return 0
    low = -1.0 if info.signed else 0.0
    clamped = min(max(value, low), 1.0)
    return int(clamped * info.max_value)


def normalize_value(value: Number, source: ElementType, target: ElementType) -> Number:
    """
    Convert a normalized value from one element type to another.

    normalize_value(65535, USHORT, UINT) == 4294901760
    normalize_value(65535, USHORT, FLOAT) == 1.0
    normalize_value(1.0, FLOAT, UINT) == 4294967295
    """
    src = element_info(source)
    dst = element_info(target)

    if source == target:
        return value

    if src.is_float and dst.is_float:
        return _cast_float(value, target)

    if not src.is_float and dst.is_float:
        return _cast_float(_int_to_unit(int(value), src), target)

    if src.is_float and not dst.is_float:
        return _unit_to_int(float(value), dst)

    # integer -> integer
    if src.signed == dst.signed:
        shift = (dst.size - src.size) * 8
        if shift >= 0:
            return int(value) << shift
        return int(value) >> -shift

    unit = _int_to_unit(int(value), src)
    if src.signed:
        return _unit_to_int(unit * 0.5 + 0.5, dst)
    return _unit_to_int(unit * 2.0 - 1.0, dst)


def decode_element(raw: Number, element_type: ElementType, normalized: bool) -> float:
    """Stored element -> float, as read back from a vertex buffer."""
    info = element_info(element_type)
    if element_type == ElementType.HALF_FLOAT:
        return half_to_float(int(raw))
    if info.is_float:
        return float(raw)
    if normalized:
        return float(normalize_value(raw, element_type, ElementType.DOUBLE))
    return float(raw)


def encode_element(value: float, element_type: ElementType, normalized: bool) -> Number:
    """
    Float -> stored element. Out-of-range input is clamped to what the
    element can hold rather than rejected.
    """
    info = element_info(element_type)
    if element_type == ElementType.HALF_FLOAT:
        return float_to_half(value)
    if info.is_float:
        return _cast_float(value, element_type)
    if normalized:
        return int(normalize_value(value, ElementType.DOUBLE, element_type))

    value = float(value)
    if math.isnan(value):
        return 0
    return int(min(max(value, info.min_value), info.max_value))
