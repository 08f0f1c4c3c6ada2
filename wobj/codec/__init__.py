from wobj.codec.half import float_to_half, half_to_float, half_to_float32
from wobj.codec.numeric import (
    ElementType,
    decode_element,
    encode_element,
    normalize_value,
)

__all__ = [
    "ElementType",
    "normalize_value",
    "decode_element",
    "encode_element",
    "float_to_half",
    "half_to_float",
    "half_to_float32",
]
