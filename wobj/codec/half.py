# wobj/codec/half.py
"""
IEEE 754-2008 binary16 conversion.

Layout: 1 sign bit, 5 exponent bits, 10 mantissa bits. Exponent field 0
holds zero and subnormals (implicit leading 0), field 31 holds Inf/NaN.
Encoding truncates toward zero, so a finite value never grows in magnitude.
"""

import math

import numpy as np

MANTISSA_BITS = 10
EXPONENT_MIN = -14
EXPONENT_MAX = 15
EXPONENT_SPECIAL = 31

SIGN_MASK = 0x8000
MANTISSA_MASK = 0x3FF


def float_to_half(value: float) -> int:
    """Encode a 32/64-bit float into the raw 16-bit pattern."""
    value = float(value)
    sign = SIGN_MASK if math.copysign(1.0, value) < 0 else 0

    if math.isnan(value):
        return sign | (EXPONENT_SPECIAL << MANTISSA_BITS) | MANTISSA_MASK

    magnitude = abs(value)
    if math.isinf(magnitude):
        return sign | (EXPONENT_SPECIAL << MANTISSA_BITS)
    if magnitude == 0.0:
        return sign

    fraction, exponent = math.frexp(magnitude)  # fraction in [0.5, 1)

    if exponent > EXPONENT_MAX + 1:
        return sign | (EXPONENT_SPECIAL << MANTISSA_BITS)

    if exponent <= EXPONENT_MIN:
        # Subnormal: magnitude = mantissa * 2^(E_MIN - MANTISSA_BITS)
        mantissa = int(math.ldexp(magnitude, MANTISSA_BITS - EXPONENT_MIN))
        return sign | mantissa

    field = exponent - EXPONENT_MIN
    mantissa = int(math.ldexp(fraction, MANTISSA_BITS + 1)) & MANTISSA_MASK
    return sign | (field << MANTISSA_BITS) | mantissa


def half_to_float(bits: int) -> float:
    """Decode a raw 16-bit pattern. Every half value is exact in a double."""
    sign = -1.0 if bits & SIGN_MASK else 1.0
    field = (bits >> MANTISSA_BITS) & 0x1F
    mantissa = bits & MANTISSA_MASK

    if field == EXPONENT_SPECIAL:
        if mantissa:
            return math.copysign(math.nan, sign)
        return math.copysign(math.inf, sign)

    if field == 0:
        value = math.ldexp(mantissa, EXPONENT_MIN - MANTISSA_BITS)
    else:
        value = math.ldexp(
            mantissa + (1 << MANTISSA_BITS),
            field + EXPONENT_MIN - MANTISSA_BITS - 1,
        )
    return math.copysign(value, sign)


def half_to_float32(bits: int) -> np.float32:
    return np.float32(half_to_float(bits))
