"""Floating-point inspection helpers.

Used to compare path probabilities that may differ only in the last few
bits after long chains of products.
"""

import math

import numpy as np

from rhmm.types import DoubleComponents

_EXPONENT_MASK = 0x7FF
_MANTISSA_MASK = (1 << 52) - 1
_SIGN_BIT = 1 << 63
_MAGNITUDE_MASK = _SIGN_BIT - 1


def _bits(x: float) -> int:
    """Raw IEEE-754 bits of ``x`` as an unsigned 64-bit integer."""
    return int(np.array(x, dtype=np.float64).view(np.uint64))


def decompose(x: float) -> DoubleComponents:
    """Split a double into sign, exponent and mantissa.

    For finite non-zero ``x`` the result satisfies
    ``abs(x) == mantissa * 2 ** exponent`` with ``mantissa`` odd.
    """
    bits = _bits(x)
    negative = bool(bits & _SIGN_BIT)
    raw_exponent = (bits >> 52) & _EXPONENT_MASK
    raw_mantissa = bits & _MANTISSA_MASK

    base = DoubleComponents(
        datum=x,
        negative=negative,
        raw_exponent=raw_exponent,
        raw_mantissa=raw_mantissa,
    )

    if raw_exponent == _EXPONENT_MASK and raw_mantissa != 0:
        return base._replace(is_nan=True)

    if raw_exponent == 0:
        if raw_mantissa == 0:
            return base
        # Subnormal: no implicit leading bit, exponent fixed at -1022
        exponent = 1
        mantissa = raw_mantissa
    else:
        exponent = raw_exponent
        mantissa = raw_mantissa | (1 << 52)

    # Treat the mantissa as an integer rather than a fraction
    exponent -= 1075

    while mantissa & 1 == 0:
        mantissa >>= 1
        exponent += 1

    return base._replace(exponent=exponent, mantissa=mantissa)


def _twos_complement_bits(x: float) -> int:
    bits = _bits(x)
    # Negative doubles map below zero so integer order matches float order
    if bits & _SIGN_BIT:
        return -(bits & _MAGNITUDE_MASK)
    return bits


def quanta_difference(a: float, b: float) -> int:
    """Number of representable doubles separating ``a`` and ``b``.

    Returns -1 if either argument is NaN. Adjacent doubles differ by 1, and
    +0.0 / -0.0 are 0 apart.
    """
    if math.isnan(a) or math.isnan(b):
        return -1
    return abs(_twos_complement_bits(a) - _twos_complement_bits(b))


def nearly_equal(a: float, b: float, n_quanta: int) -> bool:
    """True when ``a`` and ``b`` are at most ``n_quanta`` doubles apart."""
    if n_quanta < 0:
        raise ValueError(f"n_quanta must be >= 0, got {n_quanta}")
    if math.isnan(a) or math.isnan(b):
        return False
    return quanta_difference(a, b) <= n_quanta


def within_absolute_difference(a: float, b: float, delta: float) -> bool:
    return abs(a - b) <= abs(delta)
