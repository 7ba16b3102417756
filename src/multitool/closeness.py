"""Closeness tests for inexact numbers.

``close`` compares floats. ``big_close`` compares integer token amounts
denominated in 10^18 fixed point, where the default epsilon of 10^15
leaves room for rounding and gas-fee slop. Pass ``epsilon=1`` to demand
exact equality.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Union

SMALL_EPSILON = 1.0e-6
BIG_EPSILON = 10**15
ETH_DENOMINATOR = 10**18

BigLike = Union[int, str, float, Decimal]


def close(a: float, b: float, epsilon: float = SMALL_EPSILON) -> bool:
    return abs(a - b) < epsilon


def to_big(value: BigLike) -> int:
    """Coerce an amount to an ``int``.

    Accepts ints, decimal or ``0x``-prefixed hex strings, and floats or
    Decimals with no fractional part. Raises ValueError otherwise.
    """
    if isinstance(value, bool):
        raise ValueError(f"not an amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text)
        except ValueError:
            raise ValueError(f"not an integer amount: {value!r}") from None
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value != int(value):
            raise ValueError(f"not an integer amount: {value!r}")
        return int(value)
    raise ValueError(f"unsupported amount type: {type(value).__name__}")


def big_close(a: BigLike, b: BigLike, epsilon: BigLike = BIG_EPSILON) -> bool:
    a, b, epsilon = to_big(a), to_big(b), to_big(epsilon)
    diff = abs(a - b)
    logging.getLogger("multitool").debug(
        f"big_close: a={a} b={b} diff={diff} epsilon={epsilon}"
    )
    return diff < epsilon


def to_eth(value: float | str, precise: int = 10, denom: int = ETH_DENOMINATOR) -> int:
    """Convert a decimal amount to fixed point, keeping *precise* significant digits.

    ``to_eth("1.5") == 1_500_000_000_000_000_000``
    """
    rounded = float(f"{float(value):.{precise}g}")
    scaled = math.floor(rounded * 10**precise + 0.5)
    return scaled * denom // 10**precise
