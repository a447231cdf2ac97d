"""
issuance_engines.quantities -- Quantity input coercion and clamping.

Quantities are whole component counts.  Input arrives from text fields, so
anything may show up: ``None``, ``"abc"``, ``"7"``, ``-1``, ``2.5``, NaN.
``coerce_quantity`` returns ``None`` for anything that is not a
non-negative whole number; callers treat ``None`` as "drop the input".
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def coerce_quantity(value: Any) -> int | None:
    """Parse a user-entered quantity, or return None if it is unusable.

    Accepts ints, integral floats/Decimals and numeric strings.  Rejects
    ``None``, booleans, NaN/infinity, negatives and fractional values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        number = Decimal(str(value))
    elif isinstance(value, Decimal):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite() or number < 0:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def to_int(value: Any, default: int = 0) -> int:
    """Lenient integer read for server payloads (``Number(x) || 0``)."""
    parsed = coerce_quantity(value)
    return parsed if parsed is not None else default


def clamp_mif_quantity(quantity: int, upper_bound: int) -> int:
    """Clamp an issue quantity to ``[0, upper_bound]``."""
    return max(0, min(quantity, max(upper_bound, 0)))
