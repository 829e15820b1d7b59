"""Numeric guards used by every calculation.

None of these raise: degenerate inputs fold into a fallback value so
that NaN or infinity never reaches a caller.
"""

from __future__ import annotations

import math
from typing import Any


def safe_number(value: Any) -> float:
    """Coerce to float; None, NaN and unparseable values become 0."""
    if value is None:
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(num) else num


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """numerator / denominator, or fallback when the denominator is 0 or NaN."""
    if denominator == 0 or math.isnan(denominator):
        return fallback
    result = numerator / denominator
    if not math.isfinite(result):
        return fallback
    return result
