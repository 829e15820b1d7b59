from __future__ import annotations

from .utils import safe_divide


def calculate_discount_loss_cost(
    core_sales: float,
    markup_rate: float,
    discount_rate: float,
) -> float:
    """Markdown value converted to cost.

    Loss = (1 - markup_rate) * core_sales * discount_rate / (1 - discount_rate)

    Diagnostic only; neither costing method adds it to its totals.
    """
    divisor = 1 - discount_rate
    return (1 - markup_rate) * core_sales * safe_divide(
        discount_rate, divisor if divisor > 0 else 1, 0.0
    )
