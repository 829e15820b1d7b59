"""Inventory method: COGS from booked opening and closing stock.

Scope is the whole store: all sales and all purchases, delivery
channels included.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .utils import safe_divide


@dataclass(frozen=True)
class InvMethodResult:
    """None in every field means the method is not applicable."""

    cogs: Optional[float]
    gross_profit: Optional[float]
    gross_profit_rate: Optional[float]


def calculate_inv_method(
    opening_inventory: Optional[float],
    closing_inventory: Optional[float],
    total_purchase_cost: float,
    total_sales: float,
) -> InvMethodResult:
    """COGS = opening + purchases - closing; GP = sales - COGS; GP% = GP / sales"""
    if opening_inventory is None or closing_inventory is None:
        return InvMethodResult(cogs=None, gross_profit=None, gross_profit_rate=None)

    cogs = opening_inventory + total_purchase_cost - closing_inventory
    gross_profit = total_sales - cogs
    gross_profit_rate = safe_divide(gross_profit, total_sales, 0.0)
    return InvMethodResult(
        cogs=cogs,
        gross_profit=gross_profit,
        gross_profit_rate=gross_profit_rate,
    )
