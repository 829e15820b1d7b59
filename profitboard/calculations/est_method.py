"""Estimation method: COGS implied by markup and discount rates.

Scope is inventory-tracked sales only (flowers and direct produce are
excluded). The margin produced here is an inventory estimate, not the
booked gross profit; comparing the estimated closing inventory with the
counted one exposes shrinkage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .utils import safe_divide


@dataclass(frozen=True)
class EstMethodResult:
    gross_sales: float
    cogs: float
    margin: float
    margin_rate: float
    closing_inventory: Optional[float]


@dataclass(frozen=True)
class CoreSalesResult:
    core_sales: float
    is_over_delivery: bool
    over_delivery_amount: float


def calculate_est_method(
    core_sales: float,
    discount_rate: float,
    markup_rate: float,
    consumable_cost: float,
    opening_inventory: Optional[float],
    inventory_purchase_cost: float,
) -> EstMethodResult:
    """Back-solve COGS from the markup and discount rates.

    gross_sales       = core_sales / (1 - discount_rate)
    cogs              = gross_sales * (1 - markup_rate) + consumable_cost
    margin            = core_sales - cogs
    margin_rate       = margin / core_sales
    closing_inventory = opening + inventory_purchase_cost - cogs
    """
    divisor = 1 - discount_rate
    gross_sales = core_sales / divisor if divisor > 0 else core_sales

    cogs = gross_sales * (1 - markup_rate) + consumable_cost
    margin = core_sales - cogs
    margin_rate = safe_divide(margin, core_sales, 0.0)

    closing_inventory: Optional[float] = None
    if opening_inventory is not None:
        closing_inventory = opening_inventory + inventory_purchase_cost - cogs

    return EstMethodResult(
        gross_sales=gross_sales,
        cogs=cogs,
        margin=margin,
        margin_rate=margin_rate,
        closing_inventory=closing_inventory,
    )


def calculate_core_sales(
    total_sales: float,
    flower_sales_price: float,
    direct_produce_sales_price: float,
) -> CoreSalesResult:
    """Core sales = total sales - flower price - direct-produce price.

    A negative result is returned unclamped: it flags delivery figures
    that exceed the register total, which needs investigating upstream.
    """
    core_sales = total_sales - flower_sales_price - direct_produce_sales_price
    is_over_delivery = core_sales < 0
    return CoreSalesResult(
        core_sales=core_sales,
        is_over_delivery=is_over_delivery,
        over_delivery_amount=-core_sales if is_over_delivery else 0.0,
    )


def calculate_discount_rate(sales_amount: float, discount_amount: float) -> float:
    """Discount rate = discount / (sales + discount), on the pre-markdown price."""
    return safe_divide(discount_amount, sales_amount + discount_amount, 0.0)
