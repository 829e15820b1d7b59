"""Cost/price pair primitive shared by every ledger and result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class CostPricePair:
    """An amount booked at cost and at retail price."""

    cost: float = 0.0
    price: float = 0.0


ZERO_COST_PRICE_PAIR = CostPricePair(cost=0.0, price=0.0)


def add_cost_price_pairs(a: CostPricePair, b: CostPricePair) -> CostPricePair:
    """Return the component-wise sum of two pairs."""
    return CostPricePair(cost=a.cost + b.cost, price=a.price + b.price)


def sum_cost_price_pairs(pairs: Iterable[CostPricePair]) -> CostPricePair:
    total = ZERO_COST_PRICE_PAIR
    for pair in pairs:
        total = add_cost_price_pairs(total, pair)
    return total
