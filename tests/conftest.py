"""Shared test fixtures for the profitboard test suite."""

import pytest

from profitboard.models.costing import CostPricePair
from profitboard.models.enums import CategoryType
from profitboard.models.imported_data import ImportedData
from profitboard.models.records import (
    BudgetData,
    DiscountDayEntry,
    InventoryConfig,
    PurchaseDayEntry,
    SalesDayEntry,
    SpecialSalesDayEntry,
    Store,
    Supplier,
    SupplierLine,
)
from profitboard.models.settings import AppSettings


def make_purchase(cost, price, supplier="S1", name="Central Market"):
    """Helper to create a single-supplier purchase day."""
    return PurchaseDayEntry(
        suppliers={supplier: SupplierLine(name=name, cost=cost, price=price)},
        total=CostPricePair(cost=cost, price=price),
    )


@pytest.fixture
def app_settings() -> AppSettings:
    """February 2026: 28 days, starts on a Sunday."""
    return AppSettings(target_year=2026, target_month=2)


@pytest.fixture
def two_store_data() -> ImportedData:
    """Two stores with hand-checkable figures.

    Store 1: sales 900 + 600, purchases 700 + 350 at cost (1000 + 500 at
    price), one flower delivery (cost 80 / price 100), a 100 markdown on
    day 1, inventory 5000 -> 4800 and a 30,000 budget.
    Store 2: one day of 250 sales against 140 purchases, opening
    inventory only, no budget.
    """
    return ImportedData(
        stores={
            "1": Store(id="1", code="001", name="Main"),
            "2": Store(id="2", code="002", name="East"),
        },
        suppliers={
            "S1": Supplier(code="S1", name="Central Market", category=CategoryType.MARKET),
        },
        purchase={
            "1": {1: make_purchase(700, 1000), 2: make_purchase(350, 500)},
            "2": {1: make_purchase(140, 200)},
        },
        sales={
            "1": {1: SalesDayEntry(sales=900, customers=30), 2: SalesDayEntry(sales=600, customers=20)},
            "2": {1: SalesDayEntry(sales=250, customers=10)},
        },
        discount={
            "1": {1: DiscountDayEntry(sales=900, discount=100, customers=30)},
        },
        flowers={
            "1": {2: SpecialSalesDayEntry(price=100, cost=80)},
        },
        settings={
            "1": InventoryConfig(store_id="1", opening_inventory=5000, closing_inventory=4800),
            "2": InventoryConfig(store_id="2", opening_inventory=1000),
        },
        budget={
            "1": BudgetData(store_id="1", total=30000, daily={d: 1000.0 for d in range(1, 29)}),
        },
    )
