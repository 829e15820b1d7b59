"""Immutable per-day and per-store calculation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from profitboard.calculations.advanced_forecast import MonthEndProjection
from profitboard.calculations.budget_analysis import CumulativePoint
from profitboard.calculations.forecast import ForecastResult
from profitboard.models.costing import CostPricePair, ZERO_COST_PRICE_PAIR
from profitboard.models.enums import CategoryType
from profitboard.models.records import ConsumableDailyRecord, ZERO_CONSUMABLE_DAILY

AGGREGATE_STORE_ID = "aggregate"


@dataclass(frozen=True)
class TransferBreakdownEntry:
    from_store_id: str
    to_store_id: str
    cost: float
    price: float


@dataclass(frozen=True)
class TransferBreakdown:
    inter_store_in: tuple[TransferBreakdownEntry, ...] = ()
    inter_store_out: tuple[TransferBreakdownEntry, ...] = ()
    inter_department_in: tuple[TransferBreakdownEntry, ...] = ()
    inter_department_out: tuple[TransferBreakdownEntry, ...] = ()


@dataclass(frozen=True)
class DailyRecord:
    """One store-day, fully resolved. Built once and never changed."""

    day: int
    sales: float
    core_sales: float
    gross_sales: float
    purchase: CostPricePair = ZERO_COST_PRICE_PAIR
    delivery_sales: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_store_in: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_store_out: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_department_in: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_department_out: CostPricePair = ZERO_COST_PRICE_PAIR
    flowers: CostPricePair = ZERO_COST_PRICE_PAIR
    direct_produce: CostPricePair = ZERO_COST_PRICE_PAIR
    consumable: ConsumableDailyRecord = ZERO_CONSUMABLE_DAILY
    discount_amount: float = 0.0
    discount_absolute: float = 0.0
    customers: int = 0
    supplier_breakdown: dict[str, CostPricePair] = field(default_factory=dict)
    transfer_breakdown: TransferBreakdown = field(default_factory=TransferBreakdown)

    @property
    def total_cost(self) -> float:
        """Purchases, every transfer direction and delivery cost for the day."""
        return (
            self.purchase.cost
            + self.inter_store_in.cost
            + self.inter_store_out.cost
            + self.inter_department_in.cost
            + self.inter_department_out.cost
            + self.delivery_sales.cost
        )


@dataclass(frozen=True)
class SupplierTotal:
    supplier_code: str
    supplier_name: str
    category: CategoryType
    cost: float
    price: float
    markup_rate: float = 0.0


@dataclass(frozen=True)
class TransferDetails:
    inter_store_in: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_store_out: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_department_in: CostPricePair = ZERO_COST_PRICE_PAIR
    inter_department_out: CostPricePair = ZERO_COST_PRICE_PAIR
    net_transfer: CostPricePair = ZERO_COST_PRICE_PAIR


@dataclass(frozen=True)
class StoreResult:
    """Month summary for one store, or for all stores when store_id is "aggregate".

    Inventory-method fields are None when the store has no opening or
    closing inventory; the estimation method is always populated.
    """

    store_id: str

    # Inventory (booked)
    opening_inventory: Optional[float]
    closing_inventory: Optional[float]

    # Sales
    total_sales: float
    total_core_sales: float
    delivery_sales_price: float
    flower_sales_price: float
    direct_produce_sales_price: float
    gross_sales: float

    # Cost
    total_cost: float
    inventory_cost: float
    delivery_sales_cost: float

    # Inventory method
    inv_method_cogs: Optional[float]
    inv_method_gross_profit: Optional[float]
    inv_method_gross_profit_rate: Optional[float]

    # Estimation method
    est_method_cogs: float
    est_method_margin: float
    est_method_margin_rate: float
    est_method_closing_inventory: Optional[float]

    # Customers
    total_customers: int
    average_customers_per_day: float

    # Discount
    total_discount: float
    discount_rate: float
    discount_loss_cost: float

    # Markup
    average_markup_rate: float
    core_markup_rate: float

    # Consumables
    total_consumable: float
    consumable_rate: float

    # Budget
    budget: float
    gross_profit_budget: float
    gross_profit_rate_budget: float
    budget_daily: dict[int, float]

    # Breakdown
    daily: dict[int, DailyRecord]
    category_totals: dict[CategoryType, CostPricePair]
    supplier_totals: dict[str, SupplierTotal]
    transfer_details: TransferDetails

    # Forecast / KPI
    elapsed_days: int
    sales_days: int
    average_daily_sales: float
    projected_sales: float
    projected_achievement: float
    budget_achievement_rate: float
    budget_progress_rate: float
    remaining_budget: float
    daily_cumulative: dict[int, CumulativePoint]
    over_delivery_amount: float = 0.0


@dataclass(frozen=True)
class StoreForecast:
    store_id: str
    forecast: ForecastResult
    month_end: MonthEndProjection
