"""Raw per-day records as delivered by the import adapters.

Ledger data types share one shape: store id -> day of month -> record.
A missing day means "no data for that day", never zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .costing import CostPricePair, ZERO_COST_PRICE_PAIR
from .enums import CategoryType


# ─── Reference data ──────────────────────────────────────────


@dataclass(frozen=True)
class Store:
    id: str
    code: str
    name: str


@dataclass(frozen=True)
class Supplier:
    code: str
    name: str
    category: CategoryType = CategoryType.OTHER
    markup_rate: Optional[float] = None


# ─── Ledger day entries ──────────────────────────────────────


@dataclass(frozen=True)
class SupplierLine:
    name: str
    cost: float
    price: float


@dataclass(frozen=True)
class PurchaseDayEntry:
    """One store-day of purchases, broken down by supplier code."""

    suppliers: dict[str, SupplierLine] = field(default_factory=dict)
    total: CostPricePair = ZERO_COST_PRICE_PAIR


@dataclass(frozen=True)
class SalesDayEntry:
    sales: float
    customers: Optional[int] = None


@dataclass(frozen=True)
class DiscountDayEntry:
    sales: float
    discount: float
    customers: Optional[int] = None


@dataclass(frozen=True)
class TransferRecord:
    day: int
    cost: float
    price: float
    from_store_id: str
    to_store_id: str
    is_department_transfer: bool = False


@dataclass(frozen=True)
class TransferDayEntry:
    """Transfer slips for one store-day, split by direction and scope."""

    inter_store_in: tuple[TransferRecord, ...] = ()
    inter_store_out: tuple[TransferRecord, ...] = ()
    inter_department_in: tuple[TransferRecord, ...] = ()
    inter_department_out: tuple[TransferRecord, ...] = ()


@dataclass(frozen=True)
class SpecialSalesDayEntry:
    """Flower or direct-produce delivery sales for one store-day."""

    price: float
    cost: float


@dataclass(frozen=True)
class ConsumableItem:
    account_code: str
    item_code: str
    item_name: str
    quantity: float
    cost: float


@dataclass(frozen=True)
class ConsumableDailyRecord:
    cost: float = 0.0
    items: tuple[ConsumableItem, ...] = ()


ZERO_CONSUMABLE_DAILY = ConsumableDailyRecord(cost=0.0, items=())


# ─── List collections ────────────────────────────────────────


@dataclass(frozen=True)
class CodeName:
    code: str
    name: str


@dataclass(frozen=True)
class TimeSlotEntry:
    hour: int
    quantity: float
    amount: float


@dataclass(frozen=True)
class CategoryTimeSalesRecord:
    """One category row of the category/time-slot sales sheet."""

    day: int
    store_id: str
    department: CodeName
    line: CodeName
    klass: CodeName
    time_slots: tuple[TimeSlotEntry, ...] = ()
    total_quantity: float = 0.0
    total_amount: float = 0.0


def category_time_sales_record_key(rec: CategoryTimeSalesRecord) -> str:
    """Identity key used to deduplicate category/time-slot rows."""
    return "\t".join(
        [str(rec.day), rec.store_id, rec.department.code, rec.line.code, rec.klass.code]
    )


@dataclass(frozen=True)
class DepartmentKpiRecord:
    dept_code: str
    dept_name: str
    gp_rate_budget: float = 0.0
    gp_rate_actual: float = 0.0
    gp_rate_variance: float = 0.0
    markup_rate: float = 0.0
    discount_rate: float = 0.0
    sales_budget: float = 0.0
    sales_actual: float = 0.0
    sales_variance: float = 0.0
    sales_achievement: float = 0.0
    opening_inventory: float = 0.0
    closing_inventory: float = 0.0
    gp_rate_landing: float = 0.0
    sales_landing: float = 0.0


# ─── Per-store settings ──────────────────────────────────────


@dataclass(frozen=True)
class InventoryConfig:
    store_id: str
    opening_inventory: Optional[float] = None
    closing_inventory: Optional[float] = None
    gross_profit_budget: Optional[float] = None


@dataclass(frozen=True)
class BudgetData:
    store_id: str
    total: float
    daily: dict[int, float] = field(default_factory=dict)
