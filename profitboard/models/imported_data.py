from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .enums import DataType
from .records import (
    BudgetData,
    CategoryTimeSalesRecord,
    ConsumableDailyRecord,
    DepartmentKpiRecord,
    DiscountDayEntry,
    InventoryConfig,
    PurchaseDayEntry,
    SalesDayEntry,
    SpecialSalesDayEntry,
    Store,
    Supplier,
    TransferDayEntry,
)

PurchaseData = dict[str, dict[int, PurchaseDayEntry]]
SalesData = dict[str, dict[int, SalesDayEntry]]
DiscountData = dict[str, dict[int, DiscountDayEntry]]
TransferData = dict[str, dict[int, TransferDayEntry]]
SpecialSalesData = dict[str, dict[int, SpecialSalesDayEntry]]
ConsumableData = dict[str, dict[int, ConsumableDailyRecord]]


@dataclass(frozen=True)
class ImportedData:
    """Everything imported for one trading month.

    Each ledger field maps store id -> day -> record. Reference and
    settings collections are keyed by id. Instances are treated as
    values: merge and overwrite build new objects instead of mutating.
    """

    stores: dict[str, Store] = field(default_factory=dict)
    suppliers: dict[str, Supplier] = field(default_factory=dict)

    purchase: PurchaseData = field(default_factory=dict)
    sales: SalesData = field(default_factory=dict)
    discount: DiscountData = field(default_factory=dict)
    prev_year_sales: SalesData = field(default_factory=dict)
    prev_year_discount: DiscountData = field(default_factory=dict)
    inter_store_in: TransferData = field(default_factory=dict)
    inter_store_out: TransferData = field(default_factory=dict)
    flowers: SpecialSalesData = field(default_factory=dict)
    direct_produce: SpecialSalesData = field(default_factory=dict)
    consumables: ConsumableData = field(default_factory=dict)

    category_time_sales: tuple[CategoryTimeSalesRecord, ...] = ()
    prev_year_category_time_sales: tuple[CategoryTimeSalesRecord, ...] = ()
    department_kpi: tuple[DepartmentKpiRecord, ...] = ()

    settings: dict[str, InventoryConfig] = field(default_factory=dict)
    budget: dict[str, BudgetData] = field(default_factory=dict)


# Ledger data types in reconciliation order, with the attribute holding them.
LEDGER_FIELDS: tuple[tuple[DataType, str], ...] = (
    (DataType.PURCHASE, "purchase"),
    (DataType.SALES, "sales"),
    (DataType.DISCOUNT, "discount"),
    (DataType.PREV_YEAR_SALES, "prev_year_sales"),
    (DataType.PREV_YEAR_DISCOUNT, "prev_year_discount"),
    (DataType.INTER_STORE_IN, "inter_store_in"),
    (DataType.INTER_STORE_OUT, "inter_store_out"),
    (DataType.FLOWERS, "flowers"),
    (DataType.DIRECT_PRODUCE, "direct_produce"),
    (DataType.CONSUMABLES, "consumables"),
)

CATEGORY_TIME_SALES_FIELDS: tuple[tuple[DataType, str], ...] = (
    (DataType.CATEGORY_TIME_SALES, "category_time_sales"),
    (DataType.PREV_YEAR_CATEGORY_TIME_SALES, "prev_year_category_time_sales"),
)


@dataclass(frozen=True)
class PersistedMeta:
    """Metadata of the last saved month, used for the restore prompt."""

    year: int
    month: int
    saved_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


MAX_DAY = 31


def is_valid_day(day: object) -> bool:
    """True for a genuine int day key in 1..31."""
    return isinstance(day, int) and not isinstance(day, bool) and 1 <= day <= MAX_DAY
