"""Same-weekday alignment of a comparison month onto the target month.

The comparison month (normally the same month one year earlier) starts on
a different weekday. Shifting its day numbers by the weekday offset lines
Sundays up with Sundays, so day-by-day comparisons are like for like.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, TypeVar

from profitboard.models.imported_data import DiscountData, ImportedData, SalesData
from profitboard.models.records import CategoryTimeSalesRecord, SalesDayEntry
from profitboard.models.settings import AppSettings

from .calculator import days_in_month

if TYPE_CHECKING:
    from profitboard.storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

OVERFLOW_DAYS = 6

T = TypeVar("T")


def day_of_week(year: int, month: int, day: int = 1) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (date(year, month, day).weekday() + 1) % 7


def _is_valid_int(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def comparison_period(
    year: int,
    month: int,
    source_year: Optional[int] = None,
    source_month: Optional[int] = None,
) -> tuple[int, int]:
    """The comparison (year, month): one year back unless overridden."""
    return (
        source_year if source_year is not None else year - 1,
        source_month if source_month is not None else month,
    )


def calc_same_dow_offset(
    year: int,
    month: int,
    source_year: Optional[int] = None,
    source_month: Optional[int] = None,
) -> int:
    """Days to subtract from a comparison-month day to land on the same weekday.

    Example: 2026-02-01 is a Sunday, 2025-02-01 a Saturday, so the offset
    is 1 and comparison day 2 (Sunday) maps onto target day 1.

    Returns 0 for any input that does not name a real month.
    """
    src_year, src_month = comparison_period(year, month, source_year, source_month)
    for v in (year, month, src_year, src_month):
        if not _is_valid_int(v):
            return 0
    try:
        current = day_of_week(int(year), int(month))
        source = day_of_week(int(src_year), int(src_month))
    except (ValueError, OverflowError):
        return 0
    return ((current - source) % 7 + 7) % 7


def clamp_offset(value: float) -> int:
    """Round and clamp an offset into [0, 6]; non-finite values become 0."""
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return max(0, min(6, int(round(value))))


def resolve_dow_offset(settings: AppSettings) -> int:
    """Manual override from settings when present, else the computed offset."""
    if settings.prev_year_dow_offset is not None:
        return clamp_offset(settings.prev_year_dow_offset)
    offset = calc_same_dow_offset(
        settings.target_year,
        settings.target_month,
        settings.prev_year_source_year,
        settings.prev_year_source_month,
    )
    return clamp_offset(offset)


def remap_daily(
    days: Mapping[int, T],
    offset: int,
    days_in_target_month: int,
) -> dict[int, T]:
    """Shift day keys by -offset, dropping days outside the target month."""
    remapped: dict[int, T] = {}
    for day, value in days.items():
        mapped = day - offset
        if 1 <= mapped <= days_in_target_month:
            remapped[mapped] = value
    return remapped


def remap_category_time_sales(
    records: Iterable[CategoryTimeSalesRecord],
    offset: int,
    days_in_target_month: int,
    store_ids: Optional[set[str]] = None,
) -> tuple[CategoryTimeSalesRecord, ...]:
    """Replace each record's day with its target-month day; other fields untouched."""
    out: list[CategoryTimeSalesRecord] = []
    for rec in records:
        if store_ids is not None and rec.store_id not in store_ids:
            continue
        mapped = rec.day - offset
        if mapped < 1 or mapped > days_in_target_month:
            continue
        out.append(dataclasses.replace(rec, day=mapped))
    return tuple(out)


def merge_overflow(
    current: Mapping[str, Mapping[int, T]],
    following: Optional[Mapping[str, Mapping[int, T]]],
    days_in_source_month: int,
    overflow_days: int = OVERFLOW_DAYS,
) -> dict[str, dict[int, T]]:
    """Fold the first days of the following month in as days_in_source_month + n."""
    merged: dict[str, dict[int, T]] = {sid: dict(days) for sid, days in current.items()}
    if not following:
        return merged
    for store_id, days in following.items():
        target = merged.setdefault(store_id, {})
        for day, entry in days.items():
            if day <= overflow_days:
                target[days_in_source_month + day] = entry
    return merged


def merge_overflow_records(
    current: Iterable[CategoryTimeSalesRecord],
    following: Optional[Iterable[CategoryTimeSalesRecord]],
    days_in_source_month: int,
    overflow_days: int = OVERFLOW_DAYS,
) -> tuple[CategoryTimeSalesRecord, ...]:
    merged = list(current)
    for rec in following or ():
        if rec.day <= overflow_days:
            merged.append(dataclasses.replace(rec, day=days_in_source_month + rec.day))
    return tuple(merged)


@dataclass(frozen=True)
class PrevYearDailyEntry:
    sales: float = 0.0
    discount: float = 0.0
    customers: int = 0


@dataclass(frozen=True)
class PrevYearData:
    has_prev_year: bool = False
    daily: dict[int, PrevYearDailyEntry] = field(default_factory=dict)
    total_sales: float = 0.0
    total_discount: float = 0.0
    total_customers: int = 0
    offset: int = 0


def build_prev_year_daily(
    prev_year_discount: DiscountData,
    offset: int,
    days_in_target_month: int,
    store_ids: Optional[set[str]] = None,
) -> PrevYearData:
    """Comparison-period daily series, summed over the selected stores.

    ``store_ids`` of None means every store.
    """
    target_ids = [
        sid for sid in prev_year_discount if store_ids is None or sid in store_ids
    ]
    if not target_ids:
        return PrevYearData(offset=offset)

    daily: dict[int, PrevYearDailyEntry] = {}
    for store_id in target_ids:
        aligned = remap_daily(prev_year_discount[store_id], offset, days_in_target_month)
        for day, entry in aligned.items():
            existing = daily.get(day, PrevYearDailyEntry())
            daily[day] = PrevYearDailyEntry(
                sales=existing.sales + entry.sales,
                discount=existing.discount + entry.discount,
                customers=existing.customers + (entry.customers or 0),
            )
    daily = dict(sorted(daily.items()))

    return PrevYearData(
        has_prev_year=True,
        daily=daily,
        total_sales=sum(e.sales for e in daily.values()),
        total_discount=sum(e.discount for e in daily.values()),
        total_customers=sum(e.customers for e in daily.values()),
        offset=offset,
    )


@dataclass(frozen=True)
class PrevYearComparison:
    """Comparison-period figures aligned onto the target month's days."""

    aggregate: PrevYearData
    stores: dict[str, PrevYearData] = field(default_factory=dict)
    category_time_sales: tuple[CategoryTimeSalesRecord, ...] = ()


def align_prev_year(
    data: ImportedData,
    settings: AppSettings,
    days_in_target_month: int,
) -> Optional[PrevYearComparison]:
    """Align ``data``'s comparison-period fields, or None when it has none."""
    if not data.prev_year_discount and not data.prev_year_category_time_sales:
        return None
    offset = resolve_dow_offset(settings)
    stores = {
        sid: build_prev_year_daily(data.prev_year_discount, offset, days_in_target_month, {sid})
        for sid in data.stores
    }
    return PrevYearComparison(
        aggregate=build_prev_year_daily(data.prev_year_discount, offset, days_in_target_month),
        stores=stores,
        category_time_sales=remap_category_time_sales(
            data.prev_year_category_time_sales, offset, days_in_target_month
        ),
    )


def discount_to_sales(discount: DiscountData) -> SalesData:
    return {
        store_id: {
            day: SalesDayEntry(sales=entry.sales, customers=entry.customers)
            for day, entry in days.items()
        }
        for store_id, days in discount.items()
    }


def auto_load_prev_year(
    snapshot_store: "SnapshotStore",
    data: ImportedData,
    settings: AppSettings,
    overflow_days: int = OVERFLOW_DAYS,
) -> ImportedData:
    """Fill empty comparison-period fields from the stored comparison month.

    Runs only when current-month discount data is present and nothing has
    been imported for the comparison period; explicit imports win. The
    comparison month is stored with its own day numbers plus the first
    ``overflow_days`` of the following month as extended days.
    """
    if data.prev_year_discount or not data.discount:
        return data

    src_year, src_month = comparison_period(
        settings.target_year,
        settings.target_month,
        settings.prev_year_source_year,
        settings.prev_year_source_month,
    )
    prev_discount = snapshot_store.load_slice(src_year, src_month, "discount")
    if not prev_discount:
        logger.debug(f"No stored comparison data for {src_year}-{src_month:02d}")
        return data

    prev_cts = snapshot_store.load_slice(src_year, src_month, "category_time_sales") or ()
    next_year, next_month = (src_year + 1, 1) if src_month == 12 else (src_year, src_month + 1)
    next_discount = snapshot_store.load_slice(next_year, next_month, "discount")
    next_cts = snapshot_store.load_slice(next_year, next_month, "category_time_sales")

    days_in_source = days_in_month(src_year, src_month)
    merged_discount = merge_overflow(prev_discount, next_discount, days_in_source, overflow_days)
    merged_cts = merge_overflow_records(prev_cts, next_cts, days_in_source, overflow_days)

    logger.info(
        f"Loaded comparison data for {src_year}-{src_month:02d} "
        f"({len(merged_discount)} stores, {len(merged_cts)} category rows)"
    )
    return dataclasses.replace(
        data,
        prev_year_sales=discount_to_sales(merged_discount),
        prev_year_discount=merged_discount,
        prev_year_category_time_sales=merged_cts,
    )
