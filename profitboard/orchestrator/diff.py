"""Diff newly imported data against what is already stored.

Three kinds of change are detected per data type:
1. insert: nothing stored, value incoming -> auto-approved
2. modify: stored and incoming values differ -> needs confirmation
3. remove: stored value with nothing incoming -> needs confirmation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from profitboard.models.enums import ChangeType, DataType
from profitboard.models.imported_data import (
    CATEGORY_TIME_SALES_FIELDS,
    LEDGER_FIELDS,
    ImportedData,
    is_valid_day,
)
from profitboard.models.records import (
    CategoryTimeSalesRecord,
    ConsumableDailyRecord,
    DiscountDayEntry,
    PurchaseDayEntry,
    SalesDayEntry,
    SpecialSalesDayEntry,
    TransferDayEntry,
    category_time_sales_record_key,
)

logger = logging.getLogger(__name__)

VALUE_TOLERANCE = 0.001

DATA_TYPE_NAMES: dict[DataType, str] = {
    DataType.PURCHASE: "Purchases",
    DataType.SALES: "Sales",
    DataType.DISCOUNT: "Markdowns",
    DataType.PREV_YEAR_SALES: "Prior-year sales",
    DataType.PREV_YEAR_DISCOUNT: "Prior-year markdowns",
    DataType.INTER_STORE_IN: "Transfers in",
    DataType.INTER_STORE_OUT: "Transfers out",
    DataType.FLOWERS: "Flowers",
    DataType.DIRECT_PRODUCE: "Direct produce",
    DataType.CONSUMABLES: "Consumables",
    DataType.CATEGORY_TIME_SALES: "Category/time-slot sales",
    DataType.PREV_YEAR_CATEGORY_TIME_SALES: "Prior-year category/time-slot sales",
}

FieldValue = Optional[Union[float, str]]


@dataclass(frozen=True)
class FieldChange:
    store_id: str
    store_name: str
    day: int
    field_path: str
    old_value: FieldValue
    new_value: FieldValue


@dataclass(frozen=True)
class DataTypeDiff:
    data_type: DataType
    data_type_name: str
    inserts: tuple[FieldChange, ...] = ()
    modifications: tuple[FieldChange, ...] = ()
    removals: tuple[FieldChange, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.inserts or self.modifications or self.removals)

    @property
    def needs_confirmation(self) -> bool:
        return bool(self.modifications or self.removals)


@dataclass(frozen=True)
class DiffResult:
    diffs: tuple[DataTypeDiff, ...]
    needs_confirmation: bool
    auto_approved: tuple[DataType, ...]

    def for_type(self, data_type: DataType) -> Optional[DataTypeDiff]:
        for d in self.diffs:
            if d.data_type == data_type:
                return d
        return None


# ─── Per-type comparable projections ─────────────────────────


def _sum_slips(slips: Iterable[Any]) -> tuple[float, float]:
    cost = 0.0
    price = 0.0
    for s in slips:
        cost += s.cost
        price += s.price
    return cost, price


def _project_purchase(entry: PurchaseDayEntry) -> dict[str, FieldValue]:
    fields: dict[str, FieldValue] = {
        "total.cost": entry.total.cost,
        "total.price": entry.total.price,
    }
    for code, line in entry.suppliers.items():
        fields[f"suppliers.{code}.cost"] = line.cost
        fields[f"suppliers.{code}.price"] = line.price
    return fields


def _project_sales(entry: SalesDayEntry) -> dict[str, FieldValue]:
    return {"sales": entry.sales, "customers": entry.customers}


def _project_discount(entry: DiscountDayEntry) -> dict[str, FieldValue]:
    return {"sales": entry.sales, "discount": entry.discount, "customers": entry.customers}


def _project_transfer(entry: TransferDayEntry) -> dict[str, FieldValue]:
    fields: dict[str, FieldValue] = {}
    for direction in (
        "inter_store_in",
        "inter_store_out",
        "inter_department_in",
        "inter_department_out",
    ):
        slips = getattr(entry, direction)
        if slips:
            cost, price = _sum_slips(slips)
            fields[f"{direction}.cost"] = cost
            fields[f"{direction}.price"] = price
    return fields


def _project_special(entry: SpecialSalesDayEntry) -> dict[str, FieldValue]:
    return {"price": entry.price, "cost": entry.cost}


def _project_consumable(entry: ConsumableDailyRecord) -> dict[str, FieldValue]:
    return {"cost": entry.cost}


PROJECTIONS: dict[DataType, Callable[[Any], dict[str, FieldValue]]] = {
    DataType.PURCHASE: _project_purchase,
    DataType.SALES: _project_sales,
    DataType.DISCOUNT: _project_discount,
    DataType.PREV_YEAR_SALES: _project_sales,
    DataType.PREV_YEAR_DISCOUNT: _project_discount,
    DataType.INTER_STORE_IN: _project_transfer,
    DataType.INTER_STORE_OUT: _project_transfer,
    DataType.FLOWERS: _project_special,
    DataType.DIRECT_PRODUCE: _project_special,
    DataType.CONSUMABLES: _project_consumable,
}


def values_equal(a: FieldValue, b: FieldValue) -> bool:
    if a == b:
        return True
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return abs(a - b) < VALUE_TOLERANCE
    return False


def _store_name(store_id: str, existing: ImportedData, incoming: ImportedData) -> str:
    store = existing.stores.get(store_id) or incoming.stores.get(store_id)
    return store.name if store is not None else store_id


# ─── Ledger diff ─────────────────────────────────────────────


def _record_changes(
    store_id: str,
    name: str,
    day: int,
    fields: Mapping[str, FieldValue],
    inserted: bool,
) -> list[FieldChange]:
    """One change per populated field; a record with none still yields one entry."""
    changes = [
        FieldChange(store_id, name, day, path, None, val)
        if inserted
        else FieldChange(store_id, name, day, path, val, None)
        for path, val in fields.items()
        if val is not None
    ]
    if not changes:
        changes.append(FieldChange(store_id, name, day, "", None, None))
    return changes


def _valid_days(days: Mapping[Any, Any], data_type: DataType, store_id: str) -> set[int]:
    valid = set()
    for day in days:
        if is_valid_day(day):
            valid.add(day)
        else:
            logger.warning(f"Skipping malformed day key {day!r} for {data_type.value}/{store_id}")
    return valid


def diff_store_day_records(
    data_type: DataType,
    existing_records: Mapping[str, Mapping[int, Any]],
    incoming_records: Mapping[str, Mapping[int, Any]],
    existing: ImportedData,
    incoming: ImportedData,
) -> DataTypeDiff:
    """Classify every (store, day) on either side as insert, modification or removal.

    A day present on both sides lands in modifications only, with one
    FieldChange per differing field.
    """
    project = PROJECTIONS[data_type]
    inserts: list[FieldChange] = []
    modifications: list[FieldChange] = []
    removals: list[FieldChange] = []

    store_ids = list(incoming_records) + [s for s in existing_records if s not in incoming_records]
    for store_id in store_ids:
        name = _store_name(store_id, existing, incoming)
        old_days = existing_records.get(store_id, {})
        new_days = incoming_records.get(store_id, {})
        days = sorted(
            _valid_days(old_days, data_type, store_id) | _valid_days(new_days, data_type, store_id)
        )

        for day in days:
            if day not in old_days:
                inserts.extend(
                    _record_changes(store_id, name, day, project(new_days[day]), inserted=True)
                )
            elif day not in new_days:
                removals.extend(
                    _record_changes(store_id, name, day, project(old_days[day]), inserted=False)
                )
            else:
                # A day on both sides is one modification, whatever its fields did.
                old_fields = project(old_days[day])
                new_fields = project(new_days[day])
                for path in list(new_fields) + [p for p in old_fields if p not in new_fields]:
                    old_val = old_fields.get(path)
                    new_val = new_fields.get(path)
                    if not values_equal(old_val, new_val):
                        modifications.append(
                            FieldChange(store_id, name, day, path, old_val, new_val)
                        )

    return DataTypeDiff(
        data_type=data_type,
        data_type_name=DATA_TYPE_NAMES[data_type],
        inserts=tuple(inserts),
        modifications=tuple(modifications),
        removals=tuple(removals),
    )


# ─── Category/time-slot diff ─────────────────────────────────


def _category_path(rec: CategoryTimeSalesRecord) -> str:
    return f"{rec.department.name}>{rec.line.name}>{rec.klass.name}"


def diff_category_time_sales(
    data_type: DataType,
    existing_records: Iterable[CategoryTimeSalesRecord],
    incoming_records: Iterable[CategoryTimeSalesRecord],
) -> DataTypeDiff:
    """Compare rows by identity key; amount or quantity changes are modifications."""
    existing_map = {category_time_sales_record_key(r): r for r in existing_records}
    incoming_map = {category_time_sales_record_key(r): r for r in incoming_records}
    inserts: list[FieldChange] = []
    modifications: list[FieldChange] = []
    removals: list[FieldChange] = []

    for key, inc in incoming_map.items():
        ex = existing_map.get(key)
        path = _category_path(inc)
        if ex is None:
            inserts.append(FieldChange(inc.store_id, inc.store_id, inc.day, path, None, inc.total_amount))
        elif not (
            values_equal(ex.total_amount, inc.total_amount)
            and values_equal(ex.total_quantity, inc.total_quantity)
        ):
            modifications.append(
                FieldChange(inc.store_id, inc.store_id, inc.day, path, ex.total_amount, inc.total_amount)
            )

    for key, ex in existing_map.items():
        if key not in incoming_map:
            removals.append(
                FieldChange(ex.store_id, ex.store_id, ex.day, _category_path(ex), ex.total_amount, None)
            )

    return DataTypeDiff(
        data_type=data_type,
        data_type_name=DATA_TYPE_NAMES[data_type],
        inserts=tuple(inserts),
        modifications=tuple(modifications),
        removals=tuple(removals),
    )


# ─── Entry point ─────────────────────────────────────────────


def compute_diff(
    existing: ImportedData,
    incoming: ImportedData,
    imported_types: Iterable[DataType],
) -> DiffResult:
    """Diff every imported ledger and category/time-slot type.

    Types not in ``imported_types`` are not compared at all. A type whose
    diff holds only inserts is listed in ``auto_approved``.
    """
    imported = set(imported_types)
    diffs: list[DataTypeDiff] = []
    auto_approved: list[DataType] = []

    for data_type, attr in LEDGER_FIELDS:
        if data_type not in imported:
            continue
        diff = diff_store_day_records(
            data_type, getattr(existing, attr), getattr(incoming, attr), existing, incoming
        )
        if diff.has_changes:
            diffs.append(diff)
        if not diff.needs_confirmation:
            auto_approved.append(data_type)

    for data_type, attr in CATEGORY_TIME_SALES_FIELDS:
        if data_type not in imported:
            continue
        diff = diff_category_time_sales(data_type, getattr(existing, attr), getattr(incoming, attr))
        if diff.has_changes:
            diffs.append(diff)
        if not diff.needs_confirmation:
            auto_approved.append(data_type)

    return DiffResult(
        diffs=tuple(diffs),
        needs_confirmation=any(d.needs_confirmation for d in diffs),
        auto_approved=tuple(auto_approved),
    )


def count_changes(diff: DiffResult) -> dict[ChangeType, int]:
    return {
        ChangeType.INSERT: sum(len(d.inserts) for d in diff.diffs),
        ChangeType.MODIFY: sum(len(d.modifications) for d in diff.diffs),
        ChangeType.REMOVE: sum(len(d.removals) for d in diff.diffs),
    }


def summarize_diff(diff: DiffResult) -> str:
    """One-line human summary, e.g. "3 inserts, 1 modification"."""
    labels = {
        ChangeType.INSERT: ("insert", "inserts"),
        ChangeType.MODIFY: ("modification", "modifications"),
        ChangeType.REMOVE: ("removal", "removals"),
    }
    parts = []
    for change_type, n in count_changes(diff).items():
        if n > 0:
            singular, plural = labels[change_type]
            parts.append(f"{n} {singular if n == 1 else plural}")
    return ", ".join(parts) or "no changes"
