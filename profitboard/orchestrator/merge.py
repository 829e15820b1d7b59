"""Combine an incoming import with stored data.

Keep-existing rules:
- Anything already stored wins, at every nesting level.
- Keys missing from the stored side are copied from incoming.
- Data types not imported this round pass through from stored untouched.

Overwrite replaces only the imported types; everything else is kept.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Iterable, Mapping, TypeVar

from profitboard.models.enums import DataType, DiffAction
from profitboard.models.imported_data import (
    CATEGORY_TIME_SALES_FIELDS,
    LEDGER_FIELDS,
    ImportedData,
    is_valid_day,
)
from profitboard.models.records import (
    CategoryTimeSalesRecord,
    DepartmentKpiRecord,
    category_time_sales_record_key,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Non-ledger fields replaced as a whole when their type is imported.
SCALAR_FIELDS: tuple[tuple[DataType, str], ...] = (
    (DataType.DEPARTMENT_KPI, "department_kpi"),
    (DataType.INITIAL_SETTINGS, "settings"),
    (DataType.BUDGET, "budget"),
)


def merge_store_day_records(
    existing: Mapping[str, Mapping[int, T]],
    incoming: Mapping[str, Mapping[int, T]],
    data_type: DataType,
) -> dict[str, dict[int, T]]:
    """Add (store, day) entries absent from ``existing``; never replace one."""
    merged: dict[str, dict[int, T]] = {sid: dict(days) for sid, days in existing.items()}
    added = 0
    for store_id, days in incoming.items():
        target = merged.setdefault(store_id, {})
        for day, entry in days.items():
            if not is_valid_day(day):
                logger.warning(f"Skipping malformed day key {day!r} for {data_type.value}/{store_id}")
                continue
            if day not in target:
                target[day] = entry
                added += 1
    if added:
        logger.debug(f"Merged {added} new day entries into {data_type.value}")
    return merged


def merge_keyed(existing: Mapping[str, T], incoming: Mapping[str, T]) -> dict[str, T]:
    """Union by key; stored entries are kept as they are."""
    merged = dict(existing)
    for key, value in incoming.items():
        if key not in merged:
            merged[key] = value
    return merged


def merge_category_time_sales(
    existing: Iterable[CategoryTimeSalesRecord],
    incoming: Iterable[CategoryTimeSalesRecord],
) -> tuple[CategoryTimeSalesRecord, ...]:
    """Append incoming rows whose identity key is not already stored."""
    merged = list(existing)
    seen = {category_time_sales_record_key(r) for r in merged}
    for rec in incoming:
        key = category_time_sales_record_key(rec)
        if key not in seen:
            merged.append(rec)
            seen.add(key)
    return tuple(merged)


def merge_department_kpi(
    existing: Iterable[DepartmentKpiRecord],
    incoming: Iterable[DepartmentKpiRecord],
) -> tuple[DepartmentKpiRecord, ...]:
    merged = list(existing)
    seen = {r.dept_code for r in merged}
    for rec in incoming:
        if rec.dept_code not in seen:
            merged.append(rec)
            seen.add(rec.dept_code)
    return tuple(merged)


def merge_inserts_only(
    existing: ImportedData,
    incoming: ImportedData,
    imported_types: Iterable[DataType],
) -> ImportedData:
    """Keep-existing merge. Neither argument is modified.

    Stores and suppliers are always unioned. Settings, budget and
    department KPIs merge only when their type was imported.
    """
    imported = set(imported_types)
    changes: dict[str, Any] = {
        "stores": merge_keyed(existing.stores, incoming.stores),
        "suppliers": merge_keyed(existing.suppliers, incoming.suppliers),
    }

    for data_type, attr in LEDGER_FIELDS:
        if data_type in imported:
            changes[attr] = merge_store_day_records(
                getattr(existing, attr), getattr(incoming, attr), data_type
            )

    for data_type, attr in CATEGORY_TIME_SALES_FIELDS:
        if data_type in imported:
            changes[attr] = merge_category_time_sales(
                getattr(existing, attr), getattr(incoming, attr)
            )

    if DataType.DEPARTMENT_KPI in imported:
        changes["department_kpi"] = merge_department_kpi(
            existing.department_kpi, incoming.department_kpi
        )
    if DataType.INITIAL_SETTINGS in imported:
        changes["settings"] = merge_keyed(existing.settings, incoming.settings)
    if DataType.BUDGET in imported:
        changes["budget"] = merge_keyed(existing.budget, incoming.budget)

    return dataclasses.replace(existing, **changes)


def overwrite(
    existing: ImportedData,
    incoming: ImportedData,
    imported_types: Iterable[DataType],
) -> ImportedData:
    """Replace the imported data types wholesale; every other field is kept.

    Store and supplier metadata is unioned with incoming entries winning.
    """
    imported = set(imported_types)
    changes: dict[str, Any] = {
        "stores": {**existing.stores, **incoming.stores},
        "suppliers": {**existing.suppliers, **incoming.suppliers},
    }
    for data_type, attr in LEDGER_FIELDS + CATEGORY_TIME_SALES_FIELDS + SCALAR_FIELDS:
        if data_type in imported:
            changes[attr] = getattr(incoming, attr)
    return dataclasses.replace(existing, **changes)


def apply_diff_decision(
    action: DiffAction,
    incoming: ImportedData,
    existing: ImportedData,
    imported_types: Iterable[DataType],
) -> ImportedData:
    """Resolve a reviewed diff: overwrite replaces the imported types, keep-existing merges inserts."""
    if action == DiffAction.OVERWRITE:
        return overwrite(existing, incoming, imported_types)
    return merge_inserts_only(existing, incoming, imported_types)
