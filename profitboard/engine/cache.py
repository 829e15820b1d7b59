"""Fingerprint-keyed memo of StoreResults.

A fingerprint is a cheap structural summary of one store's inputs. Equal
fingerprints are trusted to mean equal inputs, so the summary is a
tunable trade-off: ``summary`` mode looks only at day counts and the
last day's totals, ``full`` mode hashes the store's whole data slice.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Mapping, Optional

from profitboard.models.enums import FingerprintMode
from profitboard.models.imported_data import LEDGER_FIELDS, ImportedData
from profitboard.models.settings import AppSettings

from .result import StoreResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


def _settings_part(settings: AppSettings) -> str:
    # All AppSettings fields are part of the key.
    return settings.model_dump_json()


def _store_slice_digest(store_id: str, data: ImportedData) -> str:
    slice_: dict[str, object] = {}
    for _, attr in LEDGER_FIELDS:
        store_days = getattr(data, attr).get(store_id)
        if store_days:
            slice_[attr] = {day: dataclasses.asdict(rec) for day, rec in store_days.items()}
    inv = data.settings.get(store_id)
    if inv is not None:
        slice_["settings"] = dataclasses.asdict(inv)
    budget = data.budget.get(store_id)
    if budget is not None:
        slice_["budget"] = dataclasses.asdict(budget)
    slice_["suppliers"] = {code: dataclasses.asdict(s) for code, s in data.suppliers.items()}
    payload = json.dumps(slice_, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def compute_fingerprint(
    store_id: str,
    data: ImportedData,
    settings: AppSettings,
    days_in_month: int,
    mode: FingerprintMode = FingerprintMode.SUMMARY,
) -> str:
    """Deterministic string summarising everything one store's result depends on."""
    parts: list[str] = [
        store_id,
        str(settings.target_year),
        str(settings.target_month),
        _settings_part(settings),
        str(days_in_month),
    ]

    if mode == FingerprintMode.FULL:
        parts.append(f"h:{_store_slice_digest(store_id, data)}")
        return "|".join(parts)

    purchase_store = data.purchase.get(store_id) or {}
    sales_store = data.sales.get(store_id) or {}
    discount_store = data.discount.get(store_id) or {}

    parts.append(f"p:{len(purchase_store)}")
    parts.append(f"s:{len(sales_store)}")
    parts.append(f"d:{len(discount_store)}")

    if purchase_store:
        last = purchase_store[max(purchase_store)]
        parts.append(f"pl:{last.total.cost}:{last.total.price}")
    if sales_store:
        last_sales = sales_store[max(sales_store)]
        parts.append(f"sl:{last_sales.sales}")

    inv = data.settings.get(store_id)
    if inv is not None:
        opening = "n" if inv.opening_inventory is None else inv.opening_inventory
        closing = "n" if inv.closing_inventory is None else inv.closing_inventory
        parts.append(f"inv:{opening}:{closing}")

    budget = data.budget.get(store_id)
    if budget is not None:
        parts.append(f"bud:{budget.total}")

    return "|".join(parts)


def compute_global_fingerprint(
    data: ImportedData,
    settings: AppSettings,
    days_in_month: int,
    mode: FingerprintMode = FingerprintMode.SUMMARY,
) -> str:
    """Sorted per-store fingerprints plus store and category counts."""
    store_ids = sorted(data.stores)
    parts = [compute_fingerprint(sid, data, settings, days_in_month, mode) for sid in store_ids]
    parts.append(f"stores:{len(store_ids)}")
    parts.append(f"cats:{len(settings.custom_categories)}")
    parts.append(f"y:{settings.target_year}")
    parts.append(f"m:{settings.target_month}")
    parts.append(f"mr:{settings.default_markup_rate}")
    parts.append(f"db:{settings.default_budget}")
    parts.append(f"dm:{days_in_month}")
    return "||".join(parts)


@dataclass(frozen=True)
class CacheEntry:
    fingerprint: str
    result: StoreResult
    timestamp: float


class CalculationCache:
    """Per-store and whole-month result cache.

    Lookups hit only on an exact fingerprint match and return the very
    object that was stored. Past ``max_entries`` the oldest store entry
    is evicted.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        mode: FingerprintMode = FingerprintMode.SUMMARY,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._max_entries = max_entries
        self._mode = mode
        self._store_cache: dict[str, CacheEntry] = {}
        self._global_fingerprint: Optional[str] = None
        self._global_result: Optional[Mapping[str, StoreResult]] = None

    @property
    def capacity(self) -> int:
        return self._max_entries

    @property
    def mode(self) -> FingerprintMode:
        return self._mode

    @property
    def size(self) -> int:
        return len(self._store_cache)

    @property
    def has_global_cache(self) -> bool:
        return self._global_result is not None

    def get_store_result(
        self,
        store_id: str,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
    ) -> Optional[StoreResult]:
        fp = compute_fingerprint(store_id, data, settings, days_in_month, self._mode)
        entry = self._store_cache.get(store_id)
        if entry is not None and entry.fingerprint == fp:
            logger.debug(f"Cache hit for store {store_id}")
            return entry.result
        logger.debug(f"Cache miss for store {store_id}")
        return None

    def set_store_result(
        self,
        store_id: str,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
        result: StoreResult,
    ) -> None:
        fp = compute_fingerprint(store_id, data, settings, days_in_month, self._mode)
        # Re-insert so equal timestamps fall back to write order in min().
        self._store_cache.pop(store_id, None)
        self._store_cache[store_id] = CacheEntry(
            fingerprint=fp,
            result=result,
            timestamp=time.monotonic(),
        )

        if len(self._store_cache) > self._max_entries:
            oldest = min(self._store_cache, key=lambda sid: self._store_cache[sid].timestamp)
            del self._store_cache[oldest]
            logger.debug(f"Evicted cached result for store {oldest}")

    def get_global_result(
        self,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
    ) -> Optional[Mapping[str, StoreResult]]:
        fp = compute_global_fingerprint(data, settings, days_in_month, self._mode)
        if self._global_result is not None and self._global_fingerprint == fp:
            logger.debug("Global cache hit")
            return self._global_result
        return None

    def set_global_result(
        self,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
        results: Mapping[str, StoreResult],
    ) -> None:
        """Store the whole-month result and refresh every store entry with it."""
        self._global_fingerprint = compute_global_fingerprint(
            data, settings, days_in_month, self._mode
        )
        self._global_result = results
        for store_id, result in results.items():
            self.set_store_result(store_id, data, settings, days_in_month, result)

    def clear(self) -> None:
        self._store_cache.clear()
        self._global_fingerprint = None
        self._global_result = None
