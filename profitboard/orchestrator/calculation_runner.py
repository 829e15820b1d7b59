"""Runs the monthly calculation off the event loop, memoised by the cache."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from profitboard.engine.cache import CalculationCache
from profitboard.engine.calculator import CalculationEngine, MonthlyResult, days_in_month
from profitboard.engine.prev_year import align_prev_year
from profitboard.engine.result import StoreResult
from profitboard.models.imported_data import ImportedData
from profitboard.models.settings import AppSettings

logger = logging.getLogger(__name__)


class CalculationRunner:
    """Owns a CalculationCache and decides where the engine runs.

    With ``use_worker_thread`` the store calculations run in a worker
    thread; if that fails, the same calculation runs inline so a result
    is always produced. The cache is only written once every store has
    a result.
    """

    def __init__(
        self,
        cache: Optional[CalculationCache] = None,
        engine: Optional[CalculationEngine] = None,
        use_worker_thread: bool = True,
    ) -> None:
        self.cache = cache if cache is not None else CalculationCache()
        self.engine = engine if engine is not None else CalculationEngine()
        self.use_worker_thread = use_worker_thread

    def _compute_stores(
        self,
        store_ids: list[str],
        data: ImportedData,
        settings: AppSettings,
        days: int,
    ) -> dict[str, StoreResult]:
        return {
            sid: self.engine.aggregate_store(sid, data, settings, days) for sid in store_ids
        }

    async def _run(
        self,
        store_ids: list[str],
        data: ImportedData,
        settings: AppSettings,
        days: int,
    ) -> dict[str, StoreResult]:
        if not self.use_worker_thread:
            return self._compute_stores(store_ids, data, settings, days)
        try:
            return await asyncio.to_thread(self._compute_stores, store_ids, data, settings, days)
        except Exception:
            logger.warning("Worker calculation failed, retrying inline", exc_info=True)
            return self._compute_stores(store_ids, data, settings, days)

    async def calculate(
        self,
        data: ImportedData,
        settings: AppSettings,
        days: Optional[int] = None,
    ) -> MonthlyResult:
        """Per-store results, their aggregate and the aligned comparison period.

        Store results are reused from the cache where possible.
        """
        if days is None:
            days = days_in_month(settings.target_year, settings.target_month)

        cached = self.cache.get_global_result(data, settings, days)
        if cached is not None:
            stores = dict(cached)
        else:
            stores = {}
            missing: list[str] = []
            for store_id in data.stores:
                hit = self.cache.get_store_result(store_id, data, settings, days)
                if hit is not None:
                    stores[store_id] = hit
                else:
                    missing.append(store_id)

            if missing:
                logger.info(
                    f"Calculating {len(missing)}/{len(data.stores)} stores "
                    f"for {settings.target_year}-{settings.target_month:02d}"
                )
                stores.update(await self._run(missing, data, settings, days))

            # Keep data.stores order regardless of which stores were cached.
            stores = {sid: stores[sid] for sid in data.stores}
            self.cache.set_global_result(data, settings, days, stores)

        aggregate = self.engine.aggregate_many(list(stores.values()), days) if stores else None
        return MonthlyResult(
            stores=stores,
            aggregate=aggregate,
            prev_year=align_prev_year(data, settings, days),
        )
