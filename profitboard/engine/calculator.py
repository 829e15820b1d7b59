"""Monthly calculation entry points.

Takes imported data + settings -> produces one StoreResult per store and
an aggregate rollup. Pure functions; nothing here reads a clock or does I/O.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from profitboard.calculations.advanced_forecast import calculate_month_end_projection
from profitboard.calculations.forecast import ForecastInput, calculate_forecast
from profitboard.models.imported_data import ImportedData
from profitboard.models.settings import AppSettings

from .aggregate import aggregate_store_results
from .daily_builder import build_daily_records
from .result import StoreForecast, StoreResult
from .store_assembler import assemble_store_result

if TYPE_CHECKING:
    from .prev_year import PrevYearComparison

logger = logging.getLogger(__name__)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def effective_days(settings: AppSettings, days: int) -> int:
    """Days to walk: data_end_day when set, never past the month end."""
    if settings.data_end_day is None:
        return days
    return min(settings.data_end_day, days)


@dataclass(frozen=True)
class MonthlyResult:
    stores: dict[str, StoreResult]
    aggregate: Optional[StoreResult]
    prev_year: Optional[PrevYearComparison] = None


class CalculationEngine:
    """Stateless engine that runs the monthly store calculation."""

    def aggregate_store(
        self,
        store_id: str,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
    ) -> StoreResult:
        """Compute one store's month from raw imported data."""
        acc = build_daily_records(store_id, data, effective_days(settings, days_in_month))
        return assemble_store_result(store_id, acc, data, settings, days_in_month)

    def aggregate_all_stores(
        self,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
    ) -> dict[str, StoreResult]:
        """One result per store, in the order stores appear in ``data.stores``."""
        results: dict[str, StoreResult] = {}
        for store_id in data.stores:
            results[store_id] = self.aggregate_store(store_id, data, settings, days_in_month)
        logger.debug(f"Calculated {len(results)} stores for {settings.target_year}-{settings.target_month:02d}")
        return results

    def aggregate_many(
        self,
        results: Sequence[StoreResult],
        days_in_month: int,
    ) -> StoreResult:
        return aggregate_store_results(results, days_in_month)

    def calculate_month(
        self,
        data: ImportedData,
        settings: AppSettings,
        days_in_month: int,
    ) -> MonthlyResult:
        """Per-store results plus their aggregate.

        Raises:
            ValueError: if ``data`` has no stores.
        """
        stores = self.aggregate_all_stores(data, settings, days_in_month)
        aggregate = self.aggregate_many(list(stores.values()), days_in_month)
        return MonthlyResult(stores=stores, aggregate=aggregate)

    def forecast_store(self, result: StoreResult, year: int, month: int) -> StoreForecast:
        """Weekly, weekday and month-end views of one result's daily sales.

        Daily gross profit here is sales less purchases at cost.
        """
        daily_sales = {d: rec.sales for d, rec in result.daily.items()}
        daily_gross_profit = {d: rec.sales - rec.purchase.cost for d, rec in result.daily.items()}
        return StoreForecast(
            store_id=result.store_id,
            forecast=calculate_forecast(
                ForecastInput(year, month, daily_sales, daily_gross_profit)
            ),
            month_end=calculate_month_end_projection(year, month, daily_sales),
        )


_engine = CalculationEngine()


def aggregate_store(
    store_id: str,
    data: ImportedData,
    settings: AppSettings,
    days_in_month: int,
) -> StoreResult:
    return _engine.aggregate_store(store_id, data, settings, days_in_month)


def aggregate_all_stores(
    data: ImportedData,
    settings: AppSettings,
    days_in_month: int,
) -> dict[str, StoreResult]:
    return _engine.aggregate_all_stores(data, settings, days_in_month)


def aggregate_many(results: Sequence[StoreResult], days_in_month: int) -> StoreResult:
    return _engine.aggregate_many(results, days_in_month)


def forecast_store(result: StoreResult, year: int, month: int) -> StoreForecast:
    return _engine.forecast_store(result, year, month)
