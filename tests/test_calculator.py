"""Integration tests for the monthly calculation engine."""

import dataclasses

import pytest

from profitboard.engine.calculator import (
    CalculationEngine,
    aggregate_all_stores,
    aggregate_many,
    aggregate_store,
    days_in_month,
)
from profitboard.engine.result import AGGREGATE_STORE_ID
from profitboard.models.enums import CategoryType
from profitboard.models.records import (
    InventoryConfig,
    SalesDayEntry,
    TransferDayEntry,
    TransferRecord,
)


@pytest.fixture
def engine():
    return CalculationEngine()


@pytest.fixture
def store1(engine, two_store_data, app_settings):
    return engine.aggregate_store("1", two_store_data, app_settings, 28)


class TestDailyRecords:
    def test_only_days_with_data_are_recorded(self, store1):
        assert sorted(store1.daily) == [1, 2]

    def test_day_figures(self, store1):
        d1 = store1.daily[1]
        assert d1.sales == 900
        assert d1.core_sales == 900
        assert d1.gross_sales == 1000
        assert d1.purchase.cost == 700
        assert d1.discount_absolute == 100
        assert d1.customers == 30
        assert d1.supplier_breakdown["S1"].price == 1000

    def test_delivery_sales_excluded_from_core(self, store1):
        d2 = store1.daily[2]
        assert d2.core_sales == 500
        assert d2.delivery_sales.cost == 80
        assert d2.total_cost == pytest.approx(350 + 80)

    def test_present_zero_sales_day_is_not_elapsed(self, engine, two_store_data, app_settings):
        data = dataclasses.replace(
            two_store_data,
            sales={**two_store_data.sales, "2": {1: SalesDayEntry(250), 5: SalesDayEntry(0)}},
        )
        r = engine.aggregate_store("2", data, app_settings, 28)
        assert r.elapsed_days == 1
        assert 5 not in r.daily

    def test_transfers_summed_per_direction(self, engine, two_store_data, app_settings):
        slip_in = TransferRecord(day=3, cost=40, price=50, from_store_id="2", to_store_id="1")
        slip_out = TransferRecord(day=3, cost=-30, price=-35, from_store_id="1", to_store_id="2")
        data = dataclasses.replace(
            two_store_data,
            inter_store_in={"1": {3: TransferDayEntry(inter_store_in=(slip_in, slip_in))}},
            inter_store_out={"1": {3: TransferDayEntry(inter_store_out=(slip_out,))}},
        )
        r = engine.aggregate_store("1", data, app_settings, 28)
        assert r.daily[3].inter_store_in.cost == 80
        assert r.daily[3].inter_store_out.cost == -30
        assert len(r.daily[3].transfer_breakdown.inter_store_in) == 2
        assert r.transfer_details.net_transfer.cost == pytest.approx(50)
        assert r.elapsed_days == 3


class TestStoreResult:
    def test_totals(self, store1):
        assert store1.total_sales == 1500
        assert store1.total_cost == pytest.approx(1130)
        assert store1.delivery_sales_cost == pytest.approx(80)
        assert store1.inventory_cost == pytest.approx(1050)
        assert store1.total_cost == pytest.approx(store1.inventory_cost + store1.delivery_sales_cost)
        assert store1.total_core_sales == 1400
        assert store1.elapsed_days == 2
        assert store1.sales_days == 2

    def test_inventory_method(self, store1):
        assert store1.inv_method_cogs == pytest.approx(5000 + 1130 - 4800)
        assert store1.inv_method_gross_profit == pytest.approx(170)

    def test_estimation_method(self, store1):
        gross = 1400 / (1 - 0.0625)
        cogs = gross * 0.7
        assert store1.discount_rate == pytest.approx(0.0625)
        assert store1.core_markup_rate == pytest.approx(0.3)
        assert store1.est_method_cogs == pytest.approx(cogs)
        assert store1.est_method_margin == pytest.approx(1400 - cogs)
        assert store1.est_method_closing_inventory == pytest.approx(5000 + 1050 - cogs)

    def test_markup_rates(self, store1):
        assert store1.average_markup_rate == pytest.approx((1600 - 1130) / 1600)
        assert store1.supplier_totals["S1"].markup_rate == pytest.approx(0.3)

    def test_category_totals(self, store1):
        assert store1.category_totals[CategoryType.MARKET].cost == pytest.approx(1050)
        assert store1.category_totals[CategoryType.FLOWERS].price == pytest.approx(100)

    def test_settings_category_map_wins(self, engine, two_store_data, app_settings):
        settings = app_settings.model_copy(update={"supplier_category_map": {"S1": CategoryType.LFC}})
        r = engine.aggregate_store("1", two_store_data, settings, 28)
        assert r.supplier_totals["S1"].category == CategoryType.LFC
        assert CategoryType.MARKET not in r.category_totals

    def test_customers(self, store1):
        assert store1.total_customers == 50
        assert store1.average_customers_per_day == pytest.approx(25)

    def test_budget(self, store1):
        assert store1.budget == 30000
        assert store1.budget_achievement_rate == pytest.approx(0.05)
        assert store1.budget_progress_rate == pytest.approx(0.75)
        assert store1.projected_sales == pytest.approx(1500 + 750 * 26)

    def test_missing_closing_inventory(self, engine, two_store_data, app_settings):
        r = engine.aggregate_store("2", two_store_data, app_settings, 28)
        assert r.inv_method_cogs is None
        assert r.inv_method_gross_profit is None
        assert r.inv_method_gross_profit_rate is None
        assert r.est_method_closing_inventory is not None

    def test_default_budget_and_markup(self, engine, app_settings):
        from profitboard.models.imported_data import ImportedData
        from profitboard.models.records import Store

        data = ImportedData(
            stores={"9": Store(id="9", code="009", name="Empty")},
            sales={"9": {1: SalesDayEntry(100)}},
        )
        r = engine.aggregate_store("9", data, app_settings, 28)
        assert r.budget == app_settings.default_budget
        assert r.core_markup_rate == app_settings.default_markup_rate

    def test_data_end_day_cuts_off(self, engine, two_store_data, app_settings):
        settings = app_settings.model_copy(update={"data_end_day": 1})
        r = engine.aggregate_store("1", two_store_data, settings, 28)
        assert r.total_sales == 900
        assert r.elapsed_days == 1

    def test_over_delivery_reported(self, engine, two_store_data, app_settings):
        data = dataclasses.replace(
            two_store_data,
            sales={"1": {2: SalesDayEntry(50)}},
        )
        r = engine.aggregate_store("1", data, app_settings, 28)
        assert r.total_core_sales == -50
        assert r.over_delivery_amount == 50


class TestAggregation:
    def test_all_stores_in_store_order(self, two_store_data, app_settings):
        results = aggregate_all_stores(two_store_data, app_settings, 28)
        assert list(results) == ["1", "2"]

    def test_aggregate_is_sum_of_parts(self, two_store_data, app_settings):
        results = aggregate_all_stores(two_store_data, app_settings, 28)
        agg = aggregate_many(list(results.values()), 28)
        assert agg.store_id == AGGREGATE_STORE_ID
        for attr in ("total_sales", "total_cost", "total_discount", "budget", "inventory_cost"):
            assert getattr(agg, attr) == pytest.approx(sum(getattr(r, attr) for r in results.values()))
        assert agg.daily[1].sales == 1150
        assert agg.supplier_totals["S1"].cost == pytest.approx(1190)

    def test_aggregate_takes_max_days(self, two_store_data, app_settings):
        results = aggregate_all_stores(two_store_data, app_settings, 28)
        agg = aggregate_many(list(results.values()), 28)
        assert agg.elapsed_days == 2
        assert agg.sales_days == 2

    def test_aggregate_inventory(self, two_store_data, app_settings):
        results = aggregate_all_stores(two_store_data, app_settings, 28)
        agg = aggregate_many(list(results.values()), 28)
        assert agg.opening_inventory == 6000
        assert agg.closing_inventory == 4800
        assert agg.inv_method_cogs == pytest.approx(
            agg.opening_inventory + agg.total_cost - agg.closing_inventory
        )

    def test_aggregate_inventory_all_none(self, two_store_data, app_settings):
        data = dataclasses.replace(
            two_store_data,
            settings={"2": InventoryConfig(store_id="2")},
        )
        results = aggregate_all_stores(data, app_settings, 28)
        agg = aggregate_many(list(results.values()), 28)
        assert agg.opening_inventory is None
        assert agg.closing_inventory is None
        assert agg.inv_method_cogs is None

    def test_empty_aggregation_raises(self):
        with pytest.raises(ValueError, match="Cannot aggregate 0 results"):
            aggregate_many([], 30)

    def test_single_store_aggregate_matches(self, two_store_data, app_settings):
        r = aggregate_store("1", two_store_data, app_settings, 28)
        agg = aggregate_many([r], 28)
        assert agg.total_sales == r.total_sales
        assert agg.inv_method_cogs == pytest.approx(r.inv_method_cogs)
        assert agg.est_method_cogs == pytest.approx(r.est_method_cogs)

    def test_calculate_month(self, engine, two_store_data, app_settings):
        month = engine.calculate_month(two_store_data, app_settings, 28)
        assert set(month.stores) == {"1", "2"}
        assert month.aggregate.total_sales == 1750


class TestForecastStore:
    def test_sales_and_gross_profit_series(self, engine, store1):
        result = engine.forecast_store(store1, 2026, 2)
        assert result.store_id == "1"
        first, second = result.forecast.weekly_summaries[:2]
        assert first.total_sales == 900
        assert first.total_gross_profit == pytest.approx(200)
        assert second.total_gross_profit == pytest.approx(250)
        # 1500 over two days, 26 days to go
        assert result.month_end.linear_projection == 21000


class TestDaysInMonth:
    @pytest.mark.parametrize(
        "year,month,expected",
        [(2026, 2, 28), (2024, 2, 29), (2026, 1, 31), (2026, 4, 30)],
    )
    def test_days(self, year, month, expected):
        assert days_in_month(year, month) == expected
