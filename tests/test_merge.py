"""Tests for keep-existing merge and the diff decision."""

import pytest

from profitboard.models.enums import CategoryType, DataType, DiffAction
from profitboard.models.imported_data import LEDGER_FIELDS, ImportedData
from profitboard.models.records import (
    BudgetData,
    CategoryTimeSalesRecord,
    CodeName,
    DepartmentKpiRecord,
    InventoryConfig,
    SalesDayEntry,
    Store,
    Supplier,
)
from profitboard.orchestrator.merge import (
    apply_diff_decision,
    merge_inserts_only,
    overwrite,
)

from conftest import make_purchase


def cts(day, amount, store_id="1"):
    return CategoryTimeSalesRecord(
        day=day,
        store_id=store_id,
        department=CodeName("01", "Produce"),
        line=CodeName("011", "Vegetables"),
        klass=CodeName("0111", "Leafy"),
        total_amount=amount,
    )


class TestMergeInsertsOnly:
    def test_existing_values_win(self):
        existing = ImportedData(sales={"1": {1: SalesDayEntry(50000)}})
        incoming = ImportedData(sales={"1": {1: SalesDayEntry(99999), 2: SalesDayEntry(60000)}})
        merged = merge_inserts_only(existing, incoming, {DataType.SALES})
        assert merged.sales["1"][1].sales == 50000
        assert merged.sales["1"][2].sales == 60000

    def test_every_existing_key_is_identical(self, two_store_data):
        incoming = ImportedData(
            purchase={"1": {1: make_purchase(1, 1), 3: make_purchase(5, 6)}, "3": {1: make_purchase(2, 2)}},
            sales={"1": {1: SalesDayEntry(1), 2: SalesDayEntry(2)}},
        )
        types = {t for t, _ in LEDGER_FIELDS}
        merged = merge_inserts_only(two_store_data, incoming, types)
        for _, attr in LEDGER_FIELDS:
            for store_id, days in getattr(two_store_data, attr).items():
                for day, value in days.items():
                    assert getattr(merged, attr)[store_id][day] is value
        assert merged.purchase["1"][3].total.cost == 5
        assert merged.purchase["3"][1].total.cost == 2

    def test_inputs_not_mutated(self):
        existing = ImportedData(sales={"1": {1: SalesDayEntry(1)}})
        incoming = ImportedData(sales={"1": {2: SalesDayEntry(2)}})
        merge_inserts_only(existing, incoming, {DataType.SALES})
        assert list(existing.sales["1"]) == [1]
        assert list(incoming.sales["1"]) == [2]

    def test_types_not_imported_pass_through(self):
        existing = ImportedData(sales={"1": {1: SalesDayEntry(1)}})
        incoming = ImportedData(
            sales={"1": {2: SalesDayEntry(2)}},
            purchase={"1": {1: make_purchase(1, 1)}},
        )
        merged = merge_inserts_only(existing, incoming, {DataType.PURCHASE})
        assert merged.sales is existing.sales
        assert 1 in merged.purchase["1"]

    def test_stores_and_suppliers_always_unioned(self):
        existing = ImportedData(
            stores={"1": Store(id="1", code="001", name="Main")},
            suppliers={"S1": Supplier(code="S1", name="Old", category=CategoryType.MARKET)},
        )
        incoming = ImportedData(
            stores={"1": Store(id="1", code="001", name="Renamed"), "2": Store(id="2", code="002", name="East")},
            suppliers={"S1": Supplier(code="S1", name="New"), "S2": Supplier(code="S2", name="Other")},
        )
        merged = merge_inserts_only(existing, incoming, set())
        assert merged.stores["1"].name == "Main"
        assert "2" in merged.stores
        assert merged.suppliers["S1"].name == "Old"
        assert "S2" in merged.suppliers

    def test_settings_and_budget_only_when_imported(self):
        existing = ImportedData(settings={"1": InventoryConfig(store_id="1", opening_inventory=10)})
        incoming = ImportedData(
            settings={
                "1": InventoryConfig(store_id="1", opening_inventory=99),
                "2": InventoryConfig(store_id="2", opening_inventory=5),
            },
            budget={"2": BudgetData(store_id="2", total=100)},
        )
        untouched = merge_inserts_only(existing, incoming, {DataType.SALES})
        assert "2" not in untouched.settings
        assert untouched.budget == {}

        merged = merge_inserts_only(
            existing, incoming, {DataType.INITIAL_SETTINGS, DataType.BUDGET}
        )
        assert merged.settings["1"].opening_inventory == 10
        assert merged.settings["2"].opening_inventory == 5
        assert merged.budget["2"].total == 100

    def test_category_time_sales_by_identity_key(self):
        existing = ImportedData(category_time_sales=(cts(1, 100),))
        incoming = ImportedData(category_time_sales=(cts(1, 999), cts(2, 200), cts(2, 300)))
        merged = merge_inserts_only(existing, incoming, {DataType.CATEGORY_TIME_SALES})
        assert [(r.day, r.total_amount) for r in merged.category_time_sales] == [(1, 100), (2, 200)]

    def test_department_kpi_by_code(self):
        existing = ImportedData(department_kpi=(DepartmentKpiRecord("01", "Produce", sales_actual=5),))
        incoming = ImportedData(
            department_kpi=(
                DepartmentKpiRecord("01", "Produce", sales_actual=9),
                DepartmentKpiRecord("02", "Meat"),
            )
        )
        merged = merge_inserts_only(existing, incoming, {DataType.DEPARTMENT_KPI})
        assert [(r.dept_code, r.sales_actual) for r in merged.department_kpi] == [("01", 5), ("02", 0.0)]

    def test_malformed_day_keys_skipped(self, caplog):
        incoming = ImportedData(sales={"1": {"bad": SalesDayEntry(1), 0: SalesDayEntry(2), 3: SalesDayEntry(3)}})
        merged = merge_inserts_only(ImportedData(), incoming, {DataType.SALES})
        assert list(merged.sales["1"]) == [3]
        assert "malformed day key" in caplog.text


class TestApplyDiffDecision:
    @pytest.fixture
    def pair(self):
        existing = ImportedData(sales={"1": {1: SalesDayEntry(1)}})
        incoming = ImportedData(sales={"1": {1: SalesDayEntry(2), 2: SalesDayEntry(3)}})
        return existing, incoming

    def test_overwrite_replaces_imported_type(self, pair):
        existing, incoming = pair
        result = apply_diff_decision(DiffAction.OVERWRITE, incoming, existing, {DataType.SALES})
        assert result.sales is incoming.sales

    def test_keep_existing_merges(self, pair):
        existing, incoming = pair
        merged = apply_diff_decision(DiffAction.KEEP_EXISTING, incoming, existing, {DataType.SALES})
        assert merged.sales["1"][1].sales == 1
        assert merged.sales["1"][2].sales == 3


class TestOverwrite:
    def test_types_not_imported_survive(self, two_store_data):
        incoming = ImportedData(
            stores={"1": Store(id="1", code="001", name="Main")},
            sales={"1": {1: SalesDayEntry(999)}},
        )
        result = overwrite(two_store_data, incoming, {DataType.SALES})
        assert result.sales == {"1": {1: SalesDayEntry(999)}}
        assert result.purchase is two_store_data.purchase
        assert result.flowers is two_store_data.flowers
        assert result.settings is two_store_data.settings
        assert result.budget is two_store_data.budget
        assert set(result.stores) == {"1", "2"}

    def test_incoming_store_metadata_wins(self):
        existing = ImportedData(stores={"1": Store(id="1", code="001", name="Old")})
        incoming = ImportedData(stores={"1": Store(id="1", code="001", name="New")})
        assert overwrite(existing, incoming, set()).stores["1"].name == "New"

    def test_settings_and_budget_replaced_when_imported(self, two_store_data):
        incoming = ImportedData(
            settings={"2": InventoryConfig(store_id="2", opening_inventory=7)},
        )
        result = overwrite(two_store_data, incoming, {DataType.INITIAL_SETTINGS})
        assert result.settings == incoming.settings
        assert result.budget is two_store_data.budget

    def test_category_time_sales_replaced(self):
        existing = ImportedData(category_time_sales=(cts(1, 100), cts(2, 200)))
        incoming = ImportedData(category_time_sales=(cts(1, 150),))
        result = overwrite(existing, incoming, {DataType.CATEGORY_TIME_SALES})
        assert [(r.day, r.total_amount) for r in result.category_time_sales] == [(1, 150)]
