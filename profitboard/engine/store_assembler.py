"""Turn a MonthlyAccumulator into the final StoreResult."""

from __future__ import annotations

from profitboard.calculations.budget_analysis import calculate_budget_analysis
from profitboard.calculations.discount_impact import calculate_discount_loss_cost
from profitboard.calculations.est_method import (
    calculate_core_sales,
    calculate_discount_rate,
    calculate_est_method,
)
from profitboard.calculations.inv_method import calculate_inv_method
from profitboard.calculations.utils import safe_divide
from profitboard.models.costing import (
    CostPricePair,
    ZERO_COST_PRICE_PAIR,
    add_cost_price_pairs,
)
from profitboard.models.enums import CategoryType
from profitboard.models.imported_data import ImportedData
from profitboard.models.settings import AppSettings

from .daily_builder import MonthlyAccumulator
from .result import StoreResult, SupplierTotal


def add_to_category(
    totals: dict[CategoryType, CostPricePair],
    category: CategoryType,
    pair: CostPricePair,
) -> None:
    totals[category] = add_cost_price_pairs(totals.get(category, ZERO_COST_PRICE_PAIR), pair)


def resolve_supplier_category(
    code: str,
    data: ImportedData,
    settings: AppSettings,
) -> CategoryType:
    """Settings mapping first, then supplier master data, else OTHER."""
    if code in settings.supplier_category_map:
        return settings.supplier_category_map[code]
    supplier = data.suppliers.get(code)
    if supplier is not None:
        return supplier.category
    return CategoryType.OTHER


def assemble_store_result(
    store_id: str,
    acc: MonthlyAccumulator,
    data: ImportedData,
    settings: AppSettings,
    days_in_month: int,
) -> StoreResult:
    """Run both costing methods and the budget analysis over the month totals."""
    inv_config = data.settings.get(store_id)
    budget_data = data.budget.get(store_id)
    opening = inv_config.opening_inventory if inv_config else None
    closing = inv_config.closing_inventory if inv_config else None

    delivery_sales_price = acc.total_flower_price + acc.total_direct_produce_price
    delivery_sales_cost = acc.total_flower_cost + acc.total_direct_produce_cost

    core = calculate_core_sales(
        acc.total_sales, acc.total_flower_price, acc.total_direct_produce_price
    )
    total_core_sales = core.core_sales

    # Delivery cost never enters the inventory-tracked pool.
    inventory_cost = acc.total_cost - delivery_sales_cost
    gross_sales = acc.total_sales + acc.total_discount
    discount_rate = calculate_discount_rate(acc.total_sales, acc.total_discount)

    # Transfers count as purchases for markup purposes.
    transfers = acc.transfer_totals.net_transfer
    all_purchase_price = delivery_sales_price + acc.total_purchase_price + transfers.price
    all_purchase_cost = delivery_sales_cost + acc.total_purchase_cost + transfers.cost
    average_markup_rate = safe_divide(
        all_purchase_price - all_purchase_cost, all_purchase_price, 0.0
    )
    core_price = acc.total_purchase_price + transfers.price
    core_cost = acc.total_purchase_cost + transfers.cost
    core_markup_rate = safe_divide(
        core_price - core_cost, core_price, settings.default_markup_rate
    )

    inv_result = calculate_inv_method(
        opening_inventory=opening,
        closing_inventory=closing,
        total_purchase_cost=acc.total_cost,
        total_sales=acc.total_sales,
    )
    est_result = calculate_est_method(
        core_sales=total_core_sales,
        discount_rate=discount_rate,
        markup_rate=core_markup_rate,
        consumable_cost=acc.total_consumable,
        opening_inventory=opening,
        inventory_purchase_cost=inventory_cost,
    )
    discount_loss_cost = calculate_discount_loss_cost(
        core_sales=total_core_sales,
        markup_rate=core_markup_rate,
        discount_rate=discount_rate,
    )

    # Supplier markup is computed once on the month totals.
    supplier_totals: dict[str, SupplierTotal] = {}
    category_totals: dict[CategoryType, CostPricePair] = {}
    for code, st in acc.supplier_totals.items():
        category = resolve_supplier_category(code, data, settings)
        supplier_totals[code] = SupplierTotal(
            supplier_code=code,
            supplier_name=st.name,
            category=category,
            cost=st.cost,
            price=st.price,
            markup_rate=safe_divide(st.price - st.cost, st.price, 0.0),
        )
        add_to_category(category_totals, category, CostPricePair(cost=st.cost, price=st.price))

    td = acc.transfer_totals
    add_to_category(
        category_totals,
        CategoryType.FLOWERS,
        CostPricePair(cost=acc.total_flower_cost, price=acc.total_flower_price),
    )
    add_to_category(
        category_totals,
        CategoryType.DIRECT_PRODUCE,
        CostPricePair(cost=acc.total_direct_produce_cost, price=acc.total_direct_produce_price),
    )
    add_to_category(
        category_totals,
        CategoryType.CONSUMABLES,
        CostPricePair(cost=acc.total_consumable, price=0.0),
    )
    add_to_category(
        category_totals,
        CategoryType.INTER_STORE,
        add_cost_price_pairs(td.inter_store_in, td.inter_store_out),
    )
    add_to_category(
        category_totals,
        CategoryType.INTER_DEPARTMENT,
        add_cost_price_pairs(td.inter_department_in, td.inter_department_out),
    )

    budget = budget_data.total if budget_data else settings.default_budget
    budget_daily = dict(budget_data.daily) if budget_data else {}
    gp_budget = 0.0
    if inv_config and inv_config.gross_profit_budget is not None:
        gp_budget = inv_config.gross_profit_budget

    analysis = calculate_budget_analysis(
        total_sales=acc.total_sales,
        budget=budget,
        budget_daily=budget_daily,
        sales_daily={d: rec.sales for d, rec in acc.daily.items()},
        elapsed_days=acc.elapsed_days,
        sales_days=acc.sales_days,
        days_in_month=days_in_month,
    )

    return StoreResult(
        store_id=store_id,
        opening_inventory=opening,
        closing_inventory=closing,
        total_sales=acc.total_sales,
        total_core_sales=total_core_sales,
        delivery_sales_price=delivery_sales_price,
        flower_sales_price=acc.total_flower_price,
        direct_produce_sales_price=acc.total_direct_produce_price,
        gross_sales=gross_sales,
        total_cost=acc.total_cost,
        inventory_cost=inventory_cost,
        delivery_sales_cost=delivery_sales_cost,
        inv_method_cogs=inv_result.cogs,
        inv_method_gross_profit=inv_result.gross_profit,
        inv_method_gross_profit_rate=inv_result.gross_profit_rate,
        est_method_cogs=est_result.cogs,
        est_method_margin=est_result.margin,
        est_method_margin_rate=est_result.margin_rate,
        est_method_closing_inventory=est_result.closing_inventory,
        total_customers=acc.total_customers,
        average_customers_per_day=safe_divide(acc.total_customers, acc.sales_days, 0.0),
        total_discount=acc.total_discount,
        discount_rate=discount_rate,
        discount_loss_cost=discount_loss_cost,
        average_markup_rate=average_markup_rate,
        core_markup_rate=core_markup_rate,
        total_consumable=acc.total_consumable,
        consumable_rate=safe_divide(acc.total_consumable, acc.total_sales, 0.0),
        budget=budget,
        gross_profit_budget=gp_budget,
        gross_profit_rate_budget=safe_divide(gp_budget, budget, 0.0),
        budget_daily=budget_daily,
        daily=acc.daily,
        category_totals=category_totals,
        supplier_totals=supplier_totals,
        transfer_details=td,
        elapsed_days=acc.elapsed_days,
        sales_days=acc.sales_days,
        average_daily_sales=analysis.average_daily_sales,
        projected_sales=analysis.projected_sales,
        projected_achievement=analysis.projected_achievement,
        budget_achievement_rate=analysis.budget_achievement_rate,
        budget_progress_rate=analysis.budget_progress_rate,
        remaining_budget=analysis.remaining_budget,
        daily_cumulative=analysis.daily_cumulative,
        over_delivery_amount=core.over_delivery_amount,
    )
