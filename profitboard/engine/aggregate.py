"""Roll several StoreResults up into one "aggregate" StoreResult.

Works only from already computed results; raw data is never revisited.
"""

from __future__ import annotations

from typing import Optional, Sequence

from profitboard.calculations.budget_analysis import calculate_budget_analysis
from profitboard.calculations.inv_method import calculate_inv_method
from profitboard.calculations.utils import safe_divide
from profitboard.models.costing import (
    CostPricePair,
    ZERO_COST_PRICE_PAIR,
    add_cost_price_pairs,
)
from profitboard.models.enums import CategoryType
from profitboard.models.records import ConsumableDailyRecord

from .result import (
    AGGREGATE_STORE_ID,
    DailyRecord,
    StoreResult,
    SupplierTotal,
    TransferBreakdown,
    TransferDetails,
)


def _sum_optional(values: Sequence[Optional[float]]) -> Optional[float]:
    """Sum the known values; None only when every value is None."""
    known = [v for v in values if v is not None]
    if not known:
        return None
    return sum(known)


def _merge_daily(a: DailyRecord, b: DailyRecord) -> DailyRecord:
    breakdown = dict(a.supplier_breakdown)
    for code, pair in b.supplier_breakdown.items():
        breakdown[code] = add_cost_price_pairs(breakdown.get(code, ZERO_COST_PRICE_PAIR), pair)
    return DailyRecord(
        day=a.day,
        sales=a.sales + b.sales,
        core_sales=a.core_sales + b.core_sales,
        gross_sales=a.gross_sales + b.gross_sales,
        purchase=add_cost_price_pairs(a.purchase, b.purchase),
        delivery_sales=add_cost_price_pairs(a.delivery_sales, b.delivery_sales),
        inter_store_in=add_cost_price_pairs(a.inter_store_in, b.inter_store_in),
        inter_store_out=add_cost_price_pairs(a.inter_store_out, b.inter_store_out),
        inter_department_in=add_cost_price_pairs(a.inter_department_in, b.inter_department_in),
        inter_department_out=add_cost_price_pairs(a.inter_department_out, b.inter_department_out),
        flowers=add_cost_price_pairs(a.flowers, b.flowers),
        direct_produce=add_cost_price_pairs(a.direct_produce, b.direct_produce),
        consumable=ConsumableDailyRecord(
            cost=a.consumable.cost + b.consumable.cost,
            items=a.consumable.items + b.consumable.items,
        ),
        discount_amount=a.discount_amount + b.discount_amount,
        discount_absolute=a.discount_absolute + b.discount_absolute,
        customers=a.customers + b.customers,
        supplier_breakdown=breakdown,
        transfer_breakdown=TransferBreakdown(
            inter_store_in=a.transfer_breakdown.inter_store_in + b.transfer_breakdown.inter_store_in,
            inter_store_out=a.transfer_breakdown.inter_store_out + b.transfer_breakdown.inter_store_out,
            inter_department_in=(
                a.transfer_breakdown.inter_department_in + b.transfer_breakdown.inter_department_in
            ),
            inter_department_out=(
                a.transfer_breakdown.inter_department_out + b.transfer_breakdown.inter_department_out
            ),
        ),
    )


def _merge_supplier(a: SupplierTotal, b: SupplierTotal) -> SupplierTotal:
    cost = a.cost + b.cost
    price = a.price + b.price
    return SupplierTotal(
        supplier_code=a.supplier_code,
        supplier_name=a.supplier_name,
        category=a.category,
        cost=cost,
        price=price,
        markup_rate=safe_divide(price - cost, price, 0.0),
    )


def _sum_transfer_details(parts: Sequence[TransferDetails]) -> TransferDetails:
    total = TransferDetails()
    for t in parts:
        total = TransferDetails(
            inter_store_in=add_cost_price_pairs(total.inter_store_in, t.inter_store_in),
            inter_store_out=add_cost_price_pairs(total.inter_store_out, t.inter_store_out),
            inter_department_in=add_cost_price_pairs(total.inter_department_in, t.inter_department_in),
            inter_department_out=add_cost_price_pairs(
                total.inter_department_out, t.inter_department_out
            ),
            net_transfer=add_cost_price_pairs(total.net_transfer, t.net_transfer),
        )
    return total


def aggregate_store_results(
    results: Sequence[StoreResult],
    days_in_month: int,
) -> StoreResult:
    """Sum store results into one StoreResult with store_id "aggregate".

    Additive fields are summed, rates are recomputed from the sums and
    elapsed/sales days take the maximum over the parts.

    Raises:
        ValueError: if ``results`` is empty.
    """
    if not results:
        raise ValueError("Cannot aggregate 0 results")

    def total(attr: str) -> float:
        return sum(getattr(r, attr) for r in results)

    opening = _sum_optional([r.opening_inventory for r in results])
    closing = _sum_optional([r.closing_inventory for r in results])
    est_closing = _sum_optional([r.est_method_closing_inventory for r in results])

    total_sales = total("total_sales")
    total_core_sales = total("total_core_sales")
    total_cost = total("total_cost")
    total_discount = total("total_discount")
    total_consumable = total("total_consumable")
    budget = total("budget")
    gross_profit_budget = total("gross_profit_budget")
    est_cogs = total("est_method_cogs")
    est_margin = total_core_sales - est_cogs
    discount_loss_cost = total("discount_loss_cost")
    total_customers = sum(r.total_customers for r in results)

    daily: dict[int, DailyRecord] = {}
    budget_daily: dict[int, float] = {}
    category_totals: dict[CategoryType, CostPricePair] = {}
    supplier_totals: dict[str, SupplierTotal] = {}
    for r in results:
        for day, rec in r.daily.items():
            daily[day] = _merge_daily(daily[day], rec) if day in daily else rec
        for day, amount in r.budget_daily.items():
            budget_daily[day] = budget_daily.get(day, 0.0) + amount
        for category, pair in r.category_totals.items():
            category_totals[category] = add_cost_price_pairs(
                category_totals.get(category, ZERO_COST_PRICE_PAIR), pair
            )
        for code, st in r.supplier_totals.items():
            supplier_totals[code] = (
                _merge_supplier(supplier_totals[code], st) if code in supplier_totals else st
            )
    daily = dict(sorted(daily.items()))
    budget_daily = dict(sorted(budget_daily.items()))

    transfer_details = _sum_transfer_details([r.transfer_details for r in results])

    purchase_price = sum(st.price for st in supplier_totals.values())
    purchase_cost = sum(st.cost for st in supplier_totals.values())
    all_price = purchase_price + total("delivery_sales_price") + transfer_details.net_transfer.price
    all_cost = purchase_cost + total("delivery_sales_cost") + transfer_details.net_transfer.cost
    core_price = purchase_price + transfer_details.net_transfer.price
    core_cost = purchase_cost + transfer_details.net_transfer.cost

    inv_result = calculate_inv_method(
        opening_inventory=opening,
        closing_inventory=closing,
        total_purchase_cost=total_cost,
        total_sales=total_sales,
    )

    elapsed_days = max(r.elapsed_days for r in results)
    sales_days = max(r.sales_days for r in results)
    analysis = calculate_budget_analysis(
        total_sales=total_sales,
        budget=budget,
        budget_daily=budget_daily,
        sales_daily={d: rec.sales for d, rec in daily.items()},
        elapsed_days=elapsed_days,
        sales_days=sales_days,
        days_in_month=days_in_month,
    )

    return StoreResult(
        store_id=AGGREGATE_STORE_ID,
        opening_inventory=opening,
        closing_inventory=closing,
        total_sales=total_sales,
        total_core_sales=total_core_sales,
        delivery_sales_price=total("delivery_sales_price"),
        flower_sales_price=total("flower_sales_price"),
        direct_produce_sales_price=total("direct_produce_sales_price"),
        gross_sales=total("gross_sales"),
        total_cost=total_cost,
        inventory_cost=total("inventory_cost"),
        delivery_sales_cost=total("delivery_sales_cost"),
        inv_method_cogs=inv_result.cogs,
        inv_method_gross_profit=inv_result.gross_profit,
        inv_method_gross_profit_rate=inv_result.gross_profit_rate,
        est_method_cogs=est_cogs,
        est_method_margin=est_margin,
        est_method_margin_rate=safe_divide(est_margin, total_core_sales, 0.0),
        est_method_closing_inventory=est_closing,
        total_customers=total_customers,
        average_customers_per_day=safe_divide(total_customers, sales_days, 0.0),
        total_discount=total_discount,
        discount_rate=safe_divide(total_discount, total_sales + total_discount, 0.0),
        discount_loss_cost=discount_loss_cost,
        average_markup_rate=safe_divide(all_price - all_cost, all_price, 0.0),
        core_markup_rate=safe_divide(
            core_price - core_cost, core_price, results[0].core_markup_rate
        ),
        total_consumable=total_consumable,
        consumable_rate=safe_divide(total_consumable, total_sales, 0.0),
        budget=budget,
        gross_profit_budget=gross_profit_budget,
        gross_profit_rate_budget=safe_divide(gross_profit_budget, budget, 0.0),
        budget_daily=budget_daily,
        daily=daily,
        category_totals=category_totals,
        supplier_totals=supplier_totals,
        transfer_details=transfer_details,
        elapsed_days=elapsed_days,
        sales_days=sales_days,
        average_daily_sales=analysis.average_daily_sales,
        projected_sales=analysis.projected_sales,
        projected_achievement=analysis.projected_achievement,
        budget_achievement_rate=analysis.budget_achievement_rate,
        budget_progress_rate=analysis.budget_progress_rate,
        remaining_budget=analysis.remaining_budget,
        daily_cumulative=analysis.daily_cumulative,
        over_delivery_amount=total("over_delivery_amount"),
    )
