"""Day-by-day rollup of one store's ledgers into DailyRecords and month totals."""

from __future__ import annotations

from dataclasses import dataclass, field

from profitboard.calculations.est_method import calculate_core_sales
from profitboard.models.costing import (
    CostPricePair,
    ZERO_COST_PRICE_PAIR,
    add_cost_price_pairs,
)
from profitboard.models.imported_data import ImportedData
from profitboard.models.records import TransferRecord, ZERO_CONSUMABLE_DAILY

from .result import (
    DailyRecord,
    TransferBreakdown,
    TransferBreakdownEntry,
    TransferDetails,
)


@dataclass
class SupplierAccumulator:
    name: str
    cost: float = 0.0
    price: float = 0.0


@dataclass
class MonthlyAccumulator:
    """Running month totals filled while walking the days of one store."""

    daily: dict[int, DailyRecord] = field(default_factory=dict)
    supplier_totals: dict[str, SupplierAccumulator] = field(default_factory=dict)
    total_sales: float = 0.0
    total_cost: float = 0.0
    total_flower_price: float = 0.0
    total_flower_cost: float = 0.0
    total_direct_produce_price: float = 0.0
    total_direct_produce_cost: float = 0.0
    total_purchase_cost: float = 0.0
    total_purchase_price: float = 0.0
    total_discount: float = 0.0
    total_consumable: float = 0.0
    total_customers: int = 0
    sales_days: int = 0
    elapsed_days: int = 0
    transfer_totals: TransferDetails = field(default_factory=TransferDetails)


def _sum_transfers(records: tuple[TransferRecord, ...]) -> CostPricePair:
    cost = 0.0
    price = 0.0
    for r in records:
        cost += r.cost
        price += r.price
    return CostPricePair(cost=cost, price=price)


def _breakdown(records: tuple[TransferRecord, ...]) -> tuple[TransferBreakdownEntry, ...]:
    return tuple(
        TransferBreakdownEntry(
            from_store_id=r.from_store_id,
            to_store_id=r.to_store_id,
            cost=r.cost,
            price=r.price,
        )
        for r in records
    )


def build_daily_records(
    store_id: str,
    data: ImportedData,
    days_in_month: int,
) -> MonthlyAccumulator:
    """Walk days 1..days_in_month for one store and accumulate the month.

    Missing sub-records count as zero. Only days carrying some non-zero
    signal are stored in ``daily``; the latest such day becomes
    ``elapsed_days``.
    """
    purchase_store = data.purchase.get(store_id, {})
    sales_store = data.sales.get(store_id, {})
    discount_store = data.discount.get(store_id, {})
    inter_in_store = data.inter_store_in.get(store_id, {})
    inter_out_store = data.inter_store_out.get(store_id, {})
    flowers_store = data.flowers.get(store_id, {})
    direct_produce_store = data.direct_produce.get(store_id, {})
    consumables_store = data.consumables.get(store_id, {})

    acc = MonthlyAccumulator()
    transfer_in = ZERO_COST_PRICE_PAIR
    transfer_out = ZERO_COST_PRICE_PAIR
    dept_in = ZERO_COST_PRICE_PAIR
    dept_out = ZERO_COST_PRICE_PAIR

    for day in range(1, days_in_month + 1):
        purchase_day = purchase_store.get(day)
        sales_day = sales_store.get(day)
        discount_day = discount_store.get(day)
        inter_in_day = inter_in_store.get(day)
        inter_out_day = inter_out_store.get(day)
        flower_day = flowers_store.get(day)
        direct_produce_day = direct_produce_store.get(day)
        consumable = consumables_store.get(day) or ZERO_CONSUMABLE_DAILY

        purchase = purchase_day.total if purchase_day else ZERO_COST_PRICE_PAIR
        day_sales = sales_day.sales if sales_day else 0.0

        customers = 0
        if sales_day and sales_day.customers is not None:
            customers = sales_day.customers
        elif discount_day and discount_day.customers is not None:
            customers = discount_day.customers

        flowers = (
            CostPricePair(cost=flower_day.cost, price=flower_day.price)
            if flower_day
            else ZERO_COST_PRICE_PAIR
        )
        direct_produce = (
            CostPricePair(cost=direct_produce_day.cost, price=direct_produce_day.price)
            if direct_produce_day
            else ZERO_COST_PRICE_PAIR
        )
        # Delivery sales = flowers + direct produce
        delivery_sales = add_cost_price_pairs(flowers, direct_produce)

        # Each direction is summed on its own before any netting.
        inter_store_in = ZERO_COST_PRICE_PAIR
        inter_department_in = ZERO_COST_PRICE_PAIR
        inter_store_out = ZERO_COST_PRICE_PAIR
        inter_department_out = ZERO_COST_PRICE_PAIR
        breakdown = TransferBreakdown()
        if inter_in_day:
            inter_store_in = _sum_transfers(inter_in_day.inter_store_in)
            inter_department_in = _sum_transfers(inter_in_day.inter_department_in)
            breakdown = TransferBreakdown(
                inter_store_in=_breakdown(inter_in_day.inter_store_in),
                inter_department_in=_breakdown(inter_in_day.inter_department_in),
            )
        if inter_out_day:
            inter_store_out = _sum_transfers(inter_out_day.inter_store_out)
            inter_department_out = _sum_transfers(inter_out_day.inter_department_out)
            breakdown = TransferBreakdown(
                inter_store_in=breakdown.inter_store_in,
                inter_department_in=breakdown.inter_department_in,
                inter_store_out=_breakdown(inter_out_day.inter_store_out),
                inter_department_out=_breakdown(inter_out_day.inter_department_out),
            )

        discount_amount = discount_day.discount if discount_day else 0.0
        discount_absolute = abs(discount_amount)

        core = calculate_core_sales(day_sales, flowers.price, direct_produce.price)
        gross_sales = day_sales + discount_absolute

        supplier_breakdown: dict[str, CostPricePair] = {}
        if purchase_day:
            for code, line in purchase_day.suppliers.items():
                supplier_breakdown[code] = CostPricePair(cost=line.cost, price=line.price)
                st = acc.supplier_totals.setdefault(code, SupplierAccumulator(name=line.name))
                st.cost += line.cost
                st.price += line.price

        has_data = (
            day_sales != 0
            or purchase.cost != 0
            or delivery_sales.cost != 0
            or inter_store_in.cost != 0
            or inter_store_out.cost != 0
            or inter_department_in.cost != 0
            or inter_department_out.cost != 0
            or discount_absolute != 0
            or consumable.cost != 0
        )

        if has_data:
            acc.elapsed_days = day
            if day_sales > 0:
                acc.sales_days += 1
            rec = DailyRecord(
                day=day,
                sales=day_sales,
                core_sales=core.core_sales,
                gross_sales=gross_sales,
                purchase=purchase,
                delivery_sales=delivery_sales,
                inter_store_in=inter_store_in,
                inter_store_out=inter_store_out,
                inter_department_in=inter_department_in,
                inter_department_out=inter_department_out,
                flowers=flowers,
                direct_produce=direct_produce,
                consumable=consumable,
                discount_amount=discount_amount,
                discount_absolute=discount_absolute,
                customers=customers,
                supplier_breakdown=supplier_breakdown,
                transfer_breakdown=breakdown,
            )
            acc.daily[day] = rec
            acc.total_cost += rec.total_cost

        acc.total_sales += day_sales
        acc.total_purchase_cost += purchase.cost
        acc.total_purchase_price += purchase.price
        acc.total_flower_price += flowers.price
        acc.total_flower_cost += flowers.cost
        acc.total_direct_produce_price += direct_produce.price
        acc.total_direct_produce_cost += direct_produce.cost
        acc.total_discount += discount_absolute
        acc.total_consumable += consumable.cost
        acc.total_customers += customers

        transfer_in = add_cost_price_pairs(transfer_in, inter_store_in)
        transfer_out = add_cost_price_pairs(transfer_out, inter_store_out)
        dept_in = add_cost_price_pairs(dept_in, inter_department_in)
        dept_out = add_cost_price_pairs(dept_out, inter_department_out)

    acc.transfer_totals = TransferDetails(
        inter_store_in=transfer_in,
        inter_store_out=transfer_out,
        inter_department_in=dept_in,
        inter_department_out=dept_out,
        net_transfer=CostPricePair(
            cost=transfer_in.cost + transfer_out.cost + dept_in.cost + dept_out.cost,
            price=transfer_in.price + transfer_out.price + dept_in.price + dept_out.price,
        ),
    )
    return acc
