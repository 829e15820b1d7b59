"""Budget progress and month-end projection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .utils import safe_divide


@dataclass(frozen=True)
class CumulativePoint:
    sales: float
    budget: float


@dataclass(frozen=True)
class BudgetAnalysisResult:
    budget_achievement_rate: float
    budget_progress_rate: float
    budget_elapsed_rate: float
    average_daily_sales: float
    projected_sales: float
    projected_achievement: float
    remaining_budget: float
    daily_cumulative: dict[int, CumulativePoint]


def cumulative_budget(budget_daily: Mapping[int, float], through_day: int) -> float:
    """Sum of the daily budget for days 1..through_day."""
    return sum(budget_daily.get(d, 0.0) for d in range(1, through_day + 1))


def calculate_budget_analysis(
    total_sales: float,
    budget: float,
    budget_daily: Mapping[int, float],
    sales_daily: Mapping[int, float],
    elapsed_days: int,
    sales_days: int,
    days_in_month: int,
) -> BudgetAnalysisResult:
    """Budget rates and a straight-line month-end projection.

    The daily average is taken over days that actually had sales, and the
    remaining calendar days are projected at that average.
    """
    budget_achievement_rate = safe_divide(total_sales, budget, 0.0)

    budget_to_date = cumulative_budget(budget_daily, elapsed_days)
    budget_progress_rate = safe_divide(total_sales, budget_to_date, 0.0)
    budget_elapsed_rate = safe_divide(budget_to_date, budget, 0.0)

    average_daily_sales = safe_divide(total_sales, sales_days, 0.0)
    remaining_days = days_in_month - elapsed_days
    projected_sales = total_sales + average_daily_sales * remaining_days
    projected_achievement = safe_divide(projected_sales, budget, 0.0)

    daily_cumulative: dict[int, CumulativePoint] = {}
    cum_sales = 0.0
    cum_budget = 0.0
    for d in range(1, days_in_month + 1):
        cum_sales += sales_daily.get(d, 0.0)
        cum_budget += budget_daily.get(d, 0.0)
        daily_cumulative[d] = CumulativePoint(sales=cum_sales, budget=cum_budget)

    return BudgetAnalysisResult(
        budget_achievement_rate=budget_achievement_rate,
        budget_progress_rate=budget_progress_rate,
        budget_elapsed_rate=budget_elapsed_rate,
        average_daily_sales=average_daily_sales,
        projected_sales=projected_sales,
        projected_achievement=projected_achievement,
        remaining_budget=budget - total_sales,
        daily_cumulative=daily_cumulative,
    )
