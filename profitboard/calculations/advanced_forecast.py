"""Month-end sales projections by several methods.

Projections combine the actual total to date with an estimate for each
remaining calendar day. Figures in ``MonthEndProjection`` are rounded to
whole currency units, halves rounding up.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from typing import Mapping

from .forecast import calculate_std_dev, sunday_based_weekday
from .utils import safe_divide

DEFAULT_WMA_WINDOW = 5
Z_95 = 1.96


@dataclass(frozen=True)
class WMAEntry:
    day: int
    actual: float
    wma: float


@dataclass(frozen=True)
class LinearRegressionResult:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: int
    upper: int


@dataclass(frozen=True)
class MonthEndProjection:
    linear_projection: int
    dow_adjusted_projection: int
    wma_projection: int
    confidence_interval: ConfidenceInterval
    daily_trend: int
    regression_projection: int


EMPTY_PROJECTION = MonthEndProjection(
    linear_projection=0,
    dow_adjusted_projection=0,
    wma_projection=0,
    confidence_interval=ConfidenceInterval(lower=0, upper=0),
    daily_trend=0,
    regression_projection=0,
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _positive_entries(daily_sales: Mapping[int, float]) -> list[tuple[int, float]]:
    return [(day, v) for day, v in daily_sales.items() if v > 0]


def calculate_wma(
    daily_sales: Mapping[int, float],
    window: int = DEFAULT_WMA_WINDOW,
) -> list[WMAEntry]:
    """Linearly weighted moving average over days with sales, newest weighted highest.

    The first ``window - 1`` days (or every day, when there are fewer than
    ``window``) carry their own value as the average.
    """
    entries = sorted(_positive_entries(daily_sales))
    if len(entries) < window:
        return [WMAEntry(day, actual, actual) for day, actual in entries]

    total_weight = window * (window + 1) / 2
    results = []
    for i, (day, actual) in enumerate(entries):
        if i < window - 1:
            results.append(WMAEntry(day, actual, actual))
            continue
        span = entries[i - window + 1 : i + 1]
        weighted = sum(value * (j + 1) for j, (_, value) in enumerate(span))
        results.append(WMAEntry(day, actual, weighted / total_weight))
    return results


def linear_regression(daily_sales: Mapping[int, float]) -> LinearRegressionResult:
    """Least-squares fit of sales against day number over days with sales."""
    entries = _positive_entries(daily_sales)
    n = len(entries)
    if n < 2:
        return LinearRegressionResult(slope=0.0, intercept=0.0, r_squared=0.0)

    sum_x = sum(x for x, _ in entries)
    sum_y = sum(y for _, y in entries)
    sum_xy = sum(x * y for x, y in entries)
    sum_x2 = sum(x * x for x, _ in entries)

    denom = n * sum_x2 - sum_x * sum_x
    if denom == 0:
        return LinearRegressionResult(slope=0.0, intercept=sum_y / n, r_squared=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_tot = sum((y - y_mean) ** 2 for _, y in entries)
    ss_res = sum((y - (slope * x + intercept)) ** 2 for x, y in entries)
    r_squared = 0.0 if ss_tot == 0 else 1 - ss_res / ss_tot

    return LinearRegressionResult(slope=slope, intercept=intercept, r_squared=r_squared)


def project_dow_adjusted(
    year: int,
    month: int,
    daily_sales: Mapping[int, float],
    data_end_day: int,
) -> float:
    """Actual total plus each remaining day's weekday average."""
    totals = [0.0] * 7
    counts = [0] * 7
    for day, sales in daily_sales.items():
        if sales > 0:
            dow = sunday_based_weekday(year, month, day)
            totals[dow] += sales
            counts[dow] += 1
    dow_avg = [safe_divide(totals[i], counts[i], 0.0) for i in range(7)]

    actual_total = sum(daily_sales.values())
    days = calendar.monthrange(year, month)[1]
    remaining = sum(
        dow_avg[sunday_based_weekday(year, month, d)] for d in range(data_end_day + 1, days + 1)
    )
    return actual_total + remaining


def calculate_month_end_projection(
    year: int,
    month: int,
    daily_sales: Mapping[int, float],
) -> MonthEndProjection:
    """Linear, weekday-adjusted, WMA and regression projections with a 95% band.

    The band is centred on the mean of the linear, weekday-adjusted and WMA
    projections and widens with the number of remaining days.
    """
    entries = _positive_entries(daily_sales)
    if not entries:
        return EMPTY_PROJECTION

    days = calendar.monthrange(year, month)[1]
    values = [v for _, v in entries]
    actual_total = sum(values)
    data_end_day = max(d for d, _ in entries)
    remaining_days = days - data_end_day

    daily_avg = actual_total / len(entries)
    linear = actual_total + daily_avg * remaining_days

    dow_adjusted = project_dow_adjusted(year, month, daily_sales, data_end_day)

    wma_entries = calculate_wma(daily_sales)
    last_wma = wma_entries[-1].wma if wma_entries else daily_avg
    wma = actual_total + last_wma * remaining_days

    reg = linear_regression(daily_sales)
    regression = actual_total + sum(
        max(0.0, reg.slope * d + reg.intercept) for d in range(data_end_day + 1, days + 1)
    )

    _, std_dev = calculate_std_dev(values)
    uncertainty = Z_95 * (std_dev / math.sqrt(len(entries))) * remaining_days
    best_estimate = (linear + dow_adjusted + wma) / 3

    return MonthEndProjection(
        linear_projection=_round_half_up(linear),
        dow_adjusted_projection=_round_half_up(dow_adjusted),
        wma_projection=_round_half_up(wma),
        confidence_interval=ConfidenceInterval(
            lower=_round_half_up(max(0.0, best_estimate - uncertainty)),
            upper=_round_half_up(best_estimate + uncertainty),
        ),
        daily_trend=_round_half_up(reg.slope),
        regression_projection=_round_half_up(regression),
    )
