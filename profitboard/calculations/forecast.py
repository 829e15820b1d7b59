"""Weekly and weekday summaries plus outlier days for a trading month.

Weeks run Monday to Sunday and are clipped to the month, so the first and
last weeks may be short. Weekday buckets use Sunday = 0 ... Saturday = 6.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from .utils import safe_divide, safe_number

DEFAULT_ANOMALY_THRESHOLD = 2.0
MIN_ANOMALY_SAMPLES = 3


@dataclass(frozen=True)
class WeekRange:
    week_number: int
    start_day: int
    end_day: int


@dataclass(frozen=True)
class WeeklySummary:
    week_number: int
    start_day: int
    end_day: int
    total_sales: float
    total_gross_profit: float
    gross_profit_rate: float
    days: int


@dataclass(frozen=True)
class DayOfWeekAverage:
    day_of_week: int
    average_sales: float
    count: int


@dataclass(frozen=True)
class AnomalyDetectionResult:
    day: int
    value: float
    mean: float
    std_dev: float
    z_score: float
    is_anomaly: bool


@dataclass(frozen=True)
class ForecastInput:
    year: int
    month: int
    daily_sales: Mapping[int, float] = field(default_factory=dict)
    daily_gross_profit: Mapping[int, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ForecastResult:
    weekly_summaries: tuple[WeeklySummary, ...]
    day_of_week_averages: tuple[DayOfWeekAverage, ...]
    anomalies: tuple[AnomalyDetectionResult, ...]


def sunday_based_weekday(year: int, month: int, day: int) -> int:
    return (date(year, month, day).weekday() + 1) % 7


def calculate_std_dev(values: Iterable[float]) -> tuple[float, float]:
    """Population mean and standard deviation; (0, 0) for no values."""
    vals = list(values)
    if not vals:
        return 0.0, 0.0
    mean = sum(vals) / len(vals)
    variance = sum((v - mean) ** 2 for v in vals) / len(vals)
    return mean, math.sqrt(variance)


def get_week_ranges(year: int, month: int) -> list[WeekRange]:
    days = calendar.monthrange(year, month)[1]
    weeks: list[WeekRange] = []
    day = 1
    while day <= days:
        # date.weekday(): Monday = 0 ... Sunday = 6
        end_day = min(day + 6 - date(year, month, day).weekday(), days)
        weeks.append(WeekRange(len(weeks) + 1, day, end_day))
        day = end_day + 1
    return weeks


def calculate_weekly_summaries(forecast_input: ForecastInput) -> tuple[WeeklySummary, ...]:
    summaries = []
    for week in get_week_ranges(forecast_input.year, forecast_input.month):
        total_sales = 0.0
        total_gross_profit = 0.0
        days = 0
        for d in range(week.start_day, week.end_day + 1):
            sales = safe_number(forecast_input.daily_sales.get(d))
            if sales > 0:
                days += 1
            total_sales += sales
            total_gross_profit += safe_number(forecast_input.daily_gross_profit.get(d))
        summaries.append(
            WeeklySummary(
                week_number=week.week_number,
                start_day=week.start_day,
                end_day=week.end_day,
                total_sales=total_sales,
                total_gross_profit=total_gross_profit,
                gross_profit_rate=safe_divide(total_gross_profit, total_sales, 0.0),
                days=days,
            )
        )
    return tuple(summaries)


def calculate_day_of_week_averages(forecast_input: ForecastInput) -> tuple[DayOfWeekAverage, ...]:
    """Average sales per weekday over days that had sales."""
    year, month = forecast_input.year, forecast_input.month
    totals = [0.0] * 7
    counts = [0] * 7
    for d in range(1, calendar.monthrange(year, month)[1] + 1):
        sales = safe_number(forecast_input.daily_sales.get(d))
        if sales > 0:
            dow = sunday_based_weekday(year, month, d)
            totals[dow] += sales
            counts[dow] += 1
    return tuple(
        DayOfWeekAverage(day_of_week=i, average_sales=safe_divide(totals[i], counts[i], 0.0), count=counts[i])
        for i in range(7)
    )


def detect_anomalies(
    daily_sales: Mapping[int, float],
    threshold: float = DEFAULT_ANOMALY_THRESHOLD,
) -> tuple[AnomalyDetectionResult, ...]:
    """Days whose sales lie more than ``threshold`` standard deviations from the mean.

    Only days with positive sales are considered, and at least three are
    needed before anything is flagged.
    """
    entries = [(day, safe_number(v)) for day, v in daily_sales.items() if safe_number(v) > 0]
    if len(entries) < MIN_ANOMALY_SAMPLES:
        return ()

    mean, std_dev = calculate_std_dev(v for _, v in entries)
    if std_dev == 0:
        return ()

    anomalies = []
    for day, value in entries:
        z_score = (value - mean) / std_dev
        if abs(z_score) > threshold:
            anomalies.append(
                AnomalyDetectionResult(
                    day=day,
                    value=value,
                    mean=mean,
                    std_dev=std_dev,
                    z_score=z_score,
                    is_anomaly=True,
                )
            )
    return tuple(anomalies)


def calculate_forecast(forecast_input: ForecastInput) -> ForecastResult:
    return ForecastResult(
        weekly_summaries=calculate_weekly_summaries(forecast_input),
        day_of_week_averages=calculate_day_of_week_averages(forecast_input),
        anomalies=detect_anomalies(forecast_input.daily_sales),
    )
