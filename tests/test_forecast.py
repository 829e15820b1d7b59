"""Tests for weekly/weekday summaries, outlier days and month-end projections."""

import pytest

from profitboard.calculations.advanced_forecast import (
    EMPTY_PROJECTION,
    calculate_month_end_projection,
    calculate_wma,
    linear_regression,
    project_dow_adjusted,
)
from profitboard.calculations.forecast import (
    ForecastInput,
    calculate_day_of_week_averages,
    calculate_forecast,
    calculate_weekly_summaries,
    detect_anomalies,
    get_week_ranges,
    sunday_based_weekday,
)


class TestWeekRanges:
    def test_february_2026_starts_on_sunday(self):
        weeks = get_week_ranges(2026, 2)
        assert [(w.start_day, w.end_day) for w in weeks] == [
            (1, 1), (2, 8), (9, 15), (16, 22), (23, 28),
        ]
        assert [w.week_number for w in weeks] == [1, 2, 3, 4, 5]

    def test_sunday_based_weekday(self):
        assert sunday_based_weekday(2026, 2, 1) == 0
        assert sunday_based_weekday(2026, 2, 2) == 1
        assert sunday_based_weekday(2026, 2, 7) == 6


class TestWeeklySummaries:
    def test_totals_and_rates(self):
        summaries = calculate_weekly_summaries(
            ForecastInput(
                2026, 2,
                daily_sales={1: 100, 2: 200, 3: 0, 9: 300},
                daily_gross_profit={1: 20, 2: 50, 9: 60},
            )
        )
        assert len(summaries) == 5
        first, second, third, fourth, _ = summaries
        assert first.total_sales == 100
        assert first.gross_profit_rate == pytest.approx(0.2)
        assert second.total_sales == 200
        assert second.days == 1
        assert second.gross_profit_rate == pytest.approx(0.25)
        assert third.total_gross_profit == 60
        assert fourth.total_sales == 0
        assert fourth.gross_profit_rate == 0


class TestDayOfWeekAverages:
    def test_averages_over_days_with_sales(self):
        averages = calculate_day_of_week_averages(
            ForecastInput(2026, 2, daily_sales={1: 100, 8: 300, 2: 50, 3: 0})
        )
        assert len(averages) == 7
        assert averages[0].average_sales == pytest.approx(200)
        assert averages[0].count == 2
        assert averages[1].average_sales == pytest.approx(50)
        assert averages[2].count == 0
        assert averages[2].average_sales == 0


class TestDetectAnomalies:
    def test_needs_three_days(self):
        assert detect_anomalies({1: 100, 2: 1000}) == ()

    def test_flat_series_has_none(self):
        assert detect_anomalies({1: 100, 2: 100, 3: 100}) == ()

    def test_flags_outlier(self):
        sales = {d: 100 for d in range(1, 10)}
        sales[10] = 1000
        sales[11] = 0
        anomalies = detect_anomalies(sales)
        assert len(anomalies) == 1
        hit = anomalies[0]
        assert hit.day == 10
        assert hit.mean == pytest.approx(190)
        assert hit.std_dev == pytest.approx(270)
        assert hit.z_score == pytest.approx(3.0)
        assert hit.is_anomaly

    def test_threshold(self):
        sales = {d: 100 for d in range(1, 10)}
        sales[10] = 1000
        assert detect_anomalies(sales, threshold=3.5) == ()


class TestCalculateForecast:
    def test_combines_views(self):
        result = calculate_forecast(ForecastInput(2026, 2, daily_sales={1: 100}))
        assert len(result.weekly_summaries) == 5
        assert len(result.day_of_week_averages) == 7
        assert result.anomalies == ()


class TestWMA:
    def test_weighted_towards_recent_days(self):
        entries = calculate_wma({1: 10, 2: 20, 3: 30, 4: 40}, window=3)
        assert [e.day for e in entries] == [1, 2, 3, 4]
        assert entries[0].wma == 10
        assert entries[1].wma == 20
        assert entries[2].wma == pytest.approx(140 / 6)
        assert entries[3].wma == pytest.approx(200 / 6)

    def test_short_series_uses_actuals(self):
        entries = calculate_wma({2: 20, 1: 10, 3: 0}, window=3)
        assert [(e.day, e.wma) for e in entries] == [(1, 10), (2, 20)]


class TestLinearRegression:
    def test_perfect_line(self):
        reg = linear_regression({1: 10, 2: 20, 3: 30})
        assert reg.slope == pytest.approx(10)
        assert reg.intercept == pytest.approx(0)
        assert reg.r_squared == pytest.approx(1)

    def test_single_point(self):
        reg = linear_regression({5: 100})
        assert (reg.slope, reg.intercept, reg.r_squared) == (0.0, 0.0, 0.0)

    def test_flat_series_has_no_fit_quality(self):
        reg = linear_regression({1: 5, 2: 5})
        assert reg.slope == pytest.approx(0)
        assert reg.intercept == pytest.approx(5)
        assert reg.r_squared == 0.0


class TestProjectDowAdjusted:
    def test_adds_weekday_average_for_remaining_days(self):
        # Sundays 8, 15, 22 and Mondays 9, 16, 23 remain after day 2.
        assert project_dow_adjusted(2026, 2, {1: 100, 2: 50}, 2) == pytest.approx(600)


class TestMonthEndProjection:
    def test_no_sales(self):
        assert calculate_month_end_projection(2026, 2, {}) == EMPTY_PROJECTION
        assert calculate_month_end_projection(2026, 2, {1: 0}) == EMPTY_PROJECTION

    def test_projections(self):
        projection = calculate_month_end_projection(2026, 2, {1: 100, 2: 200, 3: 300})
        assert projection.linear_projection == 5600
        assert projection.dow_adjusted_projection == 2400
        assert projection.wma_projection == 8100
        assert projection.regression_projection == 40600
        assert projection.daily_trend == 100
        assert projection.confidence_interval.lower == 3057
        assert projection.confidence_interval.upper == 7677

    def test_halves_round_up(self):
        projection = calculate_month_end_projection(2026, 2, {1: 10, 2: 12.5})
        assert projection.daily_trend == 3
