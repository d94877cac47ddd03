import datetime as dt
import unittest

from guardian.analytics import (
    calculate_crew_efficiency,
    calculate_production_metrics,
    calculate_temperature_trends,
    calculate_weather_impact,
    category_totals,
    get_monthly_production,
    get_weekly_production,
    get_work_log_stats,
    work_log_months,
)
from guardian.domain import (
    AnalyticsPolicy,
    CrewLogEntry,
    DailySummary,
    DaySuitability,
    EfficiencyRating,
    HoldCause,
    ProductionEntry,
    ProductionTrend,
    Suitability,
    WorkLogEntry,
)

JAN_1 = dt.date(2025, 1, 1)


def _entries(values, start=JAN_1):
    return [ProductionEntry(date=start + dt.timedelta(days=i), sqft=v) for i, v in enumerate(values)]


def _day(date, status=Suitability.GO, causes=()):
    return DaySuitability(date=date, package_id="pkg", status=status, hold_causes=list(causes))


class TestProductionMetrics(unittest.TestCase):
    def test_empty_log(self):
        metrics = calculate_production_metrics([])
        self.assertEqual(metrics.total_sqft, 0)
        self.assertEqual(metrics.production_trend, ProductionTrend.STABLE)
        self.assertIsNone(metrics.peak_day.date)

    def test_increasing_production(self):
        metrics = calculate_production_metrics(_entries([100] * 7 + [150] * 7))
        self.assertEqual(metrics.total_sqft, 1750)
        self.assertEqual(metrics.daily_average, 125.0)
        self.assertEqual(metrics.rolling_7_day_average, 150.0)
        self.assertEqual(metrics.rolling_30_day_average, 125.0)
        self.assertEqual(metrics.weekly_average, 625.0)
        self.assertEqual(metrics.monthly_total, 1750)
        self.assertEqual(metrics.peak_day.date, dt.date(2025, 1, 8))
        self.assertEqual(metrics.lowest_day.date, JAN_1)
        self.assertEqual(metrics.production_trend, ProductionTrend.INCREASING)
        self.assertEqual(metrics.trend_percentage, 50.0)

    def test_decreasing_production(self):
        metrics = calculate_production_metrics(_entries([150] * 7 + [100] * 7))
        self.assertEqual(metrics.production_trend, ProductionTrend.DECREASING)

    def test_small_change_is_stable(self):
        metrics = calculate_production_metrics(_entries([100] * 7 + [104] * 7))
        self.assertEqual(metrics.production_trend, ProductionTrend.STABLE)
        self.assertEqual(metrics.trend_percentage, 4.0)

    def test_sparse_history_compares_halves(self):
        entries = [ProductionEntry(date=JAN_1, sqft=100), ProductionEntry(date=dt.date(2025, 1, 20), sqft=90)]
        metrics = calculate_production_metrics(entries)
        self.assertEqual(metrics.production_trend, ProductionTrend.DECREASING)
        self.assertEqual(metrics.trend_percentage, -10.0)

    def test_as_of_moves_rolling_windows(self):
        metrics = calculate_production_metrics(_entries([100] * 7 + [150] * 7), as_of=dt.date(2025, 1, 7))
        self.assertEqual(metrics.rolling_7_day_average, 100.0)

    def test_zero_sqft_days_are_not_worked_days(self):
        metrics = calculate_production_metrics(_entries([100, 0, 200]))
        self.assertEqual(metrics.total_sqft, 300)
        self.assertEqual(metrics.daily_average, 150.0)
        self.assertEqual(metrics.lowest_day.sqft, 100)
        self.assertEqual(metrics.lowest_day.date, JAN_1)
        self.assertEqual(metrics.rolling_7_day_average, 150.0)

    def test_only_zero_sqft_days_give_empty_metrics(self):
        metrics = calculate_production_metrics(_entries([0, 0]))
        self.assertEqual(metrics.daily_average, 0)
        self.assertIsNone(metrics.lowest_day.date)


class TestCrewEfficiency(unittest.TestCase):
    def _logs(self, sqft):
        return [CrewLogEntry(date=JAN_1, crew_count=4, hours_worked=8, sqft_completed=sqft)]

    def test_empty_logs(self):
        result = calculate_crew_efficiency([])
        self.assertEqual(result.efficiency_rating, EfficiencyRating.NEEDS_IMPROVEMENT)
        self.assertEqual(result.efficiency_score, 0)

    def test_just_below_target_is_average(self):
        result = calculate_crew_efficiency(self._logs(792))
        self.assertEqual(result.comparison_to_target, 99.0)
        self.assertEqual(result.efficiency_rating, EfficiencyRating.AVERAGE)

    def test_on_target_is_good(self):
        result = calculate_crew_efficiency(self._logs(800))
        self.assertEqual(result.sqft_per_crew_member, 200.0)
        self.assertEqual(result.sqft_per_hour, 25.0)
        self.assertEqual(result.average_crew_size, 4.0)
        self.assertEqual(result.comparison_to_target, 100.0)
        self.assertEqual(result.efficiency_rating, EfficiencyRating.GOOD)
        self.assertEqual(result.efficiency_score, 70)

    def test_well_above_target_is_excellent(self):
        self.assertEqual(calculate_crew_efficiency(self._logs(960)).efficiency_rating, EfficiencyRating.EXCELLENT)

    def test_far_below_target(self):
        result = calculate_crew_efficiency(self._logs(100))
        self.assertEqual(result.efficiency_rating, EfficiencyRating.NEEDS_IMPROVEMENT)
        self.assertTrue(0 <= result.efficiency_score < 50)

    def test_custom_target(self):
        result = calculate_crew_efficiency(self._logs(800), policy=AnalyticsPolicy(target_sqft_per_crew_day=250))
        self.assertEqual(result.comparison_to_target, 80.0)
        self.assertEqual(result.efficiency_rating, EfficiencyRating.AVERAGE)


class TestWeatherImpact(unittest.TestCase):
    def _history(self):
        start = dt.date(2025, 1, 28)
        days = [_day(start + dt.timedelta(days=i)) for i in range(10)]
        days[1] = _day(days[1].date, Suitability.HOLD, [HoldCause.TEMPERATURE])
        days[2] = _day(days[2].date, Suitability.HOLD, [HoldCause.TEMPERATURE, HoldCause.WIND])
        days[7] = _day(days[7].date, Suitability.HOLD, [HoldCause.WIND])
        days[4] = _day(days[4].date, Suitability.CAUTION)
        return days

    def test_counts_and_percentage(self):
        impact = calculate_weather_impact(self._history())
        self.assertEqual(impact.total_days, 10)
        self.assertEqual(impact.total_hold_days, 3)
        self.assertEqual(impact.hold_percentage, 30.0)
        self.assertEqual(impact.estimated_cost_impact, 7500)

    def test_streaks_and_reasons(self):
        impact = calculate_weather_impact(list(reversed(self._history())))
        self.assertEqual(impact.longest_hold_streak, 2)
        self.assertEqual(impact.avg_delay_duration, 1.5)
        self.assertEqual(
            [(r.reason, r.count) for r in impact.holds_by_reason],
            [(HoldCause.TEMPERATURE, 2), (HoldCause.WIND, 1)],
        )

    def test_monthly_buckets(self):
        impact = calculate_weather_impact(self._history())
        self.assertEqual(
            [(m.month, m.holds, m.days) for m in impact.monthly_hold_trend],
            [("2025-01", 2, 4), ("2025-02", 1, 6)],
        )

    def test_empty_history(self):
        impact = calculate_weather_impact([])
        self.assertEqual(impact.total_hold_days, 0)
        self.assertEqual(impact.hold_percentage, 0.0)


class TestWorkLog(unittest.TestCase):
    def _log(self):
        dates = [dt.date(2025, 1, d) for d in (6, 7, 8, 9, 10, 13)]
        return [WorkLogEntry(date=d, labor_hours=8, categories={"Roofing": 6, "Safety": 2}) for d in dates]

    def test_stats(self):
        stats = get_work_log_stats(self._log(), today=dt.date(2025, 1, 15))
        self.assertEqual(stats.total_days, 6)
        self.assertEqual(stats.total_labor_hours, 48)
        self.assertEqual(stats.average_hours_per_day, 8.0)
        self.assertEqual(stats.first_worked_date, dt.date(2025, 1, 6))
        self.assertEqual(stats.last_worked_date, dt.date(2025, 1, 13))
        self.assertEqual(stats.work_streak, 6)
        self.assertEqual(stats.days_since_last_work, 2)

    def test_empty_log(self):
        stats = get_work_log_stats([], today=dt.date(2025, 1, 15))
        self.assertEqual(stats.total_days, 0)
        self.assertIsNone(stats.days_since_last_work)

    def test_category_totals_are_additive(self):
        self.assertEqual(category_totals(self._log()), {"Roofing": 36, "Safety": 12})

    def test_months(self):
        log = self._log() + [WorkLogEntry(date=dt.date(2024, 12, 30), labor_hours=4)]
        self.assertEqual(work_log_months(log), ["2024-12", "2025-01"])


def test_monthly_production():
    entries = [
        ProductionEntry(date=dt.date(2025, 1, 2), sqft=100),
        ProductionEntry(date=dt.date(2025, 1, 3), sqft=200),
        ProductionEntry(date=dt.date(2025, 2, 3), sqft=150),
    ]
    holds = [
        _day(dt.date(2025, 1, 6), Suitability.HOLD, [HoldCause.PRECIPITATION]),
        _day(dt.date(2025, 1, 7)),
        _day(dt.date(2025, 2, 4), Suitability.HOLD),
        _day(dt.date(2025, 3, 4), Suitability.HOLD),
    ]
    months = get_monthly_production(entries, holds)
    assert [(m.month, m.sqft, m.days_worked, m.weather_holds, m.efficiency) for m in months] == [
        ("2025-01", 300, 2, 1, 67),
        ("2025-02", 150, 1, 1, 50),
        ("2025-03", 0, 0, 1, 0),
    ]



def test_weekly_production_uses_sunday_weeks():
    entries = [
        ProductionEntry(date=dt.date(2025, 1, 6), sqft=100),
        ProductionEntry(date=dt.date(2025, 1, 7), sqft=200),
        ProductionEntry(date=dt.date(2025, 1, 12), sqft=150),
    ]
    holds = [
        _day(dt.date(2025, 1, 8), Suitability.HOLD),
        _day(dt.date(2025, 1, 9)),
        _day(dt.date(2025, 1, 13), Suitability.HOLD),
    ]
    weeks = get_weekly_production(entries, holds)
    assert [(w.week_start, w.sqft, w.days_worked, w.weather_holds, w.avg_daily_production) for w in weeks] == [
        (dt.date(2025, 1, 5), 300, 2, 1, 150),
        (dt.date(2025, 1, 12), 150, 1, 1, 150),
    ]


def test_weekly_production_keeps_latest_eight_weeks():
    first_sunday = dt.date(2025, 1, 5)
    entries = [ProductionEntry(date=first_sunday + dt.timedelta(weeks=i), sqft=100) for i in range(10)]
    weeks = get_weekly_production(entries)
    assert len(weeks) == 8
    assert weeks[0].week_start == first_sunday + dt.timedelta(weeks=2)
    assert weeks[-1].week_start == first_sunday + dt.timedelta(weeks=9)


def test_weekly_production_hold_only_week():
    weeks = get_weekly_production([], [_day(dt.date(2025, 1, 8), Suitability.HOLD)])
    assert weeks[0].days_worked == 0
    assert weeks[0].avg_daily_production == 0


def _daily(day, *, low, high, avg, precip):
    return DailySummary(
        date=day, day_name=day.strftime("%a"), timezone="UTC", high=high, low=low, avg_temp=avg,
        max_wind=5.0, avg_humidity=40, precip_probability=precip, conditions="Clear", icon="01d",
    )


def test_temperature_trends_round_and_flag_workable_days():
    days = [
        _daily(JAN_1, low=40.4, high=55.5, avg=47.5, precip=10),
        _daily(JAN_1 + dt.timedelta(days=1), low=38.0, high=50.0, avg=44.0, precip=0),
        _daily(JAN_1 + dt.timedelta(days=2), low=45.0, high=60.0, avg=52.0, precip=50),
    ]
    trends = calculate_temperature_trends(days)
    assert [(t.min_temp, t.max_temp, t.avg_temp) for t in trends][0] == (40, 56, 48)
    assert [t.workable for t in trends] == [True, False, False]


if __name__ == "__main__":
    unittest.main()
