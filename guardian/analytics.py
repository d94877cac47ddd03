"""Pure reducers over production logs, crew logs and classified days.

Nothing here performs I/O or keeps state between calls; every function takes
the records it needs and returns a fresh metrics model.
"""

from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Dict, Iterable, List, Sequence

from guardian.aggregator import round_half_up
from guardian.domain import (
    AnalyticsPolicy,
    CrewEfficiency,
    CrewLogEntry,
    DailySummary,
    DayProduction,
    DaySuitability,
    EfficiencyRating,
    HoldReasonCount,
    MonthlyHolds,
    MonthlyProduction,
    ProductionEntry,
    ProductionMetrics,
    ProductionTrend,
    Suitability,
    TemperatureTrend,
    WeatherImpactMetrics,
    WeeklyProduction,
    WorkLogEntry,
    WorkLogStats,
)

WORK_DAYS_PER_WEEK = 5
MONTH_WINDOW_DAYS = 30
WEEKS_SHOWN = 8


def _month_key(day: dt.date) -> str:
    return day.strftime("%Y-%m")


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _within(entries: Iterable[ProductionEntry], as_of: dt.date, days: int, offset: int = 0) -> List[ProductionEntry]:
    """Entries dated in the ``days`` long span ending ``offset`` days before ``as_of``."""
    newest = as_of - dt.timedelta(days=offset)
    oldest = newest - dt.timedelta(days=days)
    return [e for e in entries if oldest < e.date <= newest]


def _trend(entries: Sequence[ProductionEntry], as_of: dt.date, policy: AnalyticsPolicy) -> tuple[ProductionTrend, float]:
    """Compare the latest trend window with the one before it."""
    window = policy.trend_window_days
    recent = _within(entries, as_of, window)
    earlier = _within(entries, as_of, window, offset=window)
    if not recent or not earlier:
        # not enough history for two windows; compare the halves of the log instead
        mid = len(entries) // 2
        earlier, recent = list(entries[:mid]), list(entries[mid:])

    earlier_avg = _mean([e.sqft for e in earlier])
    recent_avg = _mean([e.sqft for e in recent])
    if earlier_avg <= 0:
        return ProductionTrend.STABLE, 0.0

    pct = round((recent_avg - earlier_avg) / earlier_avg * 100, 1)
    if pct > policy.trend_threshold_percent:
        return ProductionTrend.INCREASING, pct
    if pct < -policy.trend_threshold_percent:
        return ProductionTrend.DECREASING, pct
    return ProductionTrend.STABLE, pct


def calculate_production_metrics(
    entries: Iterable[ProductionEntry],
    *,
    as_of: dt.date | None = None,
    policy: AnalyticsPolicy | None = None,
) -> ProductionMetrics:
    """
    Totals, rolling averages, extremes and trend over daily production.

    Only entries with production count as worked days; zero-sqft entries
    are ignored. Rolling windows end at ``as_of`` (the latest worked date by
    default). A log without production yields zeroed metrics, stable trend.
    """
    policy = policy or AnalyticsPolicy()
    ordered = sorted((e for e in entries if e.sqft > 0), key=lambda e: e.date)
    if not ordered:
        return ProductionMetrics()

    as_of = as_of or ordered[-1].date
    total = sum(e.sqft for e in ordered)
    last_7 = _within(ordered, as_of, 7)
    last_30 = _within(ordered, as_of, MONTH_WINDOW_DAYS)

    # earliest entry wins ties for both extremes
    peak = max(ordered, key=lambda e: (e.sqft, -e.date.toordinal()))
    lowest = min(ordered, key=lambda e: (e.sqft, e.date.toordinal()))
    trend, pct = _trend(ordered, as_of, policy)

    weeks = max(1.0, len(ordered) / WORK_DAYS_PER_WEEK)
    return ProductionMetrics(
        total_sqft=total,
        daily_average=round(total / len(ordered), 1),
        rolling_7_day_average=round(_mean([e.sqft for e in last_7]), 1),
        rolling_30_day_average=round(_mean([e.sqft for e in last_30]), 1),
        weekly_average=round(total / weeks, 1),
        monthly_total=sum(e.sqft for e in last_30),
        peak_day=DayProduction(date=peak.date, sqft=peak.sqft),
        lowest_day=DayProduction(date=lowest.date, sqft=lowest.sqft),
        production_trend=trend,
        trend_percentage=pct,
    )


def _rate(ratio: float, policy: AnalyticsPolicy) -> tuple[EfficiencyRating, float]:
    """Map a target ratio to its rating band and a 0-100 score."""
    pct = ratio * 100
    if ratio >= policy.excellent_ratio:
        return EfficiencyRating.EXCELLENT, 85 + (pct - policy.excellent_ratio * 100) * 0.5
    if ratio >= policy.good_ratio:
        span = (policy.excellent_ratio - policy.good_ratio) * 100 or 1
        return EfficiencyRating.GOOD, 70 + (pct - policy.good_ratio * 100) * 15 / span
    if ratio >= policy.average_ratio:
        span = (policy.good_ratio - policy.average_ratio) * 100 or 1
        return EfficiencyRating.AVERAGE, 50 + (pct - policy.average_ratio * 100) * 20 / span
    floor = policy.average_ratio * 100 or 1
    return EfficiencyRating.NEEDS_IMPROVEMENT, pct * 50 / floor


def calculate_crew_efficiency(
    logs: Iterable[CrewLogEntry],
    *,
    policy: AnalyticsPolicy | None = None,
) -> CrewEfficiency:
    """
    Crew productivity against the per-crew-member daily target.

    Banding uses the unrounded ratio to target, so 199 sqft against a 200
    sqft target rates average even though it displays as 99.5%.
    """
    policy = policy or AnalyticsPolicy()
    logs = list(logs)
    if not logs:
        return CrewEfficiency()

    total_sqft = sum(log.sqft_completed for log in logs)
    crew_days = sum(log.crew_count for log in logs)
    labor_hours = sum(log.crew_count * log.hours_worked for log in logs)

    per_member = total_sqft / crew_days
    ratio = per_member / policy.target_sqft_per_crew_day
    rating, score = _rate(ratio, policy)

    return CrewEfficiency(
        sqft_per_crew_member=round(per_member, 1),
        sqft_per_hour=round(total_sqft / labor_hours, 1),
        average_crew_size=round(crew_days / len(logs), 1),
        comparison_to_target=round(ratio * 100, 1),
        efficiency_rating=rating,
        efficiency_score=max(0, min(100, round_half_up(score))),
    )


def _hold_runs(days: Sequence[DaySuitability]) -> List[int]:
    """Lengths of consecutive HOLD runs in date order."""
    runs: list[int] = []
    current = 0
    for day in days:
        if day.status == Suitability.HOLD:
            current += 1
        elif current:
            runs.append(current)
            current = 0
    if current:
        runs.append(current)
    return runs


def calculate_weather_impact(
    days: Iterable[DaySuitability],
    *,
    policy: AnalyticsPolicy | None = None,
) -> WeatherImpactMetrics:
    """Summarize weather holds across a history of day verdicts."""
    policy = policy or AnalyticsPolicy()
    ordered = sorted(days, key=lambda d: d.date)
    if not ordered:
        return WeatherImpactMetrics()

    holds = [d for d in ordered if d.status == Suitability.HOLD]
    runs = _hold_runs(ordered)

    reasons = Counter(d.primary_cause for d in holds)
    holds_by_reason = [
        HoldReasonCount(reason=cause, count=count)
        for cause, count in sorted(reasons.items(), key=lambda item: (-item[1], item[0].value))
    ]

    months: dict[str, list[int]] = {}
    for day in ordered:
        bucket = months.setdefault(_month_key(day.date), [0, 0])
        bucket[1] += 1
        if day.status == Suitability.HOLD:
            bucket[0] += 1
    monthly = [MonthlyHolds(month=m, holds=h, days=n) for m, (h, n) in sorted(months.items())]

    return WeatherImpactMetrics(
        total_days=len(ordered),
        total_hold_days=len(holds),
        hold_percentage=round(len(holds) / len(ordered) * 100, 1),
        estimated_cost_impact=len(holds) * policy.daily_standby_rate,
        longest_hold_streak=max(runs, default=0),
        avg_delay_duration=round(_mean(runs), 1),
        holds_by_reason=holds_by_reason,
        monthly_hold_trend=monthly,
    )


def _weekday_streak(last_worked: dt.date, worked: set[dt.date]) -> int:
    """Count consecutive logged weekdays ending at ``last_worked``; weekends are skipped."""
    streak = 0
    cursor = last_worked
    while True:
        if cursor.weekday() < 5:
            if cursor not in worked:
                break
            streak += 1
        cursor -= dt.timedelta(days=1)
    return streak


def get_work_log_stats(log: Iterable[WorkLogEntry], today: dt.date | None = None) -> WorkLogStats:
    """Totals, averages and the current weekday streak of a labor log."""
    entries = sorted(log, key=lambda e: e.date)
    if not entries:
        return WorkLogStats()

    today = today or dt.date.today()
    total_hours = sum(e.labor_hours for e in entries)
    first, last = entries[0].date, entries[-1].date

    return WorkLogStats(
        total_days=len(entries),
        total_labor_hours=round(total_hours, 2),
        average_hours_per_day=round(total_hours / len(entries), 2),
        first_worked_date=first,
        last_worked_date=last,
        work_streak=_weekday_streak(last, {e.date for e in entries}),
        days_since_last_work=max(0, (today - last).days),
    )


def category_totals(log: Iterable[WorkLogEntry]) -> Dict[str, float]:
    """Sum labor hours per cost category across the log."""
    totals: dict[str, float] = {}
    for entry in log:
        for label, hours in entry.categories.items():
            totals[label] = totals.get(label, 0.0) + hours
    return totals


def work_log_months(log: Iterable[WorkLogEntry]) -> List[str]:
    """Distinct ``YYYY-MM`` months present in the log, ascending."""
    return sorted({_month_key(e.date) for e in log})


def get_monthly_production(
    entries: Iterable[ProductionEntry],
    holds: Iterable[DaySuitability] = (),
) -> List[MonthlyProduction]:
    """Per-month production alongside weather hold days, ascending by month."""
    months: dict[str, dict[str, float]] = {}

    def bucket(day: dt.date) -> dict[str, float]:
        return months.setdefault(_month_key(day), {"sqft": 0.0, "worked": 0, "holds": 0})

    for entry in entries:
        b = bucket(entry.date)
        b["sqft"] += entry.sqft
        b["worked"] += 1
    for day in holds:
        if day.status == Suitability.HOLD:
            bucket(day.date)["holds"] += 1

    result: list[MonthlyProduction] = []
    for month in sorted(months):
        b = months[month]
        worked, held = int(b["worked"]), int(b["holds"])
        result.append(
            MonthlyProduction(
                month=month,
                sqft=b["sqft"],
                days_worked=worked,
                weather_holds=held,
                efficiency=round_half_up(worked / (worked + held) * 100) if worked else 0,
            )
        )
    return result


def _week_start(day: dt.date) -> dt.date:
    """Sunday on or before ``day``."""
    return day - dt.timedelta(days=(day.weekday() + 1) % 7)


def get_weekly_production(
    entries: Iterable[ProductionEntry],
    holds: Iterable[DaySuitability] = (),
    weeks: int = WEEKS_SHOWN,
) -> List[WeeklyProduction]:
    """Per-week production and hold days for the most recent ``weeks`` Sunday-start weeks."""
    buckets: dict[dt.date, dict[str, float]] = {}

    def bucket(day: dt.date) -> dict[str, float]:
        return buckets.setdefault(_week_start(day), {"sqft": 0.0, "worked": 0, "holds": 0})

    for entry in entries:
        b = bucket(entry.date)
        b["sqft"] += entry.sqft
        b["worked"] += 1
    for day in holds:
        if day.status == Suitability.HOLD:
            bucket(day.date)["holds"] += 1

    result = [
        WeeklyProduction(
            week_start=start,
            sqft=b["sqft"],
            days_worked=int(b["worked"]),
            weather_holds=int(b["holds"]),
            avg_daily_production=round_half_up(b["sqft"] / b["worked"]) if b["worked"] else 0,
        )
        for start, b in sorted(buckets.items())
    ]
    return result[-weeks:] if weeks > 0 else []


def calculate_temperature_trends(
    summaries: Iterable[DailySummary],
    *,
    min_workable_temp: float = 40.0,
    max_precip_percent: int = 50,
) -> List[TemperatureTrend]:
    """
    Rounded temperatures per day with a coarse workability flag.

    A day is workable when its low reaches ``min_workable_temp`` and its
    precipitation chance stays under ``max_precip_percent``. Package-specific
    verdicts come from the suitability classifier instead.
    """
    return [
        TemperatureTrend(
            date=s.date,
            avg_temp=round_half_up(s.avg_temp),
            min_temp=round_half_up(s.low),
            max_temp=round_half_up(s.high),
            workable=s.low >= min_workable_temp and s.precip_probability < max_precip_percent,
        )
        for s in summaries
    ]
