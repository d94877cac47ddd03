"""Timezone-aware grouping of weather samples into daily summaries."""

from __future__ import annotations

import datetime as dt
import math
from collections import Counter
from typing import Iterable, List, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from guardian.domain import DailySummary, TempTrend, WeatherSample

DEFAULT_TIMEZONE = "UTC"
MIDDAY_HOURS = range(10, 15)  # local hours 10..14 inclusive


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up."""
    return int(math.floor(value + 0.5))


def resolve_timezone(samples: Iterable[WeatherSample], timezone: str | None = None) -> str:
    """Pick the grouping timezone: first sample carrying one, then ``timezone``, then UTC."""
    for sample in samples:
        if sample.timezone:
            return sample.timezone
    return timezone or DEFAULT_TIMEZONE


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def local_datetime(sample: WeatherSample, tz: ZoneInfo) -> dt.datetime:
    """Express a sample's epoch timestamp in the given zone."""
    return dt.datetime.fromtimestamp(sample.dt, tz=dt.timezone.utc).astimezone(tz)


def _dominant_condition(samples: Sequence[WeatherSample]) -> str:
    """Most frequent description; ties keep the one seen first."""
    counts = Counter(s.description for s in samples)
    first_seen = list(dict.fromkeys(s.description for s in samples))
    return max(first_seen, key=lambda d: counts[d])


def _representative_icon(samples: Sequence[WeatherSample], tz: ZoneInfo) -> str:
    """Icon of the first sample in the local midday band, else of the first sample."""
    for sample in samples:
        if local_datetime(sample, tz).hour in MIDDAY_HOURS:
            return sample.icon
    return samples[0].icon


def _summarize(day: dt.date, samples: List[WeatherSample], tz_name: str, tz: ZoneInfo) -> DailySummary:
    temps = [s.temp for s in samples]
    return DailySummary(
        date=day,
        day_name=day.strftime("%a"),
        timezone=tz_name,
        high=max(temps),
        low=min(temps),
        avg_temp=sum(temps) / len(temps),
        max_wind=max(s.wind_speed for s in samples),
        avg_humidity=round_half_up(sum(s.humidity for s in samples) / len(samples)),
        precip_probability=round_half_up(max(s.pop for s in samples) * 100),
        conditions=_dominant_condition(samples),
        icon=_representative_icon(samples, tz),
        samples=samples,
    )


def group_by_day(samples: Sequence[WeatherSample], timezone: str | None = None) -> List[DailySummary]:
    """
    Partition samples into local calendar days, ascending by date.

    Samples are bucketed by the calendar date in the resolved timezone (not the
    UTC date), so late-evening readings west of Greenwich stay on their own day.
    Every sample lands in exactly one summary; input order does not matter.
    """
    if not samples:
        return []

    tz_name = resolve_timezone(samples, timezone)
    tz = _zone(tz_name)

    buckets: dict[dt.date, List[WeatherSample]] = {}
    for sample in sorted(samples, key=lambda s: s.dt):
        buckets.setdefault(local_datetime(sample, tz).date(), []).append(sample)

    return [_summarize(day, buckets[day], tz_name, tz) for day in sorted(buckets)]


def flatten(summaries: Iterable[DailySummary]) -> List[WeatherSample]:
    """Return the samples of all summaries in chronological order."""
    return [sample for summary in summaries for sample in summary.samples]


def day_trend(summary: DailySummary, deadband: float = 3.0) -> TempTrend:
    """Compare the first half of a day's temperatures against the second half."""
    temps = [s.temp for s in summary.samples]
    if len(temps) < 3:
        return TempTrend.STABLE

    mid = len(temps) // 2
    first_avg = sum(temps[:mid]) / mid
    second_avg = sum(temps[mid:]) / (len(temps) - mid)
    if second_avg - first_avg > deadband:
        return TempTrend.RISING
    if first_avg - second_avg > deadband:
        return TempTrend.FALLING
    return TempTrend.STABLE
