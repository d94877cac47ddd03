"""Contiguous work-window detection over an hourly forecast.

A window is a maximal run of consecutive samples that each satisfy a work
package's constraints and that together last at least the package's
required hours. Confidence blends how comfortably the window clears its
limits with how far out it sits in the forecast.
"""

from __future__ import annotations

import datetime as dt
from statistics import median
from typing import List, Sequence

from guardian.aggregator import round_half_up
from guardian.domain import WeatherSample, WindowPolicy, WorkConstraints, WorkPackage, WorkWindow

DEFAULT_INTERVAL_SECONDS = 3600
GAP_TOLERANCE_SECONDS = 90
HUMIDITY_MARGIN_SCALE = 10.0


def satisfies(
    sample: WeatherSample,
    prev: WeatherSample | None,
    constraints: WorkConstraints,
    *,
    precip_threshold: float = 0.4,
) -> bool:
    """Return True when a single sample is workable under ``constraints``."""
    c = constraints
    if c.min_temp is not None and sample.temp < c.min_temp:
        return False
    if c.max_temp is not None and sample.temp > c.max_temp:
        return False
    if c.rising_required and prev is not None and sample.temp < prev.temp:
        return False
    if c.max_wind is not None and sample.wind_speed > c.max_wind:
        return False
    if c.no_precip and sample.pop >= precip_threshold:
        return False
    if c.max_humidity is not None and sample.humidity > c.max_humidity:
        return False
    return True


def infer_interval_seconds(samples: Sequence[WeatherSample]) -> int:
    """Median spacing between consecutive samples; one hour when it cannot be measured."""
    gaps = [b.dt - a.dt for a, b in zip(samples, samples[1:]) if b.dt > a.dt]
    if not gaps:
        return DEFAULT_INTERVAL_SECONDS
    return int(median(gaps))


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _margins(run: Sequence[WeatherSample], constraints: WorkConstraints, policy: WindowPolicy) -> List[float]:
    """Per-constraint headroom of the worst sample in the run, each in [0, 1]."""
    c = constraints
    margins: list[float] = []
    if c.min_temp is not None:
        coldest = min(s.temp for s in run)
        margins.append(_clamp((coldest - c.min_temp) / policy.temp_margin_scale))
    if c.max_temp is not None:
        hottest = max(s.temp for s in run)
        margins.append(_clamp((c.max_temp - hottest) / policy.temp_margin_scale))
    if c.max_wind is not None:
        windiest = max(s.wind_speed for s in run)
        margins.append(_clamp((c.max_wind - windiest) / policy.wind_margin_scale))
    if c.no_precip:
        wettest = max(s.pop for s in run)
        if policy.precip_threshold > 0:
            margins.append(_clamp((policy.precip_threshold - wettest) / policy.precip_threshold))
        else:
            margins.append(0.0)
    if c.max_humidity is not None:
        muggiest = max(s.humidity for s in run)
        margins.append(_clamp((c.max_humidity - muggiest) / HUMIDITY_MARGIN_SCALE))
    return margins


def _confidence(
    run: Sequence[WeatherSample],
    constraints: WorkConstraints,
    policy: WindowPolicy,
    now_ts: float,
) -> int:
    margins = _margins(run, constraints, policy)
    mean_margin = sum(margins) / len(margins) if margins else 1.0
    margin_penalty = policy.margin_weight * (1.0 - mean_margin)

    hours_ahead = max(0.0, (run[0].dt - now_ts) / 3600)
    horizon_penalty = min(policy.max_horizon_penalty, hours_ahead * policy.horizon_decay_per_hour)

    return int(_clamp(round_half_up(100 - margin_penalty - horizon_penalty), 0, 100))


def _to_window(
    run: Sequence[WeatherSample],
    package: WorkPackage,
    policy: WindowPolicy,
    interval: int,
    now_ts: float,
) -> WorkWindow:
    start_ts = run[0].dt
    end_ts = run[-1].dt + interval
    temps = [s.temp for s in run]
    return WorkWindow(
        start=dt.datetime.fromtimestamp(start_ts, tz=dt.timezone.utc),
        end=dt.datetime.fromtimestamp(end_ts, tz=dt.timezone.utc),
        start_ts=start_ts,
        end_ts=end_ts,
        duration_hours=(end_ts - start_ts) / 3600,
        avg_temp=round(sum(temps) / len(temps), 1),
        max_wind=max(s.wind_speed for s in run),
        max_precip=round_half_up(max(s.pop for s in run) * 100),
        confidence=_confidence(run, package.constraints, policy, now_ts),
        lead_time_ok=start_ts >= now_ts + package.lead_time_hours * 3600,
    )


def find_windows(
    samples: Sequence[WeatherSample],
    package: WorkPackage,
    *,
    now: dt.datetime | None = None,
    policy: WindowPolicy | None = None,
    limit: int | None = None,
) -> List[WorkWindow]:
    """
    Return every qualifying window for ``package``, soonest first.

    - The rising-temperature check compares each sample against the one
      immediately before it in the whole sequence, not just within the run.
    - A gap wider than the sample interval (plus a small drift allowance)
      closes the current run.
    - An empty or entirely unworkable forecast yields an empty list.
    """
    if not samples:
        return []

    policy = policy or WindowPolicy()
    now_ts = (now or dt.datetime.now(dt.timezone.utc)).timestamp()
    ordered = sorted(samples, key=lambda s: s.dt)
    interval = infer_interval_seconds(ordered)
    required_seconds = package.required_hours * 3600

    runs: list[list[WeatherSample]] = []
    current: list[WeatherSample] = []
    prev: WeatherSample | None = None
    for sample in ordered:
        ok = satisfies(sample, prev, package.constraints, precip_threshold=policy.precip_threshold)
        contiguous = prev is not None and sample.dt - prev.dt <= interval + GAP_TOLERANCE_SECONDS
        if ok and current and contiguous:
            current.append(sample)
        else:
            if current:
                runs.append(current)
            current = [sample] if ok else []
        prev = sample
    if current:
        runs.append(current)

    windows = [
        _to_window(run, package, policy, interval, now_ts)
        for run in runs
        if (run[-1].dt - run[0].dt) + interval >= required_seconds
    ]
    if limit is not None:
        windows = windows[: max(0, limit)]
    return windows


def best_window(windows: Sequence[WorkWindow]) -> WorkWindow | None:
    """Highest-confidence window; the earliest one wins ties."""
    if not windows:
        return None
    return min(windows, key=lambda w: (-w.confidence, w.start_ts))
