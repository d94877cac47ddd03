"""Per-package plans: day verdicts plus the best upcoming work windows."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Sequence

from guardian import config
from guardian.aggregator import group_by_day
from guardian.domain import DailySummary, PackagePlan, WeatherSample, WorkPackage
from guardian.suitability import classify_days
from guardian.window_finder import best_window, find_windows
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="guardian/planner")


def build_package_plan(
    hourly: Sequence[WeatherSample],
    package: WorkPackage,
    *,
    now: dt.datetime | None = None,
    settings: config.Settings | None = None,
    daily: Sequence[DailySummary] | None = None,
) -> PackagePlan:
    """
    Plan one package against an hourly forecast.

    Day verdicts cover the first ``plan_days`` days; windows are the
    ``max_windows`` soonest qualifying runs. A plan with no window at all
    needs a hold plan.
    """
    settings = settings or config.settings
    now = now or dt.datetime.now(dt.timezone.utc)
    if daily is None:
        daily = group_by_day(hourly, settings.default_timezone)

    days = classify_days(daily, package, settings.suitability_policy(), limit=settings.plan_days)
    windows = find_windows(hourly, package, now=now, policy=settings.window_policy(), limit=settings.max_windows)

    logger.debug(
        "Built package plan",
        extra={"package": package.id, "days": len(days), "windows": len(windows)},
    )
    return PackagePlan(
        package=package,
        generated_at=now,
        days=days,
        windows=windows,
        best_window=best_window(windows),
        hold_plan_required=not windows,
    )


def build_site_plan(
    hourly: Sequence[WeatherSample],
    packages: Iterable[WorkPackage],
    *,
    now: dt.datetime | None = None,
    settings: config.Settings | None = None,
) -> List[PackagePlan]:
    """Plan several packages against the same forecast, sharing one day grouping."""
    settings = settings or config.settings
    now = now or dt.datetime.now(dt.timezone.utc)
    daily = group_by_day(hourly, settings.default_timezone)
    return [
        build_package_plan(hourly, package, now=now, settings=settings, daily=daily)
        for package in packages
    ]
