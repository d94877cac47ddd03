"""Fetch current and hourly conditions for a site and group them into days."""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import List, Optional

from guardian.aggregator import group_by_day
from guardian.data_sources.base import ProviderUnavailableError, WeatherSource
from guardian.data_sources.sun_times import SunTimesClient, lookup_sun_times, with_sun_times
from guardian.domain import DailySummary, WeatherSample
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="guardian/forecast_service")


@dataclass
class SiteConditions:
    """Current reading, hourly forecast and daily summaries for one site."""
    current: WeatherSample
    hourly: List[WeatherSample]
    daily: List[DailySummary] = field(default_factory=list)


def _await(future: Future, what: str, timeout: Optional[float]):
    """Wait for a fetch; a timeout becomes ProviderUnavailableError."""
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        raise ProviderUnavailableError(f"Timed out fetching {what} after {timeout}s") from exc


def get_site_conditions(
    latitude: float,
    longitude: float,
    *,
    source: WeatherSource,
    sun_times: SunTimesClient | None = None,
    timeout: float | None = None,
    timezone: str | None = None,
) -> SiteConditions:
    """
    Fetch current and hourly conditions concurrently for one site.

    Both fetches run on a small thread pool and are awaited for at most
    ``timeout`` seconds each. ``None`` waits for the source to finish; a
    caller with a fallback chain should pass at least the chain's worst
    case (see ``fetch_budget_seconds``) so later sources get their turn.
    Sun times are looked up alongside them and attached to the current sample
    when available; that lookup never fails the request. ``timezone`` is only
    used when the samples carry none.
    """
    logger.info(
        "Fetching site conditions",
        extra={"latitude": latitude, "longitude": longitude, "source": source.name},
    )

    pool = ThreadPoolExecutor(max_workers=3, thread_name_prefix="guardian-fetch")
    try:
        current_future = pool.submit(source.fetch_current, latitude, longitude)
        hourly_future = pool.submit(source.fetch_hourly, latitude, longitude)
        sun_future = pool.submit(lookup_sun_times, sun_times, latitude, longitude)

        current = _await(current_future, "current conditions", timeout)
        hourly = _await(hourly_future, "hourly forecast", timeout)
        try:
            sun = sun_future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.debug("Sun times lookup timed out; continuing without them")
            sun = None
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    current = with_sun_times(current, sun)
    daily = group_by_day(hourly, timezone)
    logger.info(
        "Computed site conditions",
        extra={"hourly_count": len(hourly), "days": len(daily)},
    )
    return SiteConditions(current=current, hourly=hourly, daily=daily)
