"""Best-effort sunrise/sunset enrichment from sunrise-sunset.org."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import Any, Optional

from guardian.data_sources.base import DataShapeError, ProviderUnavailableError, WeatherSample, WeatherSourceError
from guardian.data_sources.http import get_json
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/sun_times")

SUNRISE_SUNSET_URL = "https://api.sunrise-sunset.org/json"


@dataclass(frozen=True)
class SunTimes:
    """Sunrise and sunset as epoch seconds."""
    sunrise: int
    sunset: int


class SunTimesClient:
    """Thin client for the sunrise-sunset.org JSON API."""

    name = "sunrise_sunset"

    def __init__(self, session: Any, *, timeout: float = 10.0, url: str = SUNRISE_SUNSET_URL) -> None:
        self.session = session
        self.timeout = timeout
        self.url = url

    def fetch(self, latitude: float, longitude: float, *, on: dt.date | None = None) -> SunTimes:
        """Look up sun times for a date (today by default); raises on any failure."""
        params = {"lat": latitude, "lng": longitude, "formatted": 0, "date": on.isoformat() if on else "today"}
        data = get_json(self.session, self.url, source=self.name, timeout=self.timeout, params=params)
        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            raise ProviderUnavailableError(f"sunrise-sunset status {status!r}", source=self.name)
        try:
            results = data["results"]
            return SunTimes(
                sunrise=int(dt.datetime.fromisoformat(results["sunrise"]).timestamp()),
                sunset=int(dt.datetime.fromisoformat(results["sunset"]).timestamp()),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DataShapeError(f"sunrise-sunset payload malformed: {exc}", source=self.name) from exc


def lookup_sun_times(client: SunTimesClient | None, latitude: float, longitude: float) -> Optional[SunTimes]:
    """Return sun times, or None when the lookup is unavailable for any reason."""
    if client is None:
        return None
    try:
        return client.fetch(latitude, longitude)
    except WeatherSourceError as exc:
        logger.debug("Sun times unavailable; continuing without them", extra={"error": str(exc)})
        return None
    except Exception as exc:
        # cache backend and other non-provider faults must not fail the forecast either
        logger.warning(
            "Sun times lookup raised unexpectedly; continuing without them",
            extra={"error": f"{type(exc).__name__}: {exc}"},
        )
        return None


def with_sun_times(sample: WeatherSample, sun: Optional[SunTimes]) -> WeatherSample:
    """Attach sun times to a sample unless the provider already supplied them."""
    if sun is None or (sample.sunrise is not None and sample.sunset is not None):
        return sample
    return replace(sample, sunrise=sun.sunrise, sunset=sun.sunset)
