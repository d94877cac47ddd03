"""Primary weather source: the National Weather Service hourly forecast (api.weather.gov)."""
from __future__ import annotations

import datetime as dt
import math
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from guardian.data_sources.base import DataShapeError, ProviderUnavailableError, WeatherSample
from guardian.data_sources.http import get_json
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/nws")

NWS_BASE_URL = "https://api.weather.gov"

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
COMPASS_DEGREES = {point: i * 22.5 for i, point in enumerate(COMPASS_POINTS)}

_INTEGER_RE = re.compile(r"\d+")


@dataclass(frozen=True)
class ForecastPoint:
    """Grid resolution of a coordinate: where to fetch the hourly forecast."""
    hourly_url: str
    timezone: Optional[str]


def parse_wind_speed(value: Any) -> float:
    """
    Convert NWS wind text to mph.

    Ranges such as "5 to 15 mph" encode gusts, so the largest integer wins.
    Text without any integer (or None) is calm.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    numbers = [int(n) for n in _INTEGER_RE.findall(str(value))]
    return float(max(numbers)) if numbers else 0.0


def parse_wind_direction(value: Any) -> float:
    """Convert a 16-point compass label (or numeric string) into degrees; unknown -> 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().upper()
    if text in COMPASS_DEGREES:
        return COMPASS_DEGREES[text]
    try:
        degrees = float(text)
    except ValueError:
        return 0.0
    return degrees if math.isfinite(degrees) else 0.0


def to_fahrenheit(value: float, unit: str | None) -> float:
    """Normalize a temperature to Fahrenheit given the provider's unit label."""
    label = (unit or "F").strip().upper()
    if label in {"C", "DEGC", "WMOUNIT:DEGC", "°C"}:
        return value * 9.0 / 5.0 + 32.0
    return float(value)


def _quantity_value(quantity: Any) -> Optional[float]:
    """Read ``{"unitCode": ..., "value": x}`` quantities (or bare numbers)."""
    if quantity is None:
        return None
    if isinstance(quantity, Mapping):
        value = quantity.get("value")
        return None if value is None else float(value)
    return float(quantity)


def _iso_to_epoch(value: str) -> int:
    """Parse an ISO-8601 timestamp with offset into epoch seconds."""
    parsed = dt.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return int(parsed.timestamp())


def parse_period(period: Mapping[str, Any], timezone: Optional[str]) -> WeatherSample:
    """Translate a single hourly period into a WeatherSample."""
    temp = to_fahrenheit(float(period["temperature"]), period.get("temperatureUnit"))
    pop_percent = _quantity_value(period.get("probabilityOfPrecipitation"))
    humidity = _quantity_value(period.get("relativeHumidity"))
    return WeatherSample(
        dt=_iso_to_epoch(period["startTime"]),
        temp=temp,
        feels_like=temp,
        humidity=humidity if humidity is not None else 0.0,
        wind_speed=parse_wind_speed(period.get("windSpeed")),
        wind_deg=parse_wind_direction(period.get("windDirection")),
        description=period.get("shortForecast") or "",
        icon=period.get("icon") or "",
        pop=(pop_percent / 100.0) if pop_percent is not None else 0.0,
        timezone=timezone,
        source=NwsWeatherSource.name,
    )


class NwsWeatherSource:
    """Two-step NWS lookup: resolve the forecast grid, then read hourly periods."""

    name = "nws"

    def __init__(
        self,
        session: Any,
        *,
        user_agent: str,
        timeout: float = 10.0,
        base_url: str = NWS_BASE_URL,
    ) -> None:
        self.session = session
        self.user_agent = user_agent
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @property
    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/geo+json"}

    def _get(self, url: str) -> Any:
        return get_json(self.session, url, source=self.name, timeout=self.timeout, headers=self._headers)

    def resolve_point(self, latitude: float, longitude: float) -> ForecastPoint:
        """Resolve a coordinate to its hourly forecast endpoint."""
        data = self._get(f"{self.base_url}/points/{latitude:.4f},{longitude:.4f}")
        try:
            props = data["properties"]
            return ForecastPoint(hourly_url=props["forecastHourly"], timezone=props.get("timeZone"))
        except (KeyError, TypeError) as exc:
            raise DataShapeError(f"NWS point payload missing field: {exc}", source=self.name) from exc

    def fetch_hourly(self, latitude: float, longitude: float) -> List[WeatherSample]:
        """Fetch the hourly forecast for a coordinate, ascending by time."""
        point = self.resolve_point(latitude, longitude)
        data = self._get(point.hourly_url)
        try:
            periods = data["properties"]["periods"]
            samples = [parse_period(p, point.timezone) for p in periods]
        except (KeyError, TypeError, ValueError) as exc:
            raise DataShapeError(f"NWS hourly payload malformed: {exc}", source=self.name) from exc

        if not samples:
            raise ProviderUnavailableError("NWS returned no forecast periods", source=self.name)

        samples.sort(key=lambda s: s.dt)
        logger.info(
            "Fetched NWS hourly forecast",
            extra={"latitude": latitude, "longitude": longitude, "periods": len(samples), "timezone": point.timezone},
        )
        return samples

    def fetch_current(self, latitude: float, longitude: float, *, now: float | None = None) -> WeatherSample:
        """Return the hourly period covering ``now`` (the first period if none started yet)."""
        samples = self.fetch_hourly(latitude, longitude)
        now_ts = now if now is not None else dt.datetime.now(dt.timezone.utc).timestamp()
        started = [s for s in samples if s.dt <= now_ts]
        return started[-1] if started else samples[0]
