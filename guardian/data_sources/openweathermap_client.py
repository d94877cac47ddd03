"""Fallback weather source: OpenWeatherMap current conditions and 3-hourly forecast."""
from __future__ import annotations

from typing import Any, List, Mapping

from guardian.data_sources.base import (
    ConfigMissingError,
    DataShapeError,
    ProviderUnavailableError,
    WeatherSample,
)
from guardian.data_sources.http import get_json
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/openweathermap")

OPENWEATHERMAP_BASE_URL = "https://api.openweathermap.org/data/2.5"


def parse_item(item: Mapping[str, Any], *, include_sun: bool = False) -> WeatherSample:
    """Translate an OpenWeatherMap weather/forecast item (imperial units) into a WeatherSample."""
    main = item["main"]
    wind = item.get("wind") or {}
    condition = item["weather"][0]
    sys_block = item.get("sys") or {}
    return WeatherSample(
        dt=int(item["dt"]),
        temp=float(main["temp"]),
        feels_like=float(main.get("feels_like", main["temp"])),
        humidity=float(main.get("humidity", 0)),
        wind_speed=float(wind.get("speed", 0)),
        wind_deg=float(wind.get("deg", 0)),
        description=condition.get("description", ""),
        icon=condition.get("icon", ""),
        pop=float(item.get("pop") or 0),
        temp_min=main.get("temp_min"),
        temp_max=main.get("temp_max"),
        sunrise=sys_block.get("sunrise") if include_sun else None,
        sunset=sys_block.get("sunset") if include_sun else None,
        source=OpenWeatherMapSource.name,
    )


class OpenWeatherMapSource:
    """Keyed OpenWeatherMap adapter; unconfigured keys short-circuit before any request."""

    name = "openweathermap"

    def __init__(
        self,
        session: Any,
        *,
        api_key: str | None,
        timeout: float = 10.0,
        base_url: str = OPENWEATHERMAP_BASE_URL,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    def _get(self, endpoint: str, latitude: float, longitude: float) -> Any:
        if not self.api_key:
            raise ConfigMissingError("OpenWeatherMap API key not configured", source=self.name)
        params = {"lat": latitude, "lon": longitude, "units": "imperial", "appid": self.api_key}
        return get_json(
            self.session,
            f"{self.base_url}/{endpoint}",
            source=self.name,
            timeout=self.timeout,
            params=params,
        )

    def fetch_current(self, latitude: float, longitude: float) -> WeatherSample:
        """Fetch current conditions, including provider sunrise/sunset."""
        data = self._get("weather", latitude, longitude)
        try:
            return parse_item(data, include_sun=True)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise DataShapeError(f"OpenWeatherMap current payload malformed: {exc}", source=self.name) from exc

    def fetch_hourly(self, latitude: float, longitude: float) -> List[WeatherSample]:
        """Fetch the 3-hourly forecast list, ascending by time."""
        data = self._get("forecast", latitude, longitude)
        try:
            samples = [parse_item(item) for item in data["list"]]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise DataShapeError(f"OpenWeatherMap forecast payload malformed: {exc}", source=self.name) from exc

        if not samples:
            raise ProviderUnavailableError("OpenWeatherMap returned an empty forecast", source=self.name)

        samples.sort(key=lambda s: s.dt)
        logger.info(
            "Fetched OpenWeatherMap forecast",
            extra={"latitude": latitude, "longitude": longitude, "entries": len(samples)},
        )
        return samples
