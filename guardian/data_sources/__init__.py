"""Weather source adapters, the fallback chain, and their factory."""

from .base import (
    ConfigMissingError,
    DataShapeError,
    ProviderUnavailableError,
    WeatherSample,
    WeatherSource,
    WeatherSourceError,
)
from .factory import build_sun_times_client, build_weather_source
from .fallback import FallbackWeatherSource
from .nws_client import NwsWeatherSource
from .openweathermap_client import OpenWeatherMapSource
from .sun_times import SunTimes, SunTimesClient, lookup_sun_times

__all__ = [
    "build_sun_times_client",
    "build_weather_source",
    "ConfigMissingError",
    "DataShapeError",
    "FallbackWeatherSource",
    "lookup_sun_times",
    "NwsWeatherSource",
    "OpenWeatherMapSource",
    "ProviderUnavailableError",
    "SunTimes",
    "SunTimesClient",
    "WeatherSample",
    "WeatherSource",
    "WeatherSourceError",
]
