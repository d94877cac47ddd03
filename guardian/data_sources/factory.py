"""Factory helpers for choosing weather sources at startup."""

from __future__ import annotations

from typing import Any

from guardian import config
from guardian.data_sources.base import WeatherSource
from guardian.data_sources.fallback import FallbackWeatherSource
from guardian.data_sources.http import build_session
from guardian.data_sources.nws_client import NwsWeatherSource
from guardian.data_sources.openweathermap_client import OpenWeatherMapSource
from guardian.data_sources.sun_times import SunTimesClient
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAMES = ("nws", "openweathermap")


def build_named_source(name: str, settings: config.Settings, session: Any) -> WeatherSource:
    """Instantiate a single weather source by its configured name."""
    source = name.lower()

    if source == "nws":
        return NwsWeatherSource(
            session,
            user_agent=settings.nws_user_agent,
            timeout=settings.request_timeout_seconds,
        )

    if source == "openweathermap":
        if not settings.openweathermap_api_key:
            logger.info("OpenWeatherMap key not set; source will be skipped at fetch time")
        return OpenWeatherMapSource(
            session,
            api_key=settings.openweathermap_api_key,
            timeout=settings.request_timeout_seconds,
        )

    raise ValueError(f"Unknown weather source '{name}'")


def build_weather_source(settings: config.Settings | None = None, *, session: Any = None) -> FallbackWeatherSource:
    """Build the ordered fallback chain described by ``settings.weather_sources``."""
    settings = settings or config.settings
    session = session if session is not None else build_session(settings)
    names = settings.weather_sources or list(DEFAULT_SOURCE_NAMES)
    sources = [build_named_source(name, settings, session) for name in names]
    logger.info("Using weather sources", extra={"sources": [s.name for s in sources]})
    return FallbackWeatherSource(sources)


def build_sun_times_client(settings: config.Settings | None = None, *, session: Any = None) -> SunTimesClient | None:
    """Return the sun-times enrichment client, or None when enrichment is disabled."""
    settings = settings or config.settings
    if not settings.sun_times_enabled:
        return None
    session = session if session is not None else build_session(settings)
    return SunTimesClient(session, timeout=settings.request_timeout_seconds)
