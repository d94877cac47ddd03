"""Interfaces and error types for weather data sources."""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from guardian.domain import WeatherSample


class WeatherSourceError(Exception):
    """Base class for every weather source failure."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class ProviderUnavailableError(WeatherSourceError):
    """A provider could not deliver data (network, status, empty payload, or exhausted chain)."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        failures: Sequence[Tuple[str, WeatherSourceError]] = (),
    ) -> None:
        super().__init__(message, source=source)
        self.failures = list(failures)


class DataShapeError(ProviderUnavailableError):
    """A provider payload was missing an expected field."""


class ConfigMissingError(WeatherSourceError):
    """A provider credential is absent; the source is skipped without a call."""


class WeatherSource(Protocol):
    """Interface for anything that can provide normalized weather samples."""

    name: str

    def fetch_hourly(self, latitude: float, longitude: float) -> List[WeatherSample]:
        """Return forecast samples ascending by timestamp."""
        ...

    def fetch_current(self, latitude: float, longitude: float) -> WeatherSample:
        """Return the sample describing current conditions."""
        ...


__all__ = [
    "ConfigMissingError",
    "DataShapeError",
    "ProviderUnavailableError",
    "WeatherSample",
    "WeatherSource",
    "WeatherSourceError",
]
