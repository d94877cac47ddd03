"""Ordered provider fallback: try each source once until one delivers."""
from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from guardian.data_sources.base import (
    ConfigMissingError,
    ProviderUnavailableError,
    WeatherSample,
    WeatherSource,
    WeatherSourceError,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/fallback")


class FallbackWeatherSource:
    """
    Chain of weather sources sharing the WeatherSource interface.

    Unconfigured sources are skipped. When exactly one source was actually
    attempted its error is re-raised as-is, so an unconfigured fallback never
    masks the primary's failure. Errors that are not provider failures
    propagate immediately.
    """

    name = "fallback"

    def __init__(self, sources: Sequence[WeatherSource]) -> None:
        if not sources:
            raise ValueError("FallbackWeatherSource needs at least one source")
        self.sources = list(sources)

    def fetch_hourly(self, latitude: float, longitude: float) -> List[WeatherSample]:
        """Hourly samples from the first source that returns a non-empty series."""
        return self._first_success("fetch_hourly", latitude, longitude)

    def fetch_current(self, latitude: float, longitude: float) -> WeatherSample:
        """Current sample from the first source that answers."""
        return self._first_success("fetch_current", latitude, longitude)

    def _first_success(self, method: str, latitude: float, longitude: float) -> Any:
        failures: List[Tuple[str, WeatherSourceError]] = []
        config_error: ConfigMissingError | None = None

        for source in self.sources:
            try:
                result = getattr(source, method)(latitude, longitude)
            except ConfigMissingError as exc:
                logger.info("Skipping unconfigured weather source", extra={"source": source.name})
                config_error = exc
                continue
            except ProviderUnavailableError as exc:
                logger.warning(
                    "Weather source failed; trying next",
                    extra={"source": source.name, "method": method, "error": str(exc)},
                )
                failures.append((source.name, exc))
                continue

            if method == "fetch_hourly" and not result:
                failures.append(
                    (source.name, ProviderUnavailableError(f"{source.name} returned no samples", source=source.name))
                )
                continue

            if failures:
                logger.info("Weather served by fallback source", extra={"source": source.name, "method": method})
            return result

        if len(failures) == 1:
            raise failures[0][1]
        if failures:
            summary = "; ".join(f"{name}: {err}" for name, err in failures)
            raise ProviderUnavailableError(f"All weather sources failed ({summary})", failures=failures) from failures[-1][1]
        raise ProviderUnavailableError("No weather source is configured") from config_error
