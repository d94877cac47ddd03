"""HTTP transport shared by the provider adapters.

Freshness and retries live here, not in the engine: the session is a
``requests_cache.CachedSession`` whose per-URL expiry mirrors the configured
cache intervals, wrapped by ``retry_requests`` for transient 5xx responses.
"""
from __future__ import annotations

from typing import Any, Mapping

import requests
import requests_cache
from retry_requests import retry

from guardian.config import Settings
from guardian.data_sources.base import ProviderUnavailableError
from utils.logging_utils import get_tagged_logger, mask_url_secrets

logger = get_tagged_logger(__name__, tag="data_sources/http")

# NWS needs the point lookup and then the gridpoint forecast
REQUESTS_PER_FETCH = 2


def cache_expiry_rules(settings: Settings) -> dict[str, int]:
    """Map provider URL patterns to their freshness interval in seconds."""
    return {
        "api.weather.gov/points/*": settings.points_cache_seconds,
        "api.weather.gov/gridpoints/*": settings.forecast_cache_seconds,
        "api.openweathermap.org/data/2.5/weather": settings.current_cache_seconds,
        "api.openweathermap.org/data/2.5/forecast": settings.forecast_cache_seconds,
        "api.sunrise-sunset.org/*": settings.forecast_cache_seconds,
    }


def build_session(settings: Settings) -> requests.Session:
    """Create the transport session described by ``settings``."""
    if settings.http_cache_enabled:
        logger.info(
            "Using cached HTTP session",
            extra={"cache_name": settings.http_cache_name},
        )
        base = requests_cache.CachedSession(
            settings.http_cache_name,
            expire_after=settings.forecast_cache_seconds,
            urls_expire_after=cache_expiry_rules(settings),
        )
    else:
        logger.info("HTTP cache disabled; every call reaches the provider")
        base = requests.Session()
    return retry(base, retries=settings.http_retries, backoff_factor=settings.http_backoff_factor)


def fetch_budget_seconds(settings: Settings) -> float:
    """
    Worst-case time for one fetch to run through every configured source.

    Each request may be retried ``http_retries`` times, every attempt may
    spend the timeout on both connect and read, and backoff sleeps double.
    Waiting less than this abandons the chain before a later source is tried.
    """
    attempts = settings.http_retries + 1
    backoff = sum(settings.http_backoff_factor * 2**n for n in range(settings.http_retries))
    per_request = attempts * 2 * settings.request_timeout_seconds + backoff
    return per_request * REQUESTS_PER_FETCH * max(1, len(settings.weather_sources))


def get_json(
    session: Any,
    url: str,
    *,
    source: str,
    timeout: float,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """GET ``url`` and decode JSON, translating any transport failure into ProviderUnavailableError."""
    logger.debug("Requesting provider data", extra={"source": source, "url": mask_url_secrets(url)})
    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as exc:
        # exception text can echo the full URL, credentials included
        status = getattr(exc.response, "status_code", None)
        detail = f"HTTP {status}" if status else type(exc).__name__
        raise ProviderUnavailableError(f"{source} request failed: {detail}", source=source) from exc
    except ValueError as exc:
        raise ProviderUnavailableError(f"{source} returned invalid JSON", source=source) from exc
