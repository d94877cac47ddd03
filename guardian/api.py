"""HTTP API for weather lookups, package plans and project analytics."""

import datetime as dt
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from guardian import catalog
from guardian.analytics import (
    calculate_crew_efficiency,
    calculate_production_metrics,
    calculate_weather_impact,
)
from guardian.config import settings
from guardian.data_sources import (
    ConfigMissingError,
    ProviderUnavailableError,
    build_sun_times_client,
    build_weather_source,
)
from guardian.data_sources.http import build_session, fetch_budget_seconds
from guardian.domain import (
    CrewEfficiency,
    CrewLogEntry,
    DailySummary,
    DaySuitability,
    PackagePlan,
    ProductionEntry,
    ProductionMetrics,
    WeatherImpactMetrics,
    WeatherSample,
    WorkPackage,
)
from guardian.forecast_service import get_site_conditions
from guardian.planner import build_package_plan
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="guardian/api")

router = APIRouter()

_SESSION = build_session(settings)
WEATHER_SOURCE = build_weather_source(settings, session=_SESSION)
SUN_TIMES = build_sun_times_client(settings, session=_SESSION)


class WeatherResponse(BaseModel):
    """Current sample or hourly forecast for a coordinate."""
    type: Literal["current", "forecast"]
    current: Optional[WeatherSample] = None
    hourly: Optional[List[WeatherSample]] = None


class ProductionRequest(BaseModel):
    entries: List[ProductionEntry]
    as_of: Optional[dt.date] = None


class CrewRequest(BaseModel):
    logs: List[CrewLogEntry]


class WeatherImpactRequest(BaseModel):
    days: List[DaySuitability]


def _require_coordinates(lat: Optional[float], lon: Optional[float]) -> tuple[float, float]:
    """Reject requests without both coordinates."""
    if lat is None or lon is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Latitude and longitude required")
    return lat, lon


def _provider_http_error(exc: ProviderUnavailableError) -> HTTPException:
    """Translate a provider failure into the HTTP error clients see."""
    if isinstance(exc.__cause__, ConfigMissingError) and not exc.failures:
        logger.error("No weather source is configured", extra={"error": str(exc)})
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Weather service not configured")
    logger.error("Weather fetch failed", extra={"error": str(exc), "source": exc.source})
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch weather data")


@router.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok", "sources": [s.name for s in WEATHER_SOURCE.sources]}


@router.get("/weather", response_model=WeatherResponse)
def get_weather(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    type: Literal["current", "forecast"] = Query(default="current"),
):
    """Return current conditions or the hourly forecast for a coordinate."""
    latitude, longitude = _require_coordinates(lat, lon)
    logger.info("Weather request", extra={"latitude": latitude, "longitude": longitude, "type": type})
    try:
        if type == "current":
            return WeatherResponse(type=type, current=WEATHER_SOURCE.fetch_current(latitude, longitude))
        return WeatherResponse(type=type, hourly=WEATHER_SOURCE.fetch_hourly(latitude, longitude))
    except ProviderUnavailableError as exc:
        raise _provider_http_error(exc) from exc


@router.get("/weather/daily", response_model=List[DailySummary])
def get_daily(lat: Optional[float] = None, lon: Optional[float] = None):
    """Return the forecast grouped into local calendar days."""
    latitude, longitude = _require_coordinates(lat, lon)
    try:
        conditions = get_site_conditions(
            latitude,
            longitude,
            source=WEATHER_SOURCE,
            sun_times=SUN_TIMES,
            timeout=fetch_budget_seconds(settings),
            timezone=settings.default_timezone,
        )
    except ProviderUnavailableError as exc:
        raise _provider_http_error(exc) from exc
    return conditions.daily


@router.get("/packages", response_model=List[WorkPackage])
def list_packages():
    """Return the work package catalog."""
    return list(catalog.get_work_packages())


@router.get("/packages/{package_id}/plan", response_model=PackagePlan)
def get_package_plan(package_id: str, lat: Optional[float] = None, lon: Optional[float] = None):
    """Plan one package at a site; the configured project site is used when no coordinates are given."""
    try:
        package = catalog.get_work_package(package_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown work package: {package_id}")

    latitude = settings.default_latitude if lat is None else lat
    longitude = settings.default_longitude if lon is None else lon
    try:
        conditions = get_site_conditions(
            latitude,
            longitude,
            source=WEATHER_SOURCE,
            sun_times=SUN_TIMES,
            timeout=fetch_budget_seconds(settings),
            timezone=settings.default_timezone,
        )
    except ProviderUnavailableError as exc:
        raise _provider_http_error(exc) from exc

    return build_package_plan(conditions.hourly, package, settings=settings, daily=conditions.daily)


@router.post("/analytics/production", response_model=ProductionMetrics)
def production_metrics(req: ProductionRequest):
    """Production totals, rolling averages and trend."""
    return calculate_production_metrics(req.entries, as_of=req.as_of, policy=settings.analytics_policy())


@router.post("/analytics/crew", response_model=CrewEfficiency)
def crew_efficiency(req: CrewRequest):
    """Crew productivity against target."""
    return calculate_crew_efficiency(req.logs, policy=settings.analytics_policy())


@router.post("/analytics/weather-impact", response_model=WeatherImpactMetrics)
def weather_impact(req: WeatherImpactRequest):
    """Weather hold counts, streaks and standby cost."""
    return calculate_weather_impact(req.days, policy=settings.analytics_policy())
