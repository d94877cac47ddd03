"""Domain vocabulary and strict schemas for weather-sensitive scheduling.

This module defines the stable contract between the provider adapters, the
scheduling engine (aggregator, window finder, classifier, analytics) and any
presentation layer: enums, policies, and the value types that flow through
the system. No interpretation logic lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class _FrozenModel(BaseModel):
    """Immutable strict model for catalog records."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Suitability(str, Enum):
    """Tri-state verdict for performing a work package on a given day."""
    GO = "go"
    CAUTION = "caution"
    HOLD = "hold"


class HoldCause(str, Enum):
    """Dominant weather cause behind a HOLD verdict."""
    TEMPERATURE = "temperature"
    WIND = "wind"
    PRECIPITATION = "precipitation"
    UNKNOWN = "unknown"


class TempTrend(str, Enum):
    """Temperature direction across a day."""
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class ProductionTrend(str, Enum):
    """Direction of recent production against an earlier window."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class EfficiencyRating(str, Enum):
    """Qualitative crew efficiency band."""
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    NEEDS_IMPROVEMENT = "needs_improvement"


# ---------------------------------------------------------------------------
# Weather records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeatherSample:
    """Canonical hourly (or 3-hourly) weather record; temperatures in Fahrenheit."""
    dt: int  # epoch seconds, UTC
    temp: float
    feels_like: float
    humidity: float
    wind_speed: float  # mph
    wind_deg: float
    description: str
    icon: str
    pop: float  # probability of precipitation, 0-1
    timezone: Optional[str] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    source: Optional[str] = None


class DailySummary(_StrictBaseModel):
    """Aggregate of one local calendar day of samples."""
    date: dt.date
    day_name: str
    timezone: str
    high: float
    low: float
    avg_temp: float
    max_wind: float
    avg_humidity: int
    precip_probability: int  # percent
    conditions: str
    icon: str
    samples: List[WeatherSample] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class WorkConstraints(_FrozenModel):
    """Environmental limits a work package must stay within."""
    min_temp: float | None = None
    max_temp: float | None = None
    rising_required: bool = False
    max_wind: float | None = None
    no_precip: bool = False
    max_humidity: float | None = None


class Material(_FrozenModel):
    """Manufacturer material with installation and storage limits."""
    id: str
    name: str
    category: str
    description: str
    constraints: WorkConstraints = Field(default_factory=WorkConstraints)
    storage_temp_min: float | None = None
    storage_temp_max: float | None = None


class WorkPackage(_FrozenModel):
    """Material/system-specific unit of schedulable work."""
    id: str
    name: str
    description: str
    required_hours: float = Field(gt=0)
    lead_time_hours: float = Field(default=0, ge=0)
    constraints: WorkConstraints = Field(default_factory=WorkConstraints)
    material_id: str | None = None


class ComplianceResult(_StrictBaseModel):
    """Point-in-time material compliance check."""
    compliant: bool
    reasons: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

class WindowPolicy(_StrictBaseModel):
    """Thresholds and weights used by the window finder."""
    precip_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    margin_weight: float = 30.0
    temp_margin_scale: float = Field(default=10.0, gt=0)
    wind_margin_scale: float = Field(default=10.0, gt=0)
    horizon_decay_per_hour: float = Field(default=0.25, ge=0)
    max_horizon_penalty: float = Field(default=50.0, ge=0)


class SuitabilityPolicy(_StrictBaseModel):
    """Reference GO/CAUTION/HOLD thresholds."""
    temp_caution_margin: float = 5.0
    wind_caution_margin: float = 5.0
    caution_precip_percent: int = 30
    hold_precip_percent: int = 60
    trend_deadband_f: float = 3.0


class AnalyticsPolicy(_StrictBaseModel):
    """Declared analytics policy.

    Crew rating bands are fractions of the production target: at or above
    ``excellent_ratio`` is excellent, at or above ``good_ratio`` is good, at
    or above ``average_ratio`` is average, anything lower needs improvement.
    """
    trend_threshold_percent: float = 5.0
    trend_window_days: int = Field(default=7, gt=0)
    target_sqft_per_crew_day: float = Field(default=200.0, gt=0)
    excellent_ratio: float = 1.2
    good_ratio: float = 1.0
    average_ratio: float = 0.8
    daily_standby_rate: float = 2500.0


# ---------------------------------------------------------------------------
# Engine outputs
# ---------------------------------------------------------------------------

class WorkWindow(_StrictBaseModel):
    """Contiguous span of forecast time that satisfies a package's constraints."""
    start: dt.datetime
    end: dt.datetime
    start_ts: int
    end_ts: int
    duration_hours: float
    avg_temp: float
    max_wind: float
    max_precip: int  # percent
    confidence: int = Field(ge=0, le=100)
    lead_time_ok: bool = True


class DaySuitability(_StrictBaseModel):
    """Verdict for one package on one day."""
    date: dt.date
    package_id: str
    status: Suitability
    reasons: List[str] = Field(default_factory=list)
    hold_causes: List[HoldCause] = Field(default_factory=list)
    primary_cause: HoldCause | None = None

    @model_validator(mode="after")
    def _derive_primary_cause(self) -> "DaySuitability":
        """primary_cause always follows status and hold_causes; any supplied value is replaced."""
        if self.status != Suitability.HOLD:
            self.primary_cause = None
        else:
            self.primary_cause = self.hold_causes[0] if self.hold_causes else HoldCause.UNKNOWN
        return self


class PackagePlan(_StrictBaseModel):
    """Windows and day verdicts for one package at one site."""
    package: WorkPackage
    generated_at: dt.datetime
    days: List[DaySuitability] = Field(default_factory=list)
    windows: List[WorkWindow] = Field(default_factory=list)
    best_window: WorkWindow | None = None
    hold_plan_required: bool = False


# ---------------------------------------------------------------------------
# Historical logs and analytics
# ---------------------------------------------------------------------------

class WorkLogEntry(_StrictBaseModel):
    """Labor hours booked on one day, split by cost category."""
    date: dt.date
    labor_hours: float
    categories: Dict[str, float] = Field(default_factory=dict)


class WorkLogStats(_StrictBaseModel):
    """Summary of a labor log."""
    total_days: int = 0
    total_labor_hours: float = 0.0
    average_hours_per_day: float = 0.0
    first_worked_date: dt.date | None = None
    last_worked_date: dt.date | None = None
    work_streak: int = 0
    days_since_last_work: int | None = None


class ProductionEntry(_StrictBaseModel):
    """Square footage completed on one day."""
    date: dt.date
    sqft: float = Field(ge=0)


class CrewLogEntry(_StrictBaseModel):
    """Crew daily log used for efficiency analysis."""
    date: dt.date
    crew_count: int = Field(gt=0)
    hours_worked: float = Field(gt=0)
    sqft_completed: float = Field(ge=0)


class DayProduction(_StrictBaseModel):
    """Production on a single notable day."""
    date: dt.date | None = None
    sqft: float = 0.0


class ProductionMetrics(_StrictBaseModel):
    """Totals, rolling averages and trend over production entries."""
    total_sqft: float = 0.0
    daily_average: float = 0.0
    rolling_7_day_average: float = 0.0
    rolling_30_day_average: float = 0.0
    weekly_average: float = 0.0
    monthly_total: float = 0.0
    peak_day: DayProduction = Field(default_factory=DayProduction)
    lowest_day: DayProduction = Field(default_factory=DayProduction)
    production_trend: ProductionTrend = ProductionTrend.STABLE
    trend_percentage: float = 0.0


class CrewEfficiency(_StrictBaseModel):
    """Crew productivity against the production target."""
    sqft_per_crew_member: float = 0.0
    sqft_per_hour: float = 0.0
    average_crew_size: float = 0.0
    comparison_to_target: float = 0.0  # percent of target
    efficiency_rating: EfficiencyRating = EfficiencyRating.NEEDS_IMPROVEMENT
    efficiency_score: int = Field(default=0, ge=0, le=100)


class HoldReasonCount(_StrictBaseModel):
    """Histogram bucket of HOLD days by cause."""
    reason: HoldCause
    count: int


class MonthlyHolds(_StrictBaseModel):
    """HOLD days within one calendar month."""
    month: str  # YYYY-MM
    holds: int
    days: int


class WeatherImpactMetrics(_StrictBaseModel):
    """Weather-caused delay summary over classified days."""
    total_days: int = 0
    total_hold_days: int = 0
    hold_percentage: float = 0.0
    estimated_cost_impact: float = 0.0
    longest_hold_streak: int = 0
    avg_delay_duration: float = 0.0
    holds_by_reason: List[HoldReasonCount] = Field(default_factory=list)
    monthly_hold_trend: List[MonthlyHolds] = Field(default_factory=list)


class MonthlyProduction(_StrictBaseModel):
    """Production and weather holds within one month."""
    month: str  # YYYY-MM
    sqft: float
    days_worked: int
    weather_holds: int
    efficiency: int  # worked days as percent of worked + hold days


class WeeklyProduction(_StrictBaseModel):
    """Production and weather holds within one Sunday-start week."""
    week_start: dt.date
    sqft: float
    days_worked: int
    weather_holds: int
    avg_daily_production: int


class TemperatureTrend(_StrictBaseModel):
    """Rounded daily temperatures and a quick workability flag."""
    date: dt.date
    avg_temp: int
    min_temp: int
    max_temp: int
    workable: bool
