"""GO / CAUTION / HOLD verdicts for a work package on a forecast day."""

from __future__ import annotations

from typing import Iterable, List

from guardian.aggregator import day_trend
from guardian.domain import (
    DailySummary,
    DaySuitability,
    HoldCause,
    Suitability,
    SuitabilityPolicy,
    TempTrend,
    WorkPackage,
)


def _hold_checks(summary: DailySummary, package: WorkPackage, policy: SuitabilityPolicy) -> tuple[list[str], list[HoldCause]]:
    """Collect hard-bound violations and the cause behind each."""
    c = package.constraints
    reasons: list[str] = []
    causes: list[HoldCause] = []

    if c.min_temp is not None:
        if summary.low < c.min_temp:
            reasons.append(f"Low {summary.low:.0f}F below minimum {c.min_temp:g}F")
            causes.append(HoldCause.TEMPERATURE)
        elif summary.avg_temp < c.min_temp:
            reasons.append(f"Average {summary.avg_temp:.0f}F below minimum {c.min_temp:g}F")
            causes.append(HoldCause.TEMPERATURE)

    if c.rising_required and day_trend(summary, policy.trend_deadband_f) == TempTrend.FALLING:
        reasons.append("Temperatures falling; rising temperatures required")
        causes.append(HoldCause.TEMPERATURE)

    if c.max_temp is not None and summary.avg_temp > c.max_temp:
        reasons.append(f"Average {summary.avg_temp:.0f}F above maximum {c.max_temp:g}F")
        causes.append(HoldCause.TEMPERATURE)

    if c.max_wind is not None and summary.max_wind > c.max_wind:
        reasons.append(f"Wind {summary.max_wind:.0f}mph exceeds maximum {c.max_wind:g}mph")
        causes.append(HoldCause.WIND)

    if c.no_precip and summary.precip_probability >= policy.hold_precip_percent:
        reasons.append(f"Precipitation chance {summary.precip_probability}% too high for dry work")
        causes.append(HoldCause.PRECIPITATION)

    return reasons, causes


def _caution_checks(summary: DailySummary, package: WorkPackage, policy: SuitabilityPolicy) -> list[str]:
    """Collect near-bound warnings."""
    c = package.constraints
    reasons: list[str] = []

    if c.min_temp is not None and summary.low < c.min_temp + policy.temp_caution_margin:
        reasons.append(f"Low {summary.low:.0f}F within {policy.temp_caution_margin:g}F of minimum")

    if c.max_temp is not None:
        if summary.high > c.max_temp:
            reasons.append(f"High {summary.high:.0f}F above maximum {c.max_temp:g}F")
        elif summary.high > c.max_temp - policy.temp_caution_margin:
            reasons.append(f"High {summary.high:.0f}F within {policy.temp_caution_margin:g}F of maximum")

    if c.max_wind is not None and summary.max_wind >= c.max_wind - policy.wind_caution_margin:
        reasons.append(f"Wind {summary.max_wind:.0f}mph near limit {c.max_wind:g}mph")

    if c.no_precip and summary.precip_probability >= policy.caution_precip_percent:
        reasons.append(f"Moderate precipitation chance {summary.precip_probability}%")

    return reasons


def classify(summary: DailySummary, package: WorkPackage, policy: SuitabilityPolicy | None = None) -> DaySuitability:
    """
    Classify one day for one package. HOLD beats CAUTION beats GO.

    Pure and stateless: the verdict depends only on this day's summary.
    """
    policy = policy or SuitabilityPolicy()

    hold_reasons, causes = _hold_checks(summary, package, policy)
    if hold_reasons:
        return DaySuitability(
            date=summary.date,
            package_id=package.id,
            status=Suitability.HOLD,
            reasons=hold_reasons,
            hold_causes=causes,
        )

    caution_reasons = _caution_checks(summary, package, policy)
    if caution_reasons:
        return DaySuitability(
            date=summary.date,
            package_id=package.id,
            status=Suitability.CAUTION,
            reasons=caution_reasons,
        )

    return DaySuitability(
        date=summary.date,
        package_id=package.id,
        status=Suitability.GO,
        reasons=["Conditions within limits"],
    )


def classify_days(
    summaries: Iterable[DailySummary],
    package: WorkPackage,
    policy: SuitabilityPolicy | None = None,
    limit: int | None = None,
) -> List[DaySuitability]:
    """Classify a run of days in date order, optionally only the first ``limit``."""
    days = list(summaries)
    if limit is not None:
        days = days[: max(0, limit)]
    return [classify(day, package, policy) for day in days]
