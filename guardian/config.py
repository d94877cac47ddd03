"""Application configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from guardian.domain import AnalyticsPolicy, SuitabilityPolicy, WindowPolicy
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the Guardian scheduling engine."""
    model_config = SettingsConfigDict(env_prefix="GUARDIAN_", extra="ignore")

    # provider credentials and identity
    openweathermap_api_key: str | None = None
    nws_user_agent: str = "weathercraft-guardian (ops@weathercraft.example)"
    weather_sources: list[str] = Field(default_factory=lambda: ["nws", "openweathermap"])
    sun_times_enabled: bool = True

    # default project site (Peterson SFB, Bldg 140)
    default_latitude: float = 38.82357
    default_longitude: float = -104.69501
    default_timezone: str = "America/Denver"

    # transport
    request_timeout_seconds: float = 10.0
    http_retries: int = 3
    http_backoff_factor: float = 0.2
    http_cache_enabled: bool = True
    http_cache_name: str = ".guardian_cache"
    current_cache_seconds: int = 300
    forecast_cache_seconds: int = 1800
    points_cache_seconds: int = 1800

    # planning
    plan_days: int = 5
    max_windows: int = 2
    precip_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    margin_weight: float = 30.0
    temp_margin_scale: float = 10.0
    wind_margin_scale: float = 10.0
    horizon_decay_per_hour: float = 0.25
    max_horizon_penalty: float = 50.0

    # day classification
    temp_caution_margin: float = 5.0
    wind_caution_margin: float = 5.0
    caution_precip_percent: int = 30
    hold_precip_percent: int = 60
    trend_deadband_f: float = 3.0

    # analytics
    trend_threshold_percent: float = 5.0
    trend_window_days: int = 7
    target_sqft_per_crew_day: float = 200.0
    # crew rating bands as fractions of the target
    excellent_ratio: float = 1.2
    good_ratio: float = 1.0
    average_ratio: float = 0.8
    daily_standby_rate: float = 2500.0

    @field_validator("weather_sources", mode="after")
    @classmethod
    def normalize_sources(cls, v: list[str]) -> list[str]:
        """Lower-case and strip provider names so env values are forgiving."""
        return [str(name).strip().lower() for name in v if str(name).strip()]

    def window_policy(self) -> WindowPolicy:
        """Window finder thresholds and confidence weights."""
        return WindowPolicy(
            precip_threshold=self.precip_threshold,
            margin_weight=self.margin_weight,
            temp_margin_scale=self.temp_margin_scale,
            wind_margin_scale=self.wind_margin_scale,
            horizon_decay_per_hour=self.horizon_decay_per_hour,
            max_horizon_penalty=self.max_horizon_penalty,
        )

    def suitability_policy(self) -> SuitabilityPolicy:
        """GO/CAUTION/HOLD thresholds."""
        return SuitabilityPolicy(
            temp_caution_margin=self.temp_caution_margin,
            wind_caution_margin=self.wind_caution_margin,
            caution_precip_percent=self.caution_precip_percent,
            hold_precip_percent=self.hold_precip_percent,
            trend_deadband_f=self.trend_deadband_f,
        )

    def analytics_policy(self) -> AnalyticsPolicy:
        """Production trend, crew target and standby cost settings."""
        return AnalyticsPolicy(
            trend_threshold_percent=self.trend_threshold_percent,
            trend_window_days=self.trend_window_days,
            target_sqft_per_crew_day=self.target_sqft_per_crew_day,
            excellent_ratio=self.excellent_ratio,
            good_ratio=self.good_ratio,
            average_ratio=self.average_ratio,
            daily_standby_rate=self.daily_standby_rate,
        )


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweathermap_api_key'})}")
