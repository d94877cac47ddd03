import os
import unittest

from guardian.config import Settings


class TestConfig(unittest.TestCase):
    def _without_env(self, *names):
        saved = {name: os.environ.pop(name) for name in names if name in os.environ}
        self.addCleanup(os.environ.update, saved)

    def test_settings_defaults(self):
        self._without_env("GUARDIAN_WEATHER_SOURCES", "GUARDIAN_PLAN_DAYS", "GUARDIAN_OPENWEATHERMAP_API_KEY")
        s = Settings()
        self.assertEqual(s.weather_sources, ["nws", "openweathermap"])
        self.assertIsNone(s.openweathermap_api_key)
        self.assertEqual(s.plan_days, 5)
        self.assertEqual(s.current_cache_seconds, 300)
        self.assertEqual(s.forecast_cache_seconds, 1800)

    def test_settings_env_override(self):
        self._without_env("GUARDIAN_PLAN_DAYS")
        os.environ["GUARDIAN_PLAN_DAYS"] = "3"
        self.addCleanup(os.environ.pop, "GUARDIAN_PLAN_DAYS", None)
        self.assertEqual(Settings().plan_days, 3)

    def test_weather_sources_are_normalized(self):
        s = Settings(weather_sources=[" NWS ", "OpenWeatherMap", ""])
        self.assertEqual(s.weather_sources, ["nws", "openweathermap"])

    def test_policies_carry_settings(self):
        s = Settings(precip_threshold=0.3, hold_precip_percent=70, target_sqft_per_crew_day=250)
        self.assertEqual(s.window_policy().precip_threshold, 0.3)
        self.assertEqual(s.suitability_policy().hold_precip_percent, 70)
        self.assertEqual(s.analytics_policy().target_sqft_per_crew_day, 250)

    def test_crew_bands_are_configurable(self):
        policy = Settings(excellent_ratio=1.5, good_ratio=1.1, average_ratio=0.9).analytics_policy()
        self.assertEqual((policy.excellent_ratio, policy.good_ratio, policy.average_ratio), (1.5, 1.1, 0.9))

    def test_crew_band_defaults(self):
        policy = Settings().analytics_policy()
        self.assertEqual((policy.excellent_ratio, policy.good_ratio, policy.average_ratio), (1.2, 1.0, 0.8))


if __name__ == "__main__":
    unittest.main()
