import datetime as dt
import unittest

from guardian.domain import WeatherSample, WindowPolicy, WorkConstraints, WorkPackage
from guardian.window_finder import best_window, find_windows, infer_interval_seconds, satisfies

START = 1736182800  # 2025-01-06 17:00 UTC
NOW = dt.datetime.fromtimestamp(START, tz=dt.timezone.utc)


def _sample(i, temp, *, wind=5.0, pop=0.0, step=3600):
    return WeatherSample(
        dt=START + i * step,
        temp=temp,
        feels_like=temp,
        humidity=40.0,
        wind_speed=wind,
        wind_deg=0.0,
        description="Clear",
        icon="",
        pop=pop,
    )


def _package(required_hours=4, lead_time_hours=0, **constraints):
    return WorkPackage(
        id="test-pkg",
        name="Test package",
        description="",
        required_hours=required_hours,
        lead_time_hours=lead_time_hours,
        constraints=WorkConstraints(**constraints),
    )


class TestSatisfies(unittest.TestCase):
    def test_min_and_max_temperature(self):
        c = WorkConstraints(min_temp=40, max_temp=90)
        self.assertTrue(satisfies(_sample(0, 40), None, c))
        self.assertFalse(satisfies(_sample(0, 39.9), None, c))
        self.assertFalse(satisfies(_sample(0, 90.1), None, c))

    def test_rising_requires_non_decreasing(self):
        c = WorkConstraints(rising_required=True)
        self.assertTrue(satisfies(_sample(1, 45), _sample(0, 45), c))
        self.assertFalse(satisfies(_sample(1, 44), _sample(0, 45), c))
        self.assertTrue(satisfies(_sample(0, 44), None, c))

    def test_precipitation_threshold_is_exclusive(self):
        c = WorkConstraints(no_precip=True)
        self.assertTrue(satisfies(_sample(0, 50, pop=0.39), None, c))
        self.assertFalse(satisfies(_sample(0, 50, pop=0.4), None, c))

    def test_wind_limit(self):
        c = WorkConstraints(max_wind=20)
        self.assertTrue(satisfies(_sample(0, 50, wind=20), None, c))
        self.assertFalse(satisfies(_sample(0, 50, wind=21), None, c))


class TestFindWindows(unittest.TestCase):
    def test_single_window_from_temperature_run(self):
        temps = [38, 41, 42, 43, 44, 45, 39, 38]
        samples = [_sample(i, t) for i, t in enumerate(temps)]
        windows = find_windows(samples, _package(required_hours=4, min_temp=40), now=NOW)

        self.assertEqual(len(windows), 1)
        w = windows[0]
        self.assertEqual(w.start_ts, START + 3600)
        self.assertEqual(w.end_ts, START + 6 * 3600)
        self.assertEqual(w.duration_hours, 5)
        self.assertEqual(w.avg_temp, 43.0)

    def test_no_window_when_always_too_cold(self):
        samples = [_sample(i, 35) for i in range(5)]
        self.assertEqual(find_windows(samples, _package(min_temp=40), now=NOW), [])

    def test_empty_input(self):
        self.assertEqual(find_windows([], _package()), [])

    def test_short_run_is_dropped(self):
        samples = [_sample(i, t) for i, t in enumerate([35, 45, 45, 35])]
        self.assertEqual(find_windows(samples, _package(required_hours=3, min_temp=40), now=NOW), [])

    def test_rising_uses_previous_sample_of_whole_sequence(self):
        # 50 -> 48 drops, so index 1 fails against index 0 and the run restarts at index 2
        samples = [_sample(i, t) for i, t in enumerate([50, 48, 49, 50, 51])]
        windows = find_windows(samples, _package(required_hours=2, rising_required=True), now=NOW)
        self.assertEqual(len(windows), 1)
        self.assertEqual(windows[0].start_ts, START + 2 * 3600)
        self.assertEqual(windows[0].duration_hours, 3)

    def test_gap_breaks_run(self):
        samples = [_sample(i, 50) for i in (0, 1, 2, 5, 6, 7)]
        windows = find_windows(samples, _package(required_hours=3), now=NOW)
        self.assertEqual([w.start_ts for w in windows], [START, START + 5 * 3600])

    def test_three_hour_interval(self):
        samples = [_sample(i, 50, step=3 * 3600) for i in range(3)]
        self.assertEqual(infer_interval_seconds(samples), 3 * 3600)
        windows = find_windows(samples, _package(required_hours=8), now=NOW)
        self.assertEqual(windows[0].duration_hours, 9)

    def test_windows_sorted_and_limited(self):
        temps = [50, 50, 30, 50, 50, 30, 50, 50]
        samples = [_sample(i, t) for i, t in enumerate(temps)]
        windows = find_windows(samples, _package(required_hours=2, min_temp=40), now=NOW, limit=2)
        self.assertEqual([w.start_ts for w in windows], [START, START + 3 * 3600])

    def test_window_invariants(self):
        temps = [45, 46, 38, 47, 48, 49, 50, 39]
        samples = [_sample(i, t, wind=3 + i, pop=0.05 * i) for i, t in enumerate(temps)]
        package = _package(required_hours=2, min_temp=40, max_wind=15, no_precip=True)
        windows = find_windows(samples, package, now=NOW)
        self.assertEqual(len(windows), 2)
        for w in windows:
            self.assertGreaterEqual(w.duration_hours, 2)
            self.assertLess(w.start_ts, w.end_ts)
            self.assertTrue(0 <= w.confidence <= 100)
            for i, s in enumerate(samples):
                if w.start_ts <= s.dt < w.end_ts:
                    prev = samples[i - 1] if i else None
                    self.assertTrue(satisfies(s, prev, package.constraints))
        self.assertEqual(windows[1].max_precip, 30)

    def test_lead_time(self):
        samples = [_sample(i, 50) for i in range(24)]
        early = find_windows(samples, _package(required_hours=2, lead_time_hours=12), now=NOW)[0]
        self.assertFalse(early.lead_time_ok)
        later = find_windows(samples[12:], _package(required_hours=2, lead_time_hours=12), now=NOW)[0]
        self.assertTrue(later.lead_time_ok)


class TestConfidence(unittest.TestCase):
    def test_unconstrained_window_now_is_full_confidence(self):
        samples = [_sample(i, 50) for i in range(3)]
        self.assertEqual(find_windows(samples, _package(required_hours=2), now=NOW)[0].confidence, 100)

    def test_thin_margins_lower_confidence(self):
        comfy = [_sample(i, 60) for i in range(3)]
        tight = [_sample(i, 41) for i in range(3)]
        pkg = _package(required_hours=2, min_temp=40)
        self.assertEqual(find_windows(comfy, pkg, now=NOW)[0].confidence, 100)
        # margin 0.1 -> penalty 27
        self.assertEqual(find_windows(tight, pkg, now=NOW)[0].confidence, 73)

    def test_horizon_penalty_is_capped(self):
        samples = [_sample(i, 50) for i in range(3)]
        far_past = NOW - dt.timedelta(days=30)
        policy = WindowPolicy(horizon_decay_per_hour=1.0, max_horizon_penalty=50)
        self.assertEqual(find_windows(samples, _package(required_hours=2), now=far_past, policy=policy)[0].confidence, 50)

    def test_best_window_prefers_confidence_then_earliest(self):
        temps = [41, 41, 30, 60, 60, 30, 60, 60]
        samples = [_sample(i, t) for i, t in enumerate(temps)]
        windows = find_windows(samples, _package(required_hours=2, min_temp=40), now=NOW)
        best = best_window(windows)
        self.assertEqual(best.start_ts, START + 3 * 3600)
        self.assertIsNone(best_window([]))


if __name__ == "__main__":
    unittest.main()
