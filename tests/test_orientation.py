"""Tests for orientation readings and the smoothing filter."""

import math

import pytest

from northstar.orientation import (
    OrientationFilter,
    OrientationReading,
    reading_from_event,
    wrap_180,
)


class TestReadingFromEvent:

    def test_prefers_compass_heading(self):
        reading = reading_from_event({
            "alpha": 10.0, "beta": 90.0, "gamma": 2.0,
            "webkitCompassHeading": 45.0, "webkitCompassAccuracy": 8.0,
        })
        assert reading.heading == 45.0
        assert reading.heading_accuracy == 8.0

    def test_alpha_is_counter_clockwise(self):
        reading = reading_from_event({"alpha": 270.0, "beta": 90.0, "gamma": 0.0})
        assert reading.heading == pytest.approx(90.0)
        assert reading.heading_accuracy is None

    def test_uncalibrated_compass_accuracy_dropped(self):
        reading = reading_from_event({
            "alpha": 0.0, "beta": 80.0, "gamma": 0.0,
            "webkitCompassHeading": 12.0, "webkitCompassAccuracy": -1,
        })
        assert reading.heading == 12.0
        assert reading.heading_accuracy is None

    @pytest.mark.parametrize("event", [
        {"alpha": 10.0, "beta": None, "gamma": 0.0},
        {"alpha": 10.0, "beta": 90.0},
        {"alpha": None, "beta": 90.0, "gamma": 0.0},
        {"beta": 90.0, "gamma": 0.0, "webkitCompassHeading": None},
        {"alpha": "north", "beta": 90.0, "gamma": 0.0},
        {"alpha": float("nan"), "beta": 90.0, "gamma": 0.0},
        {},
    ])
    def test_null_fields_ignored(self, event):
        assert reading_from_event(event) is None

    def test_camera_elevation(self):
        assert OrientationReading(0.0, 90.0, 0.0).camera_elevation == 0.0
        assert OrientationReading(0.0, 135.0, 0.0).camera_elevation == 45.0


def test_wrap_180():
    assert wrap_180(190.0) == -170.0
    assert wrap_180(-190.0) == 170.0
    assert wrap_180(180.0) == 180.0
    assert wrap_180(720.0 + 5.0) == 5.0


class TestOrientationFilter:

    def test_first_reading_seeds_state(self):
        f = OrientationFilter(alpha=0.1)
        assert f.value is None
        out = f.update(OrientationReading(100.0, 50.0, -5.0))
        assert (out.heading, out.pitch, out.roll) == (100.0, 50.0, -5.0)

    def test_single_step_matches_formula(self):
        f = OrientationFilter(alpha=0.1, initial=OrientationReading(0.0, 0.0, 0.0))
        out = f.update(OrientationReading(10.0, 20.0, -10.0))
        assert out.heading == pytest.approx(1.0)
        assert out.pitch == pytest.approx(2.0)
        assert out.roll == pytest.approx(-1.0)

    @pytest.mark.parametrize("alpha", [0.1, 0.25, 0.5])
    def test_converges_within_bounded_steps(self, alpha):
        raw = OrientationReading(100.0, 50.0, -30.0)
        f = OrientationFilter(alpha=alpha, initial=OrientationReading(0.0, 0.0, 0.0))
        tolerance = 0.01

        # (1 - alpha)^n <= tolerance  =>  n >= ln(tolerance) / ln(1 - alpha)
        bound = math.ceil(math.log(tolerance) / math.log(1.0 - alpha))
        assert bound <= 5 / alpha

        steps = 0
        out = f.value
        while steps < bound:
            out = f.update(raw)
            steps += 1
        assert abs(out.heading - raw.heading) <= tolerance * raw.heading
        assert abs(out.pitch - raw.pitch) <= tolerance * raw.pitch
        assert abs(out.roll - raw.roll) <= tolerance * abs(raw.roll)

    def test_heading_takes_shortest_arc(self):
        f = OrientationFilter(alpha=0.1, initial=OrientationReading(350.0, 0.0, 0.0))
        out = f.update(OrientationReading(10.0, 0.0, 0.0))
        assert out.heading == pytest.approx(352.0)

    def test_heading_without_wrapping(self):
        f = OrientationFilter(alpha=0.1, initial=OrientationReading(350.0, 0.0, 0.0),
                              wrap_heading=False)
        out = f.update(OrientationReading(10.0, 0.0, 0.0))
        assert out.heading == pytest.approx(316.0)

    def test_heading_crossing_north_stays_in_range(self):
        f = OrientationFilter(alpha=0.5, initial=OrientationReading(5.0, 0.0, 0.0))
        out = f.update(OrientationReading(345.0, 0.0, 0.0))
        assert out.heading == pytest.approx(355.0)

    def test_reset(self):
        f = OrientationFilter()
        f.update(OrientationReading(1.0, 2.0, 3.0))
        f.reset()
        assert f.value is None

    @pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
    def test_invalid_alpha(self, alpha):
        with pytest.raises(ValueError):
            OrientationFilter(alpha=alpha)
