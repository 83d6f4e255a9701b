"""Tests for sidereal time, horizontal coordinates and declination estimates."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from northstar.celestial import (
    J2000_EPOCH,
    POLARIS,
    CelestialCalculator,
    EquatorialPosition,
    ObserverLocation,
    create_calculator,
    days_since_j2000,
    default_declination,
    estimate_magnetic_declination,
    horizontal_from_hour_angle,
    local_sidereal_time,
    magnetic_to_true_heading,
)


class TestSiderealTime:

    def test_days_since_epoch(self):
        assert days_since_j2000(J2000_EPOCH) == 0.0
        assert days_since_j2000(J2000_EPOCH + timedelta(days=1, hours=12)) == pytest.approx(1.5)

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 1, 1, 6, 30)
        aware = naive.replace(tzinfo=timezone.utc)
        assert local_sidereal_time(naive, 10.0) == local_sidereal_time(aware, 10.0)

    def test_value_at_epoch(self):
        # GMST constant plus 12 UTC hours at the sidereal rate
        expected = (18.697374558 + 12 * 1.00273790935) % 24
        assert local_sidereal_time(J2000_EPOCH, 0.0) == pytest.approx(expected)

    def test_longitude_shifts_by_one_hour_per_15_degrees(self):
        dt = datetime(2023, 7, 4, 3, 0, tzinfo=timezone.utc)
        west = local_sidereal_time(dt, 0.0)
        east = local_sidereal_time(dt, 15.0)
        assert (east - west) % 24 == pytest.approx(1.0)

    @pytest.mark.parametrize("longitude", [-180.0, -122.4, -0.001, 0.0, 45.0, 179.99])
    def test_output_in_range(self, longitude):
        start = datetime(1990, 1, 1, tzinfo=timezone.utc)
        for i in range(0, 24 * 400, 37):
            lst = local_sidereal_time(start + timedelta(hours=i * 13.7), longitude)
            assert 0.0 <= lst < 24.0


class TestHorizontalCoordinates:

    def test_equator_rising_point_is_east(self):
        pos = horizontal_from_hour_angle(dec=0.0, latitude=0.0, hour_angle_deg=-90.0)
        assert pos.altitude == pytest.approx(0.0, abs=1e-9)
        assert pos.azimuth == pytest.approx(90.0)

    def test_equator_setting_point_is_west(self):
        pos = horizontal_from_hour_angle(dec=0.0, latitude=0.0, hour_angle_deg=90.0)
        assert pos.azimuth == pytest.approx(270.0)

    def test_meridian_transit_south_of_zenith(self):
        pos = horizontal_from_hour_angle(dec=0.0, latitude=45.0, hour_angle_deg=0.0)
        assert pos.altitude == pytest.approx(45.0)
        assert pos.azimuth == pytest.approx(180.0)

    def test_pole_does_not_produce_nan(self):
        pos = horizontal_from_hour_angle(dec=90.0, latitude=45.0, hour_angle_deg=37.0)
        assert not math.isnan(pos.azimuth)
        assert pos.altitude == pytest.approx(45.0)

    def test_azimuth_always_in_range(self):
        for lat in range(-85, 90, 10):
            for dec in range(-89, 90, 17):
                for ha in range(-360, 361, 23):
                    pos = horizontal_from_hour_angle(float(dec), float(lat), float(ha))
                    assert 0.0 <= pos.azimuth < 360.0
                    assert -90.0 <= pos.altitude <= 90.0


class TestPolaris:

    @pytest.mark.parametrize("latitude", [10.0, 35.0, 51.4769, 70.0])
    def test_altitude_tracks_latitude(self, latitude):
        calc = create_calculator(latitude, -3.0)
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        polar_distance = 90.0 - POLARIS.dec
        for hour in range(0, 24):
            pos = calc.polaris_position(start + timedelta(hours=hour))
            assert abs(pos.altitude - latitude) <= polar_distance + 1e-6
            assert min(pos.azimuth, 360.0 - pos.azimuth) < 3.0

    def test_equatorial_to_horizontal_uses_hour_angle(self, greenwich, fixed_time):
        calc = CelestialCalculator(greenwich)
        eq = EquatorialPosition(ra=calc.local_sidereal_time(fixed_time) * 15.0, dec=20.0)
        # Target on the meridian: due South for a northern observer
        pos = calc.equatorial_to_horizontal(eq, fixed_time)
        assert pos.azimuth == pytest.approx(180.0, abs=1e-4)
        assert pos.altitude == pytest.approx(90.0 - greenwich.latitude + 20.0)


class TestMagneticDeclination:

    @pytest.mark.parametrize("latitude,longitude", [
        (0.0, 60.0),        # Indian Ocean
        (80.0, -100.0),     # Arctic, north of the North America band
        (-60.0, 0.0),       # Southern Ocean
        (10.0, 179.0),
    ])
    def test_outside_bands_uses_default_formula(self, latitude, longitude):
        assert estimate_magnetic_declination(latitude, longitude) == \
            pytest.approx(default_declination(longitude))
        assert default_declination(longitude) == pytest.approx(-10.0 + longitude / 10.0)

    def test_north_america_signs(self):
        assert estimate_magnetic_declination(37.77, -122.42) > 8.0   # San Francisco
        assert estimate_magnetic_declination(40.71, -74.01) < -8.0   # New York

    def test_europe_near_zero_at_greenwich(self, greenwich):
        assert abs(estimate_magnetic_declination(greenwich.latitude, 0.0)) < 2.0

    @pytest.mark.parametrize("heading,declination,expected", [
        (350.0, 15.0, 5.0),
        (10.0, -20.0, 350.0),
        (0.0, 0.0, 0.0),
        (180.0, -4.0, 176.0),
    ])
    def test_true_heading(self, heading, declination, expected):
        assert magnetic_to_true_heading(heading, declination) == pytest.approx(expected)

