"""
Celestial calculations for the North Star viewer.

Provides:
- Local sidereal time from a linear GMST model (J2000 epoch)
- Equatorial to horizontal (azimuth, altitude) conversion
- Polaris and celestial pole positions
- Magnetic declination estimate for true-north correction

The sidereal model is a linear approximation, good to a fraction of a
degree for Polaris. It is not a navigation-grade ephemeris.
"""

import math
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Optional, Tuple


J2000_EPOCH = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# GMST linear model (hours)
GMST_AT_J2000 = 18.697374558
GMST_HOURS_PER_DAY = 24.06570982441908
SIDEREAL_RATE = 1.00273790935


@dataclass
class CelestialPosition:
    """Position in horizontal coordinates."""
    azimuth: float      # Degrees from North, clockwise (0-360)
    altitude: float     # Degrees above horizon (-90 to +90)


@dataclass
class EquatorialPosition:
    """Position in equatorial coordinates."""
    ra: float           # Right Ascension in degrees (0-360)
    dec: float          # Declination in degrees (-90 to +90)

    @property
    def ra_hours(self) -> float:
        """RA in hours."""
        return self.ra / 15.0


@dataclass(frozen=True)
class ObserverLocation:
    """Observer's location on Earth."""
    latitude: float     # Degrees North (positive) / South (negative)
    longitude: float    # Degrees East (positive) / West (negative)
    accuracy: Optional[float] = None  # Meters, as reported by the location source
    elevation: float = 0.0  # Meters above sea level


# Polaris (approximate, J2000)
POLARIS = EquatorialPosition(ra=37.95456067, dec=89.264109)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_since_j2000(dt: datetime) -> float:
    """Fractional days elapsed since 2000-01-01 12:00 UTC."""
    return (_as_utc(dt) - J2000_EPOCH).total_seconds() / 86400.0


def local_sidereal_time(dt: datetime, longitude: float) -> float:
    """
    Calculate Local Sidereal Time.

    The GMST term is linear in days since J2000; a UTC time-of-day term
    scaled by the sidereal rate and the observer longitude are added on top.

    Args:
        dt: Datetime (naive values are taken as UTC)
        longitude: Degrees East (negative for West)

    Returns:
        LST in hours, in [0, 24)
    """
    dt = _as_utc(dt)
    gmst = GMST_AT_J2000 + GMST_HOURS_PER_DAY * days_since_j2000(dt)

    hours = dt.hour + dt.minute / 60.0 + dt.second / 3600.0
    hours_term = hours * SIDEREAL_RATE

    lst = (gmst + hours_term + longitude / 15.0) % 24.0
    if lst < 0:
        lst += 24.0
    # Float modulo can round up to exactly 24.0 for tiny negative inputs
    if lst >= 24.0:
        lst = 0.0
    return lst


def horizontal_from_hour_angle(dec: float, latitude: float,
                               hour_angle_deg: float) -> CelestialPosition:
    """
    Solve the horizontal-coordinate equations for a given hour angle.

    Args:
        dec: Declination in degrees
        latitude: Observer latitude in degrees
        hour_angle_deg: Hour angle in degrees (west of meridian positive)

    Returns:
        Horizontal position, azimuth in [0, 360)
    """
    ha_rad = math.radians(hour_angle_deg)
    dec_rad = math.radians(dec)
    lat_rad = math.radians(latitude)

    # Altitude
    sin_alt = math.sin(dec_rad) * math.sin(lat_rad) + \
              math.cos(dec_rad) * math.cos(lat_rad) * math.cos(ha_rad)
    sin_alt = max(-1.0, min(1.0, sin_alt))
    alt_rad = math.asin(sin_alt)

    # Azimuth
    denom = math.cos(lat_rad) * math.cos(alt_rad)
    if denom == 0:
        # Observer at a pole or target at zenith: azimuth is undefined
        cos_az = 1.0
    else:
        cos_az = (math.sin(dec_rad) - math.sin(lat_rad) * sin_alt) / denom
    cos_az = max(-1.0, min(1.0, cos_az))
    az = math.degrees(math.acos(cos_az))

    if math.sin(ha_rad) > 0:
        az = 360.0 - az
    if az >= 360.0:
        az -= 360.0

    return CelestialPosition(azimuth=az, altitude=math.degrees(alt_rad))


class CelestialCalculator:
    """
    Calculator for fixed celestial targets seen from one observer.

    Args:
        location: Observer's geographic location
    """

    def __init__(self, location: ObserverLocation):
        self.location = location

    def local_sidereal_time(self, dt: datetime) -> float:
        """LST in hours for this observer."""
        return local_sidereal_time(dt, self.location.longitude)

    def hour_angle(self, eq: EquatorialPosition, dt: datetime) -> float:
        """Hour angle of ``eq`` in hours (LST - RA)."""
        return self.local_sidereal_time(dt) - eq.ra_hours

    def equatorial_to_horizontal(self, eq: EquatorialPosition,
                                 dt: datetime) -> CelestialPosition:
        """
        Convert equatorial coordinates to horizontal (azimuth/altitude).

        Args:
            eq: Equatorial position (RA, Dec)
            dt: UTC datetime

        Returns:
            Horizontal position (azimuth, altitude)
        """
        ha_hours = self.hour_angle(eq, dt)
        return horizontal_from_hour_angle(eq.dec, self.location.latitude,
                                          ha_hours * 15.0)

    def polaris_position(self, dt: datetime) -> CelestialPosition:
        """Horizontal position of Polaris (North Star)."""
        return self.equatorial_to_horizontal(POLARIS, dt)


def create_calculator(latitude: float, longitude: float,
                      elevation: float = 0.0) -> CelestialCalculator:
    """
    Create a celestial calculator for a location.

    Args:
        latitude: Degrees North (positive) / South (negative)
        longitude: Degrees East (positive) / West (negative)
        elevation: Meters above sea level

    Returns:
        CelestialCalculator instance
    """
    location = ObserverLocation(
        latitude=latitude,
        longitude=longitude,
        elevation=elevation
    )
    return CelestialCalculator(location)


# =============================================================================
# MAGNETIC DECLINATION
# =============================================================================
# Coarse regional fits, (lon_min, lon_max, lat_min, lat_max, fn).
# Each fn takes (longitude, latitude) and returns degrees East of true north.
# These are rough straight-line fits through a few city values, nothing more.

_DECLINATION_BANDS: Tuple[tuple, ...] = (
    # North America: ~+13 on the West coast, ~-13 on the East coast
    (-130.0, -60.0, 15.0, 70.0,
     lambda lon, lat: -0.54 * (lon + 98.0) + 0.1 * (lat - 40.0)),
    # Europe: ~+1 at Greenwich rising to ~+11 near Moscow
    (-15.0, 40.0, 35.0, 72.0,
     lambda lon, lat: 1.0 + 0.27 * lon + 0.05 * (lat - 50.0)),
    # East Asia: roughly -7 to -9 across China, Korea and Japan
    (100.0, 150.0, 20.0, 55.0,
     lambda lon, lat: -8.0 - 0.1 * (lat - 35.0)),
    # Australia: ~-1 in the West to ~+12 on the East coast
    (110.0, 155.0, -45.0, -10.0,
     lambda lon, lat: 0.39 * (lon - 119.0)),
)


def default_declination(longitude: float) -> float:
    """Fallback estimate used outside every regional band."""
    return -10.0 + longitude / 10.0


def estimate_magnetic_declination(latitude: float, longitude: float) -> float:
    """
    Estimate magnetic declination in degrees (East positive).

    This is a piecewise-linear approximation, not the World Magnetic Model.

    Args:
        latitude: Degrees North
        longitude: Degrees East

    Returns:
        Declination estimate in degrees
    """
    for lon_min, lon_max, lat_min, lat_max, fn in _DECLINATION_BANDS:
        if lon_min <= longitude < lon_max and lat_min <= latitude < lat_max:
            return fn(longitude, latitude)
    return default_declination(longitude)


def magnetic_to_true_heading(heading: float, declination: float) -> float:
    """Apply a declination estimate to a magnetic heading."""
    return (heading + declination + 360.0) % 360.0
