"""
Viewport projection of horizontal coordinates.

Two target surfaces:
- ScreenProjector: linear angle-to-pixel mapping for a 2D canvas
- world_position / WorldAnchor: point on a sphere around the viewer for a 3D scene

The 3D frame is Y-up with -Z pointing North. Azimuth grows toward -X,
so East maps to -X: the scene is mirrored left-right relative to the 2D
projector, where East of the heading lands right of center.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .celestial import CelestialPosition
from .orientation import wrap_180


logger = logging.getLogger(__name__)


@dataclass
class Viewport:
    """Screen size and field of view for 2D projection."""
    width: int
    height: int
    hfov: float = 60.0              # Horizontal FOV in degrees
    vfov: Optional[float] = None    # Vertical FOV, defaults to hfov

    @property
    def vertical_fov(self) -> float:
        return self.hfov if self.vfov is None else self.vfov

    @property
    def cx(self) -> float:
        """Screen center x."""
        return self.width / 2

    @property
    def cy(self) -> float:
        """Screen center y."""
        return self.height / 2


@dataclass(frozen=True)
class ScreenPoint:
    """Projected 2D position with the relative angles that produced it."""
    x: float
    y: float
    relative_azimuth: float
    relative_elevation: float


class ScreenProjector:
    """
    Maps a sky direction to pixels given where the camera points.

    Args:
        viewport: Screen size and field of view
        inclusive_edges: Treat a target exactly on the FOV edge as visible
        roll_compensation: Rotate the projected offset by the device roll
    """

    def __init__(self, viewport: Viewport, inclusive_edges: bool = True,
                 roll_compensation: bool = False):
        self.viewport = viewport
        self.inclusive_edges = inclusive_edges
        self.roll_compensation = roll_compensation

    def _outside(self, rel: float, fov: float) -> bool:
        half = fov / 2
        if self.inclusive_edges:
            return abs(rel) > half
        return abs(rel) >= half

    def project(self, pos: CelestialPosition, heading: float, tilt: float,
                roll: float = 0.0) -> Optional[ScreenPoint]:
        """
        Convert horizontal coordinates to pixel coordinates.

        Args:
            pos: Target position (azimuth, altitude)
            heading: Camera compass heading in degrees
            tilt: Camera elevation above the horizon in degrees
            roll: Device roll in degrees (used with roll compensation)

        Returns:
            ScreenPoint, or None if outside the field of view
        """
        vp = self.viewport
        hfov = vp.hfov
        vfov = vp.vertical_fov

        rel_az = wrap_180(pos.azimuth - heading)
        rel_el = pos.altitude - tilt

        if self._outside(rel_az, hfov) or self._outside(rel_el, vfov):
            return None

        dx = (rel_az / hfov) * vp.width
        dy = -(rel_el / vfov) * vp.height

        if self.roll_compensation and roll:
            # Counter-rotate so the sky stays level while the device rolls
            roll_rad = math.radians(-roll)
            rotation = np.array([
                [math.cos(roll_rad), -math.sin(roll_rad)],
                [math.sin(roll_rad), math.cos(roll_rad)],
            ])
            dx, dy = rotation @ np.array([dx, dy])

        return ScreenPoint(
            x=vp.cx + float(dx),
            y=vp.cy + float(dy),
            relative_azimuth=rel_az,
            relative_elevation=rel_el,
        )


class PositionMode(Enum):
    """When the 3D target position is recomputed."""
    CONTINUOUS = "continuous"   # Every orientation update
    LOCKED = "locked"           # First valid reading, then frozen


def world_position(pos: CelestialPosition, radius: float = 30.0) -> Tuple[float, float, float]:
    """
    Place a sky direction on a sphere around the viewer.

    Args:
        pos: Elevation/azimuth of the target
        radius: Sphere radius in scene units

    Returns:
        (x, y, z) in a Y-up, -Z-North frame
    """
    elev = math.radians(pos.altitude)
    az = math.radians(pos.azimuth)

    x = -radius * math.cos(elev) * math.sin(az)
    y = radius * math.sin(elev)
    z = -radius * math.cos(elev) * math.cos(az)
    return (x, y, z)


class WorldAnchor:
    """
    Holds the 3D position of the target according to a PositionMode.

    In LOCKED mode the first position offered is kept until
    ``recalibrate()`` is called.

    Args:
        mode: Continuous or locked positioning
        radius: Sphere radius in scene units
    """

    def __init__(self, mode: PositionMode = PositionMode.CONTINUOUS,
                 radius: float = 30.0):
        self.mode = mode
        self.radius = radius
        self._position: Optional[Tuple[float, float, float]] = None

    @property
    def position(self) -> Optional[Tuple[float, float, float]]:
        return self._position

    @property
    def is_locked(self) -> bool:
        return self.mode is PositionMode.LOCKED and self._position is not None

    def offer(self, pos: Optional[CelestialPosition]) -> Optional[Tuple[float, float, float]]:
        """
        Offer a newly resolved target direction.

        Args:
            pos: Resolved direction, or None when unresolved

        Returns:
            The anchored position after this update
        """
        if pos is None or self.is_locked:
            return self._position
        self._position = world_position(pos, self.radius)
        if self.mode is PositionMode.LOCKED:
            logger.info(f"Target locked at {tuple(round(c, 3) for c in self._position)}")
        return self._position

    def recalibrate(self) -> None:
        """Drop the current position so the next offer is taken."""
        logger.info("Recalibrating target position")
        self._position = None
