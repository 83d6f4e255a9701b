"""
Sky position resolver.

Turns observer state, time and orientation into the apparent direction of
the target. Two policies:

- RIGOROUS: sidereal-time math on the target's RA/Dec. Needs a latitude.
- HEURISTIC: elevation is the observer latitude (or a default), azimuth is
  the compass heading. No time dependence. This is a demo simplification
  kept on purpose.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .celestial import (
    POLARIS,
    CelestialCalculator,
    CelestialPosition,
    EquatorialPosition,
    ObserverLocation,
)


logger = logging.getLogger(__name__)


class ResolverPolicy(Enum):
    RIGOROUS = "rigorous"
    HEURISTIC = "heuristic"


class SkyPositionResolver:
    """
    Resolve the target's horizontal position.

    Args:
        policy: Rigorous or heuristic resolution
        target: Equatorial position of the target (Polaris by default)
        default_elevation: Elevation used by the heuristic without a location
    """

    def __init__(self, policy: ResolverPolicy = ResolverPolicy.RIGOROUS,
                 target: EquatorialPosition = POLARIS,
                 default_elevation: float = 40.0):
        self.policy = policy
        self.target = target
        self.default_elevation = default_elevation

    def resolve(self, observer: Optional[ObserverLocation], dt: datetime,
                heading: Optional[float] = None) -> Optional[CelestialPosition]:
        """
        Resolve the target direction.

        Args:
            observer: Observer location, None when unknown
            dt: UTC datetime
            heading: Current compass heading (heuristic policy only)

        Returns:
            Horizontal position, or None if it cannot be resolved
        """
        if self.policy is ResolverPolicy.HEURISTIC:
            return self._resolve_heuristic(observer, heading)

        if observer is None or observer.latitude is None:
            logger.debug("No observer latitude, target unresolved")
            return None
        calculator = CelestialCalculator(observer)
        return calculator.equatorial_to_horizontal(self.target, dt)

    def _resolve_heuristic(self, observer: Optional[ObserverLocation],
                           heading: Optional[float]) -> Optional[CelestialPosition]:
        if heading is None:
            return None
        if observer is not None and observer.latitude is not None:
            elevation = observer.latitude
        else:
            elevation = self.default_elevation
        return CelestialPosition(azimuth=heading % 360.0, altitude=elevation)
