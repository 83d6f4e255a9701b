"""
Device orientation readings and smoothing.

Heading convention: clockwise compass bearing, 0 = North, 90 = East.
Browsers report ``alpha`` counter-clockwise, so a heading derived from
``alpha`` is ``360 - alpha``. iOS also reports ``webkitCompassHeading``,
which is already a clockwise bearing and is preferred when present.

Tilt convention: ``pitch`` is the device ``beta`` (0 = lying flat, screen
up; 90 = upright). The rear camera then looks ``pitch - 90`` degrees above
the horizon.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import numpy as np


logger = logging.getLogger(__name__)


def wrap_180(angle: float) -> float:
    """Normalize an angle to [-180, 180]."""
    while angle > 180.0:
        angle -= 360.0
    while angle < -180.0:
        angle += 360.0
    return angle


@dataclass(frozen=True)
class OrientationReading:
    """Device orientation in degrees."""
    heading: float      # Compass bearing, clockwise from North (0-360)
    pitch: float        # Forward/back tilt (device beta)
    roll: float         # Left/right tilt (device gamma)
    heading_accuracy: Optional[float] = None

    @property
    def camera_elevation(self) -> float:
        """Elevation of the rear camera's line of sight above the horizon."""
        return self.pitch - 90.0

    def as_array(self) -> np.ndarray:
        return np.array([self.heading, self.pitch, self.roll], dtype=float)

    @classmethod
    def from_array(cls, values: np.ndarray,
                   heading_accuracy: Optional[float] = None) -> "OrientationReading":
        return cls(
            heading=float(values[0]) % 360.0,
            pitch=float(values[1]),
            roll=float(values[2]),
            heading_accuracy=heading_accuracy,
        )

    def with_heading(self, heading: float) -> "OrientationReading":
        return OrientationReading(
            heading=heading % 360.0,
            pitch=self.pitch,
            roll=self.roll,
            heading_accuracy=self.heading_accuracy,
        )


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def reading_from_event(event: Mapping[str, Any]) -> Optional[OrientationReading]:
    """
    Build a reading from a browser ``deviceorientation`` payload.

    Args:
        event: Mapping with ``alpha``, ``beta``, ``gamma`` and optionally
            ``webkitCompassHeading`` / ``webkitCompassAccuracy``

    Returns:
        OrientationReading, or None when a required field is null
    """
    beta = _number(event.get("beta"))
    gamma = _number(event.get("gamma"))
    compass = _number(event.get("webkitCompassHeading"))
    alpha = _number(event.get("alpha"))

    if beta is None or gamma is None:
        logger.debug(f"Ignoring orientation event without tilt: {dict(event)}")
        return None

    if compass is not None and compass >= 0:
        heading = compass
        accuracy = _number(event.get("webkitCompassAccuracy"))
        # iOS reports -1 when the compass is uncalibrated
        if accuracy is not None and accuracy < 0:
            accuracy = None
    elif alpha is not None:
        heading = (360.0 - alpha) % 360.0
        accuracy = None
    else:
        logger.debug(f"Ignoring orientation event without heading: {dict(event)}")
        return None

    return OrientationReading(
        heading=heading % 360.0,
        pitch=beta,
        roll=gamma,
        heading_accuracy=accuracy,
    )


class OrientationFilter:
    """
    Per-axis exponential smoothing of orientation readings.

    ``smoothed = smoothed * (1 - alpha) + raw * alpha`` for each axis. The
    heading step is taken along the shortest arc so that crossing North
    does not swing the estimate through South.

    Args:
        alpha: Weight of the newest reading (0 < alpha <= 1)
        initial: Optional starting state; otherwise the first reading seeds it
        wrap_heading: Blend heading along the shortest arc
    """

    def __init__(self, alpha: float = 0.1,
                 initial: Optional[OrientationReading] = None,
                 wrap_heading: bool = True):
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.wrap_heading = wrap_heading
        self._state: Optional[np.ndarray] = (
            initial.as_array() if initial is not None else None
        )
        self._accuracy: Optional[float] = (
            initial.heading_accuracy if initial is not None else None
        )

    @property
    def value(self) -> Optional[OrientationReading]:
        """Current smoothed reading, or None before the first update."""
        if self._state is None:
            return None
        return OrientationReading.from_array(self._state, self._accuracy)

    def reset(self) -> None:
        self._state = None
        self._accuracy = None

    def update(self, reading: OrientationReading) -> OrientationReading:
        """
        Feed a raw reading and return the new smoothed reading.

        Args:
            reading: Raw orientation reading

        Returns:
            Smoothed orientation
        """
        raw = reading.as_array()
        self._accuracy = reading.heading_accuracy

        if self._state is None:
            self._state = raw
            return OrientationReading.from_array(self._state, self._accuracy)

        if self.wrap_heading:
            # Unwrap the raw heading next to the current estimate
            raw[0] = self._state[0] + wrap_180(raw[0] - self._state[0])

        self._state = self._state * (1.0 - self.alpha) + raw * self.alpha
        self._state[0] %= 360.0

        return OrientationReading.from_array(self._state, self._accuracy)
