"""
Session context: the mutable state of one viewing session.

Owns observer location, the orientation filter, the resolver, both
projectors, the 3D anchor, the twinkle animation and the signal
sequencer. Orientation updates, render ticks and sequencer timers all
run on the same thread; the latest orientation wins.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Tuple

from .celestial import (
    CelestialPosition,
    EquatorialPosition,
    ObserverLocation,
    estimate_magnetic_declination,
    magnetic_to_true_heading,
)
from .config import Config
from .morse import MorseTiming
from .orientation import OrientationFilter, OrientationReading, reading_from_event
from .projection import PositionMode, ScreenProjector, Viewport, WorldAnchor
from .resolver import SkyPositionResolver
from .sequencer import Scheduler, SignalSequencer
from .sources import (
    LocationSource,
    LocationUnavailable,
    OrientationSource,
    PermissionGate,
    PermissionStatus,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScreenFrame:
    """What a 2D renderer draws this frame."""
    visible: bool
    x: float
    y: float
    brightness: float
    target: Optional[CelestialPosition] = None


@dataclass(frozen=True)
class WorldFrame:
    """What a 3D scene renderer applies this frame."""
    position: Optional[Tuple[float, float, float]]
    visible: bool
    brightness: float


class Twinkle:
    """
    Slow sinusoidal brightness animation.

    Args:
        step: Phase advance per frame (radians)
        base: Mean brightness
        amplitude: Brightness swing around the mean
    """

    def __init__(self, step: float = 0.02, base: float = 0.9, amplitude: float = 0.1):
        self.step = step
        self.base = base
        self.amplitude = amplitude
        self.phase = 0.0

    @property
    def brightness(self) -> float:
        return self.base + math.sin(self.phase) * self.amplitude

    def advance(self) -> float:
        self.phase += self.step
        return self.brightness


class SessionContext:
    """
    State and wiring for one viewing session.

    Args:
        config: Viewer configuration
        scheduler: Timer scheduler for the signal sequencer
        clock: Returns the current UTC time
    """

    def __init__(self, config: Config, scheduler: Scheduler,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.config = config
        self.clock = clock

        self.observer: Optional[ObserverLocation] = None
        self.using_default_location = False
        self.orientation: Optional[OrientationReading] = None
        self.tracking = False

        self.filter: Optional[OrientationFilter] = None
        if config.smoothing.enabled:
            self.filter = OrientationFilter(
                alpha=config.smoothing.alpha,
                wrap_heading=config.smoothing.wrap_heading,
            )

        target = EquatorialPosition(ra=config.target.ra_degrees,
                                    dec=config.target.dec_degrees)
        self.resolver = SkyPositionResolver(
            policy=config.resolver.policy,
            target=target,
            default_elevation=config.resolver.heuristic_default_elevation,
        )
        self.anchor = WorldAnchor(mode=config.projection.position_mode,
                                  radius=config.projection.sphere_radius)
        self.twinkle = Twinkle()
        self.sequencer = SignalSequencer(
            scheduler,
            timing=MorseTiming(dot_ms=config.morse.dot_ms),
            on_brightness=config.morse.on_brightness,
            off_brightness=config.morse.off_brightness,
            idle_brightness=config.morse.idle_brightness,
        )
        self._brightness = self.twinkle.brightness
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._projector: Optional[ScreenProjector] = None

    # ------------------------------------------------------------------
    # Observer

    def acquire_location(self, source: Optional[LocationSource]) -> ObserverLocation:
        """
        Set the observer from a location source, falling back to the default.

        Args:
            source: Location source, or None when geolocation is unsupported

        Returns:
            The observer location now in use
        """
        try:
            if source is None:
                raise LocationUnavailable("Geolocation not supported")
            self.observer = source.get_current_location()
            self.using_default_location = False
            logger.info(f"Observer at {self.observer.latitude:.4f}, "
                        f"{self.observer.longitude:.4f}")
        except LocationUnavailable as e:
            self.observer = ObserverLocation(
                latitude=self.config.observer.default_latitude,
                longitude=self.config.observer.default_longitude,
            )
            self.using_default_location = True
            logger.warning(f"Location unavailable ({e}), using default "
                           f"{self.observer.latitude:.4f}, {self.observer.longitude:.4f}")
        return self.observer

    # ------------------------------------------------------------------
    # Orientation

    def start_tracking(self, source: OrientationSource,
                       gate: Optional[PermissionGate] = None) -> bool:
        """
        Subscribe to orientation events, asking for permission if needed.

        Returns:
            True if tracking started
        """
        if gate is not None:
            status = gate.request_motion_permission()
            if status is not PermissionStatus.GRANTED:
                logger.info("Motion permission denied, continuing without tracking")
                return False

        self.stop_tracking()
        self._unsubscribe = source.subscribe(self.on_orientation)
        self.tracking = True
        logger.info("Orientation tracking started")
        return True

    def stop_tracking(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.tracking = False

    def on_orientation(self, event: Mapping[str, Any]) -> Optional[OrientationReading]:
        """
        Handle a raw orientation event.

        Null fields make the event a no-op.
        """
        reading = reading_from_event(event)
        if reading is None:
            return None
        return self.update_orientation(reading)

    def update_orientation(self, reading: OrientationReading) -> OrientationReading:
        if self.config.observer.apply_magnetic_declination and self.observer is not None:
            declination = estimate_magnetic_declination(self.observer.latitude,
                                                        self.observer.longitude)
            reading = reading.with_heading(
                magnetic_to_true_heading(reading.heading, declination))

        if self.filter is not None:
            reading = self.filter.update(reading)
        self.orientation = reading

        self.anchor.offer(self.resolve())
        return reading

    def recalibrate(self) -> None:
        """Unfreeze a locked 3D target and re-anchor it on the current reading."""
        self.anchor.recalibrate()
        if self.orientation is not None:
            self.anchor.offer(self.resolve())

    # ------------------------------------------------------------------
    # Resolution and rendering

    def resolve(self, now: Optional[datetime] = None) -> Optional[CelestialPosition]:
        heading = self.orientation.heading if self.orientation is not None else None
        return self.resolver.resolve(self.observer, now or self.clock(), heading)

    @property
    def brightness(self) -> float:
        if self.sequencer.is_playing:
            return self.sequencer.brightness
        return self._brightness

    def tick(self) -> float:
        """
        Advance one display frame.

        The twinkle animation only runs while the sequencer is idle.

        Returns:
            Brightness for this frame
        """
        if not self.sequencer.is_playing:
            self._brightness = self.twinkle.advance()
        return self.brightness

    def _screen_projector(self, width: int, height: int) -> ScreenProjector:
        # Rebuilt only when the screen size changes
        vp = None if self._projector is None else self._projector.viewport
        if vp is None or (vp.width, vp.height) != (width, height):
            projection = self.config.projection
            self._projector = ScreenProjector(
                Viewport(width=width, height=height,
                         hfov=projection.hfov, vfov=projection.vfov),
                inclusive_edges=projection.inclusive_edges,
                roll_compensation=projection.roll_compensation,
            )
        return self._projector

    def screen_frame(self, width: int, height: int,
                     now: Optional[datetime] = None) -> ScreenFrame:
        """Compute the 2D render inputs for the current state."""
        projector = self._screen_projector(width, height)
        brightness = self.brightness

        if self.orientation is None:
            return ScreenFrame(visible=False, x=0.0, y=0.0, brightness=brightness)

        target = self.resolve(now)
        if target is None:
            return ScreenFrame(visible=False, x=0.0, y=0.0, brightness=brightness)

        point = projector.project(
            target,
            heading=self.orientation.heading,
            tilt=self.orientation.camera_elevation,
            roll=self.orientation.roll,
        )
        if point is None:
            return ScreenFrame(visible=False, x=0.0, y=0.0,
                               brightness=brightness, target=target)
        return ScreenFrame(visible=True, x=point.x, y=point.y,
                           brightness=brightness, target=target)

    def world_frame(self, now: Optional[datetime] = None) -> WorldFrame:
        """Compute the 3D render inputs for the current state."""
        # Locked anchors are only set from orientation updates
        if self.anchor.mode is PositionMode.CONTINUOUS:
            self.anchor.offer(self.resolve(now))
        position = self.anchor.position
        return WorldFrame(position=position, visible=position is not None,
                          brightness=self.brightness)
