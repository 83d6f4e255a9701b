"""
North Star
==========

Shows Polaris on a phone screen from compass heading, tilt, location and
time, and can blink it in Morse code.

Main components:
- celestial: sidereal time, equatorial to horizontal conversion, magnetic declination
- orientation: device orientation readings and exponential smoothing
- resolver: rigorous and heuristic sky position policies
- projection: 2D screen and 3D scene projection, locked or continuous anchoring
- morse: text to on/off pulse timelines
- sequencer: cooperative Morse player driving brightness
- session: per-session state wiring everything together
- server: static asset delivery over HTTP/HTTPS

Usage:
    from northstar import Config, SessionContext

    session = SessionContext(Config(), scheduler=asyncio.get_running_loop())
    session.acquire_location(StaticLocationSource(ObserverLocation(34.05, -118.24)))
    session.on_orientation({"alpha": 0, "beta": 120, "gamma": 0})
    frame = session.screen_frame(390, 844)
"""

__version__ = "0.1.0"

from .celestial import (
    POLARIS,
    CelestialCalculator,
    CelestialPosition,
    EquatorialPosition,
    ObserverLocation,
    create_calculator,
    estimate_magnetic_declination,
    local_sidereal_time,
    magnetic_to_true_heading,
)
from .config import Config, ConfigError
from .morse import MorseTiming, Pulse, PulseKind, encode, text_to_morse
from .orientation import OrientationFilter, OrientationReading, reading_from_event
from .projection import PositionMode, ScreenProjector, Viewport, WorldAnchor, world_position
from .resolver import ResolverPolicy, SkyPositionResolver
from .sequencer import SequencerState, SignalSequencer
from .session import ScreenFrame, SessionContext, WorldFrame
from .sources import (
    LocationUnavailable,
    OrientationSource,
    PermissionStatus,
    SimulatedOrientationSource,
    StaticLocationSource,
)

__all__ = [
    # Celestial calculations
    "POLARIS",
    "CelestialCalculator",
    "CelestialPosition",
    "EquatorialPosition",
    "ObserverLocation",
    "create_calculator",
    "estimate_magnetic_declination",
    "local_sidereal_time",
    "magnetic_to_true_heading",
    # Configuration
    "Config",
    "ConfigError",
    # Morse signalling
    "MorseTiming",
    "Pulse",
    "PulseKind",
    "encode",
    "text_to_morse",
    "SequencerState",
    "SignalSequencer",
    # Orientation and projection
    "OrientationFilter",
    "OrientationReading",
    "reading_from_event",
    "PositionMode",
    "ScreenProjector",
    "Viewport",
    "WorldAnchor",
    "world_position",
    "ResolverPolicy",
    "SkyPositionResolver",
    # Session
    "ScreenFrame",
    "SessionContext",
    "WorldFrame",
    "LocationUnavailable",
    "OrientationSource",
    "PermissionStatus",
    "SimulatedOrientationSource",
    "StaticLocationSource",
    "__version__",
]
