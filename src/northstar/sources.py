"""
Collaborator interfaces: location, orientation and motion permission.

The browser supplies these in production. The implementations here cover
fixed locations, pushed orientation events and a keyboard-driven
simulated device for desktop testing.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from .celestial import ObserverLocation


OrientationCallback = Callable[[Mapping[str, Any]], None]


class LocationUnavailable(Exception):
    """Location source could not produce a fix."""


class LocationSource(Protocol):
    def get_current_location(self) -> ObserverLocation: ...


class StaticLocationSource:
    """
    Location source returning a fixed location.

    Args:
        location: Location to report, or None to always fail
    """

    def __init__(self, location: Optional[ObserverLocation] = None):
        self.location = location

    def get_current_location(self) -> ObserverLocation:
        if self.location is None:
            raise LocationUnavailable("No location configured")
        return self.location


class PermissionStatus(Enum):
    GRANTED = "granted"
    DENIED = "denied"


class PermissionGate(Protocol):
    def request_motion_permission(self) -> PermissionStatus: ...


class FixedPermissionGate:
    """Permission gate with a predetermined answer."""

    def __init__(self, status: PermissionStatus = PermissionStatus.GRANTED):
        self.status = status

    def request_motion_permission(self) -> PermissionStatus:
        return self.status


class OrientationSource:
    """
    Push-style orientation event hub.

    Producers call ``publish()`` with a ``deviceorientation`` payload;
    subscribers receive it synchronously in subscription order.
    """

    def __init__(self):
        self._subscribers: List[OrientationCallback] = []

    def subscribe(self, callback: OrientationCallback) -> Callable[[], None]:
        """
        Register a callback.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: Mapping[str, Any]) -> None:
        for callback in list(self._subscribers):
            callback(event)


class SimulatedOrientationSource(OrientationSource):
    """
    Simulated device for testing without hardware.

    Arrow keys turn and tilt the virtual phone. State is kept as the
    browser would report it (compass heading plus beta/gamma).

    Args:
        heading: Initial compass heading in degrees
        pitch: Initial device beta (90 = upright, looking at the horizon)
        step: Degrees per key press
    """

    def __init__(self, heading: float = 0.0, pitch: float = 120.0,
                 step: float = 5.0):
        super().__init__()
        self.heading = heading % 360.0
        self.pitch = pitch
        self.roll = 0.0
        self.step = step

    def event(self) -> Dict[str, Any]:
        """Current state as a ``deviceorientation`` payload."""
        return {
            "alpha": (360.0 - self.heading) % 360.0,
            "beta": self.pitch,
            "gamma": self.roll,
            "webkitCompassHeading": self.heading,
            "webkitCompassAccuracy": 5.0,
        }

    def emit(self) -> None:
        self.publish(self.event())

    def look_up(self) -> None:
        self.pitch = min(self.pitch + self.step, 180.0)
        self.emit()

    def look_down(self) -> None:
        self.pitch = max(self.pitch - self.step, 0.0)
        self.emit()

    def turn_left(self) -> None:
        self.heading = (self.heading - self.step) % 360.0
        self.emit()

    def turn_right(self) -> None:
        self.heading = (self.heading + self.step) % 360.0
        self.emit()
