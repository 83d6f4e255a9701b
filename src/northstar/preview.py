#!/usr/bin/env python3
"""
Desktop preview of the North Star viewer.

Runs the session on an asyncio loop: a render tick per display frame,
a keyboard-driven simulated device for orientation, and the signal
sequencer on the same loop's timers.

Keys:
    Arrows / WASD   Turn and tilt the virtual phone
    M               Signal the configured message in Morse
    X               Stop signalling
    R               Recalibrate (unlock the 3D target)
    Q / ESC         Quit
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import cv2

from .config import Config
from .renderer import GlowRenderer
from .session import SessionContext
from .sources import LocationSource, SimulatedOrientationSource


logger = logging.getLogger(__name__)

# cv2.waitKeyEx codes for arrow keys differ per platform
_KEYS_UP = {ord('w'), 2490368, 65362}
_KEYS_DOWN = {ord('s'), 2621440, 65364}
_KEYS_LEFT = {ord('a'), 2424832, 65361}
_KEYS_RIGHT = {ord('d'), 2555904, 65363}


@dataclass
class PreviewOptions:
    width: int = 800
    height: int = 600
    fps: float = 30.0
    message: str = "SOS"
    window_name: str = "North Star"


class Preview:
    """
    Interactive preview window.

    Args:
        config: Viewer configuration
        options: Window and playback options
        location: Location source, None to use the configured default
    """

    def __init__(self, config: Config, options: PreviewOptions,
                 location: Optional[LocationSource] = None):
        self.config = config
        self.options = options
        self.location = location
        self.device = SimulatedOrientationSource()
        self.renderer = GlowRenderer()
        self.running = False
        self.session: Optional[SessionContext] = None

    def handle_key(self, key: int) -> bool:
        """
        Handle keyboard input.

        Returns:
            False if the preview should quit
        """
        if key == -1:
            return True
        if key in (ord('q'), 27):
            return False

        if key in _KEYS_UP:
            self.device.look_up()
        elif key in _KEYS_DOWN:
            self.device.look_down()
        elif key in _KEYS_LEFT:
            self.device.turn_left()
        elif key in _KEYS_RIGHT:
            self.device.turn_right()
        elif key == ord('m'):
            self.session.sequencer.play(self.options.message)
        elif key == ord('x'):
            self.session.sequencer.stop()
        elif key == ord('r'):
            self.session.recalibrate()
        return True

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self.session = SessionContext(self.config, scheduler=loop)
        self.session.acquire_location(self.location)
        self.session.start_tracking(self.device)
        self.device.emit()

        frame = self.renderer.blank(self.options.width, self.options.height)
        period = 1.0 / self.options.fps

        cv2.namedWindow(self.options.window_name, cv2.WINDOW_NORMAL)
        self.running = True
        logger.info("Preview running, press Q to quit")

        try:
            while self.running:
                self.session.tick()
                star = self.session.screen_frame(self.options.width, self.options.height)
                self.renderer.render(frame, star, self.session.orientation)
                cv2.imshow(self.options.window_name, frame)

                if not self.handle_key(cv2.waitKeyEx(1)):
                    break
                # Keep the simulated sensor streaming so smoothing settles
                self.device.emit()
                await asyncio.sleep(period)
        finally:
            self.running = False
            self.session.sequencer.stop()
            self.session.stop_tracking()
            cv2.destroyAllWindows()


def run_preview(config: Config, options: PreviewOptions,
                location: Optional[LocationSource] = None) -> None:
    """Run the preview until the window is closed."""
    asyncio.run(Preview(config, options, location).run())
