#!/usr/bin/env python3
"""
Star glow renderer for the desktop preview.

Draws the target as layered radial glow with four slowly rotating rays
onto a BGR frame, plus a small info panel.
"""

import math
from typing import Optional

import cv2
import numpy as np

from .session import ScreenFrame
from .orientation import OrientationReading


class GlowRenderer:
    """
    OpenCV renderer consuming ScreenFrame values.

    Args:
        base_size: Core radius in pixels
        glow_size: Outer glow radius in pixels
    """

    # Colors (BGR format for OpenCV)
    COLOR_BACKGROUND = (0, 0, 0)
    COLOR_CORE = (255, 255, 255)
    COLOR_INNER_GLOW = (255, 240, 230)
    COLOR_OUTER_GLOW = (255, 220, 200)
    COLOR_TEXT = (200, 200, 200)

    def __init__(self, base_size: int = 3, glow_size: int = 40):
        self.base_size = base_size
        self.glow_size = glow_size
        self.ray_phase = 0.0

    def blank(self, width: int, height: int) -> np.ndarray:
        return np.zeros((height, width, 3), dtype=np.uint8)

    def _radial_glow(self, frame: np.ndarray, x: int, y: int, radius: int,
                     color, peak: float) -> None:
        """Additively blend a linear-falloff disc of ``color``."""
        h, w = frame.shape[:2]
        x0, x1 = max(x - radius, 0), min(x + radius + 1, w)
        y0, y1 = max(y - radius, 0), min(y + radius + 1, h)
        if x0 >= x1 or y0 >= y1:
            return

        yy, xx = np.mgrid[y0:y1, x0:x1]
        dist = np.sqrt((xx - x) ** 2 + (yy - y) ** 2)
        weight = np.clip(1.0 - dist / radius, 0.0, 1.0) * peak

        patch = frame[y0:y1, x0:x1].astype(np.float32)
        patch += weight[..., None] * np.array(color, dtype=np.float32)
        frame[y0:y1, x0:x1] = np.clip(patch, 0, 255).astype(np.uint8)

    def draw_star(self, frame: np.ndarray, x: float, y: float, opacity: float) -> None:
        """Draw one glowing star centered at (x, y)."""
        cx, cy = int(round(x)), int(round(y))
        opacity = max(0.0, min(1.0, opacity))

        self._radial_glow(frame, cx, cy, self.glow_size, self.COLOR_OUTER_GLOW, 0.3 * opacity)
        self._radial_glow(frame, cx, cy, self.glow_size // 2, self.COLOR_INNER_GLOW, 0.6 * opacity)
        self._radial_glow(frame, cx, cy, self.base_size * 3, self.COLOR_CORE, opacity)

        core = tuple(int(c * opacity) for c in self.COLOR_CORE)
        cv2.circle(frame, (cx, cy), self.base_size, core, -1, cv2.LINE_AA)

        ray_color = tuple(int(c * 0.5 * opacity) for c in self.COLOR_CORE)
        ray_length = 15 + math.sin(self.ray_phase * 2) * 3
        for i in range(4):
            angle = i * math.pi / 2 + self.ray_phase
            p1 = (int(cx + math.cos(angle) * self.base_size),
                  int(cy + math.sin(angle) * self.base_size))
            p2 = (int(cx + math.cos(angle) * ray_length),
                  int(cy + math.sin(angle) * ray_length))
            cv2.line(frame, p1, p2, ray_color, 1, cv2.LINE_AA)

    def render(self, frame: np.ndarray, star: ScreenFrame,
               orientation: Optional[OrientationReading] = None,
               ray_step: float = 0.02) -> np.ndarray:
        """
        Render one frame.

        Args:
            frame: Target BGR frame, drawn into in place
            star: Visibility, position and brightness of the target
            orientation: Current orientation for the info panel
            ray_step: Ray rotation per frame (radians)

        Returns:
            The same frame
        """
        frame[:] = self.COLOR_BACKGROUND
        self.ray_phase += ray_step

        if star.visible:
            self.draw_star(frame, star.x, star.y, star.brightness)

        self._render_info_panel(frame, star, orientation)
        return frame

    def _render_info_panel(self, frame: np.ndarray, star: ScreenFrame,
                           orientation: Optional[OrientationReading]) -> None:
        lines = []
        if orientation is not None:
            lines.append(f"Compass: {orientation.heading:.1f} deg")
            lines.append(f"Tilt: {orientation.pitch:.1f} deg")
            lines.append(f"Roll: {orientation.roll:.1f} deg")
        if star.target is not None:
            lines.append(f"Star Alt: {star.target.altitude:.1f} deg")
            lines.append(f"Star Az: {star.target.azimuth:.1f} deg")
        lines.append("Star visible" if star.visible else "Star not in view")

        y = 25
        for line in lines:
            cv2.putText(frame, line, (10, y), cv2.FONT_HERSHEY_SIMPLEX,
                        0.5, self.COLOR_TEXT, 1, cv2.LINE_AA)
            y += 20
