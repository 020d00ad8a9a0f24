"""
ui/types.py
===========
Lightweight data containers used across every UI module.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

ColorRGB = Tuple[int, int, int]
ColorRGBA = Tuple[int, int, int, int]


@dataclass
class Camera:
    """Viewport mapping world coordinates to screen pixels."""
    screen_w: int
    screen_h: int
    world_x: float = 0.0
    world_y: float = 0.0
    zoom: float = 3.0

    @classmethod
    def fit(cls, screen_w: int, screen_h: int, half_extent: float, margin: float = 0.92) -> "Camera":
        """Camera centred on the origin showing ``[-half_extent, half_extent]`` on both axes."""
        zoom = margin * min(screen_w, screen_h) / (2.0 * max(half_extent, 1e-6))
        return cls(screen_w=screen_w, screen_h=screen_h, zoom=zoom)

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        sx = cx + (wx - self.world_x) * self.zoom
        sy = cy - (wy - self.world_y) * self.zoom
        return sx, sy

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        cx = self.screen_w / 2
        cy = self.screen_h / 2
        wx = (sx - cx) / self.zoom + self.world_x
        wy = -((sy - cy) / self.zoom) + self.world_y
        return wx, wy
