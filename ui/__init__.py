#!/usr/bin/env python3

from .types import Camera, ColorRGB, ColorRGBA
from .constants import ViewConstants
from .draw_road import draw_map
from .draw_vehicles import VehicleRenderer
from .hud import HudRenderer
from .pygame_view import RoundViewer

__all__ = [
    "Camera",
    "ColorRGB",
    "ColorRGBA",
    "ViewConstants",
    "draw_map",
    "VehicleRenderer",
    "HudRenderer",
    "RoundViewer",
]
