"""
ui/draw_road.py
===============
Renders the 2D crossroads map:
  grass background, road surfaces, junction box, lane markings and kerbs.

All functions are *pure renderers*: they read data and draw to a surface.
"""

from __future__ import annotations

from typing import Tuple

import pygame

from sim.env import EnvCrossroads
from ui.constants import (
    COLOR_GRASS, COLOR_INTERSECTION, COLOR_LANE_WHITE, COLOR_ROAD,
    COLOR_ROAD_EDGE, DASH_GAP, DASH_LEN,
)
from ui.helpers import to_screen, world_rect
from ui.types import Camera


def draw_map(screen: pygame.Surface, camera: Camera, env: EnvCrossroads) -> None:
    """Draw the complete map background in z-order."""
    _draw_grass(screen)
    _draw_road_surfaces(screen, camera, env)
    _draw_junction_box(screen, camera, env)
    _draw_lane_markings(screen, camera, env)
    _draw_edge_lines(screen, camera, env)


# ── Grass ─────────────────────────────────────────────────────────────────────

def _draw_grass(screen: pygame.Surface) -> None:
    screen.fill(COLOR_GRASS)


# ── Road surfaces ────────────────────────────────────────────────────────────

def _draw_road_surfaces(screen: pygame.Surface, cam: Camera, env: EnvCrossroads) -> None:
    s, w = env.map_size, env.lane_width
    # Horizontal
    pygame.draw.rect(screen, COLOR_ROAD, world_rect(cam, -s, -w, s, w))
    # Vertical
    pygame.draw.rect(screen, COLOR_ROAD, world_rect(cam, -w, -s, w, s))


# ── Junction box ─────────────────────────────────────────────────────────────

def _draw_junction_box(screen: pygame.Surface, cam: Camera, env: EnvCrossroads) -> None:
    w = env.lane_width
    pygame.draw.rect(screen, COLOR_INTERSECTION, world_rect(cam, -w, -w, w, w))


# ── Lane markings ────────────────────────────────────────────────────────────

def _dashes(start: float, end: float):
    period = DASH_LEN + DASH_GAP
    pos = start
    while pos < end:
        yield pos, min(pos + DASH_LEN, end)
        pos += period


def _draw_lane_markings(screen: pygame.Surface, cam: Camera, env: EnvCrossroads) -> None:
    thickness = max(1, int(cam.zoom * 0.15))
    for (x1, y1), (x2, y2) in env.centre_lines():
        if y1 == y2:
            for a, b in _dashes(min(x1, x2), max(x1, x2)):
                pygame.draw.line(screen, COLOR_LANE_WHITE,
                                 to_screen(cam, a, y1), to_screen(cam, b, y1), thickness)
        else:
            for a, b in _dashes(min(y1, y2), max(y1, y2)):
                pygame.draw.line(screen, COLOR_LANE_WHITE,
                                 to_screen(cam, x1, a), to_screen(cam, x1, b), thickness)


# ── Road edge lines ──────────────────────────────────────────────────────────

def _draw_edge_lines(screen: pygame.Surface, cam: Camera, env: EnvCrossroads) -> None:
    thickness = max(1, int(cam.zoom * 0.2))
    for p1, p2 in env.road_edges():
        pygame.draw.line(screen, COLOR_ROAD_EDGE, _i2(cam, p1), _i2(cam, p2), thickness)


def _i2(cam: Camera, point: Tuple[float, float]) -> Tuple[int, int]:
    return to_screen(cam, point[0], point[1])
