"""
ui/helpers.py
=============
Pure utility functions shared across UI modules:
fonts, alpha-surface drawing, world-to-screen polygons and text.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import pygame

from sim.collision import footprint
from sim.physics import State
from ui.types import Camera


# ── Fonts ────────────────────────────────────────────────────────────────────

def load_font(size: int, bold: bool = False) -> pygame.font.Font:
    """pygame's bundled default font; available without a display."""
    if not pygame.font.get_init():
        pygame.font.init()
    font = pygame.font.Font(None, int(size * 1.35))
    font.set_bold(bold)
    return font


# ── Geometry ─────────────────────────────────────────────────────────────────

def to_screen(cam: Camera, x: float, y: float) -> Tuple[int, int]:
    sx, sy = cam.world_to_screen(x, y)
    return int(round(sx)), int(round(sy))


def world_rect(cam: Camera, x1: float, y1: float, x2: float, y2: float) -> pygame.Rect:
    """Convert two world-space corners to a screen-space Rect (y-flipped)."""
    sx1, sy1 = cam.world_to_screen(min(x1, x2), max(y1, y2))
    sx2, sy2 = cam.world_to_screen(max(x1, x2), min(y1, y2))
    return pygame.Rect(int(sx1), int(sy1), max(1, int(sx2 - sx1)), max(1, int(sy2 - sy1)))


def vehicle_polygon(cam: Camera, state: State, length: float, width: float) -> List[Tuple[int, int]]:
    """Screen-space corners of the vehicle rectangle."""
    return [to_screen(cam, float(px), float(py)) for px, py in footprint(state, length, width)]


def polyline(cam: Camera, states: Sequence[State]) -> List[Tuple[int, int]]:
    return [to_screen(cam, s.x, s.y) for s in states]


# ── Alpha drawing helpers ────────────────────────────────────────────────────

def draw_alpha_rect(
    target: pygame.Surface,
    color: Tuple[int, ...],
    rect: pygame.Rect,
    border_radius: int = 0,
) -> None:
    tmp = pygame.Surface((rect.w, rect.h), pygame.SRCALPHA)
    pygame.draw.rect(tmp, color, (0, 0, rect.w, rect.h), border_radius=border_radius)
    target.blit(tmp, rect.topleft)


# ── Text helper ──────────────────────────────────────────────────────────────

def render_text(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: Tuple[int, int],
    color: Tuple[int, ...] = (230, 230, 235),
    anchor: str = "topleft",
) -> pygame.Rect:
    """Render text with flexible *anchor* ('topleft', 'center', 'midright' …)."""
    img = font.render(text, True, color)
    rect = img.get_rect(**{anchor: pos})
    surface.blit(img, rect)
    return rect
