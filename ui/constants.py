#!/usr/bin/env python3
"""Visual constants shared across all renderers."""

from __future__ import annotations

from typing import Sequence, Tuple

from .types import ColorRGB

# ── Map palette ──────────────────────────────────────────────────────────────
COLOR_GRASS: ColorRGB = (36, 48, 36)
COLOR_ROAD: ColorRGB = (30, 30, 30)
COLOR_INTERSECTION: ColorRGB = (38, 38, 38)
COLOR_ROAD_EDGE: ColorRGB = (150, 150, 150)
COLOR_LANE_WHITE: ColorRGB = (200, 200, 200)

DASH_LEN = 2.0  # metres
DASH_GAP = 2.0


class ViewConstants:
    """Mixin providing every visual / layout constant."""

    HUD_BG_COLOR: ColorRGB = (22, 22, 22)
    HUD_BORDER_COLOR: ColorRGB = (42, 42, 42)
    TEXT_COLOR: ColorRGB = (230, 230, 235)
    MUTED_TEXT_COLOR: ColorRGB = (160, 160, 160)
    SUCCESS_COLOR: ColorRGB = (0, 255, 127)
    WARNING_COLOR: ColorRGB = (255, 60, 60)
    TIMEOUT_COLOR: ColorRGB = (255, 136, 0)

    FOOTPRINT_ALPHA = 60
    GOAL_RADIUS_PX = 5

    LEGEND_ITEMS: Sequence[Tuple[str, ColorRGB]] = (
        ("VEHICLE", (235, 235, 235)),
        ("EXPECTED PATH", (200, 200, 200)),
        ("GOAL", (255, 220, 120)),
    )

    OUTCOME_COLORS = {
        "succeeded": SUCCESS_COLOR,
        "collided": WARNING_COLOR,
        "timed out": TIMEOUT_COLOR,
    }

    FIGURE_PREFIX = "Round_"
