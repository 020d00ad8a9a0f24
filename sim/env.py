"""
sim/env.py
==========
Static geometry of the crossroads.

:class:`EnvCrossroads` describes one square map centred on the origin with
two perpendicular two-lane roads crossing at ``(0, 0)``.  It is immutable
and shared read-only between every planning task; the planner uses it for
feasibility checks and the viewer for drawing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

Segment = Tuple[Tuple[float, float], Tuple[float, float]]


@dataclass(frozen=True)
class EnvCrossroads:
    """Square map with a north–south and an east–west road.

    Parameters
    ----------
    map_size : float
        Half extent of the map; the map spans ``[-map_size, map_size]`` on
        both axes.
    lane_width : float
        Width of one lane.  Each road carries one lane per direction, so a
        road is ``2 * lane_width`` wide and centred on its axis.
    """

    map_size: float
    lane_width: float

    # ── queries ───────────────────────────────────────────────────────────

    def in_bounds(self, x: float, y: float) -> bool:
        """True when *(x, y)* lies on the map (finite and within extent)."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        return abs(x) <= self.map_size and abs(y) <= self.map_size

    def is_drivable(self, x: float, y: float) -> bool:
        """True when *(x, y)* lies on either road and on the map."""
        if not self.in_bounds(x, y):
            return False
        return abs(x) <= self.lane_width or abs(y) <= self.lane_width

    # ── geometry for rendering ────────────────────────────────────────────

    def road_edges(self) -> List[Segment]:
        """Kerb lines, broken at the junction box."""
        s, w = self.map_size, self.lane_width
        edges: List[Segment] = []
        for sign in (-1.0, 1.0):
            edges.append(((-s, sign * w), (-w, sign * w)))
            edges.append(((w, sign * w), (s, sign * w)))
            edges.append(((sign * w, -s), (sign * w, -w)))
            edges.append(((sign * w, w), (sign * w, s)))
        return edges

    def centre_lines(self) -> List[Segment]:
        """Lane dividers on each arm, outside the junction box."""
        s, w = self.map_size, self.lane_width
        return [
            ((-s, 0.0), (-w, 0.0)),
            ((w, 0.0), (s, 0.0)),
            ((0.0, -s), (0.0, -w)),
            ((0.0, w), (0.0, s)),
        ]
