#!/usr/bin/env python3
"""
sim/collision.py
================
Collision and goal oracle shared by the planner (terminal conditions in
rollouts) and the orchestrator (round termination).

* :func:`collides` – oriented-rectangle overlap (separating-axis test).
* :func:`first_collision` – first colliding pair among a set of agents.
* :func:`reached_goal` – goal test with the per-round latch.

The overlap test evaluates the edge normals of *both* rectangles and an
identical bounding-circle pre-check, so ``collides(a, b) == collides(b, a)``
for every pair of inputs.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from sim.physics import Pose, State, VehicleSpec


def footprint(state: State, length: float, width: float) -> np.ndarray:
    """Corners of the oriented rectangle centred on *state*.

    Returns
    -------
    numpy.ndarray
        ``(4, 2)`` array, counter-clockwise, starting at the rear-right
        corner.
    """
    c, s = math.cos(state.heading), math.sin(state.heading)
    hl, hw = length / 2.0, width / 2.0
    local = np.array(
        [[-hl, -hw], [hl, -hw], [hl, hw], [-hl, hw]],
        dtype=float,
    )
    rot = np.array([[c, -s], [s, c]], dtype=float)
    return local @ rot.T + np.array([state.x, state.y], dtype=float)


def _edge_normals(poly: np.ndarray) -> np.ndarray:
    edges = np.roll(poly, -1, axis=0) - poly
    return np.stack([-edges[:, 1], edges[:, 0]], axis=1)


def polygons_overlap(a: np.ndarray, b: np.ndarray) -> bool:
    """Separating-axis test for two convex polygons.

    Touching edges count as overlap.
    """
    axes = np.concatenate([_edge_normals(a), _edge_normals(b)], axis=0)
    proj_a = a @ axes.T
    proj_b = b @ axes.T
    separated = (proj_a.max(axis=0) < proj_b.min(axis=0)) | (
        proj_b.max(axis=0) < proj_a.min(axis=0)
    )
    return not bool(separated.any())


def _dims(spec: VehicleSpec, safe: bool) -> Tuple[float, float]:
    if safe:
        return spec.safe_length, spec.safe_width
    return spec.length, spec.width


def collides(
    state_a: State,
    spec_a: VehicleSpec,
    state_b: State,
    spec_b: VehicleSpec,
    safe: bool = False,
) -> bool:
    """True iff the footprints of two vehicles overlap.

    Parameters
    ----------
    state_a, state_b : State
        Poses of the two vehicles.
    spec_a, spec_b : VehicleSpec
        Their geometry.
    safe : bool
        Use the larger safety envelope instead of the body rectangle.
    """
    if not (state_a.is_finite() and state_b.is_finite()):
        return False
    # Canonical argument order keeps the floating-point path identical for (a, b) and (b, a).
    if (state_b.x, state_b.y, state_b.heading) < (state_a.x, state_a.y, state_a.heading):
        state_a, spec_a, state_b, spec_b = state_b, spec_b, state_a, spec_a
    la, wa = _dims(spec_a, safe)
    lb, wb = _dims(spec_b, safe)
    reach = math.hypot(la, wa) / 2.0 + math.hypot(lb, wb) / 2.0
    if math.hypot(state_a.x - state_b.x, state_a.y - state_b.y) > reach:
        return False
    return polygons_overlap(footprint(state_a, la, wa), footprint(state_b, lb, wb))


def agents_collide(a: Any, b: Any) -> bool:
    """:func:`collides` for two objects exposing ``state`` and ``spec``."""
    return collides(a.state, a.spec, b.state, b.spec)


def first_collision(agents: Sequence[Any]) -> Optional[Tuple[str, str]]:
    """Names of the first colliding pair in index order, or *None*."""
    n = len(agents)
    for i in range(n):
        for j in range(i + 1, n):
            if agents_collide(agents[i], agents[j]):
                return agents[i].name, agents[j].name
    return None


# ── Goal test ─────────────────────────────────────────────────────────────────

def goal_distance(state: State, goal: Pose) -> float:
    return math.hypot(goal.x - state.x, goal.y - state.y)


def within_goal(state: State, goal: Pose, tolerance: float) -> bool:
    """Pure positional test: *state* lies within *tolerance* of *goal*."""
    return goal_distance(state, goal) <= tolerance


def reached_goal(agent: Any, tolerance: float) -> bool:
    """True iff *agent* has reached its goal in the current round.

    Once the orchestrator latches ``agent.goal_reached`` the agent is parked
    for the rest of the round, so this stays true until the next reset.
    """
    if getattr(agent, "goal_reached", False):
        return True
    return within_goal(agent.state, agent.goal, tolerance)
