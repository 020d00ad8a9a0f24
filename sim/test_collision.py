#!/usr/bin/env python3
"""
Collision oracle and goal predicate tests.
"""

from __future__ import annotations

import math
import random
import unittest
from types import SimpleNamespace

import numpy as np

from sim.collision import (
    collides,
    first_collision,
    footprint,
    polygons_overlap,
    reached_goal,
    within_goal,
)
from sim.physics import Pose, State, VehicleSpec


class FootprintTests(unittest.TestCase):
    def test_axis_aligned_corners(self) -> None:
        corners = footprint(State(1.0, 2.0, 0.0, 0.0), 4.0, 2.0)
        np.testing.assert_allclose(
            corners, [[-1.0, 1.0], [3.0, 1.0], [3.0, 3.0], [-1.0, 3.0]], atol=1e-12
        )

    def test_rotation_by_quarter_turn(self) -> None:
        corners = footprint(State(0.0, 0.0, math.pi / 2, 0.0), 4.0, 2.0)
        self.assertAlmostEqual(corners[:, 1].max(), 2.0)
        self.assertAlmostEqual(corners[:, 0].max(), 1.0)

    def test_polygon_overlap_touching_counts(self) -> None:
        a = footprint(State(0.0, 0.0, 0.0, 0.0), 2.0, 2.0)
        b = footprint(State(2.0, 0.0, 0.0, 0.0), 2.0, 2.0)
        self.assertTrue(polygons_overlap(a, b))


class CollidesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.spec = VehicleSpec()

    def test_crossing_vehicles_in_the_junction_collide(self) -> None:
        a = State(0.0, -1.0, math.pi / 2, 5.0)
        b = State(-1.0, 0.0, 0.0, 5.0)
        self.assertTrue(collides(a, self.spec, b, self.spec))

    def test_opposite_lanes_do_not_collide(self) -> None:
        a = State(2.0, 0.0, math.pi / 2, 4.0)
        b = State(-2.0, 0.0, -math.pi / 2, 4.0)
        self.assertFalse(collides(a, self.spec, b, self.spec))
        self.assertFalse(collides(a, self.spec, b, self.spec, safe=True))

    def test_safety_envelope_is_larger_than_the_body(self) -> None:
        a = State(0.0, 0.0, 0.0, 0.0)
        b = State(6.0, 0.0, 0.0, 0.0)
        self.assertFalse(collides(a, self.spec, b, self.spec))
        self.assertTrue(collides(a, self.spec, b, self.spec, safe=True))

    def test_rotated_rectangles_separated_diagonally(self) -> None:
        a = State(0.0, 0.0, math.pi / 4, 0.0)
        b = State(3.2, -3.2, math.pi / 4, 0.0)
        self.assertFalse(collides(a, self.spec, b, self.spec))

    def test_non_finite_states_never_collide(self) -> None:
        a = State(float("nan"), 0.0, 0.0, 0.0)
        self.assertFalse(collides(a, self.spec, State(0.0, 0.0, 0.0, 0.0), self.spec))

    def test_symmetry_over_random_pairs(self) -> None:
        rng = random.Random(7)
        small = VehicleSpec(length=3.0, width=1.5)
        for _ in range(500):
            a = State(rng.uniform(-8, 8), rng.uniform(-8, 8), rng.uniform(-math.pi, math.pi), 0.0)
            b = State(rng.uniform(-8, 8), rng.uniform(-8, 8), rng.uniform(-math.pi, math.pi), 0.0)
            for safe in (False, True):
                self.assertEqual(
                    collides(a, self.spec, b, small, safe),
                    collides(b, small, a, self.spec, safe),
                )


class AgentLevelTests(unittest.TestCase):
    def _agent(self, name, x, y, heading=0.0, goal=(0.0, 0.0), reached=False):
        return SimpleNamespace(
            name=name,
            state=State(x, y, heading, 0.0),
            spec=VehicleSpec(),
            goal=Pose(*goal),
            goal_reached=reached,
        )

    def test_first_collision_reports_pair_in_index_order(self) -> None:
        agents = [
            self._agent("a", -20.0, 0.0),
            self._agent("b", 0.0, 0.0),
            self._agent("c", 1.0, 0.0),
        ]
        self.assertEqual(first_collision(agents), ("b", "c"))
        self.assertIsNone(first_collision(agents[:2]))

    def test_goal_latch_is_monotonic(self) -> None:
        agent = self._agent("a", 10.0, 0.0, goal=(0.0, 0.0))
        self.assertFalse(reached_goal(agent, 2.0))
        agent.goal_reached = True
        self.assertTrue(reached_goal(agent, 2.0))
        self.assertTrue(within_goal(State(1.0, 1.0, 0.0, 0.0), Pose(0.0, 0.0), 2.0))


if __name__ == "__main__":
    unittest.main()
