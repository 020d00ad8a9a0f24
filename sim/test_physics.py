#!/usr/bin/env python3
"""
Kinematics and map-geometry tests.
"""

from __future__ import annotations

import math
import unittest

from sim.env import EnvCrossroads
from sim.physics import (
    ACTION_PRIORITY,
    Action,
    State,
    VehicleSpec,
    constant_velocity,
    park,
    step,
    wrap_angle,
)


class StepTests(unittest.TestCase):
    def setUp(self) -> None:
        self.spec = VehicleSpec()
        self.state = State(x=0.0, y=0.0, heading=0.0, speed=4.0)

    def test_maintain_moves_straight_at_constant_speed(self) -> None:
        nxt = step(self.state, Action.MAINTAIN, self.spec, 0.5)
        self.assertAlmostEqual(nxt.x, 2.0)
        self.assertAlmostEqual(nxt.y, 0.0)
        self.assertAlmostEqual(nxt.heading, 0.0)
        self.assertAlmostEqual(nxt.speed, 4.0)
        self.assertAlmostEqual(nxt.timestamp, 0.5)

    def test_position_uses_speed_before_the_update(self) -> None:
        nxt = step(self.state, Action.ACCELERATE, self.spec, 0.5)
        self.assertAlmostEqual(nxt.x, 2.0)
        self.assertAlmostEqual(nxt.speed, 4.0 + self.spec.max_acceleration * 0.5)

    def test_speed_is_clamped_to_limits(self) -> None:
        fast = State(0.0, 0.0, 0.0, self.spec.max_speed)
        self.assertEqual(step(fast, Action.ACCELERATE, self.spec, 1.0).speed, self.spec.max_speed)
        slow = State(0.0, 0.0, 0.0, 0.5)
        self.assertEqual(step(slow, Action.BRAKE, self.spec, 1.0).speed, 0.0)

    def test_brake_is_harder_than_decelerate(self) -> None:
        dec = step(self.state, Action.DECELERATE, self.spec, 0.25)
        brk = step(self.state, Action.BRAKE, self.spec, 0.25)
        self.assertLess(brk.speed, dec.speed)

    def test_turns_are_mirror_images(self) -> None:
        left = step(self.state, Action.TURN_LEFT, self.spec, 0.25)
        right = step(self.state, Action.TURN_RIGHT, self.spec, 0.25)
        self.assertGreater(left.heading, 0.0)
        self.assertAlmostEqual(left.heading, -right.heading)
        expected = 4.0 / self.spec.wheelbase * math.tan(self.spec.max_steer) * 0.25
        self.assertAlmostEqual(left.heading, expected)

    def test_negative_or_nan_dt_is_treated_as_zero(self) -> None:
        for dt in (-1.0, float("nan"), float("inf")):
            nxt = step(self.state, Action.ACCELERATE, self.spec, dt)
            self.assertEqual((nxt.x, nxt.y, nxt.speed, nxt.timestamp), (0.0, 0.0, 4.0, 0.0))

    def test_nan_speed_becomes_zero(self) -> None:
        nxt = step(State(1.0, 2.0, 0.3, float("nan")), Action.MAINTAIN, self.spec, 0.5)
        self.assertTrue(nxt.is_finite())
        self.assertEqual((nxt.x, nxt.y, nxt.speed), (1.0, 2.0, 0.0))

    def test_non_finite_heading_is_read_as_zero(self) -> None:
        for heading in (float("inf"), float("-inf"), float("nan")):
            nxt = step(State(1.0, 2.0, heading, 4.0), Action.TURN_LEFT, self.spec, 0.25)
            self.assertTrue(nxt.is_finite())
            self.assertAlmostEqual(nxt.x, 2.0)
            self.assertAlmostEqual(nxt.y, 2.0)
            moved = constant_velocity(State(1.0, 2.0, heading, 4.0), 0.25)
            self.assertTrue(moved.is_finite())
            self.assertAlmostEqual(moved.x, 2.0)
        self.assertEqual(wrap_angle(float("nan")), 0.0)

    def test_heading_stays_wrapped(self) -> None:
        s = State(0.0, 0.0, math.pi - 0.01, 6.0)
        for _ in range(20):
            s = step(s, Action.TURN_LEFT, self.spec, 0.25)
            self.assertGreater(s.heading, -math.pi)
            self.assertLessEqual(s.heading, math.pi)

    def test_step_is_pure(self) -> None:
        a = step(self.state, Action.TURN_LEFT, self.spec, 0.25)
        b = step(self.state, Action.TURN_LEFT, self.spec, 0.25)
        self.assertEqual(a, b)
        self.assertEqual(self.state, State(0.0, 0.0, 0.0, 4.0))


class HelperTests(unittest.TestCase):
    def test_priority_order(self) -> None:
        self.assertEqual(
            ACTION_PRIORITY,
            (Action.MAINTAIN, Action.ACCELERATE, Action.DECELERATE,
             Action.TURN_LEFT, Action.TURN_RIGHT, Action.BRAKE),
        )
        self.assertEqual(Action.TURN_LEFT.label, "TURN LEFT")

    def test_wrap_angle(self) -> None:
        self.assertAlmostEqual(wrap_angle(3 * math.pi / 2), -math.pi / 2)
        self.assertAlmostEqual(wrap_angle(-math.pi), math.pi)

    def test_park_and_constant_velocity(self) -> None:
        s = State(1.0, 1.0, math.pi / 2, 3.0, 2.0)
        parked = park(s, 0.5)
        self.assertEqual((parked.x, parked.y, parked.speed), (1.0, 1.0, 0.0))
        self.assertAlmostEqual(parked.timestamp, 2.5)
        moved = constant_velocity(s, 1.0)
        self.assertAlmostEqual(moved.x, 1.0)
        self.assertAlmostEqual(moved.y, 4.0)
        self.assertEqual(moved.speed, 3.0)


class EnvTests(unittest.TestCase):
    def setUp(self) -> None:
        self.env = EnvCrossroads(map_size=25.0, lane_width=4.0)

    def test_drivable_area_is_the_cross(self) -> None:
        self.assertTrue(self.env.is_drivable(2.0, -20.0))
        self.assertTrue(self.env.is_drivable(-20.0, 3.9))
        self.assertTrue(self.env.is_drivable(0.0, 0.0))
        self.assertFalse(self.env.is_drivable(10.0, 10.0))
        self.assertFalse(self.env.is_drivable(0.0, 26.0))
        self.assertFalse(self.env.is_drivable(float("nan"), 0.0))

    def test_rendering_geometry(self) -> None:
        self.assertEqual(len(self.env.road_edges()), 8)
        self.assertEqual(len(self.env.centre_lines()), 4)


if __name__ == "__main__":
    unittest.main()
