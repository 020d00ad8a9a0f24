#!/usr/bin/env python3
"""
sim/physics.py
==============
Vehicle state, discrete manoeuvres and the one-step kinematic transition
shared by the planner rollouts and the committed simulation step.

:func:`step` is a pure function of ``(state, action, spec, dt)``; keeping it
free of hidden state is what lets a search rollout and the orchestrator's
commit produce identical motion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Tuple


class Action(Enum):
    """Discrete manoeuvres, declared in tie-break priority order."""

    MAINTAIN = 0
    ACCELERATE = 1
    DECELERATE = 2
    TURN_LEFT = 3
    TURN_RIGHT = 4
    BRAKE = 5

    @property
    def label(self) -> str:
        return _ACTION_LABELS[self]


_ACTION_LABELS: Dict[Action, str] = {
    Action.MAINTAIN: "MAINTAIN",
    Action.ACCELERATE: "ACCELERATE",
    Action.DECELERATE: "DECELERATE",
    Action.TURN_LEFT: "TURN LEFT",
    Action.TURN_RIGHT: "TURN RIGHT",
    Action.BRAKE: "BRAKE",
}

ACTION_PRIORITY: Tuple[Action, ...] = tuple(Action)

# Longitudinal manoeuvres used by the cheap rollout policy.
LONGITUDINAL_ACTIONS: Tuple[Action, ...] = (
    Action.MAINTAIN,
    Action.ACCELERATE,
    Action.DECELERATE,
)


@dataclass(frozen=True)
class State:
    """Kinematic state of one vehicle at one simulated instant.

    Attributes
    ----------
    x, y : float
        Position of the vehicle centre in metres (origin = crossroads centre).
    heading : float
        Yaw in radians, counter-clockwise from +x, wrapped to ``(-pi, pi]``.
    speed : float
        Scalar forward speed in m/s.
    timestamp : float
        Simulated time in seconds.
    """

    x: float
    y: float
    heading: float
    speed: float
    timestamp: float = 0.0

    def is_finite(self) -> bool:
        return all(
            math.isfinite(v) for v in (self.x, self.y, self.heading, self.speed, self.timestamp)
        )


@dataclass(frozen=True)
class Pose:
    """Goal pose: position and desired heading."""

    x: float
    y: float
    heading: float = 0.0


@dataclass(frozen=True)
class VehicleSpec:
    """Kinematic limits and footprint geometry of a vehicle class."""

    length: float = 5.0
    width: float = 2.0
    wheelbase: float = 2.8
    max_speed: float = 6.0
    """Upper speed clamp in m/s."""

    max_acceleration: float = 2.0
    """Acceleration (and gentle deceleration) magnitude in m/s²."""

    max_deceleration: float = 4.0
    """Hard-brake magnitude in m/s²."""

    max_steer: float = 0.5
    """Maximum front-wheel steering angle in radians."""

    safe_length: float = 8.0
    """Length of the safety envelope used for the proximity penalty."""

    safe_width: float = 2.4
    """Width of the safety envelope used for the proximity penalty."""


def wrap_angle(angle: float) -> float:
    """Wrap *angle* into ``(-pi, pi]``; a non-finite angle becomes 0."""
    if not math.isfinite(angle):
        return 0.0
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    if wrapped <= -math.pi:
        wrapped += 2.0 * math.pi
    return wrapped


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``; NaN collapses to *low*."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def controls(action: Action, spec: VehicleSpec) -> Tuple[float, float]:
    """Map *action* to ``(acceleration m/s², steering angle rad)``."""
    if action is Action.ACCELERATE:
        return spec.max_acceleration, 0.0
    if action is Action.DECELERATE:
        return -spec.max_acceleration, 0.0
    if action is Action.BRAKE:
        return -spec.max_deceleration, 0.0
    if action is Action.TURN_LEFT:
        return 0.0, spec.max_steer
    if action is Action.TURN_RIGHT:
        return 0.0, -spec.max_steer
    return 0.0, 0.0


def step(state: State, action: Action, spec: VehicleSpec, dt: float) -> State:
    """Advance *state* by one time step under *action*.

    Kinematic bicycle model, explicit Euler: position moves with the
    current heading and speed, then heading and speed are updated.

    Out-of-range inputs are clamped rather than rejected: a negative or
    non-finite *dt* becomes zero, the incoming speed is clamped to
    ``[0, max_speed]``, steering to ``±max_steer`` and a non-finite
    heading is read as 0.

    Parameters
    ----------
    state : State
        Current state (not modified).
    action : Action
        Manoeuvre to apply for the whole step.
    spec : VehicleSpec
        Kinematic limits.
    dt : float
        Step length in seconds.

    Returns
    -------
    State
        The state after ``dt`` seconds.
    """
    if not math.isfinite(dt) or dt < 0.0:
        dt = 0.0
    accel, steer = controls(action, spec)
    steer = clamp(steer, -spec.max_steer, spec.max_steer)
    v = clamp(state.speed, 0.0, spec.max_speed)
    theta = wrap_angle(state.heading)
    wheelbase = max(1e-3, spec.wheelbase)

    x = state.x + v * math.cos(theta) * dt
    y = state.y + v * math.sin(theta) * dt
    heading = wrap_angle(theta + v / wheelbase * math.tan(steer) * dt)
    speed = clamp(v + accel * dt, 0.0, spec.max_speed)
    return State(x=x, y=y, heading=heading, speed=speed, timestamp=state.timestamp + dt)


def park(state: State, dt: float) -> State:
    """Post-goal hold: same pose, zero speed, time advanced by *dt*."""
    if not math.isfinite(dt) or dt < 0.0:
        dt = 0.0
    return replace(state, speed=0.0, timestamp=state.timestamp + dt)


def constant_velocity(state: State, dt: float) -> State:
    """Straight-line, non-reacting prediction step (no speed clamp)."""
    if not math.isfinite(dt) or dt < 0.0:
        dt = 0.0
    theta = wrap_angle(state.heading)
    return State(
        x=state.x + state.speed * math.cos(theta) * dt,
        y=state.y + state.speed * math.sin(theta) * dt,
        heading=theta,
        speed=state.speed,
        timestamp=state.timestamp + dt,
    )
