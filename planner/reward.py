"""
planner/reward.py
=================
Per-transition reward used by the tree search, and the predicted
trajectories of the other vehicles it is scored against.

Every transition is classified as one of

* ``invalid``   – non-finite state, off the map or off the road
* ``collision`` – body rectangles overlap a predicted opponent
* ``goal``      – the ego reached its goal
* ``step``      – anything else

The first three are terminal for a rollout.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from sim.collision import collides, goal_distance
from sim.env import EnvCrossroads
from sim.physics import Action, Pose, State, VehicleSpec, wrap_angle
from sim.settings import SimulationConfig


@dataclass(frozen=True)
class Prediction:
    """Expected states of one other vehicle, indexed by search depth.

    ``states[0]`` is the snapshot state; depths past the end of the tuple
    reuse the last state.
    """

    name: str
    spec: VehicleSpec
    states: Tuple[State, ...]

    def at(self, depth: int) -> State:
        return self.states[min(max(depth, 0), len(self.states) - 1)]


@dataclass(frozen=True)
class Transition:
    reward: float
    terminal: bool
    kind: str


def is_valid(state: State, env: EnvCrossroads) -> bool:
    """A state the ego may occupy: finite, on the map and on the road."""
    return state.is_finite() and env.is_drivable(state.x, state.y)


def heading_error(state: State, goal: Pose) -> float:
    bearing = math.atan2(goal.y - state.y, goal.x - state.x)
    return abs(wrap_angle(bearing - state.heading))


def transition_reward(
    prev: State,
    nxt: State,
    action: Action,
    spec: VehicleSpec,
    goal: Pose,
    others: Sequence[Prediction],
    depth: int,
    config: SimulationConfig,
) -> Transition:
    """Undiscounted reward of the move ``prev -> nxt``.

    Parameters
    ----------
    prev, nxt : State
        Ego state before and after the step.
    action : Action
        The manoeuvre that produced *nxt*.
    spec : VehicleSpec
        Ego geometry and limits.
    goal : Pose
        Ego goal.
    others : sequence of Prediction
        Opponents; each is evaluated at *depth*.
    depth : int
        Search depth of *nxt*.
    config : SimulationConfig
        Supplies the weights, the map and the goal tolerance.
    """
    w = config.planner.weights
    if not is_valid(nxt, config.env):
        return Transition(-w.off_road, True, "invalid")

    for other in others:
        if collides(nxt, spec, other.at(depth), other.spec):
            return Transition(-w.collision, True, "collision")

    d_prev = goal_distance(prev, goal)
    d_next = goal_distance(nxt, goal)
    scale = max(spec.max_speed * config.delta_t, 1e-9)
    reward = w.progress * (d_prev - d_next) / scale

    if d_next <= config.goal_tolerance:
        return Transition(reward + w.goal, True, "goal")

    reward -= w.heading * heading_error(nxt, goal)
    if action is Action.BRAKE:
        reward -= w.comfort
    if any(collides(nxt, spec, o.at(depth), o.spec, safe=True) for o in others):
        reward -= w.proximity
    return Transition(reward, False, "step")
