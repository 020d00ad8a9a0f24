#!/usr/bin/env python3
"""
sim/vehicle.py
==============
Vehicle entities of the crossroads experiment.

:class:`Agent` is the mutable record owned by the orchestrator: current
state, committed action, footprint history and the goal latch.
:class:`AgentView` is the frozen snapshot of one agent taken at the start
of a tick; planners only ever see views, never agents.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from sim.physics import Action, Pose, State, VehicleSpec
from sim.settings import AgentConfig, ColorRGB, ResetNoise

log = logging.getLogger("vehicle")


@dataclass(frozen=True)
class AgentView:
    """Read-only snapshot of one agent for one tick."""

    name: str
    index: int
    state: State
    goal: Pose
    level: int
    spec: VehicleSpec
    goal_reached: bool = False


@dataclass
class Agent:
    """A vehicle taking part in the rounds.

    Attributes
    ----------
    index : int
        Position in the scenario's vehicle list.
    name : str
        Unique name from the configuration (e.g. ``vehicle_0``).
    spec : VehicleSpec
        Geometry and kinematic limits.
    initial_state : State
        Start state of every round before reset noise.
    goal : Pose
        Target pose.
    level : int
        Reasoning level of the planner driving this vehicle.
    color : tuple
        RGB display colour.
    state : State
        The single current state.
    cur_action : Action
        Manoeuvre committed on the last tick.
    expected_traj : list of State
        Principal variation of the last search (display only).
    footprint : list of State
        Every committed state of the current round, in order.
    goal_reached : bool
        Latched once the goal is reached; cleared by :meth:`reset`.
    """

    index: int
    name: str
    spec: VehicleSpec
    initial_state: State
    goal: Pose
    level: int = 0
    color: ColorRGB = (86, 168, 255)
    state: State = field(init=False)
    cur_action: Action = Action.MAINTAIN
    expected_traj: List[State] = field(default_factory=list, repr=False)
    footprint: List[State] = field(default_factory=list, repr=False)
    goal_reached: bool = False

    def __post_init__(self) -> None:
        self.state = self.initial_state
        if not self.footprint:
            self.footprint = [self.state]

    @classmethod
    def from_config(cls, index: int, cfg: AgentConfig, spec: VehicleSpec) -> "Agent":
        return cls(
            index=index,
            name=cfg.name,
            spec=spec,
            initial_state=cfg.initial_state,
            goal=cfg.goal,
            level=cfg.level,
            color=cfg.color,
        )

    # ── round lifecycle ───────────────────────────────────────────────────

    def reset(self, rng: Optional[random.Random] = None, noise: Optional[ResetNoise] = None) -> None:
        """Back to the initial state, optionally perturbed.

        The position is shifted along the initial heading and the speed is
        changed by uniform amounts bounded by *noise*; the speed stays in
        ``[0, max_speed]``.
        """
        start = self.initial_state
        if rng is not None and noise is not None and (noise.position > 0 or noise.speed > 0):
            shift = rng.uniform(-noise.position, noise.position)
            dv = rng.uniform(-noise.speed, noise.speed)
            start = replace(
                start,
                x=start.x + shift * math.cos(start.heading),
                y=start.y + shift * math.sin(start.heading),
                speed=min(max(start.speed + dv, 0.0), self.spec.max_speed),
            )
        self.state = replace(start, timestamp=0.0)
        self.cur_action = Action.MAINTAIN
        self.expected_traj = [self.state]
        self.footprint = [self.state]
        self.goal_reached = False

    def view(self) -> AgentView:
        return AgentView(
            name=self.name,
            index=self.index,
            state=self.state,
            goal=self.goal,
            level=self.level,
            spec=self.spec,
            goal_reached=self.goal_reached,
        )

    def commit(
        self,
        action: Action,
        state: State,
        expected: Sequence[State] = (),
    ) -> None:
        """Install the next state; called exactly once per agent per tick."""
        self.cur_action = action
        self.state = state
        self.footprint.append(state)
        if expected:
            self.expected_traj = list(expected)
        else:
            self.expected_traj = [state]

    def latch_goal(self) -> None:
        if not self.goal_reached:
            log.debug("%s reached its goal at t=%.2f", self.name, self.state.timestamp)
        self.goal_reached = True


def snapshot(agents: Sequence[Agent]) -> Tuple[AgentView, ...]:
    """Frozen views of every agent, in index order."""
    return tuple(agent.view() for agent in agents)
