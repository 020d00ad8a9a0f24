"""
planner/levelk.py
=================
Recursive level-k prediction of the other vehicles.

A level-0 planner assumes everybody else keeps driving straight at the
current speed.  A level-k planner (k >= 1) assumes every other vehicle is
itself a level-(k-1) planner: it runs a reduced search *as that vehicle*,
against that vehicle's own opponents predicted one level lower, and uses
the resulting principal variation as the expected trajectory.  The
recursion bottoms out at level 0 so its depth is bounded by the level.

The search routine is passed in by the caller so this module does not
depend on the tree-search engine.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from planner.reward import Prediction
from sim.physics import Action, State, constant_velocity, park, step
from sim.settings import SimulationConfig
from sim.vehicle import AgentView

log = logging.getLogger("levelk")

SearchFn = Callable[
    [AgentView, Sequence[Prediction], SimulationConfig, int, str],
    Sequence[State],
]
"""``search(view, opponents, config, budget, rng_key) -> principal variation``."""


def _horizon(config: SimulationConfig) -> int:
    return config.planner.max_step


def constant_velocity_prediction(view: AgentView, config: SimulationConfig) -> Prediction:
    """Non-reacting straight-line trajectory (level-0 model)."""
    states = [view.state]
    for _ in range(_horizon(config)):
        states.append(constant_velocity(states[-1], config.delta_t))
    return Prediction(view.name, view.spec, tuple(states))


def parked_prediction(view: AgentView, config: SimulationConfig) -> Prediction:
    """Vehicle that already reached its goal stays where it is."""
    states = [view.state]
    for _ in range(_horizon(config)):
        states.append(park(states[-1], config.delta_t))
    return Prediction(view.name, view.spec, tuple(states))


def pad_trajectory(
    states: Sequence[State], view: AgentView, config: SimulationConfig
) -> Tuple[State, ...]:
    """Extend a principal variation to the full horizon with MAINTAIN steps."""
    out: List[State] = list(states) or [view.state]
    while len(out) < _horizon(config) + 1:
        out.append(step(out[-1], Action.MAINTAIN, view.spec, config.delta_t))
    return tuple(out)


def predict_others(
    ego: AgentView,
    others: Sequence[AgentView],
    level: int,
    config: SimulationConfig,
    key: str,
    search: SearchFn,
) -> Tuple[Prediction, ...]:
    """Expected trajectories of *others* as seen by a level-*level* *ego*.

    Parameters
    ----------
    ego : AgentView
        The vehicle doing the predicting (excluded from the result).
    others : sequence of AgentView
        Every other vehicle of the snapshot.
    level : int
        Reasoning level of *ego*.
    config : SimulationConfig
        Shared configuration.
    key : str
        RNG key of the caller; nested searches extend it.
    search : SearchFn
        Routine used to plan on behalf of a modelled opponent.
    """
    predictions: List[Prediction] = []
    for other in others:
        if other.name == ego.name:
            continue
        if other.goal_reached:
            predictions.append(parked_prediction(other, config))
            continue
        if level <= 0:
            predictions.append(constant_velocity_prediction(other, config))
            continue

        sub_level = level - 1
        sub_key = f"{key}/{other.name}@{sub_level}"
        opponents = sorted(
            [ego] + [o for o in others if o.name not in (ego.name, other.name)],
            key=lambda v: v.index,
        )
        opponent_predictions = predict_others(
            other, opponents, sub_level, config, sub_key, search
        )
        pv = search(
            other,
            opponent_predictions,
            config,
            config.planner.prediction_budget,
            sub_key,
        )
        log.debug(
            "%s models %s as level %d: %d predicted steps",
            ego.name, other.name, sub_level, len(pv) - 1,
        )
        predictions.append(
            Prediction(other.name, other.spec, pad_trajectory(pv, other, config))
        )
    return tuple(predictions)
