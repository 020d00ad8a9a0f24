#!/usr/bin/env python3
"""
planner/mcts.py
===============
Per-vehicle Monte Carlo tree search.

Entry points
------------
* :func:`decide` – full decision for one vehicle: predicts the others with
  the level-k model, searches, and returns the chosen manoeuvre together
  with the expected trajectory.
* :func:`plan`   – the chosen :class:`~sim.physics.Action` only.

Both read nothing but the frozen :class:`~sim.vehicle.AgentView` snapshot
and the immutable configuration, and every call owns its own node arena
and random generator.  Given the same snapshot, configuration, seed and
tick they return the same result on any thread.

One iteration
-------------
1. **Selection** – descend through fully expanded nodes by UCB.
2. **Expansion** – add the first untried valid manoeuvre as a child.
3. **Simulation** – roll out with the default policy to ``max_step``.
4. **Backpropagation** – add the path return to every node up to the root.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from planner.levelk import predict_others
from planner.reward import Prediction, is_valid, transition_reward
from planner.tree import SearchNode, SearchTree
from sim.physics import ACTION_PRIORITY, LONGITUDINAL_ACTIONS, Action, State, step
from sim.settings import SimulationConfig
from sim.vehicle import AgentView

log = logging.getLogger("planner")


@dataclass(frozen=True)
class Decision:
    """Result of one planning call."""

    action: Action
    expected_trajectory: Tuple[State, ...]
    """Principal variation of the search, starting at the current state."""

    iterations: int
    root_visits: int
    fallback: bool = False
    """True when no viable manoeuvre was found and the fallback was used."""


class MonteCarloTreeSearch:
    """One search for one vehicle against fixed opponent predictions.

    Parameters
    ----------
    ego : AgentView
        The searching vehicle.
    predictions : sequence of Prediction
        Expected trajectories of every other vehicle.
    config : SimulationConfig
        Shared, immutable configuration.
    rng : random.Random
        Generator owned by this search (rollout noise only).
    """

    def __init__(
        self,
        ego: AgentView,
        predictions: Sequence[Prediction],
        config: SimulationConfig,
        rng: random.Random,
    ) -> None:
        self.ego = ego
        self.predictions = tuple(predictions)
        self.config = config
        self.rng = rng
        self._env = config.env
        self._planner = config.planner
        self.iterations = 0
        self.tree = SearchTree(ego.state)
        self._prepare(self.tree.root)

    # ── helpers ───────────────────────────────────────────────────────────

    def _discount(self, depth: int) -> float:
        return self._planner.discount_factor ** depth

    def _prepare(self, node: SearchNode) -> None:
        """Fill the untried list; a node with no valid manoeuvre is a dead end."""
        if node.terminal or node.depth >= self._planner.max_step:
            return
        for action in ACTION_PRIORITY:
            nxt = step(node.state, action, self.ego.spec, self.config.delta_t)
            if is_valid(nxt, self._env):
                node.untried.append((action, nxt))
        if not node.untried:
            node.terminal = True
            node.reward -= self._discount(node.depth) * self._planner.weights.off_road

    def _score(self, prev: State, nxt: State, action: Action, depth: int):
        return transition_reward(
            prev, nxt, action, self.ego.spec, self.ego.goal,
            self.predictions, depth, self.config,
        )

    def _default_action(self) -> Action:
        noise = self._planner.rollout_noise
        if noise > 0.0 and self.rng.random() < noise:
            return self.rng.choice(LONGITUDINAL_ACTIONS)
        return Action.MAINTAIN

    # ── the four phases ───────────────────────────────────────────────────

    def _select(self) -> SearchNode:
        node = self.tree.root
        c = self._planner.exploration_constant
        while (
            not node.terminal
            and node.depth < self._planner.max_step
            and node.fully_expanded
            and node.children
        ):
            node = self.tree.ucb_child(node, c)
        return node

    def _expand(self, node: SearchNode) -> SearchNode:
        action, nxt = node.untried.pop(0)
        outcome = self._score(node.state, nxt, action, node.depth + 1)
        child = self.tree.add_child(
            node,
            action,
            nxt,
            reward=self._discount(node.depth) * outcome.reward,
            terminal=outcome.terminal,
        )
        self._prepare(child)
        return child

    def _rollout(self, node: SearchNode) -> float:
        total = 0.0
        state = node.state
        for depth in range(node.depth, self._planner.max_step):
            action = self._default_action()
            nxt = step(state, action, self.ego.spec, self.config.delta_t)
            outcome = self._score(state, nxt, action, depth + 1)
            total += self._discount(depth) * outcome.reward
            if outcome.terminal:
                break
            state = nxt
        return total

    def iterate(self) -> None:
        node = self._select()
        if not node.terminal and node.untried:
            node = self._expand(node)
        value = self.tree.path_reward(node.index)
        if not node.terminal and node.depth < self._planner.max_step:
            value += self._rollout(node)
        self.tree.backpropagate(node.index, value)
        self.iterations += 1

    def run(self, budget: int, time_budget_s: Optional[float] = None) -> SearchTree:
        """Run up to *budget* iterations (stopping early at the wall-clock budget)."""
        deadline = time.monotonic() + time_budget_s if time_budget_s else None
        for _ in range(max(budget, 0)):
            if deadline is not None and time.monotonic() >= deadline:
                break
            self.iterate()
        return self.tree


def rng_key(config: SimulationConfig, agent: str, tick: int) -> str:
    return f"{config.random_seed}:{agent}:{tick}"


def principal_variation(
    view: AgentView,
    predictions: Sequence[Prediction],
    config: SimulationConfig,
    budget: int,
    key: str,
) -> List[State]:
    """Reduced search on behalf of a modelled opponent."""
    search = MonteCarloTreeSearch(view, predictions, config, random.Random(key))
    search.run(budget, config.planner.time_budget_s)
    return search.tree.principal_variation()


def decide(
    ego: AgentView,
    others: Sequence[AgentView],
    config: SimulationConfig,
    tick: int = 0,
) -> Decision:
    """Choose the manoeuvre of *ego* for the next step.

    Parameters
    ----------
    ego : AgentView
        Snapshot of the planning vehicle.
    others : sequence of AgentView
        Snapshot of every vehicle (the ego may be included; it is skipped).
    config : SimulationConfig
        Shared configuration.
    tick : int
        Tick index within the round; part of the RNG key.

    Returns
    -------
    Decision
        The most visited root manoeuvre, or the configured fallback when
        the root has no children (zero budget, zero depth, dead end).
    """
    fallback = config.planner.fallback_action
    if ego.goal_reached:
        return Decision(fallback, (ego.state,), 0, 0, fallback=True)

    key = rng_key(config, ego.name, tick)
    predictions = predict_others(
        ego, others, ego.level, config, key, principal_variation
    )
    search = MonteCarloTreeSearch(ego, predictions, config, random.Random(key))
    tree = search.run(config.planner.computation_budget, config.planner.time_budget_s)

    action = tree.best_root_action()
    if action is None:
        log.debug(
            "%s tick %d: no viable manoeuvre after %d iterations, using %s",
            ego.name, tick, search.iterations, fallback.label,
        )
        return Decision(fallback, (ego.state,), search.iterations, tree.root.visits, fallback=True)

    log.debug(
        "%s (level %d) tick %d: %s after %d iterations, %d nodes",
        ego.name, ego.level, tick, action.label, search.iterations, len(tree),
    )
    return Decision(
        action=action,
        expected_trajectory=tuple(tree.principal_variation()),
        iterations=search.iterations,
        root_visits=tree.root.visits,
    )


def plan(
    ego: AgentView,
    others: Sequence[AgentView],
    config: SimulationConfig,
    tick: int = 0,
) -> Action:
    """Shorthand for ``decide(...).action``."""
    return decide(ego, others, config, tick).action
