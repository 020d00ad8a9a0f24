#!/usr/bin/env python3
"""
sim/orchestrator.py
===================
Bulk-synchronous round loop.

Every tick the orchestrator

1. freezes one :class:`~sim.vehicle.AgentView` per agent,
2. submits one planning task per active agent to a bounded thread pool,
3. waits for every task (barrier),
4. commits each agent's new state exactly once,
5. validates the committed states, latches goals and publishes a
   :class:`~telemetry.message.TickRecord`.

Planning tasks share only immutable data (the snapshot tuple and the
configuration) and each writes a single slot of the result list, so no
locks are needed.  Simulated time advances only after the commit.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from planner.mcts import Decision, decide
from sim.collision import first_collision, reached_goal, within_goal
from sim.physics import Action, park, step
from sim.settings import ConfigError, SimulationConfig
from sim.stats import ExperimentSummary, RoundOutcome, RoundResult
from sim.vehicle import Agent, AgentView, snapshot
from telemetry import (
    TOPIC_ROUND_END,
    TOPIC_ROUND_START,
    TOPIC_TICK,
    RoundRecord,
    TelemetryBus,
    TickRecord,
    agent_frames,
)

log = logging.getLogger("orchestrator")

Planner = Callable[
    [AgentView, Sequence[AgentView], SimulationConfig, int],
    Union[Decision, Action],
]

__all__ = [
    "InvariantViolation",
    "Planner",
    "RoundOutcome",
    "RoundResult",
    "TickOrchestrator",
]


class InvariantViolation(RuntimeError):
    """A committed state is non-finite or outside the map."""


class TickOrchestrator:
    """Runs rounds of the crossroads experiment.

    Parameters
    ----------
    config : SimulationConfig
        Immutable configuration shared by every planning task.
    bus : TelemetryBus or None
        Receives ``round.start``, ``tick.state`` and ``round.end``.
    planner : callable
        ``planner(ego, snapshot, config, tick)`` returning a
        :class:`~planner.mcts.Decision` (or a bare ``Action``).
    workers : int or None
        Pool size; defaults to ``config.workers``, then to one thread per
        agent.
    """

    def __init__(
        self,
        config: SimulationConfig,
        bus: Optional[TelemetryBus] = None,
        planner: Planner = decide,
        workers: Optional[int] = None,
    ) -> None:
        if not config.agents:
            raise ConfigError("the scenario has no vehicles")
        self.config = config
        self.bus = bus
        self.planner = planner
        self.agents: List[Agent] = [
            Agent.from_config(i, agent_cfg, config.vehicle)
            for i, agent_cfg in enumerate(config.agents)
        ]
        self.workers = max(1, workers or config.workers or len(self.agents))
        self._pool = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="planner"
        )
        self._env = config.env
        self.time = 0.0
        self.collision: Optional[Tuple[str, str]] = None
        self._rounds_total = 0

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> "TickOrchestrator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ── Round loop ────────────────────────────────────────────────────────────

    def reset_round(self, index: int) -> None:
        """Put every agent back at its (optionally perturbed) start."""
        rng = random.Random(f"{self.config.random_seed}:reset:{index}")
        for agent in self.agents:
            agent.reset(rng, self.config.reset_noise)
            if within_goal(agent.state, agent.goal, self.config.goal_tolerance):
                agent.latch_goal()
        self.time = 0.0
        self.collision = None

    def classify(self) -> Optional[RoundOutcome]:
        """Outcome of the round in its current state, or *None* while running."""
        tol = self.config.goal_tolerance
        if all(reached_goal(agent, tol) for agent in self.agents):
            return RoundOutcome.SUCCEEDED
        pair = first_collision(self.agents)
        if pair is not None:
            self.collision = pair
            return RoundOutcome.COLLIDED
        if self.time > self.config.max_simulation_time:
            return RoundOutcome.TIMED_OUT
        return None

    def tick(self, round_index: int, tick_index: int) -> None:
        """Plan for every active agent in parallel, then commit all at once."""
        cfg = self.config
        dt = cfg.delta_t
        views = snapshot(self.agents)

        futures: Dict[int, Future] = {}
        for agent, view in zip(self.agents, views):
            if agent.goal_reached:
                continue
            futures[agent.index] = self._pool.submit(
                self.planner, view, views, cfg, tick_index
            )

        # Barrier: every task finishes before anything is committed.
        decisions: List[Optional[Decision]] = [None] * len(self.agents)
        for index, future in futures.items():
            decisions[index] = _as_decision(future.result(), views[index])

        for agent, decision in zip(self.agents, decisions):
            if decision is None:
                agent.commit(Action.BRAKE, park(agent.state, dt))
            else:
                agent.commit(
                    decision.action,
                    step(agent.state, decision.action, agent.spec, dt),
                    decision.expected_trajectory,
                )
            self._validate(agent)

        self.time += dt
        for agent in self.agents:
            if not agent.goal_reached and within_goal(agent.state, agent.goal, cfg.goal_tolerance):
                agent.latch_goal()

        if log.isEnabledFor(logging.DEBUG):
            for agent in self.agents:
                s = agent.state
                log.debug(
                    "round %d tick %d  %s  pos=(%.2f,%.2f) head=%.2f v=%.2f action=%s goal=%s",
                    round_index, tick_index, agent.name, s.x, s.y, s.heading, s.speed,
                    agent.cur_action.label, agent.goal_reached,
                )

        self._publish(
            TOPIC_TICK,
            TickRecord(
                round_index=round_index,
                rounds=self._rounds_total,
                tick=tick_index,
                time=self.time,
                agents=agent_frames(self.agents, with_history=False),
            ),
        )

    def run_round(self, index: int) -> RoundResult:
        """Play one round to its single outcome."""
        t0 = time.perf_counter()
        self.reset_round(index)
        log.info("================== Round %d ==================", index)
        for agent in self.agents:
            s = agent.state
            log.info(
                "%s >>> init_x: %.2f, init_y: %.2f, init_v: %.2f",
                agent.name, s.x, s.y, s.speed,
            )
        self._publish(
            TOPIC_ROUND_START,
            RoundRecord(
                round_index=index,
                rounds=self._rounds_total,
                agents=agent_frames(self.agents, with_history=False),
            ),
        )

        ticks = 0
        outcome = self.classify()
        while outcome is None:
            self.tick(index, ticks)
            ticks += 1
            outcome = self.classify()

        wall = time.perf_counter() - t0
        result = RoundResult(
            index=index,
            outcome=outcome,
            sim_time=self.time,
            wall_time=wall,
            ticks=ticks,
            collision=self.collision if outcome is RoundOutcome.COLLIDED else None,
        )
        if outcome is RoundOutcome.COLLIDED:
            log.warning("Round %d: collision between %s and %s", index, *self.collision)
        log.info(
            "Round %d %s, simulation time: %.3f s, actual timecost: %.3f s",
            index, outcome.value, self.time, wall,
        )
        self._publish(
            TOPIC_ROUND_END,
            RoundRecord(
                round_index=index,
                rounds=self._rounds_total,
                agents=agent_frames(self.agents),
                outcome=outcome.value,
                time=self.time,
                collision=result.collision,
            ),
        )
        return result

    def run(self, rounds: int) -> ExperimentSummary:
        """Play rounds ``1..rounds`` and summarise them.

        Raises
        ------
        ConfigError
            If *rounds* is not positive.
        """
        if rounds <= 0:
            raise ConfigError(f"number of rounds must be positive, got {rounds}")
        self._rounds_total = rounds
        summary = ExperimentSummary()
        for index in range(1, rounds + 1):
            summary.add(self.run_round(index))
        log.info(summary.describe())
        log.info(
            "Outcomes: %s",
            ", ".join(f"{o.value} {n}" for o, n in summary.outcome_counts().items()),
        )
        return summary

    # ── helpers ───────────────────────────────────────────────────────────────

    def _validate(self, agent: Agent) -> None:
        s = agent.state
        if not s.is_finite():
            raise InvariantViolation(f"{agent.name}: non-finite state {s}")
        if not self._env.in_bounds(s.x, s.y):
            raise InvariantViolation(
                f"{agent.name}: left the map at ({s.x:.2f}, {s.y:.2f})"
            )

    def _publish(self, topic: str, record) -> None:
        if self.bus is not None:
            self.bus.publish(topic, "orchestrator", record)


def _as_decision(result: Union[Decision, Action], view: AgentView) -> Decision:
    if isinstance(result, Decision):
        return result
    return Decision(action=result, expected_trajectory=(view.state,), iterations=0, root_visits=0)
