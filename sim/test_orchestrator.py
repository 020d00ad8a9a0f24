#!/usr/bin/env python3
"""
Round-loop tests: scenario outcomes, determinism, goal latch and
invariant checks of the tick orchestrator.
"""

from __future__ import annotations

import math
import unittest
from typing import Any, Dict, List

from sim.orchestrator import InvariantViolation, RoundOutcome, TickOrchestrator
from sim.physics import Action
from sim.settings import ConfigError, config_from_dict
from telemetry import TOPIC_ROUND_END, TOPIC_ROUND_START, TOPIC_TICK, TelemetryBus

NORTH = math.pi / 2
SOUTH = -math.pi / 2


def _config(vehicles: Dict[str, Any], **overrides: Any):
    data: Dict[str, Any] = {
        "delta_t": 0.25,
        "max_simulation_time": 20.0,
        "map_size": 25.0,
        "lane_width": 4.0,
        "goal_tolerance": 2.0,
        "random_seed": 3,
        "planner": {"computation_budget": 80, "prediction_budget": 20, "max_step": 5},
        "vehicle_list": vehicles,
    }
    data.update(overrides)
    return config_from_dict(data)


def _opposite_lanes(**overrides: Any):
    return _config(
        {
            "vehicle_0": {"init": [2.0, -20.0, NORTH, 4.0], "target": [2.0, 20.0, NORTH]},
            "vehicle_1": {"init": [-2.0, 20.0, SOUTH, 4.0], "target": [-2.0, -20.0, SOUTH]},
        },
        **overrides,
    )


def _left_turn(**overrides: Any):
    return _config(
        {
            "vehicle_0": {"init": [2.0, -20.0, NORTH, 4.0], "target": [-20.0, 2.0, math.pi], "level": 2},
            "vehicle_1": {"init": [-2.0, 20.0, SOUTH, 4.0], "target": [-2.0, -20.0, SOUTH], "level": 1},
        },
        **overrides,
    )


def _always(action: Action, calls: List[str] = None):
    def planner(ego, views, config, tick):
        if calls is not None:
            calls.append(ego.name)
        return action
    return planner


class ScenarioTests(unittest.TestCase):
    def test_opposite_lanes_succeed(self) -> None:
        with TickOrchestrator(_opposite_lanes()) as orch:
            result = orch.run_round(1)
        self.assertEqual(result.outcome, RoundOutcome.SUCCEEDED)
        self.assertLessEqual(result.sim_time, 20.0)
        self.assertTrue(all(agent.goal_reached for agent in orch.agents))

    def test_level_zero_with_aggressive_goals_collides(self) -> None:
        # Both drivers value progress only and assume the other keeps going.
        cfg = _config(
            {
                "vehicle_0": {"init": [0.0, -12.0, NORTH, 6.0], "target": [0.0, 20.0, NORTH]},
                "vehicle_1": {"init": [-12.0, 0.0, 0.0, 6.0], "target": [20.0, 0.0, 0.0]},
            },
            max_simulation_time=10.0,
            planner={
                "computation_budget": 40,
                "prediction_budget": 10,
                "max_step": 4,
                "weights": {"progress": 5.0, "collision": 0.0, "proximity": 0.0},
            },
        )
        self.assertEqual([a.level for a in cfg.agents], [0, 0])
        with TickOrchestrator(cfg) as orch:
            result = orch.run_round(1)
        self.assertEqual(result.outcome, RoundOutcome.COLLIDED)
        self.assertEqual(result.collision, ("vehicle_0", "vehicle_1"))
        self.assertLess(result.sim_time, cfg.max_simulation_time)

    def test_zero_depth_commits_the_fallback(self) -> None:
        cfg = _left_turn(planner={"max_step": 0})
        with TickOrchestrator(cfg) as orch:
            orch.reset_round(1)
            for tick in range(3):
                orch.tick(1, tick)
                self.assertEqual([a.cur_action for a in orch.agents], [Action.BRAKE, Action.BRAKE])

    def test_zero_rounds_is_a_config_error(self) -> None:
        with TickOrchestrator(_opposite_lanes()) as orch:
            with self.assertRaises(ConfigError):
                orch.run(0)
            with self.assertRaises(ConfigError):
                orch.run(-2)

    def test_run_summarises_every_round(self) -> None:
        cfg = _opposite_lanes(reset_noise={"position": 1.0, "speed": 0.5})
        with TickOrchestrator(cfg, planner=_always(Action.MAINTAIN)) as orch:
            with self.assertLogs("orchestrator", level="INFO") as logs:
                summary = orch.run(3)
        self.assertEqual([r.index for r in summary.results], [1, 2, 3])
        self.assertEqual(summary.successes, 3)
        self.assertEqual(summary.success_rate, 1.0)
        self.assertIn("Experiment success 3/3(100.00%) rounds.", logs.output[-2])
        self.assertIn("Outcomes: succeeded 3, collided 0, timed out 0", logs.output[-1])

    def test_history_travels_only_with_round_end(self) -> None:
        bus = TelemetryBus()
        with TickOrchestrator(_opposite_lanes(), bus=bus, planner=_always(Action.MAINTAIN)) as orch:
            result = orch.run_round(1)
        ticks = bus.poll(TOPIC_TICK)
        self.assertTrue(all(f.footprint == () for m in ticks for f in m.payload.agents))
        self.assertTrue(all(f.footprint == () for f in bus.poll(TOPIC_ROUND_START)[0].payload.agents))
        final = bus.poll(TOPIC_ROUND_END)[0].payload
        self.assertEqual([len(f.footprint) for f in final.agents], [result.ticks + 1] * 2)


class DeterminismTests(unittest.TestCase):
    def _play(self, workers: int):
        cfg = _left_turn(
            max_simulation_time=2.0,
            planner={
                "computation_budget": 30,
                "prediction_budget": 10,
                "max_step": 3,
                "rollout_noise": 0.3,
            },
        )
        with TickOrchestrator(cfg, workers=workers) as orch:
            result = orch.run_round(1)
            tracks = [list(agent.footprint) for agent in orch.agents]
            actions = [agent.cur_action for agent in orch.agents]
        return result.outcome, result.ticks, tracks, actions

    def test_worker_count_does_not_change_the_round(self) -> None:
        self.assertEqual(self._play(1), self._play(4))

    def test_repeated_runs_are_identical(self) -> None:
        self.assertEqual(self._play(2), self._play(2))


class PostGoalTests(unittest.TestCase):
    def test_parked_agent_stays_put_and_is_not_planned(self) -> None:
        cfg = _config(
            {
                "vehicle_0": {"init": [2.0, 10.0, NORTH, 4.0], "target": [2.0, 14.0, NORTH]},
                "vehicle_1": {"init": [-2.0, 20.0, SOUTH, 2.0], "target": [-2.0, -20.0, SOUTH]},
            },
            max_simulation_time=5.0,
        )
        calls: List[str] = []
        bus = TelemetryBus()
        with TickOrchestrator(cfg, bus=bus, planner=_always(Action.MAINTAIN, calls)) as orch:
            result = orch.run_round(1)
            parked = orch.agents[0]

        self.assertEqual(result.outcome, RoundOutcome.TIMED_OUT)
        self.assertTrue(parked.goal_reached)

        ticks = [m.payload for m in bus.poll(TOPIC_TICK)]
        flags = [t.agents[0].goal_reached for t in ticks]
        first = flags.index(True)
        self.assertTrue(all(flags[first:]))

        hold = ticks[first].agents[0].state
        for record in ticks[first + 1:]:
            s = record.agents[0].state
            self.assertEqual((s.x, s.y, s.speed), (hold.x, hold.y, 0.0))
            self.assertEqual(record.agents[0].action, Action.BRAKE.label)

        self.assertEqual(calls.count("vehicle_0"), first + 1)
        self.assertEqual(calls.count("vehicle_1"), len(ticks))
        self.assertEqual(len(bus.poll(TOPIC_ROUND_START)), 1)
        end = bus.poll(TOPIC_ROUND_END)
        self.assertEqual([m.payload.outcome for m in end], ["timed out"])


class InvariantTests(unittest.TestCase):
    def test_leaving_the_map_raises(self) -> None:
        cfg = _config(
            {"vehicle_0": {"init": [2.0, -20.0, NORTH, 4.0], "target": [-20.0, 2.0, math.pi]}},
            max_simulation_time=30.0,
        )
        with TickOrchestrator(cfg, planner=_always(Action.ACCELERATE)) as orch:
            with self.assertRaises(InvariantViolation):
                orch.run_round(1)

    def test_subscriber_failure_does_not_stop_the_round(self) -> None:
        bus = TelemetryBus()

        def broken(msg):
            raise RuntimeError("renderer crashed")

        bus.subscribe(TOPIC_TICK, broken)
        with TickOrchestrator(_opposite_lanes(), bus=bus, planner=_always(Action.MAINTAIN)) as orch:
            result = orch.run_round(1)
        self.assertEqual(result.outcome, RoundOutcome.SUCCEEDED)
        self.assertEqual(bus.metrics.subscriber_errors, result.ticks)


if __name__ == "__main__":
    unittest.main()
