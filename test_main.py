#!/usr/bin/env python3
"""
Command-line tests: exit codes, output directory and statistics file.
"""

import logging
import os
import tempfile
import unittest
from pathlib import Path

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pandas as pd  # noqa: E402
import yaml  # noqa: E402

from logging_setup import parse_level  # noqa: E402
from main import (  # noqa: E402
    EXIT_CONFIG_ERROR,
    EXIT_INVARIANT_VIOLATION,
    EXIT_OK,
    build_parser,
    main,
    resolve_config_path,
)

SCENARIO = {
    "delta_t": 0.25,
    "max_simulation_time": 20.0,
    "map_size": 25.0,
    "lane_width": 4.0,
    "planner": {"computation_budget": 40, "prediction_budget": 10, "max_step": 4},
    "vehicle_list": {
        "vehicle_0": {"init": [2.0, -20.0, 1.5707963, 4.0], "target": [2.0, 20.0]},
        "vehicle_1": {"init": [-2.0, 20.0, -1.5707963, 4.0], "target": [-2.0, -20.0]},
    },
}


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.addCleanup(self._reset_logging)
        self.out = os.path.join(self.tmp.name, "out")

    @staticmethod
    def _reset_logging() -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.WARNING)

    def _write(self, data, name="scenario.yaml") -> str:
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh)
        return path

    def _run(self, *args: str) -> int:
        return main(["-n", "-l", "err", "-o", self.out, *args])

    def test_successful_run_exits_zero(self) -> None:
        self.assertEqual(self._run("-r", "1", "-c", self._write(SCENARIO)), EXIT_OK)
        self.assertTrue(os.path.exists(os.path.join(self.out, "levelk.log")))

    def test_save_fig_writes_figures_and_statistics(self) -> None:
        code = self._run("-r", "2", "-f", "-c", self._write(SCENARIO))
        self.assertEqual(code, EXIT_OK)
        runs = list(Path(self.out).iterdir())
        self.assertEqual(len(runs), 1)
        files = sorted(p.name for p in runs[0].iterdir())
        self.assertIn("Round_1.png", files)
        self.assertIn("Round_2.png", files)
        frame = pd.read_csv(runs[0] / "rounds.csv")
        self.assertEqual(list(frame["round"]), [1, 2])
        self.assertEqual(list(frame["outcome"]), ["succeeded", "succeeded"])

    def test_missing_config_exits_two(self) -> None:
        self.assertEqual(self._run("-c", os.path.join(self.tmp.name, "nope.yaml")), EXIT_CONFIG_ERROR)

    def test_invalid_config_exits_two(self) -> None:
        bad = dict(SCENARIO, delta_t=-1.0)
        self.assertEqual(self._run("-c", self._write(bad)), EXIT_CONFIG_ERROR)

    def test_zero_rounds_exits_two(self) -> None:
        self.assertEqual(self._run("-r", "0", "-c", self._write(SCENARIO)), EXIT_CONFIG_ERROR)

    def test_leaving_the_map_exits_three(self) -> None:
        edge = dict(
            SCENARIO,
            vehicle_list={"vehicle_0": {"init": [-2.0, 24.5, 1.5707963, 6.0], "target": [-2.0, -20.0]}},
        )
        self.assertEqual(self._run("-r", "1", "-c", self._write(edge)), EXIT_INVARIANT_VIOLATION)


class ArgumentTests(unittest.TestCase):
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        self.assertEqual(args.rounds, 5)
        self.assertEqual(args.log_level, "info")
        self.assertFalse(args.no_animation)
        self.assertFalse(args.save_fig)

    def test_bare_name_resolves_under_configs(self) -> None:
        path = resolve_config_path("parallel_lanes")
        self.assertEqual(path.name, "parallel_lanes.yaml")
        self.assertTrue(path.exists())

    def test_log_level_names(self) -> None:
        self.assertEqual(parse_level("trace"), logging.DEBUG)
        self.assertEqual(parse_level("WARN"), logging.WARNING)
        with self.assertRaises(ValueError):
            parse_level("loud")


if __name__ == "__main__":
    unittest.main()
