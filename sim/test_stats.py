#!/usr/bin/env python3
"""
Round statistics tests.
"""

from __future__ import annotations

import os
import tempfile
import unittest

import pandas as pd

from sim.settings import ConfigError
from sim.stats import ExperimentSummary, RoundOutcome, RoundResult


def _summary() -> ExperimentSummary:
    summary = ExperimentSummary()
    summary.add(RoundResult(1, RoundOutcome.SUCCEEDED, 9.5, 1.2, 38))
    summary.add(RoundResult(2, RoundOutcome.COLLIDED, 3.0, 0.4, 12, ("vehicle_0", "vehicle_1")))
    summary.add(RoundResult(3, RoundOutcome.SUCCEEDED, 10.0, 1.3, 40))
    summary.add(RoundResult(4, RoundOutcome.TIMED_OUT, 25.25, 2.0, 101))
    return summary


class ExperimentSummaryTests(unittest.TestCase):
    def test_rates_and_counts(self) -> None:
        summary = _summary()
        self.assertEqual(summary.rounds, 4)
        self.assertEqual(summary.successes, 2)
        self.assertAlmostEqual(summary.success_rate, 0.5)
        counts = summary.outcome_counts()
        self.assertEqual(counts[RoundOutcome.COLLIDED], 1)
        self.assertEqual(counts[RoundOutcome.TIMED_OUT], 1)
        self.assertEqual(summary.describe(), "Experiment success 2/4(50.00%) rounds.")

    def test_zero_rounds_is_a_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            ExperimentSummary().success_rate

    def test_frame_and_csv(self) -> None:
        frame = _summary().to_frame()
        self.assertEqual(list(frame["round"]), [1, 2, 3, 4])
        self.assertEqual(frame.loc[1, "collision"], "vehicle_0-vehicle_1")
        self.assertEqual(frame.loc[3, "outcome"], "timed out")
        with tempfile.TemporaryDirectory() as tmp:
            path = _summary().save_csv(os.path.join(tmp, "out", "rounds.csv"))
            loaded = pd.read_csv(path)
        self.assertEqual(len(loaded), 4)
        self.assertEqual(list(loaded["ticks"]), [38, 12, 40, 101])


if __name__ == "__main__":
    unittest.main()
