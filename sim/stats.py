"""
sim/stats.py
============
Round outcomes and the experiment summary.

:class:`ExperimentSummary` collects one :class:`RoundResult` per round and
exports them as a pandas ``DataFrame`` (and CSV) for later analysis.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from sim.settings import ConfigError


class RoundOutcome(enum.Enum):
    """Exactly one per finished round."""

    SUCCEEDED = "succeeded"
    COLLIDED = "collided"
    TIMED_OUT = "timed out"


@dataclass(frozen=True)
class RoundResult:
    index: int
    """Round number, starting at 1."""

    outcome: RoundOutcome
    sim_time: float
    """Simulated seconds when the round ended."""

    wall_time: float
    """Wall-clock seconds spent on the round."""

    ticks: int
    collision: Optional[Tuple[str, str]] = None
    """First colliding pair, for ``COLLIDED`` rounds."""

    @property
    def succeeded(self) -> bool:
        return self.outcome is RoundOutcome.SUCCEEDED


@dataclass
class ExperimentSummary:
    results: List[RoundResult] = field(default_factory=list)

    def add(self, result: RoundResult) -> None:
        self.results.append(result)

    @property
    def rounds(self) -> int:
        return len(self.results)

    @property
    def successes(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def success_rate(self) -> float:
        """Fraction of succeeded rounds.

        Raises
        ------
        ConfigError
            If no round has been run.
        """
        if not self.results:
            raise ConfigError("success rate is undefined for zero rounds")
        return self.successes / len(self.results)

    def outcome_counts(self) -> Dict[RoundOutcome, int]:
        counts = {outcome: 0 for outcome in RoundOutcome}
        for r in self.results:
            counts[r.outcome] += 1
        return counts

    def describe(self) -> str:
        return "Experiment success {}/{}({:.2f}%) rounds.".format(
            self.successes, self.rounds, 100.0 * self.success_rate
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per round."""
        rows = [
            {
                "round": r.index,
                "outcome": r.outcome.value,
                "sim_time_s": r.sim_time,
                "wall_time_s": r.wall_time,
                "ticks": r.ticks,
                "collision": "-".join(r.collision) if r.collision else "",
            }
            for r in self.results
        ]
        return pd.DataFrame(
            rows,
            columns=["round", "outcome", "sim_time_s", "wall_time_s", "ticks", "collision"],
        )

    def save_csv(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(path, index=False)
        return path
