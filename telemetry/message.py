"""
Telemetry records: immutable data published by the orchestrator after each
commit and at the start and end of every round.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from sim.physics import Pose, State

# ---------- Topics ----------
TOPIC_TICK = "tick.state"
TOPIC_ROUND_START = "round.start"
TOPIC_ROUND_END = "round.end"


@dataclass(frozen=True)
class AgentFrame:
    """
    State of one vehicle as published after a commit.

    Attributes:
        name (str): Vehicle name.
        level (int): Reasoning level of its planner.
        color (tuple): RGB display colour.
        state (State): Committed state.
        action (str): Label of the committed manoeuvre.
        goal (Pose): Target pose.
        goal_reached (bool): Goal latch.
        footprint (tuple): Every committed state of the round; only filled
            on 'round.end'.
        expected_trajectory (tuple): Principal variation of the last search.
    """
    name: str
    level: int
    color: Tuple[int, int, int]
    state: State
    action: str
    goal: Pose
    goal_reached: bool
    footprint: Tuple[State, ...] = ()
    expected_trajectory: Tuple[State, ...] = ()


@dataclass(frozen=True)
class TickRecord:
    """
    Snapshot of the whole scene after one tick.

    Attributes:
        round_index (int): One-based round index.
        rounds (int): Total rounds of the experiment (0 if unknown).
        tick (int): Tick index within the round.
        time (float): Simulated time after the commit.
        agents (tuple): One :class:`AgentFrame` per vehicle, in index order.
    """
    round_index: int
    rounds: int
    tick: int
    time: float
    agents: Tuple[AgentFrame, ...]


@dataclass(frozen=True)
class RoundRecord:
    """
    Round boundary notification.

    Attributes:
        round_index (int): One-based round index.
        rounds (int): Total rounds of the experiment (0 if unknown).
        agents (tuple): Frames at the boundary (initial or final).
        outcome (str): Outcome name on ``round.end``, None on ``round.start``.
        time (float): Simulated time.
        collision (tuple): Names of the first colliding pair, if any.
    """
    round_index: int
    rounds: int
    agents: Tuple[AgentFrame, ...]
    outcome: Optional[str] = None
    time: float = 0.0
    collision: Optional[Tuple[str, str]] = None


@dataclass(frozen=True)
class TelemetryMessage:
    """
    Envelope of a message delivered through the :class:`TelemetryBus`.

    Attributes:
        id (str): Unique identifier for the message.
        topic (str): The topic of the message (e.g., 'tick.state', 'round.end').
        sender (str): Publisher name (e.g., 'orchestrator').
        payload (Any): A :class:`TickRecord` or :class:`RoundRecord`.
        ts (float): Wall-clock timestamp (in seconds) when the message was created.
    """
    id: str
    topic: str
    sender: str
    payload: Any
    ts: float
