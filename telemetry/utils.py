"""
Utility functions for TelemetryBus:
    - ID generation
    - frame building from orchestrator agents
"""

import uuid
from typing import Iterable, Tuple

from .message import AgentFrame


# ---------- ID Helpers ----------
def new_msg_id() -> str:
    """
    Generate a globally unique message ID.

    Returns:
        str: UUID string for a new message.
    """
    return str(uuid.uuid4())


# ---------- Frame Helpers ----------
def agent_frames(agents: Iterable, with_history: bool = True) -> Tuple[AgentFrame, ...]:
    """
    Freeze the publishable part of every agent.

    Args:
        agents (Iterable): :class:`sim.vehicle.Agent` instances.
        with_history (bool): Include the footprint history.

    Returns:
        tuple: One :class:`AgentFrame` per agent, in iteration order.
    """
    return tuple(
        AgentFrame(
            name=a.name,
            level=a.level,
            color=tuple(a.color),
            state=a.state,
            action=a.cur_action.label,
            goal=a.goal,
            goal_reached=a.goal_reached,
            footprint=tuple(a.footprint) if with_history else (),
            expected_trajectory=tuple(a.expected_traj),
        )
        for a in agents
    )
