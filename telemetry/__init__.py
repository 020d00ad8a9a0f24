"""
telemetry — In-memory telemetry stream
=======================================

Decouples the simulation loop from its observers: the orchestrator
publishes immutable records after every commit, and renderers or
recorders subscribe without being able to influence the stepping.

Modules
-------
message
    :class:`TickRecord`, :class:`RoundRecord`, :class:`AgentFrame` and the
    :class:`TelemetryMessage` envelope.
bus
    :class:`TelemetryBus` publish / subscribe / poll transport.
metrics
    :class:`BusMetrics` counter snapshot.
utils
    ID generation and frame building.
"""

from .message import (
    TOPIC_ROUND_END,
    TOPIC_ROUND_START,
    TOPIC_TICK,
    AgentFrame,
    RoundRecord,
    TelemetryMessage,
    TickRecord,
)
from .bus     import TelemetryBus
from .metrics import BusMetrics
from .utils   import agent_frames, new_msg_id

__all__ = [
    "TOPIC_TICK",
    "TOPIC_ROUND_START",
    "TOPIC_ROUND_END",
    "AgentFrame",
    "TickRecord",
    "RoundRecord",
    "TelemetryMessage",
    "TelemetryBus",
    "BusMetrics",
    "agent_frames",
    "new_msg_id",
]
