"""
TelemetryBus: In-memory pub/sub for simulation telemetry.

Supports:
    - Topic-based messaging with bounded per-topic queues
    - Synchronous subscriber callbacks
    - Logging of events

Intended usage:
    - The orchestrator publishes 'round.start', 'tick.state' and 'round.end'
    - Renderers and recorders subscribe or poll; they never feed back into
      the simulation, and a failing subscriber cannot stop a round.
"""

import time
import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List

from .message import TelemetryMessage
from .metrics import BusMetrics
from .utils import new_msg_id

log = logging.getLogger("telemetry")

Subscriber = Callable[[TelemetryMessage], None]


class TelemetryBus:
    """
    Transport for telemetry records.

    Attributes:
        max_queue (int): Per-topic queue length kept for :meth:`poll`.
        metrics (BusMetrics): Message counters.
    """

    def __init__(self, max_queue: int = 1024):
        """
        Initialize a TelemetryBus instance.

        Args:
            max_queue (int): Messages kept per topic until polled; older
                messages are discarded first.
        """
        self.max_queue = max(1, int(max_queue))
        self.metrics = BusMetrics()
        self._topics: Dict[str, Deque[TelemetryMessage]] = {}
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Subscriber) -> None:
        """
        Register a callback invoked synchronously for every message on *topic*.

        Args:
            topic (str): Topic name, or '*' for every topic.
            callback (Callable): Receives the :class:`TelemetryMessage`.
        """
        with self._lock:
            self._subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self, topic: str, callback: Subscriber) -> None:
        with self._lock:
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def publish(self, topic: str, sender: str, payload: Any) -> str:
        """
        Publish a message to a specific topic.

        Args:
            topic (str): The topic name (e.g., 'tick.state', 'round.end').
            sender (str): Publisher name.
            payload (Any): Immutable record carried by the message.

        Returns:
            str: The unique message ID.
        """
        msg = TelemetryMessage(
            id=new_msg_id(),
            topic=topic,
            sender=sender,
            payload=payload,
            ts=time.time(),
        )
        with self._lock:
            queue = self._topics.setdefault(topic, deque(maxlen=self.max_queue))
            if len(queue) == self.max_queue:
                self.metrics.overflowed += 1
            queue.append(msg)
            self.metrics.published += 1
            callbacks = list(self._subscribers.get(topic, ())) + list(
                self._subscribers.get("*", ())
            )

        log.debug("publish topic=%s sender=%s id=%s", topic, sender, msg.id)
        for callback in callbacks:
            try:
                callback(msg)
            except Exception:
                self.metrics.subscriber_errors += 1
                log.exception("subscriber failed on topic=%s", topic)
            else:
                self.metrics.delivered += 1
        return msg.id

    def poll(self, topic: str) -> List[TelemetryMessage]:
        """
        Retrieve and clear all queued messages from a given topic.

        Args:
            topic (str): The topic name to poll messages from.

        Returns:
            List[TelemetryMessage]: Messages published since the last poll.
        """
        with self._lock:
            queue = self._topics.get(topic)
            if not queue:
                return []
            msgs = list(queue)
            queue.clear()
        return msgs
