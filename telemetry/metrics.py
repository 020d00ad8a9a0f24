"""
BusMetrics: Tracks simple statistics for TelemetryBus message flow.
"""


class BusMetrics:
    """
    Tracks metrics for published messages, deliveries and subscriber failures.

    Attributes:
        published (int): Total number of messages published.
        delivered (int): Number of successful subscriber callbacks.
        subscriber_errors (int): Number of subscriber callbacks that raised.
        overflowed (int): Number of queued messages discarded unpolled.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.published = 0
        self.delivered = 0
        self.subscriber_errors = 0
        self.overflowed = 0

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Dictionary containing 'published', 'delivered',
            'subscriber_errors' and 'overflowed' counters.
        """
        return {
            "published": self.published,
            "delivered": self.delivered,
            "subscriber_errors": self.subscriber_errors,
            "overflowed": self.overflowed,
        }
