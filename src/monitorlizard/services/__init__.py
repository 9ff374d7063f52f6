"""Services layer: the monitor, the fan-out publisher and the metrics mirror.

Attributes:
    Monitor: Per-endpoint scheduling loops publishing NIP-66 metric events.
    publish_event: Attempt-all fan-out of a signed event.
    MetricsMirror: Fire-and-forget mirror of raw timings to InfluxDB.
"""

from .mirror import InfluxMetricsSink, MetricsMirror, MetricsSink
from .monitor import Monitor, MonitorConfig
from .publisher import DestinationResult, PublishOutcome, publish_event


__all__ = [
    "DestinationResult",
    "InfluxMetricsSink",
    "MetricsMirror",
    "MetricsSink",
    "Monitor",
    "MonitorConfig",
    "PublishOutcome",
    "publish_event",
]
