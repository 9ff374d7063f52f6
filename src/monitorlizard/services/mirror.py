"""Fire-and-forget mirror of raw phase timings to a time-series store.

[MetricsMirror.enqueue()][monitorlizard.services.mirror.MetricsMirror.enqueue]
hands one point per successful measurement to a
[MetricsSink][monitorlizard.services.mirror.MetricsSink]. The production sink,
[InfluxMetricsSink][monitorlizard.services.mirror.InfluxMetricsSink], wraps the
``influxdb-client`` batching write API, which buffers points and flushes them
from its own background thread, so enqueueing never waits on the network.

Sink failures are logged and swallowed here: the mirror is independent of the
publish path and must never affect it.

Point layout:

* measurement: configurable (``relay_latency`` by default);
* tags: ``relay`` (normalized URL), ``monitor`` (monitor name);
* fields: ``dnslookup``, ``tcpconnection``, ``tlshandshake``,
  ``wshandshake``, ``wsrtt``, ``totaltime`` (milliseconds).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol

from influxdb_client import InfluxDBClient, Point, WriteOptions, WritePrecision


if TYPE_CHECKING:
    from monitorlizard.models.endpoint import Endpoint
    from monitorlizard.models.measurement import MeasurementResult


logger = logging.getLogger("monitorlizard.services.mirror")


class MetricsSink(Protocol):
    """Destination for mirrored points; must be safe to call from any task."""

    def write_point(
        self,
        measurement: str,
        tags: dict[str, str],
        fields: dict[str, int],
        timestamp: int,
    ) -> None: ...

    def close(self) -> None: ...


class InfluxMetricsSink:
    """[MetricsSink][monitorlizard.services.mirror.MetricsSink] backed by InfluxDB 2.x.

    Args:
        url: InfluxDB server URL.
        token: API token.
        org: Organization name.
        bucket: Target bucket.
        batch_size: Points buffered before a flush.
        flush_interval: Milliseconds between forced flushes.
    """

    def __init__(  # noqa: PLR0913
        self,
        url: str,
        token: str,
        org: str,
        bucket: str,
        *,
        batch_size: int = 20,
        flush_interval: int = 1_000,
    ) -> None:
        self._org = org
        self._bucket = bucket
        self._client = InfluxDBClient(url=url, token=token, org=org)
        self._write_api = self._client.write_api(
            write_options=WriteOptions(batch_size=batch_size, flush_interval=flush_interval)
        )

    def write_point(
        self,
        measurement: str,
        tags: dict[str, str],
        fields: dict[str, int],
        timestamp: int,
    ) -> None:
        point = Point(measurement).time(timestamp, WritePrecision.S)
        for key, value in tags.items():
            point = point.tag(key, value)
        for key, value in fields.items():
            point = point.field(key, value)
        self._write_api.write(bucket=self._bucket, org=self._org, record=point)

    def close(self) -> None:
        """Flush pending points and release the client."""
        self._write_api.close()
        self._client.close()


class MetricsMirror:
    """Forward raw measurement timings to an optional sink.

    A mirror without a sink is a no-op, which is how a disabled InfluxDB
    configuration is represented.

    Args:
        sink: Destination of the points, or ``None``.
        measurement: Measurement name of every point.
        monitor: Value of the ``monitor`` tag.
    """

    def __init__(
        self,
        sink: MetricsSink | None = None,
        *,
        measurement: str = "relay_latency",
        monitor: str = "",
    ) -> None:
        self._sink = sink
        self._measurement = measurement
        self._monitor = monitor

    @property
    def enabled(self) -> bool:
        return self._sink is not None

    def enqueue(
        self,
        endpoint: Endpoint,
        result: MeasurementResult,
        timestamp: int | None = None,
    ) -> None:
        """Hand one point to the sink without waiting for it to be written."""
        if self._sink is None:
            return
        tags = {"relay": endpoint.url, "monitor": self._monitor}
        try:
            self._sink.write_point(
                self._measurement,
                tags,
                result.to_fields(),
                timestamp if timestamp is not None else int(time.time()),
            )
        except Exception as e:  # Intentionally broad: the sink must never affect publishing
            logger.warning("mirror_write_failed relay=%s error=%s", endpoint.url, e)

    def close(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink.close()
        except Exception as e:  # Intentionally broad: best-effort flush at shutdown
            logger.warning("mirror_close_failed error=%s", e)
