"""
Unit tests for services.mirror module.

Tests:
- MetricsMirror point layout
- No-op behavior without a sink
- Sink errors never propagate
- InfluxMetricsSink point construction
"""

from unittest.mock import MagicMock, patch

from influxdb_client import Point

from monitorlizard.services.mirror import InfluxMetricsSink, MetricsMirror


class TestMetricsMirror:
    """MetricsMirror."""

    def test_enqueue_point(self, recording_sink, endpoint, measurement):
        mirror = MetricsMirror(recording_sink, measurement="latency", monitor="lizard")
        mirror.enqueue(endpoint, measurement, 1_700_000_000)

        assert recording_sink.points == [
            (
                "latency",
                {"relay": "ws://relay.test/sub", "monitor": "lizard"},
                measurement.to_fields(),
                1_700_000_000,
            )
        ]

    def test_default_timestamp(self, recording_sink, endpoint, measurement):
        MetricsMirror(recording_sink).enqueue(endpoint, measurement)
        assert recording_sink.points[0][3] > 0

    def test_disabled_without_sink(self, endpoint, measurement):
        mirror = MetricsMirror()
        assert mirror.enabled is False
        mirror.enqueue(endpoint, measurement)
        mirror.close()

    def test_sink_error_swallowed(self, endpoint, measurement):
        sink = MagicMock()
        sink.write_point.side_effect = ConnectionError("influx down")
        mirror = MetricsMirror(sink)
        mirror.enqueue(endpoint, measurement)
        sink.write_point.assert_called_once()

    def test_close(self, recording_sink):
        MetricsMirror(recording_sink).close()
        assert recording_sink.closed is True

    def test_close_error_swallowed(self):
        sink = MagicMock()
        sink.close.side_effect = RuntimeError("flush failed")
        MetricsMirror(sink).close()


class TestInfluxMetricsSink:
    """InfluxMetricsSink."""

    def test_write_and_close(self):
        with patch("monitorlizard.services.mirror.InfluxDBClient") as mock_client_cls:
            client = mock_client_cls.return_value
            write_api = client.write_api.return_value

            sink = InfluxMetricsSink(
                "http://influx:8086", "token", "org", "bucket", batch_size=5, flush_interval=100
            )
            sink.write_point("relay_latency", {"relay": "wss://r/"}, {"wsrtt": 15}, 1_700_000_000)
            sink.close()

        mock_client_cls.assert_called_once_with(url="http://influx:8086", token="token", org="org")
        kwargs = write_api.write.call_args.kwargs
        assert kwargs["bucket"] == "bucket"
        assert kwargs["org"] == "org"
        point = kwargs["record"]
        assert isinstance(point, Point)
        assert point.to_line_protocol() == "relay_latency,relay=wss://r/ wsrtt=15i 1700000000"
        write_api.close.assert_called_once()
        client.close.assert_called_once()
