"""
Per-tick latency measurement result.

Produced by [measure_latency()][monitorlizard.utils.wsstat.measure_latency]
and consumed within the same tick by the event composer and the metrics
mirror. All durations are whole milliseconds.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MeasurementResult:
    """Phase timings of one connection to a relay.

    Attributes:
        dns_lookup: Name resolution time.
        tcp_connection: TCP connect time.
        tls_handshake: TLS handshake time (``0`` for plain ``ws``).
        ws_handshake: WebSocket upgrade time.
        message_round_trip: Time from sending the probe message to receiving
            the first reply.
    """

    dns_lookup: int
    tcp_connection: int
    tls_handshake: int
    ws_handshake: int
    message_round_trip: int

    def __post_init__(self) -> None:
        for name in (
            "dns_lookup",
            "tcp_connection",
            "tls_handshake",
            "ws_handshake",
            "message_round_trip",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be int, got {type(value).__name__}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    @property
    def open_latency(self) -> int:
        """Connection-open latency: DNS + TCP + TLS + WebSocket handshake."""
        return self.dns_lookup + self.tcp_connection + self.tls_handshake + self.ws_handshake

    @property
    def total_time(self) -> int:
        """Sum of all five phases."""
        return self.open_latency + self.message_round_trip

    def to_fields(self) -> dict[str, int]:
        """Return the timings keyed by their time-series field names."""
        return {
            "dnslookup": self.dns_lookup,
            "tcpconnection": self.tcp_connection,
            "tlshandshake": self.tls_handshake,
            "wshandshake": self.ws_handshake,
            "wsrtt": self.message_round_trip,
            "totaltime": self.total_time,
        }
