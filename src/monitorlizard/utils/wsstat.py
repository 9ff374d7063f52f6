"""WebSocket latency probe with per-phase timings.

[measure_latency()][monitorlizard.utils.wsstat.measure_latency] opens one
connection to a relay and times each phase separately:

1. DNS lookup ([resolve_host][monitorlizard.utils.dns.resolve_host]).
2. TCP connect (``asyncio.open_connection`` to the resolved address).
3. TLS handshake (``StreamWriter.start_tls``, ``wss`` only; ``0`` otherwise).
4. WebSocket upgrade.
5. Round trip of the probe message until the first text frame arrives.

Phases 4 and 5 run the ``websockets`` sans-I/O ``ClientProtocol`` directly
over the asyncio streams, so that no library-managed connection hides the
handshake boundaries.

Examples:
    ```python
    result, reply = await measure_latency("wss://relay.damus.io/")
    result.open_latency        # 182
    result.message_round_trip  # 41
    ```
"""

from __future__ import annotations

import asyncio
import logging
import ssl
import time
from collections.abc import Mapping

from websockets.client import ClientProtocol
from websockets.exceptions import WebSocketException
from websockets.frames import Frame, Opcode
from websockets.protocol import State
from websockets.uri import parse_uri

from monitorlizard.core.exceptions import MeasurementError
from monitorlizard.models.constants import PROBE_MESSAGE
from monitorlizard.models.measurement import MeasurementResult

from .dns import resolve_host


logger = logging.getLogger("monitorlizard.utils.wsstat")

DEFAULT_TIMEOUT = 10.0
_READ_CHUNK = 65_536


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


async def _flush(protocol: ClientProtocol, writer: asyncio.StreamWriter) -> None:
    for data in protocol.data_to_send():
        if data:
            writer.write(data)
    await writer.drain()


async def _pump(protocol: ClientProtocol, reader: asyncio.StreamReader) -> None:
    """Feed one read from the socket into the protocol."""
    data = await reader.read(_READ_CHUNK)
    if data:
        protocol.receive_data(data)
    else:
        protocol.receive_eof()


async def _handshake(
    protocol: ClientProtocol,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    headers: Mapping[str, str] | None,
) -> list[object]:
    """Run the opening handshake; return events that arrived after it."""
    request = protocol.connect()
    for name, value in (headers or {}).items():
        request.headers[name] = value
    protocol.send_request(request)
    await _flush(protocol, writer)

    while protocol.state is State.CONNECTING:
        await _pump(protocol, reader)
        if protocol.handshake_exc is not None:
            raise protocol.handshake_exc
        if protocol.state is State.CLOSED:
            raise MeasurementError("connection closed during WebSocket handshake")

    if protocol.handshake_exc is not None:
        raise protocol.handshake_exc

    # The first event is the handshake response; frames may follow it
    return protocol.events_received()[1:]


async def _round_trip(
    protocol: ClientProtocol,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    message: str,
    pending: list[object],
) -> str:
    """Send ``message`` and return the text of the first reply frame."""
    protocol.send_text(message.encode())
    await _flush(protocol, writer)

    events = pending
    while True:
        for event in events:
            if isinstance(event, Frame) and event.opcode is Opcode.TEXT:
                return bytes(event.data).decode("utf-8", errors="replace")
        if protocol.state is not State.OPEN:
            raise MeasurementError("connection closed before the probe reply")
        await _pump(protocol, reader)
        # Answer pings while waiting
        await _flush(protocol, writer)
        events = protocol.events_received()


async def _close(protocol: ClientProtocol, writer: asyncio.StreamWriter) -> None:
    try:
        if protocol.state is State.OPEN:
            protocol.send_close()
            await _flush(protocol, writer)
        writer.close()
        await writer.wait_closed()
    except (OSError, WebSocketException) as e:
        logger.debug("probe_close_failed error=%s", e)


async def _measure(
    url: str,
    message: str,
    headers: Mapping[str, str] | None,
    timeout: float,  # noqa: ASYNC109
) -> tuple[MeasurementResult, str]:
    uri = parse_uri(url)

    start = time.perf_counter()
    resolved = await resolve_host(uri.host, uri.port, timeout=timeout)
    if resolved.preferred is None:
        raise MeasurementError(f"DNS lookup failed for {uri.host}")
    dns_lookup = _elapsed_ms(start)

    start = time.perf_counter()
    reader, writer = await asyncio.open_connection(resolved.preferred, uri.port)
    tcp_connection = _elapsed_ms(start)

    protocol = ClientProtocol(uri)
    try:
        tls_handshake = 0
        if uri.secure:
            start = time.perf_counter()
            await writer.start_tls(
                ssl.create_default_context(), server_hostname=uri.host.strip("[]")
            )
            tls_handshake = _elapsed_ms(start)

        start = time.perf_counter()
        pending = await _handshake(protocol, reader, writer, headers)
        ws_handshake = _elapsed_ms(start)

        start = time.perf_counter()
        reply = await _round_trip(protocol, reader, writer, message, pending)
        message_round_trip = _elapsed_ms(start)
    finally:
        await _close(protocol, writer)

    result = MeasurementResult(
        dns_lookup=dns_lookup,
        tcp_connection=tcp_connection,
        tls_handshake=tls_handshake,
        ws_handshake=ws_handshake,
        message_round_trip=message_round_trip,
    )
    return result, reply


async def measure_latency(
    url: str,
    message: str = PROBE_MESSAGE,
    headers: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> tuple[MeasurementResult, str]:
    """Measure connection and round-trip latency of a relay.

    Args:
        url: Relay WebSocket URL (``ws://`` or ``wss://``).
        message: Text message sent once the connection is open.
        headers: Extra HTTP headers for the upgrade request.
        timeout: Budget in seconds for the whole probe.

    Returns:
        The phase timings and the text of the relay's first reply.

    Raises:
        MeasurementError: If any phase fails or the probe exceeds *timeout*.
    """
    try:
        async with asyncio.timeout(timeout):
            result, reply = await _measure(url, message, headers, timeout)
    except MeasurementError:
        raise
    except TimeoutError as e:
        raise MeasurementError(f"probe timed out after {timeout}s: {url}") from e
    except (OSError, WebSocketException, ValueError) as e:
        raise MeasurementError(f"probe failed for {url}: {e}") from e

    logger.debug(
        "probe_completed relay=%s open=%s rtt=%s",
        url,
        result.open_latency,
        result.message_round_trip,
    )
    return result, reply
