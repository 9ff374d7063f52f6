"""Nostr client sessions for publishing to destination relays.

Each destination gets its own short-lived ``nostr_sdk.Client`` so that a
slow or failing destination cannot affect the others.

See Also:
    [publish_event][monitorlizard.services.publisher.publish_event]: The
        fan-out publisher built on [connect_relay][monitorlizard.utils.transport.connect_relay].

Examples:
    ```python
    client = await connect_relay("wss://relay.example.com/", keys=my_keys, timeout=10.0)
    try:
        await client.send_event(event)
    finally:
        await close_client(client)
    ```
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from nostr_sdk import Client, ClientBuilder, NostrSigner, RelayUrl


if TYPE_CHECKING:
    from nostr_sdk import Keys


logger = logging.getLogger("monitorlizard.utils.transport")

DEFAULT_TIMEOUT = 10.0


def create_client(keys: Keys | None = None) -> Client:
    """Create a Nostr client, with a signer when ``keys`` is given.

    Returns:
        Configured ``Client`` instance (call ``add_relay()`` before use).
    """
    builder = ClientBuilder()

    if keys is not None:
        builder = builder.signer(NostrSigner.keys(keys))

    return builder.build()


async def connect_relay(
    url: str,
    keys: Keys | None = None,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> Client:
    """Connect a fresh client to a single relay.

    Args:
        url: Relay WebSocket URL.
        keys: Optional signing keys.
        timeout: Connection timeout in seconds.

    Returns:
        Connected ``Client`` ready to send events.

    Raises:
        OSError: If the connection fails or times out. The client is shut
            down before raising.
    """
    relay_url = RelayUrl.parse(url)

    logger.debug("relay_connecting relay=%s", url)

    client = create_client(keys)
    await client.add_relay(relay_url)
    output = await client.try_connect(timedelta(seconds=timeout))

    if relay_url in output.success:
        logger.debug("relay_connected relay=%s", url)
        return client

    await close_client(client)
    error_message = output.failed.get(relay_url, "Unknown error")
    logger.debug("connect_failed relay=%s error=%s", url, error_message)
    raise OSError(f"Connection failed: {url} ({error_message})")


async def close_client(client: Client) -> None:
    """Shut a client down, logging instead of raising on failure."""
    try:
        await client.shutdown()
    except Exception as e:  # Intentionally broad: nostr_sdk raises its own FFI error types
        logger.debug("client_shutdown_failed error=%s", e)
