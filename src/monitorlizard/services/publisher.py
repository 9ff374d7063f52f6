"""Best-effort fan-out of signed events to destination relays.

[publish_event()][monitorlizard.services.publisher.publish_event] attempts
every destination in order, whatever happened to the previous ones. Each
destination gets its own client session (connect, send, shutdown). A
connection failure is recorded as
[DestinationUnreachableError][monitorlizard.core.exceptions.DestinationUnreachableError],
a relay refusing the event as
[PublishRejectedError][monitorlizard.core.exceptions.PublishRejectedError].

The aggregate [PublishOutcome][monitorlizard.services.publisher.PublishOutcome]
succeeds only when every destination accepted the event. Otherwise its
``error`` is the last failure encountered; which subset succeeded is only
visible in the per-destination log lines and ``results``.

Examples:
    ```python
    outcome = await publish_event(event, ["wss://a.example/", "wss://b.example/"], keys=keys)
    if not outcome.success:
        logger.warning("publish_failed error=%s", outcome.error)
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from monitorlizard.core.exceptions import (
    DestinationUnreachableError,
    PublishingError,
    PublishRejectedError,
)
from monitorlizard.utils.transport import DEFAULT_TIMEOUT, close_client, connect_relay


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostr_sdk import Event, Keys


logger = logging.getLogger("monitorlizard.services.publisher")


@dataclass(frozen=True, slots=True)
class DestinationResult:
    """Outcome of one destination: ``error`` is ``None`` on success."""

    destination: str
    error: PublishingError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Aggregate result of a fan-out publish.

    Attributes:
        results: One entry per destination, in attempt order.
    """

    results: tuple[DestinationResult, ...] = ()

    @property
    def success(self) -> bool:
        """True only if every destination succeeded."""
        return all(r.success for r in self.results)

    @property
    def error(self) -> PublishingError | None:
        """The last failure encountered, or ``None``."""
        for result in reversed(self.results):
            if result.error is not None:
                return result.error
        return None

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    def raise_for_outcome(self) -> None:
        """Raise the last failure if any destination failed."""
        error = self.error
        if error is not None:
            raise error


async def _publish_one(
    event: Event,
    destination: str,
    keys: Keys | None,
    timeout: float,  # noqa: ASYNC109
) -> None:
    try:
        client = await connect_relay(destination, keys=keys, timeout=timeout)
    except Exception as e:  # Intentionally broad: any connect failure marks the destination unreachable
        raise DestinationUnreachableError(destination, str(e) or type(e).__name__) from e

    try:
        output = await client.send_event(event)
    except Exception as e:  # Intentionally broad: nostr_sdk raises its own FFI error types
        raise PublishRejectedError(destination, str(e) or type(e).__name__) from e
    finally:
        await close_client(client)

    if output.failed or not output.success:
        reason = next(iter(output.failed.values()), "not accepted")
        raise PublishRejectedError(destination, reason)


async def publish_event(
    event: Event,
    destinations: Sequence[str],
    *,
    keys: Keys | None = None,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> PublishOutcome:
    """Publish a signed event to every destination.

    Args:
        event: Signed event to send.
        destinations: Relay URLs, attempted in order.
        keys: Keys for the client signer (needed by relays requiring auth).
        timeout: Connection timeout per destination in seconds.

    Returns:
        The aggregate [PublishOutcome][monitorlizard.services.publisher.PublishOutcome].
        Never raises for per-destination failures.
    """
    results: list[DestinationResult] = []
    for destination in destinations:
        try:
            await _publish_one(event, destination, keys, timeout)
        except PublishingError as e:
            logger.warning(
                "publish_destination_failed relay=%s error=%s", destination, e.reason
            )
            results.append(DestinationResult(destination, e))
        else:
            logger.debug("publish_destination_succeeded relay=%s", destination)
            results.append(DestinationResult(destination))

    return PublishOutcome(tuple(results))
