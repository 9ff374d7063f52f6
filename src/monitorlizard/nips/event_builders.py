"""Event composers for the monitor's published event kinds.

Builders return [UnsignedEvent][monitorlizard.models.event.UnsignedEvent]
values with their own [TagSet][monitorlizard.models.tags.TagSet];
[sign_event()][monitorlizard.nips.event_builders.sign_event] turns one into a
signed ``nostr_sdk.Event``.

Kinds:

* Kind 0 (NIP-01): monitor profile.
* Kind 10002 (NIP-65): relays the monitor writes to.
* Kind 10166 (NIP-66): monitor registration.
* Kind 30166 (NIP-66): per-tick relay metrics, addressable by ``d``.

See Also:
    [add_geo_tags][monitorlizard.nips.geo.add_geo_tags]: Geohash ladder
        shared by the registration and metric events.
    [CapabilityDocument][monitorlizard.nips.nip11.CapabilityDocument]:
        Input of the capability tag builder.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING

from nostr_sdk import EventBuilder, Kind, Tag, Timestamp

from monitorlizard.core.exceptions import SigningError
from monitorlizard.models.constants import DEFAULT_GEOHASH_PRECISION, EventKind
from monitorlizard.models.event import UnsignedEvent
from monitorlizard.models.tags import TagSet

from .geo import add_geo_tags


if TYPE_CHECKING:
    from collections.abc import Iterable

    from nostr_sdk import Event, Keys

    from monitorlizard.models.endpoint import Endpoint
    from monitorlizard.models.measurement import MeasurementResult

    from .nip11 import CapabilityDocument


# Connection phases the monitor observes and their timeout budgets (ms)
OBSERVED_PHASES = ("open", "read")
TIMEOUT_PHASES = ("open", "read", "write")


def _now() -> int:
    return int(time.time())


# =============================================================================
# Kind 0 (NIP-01)
# =============================================================================


def build_profile_event(
    *,
    name: str = "",
    about: str = "",
    picture: str = "",
    created_at: int | None = None,
) -> UnsignedEvent:
    """Build a Kind 0 profile event; content is ``{name, about, picture}``, no tags."""
    content = json.dumps({"name": name, "about": about, "picture": picture})
    return UnsignedEvent(
        kind=EventKind.SET_METADATA,
        created_at=created_at if created_at is not None else _now(),
        content=content,
    )


# =============================================================================
# Kind 10002 (NIP-65)
# =============================================================================


def build_relay_list_event(
    destinations: Iterable[str],
    *,
    created_at: int | None = None,
) -> UnsignedEvent:
    """Build a Kind 10002 relay list with one ``["r", url, "write"]`` per destination."""
    tags = TagSet(("r", url, "write") for url in destinations)
    return UnsignedEvent(
        kind=EventKind.RELAY_LIST,
        created_at=created_at if created_at is not None else _now(),
        tags=tags,
    )


# =============================================================================
# Kind 10166 (NIP-66)
# =============================================================================


def build_registration_event(  # noqa: PLR0913
    *,
    interval: int,
    pubkey: str,
    timeouts: dict[str, int],
    country_code: str = "",
    latitude: float = 0.0,
    longitude: float = 0.0,
    geohash_precision: int = DEFAULT_GEOHASH_PRECISION,
    created_at: int | None = None,
) -> UnsignedEvent:
    """Build the Kind 10166 monitor registration event.

    Args:
        interval: Tick period in seconds (``frequency`` tag).
        pubkey: Monitor's hex public key (``o`` tag).
        timeouts: Timeout budget in milliseconds per phase, keyed by
            ``open``, ``read`` and ``write``.
        country_code: Monitor's country; the ``G`` tag is omitted when empty.
        latitude: Monitor's latitude for its geohash ladder.
        longitude: Monitor's longitude for its geohash ladder.
        geohash_precision: Length of the ladder.
        created_at: Unix timestamp; defaults to now.
    """
    tags = TagSet()
    tags.append(("frequency", str(interval)))
    tags.append(("o", pubkey))
    tags.append(("k", str(int(EventKind.RELAY_DISCOVERY))))
    tags.extend(("c", phase) for phase in OBSERVED_PHASES)
    tags.extend(
        ("timeout", phase, str(timeouts[phase])) for phase in TIMEOUT_PHASES if phase in timeouts
    )
    if country_code:
        tags.append(("G", country_code, "countryCode"))
    add_geo_tags(tags, latitude, longitude, geohash_precision)

    return UnsignedEvent(
        kind=EventKind.MONITOR_ANNOUNCEMENT,
        created_at=created_at if created_at is not None else _now(),
        tags=tags,
        pubkey=pubkey,
    )


# =============================================================================
# Kind 30166 Tags (NIP-66)
# =============================================================================


def add_capability_tags(tags: TagSet, document: CapabilityDocument | None) -> None:
    """Add NIP-11 derived tags: ``N``, ``R`` (payment, auth), ``G`` and ``t``.

    A missing document contributes nothing.
    """
    if document is None:
        return

    tags.extend(("N", str(nip)) for nip in document.supported_nips)

    limitation = document.limitation
    tags.append(("R", "payment" if limitation.payment_required else "!payment"))
    tags.append(("R", "auth" if limitation.auth_required else "!auth"))

    tags.extend(("G", country) for country in document.relay_countries)
    tags.extend(("t", label) for label in document.tags)


def add_rtt_tags(tags: TagSet, result: MeasurementResult) -> None:
    """Add ``rtt-open`` (DNS + TCP + TLS + WebSocket handshake) and ``rtt-read``."""
    tags.append(("rtt-open", str(result.open_latency)))
    tags.append(("rtt-read", str(result.message_round_trip)))


def add_network_tag(tags: TagSet, endpoint: Endpoint) -> None:
    tags.append(("other", "network", endpoint.network.value))


# =============================================================================
# Kind 30166 Builder (NIP-66)
# =============================================================================


def build_metric_event(
    endpoint: Endpoint,
    result: MeasurementResult,
    base_tags: TagSet,
    *,
    geohash_precision: int = DEFAULT_GEOHASH_PRECISION,
    created_at: int | None = None,
) -> UnsignedEvent:
    """Build the Kind 30166 per-tick metric event for one endpoint.

    Tag order: a snapshot of ``base_tags`` (capability tags), ``d`` with the
    normalized URL, the endpoint's geohash ladder, ``rtt-open``,
    ``rtt-read`` and the network class.

    ``base_tags`` itself is never modified.
    """
    tags = base_tags.copy()
    tags.append(("d", endpoint.url))
    add_geo_tags(tags, endpoint.latitude, endpoint.longitude, geohash_precision)
    add_rtt_tags(tags, result)
    add_network_tag(tags, endpoint)

    return UnsignedEvent(
        kind=EventKind.RELAY_DISCOVERY,
        created_at=created_at if created_at is not None else _now(),
        tags=tags,
    )


# =============================================================================
# Signing
# =============================================================================


def sign_event(event: UnsignedEvent, keys: Keys) -> Event:
    """Sign an unsigned event with ``keys``.

    Raises:
        SigningError: If the event's declared ``pubkey`` does not belong to
            ``keys`` or nostr-sdk fails to build or sign the event.
    """
    try:
        if event.pubkey is not None and event.pubkey != keys.public_key().to_hex():
            raise SigningError(f"pubkey mismatch for kind {event.kind}")
        builder = (
            EventBuilder(Kind(event.kind), event.content)
            .tags([Tag.parse(list(tag)) for tag in event.tags])
            .custom_created_at(Timestamp.from_secs(event.created_at))
        )
        return builder.sign_with_keys(keys)
    except SigningError:
        raise
    except Exception as e:  # Intentionally broad: nostr_sdk raises its own FFI error types
        raise SigningError(f"failed to sign kind {event.kind}: {e}") from e


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "OBSERVED_PHASES",
    "TIMEOUT_PHASES",
    "add_capability_tags",
    "add_network_tag",
    "add_rtt_tags",
    "build_metric_event",
    "build_profile_event",
    "build_registration_event",
    "build_relay_list_event",
    "sign_event",
]
