"""NIP protocol layer: capability documents, geohash ladders and event composers.

Attributes:
    fetch_capabilities: NIP-11 document fetch.
    geohash_ladder: Geohash prefixes at every precision up to a maximum.
    build_metric_event: Kind 30166 per-tick metric composer.
    sign_event: Signs an unsigned event into a ``nostr_sdk.Event``.
"""

from .event_builders import (
    add_capability_tags,
    add_network_tag,
    add_rtt_tags,
    build_metric_event,
    build_profile_event,
    build_registration_event,
    build_relay_list_event,
    sign_event,
)
from .geo import add_geo_tags, geohash_ladder
from .nip11 import CapabilityDocument, CapabilityLimitation, capability_url, fetch_capabilities


__all__ = [
    "CapabilityDocument",
    "CapabilityLimitation",
    "add_capability_tags",
    "add_geo_tags",
    "add_network_tag",
    "add_rtt_tags",
    "build_metric_event",
    "build_profile_event",
    "build_registration_event",
    "build_relay_list_event",
    "capability_url",
    "fetch_capabilities",
    "geohash_ladder",
    "sign_event",
]
