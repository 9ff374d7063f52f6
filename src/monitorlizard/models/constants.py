"""Shared constants for the models layer.

Enumerations used by several model and service modules. Kept here to avoid
circular imports between the models, nips and services layers.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class NetworkType(StrEnum):
    """Network class of a monitored endpoint, detected from its hostname.

    The value is published verbatim in the ``["other", "network", <value>]``
    tag of every per-tick metric event.

    Attributes:
        CLEARNET: Public internet host.
        TOR: Tor hidden service (``.onion``).
        I2P: I2P eepsite (``.i2p``).
        LOKI: Lokinet service (``.loki``).
        LOCAL: Loopback, private or reserved address.
    """

    CLEARNET = "clearnet"
    TOR = "tor"
    I2P = "i2p"
    LOKI = "loki"
    LOCAL = "local"


class EventKind(IntEnum):
    """Nostr event kinds published by the monitor.

    Attributes:
        SET_METADATA: Kind 0 -- monitor profile (NIP-01).
        RELAY_LIST: Kind 10002 -- relays the monitor writes to (NIP-65).
        MONITOR_ANNOUNCEMENT: Kind 10166 -- monitor registration (NIP-66),
            replaceable.
        RELAY_DISCOVERY: Kind 30166 -- per-tick relay metrics (NIP-66),
            addressable by its ``d`` tag.
    """

    SET_METADATA = 0
    RELAY_LIST = 10_002
    MONITOR_ANNOUNCEMENT = 10_166
    RELAY_DISCOVERY = 30_166


# Fixed subscription request sent by the latency probe.
PROBE_MESSAGE = '["REQ", "1234abcdping", {"kinds": [1], "limit": 1}]'

DEFAULT_GEOHASH_PRECISION = 9
MAX_GEOHASH_PRECISION = 12
