"""
Endpoint identity: canonical relay URLs and the monitored endpoint model.

[normalize_url()][monitorlizard.models.endpoint.normalize_url] turns a raw
WebSocket address into the canonical string used as the ``d`` tag of
addressable metric events, so that repeated measurements of one relay
replace each other instead of piling up as distinct records.

Normalization rules:

* scheme and host are lower-cased;
* the default port is removed (``80`` for ``ws``, ``443`` for ``wss``);
* an empty path becomes ``/``;
* userinfo, query and fragment are left exactly as given.

Two addresses that differ only in case, default-port presence or
trailing-slash presence normalize to the same string, and normalizing a
normalized address returns it unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import ip_address
from typing import ClassVar

from rfc3986 import uri_reference
from rfc3986.exceptions import RFC3986Exception
from rfc3986.validators import Validator

from monitorlizard.core.exceptions import MalformedAddressError

from .constants import NetworkType


_DEFAULT_PORTS: dict[str, str] = {"ws": "80", "wss": "443"}
_MAX_PORT = 65_535


def normalize_url(raw_url: str) -> str:
    """Return the canonical form of a relay WebSocket URL.

    Args:
        raw_url: Address as found in configuration or on the command line,
            e.g. ``"WSS://Relay.Example.com:443"``.

    Returns:
        The canonical address, e.g. ``"wss://relay.example.com/"``.

    Raises:
        MalformedAddressError: If the address cannot be parsed, has no host,
            uses a scheme other than ``ws``/``wss``, or has an invalid port.

    Examples:
        ```python
        normalize_url("ws://Relay.Test:80/sub")   # 'ws://relay.test/sub'
        normalize_url("wss://example.com")        # 'wss://example.com/'
        ```
    """
    if "\x00" in raw_url:
        raise MalformedAddressError("Relay URL contains null bytes")

    try:
        uri = uri_reference(raw_url.strip())
        authority = uri.authority_info()
    except RFC3986Exception as e:
        raise MalformedAddressError(f"Invalid URL {raw_url!r}: {e}") from None

    scheme = (uri.scheme or "").lower()
    host = (authority["host"] or "").lower()
    port = authority["port"] or None
    userinfo = authority["userinfo"]

    if scheme not in _DEFAULT_PORTS:
        raise MalformedAddressError(f"Invalid scheme in {raw_url!r}: must be ws or wss")
    if not host:
        raise MalformedAddressError(f"Missing host in {raw_url!r}")
    if port is not None and (not port.isdigit() or int(port) > _MAX_PORT):
        raise MalformedAddressError(f"Invalid port in {raw_url!r}: {port}")
    if port == _DEFAULT_PORTS.get(scheme):
        port = None

    netloc = host
    if userinfo is not None:
        netloc = f"{userinfo}@{netloc}"
    if port is not None:
        netloc = f"{netloc}:{port}"

    normalized = uri.copy_with(scheme=scheme, authority=netloc, path=uri.path or "/")

    validator = Validator().check_validity_of("host", "path")
    try:
        validator.validate(normalized)
    except RFC3986Exception as e:
        raise MalformedAddressError(f"Invalid URL {raw_url!r}: {e}") from None

    return str(normalized.unsplit())


def detect_network(host: str) -> NetworkType:
    """Classify a hostname into a [NetworkType][monitorlizard.models.constants.NetworkType]."""
    host_bare = host.lower().strip("[]")

    for tld, network in Endpoint.NETWORK_TLDS.items():
        if host_bare.endswith(tld):
            return network

    if host_bare in ("localhost", "localhost.localdomain"):
        return NetworkType.LOCAL

    try:
        ip = ip_address(host_bare)
    except ValueError:
        return NetworkType.CLEARNET
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved:
        return NetworkType.LOCAL
    return NetworkType.CLEARNET


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Immutable monitored endpoint: a relay address plus its location.

    The address is normalized on construction; the normalized ``url`` is the
    endpoint's identity for the whole process lifetime.

    Attributes:
        raw_url: Address exactly as configured.
        latitude: Latitude of the relay, used for its geohash ladder.
        longitude: Longitude of the relay, used for its geohash ladder.
        url: Canonical address (see
            [normalize_url()][monitorlizard.models.endpoint.normalize_url]).
        scheme: ``ws`` or ``wss``.
        host: Lower-cased hostname or IP address.
        network: Network class detected from ``host``.

    Raises:
        MalformedAddressError: If ``raw_url`` cannot be normalized.

    Examples:
        ```python
        endpoint = Endpoint("ws://Relay.Test:80/sub")
        endpoint.url       # 'ws://relay.test/sub'
        endpoint.network   # NetworkType.CLEARNET
        ```
    """

    raw_url: str
    latitude: float = 0.0
    longitude: float = 0.0

    url: str = field(init=False)
    scheme: str = field(init=False)
    host: str = field(init=False)
    network: NetworkType = field(init=False)

    NETWORK_TLDS: ClassVar[dict[str, NetworkType]] = {
        ".onion": NetworkType.TOR,
        ".i2p": NetworkType.I2P,
        ".loki": NetworkType.LOKI,
    }

    def __post_init__(self) -> None:
        url = normalize_url(self.raw_url)
        uri = uri_reference(url)
        host = uri.authority_info()["host"] or ""

        # Bypass frozen restriction to set computed fields
        object.__setattr__(self, "url", url)
        object.__setattr__(self, "scheme", uri.scheme)
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "network", detect_network(host))
