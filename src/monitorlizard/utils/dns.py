"""DNS resolution for the latency probe.

The probe times name resolution as its own phase, so resolution is a single
``getaddrinfo`` call on the running loop's resolver whose result is then
split by address family.
"""

from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from ipaddress import ip_address


@dataclass(frozen=True, slots=True)
class ResolvedHost:
    """Addresses a hostname resolved to.

    See Also:
        [resolve_host][monitorlizard.utils.dns.resolve_host]: The async
            function that produces instances of this class.
    """

    ipv4: str | None = None
    ipv6: str | None = None

    @property
    def has_ip(self) -> bool:
        """Return True if at least one IP address was resolved."""
        return self.ipv4 is not None or self.ipv6 is not None

    @property
    def preferred(self) -> str | None:
        """IPv4 address when available, otherwise IPv6."""
        return self.ipv4 or self.ipv6


async def resolve_host(host: str, port: int, *, timeout: float = 5.0) -> ResolvedHost:  # noqa: ASYNC109
    """Resolve a hostname to its first IPv4 and IPv6 addresses.

    IP literals are returned without a lookup.

    Args:
        host: Hostname or IP literal (IPv6 may be bracketed).
        port: Port passed to ``getaddrinfo`` (affects nothing but the
            returned socket addresses).
        timeout: Maximum seconds to wait for the lookup.

    Returns:
        [ResolvedHost][monitorlizard.utils.dns.ResolvedHost]; both fields are
        ``None`` when the name does not resolve.

    Raises:
        TimeoutError: If the lookup exceeds *timeout*.

    Examples:
        ```python
        result = await resolve_host("relay.damus.io", 443)
        result.preferred  # '35.232.163.46'
        ```
    """
    bare = host.strip("[]")
    try:
        literal = ip_address(bare)
    except ValueError:
        pass
    else:
        if literal.version == 4:  # noqa: PLR2004
            return ResolvedHost(ipv4=bare)
        return ResolvedHost(ipv6=bare)

    loop = asyncio.get_running_loop()
    try:
        infos = await asyncio.wait_for(
            loop.getaddrinfo(bare, port, type=socket.SOCK_STREAM), timeout=timeout
        )
    except (OSError, UnicodeError):
        return ResolvedHost()

    ipv4: str | None = None
    ipv6: str | None = None
    for family, _type, _proto, _canon, sockaddr in infos:
        if family == socket.AF_INET and ipv4 is None:
            ipv4 = str(sockaddr[0])
        elif family == socket.AF_INET6 and ipv6 is None:
            ipv6 = str(sockaddr[0])

    return ResolvedHost(ipv4=ipv4, ipv6=ipv6)
