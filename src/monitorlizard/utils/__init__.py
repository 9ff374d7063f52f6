"""Utilities: DNS, bounded HTTP reads, key loading, relay sessions and the latency probe.

Depends on [monitorlizard.core][monitorlizard.core] and
[monitorlizard.models][monitorlizard.models]; used by
[monitorlizard.nips][monitorlizard.nips] and
[monitorlizard.services][monitorlizard.services].
"""

from .dns import ResolvedHost, resolve_host
from .http import read_bounded_json
from .keys import ENV_PRIVATE_KEY, KeysConfig, load_keys_from_env
from .transport import DEFAULT_TIMEOUT, close_client, connect_relay, create_client
from .wsstat import measure_latency


__all__ = [
    "DEFAULT_TIMEOUT",
    "ENV_PRIVATE_KEY",
    "KeysConfig",
    "ResolvedHost",
    "close_client",
    "connect_relay",
    "create_client",
    "load_keys_from_env",
    "measure_latency",
    "read_bounded_json",
    "resolve_host",
]
