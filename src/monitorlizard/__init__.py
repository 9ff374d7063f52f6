r"""monitorlizard -- NIP-66 relay latency monitor.

Periodically probes Nostr relays, measures connection and round-trip
latencies, and publishes the results as signed NIP-66 events to a set of
destination relays, optionally mirroring raw timings to InfluxDB.

Imports flow strictly downward:

```text
              services         Scheduling loops, fan-out publish, mirror
             /   |   \
          nips  utils  |       NIP-11, geohash ladders, event composers, probe
             \   |    /
              models           Frozen dataclasses and the tag set
                |
               core            Base service, exceptions, logging, metrics
```

Note:
    Top-level imports (``from monitorlizard import Monitor``) use lazy
    loading and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("monitorlizard")

__all__ = [
    "BaseService",
    "Endpoint",
    "Logger",
    "MeasurementResult",
    "MetricsMirror",
    "Monitor",
    "MonitorConfig",
    "NetworkType",
    "PublishOutcome",
    "TagSet",
    "UnsignedEvent",
    "normalize_url",
    "publish_event",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "BaseService": ("monitorlizard.core", "BaseService"),
    "Logger": ("monitorlizard.core", "Logger"),
    "Endpoint": ("monitorlizard.models", "Endpoint"),
    "MeasurementResult": ("monitorlizard.models", "MeasurementResult"),
    "NetworkType": ("monitorlizard.models", "NetworkType"),
    "TagSet": ("monitorlizard.models", "TagSet"),
    "UnsignedEvent": ("monitorlizard.models", "UnsignedEvent"),
    "normalize_url": ("monitorlizard.models", "normalize_url"),
    "MetricsMirror": ("monitorlizard.services", "MetricsMirror"),
    "Monitor": ("monitorlizard.services", "Monitor"),
    "MonitorConfig": ("monitorlizard.services", "MonitorConfig"),
    "PublishOutcome": ("monitorlizard.services", "PublishOutcome"),
    "publish_event": ("monitorlizard.services", "publish_event"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'monitorlizard' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
