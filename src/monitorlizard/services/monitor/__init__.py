"""Monitor service package.

Re-exports the service and its configuration models.
"""

from .configs import (
    CapabilitiesConfig,
    EndpointConfig,
    GeoPoint,
    InfluxConfig,
    MonitorConfig,
    PublishingConfig,
    StartupConfig,
    TimeoutsConfig,
)
from .service import Monitor


__all__ = [
    "CapabilitiesConfig",
    "EndpointConfig",
    "GeoPoint",
    "InfluxConfig",
    "Monitor",
    "MonitorConfig",
    "PublishingConfig",
    "StartupConfig",
    "TimeoutsConfig",
]
