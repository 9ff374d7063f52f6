"""Core layer: service lifecycle, exceptions, logging, metrics and YAML loading.

Has no intra-package dependencies; every other layer imports from here.

Attributes:
    BaseService: Abstract generic base class with lifecycle management,
        factory methods and Prometheus counters/gauges.
    Logger: Structured logger supporting key=value and JSON output modes.
    MetricsServer: Prometheus HTTP endpoint for metrics exposition.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
"""

from .base_service import BaseService, BaseServiceConfig, ConfigT
from .exceptions import (
    CapabilityFetchError,
    ConfigurationError,
    DestinationUnreachableError,
    MalformedAddressError,
    MeasurementError,
    MonitorLizardError,
    PublishingError,
    PublishRejectedError,
    SigningError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    TICK_DURATION_SECONDS,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)
from .yaml import load_yaml


__all__ = [
    "SERVICE_COUNTER",
    "SERVICE_GAUGE",
    "SERVICE_INFO",
    "TICK_DURATION_SECONDS",
    "BaseService",
    "BaseServiceConfig",
    "CapabilityFetchError",
    "ConfigT",
    "ConfigurationError",
    "DestinationUnreachableError",
    "Logger",
    "MalformedAddressError",
    "MeasurementError",
    "MetricsConfig",
    "MetricsServer",
    "MonitorLizardError",
    "PublishRejectedError",
    "PublishingError",
    "SigningError",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
    "start_metrics_server",
]
