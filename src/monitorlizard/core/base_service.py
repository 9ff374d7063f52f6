"""
Abstract base class for long-running monitorlizard services.

``BaseService[ConfigT]`` provides the lifecycle shared by services:
structured logging via [Logger][monitorlizard.core.logger.Logger], graceful
shutdown via ``asyncio.Event``, interruptible waits, YAML/dict factories,
and Prometheus counters and gauges via
[core.metrics][monitorlizard.core.metrics].

Services keep no state across restarts; everything they need is passed in
through their immutable configuration model.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar, cast

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError
from .logger import Logger
from .metrics import SERVICE_COUNTER, SERVICE_GAUGE, MetricsConfig
from .yaml import load_yaml


if TYPE_CHECKING:
    from types import TracebackType


class BaseServiceConfig(BaseModel):
    """Base configuration shared by all services.

    ``interval`` is the period of the service's scheduling loop. The model is
    frozen: configuration is loaded once at startup and never mutated.
    """

    model_config = {"frozen": True}

    interval: float = Field(
        default=10.0,
        ge=1.0,
        description="Seconds between measurement ticks",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Prometheus metrics configuration",
    )


ConfigT = TypeVar("ConfigT", bound=BaseServiceConfig)


class BaseService(ABC, Generic[ConfigT]):
    """Abstract base class for all monitorlizard services.

    Subclasses set ``SERVICE_NAME`` and ``CONFIG_CLASS`` and implement
    [run()][monitorlizard.core.base_service.BaseService.run].

    Attributes:
        SERVICE_NAME: Service identifier used in logging and metrics labels.
        CONFIG_CLASS: Pydantic model class used by the factory methods.
        _config: Typed service configuration.
        _logger: [Logger][monitorlizard.core.logger.Logger] named after the service.
        _shutdown_event: Clear while running; set once shutdown was requested.
    """

    SERVICE_NAME: ClassVar[str]
    CONFIG_CLASS: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT | None = None) -> None:
        self._config: ConfigT = (
            config if config is not None else cast("ConfigT", self.CONFIG_CLASS())
        )
        self._logger = Logger(self.SERVICE_NAME)
        self._shutdown_event = asyncio.Event()

    @property
    def config(self) -> ConfigT:
        """The typed service configuration (read-only)."""
        return self._config

    @abstractmethod
    async def run(self) -> None:
        """Execute the service's main logic until shutdown is requested."""
        ...

    def request_shutdown(self) -> None:
        """Request a graceful shutdown.

        Safe to call from signal handlers: setting an ``asyncio.Event`` is
        atomic, and every pending
        [wait()][monitorlizard.core.base_service.BaseService.wait] returns.
        """
        self._shutdown_event.set()

    @property
    def is_running(self) -> bool:
        """Whether the service is still active (shutdown not yet requested)."""
        return not self._shutdown_event.is_set()

    async def wait(self, timeout: float) -> bool:  # noqa: ASYNC109
        """Wait for either a shutdown signal or a timeout to elapse.

        Returns ``True`` if shutdown was requested during the wait, or
        ``False`` if the timeout expired normally.
        """
        if timeout <= 0:
            return not self.is_running
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=timeout)
            return True
        except TimeoutError:
            return False

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, config_path: str, **kwargs: Any) -> Self:
        """Create a service instance from a YAML configuration file."""
        return cls.from_dict(load_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> Self:
        """Create a service instance from a configuration dictionary.

        Raises:
            ConfigurationError: If ``data`` does not validate against
                ``CONFIG_CLASS``.
        """
        try:
            config = cast("ConfigT", cls.CONFIG_CLASS(**data))
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e
        return cls(config=config, **kwargs)

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        self._shutdown_event.clear()
        self._logger.info("service_started")
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        self._shutdown_event.set()
        self._logger.info("service_stopped")

    # -------------------------------------------------------------------------
    # Custom Metrics
    # -------------------------------------------------------------------------

    def set_gauge(self, name: str, value: float) -> None:
        """Set a named gauge for this service; no-op if metrics are disabled."""
        if not self._config.metrics.enabled:
            return
        SERVICE_GAUGE.labels(service=self.SERVICE_NAME, name=name).set(value)

    def inc_counter(self, name: str, value: float = 1) -> None:
        """Increment a named counter for this service; no-op if metrics are disabled."""
        if not self._config.metrics.enabled:
            return
        SERVICE_COUNTER.labels(service=self.SERVICE_NAME, name=name).inc(value)
