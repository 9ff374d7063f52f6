"""
Unit tests for core.base_service module.

Tests:
- BaseServiceConfig defaults and validation
- Factory methods (from_yaml, from_dict) and ConfigurationError wrapping
- Graceful shutdown via request_shutdown()
- wait() interruptible sleep
- Context manager support (__aenter__/__aexit__)
- Custom metrics no-ops when disabled
"""

import asyncio
from unittest.mock import patch

import pytest
from pydantic import Field, ValidationError

from monitorlizard.core.base_service import BaseService, BaseServiceConfig
from monitorlizard.core.exceptions import ConfigurationError
from monitorlizard.core.metrics import MetricsConfig


class ConcreteServiceConfig(BaseServiceConfig):
    """Test configuration inheriting from BaseServiceConfig."""

    max_items: int = Field(default=100, ge=1)


class ConcreteService(BaseService[ConcreteServiceConfig]):
    """Test implementation."""

    SERVICE_NAME = "test_service"
    CONFIG_CLASS = ConcreteServiceConfig

    def __init__(self, config: ConcreteServiceConfig | None = None, *, label: str = ""):
        super().__init__(config=config)
        self.label = label
        self.run_count = 0

    async def run(self):
        self.run_count += 1


class TestBaseServiceConfig:
    """BaseServiceConfig defaults and validation."""

    def test_defaults(self):
        config = BaseServiceConfig()
        assert config.interval == 10.0
        assert config.metrics.enabled is False

    def test_interval_minimum(self):
        with pytest.raises(ValidationError):
            BaseServiceConfig(interval=0.5)

    def test_frozen(self):
        config = BaseServiceConfig()
        with pytest.raises(ValidationError):
            config.interval = 20.0


class TestFactories:
    """from_dict() and from_yaml()."""

    def test_default_config(self):
        service = ConcreteService()
        assert service.config.max_items == 100

    def test_from_dict(self):
        service = ConcreteService.from_dict({"interval": 30, "max_items": 5})
        assert service.config.interval == 30.0
        assert service.config.max_items == 5

    def test_from_dict_passes_kwargs(self):
        service = ConcreteService.from_dict({}, label="extra")
        assert service.label == "extra"

    def test_from_dict_invalid(self):
        with pytest.raises(ConfigurationError):
            ConcreteService.from_dict({"max_items": 0})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "service.yaml"
        path.write_text("interval: 15\nmax_items: 7\n")
        service = ConcreteService.from_yaml(str(path))
        assert service.config.interval == 15.0
        assert service.config.max_items == 7


class TestLifecycle:
    """Shutdown, wait() and context manager."""

    async def test_running_by_default(self):
        assert ConcreteService().is_running is True

    async def test_request_shutdown(self):
        service = ConcreteService()
        service.request_shutdown()
        assert service.is_running is False

    async def test_wait_times_out(self):
        service = ConcreteService()
        assert await service.wait(0.01) is False

    async def test_wait_returns_on_shutdown(self):
        service = ConcreteService()

        async def stop_soon():
            await asyncio.sleep(0.01)
            service.request_shutdown()

        task = asyncio.create_task(stop_soon())
        assert await service.wait(10) is True
        await task

    async def test_wait_non_positive_timeout(self):
        service = ConcreteService()
        assert await service.wait(0) is False
        assert await service.wait(-1.0) is False
        service.request_shutdown()
        assert await service.wait(0) is True

    async def test_context_manager(self):
        service = ConcreteService()
        service.request_shutdown()
        async with service:
            assert service.is_running is True
            await service.run()
        assert service.is_running is False
        assert service.run_count == 1


class TestCustomMetrics:
    """set_gauge() and inc_counter()."""

    def test_disabled_is_noop(self):
        service = ConcreteService()
        with patch("monitorlizard.core.base_service.SERVICE_COUNTER") as counter:
            service.inc_counter("ticks_success")
        counter.labels.assert_not_called()

    def test_enabled_records(self):
        config = ConcreteServiceConfig(metrics=MetricsConfig(enabled=True))
        service = ConcreteService(config)
        with (
            patch("monitorlizard.core.base_service.SERVICE_COUNTER") as counter,
            patch("monitorlizard.core.base_service.SERVICE_GAUGE") as gauge,
        ):
            service.inc_counter("ticks_success", 2)
            service.set_gauge("endpoints", 3)
        counter.labels.assert_called_once_with(service="test_service", name="ticks_success")
        counter.labels.return_value.inc.assert_called_once_with(2)
        gauge.labels.return_value.set.assert_called_once_with(3)
