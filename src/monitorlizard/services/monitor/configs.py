"""Monitor service configuration models.

See Also:
    [Monitor][monitorlizard.services.monitor.Monitor]: The service class
        that consumes these configurations.
    [BaseServiceConfig][monitorlizard.core.base_service.BaseServiceConfig]:
        Base class providing ``interval`` and ``metrics`` fields.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from monitorlizard.core.base_service import BaseServiceConfig
from monitorlizard.models.constants import DEFAULT_GEOHASH_PRECISION, MAX_GEOHASH_PRECISION
from monitorlizard.models.endpoint import normalize_url
from monitorlizard.utils.keys import KeysConfig


class GeoPoint(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    model_config = {"frozen": True}

    latitude: float = Field(default=0.0, ge=-90.0, le=90.0)
    longitude: float = Field(default=0.0, ge=-180.0, le=180.0)


class EndpointConfig(BaseModel):
    """A monitored relay; a bare URL string is accepted as shorthand.

    Coordinates left unset fall back to ``MonitorConfig.endpoint_location``.
    """

    model_config = {"frozen": True}

    url: str = Field(min_length=1)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_url(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"url": data}
        return data


class PublishingConfig(BaseModel):
    """Destination relays and the per-tick publishing switch.

    Startup events go to ``relays`` whenever the list is non-empty;
    ``enabled`` gates only the per-tick Kind 30166 events.
    """

    model_config = {"frozen": True}

    enabled: bool = Field(default=False, description="Publish per-tick metric events")
    relays: list[str] = Field(default_factory=list)
    timeout: float = Field(default=10.0, gt=0, description="Connect timeout per relay in seconds")

    @field_validator("relays")
    @classmethod
    def _normalize_relays(cls, relays: list[str]) -> list[str]:
        normalized: list[str] = []
        for url in relays:
            canonical = normalize_url(url)
            if canonical not in normalized:
                normalized.append(canonical)
        return normalized


class StartupConfig(BaseModel):
    """Which one-time events are published before the scheduling loops start."""

    model_config = {"frozen": True}

    profile: bool = Field(default=True, description="Kind 0 profile")
    relay_list: bool = Field(default=True, description="Kind 10002 relay list")
    registration: bool = Field(default=True, description="Kind 10166 registration")


class TimeoutsConfig(BaseModel):
    """Per-phase timeout budgets in milliseconds, as announced in Kind 10166."""

    model_config = {"frozen": True}

    open: int = Field(default=5_000, ge=1)
    read: int = Field(default=15_000, ge=1)
    write: int = Field(default=15_000, ge=1)

    def as_dict(self) -> dict[str, int]:
        return {"open": self.open, "read": self.read, "write": self.write}

    @property
    def probe_seconds(self) -> float:
        """Overall probe budget: open and read phases combined."""
        return (self.open + self.read) / 1000


class CapabilitiesConfig(BaseModel):
    """NIP-11 capability document fetch settings."""

    model_config = {"frozen": True}

    enabled: bool = Field(default=True)
    timeout: float = Field(default=10.0, gt=0)
    max_size: int = Field(default=65_536, ge=1024, le=10_485_760)


class InfluxConfig(BaseModel):
    """InfluxDB mirror settings. The token is read from ``token_env``."""

    model_config = {"frozen": True}

    enabled: bool = Field(default=False)
    url: str = Field(default="")
    org: str = Field(default="")
    bucket: str = Field(default="")
    measurement: str = Field(default="relay_latency", min_length=1)
    token_env: str = Field(default="INFLUXDB_TOKEN", min_length=1)
    batch_size: int = Field(default=20, ge=1)
    flush_interval: int = Field(default=1_000, ge=1, description="Milliseconds")

    @property
    def token(self) -> str | None:
        return os.getenv(self.token_env) or None


class MonitorConfig(BaseServiceConfig):
    """Monitor service configuration.

    Note:
        ``keys`` is loaded from the environment during validation, so a
        missing ``PRIVATE_KEY`` fails at startup rather than at the first
        signature.
    """

    name: str = Field(default="monitorlizard", description="Profile name and mirror monitor tag")
    about: str = Field(default="")
    picture: str = Field(default="")
    country_code: str = Field(default="", max_length=2)
    location: GeoPoint = Field(default_factory=GeoPoint, description="Monitor's own location")
    geohash_precision: int = Field(
        default=DEFAULT_GEOHASH_PRECISION, ge=1, le=MAX_GEOHASH_PRECISION
    )
    endpoints: list[EndpointConfig] = Field(default_factory=list)
    endpoint_location: GeoPoint = Field(
        default_factory=GeoPoint, description="Default location of endpoints"
    )
    publishing: PublishingConfig = Field(default_factory=PublishingConfig)
    startup: StartupConfig = Field(default_factory=StartupConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    capabilities: CapabilitiesConfig = Field(default_factory=CapabilitiesConfig)
    influx: InfluxConfig = Field(default_factory=InfluxConfig)
    keys: KeysConfig = Field(default_factory=lambda: KeysConfig.model_validate({}))

    @field_validator("country_code")
    @classmethod
    def _upper_country(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def validate_publishing_relays(self) -> MonitorConfig:
        """Publishing per-tick events requires at least one destination."""
        if self.publishing.enabled and not self.publishing.relays:
            raise ValueError("publishing.enabled requires at least one relay in publishing.relays")
        return self

    @model_validator(mode="after")
    def validate_influx(self) -> MonitorConfig:
        """An enabled InfluxDB mirror needs its url, org and bucket."""
        if not self.influx.enabled:
            return self
        missing = [name for name in ("url", "org", "bucket") if not getattr(self.influx, name)]
        if missing:
            raise ValueError(f"influx.enabled requires: {', '.join(missing)}")
        return self
