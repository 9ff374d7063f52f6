"""
Monitor service: periodic relay latency measurement and NIP-66 publishing.

Lifecycle of one [Monitor][monitorlizard.services.monitor.Monitor] run:

1. **Endpoints** are resolved from the configuration, or from command-line
   URLs when the configuration lists none. An address that cannot be
   normalized is logged and excluded; the others proceed.
2. **Startup events** (Kind 0 profile, Kind 10002 relay list, Kind 10166
   registration) are published once, each behind its own flag.
3. **Scheduling loops**: one task per endpoint. Each loop first scans the
   endpoint's NIP-11 document into a base tag set, then ticks with a fixed
   period. A tick measures the endpoint, mirrors the raw timings, and
   composes, signs and publishes a Kind 30166 metric event.

Endpoint loops share nothing mutable: each tick builds its event from a
snapshot of its own endpoint's base tags. A failed measurement skips the
tick. No failure in the per-tick path stops a loop; the next tick is the only
retry.

Timer semantics: tick ``n`` is due at ``start + n * interval``. When a tick
overruns, missed deadlines are dropped so that at most one tick fires
immediately, after which the loop is back on its fixed grid.

See Also:
    [MonitorConfig][monitorlizard.services.monitor.MonitorConfig]:
        Configuration model for this service.
    [publish_event][monitorlizard.services.publisher.publish_event]:
        Best-effort fan-out used for every event.
    [MetricsMirror][monitorlizard.services.mirror.MetricsMirror]:
        InfluxDB mirror of raw phase timings.

Examples:
    ```python
    from monitorlizard.services.monitor import Monitor

    monitor = Monitor.from_yaml("config/monitor.yaml")
    async with monitor:
        await monitor.run()
    ```
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, ClassVar

from monitorlizard.core.base_service import BaseService
from monitorlizard.core.exceptions import (
    CapabilityFetchError,
    ConfigurationError,
    MalformedAddressError,
    MeasurementError,
    SigningError,
)
from monitorlizard.core.metrics import SERVICE_INFO, TICK_DURATION_SECONDS
from monitorlizard.models.endpoint import Endpoint
from monitorlizard.models.tags import TagSet
from monitorlizard.nips.event_builders import (
    add_capability_tags,
    build_metric_event,
    build_profile_event,
    build_registration_event,
    build_relay_list_event,
    sign_event,
)
from monitorlizard.nips.nip11 import fetch_capabilities
from monitorlizard.services.mirror import InfluxMetricsSink, MetricsMirror
from monitorlizard.services.publisher import publish_event
from monitorlizard.utils.wsstat import measure_latency

from .configs import MonitorConfig


if TYPE_CHECKING:
    from collections.abc import Sequence

    from nostr_sdk import Keys

    from monitorlizard.models.event import UnsignedEvent
    from monitorlizard.services.publisher import PublishOutcome


class Monitor(BaseService[MonitorConfig]):
    """Relay latency monitor publishing NIP-66 events.

    Args:
        config: Service configuration.
        urls: Endpoint URLs used when ``config.endpoints`` is empty.
        mirror: Metrics mirror; built from ``config.influx`` when omitted.

    See Also:
        [MonitorConfig][monitorlizard.services.monitor.MonitorConfig]:
            Configuration model for this service.
    """

    SERVICE_NAME: ClassVar[str] = "monitor"
    CONFIG_CLASS: ClassVar[type[MonitorConfig]] = MonitorConfig

    def __init__(
        self,
        config: MonitorConfig | None = None,
        *,
        urls: Sequence[str] = (),
        mirror: MetricsMirror | None = None,
    ) -> None:
        super().__init__(config=config)
        self._keys: Keys = self._config.keys.keys
        self._pubkey: str = self._keys.public_key().to_hex()
        self._urls = list(urls)
        self._mirror = mirror if mirror is not None else self._build_mirror()

    @property
    def mirror(self) -> MetricsMirror:
        return self._mirror

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def _build_mirror(self) -> MetricsMirror:
        """Build the InfluxDB mirror, or a no-op one when it cannot be used."""
        influx = self._config.influx
        if not influx.enabled:
            return MetricsMirror()

        token = influx.token
        if token is None:
            self._logger.warning(
                "influx_disabled", reason="token not set", token_env=influx.token_env
            )
            return MetricsMirror()

        sink = InfluxMetricsSink(
            influx.url,
            token,
            influx.org,
            influx.bucket,
            batch_size=influx.batch_size,
            flush_interval=influx.flush_interval,
        )
        self._logger.info("influx_enabled", url=influx.url, bucket=influx.bucket)
        return MetricsMirror(sink, measurement=influx.measurement, monitor=self._config.name)

    def resolve_endpoints(self) -> list[Endpoint]:
        """Build the endpoint list, excluding malformed and duplicate addresses."""
        default = self._config.endpoint_location
        entries: list[tuple[str, float, float]] = [
            (
                e.url,
                e.latitude if e.latitude is not None else default.latitude,
                e.longitude if e.longitude is not None else default.longitude,
            )
            for e in self._config.endpoints
        ]
        if not entries:
            entries = [(url, default.latitude, default.longitude) for url in self._urls]

        endpoints: list[Endpoint] = []
        seen: set[str] = set()
        for raw_url, latitude, longitude in entries:
            try:
                endpoint = Endpoint(raw_url, latitude, longitude)
            except MalformedAddressError as e:
                self._logger.error("endpoint_rejected", url=raw_url, error=str(e))
                continue
            if endpoint.url in seen:
                self._logger.warning("endpoint_duplicate", url=endpoint.url)
                continue
            seen.add(endpoint.url)
            endpoints.append(endpoint)

        return endpoints

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    async def sign_and_publish(self, unsigned: UnsignedEvent, label: str) -> PublishOutcome | None:
        """Sign an event and publish it to every destination relay.

        Returns:
            The publish outcome, or ``None`` when signing failed and nothing
            was sent.
        """
        try:
            event = sign_event(unsigned, self._keys)
        except SigningError as e:
            self._logger.error("signing_failed", event=label, error=str(e))
            self.inc_counter("signing_failed")
            return None

        relays = self._config.publishing.relays
        outcome = await publish_event(
            event, relays, keys=self._keys, timeout=self._config.publishing.timeout
        )
        if outcome.success:
            self.inc_counter("events_published")
            self._logger.debug("publish_completed", event=label, relays=outcome.attempted)
        else:
            self.inc_counter("publish_failed")
            self._logger.warning(
                "publish_failed",
                event=label,
                succeeded=outcome.succeeded,
                attempted=outcome.attempted,
                error=str(outcome.error),
            )
        return outcome

    async def publish_startup_events(self) -> None:
        """Publish the one-time profile, relay list and registration events."""
        if not self._config.publishing.relays:
            self._logger.warning("startup_events_skipped", reason="no publishing relays")
            return

        cfg = self._config
        if cfg.startup.profile:
            await self.sign_and_publish(
                build_profile_event(name=cfg.name, about=cfg.about, picture=cfg.picture),
                "profile",
            )
        if cfg.startup.relay_list:
            await self.sign_and_publish(
                build_relay_list_event(cfg.publishing.relays), "relay_list"
            )
        if cfg.startup.registration:
            await self.sign_and_publish(
                build_registration_event(
                    interval=int(cfg.interval),
                    pubkey=self._pubkey,
                    timeouts=cfg.timeouts.as_dict(),
                    country_code=cfg.country_code,
                    latitude=cfg.location.latitude,
                    longitude=cfg.location.longitude,
                    geohash_precision=cfg.geohash_precision,
                ),
                "registration",
            )

    # -------------------------------------------------------------------------
    # Per-endpoint pipeline
    # -------------------------------------------------------------------------

    async def scan_capabilities(self, endpoint: Endpoint) -> TagSet:
        """Build the endpoint's base tag set from its NIP-11 document.

        A failed fetch yields an empty set; the endpoint is still monitored.
        """
        base_tags = TagSet()
        if not self._config.capabilities.enabled:
            return base_tags

        try:
            document = await fetch_capabilities(
                endpoint,
                timeout=self._config.capabilities.timeout,
                max_size=self._config.capabilities.max_size,
            )
        except CapabilityFetchError as e:
            self._logger.warning("capability_fetch_failed", relay=endpoint.url, error=str(e))
            self.inc_counter("capability_fetch_failed")
            return base_tags

        add_capability_tags(base_tags, document)
        self._logger.debug("capabilities_scanned", relay=endpoint.url, tags=len(base_tags))
        return base_tags

    async def tick(self, endpoint: Endpoint, base_tags: TagSet) -> bool:
        """Run one measure-mirror-compose-publish cycle.

        Returns:
            ``True`` if the measurement succeeded, ``False`` if the tick was
            skipped.
        """
        created_at = int(time.time())
        try:
            result, _reply = await measure_latency(
                endpoint.url, timeout=self._config.timeouts.probe_seconds
            )
        except MeasurementError as e:
            self._logger.warning("measurement_failed", relay=endpoint.url, error=str(e))
            self.inc_counter("ticks_failed")
            return False

        self._mirror.enqueue(endpoint, result, created_at)

        self._logger.info(
            "measurement_completed",
            relay=endpoint.url,
            rtt_open=result.open_latency,
            rtt_read=result.message_round_trip,
        )

        if self._config.publishing.enabled:
            unsigned = build_metric_event(
                endpoint,
                result,
                base_tags,
                geohash_precision=self._config.geohash_precision,
                created_at=created_at,
            )
            await self.sign_and_publish(unsigned, "metric")

        self.inc_counter("ticks_success")
        return True

    async def _guarded_tick(self, endpoint: Endpoint, base_tags: TagSet) -> None:
        start = time.monotonic()
        try:
            await self.tick(endpoint, base_tags)
        except Exception as e:  # Intentionally broad: a tick must never stop its loop
            self._logger.error(
                "tick_failed", relay=endpoint.url, error=str(e), error_type=type(e).__name__
            )
            self.inc_counter("ticks_failed")
        finally:
            if self._config.metrics.enabled:
                TICK_DURATION_SECONDS.labels(service=self.SERVICE_NAME).observe(
                    time.monotonic() - start
                )

    async def _guarded_scan(self, endpoint: Endpoint) -> TagSet:
        try:
            return await self.scan_capabilities(endpoint)
        except Exception as e:  # Intentionally broad: a bad document must never stop its loop
            self._logger.error(
                "capability_scan_failed",
                relay=endpoint.url,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.inc_counter("capability_fetch_failed")
            return TagSet()

    async def run_endpoint(self, endpoint: Endpoint) -> None:
        """Scheduling loop of one endpoint; returns once shutdown is requested."""
        base_tags = await self._guarded_scan(endpoint)
        period = self._config.interval
        loop = asyncio.get_running_loop()
        deadline = loop.time() + period

        self._logger.info("endpoint_scheduled", relay=endpoint.url, interval=period)

        while self.is_running:
            if await self.wait(deadline - loop.time()):
                break

            await self._guarded_tick(endpoint, base_tags)

            deadline += period
            now = loop.time()
            if deadline < now:
                # Drop missed ticks; only the latest fires immediately
                deadline += ((now - deadline) // period) * period

        self._logger.debug("endpoint_stopped", relay=endpoint.url)

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def _prepare(self) -> list[Endpoint]:
        endpoints = self.resolve_endpoints()
        if not endpoints:
            raise ConfigurationError("no valid endpoints to monitor")
        self.set_gauge("endpoints", len(endpoints))
        return endpoints

    async def run(self) -> None:
        """Publish startup events, then run every endpoint loop until shutdown.

        Raises:
            ConfigurationError: If no endpoint survives normalization.
        """
        endpoints = self._prepare()
        if self._config.metrics.enabled:
            SERVICE_INFO.info({"service": self.SERVICE_NAME})
        self._logger.info(
            "monitor_started",
            endpoints=len(endpoints),
            interval=self._config.interval,
            publishing=self._config.publishing.enabled,
            mirror=self._mirror.enabled,
        )

        try:
            await self.publish_startup_events()
            async with asyncio.TaskGroup() as tg:
                for endpoint in endpoints:
                    tg.create_task(self.run_endpoint(endpoint))
        finally:
            self._mirror.close()

    async def run_once(self) -> dict[str, Any]:
        """Publish startup events and run a single tick per endpoint.

        Returns:
            Counts of ``measured`` and ``failed`` endpoints.
        """
        endpoints = self._prepare()
        try:
            await self.publish_startup_events()

            async def _one(endpoint: Endpoint) -> bool:
                base_tags = await self._guarded_scan(endpoint)
                return await self.tick(endpoint, base_tags)

            results = await asyncio.gather(*(_one(e) for e in endpoints), return_exceptions=True)
        finally:
            self._mirror.close()

        measured = 0
        for endpoint, result in zip(endpoints, results, strict=True):
            if isinstance(result, BaseException):
                self._logger.error("tick_failed", relay=endpoint.url, error=str(result))
            elif result:
                measured += 1

        summary = {"measured": measured, "failed": len(endpoints) - measured}
        self._logger.info("cycle_completed", **summary)
        return summary
