"""monitorlizard exception hierarchy.

Typed exceptions for every failure category of the measurement pipeline.
Each class documents whether it is fatal and which stage raises it, so
callers can catch exactly what they are prepared to handle and let
``CancelledError`` propagate untouched.

Exception hierarchy:

```text
MonitorLizardError (base -- never raised directly)
├── ConfigurationError            -- config validation, missing keys, bad YAML
├── MalformedAddressError         -- endpoint URL cannot be normalized
├── CapabilityFetchError          -- NIP-11 document unavailable
├── MeasurementError              -- latency probe failed
├── SigningError                  -- event could not be signed
└── PublishingError               -- event broadcast failures
    ├── DestinationUnreachableError  -- connection to a destination failed
    └── PublishRejectedError         -- destination refused the event
```

Only [ConfigurationError][monitorlizard.core.exceptions.ConfigurationError]
and [MalformedAddressError][monitorlizard.core.exceptions.MalformedAddressError]
are fatal, and only at startup. Everything raised in the per-tick path is
logged and absorbed by the scheduling loop.
"""

from __future__ import annotations


class MonitorLizardError(Exception):
    """Base exception for all monitorlizard errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class ConfigurationError(MonitorLizardError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


class MalformedAddressError(MonitorLizardError, ValueError):
    """An endpoint address could not be parsed or uses an unsupported scheme.

    Fatal for the affected endpoint only: it is excluded from scheduling
    while the remaining endpoints keep running.
    """


# ---------------------------------------------------------------------------
# Per-tick pipeline
# ---------------------------------------------------------------------------


class CapabilityFetchError(MonitorLizardError):
    """The relay's NIP-11 capability document could not be retrieved.

    Non-fatal: the endpoint is still monitored, its events simply carry no
    capability-derived tags.
    """


class MeasurementError(MonitorLizardError):
    """A latency probe failed before all phases completed.

    Non-fatal: the current tick is skipped (no event, no mirror write).
    """


class SigningError(MonitorLizardError):
    """An event could not be signed with the monitor's keys.

    Non-fatal: the single event is dropped and never published.
    """


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishingError(MonitorLizardError):
    """Failed to broadcast a Nostr event to a destination relay.

    Attributes:
        destination: URL of the destination that failed.
    """

    def __init__(self, destination: str, reason: str) -> None:
        super().__init__(f"{destination}: {reason}")
        self.destination = destination
        self.reason = reason


class DestinationUnreachableError(PublishingError):
    """The connection to a destination relay could not be established."""


class PublishRejectedError(PublishingError):
    """The destination relay was reached but did not accept the event."""
