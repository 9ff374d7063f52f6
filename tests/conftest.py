"""
Pytest configuration and shared fixtures for monitorlizard tests.

Provides:
- A valid test private key exported as ``PRIVATE_KEY``
- Sample endpoints, measurement results and monitor configs
- A recording metrics sink
"""

import logging
from typing import Any

import pytest
from nostr_sdk import Keys

from monitorlizard.models import Endpoint, MeasurementResult


# Valid secp256k1 test key (DO NOT USE IN PRODUCTION)
VALID_HEX_KEY = (
    "67dea2ed018072d675f5415ecfaed7d2597555e202d85b3d65ea4e58d2d92ffa"  # pragma: allowlist secret
)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Keys
# ============================================================================


@pytest.fixture(autouse=True)
def set_private_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set PRIVATE_KEY for every test so that MonitorConfig() validates."""
    monkeypatch.setenv("PRIVATE_KEY", VALID_HEX_KEY)


@pytest.fixture
def test_keys() -> Keys:
    """Return Keys parsed from the valid hex test key."""
    return Keys.parse(VALID_HEX_KEY)


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def endpoint() -> Endpoint:
    """Endpoint with a non-default path and an explicit default port."""
    return Endpoint("ws://Relay.Test:80/sub", 48.8566, 2.3522)


@pytest.fixture
def measurement() -> MeasurementResult:
    """Measurement with dns=5, tcp=10, tls=0, ws=20, rtt=15 (ms)."""
    return MeasurementResult(
        dns_lookup=5,
        tcp_connection=10,
        tls_handshake=0,
        ws_handshake=20,
        message_round_trip=15,
    )


@pytest.fixture
def monitor_config_dict() -> dict[str, Any]:
    """Monitor configuration with publishing enabled and two destinations."""
    return {
        "interval": 10,
        "name": "lizard",
        "about": "test monitor",
        "country_code": "fr",
        "location": {"latitude": 48.8566, "longitude": 2.3522},
        "endpoints": ["ws://Relay.Test:80/sub"],
        "publishing": {
            "enabled": True,
            "relays": ["wss://dest-one.example", "wss://dest-two.example"],
        },
    }


# ============================================================================
# Metrics Sink
# ============================================================================


class RecordingSink:
    """MetricsSink that stores every point it receives."""

    def __init__(self) -> None:
        self.points: list[tuple[str, dict[str, str], dict[str, int], int]] = []
        self.closed = False

    def write_point(
        self,
        measurement: str,
        tags: dict[str, str],
        fields: dict[str, int],
        timestamp: int,
    ) -> None:
        self.points.append((measurement, tags, fields, timestamp))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
