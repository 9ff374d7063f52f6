"""
Unit tests for models.event module.

Tests:
- UnsignedEvent defaults and validation
- tag_values() lookup
- Constants used by events
"""

import pytest

from monitorlizard.models import PROBE_MESSAGE, EventKind, NetworkType, TagSet, UnsignedEvent


class TestUnsignedEvent:
    """UnsignedEvent dataclass."""

    def test_defaults(self):
        event = UnsignedEvent(kind=1, created_at=1_700_000_000)
        assert event.content == ""
        assert len(event.tags) == 0
        assert event.pubkey is None

    def test_default_tags_not_shared(self):
        a = UnsignedEvent(kind=1, created_at=0)
        b = UnsignedEvent(kind=1, created_at=0)
        a.tags.append(("t", "x"))
        assert len(b.tags) == 0

    @pytest.mark.parametrize("kind", [-1, 65_536])
    def test_kind_range(self, kind):
        with pytest.raises(ValueError, match="kind"):
            UnsignedEvent(kind=kind, created_at=0)

    def test_negative_timestamp(self):
        with pytest.raises(ValueError, match="created_at"):
            UnsignedEvent(kind=1, created_at=-5)

    def test_tag_values(self):
        tags = TagSet([("g", "u"), ("g", "u0"), ("d", "wss://r.example/"), ("k",)])
        event = UnsignedEvent(kind=30_166, created_at=0, tags=tags)
        assert event.tag_values("g") == ["u", "u0"]
        assert event.tag_values("d") == ["wss://r.example/"]
        assert event.tag_values("k") == []


class TestConstants:
    """Event kinds and related constants."""

    def test_event_kinds(self):
        assert EventKind.SET_METADATA == 0
        assert EventKind.RELAY_LIST == 10_002
        assert EventKind.MONITOR_ANNOUNCEMENT == 10_166
        assert EventKind.RELAY_DISCOVERY == 30_166

    def test_network_values(self):
        assert {n.value for n in NetworkType} == {"clearnet", "tor", "i2p", "loki", "local"}

    def test_probe_message(self):
        assert PROBE_MESSAGE == '["REQ", "1234abcdping", {"kinds": [1], "limit": 1}]'
