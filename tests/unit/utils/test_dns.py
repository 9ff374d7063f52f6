"""
Unit tests for utils.dns module.

Tests:
- ResolvedHost properties
- resolve_host() IP literals, family split, failures and timeouts
"""

import asyncio
import socket
from unittest.mock import AsyncMock

import pytest

from monitorlizard.utils.dns import ResolvedHost, resolve_host


def _info(family: int, address: str) -> tuple:
    sockaddr = (address, 443) if family == socket.AF_INET else (address, 443, 0, 0)
    return (family, socket.SOCK_STREAM, 6, "", sockaddr)


@pytest.fixture
def fake_getaddrinfo(monkeypatch: pytest.MonkeyPatch):
    """Patch getaddrinfo of every event loop with an AsyncMock."""
    mock = AsyncMock()
    monkeypatch.setattr(asyncio.BaseEventLoop, "getaddrinfo", mock)
    return mock


class TestResolvedHost:
    """ResolvedHost."""

    def test_empty(self):
        result = ResolvedHost()
        assert result.has_ip is False
        assert result.preferred is None

    def test_prefers_ipv4(self):
        assert ResolvedHost(ipv4="1.2.3.4", ipv6="::1").preferred == "1.2.3.4"

    def test_falls_back_to_ipv6(self):
        assert ResolvedHost(ipv6="2001:db8::1").preferred == "2001:db8::1"


class TestResolveHost:
    """resolve_host()."""

    async def test_ipv4_literal(self, fake_getaddrinfo):
        result = await resolve_host("8.8.8.8", 443)
        assert result == ResolvedHost(ipv4="8.8.8.8")
        fake_getaddrinfo.assert_not_called()

    async def test_bracketed_ipv6_literal(self, fake_getaddrinfo):
        result = await resolve_host("[2001:db8::1]", 443)
        assert result == ResolvedHost(ipv6="2001:db8::1")
        fake_getaddrinfo.assert_not_called()

    async def test_splits_families(self, fake_getaddrinfo):
        fake_getaddrinfo.return_value = [
            _info(socket.AF_INET6, "2001:db8::5"),
            _info(socket.AF_INET, "203.0.113.7"),
            _info(socket.AF_INET, "203.0.113.8"),
        ]
        result = await resolve_host("relay.example.com", 443)
        assert result.ipv4 == "203.0.113.7"
        assert result.ipv6 == "2001:db8::5"

    async def test_lookup_failure(self, fake_getaddrinfo):
        fake_getaddrinfo.side_effect = socket.gaierror("Name or service not known")
        result = await resolve_host("nonexistent.invalid", 443)
        assert result.has_ip is False

    async def test_timeout_propagates(self, fake_getaddrinfo):
        async def _slow(*args, **kwargs):
            await asyncio.sleep(10)

        fake_getaddrinfo.side_effect = _slow
        with pytest.raises(TimeoutError):
            await resolve_host("slow.example.com", 443, timeout=0.01)
