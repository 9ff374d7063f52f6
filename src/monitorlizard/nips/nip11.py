"""
NIP-11 relay capability documents.

[fetch_capabilities()][monitorlizard.nips.nip11.fetch_capabilities] retrieves
a relay's information document over HTTP(S) and validates it into a
[CapabilityDocument][monitorlizard.nips.nip11.CapabilityDocument]. Only the
fields that feed capability tags are kept: supported NIPs, payment and auth
requirements, country codes and free-form topic tags.

Relay documents are untrusted input. Parsing is lenient: values of the wrong
type are dropped rather than rejected, so a document with one malformed field
still contributes the rest.

Note:
    The HTTP URL is derived from the relay URL (``wss`` -> ``https``,
    ``ws`` -> ``http``) and the request carries the
    ``Accept: application/nostr+json`` header required by
    [NIP-11](https://github.com/nostr-protocol/nips/blob/master/11.md).
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from monitorlizard.core.exceptions import CapabilityFetchError
from monitorlizard.models.endpoint import Endpoint  # noqa: TC001
from monitorlizard.utils.http import read_bounded_json


logger = logging.getLogger("monitorlizard.nips.nip11")

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_SIZE = 65_536  # 64 KB


def _int_items(value: Any) -> list[int]:
    if not isinstance(value, list):
        return []
    return [i for i in value if isinstance(i, int) and not isinstance(i, bool)]


def _str_items(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [s for s in value if isinstance(s, str) and s]


class CapabilityLimitation(BaseModel):
    """Access requirements from the document's ``limitation`` object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    payment_required: StrictBool | None = None
    auth_required: StrictBool | None = None

    @field_validator("payment_required", "auth_required", mode="before")
    @classmethod
    def _drop_non_bool(cls, value: Any) -> Any:
        return value if isinstance(value, bool) else None


class CapabilityDocument(BaseModel):
    """Subset of a NIP-11 document used for capability tags.

    Attributes:
        name: Relay's self-reported name (logging only).
        supported_nips: NIP numbers the relay claims to implement.
        limitation: Payment and auth requirements.
        relay_countries: Country codes the relay declares.
        tags: Free-form topic labels.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    supported_nips: list[int] = Field(default_factory=list)
    limitation: CapabilityLimitation = Field(default_factory=CapabilityLimitation)
    relay_countries: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _drop_non_str(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @field_validator("supported_nips", mode="before")
    @classmethod
    def _filter_ints(cls, value: Any) -> list[int]:
        return _int_items(value)

    @field_validator("relay_countries", "tags", mode="before")
    @classmethod
    def _filter_strs(cls, value: Any) -> list[str]:
        return _str_items(value)

    @field_validator("limitation", mode="before")
    @classmethod
    def _default_limitation(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


def capability_url(endpoint: Endpoint) -> str:
    """Return the HTTP(S) URL serving the endpoint's NIP-11 document."""
    protocol = "https" if endpoint.scheme == "wss" else "http"
    return protocol + endpoint.url[len(endpoint.scheme) :]


async def _get_document(
    http_url: str,
    timeout: float,  # noqa: ASYNC109
    max_size: int,
) -> dict[str, Any]:
    headers = {"Accept": "application/nostr+json"}
    async with (
        aiohttp.ClientSession() as session,
        session.get(
            http_url,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp,
    ):
        if resp.status != HTTPStatus.OK:
            raise ValueError(f"HTTP {resp.status}")

        # NIP-11 requires application/nostr+json or application/json
        content_type = resp.headers.get("Content-Type", "")
        content_type_lower = content_type.lower().split(";")[0].strip()
        if content_type_lower not in ("application/nostr+json", "application/json"):
            raise ValueError(f"Invalid Content-Type: {content_type}")

        data = await read_bounded_json(resp, max_size)
        if not isinstance(data, dict):
            raise ValueError(f"Expected dict, got {type(data).__name__}")

        return data


async def fetch_capabilities(
    endpoint: Endpoint,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
    max_size: int = DEFAULT_MAX_SIZE,
) -> CapabilityDocument:
    """Fetch and parse a relay's NIP-11 capability document.

    Args:
        endpoint: Relay to query.
        timeout: Request timeout in seconds.
        max_size: Maximum accepted body size in bytes.

    Returns:
        The parsed [CapabilityDocument][monitorlizard.nips.nip11.CapabilityDocument].

    Raises:
        CapabilityFetchError: On network errors, timeouts, non-200 responses,
            a wrong content type, an oversized body, or a body that is not a
            JSON object (including one nested too deeply to decode).
    """
    http_url = capability_url(endpoint)
    try:
        data = await _get_document(http_url, timeout, max_size)
    except (OSError, TimeoutError, aiohttp.ClientError, ValueError, RecursionError) as e:
        # RecursionError: deeply nested JSON from an untrusted relay
        reason = str(e) or type(e).__name__
        logger.debug("nip11_failed relay=%s error=%s", endpoint.url, reason)
        raise CapabilityFetchError(f"{endpoint.url}: {reason}") from e

    document = CapabilityDocument.model_validate(data)
    logger.debug(
        "nip11_succeeded relay=%s name=%s nips=%s",
        endpoint.url,
        document.name,
        len(document.supported_nips),
    )
    return document
