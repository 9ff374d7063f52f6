"""
Geohash precision ladders for NIP-52 style ``g`` tags.

A coordinate is encoded once at the maximum precision with ``geohash2`` and
every shorter prefix is emitted as its own ``g`` tag, so subscribers can
match on whatever granularity they filter by.

Examples:
    ```python
    geohash_ladder(48.8566, 2.3522, 3)   # ['u', 'u0', 'u09']
    ```
"""

from __future__ import annotations

import geohash2

from monitorlizard.models.constants import DEFAULT_GEOHASH_PRECISION, MAX_GEOHASH_PRECISION
from monitorlizard.models.tags import TagSet


GEO_TAG = "g"


def geohash_ladder(
    latitude: float,
    longitude: float,
    max_precision: int = DEFAULT_GEOHASH_PRECISION,
) -> list[str]:
    """Return geohash prefixes for precisions ``1..max_precision``.

    Each entry is a prefix of the next one and the last entry is the full
    encoding at ``max_precision``.

    Raises:
        ValueError: If ``max_precision`` is outside ``1..12`` or the
            coordinates are out of range.
    """
    if not 1 <= max_precision <= MAX_GEOHASH_PRECISION:
        raise ValueError(
            f"max_precision must be between 1 and {MAX_GEOHASH_PRECISION}, got {max_precision}"
        )
    if not -90.0 <= latitude <= 90.0:  # noqa: PLR2004
        raise ValueError(f"latitude out of range: {latitude}")
    if not -180.0 <= longitude <= 180.0:  # noqa: PLR2004
        raise ValueError(f"longitude out of range: {longitude}")

    full = geohash2.encode(latitude, longitude, precision=max_precision)
    return [full[:i] for i in range(1, max_precision + 1)]


def add_geo_tags(
    tags: TagSet,
    latitude: float,
    longitude: float,
    max_precision: int = DEFAULT_GEOHASH_PRECISION,
) -> None:
    """Append one ``["g", prefix]`` tag per ladder step."""
    for prefix in geohash_ladder(latitude, longitude, max_precision):
        tags.append((GEO_TAG, prefix))
