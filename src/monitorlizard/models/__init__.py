"""Domain models: endpoints, tags, measurements and unsigned events.

Models are plain frozen dataclasses (plus the append-only
[TagSet][monitorlizard.models.tags.TagSet]) and depend only on
[monitorlizard.core.exceptions][monitorlizard.core.exceptions].
"""

from .constants import (
    DEFAULT_GEOHASH_PRECISION,
    MAX_GEOHASH_PRECISION,
    PROBE_MESSAGE,
    EventKind,
    NetworkType,
)
from .endpoint import Endpoint, detect_network, normalize_url
from .event import UnsignedEvent
from .measurement import MeasurementResult
from .tags import Tag, TagIdentity, TagSet, tag_identity


__all__ = [
    "DEFAULT_GEOHASH_PRECISION",
    "MAX_GEOHASH_PRECISION",
    "PROBE_MESSAGE",
    "Endpoint",
    "EventKind",
    "MeasurementResult",
    "NetworkType",
    "Tag",
    "TagIdentity",
    "TagSet",
    "UnsignedEvent",
    "detect_network",
    "normalize_url",
    "tag_identity",
]
