"""
Unsigned event model.

An [UnsignedEvent][monitorlizard.models.event.UnsignedEvent] carries
everything needed to build and sign a Nostr event except the signature
itself. Signing happens in
[sign_event()][monitorlizard.nips.event_builders.sign_event], which returns
an immutable ``nostr_sdk.Event``.

See Also:
    [TagSet][monitorlizard.models.tags.TagSet]: Tag collection carried by
        the event.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .tags import TagSet


@dataclass(frozen=True, slots=True)
class UnsignedEvent:
    """Event payload ready for signing.

    Attributes:
        kind: Event kind (see
            [EventKind][monitorlizard.models.constants.EventKind]).
        created_at: Unix timestamp in seconds.
        content: Event content string (JSON for profile events, otherwise
            usually empty).
        tags: The event's own tag snapshot.
        pubkey: Hex public key of the issuer, if known before signing.
    """

    kind: int
    created_at: int
    content: str = ""
    tags: TagSet = field(default_factory=TagSet)
    pubkey: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.kind <= 65_535:
            raise ValueError(f"kind must be between 0 and 65535, got {self.kind}")
        if self.created_at < 0:
            raise ValueError(f"created_at must be non-negative, got {self.created_at}")

    def tag_values(self, name: str) -> list[str]:
        """Return the first value of every tag named ``name``, in order."""
        return [tag[1] for tag in self.tags if tag[0] == name and len(tag) > 1]
