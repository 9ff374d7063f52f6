"""
Ordered, deduplicated tag collections for composed events.

A [Tag][monitorlizard.models.tags.Tag] is a tuple of strings whose first
field is the tag name. Two tags are duplicates when they share the same
identity, the ``(name, first value)`` pair, regardless of any trailing
fields.

A [TagSet][monitorlizard.models.tags.TagSet] keeps tags in first-insertion
order, which is the on-wire order of the event's ``tags`` array. Tags are
never removed. Every event is built from its own
[copy()][monitorlizard.models.tags.TagSet.copy] of a base set, so concurrent
scheduling loops never touch the same instance.

Examples:
    ```python
    tags = TagSet()
    tags.append(("N", "11"))
    tags.append(("N", "11", "ignored"))   # no-op, same identity
    tags.append(("N", "42"))
    tags.to_lists()   # [['N', '11'], ['N', '42']]
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


Tag = tuple[str, ...]
TagIdentity = tuple[str, str]


def tag_identity(tag: Tag) -> TagIdentity:
    """Return the deduplication identity of a tag: ``(name, first value)``.

    Raises:
        ValueError: If the tag is empty (it has no name).
    """
    if not tag:
        raise ValueError("tag must have at least a name")
    return (tag[0], tag[1] if len(tag) > 1 else "")


class TagSet:
    """Append-only ordered collection of tags without duplicate identities.

    Args:
        tags: Optional initial tags, appended in order with the usual
            deduplication rule.
    """

    __slots__ = ("_identities", "_tags")

    def __init__(self, tags: Iterable[Iterable[str]] = ()) -> None:
        self._tags: list[Tag] = []
        self._identities: set[TagIdentity] = set()
        self.extend(tags)

    def append(self, tag: Iterable[str]) -> bool:
        """Add a tag unless one with the same identity is already present.

        Returns:
            ``True`` if the tag was inserted, ``False`` if it was a duplicate.

        Raises:
            ValueError: If the tag is empty or a field is not a string.
        """
        fields = tuple(tag)
        if not all(isinstance(f, str) for f in fields):
            raise ValueError(f"tag fields must be strings: {fields!r}")
        identity = tag_identity(fields)
        if identity in self._identities:
            return False
        self._identities.add(identity)
        self._tags.append(fields)
        return True

    def extend(self, tags: Iterable[Iterable[str]]) -> None:
        """Append each tag in order."""
        for tag in tags:
            self.append(tag)

    def copy(self) -> TagSet:
        """Return an independent snapshot of this set."""
        clone = TagSet()
        clone._tags = list(self._tags)
        clone._identities = set(self._identities)
        return clone

    def to_lists(self) -> list[list[str]]:
        """Return the tags as JSON-ready nested lists, in insertion order."""
        return [list(tag) for tag in self._tags]

    def __contains__(self, tag: object) -> bool:
        if not isinstance(tag, tuple) or not tag:
            return False
        return tag_identity(tag) in self._identities

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __getitem__(self, index: int) -> Tag:
        return self._tags[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagSet):
            return NotImplemented
        return self._tags == other._tags

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TagSet({self._tags!r})"
