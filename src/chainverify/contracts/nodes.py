"""Node and signal data model.

A Node is one stored record of the linked list: its own 64-bit key and the
key of the node expected to reference it (``prev``). A Signal is what the
map stage emits for a node: a definition of its own key, or a reference
to its predecessor.

Keys are opaque 64-bit values. They are held in canonical unsigned form
(0 <= key < 2**64) so that a key written as a signed long and the same key
written unsigned compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass

KEY_BITS = 64
KEY_MASK = (1 << KEY_BITS) - 1
_MIN_SIGNED = -(1 << (KEY_BITS - 1))

# Raw-record value meaning "this node has no predecessor", and the payload
# value that marked a definition signal on the wire. Only used at the edges
# (parsing raw dumps, Signal.to_wire); the data model itself uses None.
NO_PREDECESSOR = -1
DEFINITION_PAYLOAD = -1


def canonical_key(value: int) -> int:
    """Return the unsigned 64-bit form of a key.

    Accepts anything representable as a signed or unsigned 64-bit integer.

    Raises:
        TypeError: If value is not an int (bool is rejected too)
        ValueError: If value does not fit in 64 bits
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"key must be an int, got {type(value).__name__}")
    if value < _MIN_SIGNED or value > KEY_MASK:
        raise ValueError(f"key {value} does not fit in {KEY_BITS} bits")
    return value & KEY_MASK


def format_key(key: int) -> str:
    """Format a key as a fixed-width 16-hex-digit string (``%016x`` of the unsigned value)."""
    return f"{key & KEY_MASK:016x}"


@dataclass(frozen=True, slots=True)
class Node:
    """One stored node of the chain. Immutable.

    Attributes:
        key: Canonical unsigned key of this node
        prev: Key of the node expected to reference this one, or None for a
            chain head. Any negative prev is normalized to None: the source of
            truth is "is prev present and non-negative".
    """

    key: int
    prev: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", canonical_key(self.key))
        if self.prev is not None:
            if isinstance(self.prev, bool) or not isinstance(self.prev, int):
                raise TypeError(f"prev must be an int or None, got {type(self.prev).__name__}")
            if self.prev < 0:
                object.__setattr__(self, "prev", None)
            else:
                object.__setattr__(self, "prev", canonical_key(self.prev))

    @property
    def has_predecessor(self) -> bool:
        return self.prev is not None


@dataclass(frozen=True, slots=True)
class Signal:
    """A (key, payload) pair emitted by the map stage.

    ``referrer is None`` asserts "a node with this key exists" (definition).
    Otherwise the signal asserts "the node ``referrer`` claims this key as
    its predecessor" (reference).
    """

    key: int
    referrer: int | None = None

    @classmethod
    def definition(cls, key: int) -> Signal:
        return cls(key=key, referrer=None)

    @classmethod
    def reference(cls, key: int, referrer: int) -> Signal:
        return cls(key=key, referrer=referrer)

    @property
    def is_definition(self) -> bool:
        return self.referrer is None

    def to_wire(self) -> tuple[int, int]:
        """Encode as the legacy (key, payload) pair where -1 marks a definition."""
        return (self.key, DEFINITION_PAYLOAD if self.referrer is None else self.referrer)

    @classmethod
    def from_wire(cls, key: int, payload: int) -> Signal:
        """Decode a legacy (key, payload) pair. Any negative payload is a definition."""
        if payload < 0:
            return cls.definition(canonical_key(key))
        return cls.reference(canonical_key(key), canonical_key(payload))
