"""
Continuation Payloads
=====================

DXF lines are limited in length. Values too long for one line (binary
graphics, proprietary modeler data) are written as a run of lines that all
carry the same group code:

    310
    0A1B2C...        <- chunk 0 (at most max_width characters)
    310
    3D4E5F...        <- chunk 1
    310
    60               <- chunk 2 (remainder)

split() and join() are exact inverses: join(split(p, w)) == p for every
payload p and every width w >= 1. An empty payload has zero chunks.

Width policy
------------
Payloads are Python strings and widths count characters (code points).
A multi-byte character is therefore never split across two lines. Binary
payloads are hex encoded before splitting, where characters and bytes of
the written line coincide; use ContinuationPayload.from_bytes() for them.

Copyright (c) 2026 dxfkit Contributors
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Union


def split(payload: str, max_width: int) -> list[str]:
    """
    Split a payload into chunks of at most max_width characters.

    Args:
        payload: The text to split
        max_width: Maximum characters per chunk (>= 1)

    Returns:
        Chunks in order; empty for an empty payload

    Raises:
        ValueError: If max_width is less than 1
    """
    if max_width < 1:
        raise ValueError(f"Chunk width must be at least 1, got {max_width}")
    return [payload[i:i + max_width] for i in range(0, len(payload), max_width)]


def join(chunks: Iterable[Union[str, "Chunk"]]) -> str:
    """
    Reassemble a payload.

    Plain strings are joined in the order given; Chunk objects are joined
    by ascending order index.
    """
    chunks = list(chunks)
    if chunks and all(isinstance(c, Chunk) for c in chunks):
        return "".join(c.data for c in sorted(chunks, key=lambda c: c.order))
    return "".join(c.data if isinstance(c, Chunk) else c for c in chunks)


@dataclass(frozen=True)
class Chunk:
    """One continuation line and its position in the payload."""
    order: int
    data: str


@dataclass
class ContinuationPayload:
    """
    An opaque value stored as ordered continuation chunks.

    The decoder appends chunks as it reads them; the encoder writes one
    group per chunk in ascending order.
    """
    chunks: list[Chunk] = field(default_factory=list)

    @classmethod
    def from_text(cls, payload: str, max_width: int) -> "ContinuationPayload":
        """Build a payload by splitting text at max_width."""
        return cls([Chunk(i, data) for i, data in enumerate(split(payload, max_width))])

    @classmethod
    def from_bytes(cls, data: bytes, max_width: int = 254) -> "ContinuationPayload":
        """
        Build a binary payload: hex encode (uppercase) then split.

        The default width of 254 characters holds 127 bytes per line.
        """
        return cls.from_text(data.hex().upper(), max_width)

    def append(self, data: str) -> Chunk:
        """Append a chunk with the next order index."""
        chunk = Chunk(self.next_order, data)
        self.chunks.append(chunk)
        return chunk

    @property
    def next_order(self) -> int:
        return max((c.order for c in self.chunks), default=-1) + 1

    @property
    def text(self) -> str:
        """The reassembled payload."""
        return join(self.chunks)

    def to_bytes(self) -> bytes:
        """
        Decode a hex-encoded binary payload.

        Raises:
            ValueError: If the payload is not valid hex
        """
        return bytes.fromhex(self.text)

    def resplit(self, max_width: int) -> "ContinuationPayload":
        """Return the same payload split at a different width."""
        return ContinuationPayload.from_text(self.text, max_width)

    def ordered(self) -> list[Chunk]:
        """Chunks by ascending order index."""
        return sorted(self.chunks, key=lambda c: c.order)

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self.chunks)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContinuationPayload):
            return self.text == other.text
        return NotImplemented
