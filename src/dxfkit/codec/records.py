"""
Records
=======

A Record is one decoded entity, table entry or object: a value for every
field of its FieldTable, plus the bookkeeping the codec needs.

    >>> circle = Record(get_schema("CIRCLE"), radius=2.5, layer="WALLS")
    >>> circle["radius"]
    2.5
    >>> circle.point("center")
    (0.0, 0.0, 0.0)

Every field exists from construction on, holding its default (or its
kind's empty value). Values are plain Python values: strings, ints,
floats, None for an absent handle, lists for repeatable fields and
ContinuationPayload for continuation fields.

Ownership
---------
A record belongs to at most one Chain. The `chain` attribute is the
record's link to its owner; `next` is derived from the owner's order. A
record refuses to be released while it is still linked.
"""

from typing import TYPE_CHECKING, Any, Optional

from dxfkit.errors import ChainError, DanglingLinkError
from dxfkit.codec.continuation import ContinuationPayload
from dxfkit.codec.fields import FieldTable
from dxfkit.codec.revision import Revision, is_field_active

if TYPE_CHECKING:
    from dxfkit.codec.chain import Chain


class Record:
    """
    An instance conforming to one FieldTable.

    Attributes:
        table: The record's schema
        revision: Revision the record was decoded at (None if built in code)
        populated: Names of fields set explicitly or read from a stream
        suspect: Names of fields read although not legal at `revision`
        comments: Out-of-band comments (code 999) met while decoding
        chain: The owning chain, or None
        released: True once the record has been released
    """

    def __init__(self, table: FieldTable, revision: Optional[Revision] = None, **values: Any):
        self.table = table
        self.revision = revision
        self._values: dict[str, Any] = {d.name: d.initial_value() for d in table}
        self.populated: set[str] = set()
        self.suspect: set[str] = set()
        self.comments: list[str] = []
        self.chain: Optional["Chain"] = None
        self.released = False
        for name, value in values.items():
            self[name] = value

    @property
    def record_type(self) -> str:
        return self.table.record_type

    # -------------------------------------------------------------------------
    # Field access
    # -------------------------------------------------------------------------

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self.table:
            raise KeyError(f"{self.record_type} has no field '{name}'")
        descriptor = self.table.field(name)
        if descriptor.repeatable:
            value = list(value)
        elif descriptor.is_continuation and not isinstance(value, ContinuationPayload):
            if isinstance(value, (bytes, bytearray)):
                value = ContinuationPayload.from_bytes(bytes(value), descriptor.chunk_width or 254)
            else:
                value = ContinuationPayload.from_text(str(value), descriptor.chunk_width or 255)
        self._values[name] = value
        self.populated.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set_default(self, name: str) -> None:
        """Reset a field to its initial value and mark it unpopulated."""
        self._values[name] = self.table.field(name).initial_value()
        self.populated.discard(name)

    def values(self) -> dict[str, Any]:
        """A copy of all field values by name."""
        return dict(self._values)

    def point(self, name: str) -> tuple[Any, Any, Any]:
        """Return the (x, y, z) triple of a point-valued field."""
        return (self[f"{name}_x"], self[f"{name}_y"], self[f"{name}_z"])

    def set_point(self, name: str, xyz: tuple[float, float, float]) -> None:
        """Set the three components of a point-valued field."""
        for axis, value in zip("xyz", xyz):
            self[f"{name}_{axis}"] = float(value)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def equals(self, other: "Record", revision: Optional[Revision] = None) -> bool:
        """
        Default-aware comparison.

        Fields not active at `revision` are ignored, so a record compares
        equal to its own round trip through a revision that cannot carry
        some of its fields.
        """
        if self.record_type != other.record_type:
            return False
        for descriptor in self.table:
            if revision is not None and not is_field_active(descriptor, revision):
                continue
            if self._values[descriptor.name] != other.get(descriptor.name):
                return False
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # mutable

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------

    @property
    def next(self) -> Optional["Record"]:
        """The following record of the owning chain, or None."""
        if self.chain is None:
            return None
        return self.chain.next_of(self)

    def release(self) -> None:
        """
        Release the record's values.

        Raises:
            DanglingLinkError: If the record is still linked to a chain
            ChainError: If the record was already released
        """
        if self.chain is not None:
            raise DanglingLinkError(
                f"{self.record_type} record is still linked to a chain"
            )
        if self.released:
            raise ChainError(f"{self.record_type} record released twice")
        self._values.clear()
        self.populated.clear()
        self.suspect.clear()
        self.released = True

    def __repr__(self) -> str:
        handle = self._values.get("handle")
        ident = f" handle={handle:x}" if isinstance(handle, int) else ""
        return f"<Record {self.record_type}{ident} ({len(self.populated)} populated)>"
