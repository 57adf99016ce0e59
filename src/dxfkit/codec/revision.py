"""
Format Revisions and Revision Policy
====================================

DXF files are written for a specific AutoCAD release. The release decides
which group codes are legal in a record, which subclass markers appear, and
which fields must be present. This module provides the single ordered
Revision type and the two policy queries every codec decision goes through.

Revision numbering
------------------
Values are the numeric release codes of the $ACADVER header variable
(AC1009 -> 1009). Releases before R2.22 predate $ACADVER and use small
placeholder numbers that keep the total order intact. R11 and R12 share
the same format (AC1009), so R11 is an alias of R12.

Policy
------
- is_field_active(descriptor, revision): the revision lies within the
  descriptor's [first_revision, last_revision] bounds (open bounds allowed).
- must_emit(descriptor, record, revision): the field is active AND it has
  no default, or its value differs from the default, or it is always-emit.
  This is what produces DXF's sparse, default-suppressing output.
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from dxfkit.codec.fields import FieldDescriptor
    from dxfkit.codec.records import Record


class Revision(IntEnum):
    """Ordered AutoCAD format revisions, oldest first."""
    R1_0 = 0
    R1_2 = 120
    R1_40 = 140
    R2_05 = 150
    R2_10 = 210
    R2_21 = 221
    R2_22 = 1001
    R2_50 = 1002
    R2_60 = 1003
    R9 = 1004
    R10 = 1006
    R12 = 1009
    R11 = 1009
    R13 = 1012
    R14 = 1014
    R2000 = 1015
    R2000I = 1016
    R2002 = 1017
    R2004 = 1018
    R2005 = 1019
    R2006 = 1020
    R2007 = 1021
    R2008 = 1022
    R2009 = 1023
    R2010 = 1024
    R2011 = 1025
    R2012 = 1026
    R2013 = 1027

    @classmethod
    def oldest(cls) -> "Revision":
        """Return the oldest supported revision."""
        return min(cls)

    @classmethod
    def newest(cls) -> "Revision":
        """Return the newest supported revision."""
        return max(cls)

    @property
    def acadver(self) -> Optional[str]:
        """The $ACADVER string, or None for releases that predate it."""
        if self.value < Revision.R2_22:
            return None
        return f"AC{self.value}"

    @classmethod
    def from_acadver(cls, text: str) -> "Revision":
        """
        Convert an $ACADVER value ("AC1015") to a Revision.

        Raises:
            ValueError: If the string is not a known release code
        """
        text = text.strip().upper()
        if not text.startswith("AC"):
            raise ValueError(f"Invalid $ACADVER value: {text!r}")
        try:
            return cls(int(text[2:]))
        except ValueError:
            raise ValueError(f"Unknown $ACADVER value: {text!r}") from None

    @classmethod
    def parse(cls, text: str) -> "Revision":
        """
        Parse a user-supplied revision name.

        Accepts enum names ("R2000", "r14"), bare release names ("2000",
        "12") and $ACADVER strings ("AC1015").

        Raises:
            ValueError: If the text names no known revision
        """
        key = text.strip().upper().replace(".", "_")
        if key.startswith("AC"):
            return cls.from_acadver(key)
        if not key.startswith("R"):
            key = "R" + key
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown revision: {text!r}") from None

    def get_description(self) -> str:
        """Get a human-readable description of the revision."""
        label = self.name[1:].replace("_", ".")
        if self.acadver:
            return f"AutoCAD {label} ({self.acadver})"
        return f"AutoCAD {label}"


# =============================================================================
# Revision Policy
# =============================================================================

def is_field_active(descriptor: "FieldDescriptor", revision: Revision) -> bool:
    """Return True if the descriptor is legal at the given revision."""
    if descriptor.first_revision is not None and revision < descriptor.first_revision:
        return False
    if descriptor.last_revision is not None and revision > descriptor.last_revision:
        return False
    return True


def must_emit(
    descriptor: "FieldDescriptor",
    record: "Record",
    revision: Revision,
) -> bool:
    """
    Decide whether a field is written for the target revision.

    A field is emitted iff it is active for the revision and either it has
    no default, its current value differs from the default, or it is
    marked always-emit. Repeatable and continuation fields are emitted when
    they hold at least one item.
    """
    if not is_field_active(descriptor, revision):
        return False
    if descriptor.always_emit:
        return True

    value: Any = record.get(descriptor.name)
    if descriptor.repeatable or descriptor.is_continuation:
        return bool(value)
    if not descriptor.has_default:
        return True
    return value != descriptor.default
