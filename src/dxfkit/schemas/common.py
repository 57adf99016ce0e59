"""
Shared Field Groups
===================

Field groups repeated across record types. Every entity starts with the
same head (handle, owner, AcDbEntity marker, layer, linetype, color, ...)
and most end with an extrusion direction; symbol-table entries and objects
have their own, shorter heads.

The groups are returned as fresh lists so a schema can splice them with
its own descriptors:

    CIRCLE = FieldTable("CIRCLE", [
        *entity_head(),
        marker("AcDbCircle", 1),
        ...
        *extrusion(),
    ])
"""

from dxfkit.codec.fields import (
    FieldDescriptor,
    ValueKind,
    marker,
    nonempty,
    nonzero,
    point,
)
from dxfkit.codec.revision import Revision

# Fallback identifiers used when a name field is empty
DEFAULT_LAYER = "0"
DEFAULT_LINETYPE = "BYLAYER"
DEFAULT_STYLE = "STANDARD"

COLOR_BYLAYER = 256
LINEWEIGHT_BYLAYER = -1

# Application groups wrapping the owner handles from R14 on
REACTORS_GROUP = "ACAD_REACTORS"
XDICTIONARY_GROUP = "ACAD_XDICTIONARY"


def handle() -> FieldDescriptor:
    return FieldDescriptor(5, "handle", ValueKind.HANDLE, default=None)


def soft_owner() -> FieldDescriptor:
    """Soft-pointer owner handle (330, first occurrence) in {ACAD_REACTORS."""
    return FieldDescriptor(
        330, "owner", ValueKind.HANDLE,
        default=None, first_revision=Revision.R14, group=REACTORS_GROUP,
    )


def hard_owner() -> FieldDescriptor:
    """Hard owner handle (360) of an extension dictionary, in {ACAD_XDICTIONARY."""
    return FieldDescriptor(
        360, "owner_hard", ValueKind.HANDLE,
        default=None, first_revision=Revision.R14, group=XDICTIONARY_GROUP,
    )


def entity_head() -> list[FieldDescriptor]:
    """Fields common to every graphical entity, in output order."""
    return [
        handle(),
        soft_owner(),
        hard_owner(),
        marker("AcDbEntity", 0),
        FieldDescriptor(67, "paperspace", ValueKind.ENUM, default=0, choices=(0, 1)),
        FieldDescriptor(
            8, "layer", ValueKind.STRING,
            default=DEFAULT_LAYER, always_emit=True,
            check=nonempty, fallback=DEFAULT_LAYER,
        ),
        FieldDescriptor(
            6, "linetype", ValueKind.STRING,
            default=DEFAULT_LINETYPE, check=nonempty, fallback=DEFAULT_LINETYPE,
        ),
        FieldDescriptor(62, "color", ValueKind.INTEGER, default=COLOR_BYLAYER),
        FieldDescriptor(
            370, "lineweight", ValueKind.INTEGER,
            default=LINEWEIGHT_BYLAYER, first_revision=Revision.R2000,
        ),
        FieldDescriptor(
            48, "linetype_scale", ValueKind.REAL,
            default=1.0, first_revision=Revision.R13,
            check=nonzero, fallback=1.0,
        ),
        FieldDescriptor(
            60, "visibility", ValueKind.ENUM,
            default=0, choices=(0, 1), first_revision=Revision.R13,
        ),
        FieldDescriptor(
            38, "elevation", ValueKind.REAL, default=0.0, last_revision=Revision.R11,
        ),
    ]


def thickness() -> FieldDescriptor:
    return FieldDescriptor(39, "thickness", ValueKind.REAL, default=0.0)


def extrusion() -> list[FieldDescriptor]:
    """Extrusion direction (210/220/230), default the world Z axis."""
    return point("extrusion", 210, default=(0.0, 0.0, 1.0))


def table_entry_head(subclass: str) -> list[FieldDescriptor]:
    """Fields common to symbol-table entries (LAYER, STYLE, APPID, ...)."""
    return [
        handle(),
        soft_owner(),
        hard_owner(),
        marker("AcDbSymbolTableRecord", 0),
        marker(subclass, 1),
    ]


def object_head() -> list[FieldDescriptor]:
    """Fields common to non-graphical objects."""
    return [
        handle(),
        soft_owner(),
        hard_owner(),
    ]
