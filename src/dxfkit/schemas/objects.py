"""
Object Schemas
==============

Field tables of the non-graphical objects of the OBJECTS section.
"""

from dxfkit.codec.fields import FieldDescriptor, FieldTable, ValueKind, marker
from dxfkit.codec.revision import Revision
from dxfkit.schemas.common import object_head


# Entry names (3) and entry handles (350) pair up by position.
DICTIONARY = FieldTable("DICTIONARY", [
    *object_head(),
    marker("AcDbDictionary", 0),
    FieldDescriptor(
        280, "hard_owner_flag", ValueKind.ENUM,
        default=0, choices=(0, 1), first_revision=Revision.R2000,
    ),
    FieldDescriptor(
        281, "cloning_flag", ValueKind.ENUM,
        default=1, choices=(0, 1, 2, 3, 4, 5), first_revision=Revision.R2000,
    ),
    FieldDescriptor(3, "entry_names", ValueKind.STRING, repeatable=True),
    FieldDescriptor(350, "entry_handles", ValueKind.HANDLE, repeatable=True),
], first_revision=Revision.R13)


# Two 330 groups: the owner dictionary first, then the associated image.
IMAGEDEF_REACTOR = FieldTable("IMAGEDEF_REACTOR", [
    *object_head(),
    marker("AcDbRasterImageDefReactor", 0),
    FieldDescriptor(90, "class_version", ValueKind.INTEGER, default=2, always_emit=True),
    FieldDescriptor(330, "image", ValueKind.HANDLE, occurrence=1, required=True),
], first_revision=Revision.R14)


OBJECT_SCHEMAS = {
    table.record_type: table
    for table in (DICTIONARY, IMAGEDEF_REACTOR)
}
