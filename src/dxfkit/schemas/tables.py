"""
Symbol Table Schemas
====================

Field tables of the TABLES section: the TABLE / ENDTAB wrappers that
enclose each symbol table, and the entries of the APPID, LAYER and STYLE
tables.

Symbol-table entries write most of their fields unconditionally; readers
such as AutoCAD expect a complete entry even where a value equals its
default.
"""

from dxfkit.codec.fields import (
    FieldDescriptor,
    FieldTable,
    ValueKind,
    marker,
    nonempty,
    nonzero,
)
from dxfkit.codec.revision import Revision
from dxfkit.schemas.common import (
    DEFAULT_LAYER,
    DEFAULT_STYLE,
    handle,
    soft_owner,
    table_entry_head,
)

DEFAULT_LAYER_LINETYPE = "CONTINUOUS"


# =============================================================================
# Wrappers
# =============================================================================

TABLE = FieldTable("TABLE", [
    FieldDescriptor(2, "table_name", ValueKind.STRING, required=True),
    handle(),
    soft_owner(),
    marker("AcDbSymbolTable", 0),
    FieldDescriptor(70, "max_entries", ValueKind.INTEGER, default=0, always_emit=True),
])

ENDTAB = FieldTable("ENDTAB", [])


# =============================================================================
# Table entries
# =============================================================================

APPID = FieldTable("APPID", [
    *table_entry_head("AcDbRegAppTableRecord"),
    FieldDescriptor(
        2, "name", ValueKind.STRING, required=True, check=nonempty, fallback="ACAD",
    ),
    FieldDescriptor(70, "flags", ValueKind.INTEGER, default=0, always_emit=True),
])


LAYER = FieldTable("LAYER", [
    *table_entry_head("AcDbLayerTableRecord"),
    FieldDescriptor(
        2, "name", ValueKind.STRING, required=True, check=nonempty, fallback=DEFAULT_LAYER,
    ),
    FieldDescriptor(70, "flags", ValueKind.INTEGER, default=0, always_emit=True),
    FieldDescriptor(62, "color", ValueKind.INTEGER, default=7, always_emit=True),
    FieldDescriptor(
        6, "linetype", ValueKind.STRING,
        default=DEFAULT_LAYER_LINETYPE, always_emit=True,
        check=nonempty, fallback=DEFAULT_LAYER_LINETYPE,
    ),
    FieldDescriptor(
        290, "plotting", ValueKind.ENUM,
        default=1, choices=(0, 1), first_revision=Revision.R2000,
    ),
    FieldDescriptor(
        370, "lineweight", ValueKind.INTEGER, default=-3, first_revision=Revision.R2000,
    ),
    FieldDescriptor(
        390, "plot_style", ValueKind.HANDLE, default=None, first_revision=Revision.R2000,
    ),
    FieldDescriptor(
        347, "material", ValueKind.HANDLE, default=None, first_revision=Revision.R2007,
    ),
])


STYLE = FieldTable("STYLE", [
    *table_entry_head("AcDbTextStyleTableRecord"),
    FieldDescriptor(
        2, "name", ValueKind.STRING, required=True, check=nonempty, fallback=DEFAULT_STYLE,
    ),
    FieldDescriptor(70, "flags", ValueKind.INTEGER, default=0, always_emit=True),
    FieldDescriptor(40, "fixed_height", ValueKind.REAL, default=0.0, always_emit=True),
    FieldDescriptor(
        41, "width_factor", ValueKind.REAL,
        default=1.0, always_emit=True, check=nonzero, fallback=1.0,
    ),
    FieldDescriptor(50, "oblique_angle", ValueKind.REAL, default=0.0, always_emit=True),
    FieldDescriptor(71, "generation_flags", ValueKind.INTEGER, default=0, always_emit=True),
    FieldDescriptor(42, "last_height", ValueKind.REAL, default=2.5, always_emit=True),
    FieldDescriptor(3, "font_file", ValueKind.STRING, default="txt", always_emit=True),
    FieldDescriptor(4, "bigfont_file", ValueKind.STRING, default="", always_emit=True),
])


# Output order of the symbol tables in the TABLES section
TABLE_SCHEMAS = {
    table.record_type: table
    for table in (LAYER, STYLE, APPID)
}

WRAPPER_SCHEMAS = {
    table.record_type: table
    for table in (TABLE, ENDTAB)
}
