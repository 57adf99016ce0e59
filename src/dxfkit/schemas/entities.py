"""
Entity Schemas
==============

Field tables of the graphical entities of the ENTITIES section.

Declaration order is output order. The order inside each table follows
what AutoCAD writes: the common head, the type's subclass marker, the
type's own fields, and the extrusion direction last.

Copyright (c) 2026 dxfkit Contributors
"""

import math

from dxfkit.codec.fields import (
    FieldDescriptor,
    FieldTable,
    ValueKind,
    marker,
    nonempty,
    nonzero,
    point,
)
from dxfkit.codec.revision import Revision
from dxfkit.schemas.common import (
    DEFAULT_STYLE,
    entity_head,
    extrusion,
    thickness,
)


CIRCLE = FieldTable("CIRCLE", [
    *entity_head(),
    marker("AcDbCircle", 1),
    thickness(),
    *point("center", 10, always_emit=True),
    FieldDescriptor(
        40, "radius", ValueKind.REAL,
        required=True, check=nonzero, fallback=1.0,
    ),
    *extrusion(),
])


ARC = FieldTable("ARC", [
    *entity_head(),
    marker("AcDbCircle", 1),
    thickness(),
    *point("center", 10, always_emit=True),
    FieldDescriptor(
        40, "radius", ValueKind.REAL,
        required=True, check=nonzero, fallback=1.0,
    ),
    marker("AcDbArc", 2),
    FieldDescriptor(50, "start_angle", ValueKind.REAL, default=0.0, always_emit=True),
    FieldDescriptor(51, "end_angle", ValueKind.REAL, default=360.0, always_emit=True),
    *extrusion(),
])


LINE = FieldTable("LINE", [
    *entity_head(),
    marker("AcDbLine", 1),
    thickness(),
    *point("start", 10, always_emit=True),
    *point("end", 11, always_emit=True),
    *extrusion(),
])


POINT = FieldTable("POINT", [
    *entity_head(),
    marker("AcDbPoint", 1),
    *point("location", 10, always_emit=True),
    thickness(),
    *extrusion(),
    FieldDescriptor(50, "x_axis_angle", ValueKind.REAL, default=0.0),
])


# TEXT splits its fields over two AcDbText subclasses; the second marker
# precedes the vertical alignment.
TEXT = FieldTable("TEXT", [
    *entity_head(),
    marker("AcDbText", 1),
    thickness(),
    *point("insertion", 10, always_emit=True),
    FieldDescriptor(
        40, "height", ValueKind.REAL,
        default=1.0, always_emit=True, check=nonzero, fallback=1.0,
    ),
    FieldDescriptor(1, "text_value", ValueKind.STRING, required=True),
    FieldDescriptor(50, "rotation", ValueKind.REAL, default=0.0),
    FieldDescriptor(
        41, "relative_x_scale", ValueKind.REAL,
        default=1.0, check=nonzero, fallback=1.0,
    ),
    FieldDescriptor(51, "oblique_angle", ValueKind.REAL, default=0.0),
    FieldDescriptor(
        7, "style", ValueKind.STRING,
        default=DEFAULT_STYLE, check=nonempty, fallback=DEFAULT_STYLE,
    ),
    FieldDescriptor(71, "generation_flags", ValueKind.INTEGER, default=0),
    FieldDescriptor(
        72, "horizontal_alignment", ValueKind.ENUM,
        default=0, choices=(0, 1, 2, 3, 4, 5),
    ),
    *point("alignment", 11),
    *extrusion(),
    marker("AcDbText", 2, name="subclass_AcDbText_alignment"),
    FieldDescriptor(
        73, "vertical_alignment", ValueKind.ENUM,
        default=0, choices=(0, 1, 2, 3),
    ),
])


ELLIPSE = FieldTable("ELLIPSE", [
    *entity_head(),
    marker("AcDbEllipse", 1),
    *point("center", 10, always_emit=True),
    *point("major_axis", 11, default=(1.0, 0.0, 0.0), always_emit=True),
    *extrusion(),
    FieldDescriptor(
        40, "axis_ratio", ValueKind.REAL,
        default=1.0, always_emit=True, check=nonzero, fallback=1.0,
    ),
    FieldDescriptor(41, "start_parameter", ValueKind.REAL, default=0.0, always_emit=True),
    FieldDescriptor(42, "end_parameter", ValueKind.REAL, default=2 * math.pi, always_emit=True),
], first_revision=Revision.R13)


# Proxy entities carry two binary payloads in 310 runs: the graphics
# data, then the entity data. The 330 groups after the entity data are
# object ids, terminated by a 94 group.
ACAD_PROXY_ENTITY = FieldTable("ACAD_PROXY_ENTITY", [
    *entity_head(),
    marker("AcDbProxyEntity", 1),
    FieldDescriptor(90, "proxy_class_id", ValueKind.INTEGER, default=498, always_emit=True),
    FieldDescriptor(91, "application_class_id", ValueKind.INTEGER, default=500, always_emit=True),
    FieldDescriptor(92, "graphics_data_size", ValueKind.INTEGER, default=0, always_emit=True),
    FieldDescriptor(310, "graphics_data", ValueKind.CONTINUATION, occurrence=0),
    FieldDescriptor(93, "entity_data_size", ValueKind.INTEGER, default=0, always_emit=True),
    FieldDescriptor(310, "entity_data", ValueKind.CONTINUATION, occurrence=1),
    FieldDescriptor(330, "object_ids", ValueKind.HANDLE, occurrence=1, repeatable=True),
    FieldDescriptor(94, "object_ids_end", ValueKind.INTEGER, default=0, always_emit=True),
], first_revision=Revision.R13)


def _modeler_geometry(record_type: str, *extra: FieldDescriptor) -> FieldTable:
    """BODY, REGION and 3DSOLID share the ACIS modeler geometry layout."""
    return FieldTable(record_type, [
        *entity_head(),
        marker("AcDbModelerGeometry", 1),
        FieldDescriptor(70, "modeler_version", ValueKind.INTEGER, default=1, always_emit=True),
        FieldDescriptor(1, "proprietary_data", ValueKind.CONTINUATION, chunk_width=255),
        FieldDescriptor(3, "additional_data", ValueKind.CONTINUATION, chunk_width=255),
        *extra,
    ], first_revision=Revision.R13)


BODY = _modeler_geometry("BODY")
REGION = _modeler_geometry("REGION")
SOLID_3D = _modeler_geometry(
    "3DSOLID",
    marker("AcDb3dSolid", 2, first_revision=Revision.R2000),
    FieldDescriptor(
        350, "history", ValueKind.HANDLE, default=None, first_revision=Revision.R2007,
    ),
)


ENTITY_SCHEMAS = {
    table.record_type: table
    for table in (
        CIRCLE, ARC, LINE, POINT, TEXT, ELLIPSE,
        ACAD_PROXY_ENTITY, BODY, REGION, SOLID_3D,
    )
}
