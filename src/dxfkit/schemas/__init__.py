"""
Record Schemas
==============

The registry of every record type the package can decode and encode.
Each schema is a FieldTable built (and validated) once, at import.

    >>> from dxfkit.schemas import get_schema
    >>> get_schema("CIRCLE").field("radius").code
    40
    >>> get_schema("SPLINE") is None
    True
"""

from typing import Optional

from dxfkit.codec.fields import FieldTable
from dxfkit.schemas.entities import ENTITY_SCHEMAS
from dxfkit.schemas.objects import OBJECT_SCHEMAS
from dxfkit.schemas.tables import TABLE_SCHEMAS, WRAPPER_SCHEMAS

SCHEMAS: dict[str, FieldTable] = {
    **ENTITY_SCHEMAS,
    **TABLE_SCHEMAS,
    **WRAPPER_SCHEMAS,
    **OBJECT_SCHEMAS,
}


def get_schema(record_type: str) -> Optional[FieldTable]:
    """Return the field table of a record type, or None if unsupported."""
    return SCHEMAS.get(record_type.upper())


def list_schemas() -> list[str]:
    """Names of all supported record types, sorted."""
    return sorted(SCHEMAS)


__all__ = [
    "SCHEMAS",
    "ENTITY_SCHEMAS",
    "TABLE_SCHEMAS",
    "WRAPPER_SCHEMAS",
    "OBJECT_SCHEMAS",
    "get_schema",
    "list_schemas",
]
