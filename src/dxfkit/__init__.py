"""
dxfkit - Tag/Value Record Codec for DXF Drawings
================================================

This package reads and writes the DXF exchange format: a flat, line-oriented
stream of (group code, value) pairs describing typed records such as
entities (CIRCLE, TEXT, ...), symbol-table entries (LAYER, STYLE, ...) and
objects (DICTIONARY, ...).

The core is a generic, schema-driven record codec. A record type is nothing
but a declarative table of fields; tokenizing, revision gating, default
substitution on read and default suppression on write, value repair and
continuation-line splitting are shared by every record type.

Main Components
---------------
- **codec**: the generic codec (TagReader, FieldTable, RecordCodec, Chain)
- **schemas**: field tables of the supported record types
- **document**: Drawing, the section-level reader/writer
- **cli**: the `dxfkit` command-line tool

Quick Start
-----------
Read a drawing and list its circles:
    >>> from dxfkit import Drawing
    >>> drawing = Drawing.from_file("part.dxf")
    >>> for circle in drawing.chain("CIRCLE"):
    ...     print(circle.point("center"), circle["radius"])

Decode a single record body:
    >>> from dxfkit import RecordCodec, Revision, get_schema
    >>> codec = RecordCodec(get_schema("CIRCLE"), Revision.R12)
    >>> circle = codec.decode_from_string("  5\\n1A\\n 40\\n2.5\\n  0\\n")
    >>> hex(circle["handle"]), circle["radius"]
    ('0x1a', 2.5)

Or use the command-line tool:
    $ dxfkit info part.dxf
    $ dxfkit check --strict part.dxf
    $ dxfkit rewrite part.dxf -o part_r2000.dxf --revision R2000

Version History
---------------
1.0.0 - Initial release with the record codec, drawing reader/writer and CLI

Copyright (c) 2026 dxfkit Contributors
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from dxfkit.errors import (
    DxfError,
    CodecError,
    MalformedStreamError,
    RequiredValueMissingError,
    UnencodableValueError,
    SchemaError,
    AdvisoryError,
    TooManyAdvisories,
    ChainError,
    DanglingLinkError,
    SourceLocation,
    Advisory,
    AdvisoryKind,
    AdvisoryCollector,
)
from dxfkit.codec import (
    Revision,
    ValueKind,
    FieldDescriptor,
    FieldTable,
    ContinuationPayload,
    Token,
    TagReader,
    TagWriter,
    Record,
    RecordCodec,
    Chain,
)
from dxfkit.config import CodecConfig
from dxfkit.schemas import get_schema, list_schemas
from dxfkit.document import Drawing

__all__ = [
    # Version
    "__version__",
    # Errors
    "DxfError",
    "CodecError",
    "MalformedStreamError",
    "RequiredValueMissingError",
    "UnencodableValueError",
    "SchemaError",
    "AdvisoryError",
    "TooManyAdvisories",
    "ChainError",
    "DanglingLinkError",
    "SourceLocation",
    "Advisory",
    "AdvisoryKind",
    "AdvisoryCollector",
    # Codec
    "Revision",
    "ValueKind",
    "FieldDescriptor",
    "FieldTable",
    "ContinuationPayload",
    "Token",
    "TagReader",
    "TagWriter",
    "Record",
    "RecordCodec",
    "Chain",
    # Configuration
    "CodecConfig",
    # Schemas and drawings
    "get_schema",
    "list_schemas",
    "Drawing",
]
