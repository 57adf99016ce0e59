"""
Generic Tag/Value Record Codec
==============================

This package is the protocol-level machinery shared by every DXF record
type. Concrete record types (see dxfkit.schemas) only supply a FieldTable;
everything else lives here:

- **tokens**: TagReader / TagWriter for (group code, value) line pairs
- **codes**: the fixed group-code range table
- **revision**: the ordered Revision type and the revision policy
- **fields**: FieldDescriptor and FieldTable (the record schema)
- **defaults**: defaulting on read, validation and repair before write
- **records**: Record, one instance of a schema
- **codec**: RecordCodec, decode/encode one record
- **chain**: Chain, the ordered owning collection of records of one type
- **continuation**: splitting and joining long payloads across lines

Quick Start
-----------
    >>> from dxfkit.codec import RecordCodec, Revision, TagReader
    >>> from dxfkit.schemas import get_schema
    >>> codec = RecordCodec(get_schema("CIRCLE"), Revision.R12)
    >>> circle = codec.decode(TagReader(stream))
    >>> print(codec.advisories.report())
"""

# =============================================================================
# Public API Exports
# =============================================================================

from dxfkit.codec.codes import (
    CodeType,
    code_type,
    is_handle_code,
    format_code,
    TERMINATOR,
    SUBCLASS_MARKER,
    COMMENT,
)
from dxfkit.codec.revision import (
    Revision,
    is_field_active,
    must_emit,
)
from dxfkit.codec.continuation import (
    Chunk,
    ContinuationPayload,
    split,
    join,
)
from dxfkit.codec.fields import (
    ValueKind,
    FieldDescriptor,
    FieldTable,
    NO_DEFAULT,
    nonzero,
    nonempty,
    point,
    marker,
)
from dxfkit.codec.tokens import (
    Token,
    TagReader,
    TagWriter,
)
from dxfkit.codec.records import Record
from dxfkit.codec.defaults import (
    apply_defaults,
    validate_and_repair,
)
from dxfkit.codec.codec import RecordCodec
from dxfkit.codec.chain import Chain

__all__ = [
    # Group codes
    "CodeType",
    "code_type",
    "is_handle_code",
    "format_code",
    "TERMINATOR",
    "SUBCLASS_MARKER",
    "COMMENT",
    # Revisions
    "Revision",
    "is_field_active",
    "must_emit",
    # Continuation
    "Chunk",
    "ContinuationPayload",
    "split",
    "join",
    # Schema
    "ValueKind",
    "FieldDescriptor",
    "FieldTable",
    "NO_DEFAULT",
    "nonzero",
    "nonempty",
    "point",
    "marker",
    # Tokens
    "Token",
    "TagReader",
    "TagWriter",
    # Records
    "Record",
    "apply_defaults",
    "validate_and_repair",
    "RecordCodec",
    "Chain",
]
