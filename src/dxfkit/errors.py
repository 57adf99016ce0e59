"""
dxfkit Error Hierarchy
======================

This module defines the exception hierarchy for the whole package, together
with the non-fatal Advisory diagnostics raised while decoding, validating
and encoding records.

Exception Hierarchy
-------------------
DxfError (base)
├── CodecError (record codec)
│   ├── MalformedStreamError - code line not an integer, or truncated pair
│   ├── RequiredValueMissingError - required field empty at encode time
│   ├── UnencodableValueError - value holds a line break at encode time
│   ├── SchemaError - invalid field table declaration
│   └── AdvisoryError - advisory raised while running in strict mode
│       └── TooManyAdvisories - advisory limit reached
└── ChainError (chain manager)
    └── DanglingLinkError - chain link does not point where expected

Advisories
----------
Recoverable defects never abort an operation. They are collected as
Advisory values (see AdvisoryKind) in an AdvisoryCollector, so batch
tooling can report every defect of a file in one pass:

    UNKNOWN_CODE       code has no field for its occurrence, value dropped
    REVISION_MISMATCH  field or marker not expected at the declared revision
    FIELD_DEFECT       invalid or empty value, repaired to a fallback
    UNKNOWN_RECORD     record type without a schema, record skipped

Error messages follow this format:
    filename:line: error: description
    hint: suggestion for fixing (when available)

Copyright (c) 2026 dxfkit Contributors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class DxfError(Exception):
    """
    Base exception for all dxfkit errors.

    Callers can catch every package error with a single except clause:

        try:
            drawing = Drawing.from_file("part.dxf")
        except DxfError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Position of a token in a DXF stream.

    Attributes:
        filename: Name of the stream (or "<input>" for in-memory text)
        line: Line number of the value line (1-indexed, 0 if unknown)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Codec Exceptions
# =============================================================================

class CodecError(DxfError):
    """
    Base exception for record codec errors.

    Attributes:
        message: The error description
        location: Where in the stream the error occurred (optional)
        record_type: Record type being decoded or encoded (optional)
        field: Name of the offending field (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        record_type: Optional[str] = None,
        field: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.record_type = record_type
        self.field = field
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the message with location, record context and hint.

        Example output:
            part.dxf:42: error: CIRCLE.radius: invalid real value 'abc'
            hint: group code 40 expects a floating point number
        """
        subject = self.message
        if self.record_type and self.field:
            subject = f"{self.record_type}.{self.field}: {self.message}"
        elif self.record_type:
            subject = f"{self.record_type}: {self.message}"

        if self.location:
            parts = [f"{self.location}: error: {subject}"]
        else:
            parts = [f"error: {subject}"]

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MalformedStreamError(CodecError):
    """
    The tag stream cannot be tokenized.

    Fatal to the current decode; no partial record is returned.

    Raised when:
        - A code line is not parseable as an integer
        - The stream ends between a code line and its value line
        - A value cannot be coerced to its field's kind
    """
    pass


class RequiredValueMissingError(CodecError):
    """
    A required field with no valid fallback is empty at encode time.

    Encoding refuses the record instead of emitting a group the reading
    application would reject (e.g. a TEXT entity without text).
    """

    def __init__(self, record_type: str, field: str, code: int):
        self.code = code
        super().__init__(
            f"required value is empty (group code {code})",
            record_type=record_type,
            field=field,
            hint=f"set '{field}' before writing the record",
        )


class UnencodableValueError(CodecError):
    """
    A value cannot be written as a single value line.

    DXF is line oriented: a line break inside a value would end the value
    early and put the stream out of step for every reader.
    """

    def __init__(self, record_type: str, field: str, code: int):
        self.code = code
        super().__init__(
            f"value contains a line break (group code {code})",
            record_type=record_type,
            field=field,
            hint=f"remove the line break from '{field}' or store the lines in separate fields",
        )


class SchemaError(CodecError):
    """
    A field table declaration is inconsistent.

    Raised once, when a FieldTable is built, for duplicate
    (code, occurrence) keys, duplicate field names, value kinds that do
    not fit the code range, or optional fields without a default.
    """
    pass


class AdvisoryError(CodecError):
    """Raised instead of collecting an advisory when running in strict mode."""

    def __init__(self, advisory: "Advisory"):
        self.advisory = advisory
        super().__init__(
            advisory.message,
            location=advisory.location,
            record_type=advisory.record_type,
            field=advisory.field,
        )


class TooManyAdvisories(AdvisoryError):
    """
    Raised when the advisory limit has been reached.

    This prevents runaway reports on files that are not DXF at all.
    """
    pass


# =============================================================================
# Chain Exceptions
# =============================================================================

class ChainError(DxfError):
    """Base exception for chain manager errors."""
    pass


class DanglingLinkError(ChainError):
    """
    A chain link does not point where the chain manager expects.

    Raised when:
    - A record still linked to a chain is released on its own
    - A chain is released while one of its records links elsewhere
    - A record already owned by a chain is appended to another one
    """
    pass


# =============================================================================
# Advisories
# =============================================================================

class AdvisoryKind(Enum):
    """Categories of non-fatal diagnostics."""
    UNKNOWN_CODE = "unknown-code"
    REVISION_MISMATCH = "revision-mismatch"
    FIELD_DEFECT = "field-defect"
    UNKNOWN_RECORD = "unknown-record"


@dataclass(frozen=True)
class Advisory:
    """
    A non-fatal, caller-visible diagnostic.

    Attributes:
        kind: The advisory category
        message: Human-readable description
        record_type: Record type the advisory refers to
        field: Field name, when the advisory concerns one field
        location: Stream position, when raised while decoding
    """
    kind: AdvisoryKind
    message: str
    record_type: Optional[str] = None
    field: Optional[str] = None
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location else ""
        subject = self.record_type or ""
        if self.field:
            subject = f"{subject}.{self.field}" if subject else self.field
        if subject:
            subject = f"{subject}: "
        return f"{prefix}warning[{self.kind.value}]: {subject}{self.message}"


class AdvisoryCollector:
    """
    Collects advisories for batch reporting.

    The codec keeps going after a recoverable defect and records it here,
    so all defects of a stream are reported together.

    Example:
        collector = AdvisoryCollector()
        drawing = Drawing.read(stream, advisories=collector)
        if collector.has_advisories():
            print(collector.report())
    """

    def __init__(self, max_advisories: Optional[int] = None, strict: bool = False):
        """
        Initialize the collector.

        Args:
            max_advisories: Stop with TooManyAdvisories once this many
                advisories have been collected (None for no limit)
            strict: Raise AdvisoryError on the first advisory instead of
                collecting it
        """
        self.advisories: list[Advisory] = []
        self.max_advisories = max_advisories
        self.strict = strict

    def add(self, advisory: Advisory) -> None:
        """
        Add an advisory to the collection.

        Raises:
            AdvisoryError: In strict mode
            TooManyAdvisories: If max_advisories has been reached
        """
        logger.warning(str(advisory))
        if self.strict:
            raise AdvisoryError(advisory)
        self.advisories.append(advisory)
        if self.max_advisories is not None and len(self.advisories) >= self.max_advisories:
            raise TooManyAdvisories(advisory)

    def extend(self, advisories) -> None:
        """Add several advisories in order."""
        for advisory in advisories:
            self.add(advisory)

    def has_advisories(self) -> bool:
        """Return True if any advisories have been collected."""
        return len(self.advisories) > 0

    def count(self, kind: Optional[AdvisoryKind] = None) -> int:
        """Return the number of advisories, optionally of one kind."""
        if kind is None:
            return len(self.advisories)
        return sum(1 for a in self.advisories if a.kind is kind)

    def of_kind(self, kind: AdvisoryKind) -> list[Advisory]:
        """Return the advisories of one kind, in order of collection."""
        return [a for a in self.advisories if a.kind is kind]

    def report(self) -> str:
        """
        Format all advisories for display.

        Returns:
            One line per advisory followed by a summary line
        """
        lines = [str(advisory) for advisory in self.advisories]
        word = "advisory" if len(self.advisories) == 1 else "advisories"
        lines.append(f"{len(self.advisories)} {word}")
        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected advisories."""
        self.advisories.clear()

    def __len__(self) -> int:
        return len(self.advisories)

    def __iter__(self):
        return iter(self.advisories)
