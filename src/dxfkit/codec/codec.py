"""
Record Codec
============

RecordCodec decodes one record from a TagReader and encodes one record to
a TagWriter, for one FieldTable at one revision.

Decoding
--------
The record's type keyword ("0 / CIRCLE") has already been consumed by the
caller. The codec then loops:

    read token
      terminator (code 0)  -> push it back for the caller, stop
      end of stream        -> stop
      comment (999)        -> keep as record comment, continue
      application group    -> "102 {NAME" opens, "102 }" closes
      look up (code, occurrence), or (group, code) inside a group
        unknown            -> UNKNOWN_CODE advisory, drop value
        inactive at rev.   -> REVISION_MISMATCH advisory, keep value as suspect
        continuation       -> append chunk to the field's payload
        repeatable         -> append to the field's list
        otherwise          -> coerce and store

and finishes with apply_defaults() and validate_and_repair().

Occurrences are resolved against the declaration order (see
FieldTable.resolve), so a suppressed owner handle or an empty first
payload does not move the following occurrence into its slot.

Encoding
--------
Fields are written in the table's declared order (never input order).
Every field the revision policy says must be emitted is formatted and
written; continuation fields produce one group per chunk, repeatable
fields one group per item, and fields of an application group are
wrapped in its 102 delimiters. A required field that is still empty after
repair aborts the write with RequiredValueMissingError; a value holding a
line break aborts it with UnencodableValueError. Nothing is written for
a record that fails either check.

Usage
-----
    >>> codec = RecordCodec(get_schema("CIRCLE"), Revision.R2000)
    >>> record = codec.decode(TagReader(io.StringIO(" 40\\n2.5\\n  0\\nEOF\\n")))
    >>> record["radius"]
    2.5
    >>> codec.encode_to_string(record).splitlines()[:4]
    ['100', 'AcDbEntity', '  8', '0']

Copyright (c) 2026 dxfkit Contributors
"""

from collections import Counter
from io import StringIO
from typing import Any, Optional
import logging

from dxfkit.errors import (
    Advisory,
    AdvisoryCollector,
    AdvisoryKind,
    MalformedStreamError,
    RequiredValueMissingError,
    SourceLocation,
    UnencodableValueError,
)
from dxfkit.config import CodecConfig
from dxfkit.codec.codes import APPLICATION_GROUP, COMMENT, TERMINATOR
from dxfkit.codec.continuation import ContinuationPayload
from dxfkit.codec.defaults import apply_defaults, validate_and_repair
from dxfkit.codec.fields import FieldDescriptor, FieldTable, ValueKind
from dxfkit.codec.records import Record
from dxfkit.codec.revision import Revision, is_field_active, must_emit
from dxfkit.codec.tokens import TagReader, TagWriter, Token

logger = logging.getLogger(__name__)


_KIND_HINTS = {
    ValueKind.HANDLE: "a hexadecimal handle",
    ValueKind.INTEGER: "a decimal integer",
    ValueKind.ENUM: "a decimal integer",
    ValueKind.REAL: "a floating point number",
    ValueKind.POINT_COMPONENT: "a floating point number",
}

GROUP_OPEN = "{"
GROUP_CLOSE = "}"


class RecordCodec:
    """
    Decoder/encoder for records of one type at one revision.

    Attributes:
        table: Schema of the records handled
        revision: Declared revision of the stream (decode) or target
            revision (encode)
        advisories: Collector receiving every advisory raised
        config: Formatting and strictness settings
    """

    def __init__(
        self,
        table: FieldTable,
        revision: Revision,
        advisories: Optional[AdvisoryCollector] = None,
        config: Optional[CodecConfig] = None,
    ):
        self.table = table
        self.revision = revision
        self.config = config or CodecConfig()
        if advisories is None:
            advisories = AdvisoryCollector(
                max_advisories=self.config.max_advisories,
                strict=self.config.strict,
            )
        self.advisories = advisories

    def _advise(
        self,
        kind: AdvisoryKind,
        message: str,
        field: Optional[str] = None,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.advisories.add(Advisory(
            kind,
            message,
            record_type=self.table.record_type,
            field=field,
            location=location,
        ))

    # =========================================================================
    # Decoding
    # =========================================================================

    def decode(self, reader: TagReader) -> Record:
        """
        Decode one record body.

        Args:
            reader: Stream positioned just after the record's type keyword

        Returns:
            The populated, defaulted and repaired record

        Raises:
            MalformedStreamError: If the stream cannot be tokenized or a
                value cannot be coerced to its field's kind
        """
        record = Record(self.table, revision=self.revision)
        occurrences: Counter = Counter()
        position = -1
        group: Optional[str] = None
        skipped_group: Optional[str] = None
        previous: Optional[FieldDescriptor] = None
        previous_code: Optional[int] = None

        while True:
            token = self._next(reader)
            if token is None:
                break
            if token.code == TERMINATOR:
                reader.push_back(token)
                break
            if token.code == COMMENT:
                record.comments.append(token.value)
                logger.info(f"DXF comment: {token.value}")
                previous, previous_code = None, token.code
                continue

            location = reader.location()
            if token.code == APPLICATION_GROUP:
                group, skipped_group = self._application_group(token, group, skipped_group, location)
                previous, previous_code = None, token.code
                continue
            if skipped_group is not None:
                continue

            if previous is not None and previous.is_continuation and token.code == previous_code:
                descriptor = previous
            elif group is not None:
                descriptor = self.table.lookup_in_group(group, token.code)
                if descriptor is not None:
                    occurrences[token.code] = max(occurrences[token.code], descriptor.occurrence + 1)
            else:
                descriptor = self.table.resolve(token.code, occurrences[token.code], position)
                consumed = occurrences[token.code] + 1
                if descriptor is not None:
                    consumed = max(consumed, descriptor.occurrence + 1)
                occurrences[token.code] = consumed
            previous, previous_code = descriptor, token.code

            if descriptor is None:
                where = f"in application group {group!r}" if group else (
                    f"(occurrence {occurrences[token.code] - 1})"
                )
                self._advise(
                    AdvisoryKind.UNKNOWN_CODE,
                    f"unknown group code {token.code} {where}, value {token.value!r} discarded",
                    location=location,
                )
                continue
            position = self.table.position(descriptor)

            if not is_field_active(descriptor, self.revision):
                record.suspect.add(descriptor.name)
                self._advise(
                    AdvisoryKind.REVISION_MISMATCH,
                    f"group code {token.code} is not expected at {self.revision.name}, "
                    f"value kept as suspect",
                    field=descriptor.name,
                    location=location,
                )

            self._store(record, descriptor, token, location)

        if group is not None or skipped_group is not None:
            self._advise(
                AdvisoryKind.FIELD_DEFECT,
                f"application group {group or skipped_group!r} not closed before end of record",
                location=reader.location(),
            )

        apply_defaults(record)
        _, repairs = validate_and_repair(record, self.revision, reader.location())
        self.advisories.extend(repairs)
        logger.debug(f"Decoded {record!r} at line {reader.line_number}")
        return record

    def _next(self, reader: TagReader) -> Optional[Token]:
        """Read a token, adding the record type to tokenizer errors."""
        try:
            return reader.next()
        except MalformedStreamError as e:
            if e.record_type is not None:
                raise
            raise MalformedStreamError(
                e.message,
                location=e.location,
                record_type=self.table.record_type,
                hint=e.hint,
            ) from e

    def _application_group(
        self,
        token: Token,
        group: Optional[str],
        skipped_group: Optional[str],
        location: SourceLocation,
    ) -> tuple[Optional[str], Optional[str]]:
        """
        Track "102 {NAME" / "102 }" delimiters.

        Returns:
            The (open group, skipped group) pair after the token. Groups
            the table declares no field in are skipped whole, with one
            UNKNOWN_CODE advisory.
        """
        value = token.value.strip()
        if value == GROUP_CLOSE:
            if group is None and skipped_group is None:
                self._advise(
                    AdvisoryKind.UNKNOWN_CODE,
                    "application group end without a matching start, discarded",
                    location=location,
                )
            return None, None

        if value.startswith(GROUP_OPEN):
            name = value[1:]
            if group is not None or skipped_group is not None:
                self._advise(
                    AdvisoryKind.FIELD_DEFECT,
                    f"application group {group or skipped_group!r} not closed before {name!r}",
                    location=location,
                )
            if self.table.has_group(name):
                return name, None
            self._advise(
                AdvisoryKind.UNKNOWN_CODE,
                f"application group {name!r} is not modelled, its groups are discarded",
                location=location,
            )
            return None, name

        self._advise(
            AdvisoryKind.UNKNOWN_CODE,
            f"unknown group code {token.code}, value {token.value!r} discarded",
            location=location,
        )
        return group, skipped_group

    def _store(
        self,
        record: Record,
        descriptor: FieldDescriptor,
        token: Token,
        location: SourceLocation,
    ) -> None:
        """Coerce a token's value and store it in its field."""
        value = self._coerce(descriptor, token, location)
        name = descriptor.name

        if descriptor.is_continuation:
            if name not in record.populated:
                record[name] = ContinuationPayload()
            record[name].append(value)
        elif descriptor.repeatable:
            if name not in record.populated:
                record[name] = []
            record[name].append(value)
        else:
            if descriptor.is_marker and value != descriptor.default:
                record.suspect.add(name)
                self._advise(
                    AdvisoryKind.REVISION_MISMATCH,
                    f"subclass marker {value!r} found where {descriptor.default!r} "
                    f"is expected at {self.revision.name}",
                    field=name,
                    location=location,
                )
            record[name] = value

    def _coerce(self, descriptor: FieldDescriptor, token: Token, location: SourceLocation) -> Any:
        """Convert a raw value to the descriptor's kind."""
        kind = descriptor.kind
        raw = token.value
        try:
            if kind is ValueKind.HANDLE:
                return int(raw.strip(), 16)
            if kind in (ValueKind.INTEGER, ValueKind.ENUM):
                return int(raw.strip())
            if kind in (ValueKind.REAL, ValueKind.POINT_COMPONENT):
                return float(raw.strip())
        except ValueError:
            raise MalformedStreamError(
                f"invalid {kind.value} value {raw!r}",
                location=location,
                record_type=self.table.record_type,
                field=descriptor.name,
                hint=f"group code {token.code} expects {_KIND_HINTS[kind]}",
            ) from None
        return raw

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode(self, record: Record, writer: TagWriter) -> None:
        """
        Encode one record body (without its type keyword).

        The record is validated and repaired first; repairs are reported as
        advisories and the record is still written.

        Raises:
            RequiredValueMissingError: If a required field is empty
            UnencodableValueError: If a value contains a line break
        """
        writer.write_tokens(self._groups(record))

    def _groups(self, record: Record) -> list[Token]:
        """Every token of a record body, checked before anything is written."""
        _, repairs = validate_and_repair(record, self.revision)
        self.advisories.extend(repairs)

        for descriptor in self.table:
            if (descriptor.required
                    and is_field_active(descriptor, self.revision)
                    and descriptor.is_empty(record.get(descriptor.name))):
                raise RequiredValueMissingError(
                    record.record_type, descriptor.name, descriptor.code
                )

        tokens: list[Token] = []
        open_group: Optional[str] = None

        def emit(descriptor: FieldDescriptor, text: str) -> None:
            if "\n" in text or "\r" in text:
                raise UnencodableValueError(record.record_type, descriptor.name, descriptor.code)
            tokens.append(Token(descriptor.code, text))

        for descriptor in self.table:
            if not must_emit(descriptor, record, self.revision):
                continue
            if descriptor.group != open_group:
                if open_group is not None:
                    tokens.append(Token(APPLICATION_GROUP, GROUP_CLOSE))
                if descriptor.group is not None:
                    tokens.append(Token(APPLICATION_GROUP, GROUP_OPEN + descriptor.group))
                open_group = descriptor.group

            value = record.get(descriptor.name)
            if descriptor.is_marker:
                emit(descriptor, descriptor.default)
            elif descriptor.is_continuation:
                for chunk in self._fit(descriptor, value):
                    emit(descriptor, chunk.data)
            elif descriptor.repeatable:
                for item in value:
                    emit(descriptor, self._format(descriptor, item))
            else:
                emit(descriptor, self._format(descriptor, value))

        if open_group is not None:
            tokens.append(Token(APPLICATION_GROUP, GROUP_CLOSE))
        return tokens

    def write(self, record: Record, writer: TagWriter) -> None:
        """Encode a record preceded by its type keyword ("0 / CIRCLE")."""
        tokens = self._groups(record)
        writer.write(TERMINATOR, record.record_type)
        writer.write_tokens(tokens)

    def _fit(self, descriptor: FieldDescriptor, payload: ContinuationPayload) -> list:
        """Chunks of a payload, re-split if any exceeds the field's width."""
        width = descriptor.chunk_width
        if width is None:
            width = (self.config.binary_chunk_width if descriptor.code >= 310
                     else self.config.text_chunk_width)
        if any(len(chunk.data) > width for chunk in payload.chunks):
            payload = payload.resplit(width)
        return payload.ordered()

    def _format(self, descriptor: FieldDescriptor, value: Any) -> str:
        """Convert a typed value to its textual representation."""
        kind = descriptor.kind
        if kind is ValueKind.HANDLE:
            return f"{value:x}"
        if kind in (ValueKind.INTEGER, ValueKind.ENUM):
            return str(int(value))
        if kind in (ValueKind.REAL, ValueKind.POINT_COMPONENT):
            return self.config.format_real(float(value))
        return str(value)

    # =========================================================================
    # String helpers
    # =========================================================================

    def decode_from_string(self, text: str, filename: str = "<input>") -> Record:
        """Decode one record body from text."""
        return self.decode(TagReader(StringIO(text), filename))

    def encode_to_string(self, record: Record) -> str:
        """Encode one record body to text."""
        buffer = StringIO()
        self.encode(record, TagWriter(buffer))
        return buffer.getvalue()
