"""
Drawings
========

A Drawing is a whole DXF file: header variables plus one Chain of records
per record type. It walks the section structure of the file and hands
every record body to a RecordCodec for its type.

File structure
--------------
    0 SECTION / 2 HEADER      9 $VARIABLE, value groups ... 0 ENDSEC
    0 SECTION / 2 TABLES      0 TABLE / 2 LAYER ... 0 ENDTAB ... 0 ENDSEC
    0 SECTION / 2 ENTITIES    0 CIRCLE ... 0 ENDSEC
    0 SECTION / 2 OBJECTS     0 DICTIONARY ... 0 ENDSEC
    0 EOF

The $ACADVER header variable declares the revision every record is decoded
at; a file without it is read at the configured default revision. Header
variables are kept as raw token lists and written back unchanged (except
$ACADVER, which always reflects the revision written).

Sections other than HEADER, TABLES, ENTITIES and OBJECTS (CLASSES, BLOCKS,
THUMBNAILIMAGE) are skipped. Records of a type without a schema are
skipped with an UNKNOWN_RECORD advisory.

Records are grouped by type, so a written file lists all records of one
type together; the relative order of records of different types is not
preserved.

Text encoding
-------------
R2007 and later files are UTF-8. Older files are written in the ANSI code
page named by $DWGCODEPAGE (e.g. ANSI_1252 reads as cp1252), unless
CodecConfig.encoding names one. Bytes that are not valid in that encoding
are kept verbatim (surrogateescape) and written back unchanged by save(),
with a FIELD_DEFECT advisory on read.

Usage
-----
    >>> drawing = Drawing.from_file("part.dxf")
    >>> drawing.revision
    <Revision.R2000: 1015>
    >>> drawing.counts()
    {'LAYER': 2, 'CIRCLE': 14, 'TEXT': 3}
    >>> drawing.save("part_r12.dxf", revision=Revision.R12)
    >>> drawing.release()

Copyright (c) 2026 dxfkit Contributors
"""

from io import StringIO
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union
import codecs
import logging
import re

from dxfkit.errors import (
    Advisory,
    AdvisoryCollector,
    AdvisoryKind,
    MalformedStreamError,
    SourceLocation,
)
from dxfkit.codec import (
    COMMENT,
    TERMINATOR,
    Chain,
    FieldTable,
    Record,
    RecordCodec,
    Revision,
    TagReader,
    TagWriter,
    Token,
)
from dxfkit.config import CodecConfig
from dxfkit.schemas import (
    ENTITY_SCHEMAS,
    OBJECT_SCHEMAS,
    TABLE_SCHEMAS,
    WRAPPER_SCHEMAS,
    get_schema,
)

logger = logging.getLogger(__name__)

# Header variable declaring the file's revision
ACADVER = "$ACADVER"

# First revision whose files are always UTF-8
UTF8_REVISION = Revision.R2007

_ACADVER_VALUE = re.compile(rb"\$ACADVER\s*\r?\n\s*1\s*\r?\n([^\r\n]*)")
_CODEPAGE_VALUE = re.compile(rb"\$DWGCODEPAGE\s*\r?\n\s*3\s*\r?\n([^\r\n]*)")
_CODEPAGE_NAME = re.compile(r"(?:ANSI|DOS)_?(\d+)", re.IGNORECASE)
_UNDECODABLE = re.compile("[\udc80-\udcff]")

# Sections holding records, mapped to the record types they may contain
RECORD_SECTIONS = {
    "TABLES": TABLE_SCHEMAS,
    "ENTITIES": ENTITY_SCHEMAS,
    "OBJECTS": OBJECT_SCHEMAS,
}


def detect_encoding(data: bytes, default: str = "utf-8") -> str:
    """
    Text encoding of a DXF file, from its header.

    $ACADVER AC1021 (R2007) or later means UTF-8. Otherwise a $DWGCODEPAGE
    of the form ANSI_nnnn or DOSnnn selects Python's cpnnnn codec. Unknown
    code pages fall back to `default`.
    """
    acadver = _ACADVER_VALUE.search(data)
    if acadver:
        try:
            if Revision.from_acadver(acadver.group(1).decode("ascii").strip()) >= UTF8_REVISION:
                return "utf-8"
        except ValueError:
            pass

    codepage = _CODEPAGE_VALUE.search(data)
    if not codepage:
        return default
    name = codepage.group(1).decode("ascii", errors="replace").strip()
    match = _CODEPAGE_NAME.fullmatch(name)
    if match:
        try:
            return codecs.lookup(f"cp{match.group(1)}").name
        except LookupError:
            pass
    logger.warning(f"Unknown $DWGCODEPAGE {name!r}, reading as {default}")
    return default


class Drawing:
    """
    A DXF drawing: header variables and per-type record chains.

    Attributes:
        revision: Revision the drawing was read at (or will be written at)
        encoding: Text encoding of the file read (None for in-memory text)
        header: Header variables by name, as raw value tokens
        chains: Record chains by record type
        advisories: Collector receiving every advisory of reads and writes
        config: Codec settings
    """

    def __init__(
        self,
        revision: Optional[Revision] = None,
        config: Optional[CodecConfig] = None,
        advisories: Optional[AdvisoryCollector] = None,
    ):
        self.config = config or CodecConfig()
        self.revision = revision if revision is not None else self.config.default_revision
        self.encoding: Optional[str] = None
        self.header: dict[str, list[Token]] = {}
        self.chains: dict[str, Chain] = {}
        if advisories is None:
            advisories = AdvisoryCollector(
                max_advisories=self.config.max_advisories,
                strict=self.config.strict,
            )
        self.advisories = advisories

    # =========================================================================
    # Record access
    # =========================================================================

    def chain(self, record_type: str) -> Chain:
        """
        Return the chain of a record type, creating it if needed.

        Raises:
            KeyError: If the record type has no schema
        """
        record_type = record_type.upper()
        if record_type not in self.chains:
            if get_schema(record_type) is None:
                raise KeyError(f"no schema for record type '{record_type}'")
            self.chains[record_type] = Chain(record_type)
        return self.chains[record_type]

    def add(self, record: Record) -> Record:
        """Append a record to the chain of its type."""
        return self.chain(record.record_type).append(record)

    def records(self) -> Iterator[Record]:
        """Every record, chain by chain."""
        for chain in self.chains.values():
            yield from chain

    def counts(self) -> dict[str, int]:
        """Number of records per type, for non-empty chains."""
        return {name: len(chain) for name, chain in self.chains.items() if chain}

    def __len__(self) -> int:
        return sum(len(chain) for chain in self.chains.values())

    def release(self) -> None:
        """Release every chain and forget them."""
        for chain in self.chains.values():
            chain.release()
        self.chains.clear()
        logger.debug("Released drawing")

    # =========================================================================
    # Reading
    # =========================================================================

    @classmethod
    def read(
        cls,
        stream: TextIO,
        filename: str = "<input>",
        config: Optional[CodecConfig] = None,
        advisories: Optional[AdvisoryCollector] = None,
    ) -> "Drawing":
        """
        Read a drawing from a text stream.

        Raises:
            MalformedStreamError: If the section structure is broken or a
                record cannot be tokenized
        """
        drawing = cls(config=config, advisories=advisories)
        drawing._read(TagReader(stream, filename))
        return drawing

    @classmethod
    def from_file(
        cls,
        filepath: Union[str, Path],
        config: Optional[CodecConfig] = None,
        advisories: Optional[AdvisoryCollector] = None,
    ) -> "Drawing":
        """
        Read a drawing from a file.

        The encoding is CodecConfig.encoding when set, otherwise the one
        detect_encoding() derives from the header.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MalformedStreamError: If the file cannot be parsed
        """
        filepath = Path(filepath)
        data = filepath.read_bytes()

        drawing = cls(config=config, advisories=advisories)
        drawing.encoding = drawing.config.encoding or detect_encoding(data)
        text = data.decode(drawing.encoding, errors="surrogateescape")
        logger.debug(f"Reading {filepath} as {drawing.encoding}")

        undecodable = _UNDECODABLE.findall(text)
        if undecodable:
            first = _UNDECODABLE.search(text)
            drawing.advisories.add(Advisory(
                AdvisoryKind.FIELD_DEFECT,
                f"{len(undecodable)} byte(s) not valid {drawing.encoding}, kept verbatim",
                location=SourceLocation(str(filepath), text.count("\n", 0, first.start()) + 1),
            ))

        drawing._read(TagReader(StringIO(text, newline=""), str(filepath)))
        return drawing

    @classmethod
    def from_string(cls, text: str, config: Optional[CodecConfig] = None) -> "Drawing":
        """Read a drawing from text."""
        return cls.read(StringIO(text), config=config)

    def _read(self, reader: TagReader) -> None:
        while True:
            token = reader.next()
            if token is None:
                logger.warning(f"{reader.location()}: stream ends without EOF marker")
                return
            if token.code == COMMENT:
                logger.info(f"DXF comment: {token.value}")
                continue
            if token.code != TERMINATOR:
                raise MalformedStreamError(
                    f"expected group code 0, found {token.code}",
                    location=reader.location(),
                )
            if token.value == "EOF":
                return
            if token.value != "SECTION":
                raise MalformedStreamError(
                    f"expected SECTION, found {token.value!r}",
                    location=reader.location(),
                )

            name = reader.next()
            if name is None or name.code != 2:
                raise MalformedStreamError(
                    "section name (group code 2) expected after SECTION",
                    location=reader.location(),
                )

            if name.value == "HEADER":
                self._read_header(reader)
            elif name.value in RECORD_SECTIONS:
                self._read_records(reader, name.value)
            else:
                logger.debug(f"Skipping {name.value} section")
                self._skip_section(reader, name.value)

    def _read_header(self, reader: TagReader) -> None:
        current: Optional[str] = None
        for token in reader:
            if token.code == TERMINATOR:
                if token.value != "ENDSEC":
                    raise MalformedStreamError(
                        f"unexpected {token.value!r} in HEADER section",
                        location=reader.location(),
                    )
                break
            if token.code == 9:
                current = token.value
                self.header[current] = []
            elif current is None:
                logger.debug(f"Ignoring header group {token.code} before any variable")
            else:
                self.header[current].append(token)
        else:
            raise MalformedStreamError(
                "HEADER section not closed by ENDSEC", location=reader.location(),
            )

        acadver = self.header.get(ACADVER)
        if acadver:
            try:
                self.revision = Revision.from_acadver(acadver[0].value)
            except ValueError as e:
                self.advisories.add(Advisory(
                    AdvisoryKind.REVISION_MISMATCH,
                    f"{e}; reading at {self.revision.name}",
                    location=reader.location(),
                ))
        logger.debug(f"Header: {len(self.header)} variables, revision {self.revision.name}")

    def _read_records(self, reader: TagReader, section: str) -> None:
        by_type: dict[str, RecordCodec] = {}
        for token in reader:
            if token.code == COMMENT:
                logger.info(f"DXF comment: {token.value}")
                continue
            if token.code != TERMINATOR:
                raise MalformedStreamError(
                    f"expected group code 0 in {section} section, found {token.code}",
                    location=reader.location(),
                )
            if token.value == "ENDSEC":
                return

            table = get_schema(token.value)
            if table is None:
                self.advisories.add(Advisory(
                    AdvisoryKind.UNKNOWN_RECORD,
                    f"no schema for record type {token.value!r} in {section}, record skipped",
                    record_type=token.value,
                    location=reader.location(),
                ))
                self._skip_record(reader)
                continue

            codec = by_type.get(table.record_type)
            if codec is None:
                codec = by_type[table.record_type] = self._codec(table, self.revision)
            record = codec.decode(reader)
            if table.record_type in WRAPPER_SCHEMAS:
                continue
            self.chain(table.record_type).append(record)

        raise MalformedStreamError(
            f"{section} section not closed by ENDSEC", location=reader.location(),
        )

    def _skip_record(self, reader: TagReader) -> None:
        for token in reader:
            if token.code == TERMINATOR:
                reader.push_back(token)
                return

    def _skip_section(self, reader: TagReader, section: str) -> None:
        for token in reader:
            if token.code == TERMINATOR and token.value == "ENDSEC":
                return
        raise MalformedStreamError(
            f"{section} section not closed by ENDSEC", location=reader.location(),
        )

    def _codec(self, table: FieldTable, revision: Revision) -> RecordCodec:
        return RecordCodec(table, revision, advisories=self.advisories, config=self.config)

    # =========================================================================
    # Writing
    # =========================================================================

    def write(self, stream: TextIO, revision: Optional[Revision] = None) -> None:
        """
        Write the drawing.

        Args:
            stream: Text stream to write to
            revision: Target revision (defaults to the drawing's revision)

        Raises:
            RequiredValueMissingError: If a record lacks a required value
        """
        revision = revision if revision is not None else self.revision
        writer = TagWriter(stream)

        self._write_header(writer, revision)

        tables = self._writable(TABLE_SCHEMAS, revision)
        if tables:
            self._begin_section(writer, "TABLES")
            table_codec = self._codec(WRAPPER_SCHEMAS["TABLE"], revision)
            endtab_codec = self._codec(WRAPPER_SCHEMAS["ENDTAB"], revision)
            for record_type, chain in tables:
                table_codec.write(
                    Record(table_codec.table, table_name=record_type, max_entries=len(chain)),
                    writer,
                )
                self._write_chain(writer, chain, revision)
                endtab_codec.write(Record(endtab_codec.table), writer)
            writer.write(TERMINATOR, "ENDSEC")

        self._begin_section(writer, "ENTITIES")
        for _, chain in self._writable(ENTITY_SCHEMAS, revision):
            self._write_chain(writer, chain, revision)
        writer.write(TERMINATOR, "ENDSEC")

        objects = self._writable(OBJECT_SCHEMAS, revision)
        if objects:
            self._begin_section(writer, "OBJECTS")
            for _, chain in objects:
                self._write_chain(writer, chain, revision)
            writer.write(TERMINATOR, "ENDSEC")

        writer.write(TERMINATOR, "EOF")
        logger.debug(f"Wrote {len(self)} records at {revision.name} ({writer.line_number} lines)")

    def to_string(self, revision: Optional[Revision] = None) -> str:
        """Write the drawing to text."""
        buffer = StringIO()
        self.write(buffer, revision)
        return buffer.getvalue()

    def save(self, filepath: Union[str, Path], revision: Optional[Revision] = None) -> None:
        """
        Write the drawing to a file, in the encoding of its revision.

        Raises:
            RequiredValueMissingError: If a record lacks a required value
            UnicodeEncodeError: If text has no representation in the
                pre-R2007 code page
        """
        revision = revision if revision is not None else self.revision
        with open(filepath, "w", encoding=self.output_encoding(revision),
                  errors="surrogateescape", newline="\n") as f:
            self.write(f, revision)

    def output_encoding(self, revision: Revision) -> str:
        """Encoding save() uses for `revision`."""
        if revision >= UTF8_REVISION:
            return "utf-8"
        return self.config.encoding or self.encoding or "utf-8"

    def _begin_section(self, writer: TagWriter, name: str) -> None:
        writer.write(TERMINATOR, "SECTION")
        writer.write(2, name)

    def _write_header(self, writer: TagWriter, revision: Revision) -> None:
        self._begin_section(writer, "HEADER")
        if revision >= Revision.R10:
            writer.write(9, ACADVER)
            writer.write(1, revision.acadver)
        for name, tokens in self.header.items():
            if name == ACADVER:
                continue
            writer.write(9, name)
            writer.write_tokens(tokens)
        writer.write(TERMINATOR, "ENDSEC")

    def _writable(self, schemas: dict[str, FieldTable], revision: Revision) -> list[tuple[str, Chain]]:
        """Non-empty chains of a section, in section order, that exist at `revision`."""
        result = []
        for record_type, table in schemas.items():
            chain = self.chains.get(record_type)
            if not chain:
                continue
            if table.first_revision is not None and revision < table.first_revision:
                self.advisories.add(Advisory(
                    AdvisoryKind.REVISION_MISMATCH,
                    f"{len(chain)} record(s) cannot be written at {revision.name} "
                    f"(introduced in {table.first_revision.name}), skipped",
                    record_type=record_type,
                ))
                continue
            result.append((record_type, chain))
        return result

    def _write_chain(self, writer: TagWriter, chain: Chain, revision: Revision) -> None:
        codec = self._codec(get_schema(chain.record_type), revision)
        for record in chain:
            codec.write(record, writer)

    def __repr__(self) -> str:
        return f"Drawing({self.revision.name}, {len(self)} records)"
