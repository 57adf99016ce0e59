"""
Record Codec Unit Tests
=======================

Tests for decoding and encoding single records.

Test Categories
---------------
1. Decoding: coercion, occurrences, unknown codes, comments, repairs
2. Revision handling: gating on write, mismatches on read
3. Encoding: declared order, default suppression, required fields, line breaks
4. Continuation: payloads split over several lines
5. Round-trip: encode/decode/compare cycles
6. Application groups: 102 delimiters around the owner handles
"""

import pytest

from dxfkit.codec import (
    FieldDescriptor,
    FieldTable,
    Record,
    RecordCodec,
    Revision,
    ValueKind,
)
from dxfkit.config import CodecConfig
from dxfkit.errors import (
    AdvisoryCollector,
    AdvisoryError,
    AdvisoryKind,
    MalformedStreamError,
    RequiredValueMissingError,
    TooManyAdvisories,
    UnencodableValueError,
)
from dxfkit.schemas import get_schema


def codec_for(record_type: str, revision: Revision = Revision.R2000, **kwargs) -> RecordCodec:
    return RecordCodec(get_schema(record_type), revision, **kwargs)


def codes_of(text: str) -> list[int]:
    """Group codes of an encoded record body, in order."""
    return [int(line) for line in text.splitlines()[0::2]]


# =============================================================================
# Decoding Tests
# =============================================================================

class TestDecode:
    """Tests for RecordCodec.decode()."""

    def test_handle_and_zero_radius(self):
        """Test decoding a handle and repairing a zero radius."""
        codec = codec_for("CIRCLE", Revision.R12)
        record = codec.decode_from_string("  5\n1A\n 40\n0.000000\n  0\n")

        assert record["handle"] == 0x1A
        assert record["radius"] == 1.0
        assert codec.advisories.count() == 1
        defect = codec.advisories.of_kind(AdvisoryKind.FIELD_DEFECT)[0]
        assert defect.field == "radius"

    def test_typed_values(self):
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string(
            "  8\nWALLS\n 62\n1\n 10\n1.5\n 20\n-2\n 30\n0.0\n 40\n3.25\n"
        )
        assert record["layer"] == "WALLS"
        assert record["color"] == 1
        assert record.point("center") == (1.5, -2.0, 0.0)
        assert record["radius"] == 3.25
        assert not codec.advisories.has_advisories()

    def test_unpopulated_fields_defaulted(self):
        record = codec_for("CIRCLE").decode_from_string(" 40\n2.0\n")
        assert record["layer"] == "0"
        assert record["linetype"] == "BYLAYER"
        assert record.populated == {"radius"}

    def test_stops_at_terminator(self):
        """Test that the next record's code 0 is left in the stream."""
        import io
        from dxfkit.codec import TagReader, Token

        reader = TagReader(io.StringIO(" 40\n2.0\n  0\nLINE\n"))
        codec_for("CIRCLE").decode(reader)
        assert reader.next() == Token(0, "LINE")

    def test_unknown_code(self):
        """Test that an unknown code is dropped with an advisory."""
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string(" 40\n2.0\n 99\nstray\n")
        assert record["radius"] == 2.0
        unknown = codec.advisories.of_kind(AdvisoryKind.UNKNOWN_CODE)
        assert len(unknown) == 1
        assert "99" in unknown[0].message
        assert unknown[0].location.line == 4

    def test_unknown_occurrence(self):
        """Test that a second occurrence of a single-valued code is unknown."""
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string(" 40\n2.0\n 40\n3.0\n")
        assert record["radius"] == 2.0
        assert codec.advisories.count(AdvisoryKind.UNKNOWN_CODE) == 1

    def test_comment_kept(self):
        """Test that 999 comments are kept on the record, never encoded."""
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string("999\nmade by hand\n 40\n2.0\n")
        assert record.comments == ["made by hand"]
        assert "made by hand" not in codec.encode_to_string(record)

    def test_bad_real(self):
        """Test that an uncoercible value is a fatal decode error."""
        codec = codec_for("CIRCLE")
        with pytest.raises(MalformedStreamError) as exc_info:
            codec.decode_from_string(" 40\nabc\n", filename="part.dxf")
        message = str(exc_info.value)
        assert "part.dxf:2" in message
        assert "CIRCLE.radius" in message
        assert "floating point" in message

    def test_bad_handle(self):
        with pytest.raises(MalformedStreamError):
            codec_for("CIRCLE").decode_from_string("  5\nZZ\n")

    def test_occurrences_disambiguate(self):
        """Test the two 330 groups of IMAGEDEF_REACTOR."""
        codec = codec_for("IMAGEDEF_REACTOR")
        record = codec.decode_from_string("330\n1A\n 90\n2\n330\n2B\n")
        assert record["owner"] == 0x1A
        assert record["image"] == 0x2B
        assert not codec.advisories.has_advisories()

    def test_tokenizer_error_names_record(self):
        """Test that a broken code line inside a record names the record type."""
        with pytest.raises(MalformedStreamError) as exc_info:
            codec_for("CIRCLE").decode_from_string("  5\n1A\nxx\n", filename="part.dxf")
        assert exc_info.value.record_type == "CIRCLE"
        assert str(exc_info.value).startswith("part.dxf:3: error: CIRCLE: group code expected")

    def test_repeatable_fields(self):
        codec = codec_for("DICTIONARY")
        record = codec.decode_from_string(
            "  3\nACAD_GROUP\n350\n1F\n  3\nACAD_LAYOUT\n350\n20\n"
        )
        assert record["entry_names"] == ["ACAD_GROUP", "ACAD_LAYOUT"]
        assert record["entry_handles"] == [0x1F, 0x20]

    def test_continuation_runs(self):
        """Test that two runs of 310 lines fill two payloads."""
        codec = codec_for("ACAD_PROXY_ENTITY")
        record = codec.decode_from_string(
            " 92\n3\n310\nAABB\n310\nCC\n 93\n16\n310\nDDEE\n"
        )
        assert record["graphics_data"].to_bytes() == b"\xaa\xbb\xcc"
        assert len(record["graphics_data"]) == 2
        assert record["entity_data"].text == "DDEE"
        assert not codec.advisories.has_advisories()


# =============================================================================
# Revision Tests
# =============================================================================

class TestRevisionHandling:
    """Tests for revision-dependent reading and writing."""

    def test_marker_at_oldest_revision(self):
        """Test that a marker read where none is expected is kept as suspect."""
        codec = codec_for("CIRCLE", Revision.oldest())
        record = codec.decode_from_string("100\nAcDbEntity\n  8\n0\n 40\n1.0\n")

        mismatches = codec.advisories.of_kind(AdvisoryKind.REVISION_MISMATCH)
        assert len(mismatches) == 1
        assert mismatches[0].field == "subclass_AcDbEntity"
        assert "subclass_AcDbEntity" in record.suspect
        assert record["subclass_AcDbEntity"] == "AcDbEntity"

    def test_wrong_marker_content(self):
        codec = codec_for("CIRCLE", Revision.R2000)
        record = codec.decode_from_string("100\nAcDbLine\n100\nAcDbCircle\n 40\n1.0\n")
        assert codec.advisories.count(AdvisoryKind.REVISION_MISMATCH) == 1
        assert record.suspect == {"subclass_AcDbEntity"}

    def test_field_gated_by_first_revision(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, lineweight=25)
        assert 370 not in codes_of(codec_for("CIRCLE", Revision.R14).encode_to_string(record))
        assert 370 in codes_of(codec_for("CIRCLE", Revision.R2000).encode_to_string(record))

    def test_field_gated_by_last_revision(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, elevation=5.0)
        assert 38 in codes_of(codec_for("CIRCLE", Revision.R12).encode_to_string(record))
        assert 38 not in codes_of(codec_for("CIRCLE", Revision.R13).encode_to_string(record))

    def test_markers_only_from_r13(self):
        record = Record(get_schema("CIRCLE"), radius=1.0)
        assert 100 not in codes_of(codec_for("CIRCLE", Revision.R12).encode_to_string(record))
        assert codes_of(codec_for("CIRCLE", Revision.R13).encode_to_string(record)).count(100) == 2

    def test_text_second_marker(self):
        record = Record(get_schema("TEXT"), text_value="Hello")
        text = codec_for("TEXT", Revision.R2000).encode_to_string(record)
        assert text.count("100\nAcDbText\n") == 2
        assert text.rindex("100\nAcDbText\n") > text.index("  1\nHello\n")


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncode:
    """Tests for RecordCodec.encode()."""

    def test_circle_r2000(self):
        """Test declared order, default suppression and real formatting."""
        record = Record(get_schema("CIRCLE"), radius=2.5)
        assert codec_for("CIRCLE", Revision.R2000).encode_to_string(record) == (
            "100\nAcDbEntity\n"
            "  8\n0\n"
            "100\nAcDbCircle\n"
            " 10\n0.000000\n"
            " 20\n0.000000\n"
            " 30\n0.000000\n"
            " 40\n2.500000\n"
        )

    def test_circle_r12(self):
        record = Record(get_schema("CIRCLE"), radius=2.5)
        assert codec_for("CIRCLE", Revision.R12).encode_to_string(record) == (
            "  8\n0\n"
            " 10\n0.000000\n"
            " 20\n0.000000\n"
            " 30\n0.000000\n"
            " 40\n2.500000\n"
        )

    def test_handle_lowercase_hex(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, handle=0x2F)
        text = codec_for("CIRCLE").encode_to_string(record)
        assert text.startswith("  5\n2f\n")

    def test_non_default_values_emitted(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, linetype="DASHED", color=1)
        codes = codes_of(codec_for("CIRCLE").encode_to_string(record))
        assert 6 in codes
        assert 62 in codes

    def test_empty_string_default_not_emitted(self):
        """Test that an unset optional field with default "" is not written."""
        table = FieldTable("NOTE", [
            FieldDescriptor(1, "text", ValueKind.STRING, required=True),
            FieldDescriptor(3, "remark", ValueKind.STRING, default=""),
        ])
        codec = RecordCodec(table, Revision.R2000)
        assert codec.encode_to_string(Record(table, text="hi")) == "  1\nhi\n"

    def test_write_includes_type(self):
        import io
        from dxfkit.codec import TagWriter

        buffer = io.StringIO()
        codec_for("CIRCLE", Revision.R12).write(Record(get_schema("CIRCLE"), radius=1.0), TagWriter(buffer))
        assert buffer.getvalue().startswith("  0\nCIRCLE\n  8\n0\n")

    def test_required_value_missing(self):
        record = Record(get_schema("TEXT"))
        with pytest.raises(RequiredValueMissingError) as exc_info:
            codec_for("TEXT").encode_to_string(record)
        assert exc_info.value.field == "text_value"
        assert exc_info.value.code == 1

    def test_required_with_fallback_repaired(self):
        """Test that an empty layer name is repaired, not refused."""
        codec = codec_for("LAYER")
        text = codec.encode_to_string(Record(get_schema("LAYER")))
        assert "  2\n0\n" in text
        assert codec.advisories.count(AdvisoryKind.FIELD_DEFECT) == 1

    def test_repair_on_encode(self):
        codec = codec_for("CIRCLE")
        text = codec.encode_to_string(Record(get_schema("CIRCLE"), radius=0.0))
        assert " 40\n1.000000\n" in text
        assert codec.advisories.count(AdvisoryKind.FIELD_DEFECT) == 1

    def test_repeatable_one_group_per_item(self):
        record = Record(get_schema("DICTIONARY"), entry_names=["A", "B"], entry_handles=[0x10, 0x11])
        text = codec_for("DICTIONARY").encode_to_string(record)
        assert "  3\nA\n  3\nB\n350\n10\n350\n11\n" in text

    def test_custom_real_format(self):
        config = CodecConfig(real_format="%.2f")
        codec = codec_for("CIRCLE", config=config)
        assert " 40\n2.50\n" in codec.encode_to_string(Record(get_schema("CIRCLE"), radius=2.5))

    def test_real_precision_kept(self):
        """Test that values six decimals cannot hold are written exactly."""
        text = codec_for("CIRCLE").encode_to_string(Record(get_schema("CIRCLE"), radius=1.23456789))
        assert " 40\n1.23456789\n" in text

    def test_line_break_refused(self):
        """Test that a value holding a line break is refused before any output."""
        import io
        from dxfkit.codec import TagWriter

        buffer = io.StringIO()
        record = Record(get_schema("BODY"), proprietary_data="ab\ncd")
        with pytest.raises(UnencodableValueError) as exc_info:
            codec_for("BODY").write(record, TagWriter(buffer))
        assert exc_info.value.field == "proprietary_data"
        assert exc_info.value.code == 1
        assert buffer.getvalue() == ""

    def test_carriage_return_refused(self):
        record = Record(get_schema("TEXT"), text_value="line one\rline two")
        with pytest.raises(UnencodableValueError) as exc_info:
            codec_for("TEXT").encode_to_string(record)
        assert exc_info.value.field == "text_value"


# =============================================================================
# Continuation Tests
# =============================================================================

class TestContinuation:
    """Tests for payloads written over several lines."""

    def test_text_payload_split_at_width(self):
        record = Record(get_schema("BODY"), proprietary_data="x" * 600)
        text = codec_for("BODY").encode_to_string(record)
        lines = text.splitlines()
        payload_lines = [lines[i + 1] for i in range(0, len(lines), 2) if lines[i] == "  1"]
        assert [len(line) for line in payload_lines] == [255, 255, 90]

    def test_binary_payload_lines(self):
        record = Record(get_schema("ACAD_PROXY_ENTITY"), graphics_data=bytes(200))
        text = codec_for("ACAD_PROXY_ENTITY").encode_to_string(record)
        assert codes_of(text).count(310) == 2

    def test_configured_binary_width(self):
        record = Record(get_schema("ACAD_PROXY_ENTITY"), graphics_data=bytes(200))
        codec = codec_for("ACAD_PROXY_ENTITY", config=CodecConfig(binary_chunk_width=100))
        assert codes_of(codec.encode_to_string(record)).count(310) == 4

    def test_payload_round_trip(self):
        data = bytes(range(256))
        record = Record(get_schema("ACAD_PROXY_ENTITY"), graphics_data=data, entity_data=b"\x01\x02")
        codec = codec_for("ACAD_PROXY_ENTITY")
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded["graphics_data"].to_bytes() == data
        assert decoded["entity_data"].to_bytes() == b"\x01\x02"


# =============================================================================
# Round-trip Tests
# =============================================================================

class TestRoundTrip:
    """Tests for encode/decode cycles."""

    def test_circle_round_trip(self):
        record = Record(get_schema("CIRCLE"), handle=0x2F, layer="WALLS", color=1, radius=2.5)
        record.set_point("center", (1.0, 2.0, 3.0))
        codec = codec_for("CIRCLE", Revision.R2000)
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded.equals(record, Revision.R2000)
        assert not codec.advisories.has_advisories()

    def test_round_trip_drops_inactive_fields(self):
        """Test that fields a revision cannot carry are ignored by equals()."""
        record = Record(get_schema("CIRCLE"), radius=2.5, linetype_scale=2.0)
        codec = codec_for("CIRCLE", Revision.R12)
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded["linetype_scale"] == 1.0
        assert decoded.equals(record, Revision.R12)
        assert not decoded.equals(record)

    def test_text_round_trip(self):
        record = Record(get_schema("TEXT"), text_value="Hello", height=2.5,
                        horizontal_alignment=1, vertical_alignment=2)
        record.set_point("alignment", (5.0, 0.0, 0.0))
        codec = codec_for("TEXT", Revision.R2000)
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded.equals(record, Revision.R2000)

    def test_reactor_round_trip(self):
        record = Record(get_schema("IMAGEDEF_REACTOR"), owner=0x1A, image=0x2B)
        codec = codec_for("IMAGEDEF_REACTOR")
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert (decoded["owner"], decoded["image"]) == (0x1A, 0x2B)

    def test_reactor_without_owner(self):
        """Test that a suppressed owner does not move the image into its slot."""
        record = Record(get_schema("IMAGEDEF_REACTOR"), image=0x2B)
        codec = codec_for("IMAGEDEF_REACTOR")
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded["owner"] is None
        assert decoded["image"] == 0x2B
        assert decoded.equals(record, Revision.R2000)
        assert not codec.advisories.has_advisories()

    def test_proxy_without_graphics(self):
        """Test that an empty first payload does not take the second one."""
        record = Record(get_schema("ACAD_PROXY_ENTITY"), entity_data=b"\x01\x02")
        codec = codec_for("ACAD_PROXY_ENTITY")
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert len(decoded["graphics_data"]) == 0
        assert decoded["entity_data"].to_bytes() == b"\x01\x02"
        assert not codec.advisories.has_advisories()

    def test_real_round_trip(self):
        record = Record(get_schema("CIRCLE"), radius=1.23456789)
        record.set_point("center", (0.1 + 0.2, 2 / 3, 1e-9))
        codec = codec_for("CIRCLE")
        decoded = codec.decode_from_string(codec.encode_to_string(record))
        assert decoded["radius"] == 1.23456789
        assert decoded.point("center") == (0.1 + 0.2, 2 / 3, 1e-9)
        assert decoded.equals(record, Revision.R2000)


# =============================================================================
# Application Group Tests
# =============================================================================

class TestApplicationGroups:
    """Tests for the 102 {ACAD_REACTORS and {ACAD_XDICTIONARY groups."""

    def test_owners_wrapped_from_r14(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, owner=0x1F, owner_hard=0x20)
        text = codec_for("CIRCLE", Revision.R2000).encode_to_string(record)
        assert text.startswith(
            "102\n{ACAD_REACTORS\n330\n1f\n102\n}\n"
            "102\n{ACAD_XDICTIONARY\n360\n20\n102\n}\n"
            "100\nAcDbEntity\n"
        )

    def test_owners_not_written_before_r14(self):
        record = Record(get_schema("CIRCLE"), radius=1.0, owner=0x1F, owner_hard=0x20)
        codes = codes_of(codec_for("CIRCLE", Revision.R13).encode_to_string(record))
        assert 102 not in codes
        assert 330 not in codes
        assert 360 not in codes

    def test_groups_decoded(self):
        codec = codec_for("IMAGEDEF_REACTOR")
        record = codec.decode_from_string(
            "102\n{ACAD_REACTORS\n330\n1A\n102\n}\n"
            "102\n{ACAD_XDICTIONARY\n360\n1C\n102\n}\n"
            "100\nAcDbRasterImageDefReactor\n 90\n2\n330\n2B\n"
        )
        assert record["owner"] == 0x1A
        assert record["owner_hard"] == 0x1C
        assert record["image"] == 0x2B
        assert not codec.advisories.has_advisories()

    def test_unknown_group_skipped(self):
        """Test that a group without declared fields is dropped whole."""
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string(
            "102\n{BLAH\n1071\n5\n330\n7\n102\n}\n 40\n2.0\n"
        )
        assert record["radius"] == 2.0
        assert record["owner"] is None
        unknown = codec.advisories.of_kind(AdvisoryKind.UNKNOWN_CODE)
        assert len(unknown) == 1
        assert "'BLAH'" in unknown[0].message

    def test_code_outside_its_group(self):
        """Test that a code declared only inside another group is unknown there."""
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string("102\n{ACAD_REACTORS\n 40\n2.0\n102\n}\n")
        assert record["radius"] == 1.0
        assert codec.advisories.count(AdvisoryKind.UNKNOWN_CODE) == 1

    def test_unclosed_group(self):
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string("102\n{ACAD_REACTORS\n330\n1A\n")
        assert record["owner"] == 0x1A
        defects = codec.advisories.of_kind(AdvisoryKind.FIELD_DEFECT)
        assert any("'ACAD_REACTORS' not closed" in a.message for a in defects)

    def test_stray_group_end(self):
        codec = codec_for("CIRCLE")
        record = codec.decode_from_string("102\n}\n 40\n2.0\n")
        assert record["radius"] == 2.0
        assert codec.advisories.count(AdvisoryKind.UNKNOWN_CODE) == 1


# =============================================================================
# Advisory Collection Tests
# =============================================================================

class TestAdvisoryModes:
    """Tests for strict mode and the advisory limit."""

    def test_shared_collector(self):
        collector = AdvisoryCollector()
        codec_for("CIRCLE", advisories=collector).decode_from_string(" 99\nx\n 40\n1.0\n")
        codec_for("LINE", advisories=collector).decode_from_string(" 99\nx\n")
        assert len(collector) == 2

    def test_strict_raises(self):
        codec = codec_for("CIRCLE", advisories=AdvisoryCollector(strict=True))
        with pytest.raises(AdvisoryError) as exc_info:
            codec.decode_from_string(" 99\nx\n 40\n1.0\n")
        assert exc_info.value.advisory.kind is AdvisoryKind.UNKNOWN_CODE

    def test_strict_from_config(self):
        codec = codec_for("CIRCLE", config=CodecConfig(strict=True))
        with pytest.raises(AdvisoryError):
            codec.decode_from_string(" 40\n0.0\n")

    def test_limit(self):
        codec = codec_for("CIRCLE", advisories=AdvisoryCollector(max_advisories=2))
        with pytest.raises(TooManyAdvisories):
            codec.decode_from_string(" 97\na\n 98\nb\n 99\nc\n")
