"""
Schema Registry Unit Tests
==========================

Tests for the record schemas and the registry.
"""

import pytest

from dxfkit.codec import FieldTable, Revision, ValueKind
from dxfkit.schemas import SCHEMAS, get_schema, list_schemas


EXPECTED_TYPES = [
    "3DSOLID", "ACAD_PROXY_ENTITY", "APPID", "ARC", "BODY", "CIRCLE",
    "DICTIONARY", "ELLIPSE", "ENDTAB", "IMAGEDEF_REACTOR", "LAYER", "LINE",
    "POINT", "REGION", "STYLE", "TABLE", "TEXT",
]


class TestRegistry:
    """Tests for get_schema() and list_schemas()."""

    def test_list_schemas(self):
        assert list_schemas() == EXPECTED_TYPES

    def test_get_schema(self):
        table = get_schema("CIRCLE")
        assert isinstance(table, FieldTable)
        assert table.record_type == "CIRCLE"

    def test_case_insensitive(self):
        assert get_schema("circle") is get_schema("CIRCLE")

    def test_unknown_type(self):
        assert get_schema("SPLINE") is None

    @pytest.mark.parametrize("record_type", EXPECTED_TYPES)
    def test_registered_under_own_name(self, record_type):
        assert SCHEMAS[record_type].record_type == record_type


class TestEntitySchemas:
    """Tests for the shape of the entity schemas."""

    @pytest.mark.parametrize("record_type", [
        "CIRCLE", "ARC", "LINE", "POINT", "TEXT", "ELLIPSE",
        "ACAD_PROXY_ENTITY", "BODY", "REGION", "3DSOLID",
    ])
    def test_common_entity_fields(self, record_type):
        table = get_schema(record_type)
        assert table.field("handle").code == 5
        assert table.field("layer").default == "0"
        assert table.field("layer").always_emit
        assert table.field("linetype").default == "BYLAYER"
        assert table.field("color").default == 256
        assert table.field("subclass_AcDbEntity").first_revision is Revision.R13
        assert table.field("elevation").last_revision is Revision.R11
        assert table.field("owner").group == "ACAD_REACTORS"
        assert table.field("owner_hard").group == "ACAD_XDICTIONARY"

    def test_circle_order(self):
        names = get_schema("CIRCLE").names()
        assert names.index("subclass_AcDbEntity") < names.index("layer")
        assert names.index("layer") < names.index("subclass_AcDbCircle")
        assert names.index("center_z") < names.index("radius")
        assert names[-3:] == ["extrusion_x", "extrusion_y", "extrusion_z"]

    def test_text_has_two_text_markers(self):
        table = get_schema("TEXT")
        markers = [f for f in table if f.kind is ValueKind.MARKER]
        assert [m.default for m in markers] == ["AcDbEntity", "AcDbText", "AcDbText"]
        assert [m.occurrence for m in markers] == [0, 1, 2]

    def test_proxy_has_two_binary_runs(self):
        table = get_schema("ACAD_PROXY_ENTITY")
        assert table.lookup(310, 0).name == "graphics_data"
        assert table.lookup(310, 1).name == "entity_data"
        assert table.lookup(310, 0).kind is ValueKind.CONTINUATION

    def test_r13_entities(self):
        for record_type in ("ELLIPSE", "ACAD_PROXY_ENTITY", "BODY", "REGION", "3DSOLID"):
            assert get_schema(record_type).first_revision is Revision.R13
        assert get_schema("CIRCLE").first_revision is None


class TestTableAndObjectSchemas:
    """Tests for symbol-table entries and objects."""

    @pytest.mark.parametrize("record_type,fallback", [
        ("LAYER", "0"),
        ("STYLE", "STANDARD"),
        ("APPID", "ACAD"),
    ])
    def test_name_required_with_fallback(self, record_type, fallback):
        name = get_schema(record_type).field("name")
        assert name.code == 2
        assert name.required
        assert name.fallback == fallback

    @pytest.mark.parametrize("record_type", ["LAYER", "STYLE", "DICTIONARY", "IMAGEDEF_REACTOR"])
    def test_owner_groups(self, record_type):
        table = get_schema(record_type)
        for name, code, group in (("owner", 330, "ACAD_REACTORS"), ("owner_hard", 360, "ACAD_XDICTIONARY")):
            descriptor = table.lookup_in_group(group, code)
            assert descriptor.name == name
            assert descriptor.first_revision is Revision.R14

    def test_imagedef_reactor_two_330(self):
        table = get_schema("IMAGEDEF_REACTOR")
        assert table.lookup(330, 0).name == "owner"
        assert table.lookup(330, 1).name == "image"

    def test_dictionary_entries_repeatable(self):
        table = get_schema("DICTIONARY")
        assert table.field("entry_names").repeatable
        assert table.field("entry_handles").repeatable
        assert table.field("hard_owner_flag").first_revision is Revision.R2000

    def test_endtab_is_empty(self):
        assert len(get_schema("ENDTAB")) == 0
