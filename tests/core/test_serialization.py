"""
Unit Tests for Serialization Utilities

Tests for template and mapping JSON round-trips.
"""

import json

import pytest

from belge_toolkit.core.models import (
    BaseSurface,
    DocumentType,
    FieldMapping,
    SurfaceKind,
    Template,
)
from belge_toolkit.core.schemas import TemplateFormatError
from belge_toolkit.core.utils.serialization import (
    dumps_mappings,
    dumps_template,
    loads_mappings,
    loads_template,
    template_from_dict,
    template_to_dict,
)
from belge_toolkit.render.builtin import proposal_table_mappings, proposal_table_template

MINIMAL_PDF = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
    b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 595 842]>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF"
)


class TestTemplateSerialization:
    """Tests for template serialization/deserialization."""

    def test_to_dict_when_builtin_then_uses_designer_shape(self):
        data = template_to_dict(proposal_table_template())

        assert data["documentType"] == "proposal"
        assert data["basePdf"]["width"] == 595.0
        assert "data" not in data["basePdf"]
        items = next(f for f in data["schemas"][0] if f["name"] == "itemsTable")
        assert items["variableHeight"] is True
        assert items["headWidthPercentages"] == [25.0, 20.0, 10.0, 10.0, 15.0, 10.0, 15.0]
        assert items["style"]["rowHeight"] == 15

    def test_roundtrip_when_builtin_then_equal(self):
        template = proposal_table_template()

        restored = loads_template(dumps_template(template))

        assert restored == template

    def test_roundtrip_when_document_surface_then_bytes_preserved(self):
        template = Template(
            "tpl-doc", "Antetli", DocumentType.INVOICE,
            base_surface=BaseSurface.from_document(MINIMAL_PDF),
        )

        data = template_to_dict(template)
        restored = template_from_dict(json.loads(json.dumps(data)))

        assert data["basePdf"]["data"].startswith("data:application/pdf;base64,")
        assert restored.base_surface.kind is SurfaceKind.DOCUMENT
        assert restored.base_surface.document == MINIMAL_PDF

    def test_loads_when_unknown_top_level_key_then_raises(self):
        data = template_to_dict(proposal_table_template())
        data["unexpected"] = True

        with pytest.raises(TemplateFormatError):
            loads_template(json.dumps(data))

    def test_loads_when_duplicate_field_names_then_raises(self):
        data = template_to_dict(proposal_table_template())
        data["schemas"][0].append(dict(data["schemas"][0][0]))

        with pytest.raises(TemplateFormatError, match="Duplicate"):
            template_from_dict(data)

    def test_loads_when_not_json_then_raises(self):
        with pytest.raises(TemplateFormatError, match="not valid JSON"):
            loads_template("{not json")


class TestMappingSerialization:
    """Tests for mapping list serialization."""

    def test_roundtrip_when_builtin_mappings_then_equal(self):
        mappings = proposal_table_mappings()

        restored = loads_mappings(dumps_mappings(mappings))

        assert restored == mappings

    def test_roundtrip_when_literal_and_skip_then_equal(self):
        mappings = [
            FieldMapping.from_literal("t", "title", "Teklif"),
            FieldMapping.skipped("t", "logo"),
        ]

        assert loads_mappings(dumps_mappings(mappings)) == mappings

    def test_loads_when_source_unknown_then_raises(self):
        text = json.dumps([{"templateId": "t", "fieldName": "a", "source": "magic"}])

        with pytest.raises(TemplateFormatError) as excinfo:
            loads_mappings(text)
        assert excinfo.value.path.startswith("0")
