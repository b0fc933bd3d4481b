"""
Unit Tests for TemplateRegistry
"""

import pytest

from belge_toolkit.core.models import DocumentType, FieldMapping, Schema, Template
from belge_toolkit.render.registry import TemplateNotFoundError, TemplateRegistry


def _template(template_id: str, document_type=DocumentType.INVOICE, is_default=False) -> Template:
    return Template(template_id, template_id, document_type, pages=(Schema(),), is_default=is_default)


class TestTemplateRegistry:
    """Tests for TemplateRegistry."""

    def test_register_when_new_then_fetchable(self):
        registry = TemplateRegistry()
        template = _template("inv")
        mappings = [FieldMapping.from_path("inv", "no", "number")]

        registry.register(template, mappings)

        assert registry.fetch_template("inv") is template
        assert registry.fetch_mappings("inv") == mappings
        assert "inv" in registry
        assert len(registry) == 1

    def test_fetch_when_unknown_then_none_and_empty(self):
        registry = TemplateRegistry()

        assert registry.fetch_template("nope") is None
        assert registry.fetch_mappings("nope") == []

    def test_get_when_unknown_then_raises(self):
        with pytest.raises(TemplateNotFoundError):
            TemplateRegistry().get("nope")

    def test_register_when_id_taken_then_raises_unless_replace(self):
        registry = TemplateRegistry()
        registry.register(_template("inv"))
        newer = Template("inv", "v2", DocumentType.INVOICE, pages=(Schema(),), version=2)

        with pytest.raises(ValueError, match="already registered"):
            registry.register(newer)
        registry.register(newer, replace=True)

        assert registry.get("inv").version == 2

    def test_register_when_foreign_mapping_then_raises(self):
        with pytest.raises(ValueError, match="do not belong"):
            TemplateRegistry().register(_template("inv"), [FieldMapping.from_path("other", "no", "number")])

    def test_register_when_second_default_for_type_then_raises(self):
        registry = TemplateRegistry()
        registry.register(_template("a", is_default=True))

        with pytest.raises(ValueError, match="default"):
            registry.register(_template("b", is_default=True))
        registry.register(_template("c", DocumentType.QUOTE, is_default=True))

        assert registry.default_for(DocumentType.INVOICE).id == "a"
        assert registry.default_for(DocumentType.QUOTE).id == "c"

    def test_unregister_when_present_then_removed_with_mappings(self):
        registry = TemplateRegistry()
        registry.register(_template("inv"), [FieldMapping.from_path("inv", "no", "number")])

        registry.unregister("inv")

        assert "inv" not in registry
        assert registry.fetch_mappings("inv") == []
        with pytest.raises(TemplateNotFoundError):
            registry.unregister("inv")

    def test_by_type_when_mixed_then_filtered(self):
        registry = TemplateRegistry()
        registry.register(_template("a"))
        registry.register(_template("b", DocumentType.QUOTE))
        registry.register(_template("c"))

        assert [t.id for t in registry.by_type(DocumentType.INVOICE)] == ["a", "c"]
        assert registry.template_ids == ("a", "b", "c")
