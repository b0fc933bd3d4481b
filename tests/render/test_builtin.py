"""
Unit Tests for Built-in Templates
"""

from belge_toolkit.core.models import DocumentType, FieldKind
from belge_toolkit.render import RenderPipeline, TemplateRegistry
from belge_toolkit.render.builtin import (
    PROPOSAL_TABLE_HEAD,
    PROPOSAL_TABLE_TEMPLATE_ID,
    proposal_table_mappings,
    proposal_table_template,
    register_builtin_templates,
)
from belge_toolkit.render.resolving import resolve_values
from belge_toolkit.render.samples import SAMPLE_PROPOSAL


class TestProposalTableTemplate:
    """Tests for the proposal items-table template."""

    def test_template_when_built_then_variable_items_table(self):
        template = proposal_table_template()

        items = template.find_field("itemsTable")
        assert items.kind is FieldKind.TABLE
        assert items.variable_height
        assert items.head == PROPOSAL_TABLE_HEAD
        assert template.required_fields == ("proposalNumber", "customerName")

    def test_mappings_when_validated_then_consistent(self):
        RenderPipeline().validate(proposal_table_template(), proposal_table_mappings())

    def test_mappings_when_sample_resolved_then_formatted_values(self, as_of):
        values = resolve_values(proposal_table_template(), proposal_table_mappings(), SAMPLE_PROPOSAL, as_of=as_of)

        assert values["totalAmount"] == "8.260,00 ₺"
        assert values["proposalDate"] == "15.03.2024"
        assert values["employeeName"] == "Ayşe Demir"
        assert values["itemsTable"].rows[0] == (
            "Web Uygulaması", "React arayüz geliştirme", "1", "adet", "5.000,00 ₺", "%18", "5.000,00 ₺",
        )
        assert "companyLogo" in values

    def test_register_when_registry_empty_then_default_proposal(self):
        registry = TemplateRegistry()

        register_builtin_templates(registry)

        assert registry.default_for(DocumentType.PROPOSAL).id == PROPOSAL_TABLE_TEMPLATE_ID
        assert len(registry.fetch_mappings(PROPOSAL_TABLE_TEMPLATE_ID)) == len(proposal_table_mappings())
