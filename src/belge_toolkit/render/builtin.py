"""
Module: render.builtin

Purpose:
    Templates shipped with the engine. The proposal items-table template
    is the reference layout for variable-height tables: the items table
    grows with the proposal's line items and the totals, terms and sales
    representative blocks below it move with it.

Key Functions:
    - proposal_table_template(): Template
    - proposal_table_mappings(): Its field mappings
    - register_builtin_templates(): Add all built-ins to a registry

Used By:
    - render.controller: preview()
    - Applications seeding their template store
"""

from __future__ import annotations

from typing import List

from belge_toolkit.core.models import (
    Anchor,
    BaseSurface,
    DocumentType,
    Field,
    FieldKind,
    FieldMapping,
    FieldStyle,
    Position,
    Schema,
    Size,
    Template,
    cell,
    computed_cell,
)

from .registry import TemplateRegistry

PROPOSAL_TABLE_TEMPLATE_ID = "builtin-proposal-table"

PROPOSAL_TABLE_HEAD = ("Ürün/Hizmet", "Açıklama", "Miktar", "Birim", "Birim Fiyat", "KDV %", "Toplam")
PROPOSAL_TABLE_WIDTHS = (25.0, 20.0, 10.0, 10.0, 15.0, 10.0, 15.0)


def _text(name: str, x: float, y: float, width: float, height: float, **style) -> Field:
    return Field(
        name=name,
        kind=FieldKind.TEXT,
        position=Position(x, y),
        size=Size(width, height),
        style=FieldStyle(**style),
    )


def proposal_table_template() -> Template:
    """
    A4 proposal with a dynamic items table (points, 595x842).

    The table is declared 200 high at y=120 with 15pt header and rows.
    """
    items = Field(
        name="itemsTable",
        kind=FieldKind.TABLE,
        position=Position(20, 120),
        size=Size(555, 200),
        anchor=Anchor.FLOW,
        variable_height=True,
        style=FieldStyle(
            font_size=9,
            font_color="#333333",
            background_color="#f5f5f5",
            border_color="#cccccc",
            border_width=0.5,
            header_row_height=15,
            data_row_height=15,
        ),
        head=PROPOSAL_TABLE_HEAD,
        column_widths=PROPOSAL_TABLE_WIDTHS,
    )

    fields = (
        Field(
            name="companyLogo",
            kind=FieldKind.IMAGE,
            position=Position(20, 20),
            size=Size(40, 20),
        ),
        _text("proposalTitle", 20, 50, 300, 18, font_size=18, font_color="#333333"),
        Field(
            name="proposalNumber",
            kind=FieldKind.TEXT,
            position=Position(450, 50),
            size=Size(120, 12),
            required=True,
            style=FieldStyle(font_size=12),
        ),
        _text("proposalDate", 450, 65, 120, 12, font_size=10),
        Field(
            name="customerName",
            kind=FieldKind.TEXT,
            position=Position(20, 80),
            size=Size(250, 12),
            required=True,
            style=FieldStyle(font_size=12, font_color="#666666"),
        ),
        _text("customerCompany", 20, 95, 250, 12, font_size=10),
        items,
        _text("subtotal", 400, 350, 150, 12, font_size=10, alignment="right"),
        _text("taxAmount", 400, 365, 150, 12, font_size=10, alignment="right"),
        _text("totalAmount", 400, 385, 150, 16, font_size=14, font_color="#0066cc", alignment="right"),
        _text("paymentTerms", 20, 420, 250, 30, font_size=9),
        _text("deliveryTerms", 300, 420, 250, 30, font_size=9),
        _text("employeeName", 20, 480, 150, 12, font_size=10),
        _text("employeePhone", 20, 495, 150, 12, font_size=9),
    )

    return Template(
        id=PROPOSAL_TABLE_TEMPLATE_ID,
        name="Teklif (kalem tablolu)",
        description="Dinamik kalem tablosu olan standart teklif şablonu",
        document_type=DocumentType.PROPOSAL,
        base_surface=BaseSurface.blank(),
        pages=(Schema(fields),),
        is_default=True,
    )


def proposal_table_mappings(template_id: str = PROPOSAL_TABLE_TEMPLATE_ID) -> List[FieldMapping]:
    """Mappings from a proposal record to the proposal table template."""
    tid = template_id
    return [
        FieldMapping.from_path(tid, "companyLogo", "company.logo"),
        FieldMapping.from_path(tid, "proposalTitle", "title"),
        FieldMapping.from_path(tid, "proposalNumber", "number"),
        FieldMapping.from_transform(tid, "proposalDate", "date", ["created_at"]),
        FieldMapping.from_path(tid, "customerName", "customer.name"),
        FieldMapping.from_path(tid, "customerCompany", "customer.company"),
        FieldMapping.table(
            tid,
            "itemsTable",
            "items",
            [
                cell("name"),
                cell("description"),
                computed_cell("number", ["quantity"]),
                cell("unit"),
                computed_cell("currency", ["unit_price"]),
                computed_cell("percent", ["tax_rate"]),
                computed_cell("currency", ["total_price"]),
            ],
        ),
        FieldMapping.from_transform(tid, "subtotal", "currency", ["subtotal", "currency"]),
        FieldMapping.from_transform(tid, "taxAmount", "currency", ["tax_amount", "currency"]),
        FieldMapping.from_transform(tid, "totalAmount", "currency", ["total_amount", "currency"]),
        FieldMapping.from_path(tid, "paymentTerms", "payment_terms"),
        FieldMapping.from_path(tid, "deliveryTerms", "delivery_terms"),
        FieldMapping.from_transform(
            tid, "employeeName", "concat", ["employee.first_name", "employee.last_name"]
        ),
        FieldMapping.from_path(tid, "employeePhone", "employee.phone"),
    ]


def register_builtin_templates(registry: TemplateRegistry) -> None:
    """Add every built-in template (with mappings) to ``registry``."""
    registry.register(proposal_table_template(), proposal_table_mappings())
