"""
Unit Tests for ValueResolver
"""

import pytest

from belge_toolkit.core.models import (
    ABSENT,
    IMAGE_PLACEHOLDER,
    BaseSurface,
    DocumentType,
    Field,
    FieldKind,
    FieldMapping,
    ImageRef,
    Position,
    Schema,
    Size,
    TableValue,
    Template,
    cell,
    computed_cell,
)
from belge_toolkit.render.errors import MissingFieldsError, RenderTypeError
from belge_toolkit.render.resolving.resolver import ValueResolver, cell_text, resolve_values


@pytest.fixture
def resolver():
    return ValueResolver()


class TestValueResolver:
    """Tests for ValueResolver.resolve."""

    def test_resolve_when_customer_null_then_missing_customer_name(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        # Arrange
        customer_record["customer"] = None

        # Act / Assert
        with pytest.raises(MissingFieldsError) as excinfo:
            resolver.resolve(customer_template, customer_mappings, customer_record, as_of)
        assert excinfo.value.field_names == ("customerName",)

    def test_resolve_when_record_complete_then_all_fields_populated(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        values = resolver.resolve(customer_template, customer_mappings, customer_record, as_of)

        assert values["customerName"] == "Ahmet Yılmaz"
        assert values["total"] == "8.260,00 ₺"
        assert values["items"] == TableValue(
            rows=(("Kalem A", "2", "5.000,00 ₺"), ("Kalem B", "1", "3.260,00 ₺")),
            row_count=2,
        )
        assert values.row_counts() == {"items": 2}

    def test_resolve_when_items_missing_then_empty_table(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        del customer_record["items"]

        values = resolver.resolve(customer_template, customer_mappings, customer_record, as_of)

        assert values["items"].row_count == 0

    def test_resolve_when_items_not_list_then_raises(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        customer_record["items"] = {"name": "tek"}

        with pytest.raises(RenderTypeError) as excinfo:
            resolver.resolve(customer_template, customer_mappings, customer_record, as_of)
        assert excinfo.value.field_name == "items"

    def test_resolve_when_optional_field_missing_then_absent(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        del customer_record["customer"]["company"]

        values = resolver.resolve(customer_template, customer_mappings, customer_record, as_of)

        assert values.get("customerCompany") is ABSENT

    def test_resolve_when_field_skipped_then_not_populated(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        mappings = [m for m in customer_mappings if m.field_name != "customerCompany"]
        mappings.append(FieldMapping.skipped("tpl-customer", "customerCompany"))

        values = resolver.resolve(customer_template, mappings, customer_record, as_of)

        assert "customerCompany" not in values

    def test_resolve_when_duplicate_mapping_then_first_wins(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        mappings = [FieldMapping.from_literal("tpl-customer", "customerName", "İlk")] + customer_mappings

        values = resolver.resolve(customer_template, mappings, customer_record, as_of)

        assert values["customerName"] == "İlk"

    def test_resolve_when_row_number_column_then_per_row_index(self, resolver, customer_template, as_of):
        mappings = [
            FieldMapping.from_literal("tpl-customer", "customerName", "x"),
            FieldMapping.table(
                "tpl-customer", "items", "lines",
                [computed_cell("row_number"), cell("sku"), cell("missing")],
            ),
        ]
        record = {"lines": [{"sku": "A"}, {"sku": "B"}]}

        values = resolver.resolve(customer_template, mappings, record, as_of)

        assert values["items"].rows == (("1", "A", ""), ("2", "B", ""))

    def test_resolve_when_image_unresolved_then_placeholder(self, resolver, as_of):
        template = Template(
            "t", "logo", DocumentType.OTHER,
            pages=(Schema((Field("logo", FieldKind.IMAGE, Position(0, 0), Size(10, 10)),)),),
        )

        empty = resolver.resolve(template, [FieldMapping.from_path("t", "logo", "company.logo")], {}, as_of)
        present = resolver.resolve(
            template, [FieldMapping.from_path("t", "logo", "logo")], {"logo": "/tmp/a.png"}, as_of
        )

        assert empty["logo"] is IMAGE_PLACEHOLDER
        assert present["logo"] == ImageRef("/tmp/a.png")

    def test_resolve_when_wildcard_sum_then_total(self, as_of):
        template = Template(
            "t", "sum", DocumentType.INVOICE,
            base_surface=BaseSurface.blank(),
            pages=(Schema((Field("total", FieldKind.TEXT, Position(0, 0), Size(50, 10)),)),),
        )
        mappings = [FieldMapping.from_transform("t", "total", "sum", ["items[].price"], {"currency": "TRY"})]

        values = resolve_values(template, mappings, {"items": [{"price": 7000}, {"price": 1260}]}, as_of=as_of)

        assert values["total"] == "8.260,00 ₺"

    def test_resolve_when_record_resolved_twice_then_equal(
        self, resolver, customer_template, customer_mappings, customer_record, as_of
    ):
        first = resolver.resolve(customer_template, customer_mappings, customer_record, as_of)
        second = resolver.resolve(customer_template, customer_mappings, customer_record, as_of)

        assert first == second


class TestCellText:
    """Tests for cell_text."""

    def test_cell_text_when_integral_float_then_no_decimal(self):
        assert cell_text(2.0) == "2"
        assert cell_text(2.5) == "2.5"

    def test_cell_text_when_absent_or_none_then_empty(self):
        assert cell_text(ABSENT) == ""
        assert cell_text(None) == ""
