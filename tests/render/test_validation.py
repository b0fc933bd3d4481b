"""
Unit Tests for Pre-render Validation
"""

import pytest

from belge_toolkit.core.models import (
    DocumentType,
    Field,
    FieldKind,
    FieldMapping,
    Position,
    Schema,
    Size,
    Template,
    cell,
)
from belge_toolkit.render.errors import UnknownTransformError, ValidationError
from belge_toolkit.render.resolving import default_transforms
from belge_toolkit.render.validation import validate_render_inputs

TID = "tpl-customer"


@pytest.fixture
def transforms():
    return default_transforms()


class TestValidateRenderInputs:
    """Tests for validate_render_inputs."""

    def test_validate_when_consistent_then_passes(self, customer_template, customer_mappings, transforms):
        validate_render_inputs(customer_template, customer_mappings, transforms)

    def test_validate_when_optional_fields_unmapped_then_passes(self, customer_template, transforms):
        validate_render_inputs(
            customer_template, [FieldMapping.from_path(TID, "customerName", "customer.name")], transforms
        )

    def test_validate_when_template_missing_then_raises(self, transforms):
        with pytest.raises(ValidationError, match="not found"):
            validate_render_inputs(None, [], transforms)

    def test_validate_when_required_field_unmapped_then_named(self, customer_template, customer_mappings, transforms):
        mappings = [m for m in customer_mappings if m.field_name != "customerName"]

        with pytest.raises(ValidationError) as excinfo:
            validate_render_inputs(customer_template, mappings, transforms)
        assert excinfo.value.field_names == ("customerName",)

    def test_validate_when_required_field_skipped_then_raises(self, customer_template, customer_mappings, transforms):
        mappings = [m for m in customer_mappings if m.field_name != "customerName"]
        mappings.append(FieldMapping.skipped(TID, "customerName"))

        with pytest.raises(ValidationError, match="mapped as skip"):
            validate_render_inputs(customer_template, mappings, transforms)

    def test_validate_when_several_problems_then_all_reported(self, customer_template, customer_mappings, transforms):
        # Arrange: unknown field, foreign template, duplicate mapping
        mappings = list(customer_mappings) + [
            FieldMapping.from_path(TID, "signature", "sig"),
            FieldMapping.from_path("other-template", "total", "total"),
        ]

        # Act
        with pytest.raises(ValidationError) as excinfo:
            validate_render_inputs(customer_template, mappings, transforms)

        # Assert
        error = excinfo.value
        assert set(error.field_names) == {"signature", "total"}
        assert len(error.problems) == 3
        assert any("mapped more than once" in p for p in error.problems)

    def test_validate_when_columns_on_text_field_then_raises(self, customer_template, customer_mappings, transforms):
        mappings = [m for m in customer_mappings if m.field_name != "customerCompany"]
        mappings.append(FieldMapping.table(TID, "customerCompany", "items", [cell("name")]))

        with pytest.raises(ValidationError, match="column rules"):
            validate_render_inputs(customer_template, mappings, transforms)

    def test_validate_when_path_malformed_then_raises(self, customer_template, customer_mappings, transforms):
        mappings = [m for m in customer_mappings if m.field_name != "customerCompany"]
        mappings.append(FieldMapping.from_path(TID, "customerCompany", "customer..company"))

        with pytest.raises(ValidationError, match="Invalid path"):
            validate_render_inputs(customer_template, mappings, transforms)

    def test_validate_when_kinds_conflict_across_pages_then_raises(self, transforms):
        template = Template(
            "t", "x", DocumentType.OTHER,
            pages=(
                Schema((Field("logo", FieldKind.TEXT, Position(0, 0), Size(10, 10)),)),
                Schema((Field("logo", FieldKind.IMAGE, Position(0, 0), Size(10, 10)),)),
            ),
        )

        with pytest.raises(ValidationError, match="declared as both"):
            validate_render_inputs(template, [], transforms)

    def test_validate_when_only_unknown_transform_then_transform_error(
        self, customer_template, customer_mappings, transforms
    ):
        mappings = [m for m in customer_mappings if m.field_name != "total"]
        mappings.append(FieldMapping.from_transform(TID, "total", "roman", ["total_amount"]))

        with pytest.raises(UnknownTransformError) as excinfo:
            validate_render_inputs(customer_template, mappings, transforms)
        assert excinfo.value.names == ("roman",)

    def test_validate_when_transform_registered_later_then_accepted(
        self, customer_template, customer_mappings, transforms
    ):
        mappings = [m for m in customer_mappings if m.field_name != "total"]
        mappings.append(FieldMapping.from_transform(TID, "total", "roman", ["total_amount"]))
        transforms.register("roman", lambda args, opts, ctx: "MMXXIV")

        validate_render_inputs(customer_template, mappings, transforms)

    def test_validate_when_date_format_option_unknown_then_raises(
        self, customer_template, customer_mappings, transforms
    ):
        mappings = [m for m in customer_mappings if m.field_name != "total"]
        mappings.append(FieldMapping.from_transform(TID, "total", "today", [], {"format": "YY.MM"}))

        with pytest.raises(ValidationError) as excinfo:
            validate_render_inputs(customer_template, mappings, transforms)
        assert excinfo.value.field_names == ("total",)
        assert "format must be one of" in excinfo.value.problems[0]

    def test_validate_when_decimals_not_integer_then_raises(
        self, customer_template, customer_mappings, transforms
    ):
        mappings = [m for m in customer_mappings if m.field_name != "total"]
        mappings.append(
            FieldMapping.from_transform(TID, "total", "currency", ["total_amount"], {"decimals": "iki"})
        )

        with pytest.raises(ValidationError, match="decimals must be a non-negative integer"):
            validate_render_inputs(customer_template, mappings, transforms)

    def test_validate_when_custom_transform_shadows_builtin_then_options_not_checked(
        self, customer_template, customer_mappings, transforms
    ):
        mappings = [m for m in customer_mappings if m.field_name != "total"]
        mappings.append(FieldMapping.from_transform(TID, "total", "date", ["issued"], {"format": "%d"}))
        transforms.register("date", lambda args, opts, ctx: "bugün")

        validate_render_inputs(customer_template, mappings, transforms)
