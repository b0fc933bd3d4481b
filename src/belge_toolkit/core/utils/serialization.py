"""
Serialization Utilities

Provides to/from JSON utilities for templates and field mappings.

The JSON shape is the template designer's storage format:

- ``schemas``: one array of field objects per page
- ``basePdf``: page size, padding and (for document backdrops) the PDF
  bytes as a ``data:application/pdf;base64,`` URI
- camelCase style keys; unknown keys are preserved

Loading validates against the bundled JSON Schemas first, so a stored
template that passes ``loads_template`` always builds valid models.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Iterable, List

from ..models.mappings import FieldMapping
from ..models.templates import BaseSurface, DocumentType, Schema, SurfaceKind, Template
from ..schemas.validator import (
    TEMPLATE_SCHEMA_VERSION,
    TemplateFormatError,
    validate_mappings,
    validate_template,
)

_PDF_DATA_PREFIX = "data:application/pdf;base64,"


# ─────────────────────────────────────────────────────────────────────────────
# Base surface
# ─────────────────────────────────────────────────────────────────────────────

def _surface_to_dict(surface: BaseSurface) -> dict[str, Any]:
    d: dict[str, Any] = {
        "width": surface.width,
        "height": surface.height,
        "padding": list(surface.padding),
    }
    if surface.kind is SurfaceKind.DOCUMENT and surface.document:
        d["data"] = _PDF_DATA_PREFIX + base64.b64encode(surface.document).decode("ascii")
    return d


def _surface_from_dict(data: dict[str, Any]) -> BaseSurface:
    padding = tuple(data.get("padding", (0.0, 0.0, 0.0, 0.0)))
    uri = data.get("data")
    if uri:
        try:
            document = base64.b64decode(uri[len(_PDF_DATA_PREFIX):], validate=True)
        except ValueError as e:
            raise TemplateFormatError(
                f"basePdf.data is not valid base64: {e}", path="basePdf.data"
            ) from e
        return BaseSurface.from_document(
            document, width=data["width"], height=data["height"], padding=padding
        )
    return BaseSurface(
        kind=SurfaceKind.BLANK,
        width=data["width"],
        height=data["height"],
        padding=padding,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Template Serialization
# ─────────────────────────────────────────────────────────────────────────────

def template_to_dict(template: Template) -> dict[str, Any]:
    """
    Serialize a Template to a dictionary.

    The output can be written to JSON and will pass schema validation.
    """
    return {
        "schemaVersion": TEMPLATE_SCHEMA_VERSION,
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "documentType": template.document_type.value,
        "isDefault": template.is_default,
        "version": template.version,
        "basePdf": _surface_to_dict(template.base_surface),
        "schemas": [page.to_list() for page in template.pages],
    }


def template_from_dict(data: dict[str, Any], *, validate: bool = True) -> Template:
    """
    Deserialize a Template from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate against the template schema first

    Returns:
        Template instance

    Raises:
        TemplateFormatError: If the data fails schema validation or a
            model invariant (duplicate field names, bad table widths)
    """
    if validate:
        validate_template(data)

    try:
        return Template(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            document_type=DocumentType(data["documentType"]),
            base_surface=_surface_from_dict(data["basePdf"]),
            pages=tuple(Schema.from_list(page) for page in data["schemas"]),
            is_default=data.get("isDefault", False),
            version=data.get("version", 1),
        )
    except (KeyError, ValueError) as e:
        raise TemplateFormatError(f"Invalid template {data.get('id')!r}: {e}") from e


def dumps_template(template: Template, *, indent: int | None = 2) -> str:
    return json.dumps(template_to_dict(template), ensure_ascii=False, indent=indent)


def loads_template(text: str) -> Template:
    """Parse and validate a JSON template document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateFormatError(f"Template is not valid JSON: {e}") from e
    return template_from_dict(data)


# ─────────────────────────────────────────────────────────────────────────────
# Mapping Serialization
# ─────────────────────────────────────────────────────────────────────────────

def mapping_to_dict(mapping: FieldMapping) -> dict[str, Any]:
    return mapping.to_dict()


def mapping_from_dict(data: dict[str, Any]) -> FieldMapping:
    try:
        return FieldMapping.from_dict(data)
    except (KeyError, ValueError) as e:
        raise TemplateFormatError(
            f"Invalid mapping for field {data.get('fieldName')!r}: {e}"
        ) from e


def mappings_to_list(mappings: Iterable[FieldMapping]) -> List[dict[str, Any]]:
    return [mapping_to_dict(m) for m in mappings]


def mappings_from_list(data: list[Any], *, validate: bool = True) -> List[FieldMapping]:
    """
    Deserialize a mapping list.

    Raises:
        TemplateFormatError: If validate=True and data is invalid
    """
    if validate:
        validate_mappings(data)
    return [mapping_from_dict(item) for item in data]


def dumps_mappings(mappings: Iterable[FieldMapping], *, indent: int | None = 2) -> str:
    return json.dumps(mappings_to_list(mappings), ensure_ascii=False, indent=indent)


def loads_mappings(text: str) -> List[FieldMapping]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateFormatError(f"Mappings are not valid JSON: {e}") from e
    return mappings_from_list(data)
