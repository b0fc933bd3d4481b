"""
Core Models Package

Immutable, validated data models shared by the resolver, layout engine
and renderer.

All models in this package are frozen dataclasses. This ensures:
1. Rendering can never mutate a template in place
2. Safe to share between concurrent renders and worker threads
3. Layout plans stay independent of the schema they came from
"""

from .geometry import Position, Size
from .fields import Anchor, Field, FieldKind, FieldStyle
from .templates import BaseSurface, DocumentType, Schema, SurfaceKind, Template
from .mappings import FieldMapping, SourceKind, ValueRule, cell, computed_cell
from .values import (
    ABSENT,
    IMAGE_PLACEHOLDER,
    ImageRef,
    ResolvedValues,
    TableValue,
    is_absent,
)

__all__ = [
    "Position",
    "Size",
    "Anchor",
    "Field",
    "FieldKind",
    "FieldStyle",
    "BaseSurface",
    "DocumentType",
    "Schema",
    "SurfaceKind",
    "Template",
    "FieldMapping",
    "SourceKind",
    "ValueRule",
    "cell",
    "computed_cell",
    "ABSENT",
    "IMAGE_PLACEHOLDER",
    "ImageRef",
    "ResolvedValues",
    "TableValue",
    "is_absent",
]
