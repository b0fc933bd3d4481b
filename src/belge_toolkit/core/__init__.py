"""
Belge Toolkit Core Package

Shared data models and utilities. These models are the single source of
truth for the resolver, the layout engine and the renderer.

1. **Immutable Data Models**
   Frozen dataclasses; rendering derives new values (ResolvedValues,
   LayoutPlan) instead of rewriting positions on a cloned template.

2. **Lossless Storage Format**
   Templates and mappings serialize to the designer's JSON shape and load
   back equal, validated against bundled JSON Schemas.
"""

from .models import (
    Field,
    FieldKind,
    FieldMapping,
    ResolvedValues,
    Schema,
    Template,
)

__all__ = [
    "Field",
    "FieldKind",
    "FieldMapping",
    "ResolvedValues",
    "Schema",
    "Template",
]
