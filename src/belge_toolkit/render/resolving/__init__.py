"""
Resolving Package

Turns a business record into the ResolvedValues of one render using
path expressions and named transforms.
"""

from .path import IndexSegment, KeySegment, PathExpression, WildcardSegment
from .resolver import ValueResolver, cell_text, resolve_values
from .transforms import (
    BUILTIN_TRANSFORMS,
    TransformContext,
    TransformRegistry,
    default_transforms,
)

__all__ = [
    "IndexSegment",
    "KeySegment",
    "PathExpression",
    "WildcardSegment",
    "ValueResolver",
    "cell_text",
    "resolve_values",
    "BUILTIN_TRANSFORMS",
    "TransformContext",
    "TransformRegistry",
    "default_transforms",
]
