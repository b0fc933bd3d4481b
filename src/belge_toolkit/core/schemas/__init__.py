"""
Schemas Package

JSON schema definitions and validation utilities for stored templates
and field mappings.
"""

from .validator import (
    validate_template,
    validate_mappings,
    TemplateFormatError,
    TEMPLATE_SCHEMA_VERSION,
)

__all__ = [
    "validate_template",
    "validate_mappings",
    "TemplateFormatError",
    "TEMPLATE_SCHEMA_VERSION",
]
