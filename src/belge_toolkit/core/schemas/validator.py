"""
Schema Validation Utilities

Validates serialized templates and mapping lists against the JSON Schema
definitions shipped next to this module (``template.schema.json`` and
``mapping.schema.json``).

Every violation is reported, not only the first, so a template author
can fix a stored template in one pass.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

# Version written into serialized templates
TEMPLATE_SCHEMA_VERSION = 1

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class TemplateFormatError(Exception):
    """Raised when serialized template or mapping data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate(data: Any, schema_name: str, label: str) -> None:
    validator = jsonschema.Draft7Validator(_load_schema(schema_name))
    violations = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if not violations:
        return
    first = violations[0]
    first_path = ".".join(str(p) for p in first.absolute_path)
    messages = [
        f"{'.'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
        for e in violations
    ]
    raise TemplateFormatError(
        f"Invalid {label}: {messages[0]}"
        + (f" (+{len(messages) - 1} more)" if len(messages) > 1 else ""),
        path=first_path,
        errors=messages,
    )


def validate_template(data: dict[str, Any]) -> None:
    """
    Validate serialized template data.

    Also rejects an unsupported ``schemaVersion`` when one is present.

    Raises:
        TemplateFormatError: If data is invalid
    """
    _validate(data, "template", "template")
    version = data.get("schemaVersion", TEMPLATE_SCHEMA_VERSION)
    if version != TEMPLATE_SCHEMA_VERSION:
        raise TemplateFormatError(
            f"Unsupported template schema version: {version} "
            f"(expected {TEMPLATE_SCHEMA_VERSION})",
            path="schemaVersion",
        )


def validate_mappings(data: list[Any]) -> None:
    """
    Validate a serialized mapping list.

    Raises:
        TemplateFormatError: If data is invalid
    """
    _validate(data, "mapping", "mapping list")
