"""
Module: render.validation

Purpose:
    Pre-render consistency checks between a template and its mappings.
    Runs before any record is touched, so configuration mistakes surface
    even when the current record would not exercise them.

Key Functions:
    - validate_render_inputs(): Collect every problem, then raise once

Checks:
    - template present with at least one page
    - a field name is not declared with two kinds
    - mappings belong to the template and name existing fields
    - at most one mapping per field
    - every required field has a non-skip mapping
    - table mappings only target table fields
    - every path parses and every transform is registered
    - built-in transform options (date pattern, decimals) are usable

Used By:
    - render.controller: Validating stage
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from belge_toolkit.core.models import FieldKind, FieldMapping, SourceKind, Template
from belge_toolkit.render.errors import (
    InvalidPathError,
    UnknownTransformError,
    ValidationError,
)
from belge_toolkit.render.resolving.path import PathExpression
from belge_toolkit.render.resolving.transforms import TransformRegistry

logger = logging.getLogger(__name__)


class _Problems:
    def __init__(self) -> None:
        self.fields: List[str] = []
        self.messages: List[str] = []

    def add(self, field_name: Optional[str], message: str) -> None:
        if field_name:
            self.fields.append(field_name)
        self.messages.append(message)

    def __bool__(self) -> bool:
        return bool(self.messages)


def _check_paths(mapping: FieldMapping, problems: _Problems) -> None:
    for rule in mapping.iter_rules():
        for path in rule.input_paths:
            try:
                PathExpression.parse(path)
            except InvalidPathError as e:
                problems.add(mapping.field_name, f"{mapping.field_name}: {e}")


def validate_render_inputs(
    template: Optional[Template],
    mappings: Iterable[FieldMapping],
    transforms: TransformRegistry,
) -> None:
    """
    Check a template and its mappings before resolving.

    Args:
        template: Template to render (None when a store had no match)
        mappings: Mappings for the template
        transforms: Registry computed mappings are looked up in

    Raises:
        ValidationError: With every structural problem found
        UnknownTransformError: If the only problems are unregistered
            transform names
    """
    if template is None:
        raise ValidationError("Template not found", problems=["template is missing"])

    mappings = list(mappings)
    problems = _Problems()

    if template.page_count == 0:
        problems.add(None, f"template {template.id!r} has no pages")

    try:
        kinds = template.field_kinds()
    except ValueError as e:
        kinds = {}
        for _, f in template.iter_fields():
            kinds.setdefault(f.name, f.kind)
        problems.add(None, str(e))

    seen = set()
    mapped = {}
    unknown_transforms: List[str] = []
    for mapping in mappings:
        name = mapping.field_name
        if mapping.template_id != template.id:
            problems.add(
                name,
                f"{name}: mapping belongs to template {mapping.template_id!r}, not {template.id!r}",
            )
        if name not in kinds:
            problems.add(name, f"{name}: no such field in template {template.id!r}")
        if name in seen:
            problems.add(name, f"{name}: mapped more than once")
            continue
        seen.add(name)
        mapped[name] = mapping

        if mapping.is_table and kinds.get(name) not in (None, FieldKind.TABLE):
            problems.add(name, f"{name}: column rules on a {kinds[name]} field")

        _check_paths(mapping, problems)
        for rule in mapping.iter_rules():
            if rule.source is not SourceKind.COMPUTED:
                continue
            if rule.transform not in transforms:
                unknown_transforms.append(rule.transform)
                continue
            for problem in transforms.option_problems(rule.transform, rule.options):
                problems.add(name, f"{name}: {rule.transform} {problem}")

    for name in template.required_fields:
        mapping = mapped.get(name)
        if mapping is None:
            problems.add(name, f"{name}: required field has no mapping")
        elif mapping.is_skip:
            problems.add(name, f"{name}: required field is mapped as skip")

    if problems:
        logger.debug(f"Template {template.id}: {len(problems.messages)} validation problem(s)")
        raise ValidationError(
            f"Template {template.id!r} failed validation: " + "; ".join(problems.messages),
            field_names=problems.fields,
            problems=problems.messages,
        )
    if unknown_transforms:
        raise UnknownTransformError(unknown_transforms)

    unmapped = [n for n in kinds if n not in mapped]
    if unmapped:
        logger.debug(f"Template {template.id}: unmapped fields {unmapped}")
