"""
Module: render.resolving.resolver

Purpose:
    Evaluates field mappings against a business record and produces the
    ResolvedValues of one render.

Key Classes:
    - ValueResolver: Applies mappings using a TransformRegistry

Key Functions:
    - resolve_values(): Convenience wrapper with the built-in transforms

Rules:
    - path: value at the path (ABSENT when it does not resolve)
    - literal: the constant
    - computed: the transform over the values of its input paths
    - skip or unmapped: field is not populated
    - image fields become ImageRef (IMAGE_PLACEHOLDER when unresolved)
    - table fields become TableValue; column rules are evaluated against
      each row element, never against the whole record
    - Every required field is checked; all missing names are raised
      together in one MissingFieldsError

Dependencies:
    - render.resolving.path: PathExpression
    - render.resolving.transforms: TransformRegistry, TransformContext

Used By:
    - render.controller: Resolving stage
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from belge_toolkit.common.formatting import DEFAULT_DATE_FORMAT
from belge_toolkit.core.models import (
    ABSENT,
    IMAGE_PLACEHOLDER,
    FieldKind,
    FieldMapping,
    ImageRef,
    ResolvedValues,
    SourceKind,
    TableValue,
    Template,
    ValueRule,
    is_absent,
)
from belge_toolkit.render.errors import MissingFieldsError, RenderTypeError

from .path import PathExpression
from .transforms import TransformContext, TransformRegistry, default_transforms

logger = logging.getLogger(__name__)


def cell_text(value: Any) -> str:
    """Display text of one table cell."""
    if is_absent(value) or value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class ValueResolver:
    """
    Resolves mappings to values (stateless apart from its transforms).

    Example:
        >>> resolver = ValueResolver(default_transforms())
        >>> values = resolver.resolve(template, mappings, record)
        >>> values.get("customerName")
        'Ahmet Yılmaz'
    """

    def __init__(
        self,
        transforms: Optional[TransformRegistry] = None,
        *,
        date_format: str = DEFAULT_DATE_FORMAT,
        default_currency: str = "TRY",
    ):
        self.transforms = transforms if transforms is not None else default_transforms()
        self.date_format = date_format
        self.default_currency = default_currency

    def resolve(
        self,
        template: Template,
        mappings: Iterable[FieldMapping],
        record: Mapping[str, Any],
        as_of: Optional[datetime] = None,
    ) -> ResolvedValues:
        """
        Resolve every mapped field of ``template``.

        Args:
            template: Template whose fields are populated
            mappings: Mappings for the template (first mapping per field wins)
            record: Business record (nested mappings and sequences)
            as_of: Render timestamp for time-dependent transforms

        Returns:
            ResolvedValues keyed by field name

        Raises:
            MissingFieldsError: If required fields resolve to nothing
            RenderTypeError: If a table row source is not a collection
            UnknownTransformError: If a computed mapping names an
                unregistered transform
            InvalidPathError: If a mapping path is malformed
        """
        context = TransformContext(
            as_of=as_of or datetime.now(),
            date_format=self.date_format,
            default_currency=self.default_currency,
        )
        kinds = template.field_kinds()

        by_field: Dict[str, FieldMapping] = {}
        for mapping in mappings:
            if mapping.field_name not in kinds:
                logger.debug(f"Ignoring mapping for unknown field {mapping.field_name!r}")
                continue
            by_field.setdefault(mapping.field_name, mapping)

        values: Dict[str, Any] = {}
        for name, kind in kinds.items():
            mapping = by_field.get(name)
            if mapping is None or mapping.is_skip:
                continue
            if kind is FieldKind.TABLE:
                values[name] = self._resolve_table(name, mapping, record, context)
            else:
                value = self._evaluate(mapping.rule, record, context)
                values[name] = self._coerce(kind, value)
            logger.debug(f"Resolved {name} ({kind}): {values[name]!r}")

        missing = [
            name for name in template.required_fields
            if is_absent(values.get(name, ABSENT))
        ]
        if missing:
            logger.debug(f"Template {template.id}: missing required fields {missing}")
            raise MissingFieldsError(missing)

        logger.debug(f"Template {template.id}: resolved {len(values)} of {len(kinds)} fields")
        return ResolvedValues(values)

    def _evaluate(self, rule: ValueRule, source: Any, context: TransformContext) -> Any:
        if rule.source is SourceKind.PATH:
            return PathExpression.parse(rule.path).resolve(source)
        if rule.source is SourceKind.LITERAL:
            return ABSENT if rule.literal is None else rule.literal
        if rule.source is SourceKind.COMPUTED:
            args = [PathExpression.parse(p).resolve(source) for p in rule.input_paths]
            return self.transforms.apply(rule.transform, args, rule.options, context)
        return ABSENT

    def _coerce(self, kind: FieldKind, value: Any) -> Any:
        if kind is FieldKind.IMAGE:
            if isinstance(value, ImageRef):
                return value
            if isinstance(value, str) and value:
                return ImageRef(value)
            return IMAGE_PLACEHOLDER
        return value

    def _resolve_table(
        self,
        name: str,
        mapping: FieldMapping,
        record: Any,
        context: TransformContext,
    ) -> TableValue:
        source = self._evaluate(mapping.rule, record, context)
        if is_absent(source):
            rows: List[Any] = []
        elif isinstance(source, TableValue):
            return source
        elif isinstance(source, Sequence) and not isinstance(source, (str, bytes)):
            rows = list(source)
        else:
            raise RenderTypeError(name, FieldKind.TABLE.value, type(source).__name__)

        if not mapping.is_table:
            # Literal or pre-built rows: each element is already a row of cells
            return TableValue.from_rows(
                [cell_text(c) for c in row] if isinstance(row, Sequence) and not isinstance(row, str)
                else [cell_text(row)]
                for row in rows
            )

        cells = []
        for index, element in enumerate(rows):
            row_context = context.for_row(index)
            cells.append(
                tuple(cell_text(self._evaluate(rule, element, row_context)) for rule in mapping.columns)
            )
        return TableValue.from_rows(cells)


def resolve_values(
    template: Template,
    mappings: Iterable[FieldMapping],
    record: Mapping[str, Any],
    *,
    as_of: Optional[datetime] = None,
    transforms: Optional[TransformRegistry] = None,
) -> ResolvedValues:
    """Resolve with a fresh ValueResolver (built-in transforms by default)."""
    return ValueResolver(transforms).resolve(template, mappings, record, as_of=as_of)
