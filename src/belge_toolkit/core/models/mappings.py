"""
Module: mappings

Purpose:
    Declares how each template field is populated from a business record.
    A FieldMapping wraps one ValueRule (path, literal, computed or skip);
    table mappings additionally carry one ValueRule per column that is
    evaluated against each element of the row source.

Key Classes:
    - SourceKind: path / literal / computed / skip
    - ValueRule: Single derivation rule
    - FieldMapping: Rule bound to a template field

Dependencies:
    - dataclasses (std)

Used By:
    - render.resolving.resolver: Evaluates rules against records
    - render.validation: Checks required coverage before a render
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple


class SourceKind(str, Enum):
    """Where a field value comes from."""
    PATH = "path"
    LITERAL = "literal"
    COMPUTED = "computed"
    SKIP = "skip"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ValueRule:
    """
    Single derivation rule.

    Attributes:
        source: Rule kind
        path: Dotted/indexed path (PATH rules; optional input for COMPUTED)
        literal: Constant value (LITERAL rules)
        transform: Named transform (COMPUTED rules)
        inputs: Paths whose values feed the transform, in order
        options: Transform options (e.g. {"currency": "TRY"})

    Invariants:
        - PATH requires path
        - COMPUTED requires transform
        - SKIP carries no path, literal, transform or inputs

    Example:
        >>> rule = ValueRule(SourceKind.COMPUTED, transform="currency",
        ...                  inputs=("total_amount",), options={"currency": "TRY"})
        >>> rule.input_paths
        ('total_amount',)
    """

    source: SourceKind
    path: Optional[str] = None
    literal: Any = None
    transform: Optional[str] = None
    inputs: Tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.source is SourceKind.PATH and not self.path:
            raise ValueError("path rule requires a path")
        if self.source is SourceKind.COMPUTED and not self.transform:
            raise ValueError("computed rule requires a transform name")
        if self.source is SourceKind.SKIP and (
            self.path or self.transform or self.inputs or self.literal is not None
        ):
            raise ValueError("skip rule cannot carry a path, literal or transform")

    @property
    def input_paths(self) -> Tuple[str, ...]:
        """Every path this rule reads, in evaluation order."""
        if self.source is SourceKind.PATH:
            return (self.path,)  # type: ignore[return-value]
        if self.source is SourceKind.COMPUTED:
            if self.inputs:
                return self.inputs
            return (self.path,) if self.path else ()
        return ()

    def to_dict(self) -> dict:
        d: dict = {"source": self.source.value}
        if self.path is not None:
            d["path"] = self.path
        if self.source is SourceKind.LITERAL:
            d["literal"] = self.literal
        if self.transform is not None:
            d["transform"] = self.transform
        if self.inputs:
            d["inputs"] = list(self.inputs)
        if self.options:
            d["options"] = dict(self.options)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ValueRule:
        return cls(
            source=SourceKind(data["source"]),
            path=data.get("path"),
            literal=data.get("literal"),
            transform=data.get("transform"),
            inputs=tuple(data.get("inputs", ())),
            options=dict(data.get("options", {})),
        )


@dataclass(frozen=True)
class FieldMapping:
    """
    Derivation rule bound to one template field.

    A mapping with ``columns`` is a table mapping: ``rule`` names the row
    source (a PATH to an array) and every column rule is evaluated against
    one row element.

    Attributes:
        template_id: Template the mapping belongs to
        field_name: Field populated (must exist in the template)
        rule: How the value (or row source) is derived
        columns: Per-column cell rules (table mappings only)
    """

    template_id: str
    field_name: str
    rule: ValueRule
    columns: Tuple[ValueRule, ...] = ()

    def __post_init__(self) -> None:
        if not self.field_name:
            raise ValueError("field_name must be non-empty")
        if self.columns and self.rule.source is not SourceKind.PATH:
            raise ValueError(
                f"table mapping for {self.field_name!r} needs a path row source"
            )

    @property
    def source(self) -> SourceKind:
        return self.rule.source

    @property
    def is_skip(self) -> bool:
        return self.rule.source is SourceKind.SKIP

    @property
    def is_table(self) -> bool:
        return bool(self.columns)

    @property
    def row_source(self) -> Optional[str]:
        return self.rule.path if self.is_table else None

    def iter_rules(self):
        """Yield the field rule followed by every column rule."""
        yield self.rule
        yield from self.columns

    # ─────────────────────────────────────────────────────────────────────
    # Factories
    # ─────────────────────────────────────────────────────────────────────

    @classmethod
    def from_path(cls, template_id: str, field_name: str, path: str) -> FieldMapping:
        return cls(template_id, field_name, ValueRule(SourceKind.PATH, path=path))

    @classmethod
    def from_literal(cls, template_id: str, field_name: str, value: Any) -> FieldMapping:
        return cls(template_id, field_name, ValueRule(SourceKind.LITERAL, literal=value))

    @classmethod
    def from_transform(
        cls,
        template_id: str,
        field_name: str,
        transform: str,
        inputs: Sequence[str] = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> FieldMapping:
        rule = ValueRule(
            SourceKind.COMPUTED,
            transform=transform,
            inputs=tuple(inputs),
            options=dict(options or {}),
        )
        return cls(template_id, field_name, rule)

    @classmethod
    def skipped(cls, template_id: str, field_name: str) -> FieldMapping:
        return cls(template_id, field_name, ValueRule(SourceKind.SKIP))

    @classmethod
    def table(
        cls,
        template_id: str,
        field_name: str,
        row_source: str,
        columns: Sequence[ValueRule],
    ) -> FieldMapping:
        if not columns:
            raise ValueError(f"table mapping for {field_name!r} needs at least one column")
        return cls(
            template_id,
            field_name,
            ValueRule(SourceKind.PATH, path=row_source),
            columns=tuple(columns),
        )

    def to_dict(self) -> dict:
        d = {
            "templateId": self.template_id,
            "fieldName": self.field_name,
            **self.rule.to_dict(),
        }
        if self.columns:
            d["columns"] = [c.to_dict() for c in self.columns]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> FieldMapping:
        return cls(
            template_id=data["templateId"],
            field_name=data["fieldName"],
            rule=ValueRule.from_dict(data),
            columns=tuple(ValueRule.from_dict(c) for c in data.get("columns", ())),
        )


def cell(path: str) -> ValueRule:
    """Shorthand for a column rule reading ``path`` from the row element."""
    return ValueRule(SourceKind.PATH, path=path)


def computed_cell(
    transform: str,
    inputs: Sequence[str] = (),
    **options: Any,
) -> ValueRule:
    """Shorthand for a column rule applying ``transform`` to row paths."""
    return ValueRule(
        SourceKind.COMPUTED,
        transform=transform,
        inputs=tuple(inputs),
        options=options,
    )
