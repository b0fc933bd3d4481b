"""
Module: templates

Purpose:
    Provides the Template, Schema and BaseSurface dataclasses - the static
    shape of a reusable document layout. A Template is an ordered list of
    Schemas (one per physical page) overlaid on a base surface.

Key Classes:
    - DocumentType: quote / invoice / proposal / serviceSlip / other
    - BaseSurface: Blank canvas or an existing PDF used as backdrop
    - Schema: Field layout of one page
    - Template: Versioned, multi-page document layout

Dependencies:
    - dataclasses (std)
    - core.models.fields: Field, FieldKind

Used By:
    - core.utils.serialization
    - render.controller: Pipeline input
    - render.layout.flow: Per-page layout
    - render.output: Page rendering

Invariants:
    - Field names are unique within a Schema
    - Templates are never mutated by rendering (frozen)
    - Zero pages is representable; the pipeline rejects it during validation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from .fields import Field, FieldKind

# A4 in points and millimetres
A4_PT = (595.0, 842.0)
A4_MM = (210.0, 297.0)


class DocumentType(str, Enum):
    """Business document a template produces."""
    QUOTE = "quote"
    INVOICE = "invoice"
    PROPOSAL = "proposal"
    SERVICE_SLIP = "serviceSlip"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class SurfaceKind(str, Enum):
    """Background the fields are drawn over."""
    BLANK = "blank"
    DOCUMENT = "document"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BaseSurface:
    """
    Background document surface (immutable).

    Attributes:
        kind: BLANK canvas or DOCUMENT backdrop
        width: Page width in layout units
        height: Page height in layout units
        padding: (top, right, bottom, left) in layout units
        document: PDF bytes of the backdrop (DOCUMENT only)

    Example:
        >>> surface = BaseSurface.blank()
        >>> surface.usable_height
        842.0
    """

    kind: SurfaceKind = SurfaceKind.BLANK
    width: float = A4_PT[0]
    height: float = A4_PT[1]
    padding: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    document: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"surface size must be positive: {self.width}x{self.height}")
        if len(self.padding) != 4 or any(p < 0 for p in self.padding):
            raise ValueError(f"padding must be four non-negative values: {self.padding}")
        if self.kind is SurfaceKind.DOCUMENT and not self.document:
            raise ValueError("document surface requires backdrop bytes")
        if self.kind is SurfaceKind.BLANK and self.document is not None:
            raise ValueError("blank surface cannot carry backdrop bytes")

    @property
    def usable_height(self) -> float:
        """Lowest y a field may reach before the page overflows."""
        return self.height - self.padding[2]

    @classmethod
    def blank(cls, unit: str = "pt") -> BaseSurface:
        width, height = A4_MM if unit == "mm" else A4_PT
        return cls(kind=SurfaceKind.BLANK, width=width, height=height)

    @classmethod
    def from_document(
        cls,
        document: bytes,
        width: float = A4_PT[0],
        height: float = A4_PT[1],
        padding: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0),
    ) -> BaseSurface:
        return cls(
            kind=SurfaceKind.DOCUMENT,
            width=width,
            height=height,
            padding=padding,
            document=document,
        )


@dataclass(frozen=True)
class Schema:
    """
    Field layout of one page.

    Declaration order is kept; the layout engine orders fields by declared
    y itself, so array order only breaks ties.
    """

    fields: Tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        seen = set()
        duplicates = []
        for f in self.fields:
            if f.name in seen:
                duplicates.append(f.name)
            seen.add(f.name)
        if duplicates:
            raise ValueError(f"Duplicate field names in schema: {sorted(set(duplicates))}")

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def variable_fields(self) -> Tuple[Field, ...]:
        return tuple(f for f in self.fields if f.variable_height)

    def field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __len__(self) -> int:
        return len(self.fields)

    def to_list(self) -> list:
        return [f.to_dict() for f in self.fields]

    @classmethod
    def from_list(cls, data: list) -> Schema:
        return cls(fields=tuple(Field.from_dict(item) for item in data))


@dataclass(frozen=True)
class Template:
    """
    Reusable, versioned document layout (immutable).

    Attributes:
        id: Store identifier
        name: Display name
        document_type: Kind of business document produced
        base_surface: Background the pages are drawn on
        pages: One Schema per physical page, in output order
        description: Free text
        is_default: Default template for its document type (store-enforced)
        version: Incremented by the designer on every structural edit

    Example:
        >>> template = Template("tpl-1", "Teklif", DocumentType.PROPOSAL,
        ...                     BaseSurface.blank(), pages=(Schema(),))
        >>> template.page_count
        1
    """

    id: str
    name: str
    document_type: DocumentType
    base_surface: BaseSurface = field(default_factory=BaseSurface)
    pages: Tuple[Schema, ...] = ()
    description: str = ""
    is_default: bool = False
    version: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Template id must be non-empty")
        if self.version < 1:
            raise ValueError(f"version must be >= 1: {self.version}")

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def iter_fields(self) -> Iterator[Tuple[int, Field]]:
        """Yield (page_index, field) across all pages in declared order."""
        for index, schema in enumerate(self.pages):
            for f in schema.fields:
                yield index, f

    @property
    def field_names(self) -> Tuple[str, ...]:
        names: Dict[str, None] = {}
        for _, f in self.iter_fields():
            names.setdefault(f.name, None)
        return tuple(names)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        """Names of required fields in page order, without duplicates."""
        names: Dict[str, None] = {}
        for _, f in self.iter_fields():
            if f.required:
                names.setdefault(f.name, None)
        return tuple(names)

    def field_kinds(self) -> Dict[str, FieldKind]:
        """
        Map each field name to its kind (first declaration wins).

        Raises:
            ValueError: If the same name is declared with different kinds
                on different pages.
        """
        kinds: Dict[str, FieldKind] = {}
        for _, f in self.iter_fields():
            existing = kinds.setdefault(f.name, f.kind)
            if existing is not f.kind:
                raise ValueError(
                    f"Field {f.name!r} declared as both {existing} and {f.kind}"
                )
        return kinds

    def find_field(self, name: str) -> Optional[Field]:
        for _, f in self.iter_fields():
            if f.name == name:
                return f
        return None
