"""
Module: render.output.renderer

Purpose:
    Abstract interface for output backends. A renderer receives every
    page (schema, layout plan and resolved values) at once and returns
    the finished document bytes.

Key Classes:
    - PageInput: One page to draw
    - Renderer: Abstract base class for backends

Key Functions:
    - value_fits(): Whether a resolved value has the right shape for a kind

Used By:
    - render.output.pdf_renderer: reportlab backend
    - render.controller: Rendering stage
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, FrozenSet, Sequence

from belge_toolkit.core.models import (
    BaseSurface,
    FieldKind,
    ImageRef,
    ResolvedValues,
    Schema,
    TableValue,
    is_absent,
)
from belge_toolkit.render.errors import RenderTypeError, UnsupportedFieldKindError
from belge_toolkit.render.layout.models import LayoutPlan

_SCALAR = (str, int, float, Decimal)

# Text also draws yes/no and calendar values taken straight from a record
_TEXT = _SCALAR + (bool, date)

# Accepted value types per kind (absent values are always accepted)
VALUE_TYPES = {
    FieldKind.TEXT: _TEXT,
    FieldKind.DATE_TIME: (str, date),
    FieldKind.IMAGE: (ImageRef,),
    FieldKind.TABLE: (TableValue,),
    FieldKind.BARCODE: (str, int),
    FieldKind.CHECKBOX: (bool, int, str),
    FieldKind.LINE: (bool, str),
    FieldKind.RECT: (bool, str),
}


def value_fits(kind: FieldKind, value: Any) -> bool:
    """
    Check a resolved value against the shape its kind can draw.

    Example:
        >>> value_fits(FieldKind.TEXT, ["a", "b"])
        False
    """
    if is_absent(value) or value is None:
        return True
    accepted = VALUE_TYPES.get(kind, ())
    if isinstance(value, bool) and bool not in accepted:
        return False
    return isinstance(value, accepted)


@dataclass(frozen=True)
class PageInput:
    """
    Everything needed to draw one page.

    Attributes:
        schema: Field definitions of the page
        plan: Final geometry from the layout engine
        values: Resolved values of the whole render
    """

    schema: Schema
    plan: LayoutPlan
    values: ResolvedValues

    @property
    def page_index(self) -> int:
        return self.plan.page_index


class Renderer(ABC):
    """
    Abstract output backend.

    Implementations draw every field kind in ``supported_kinds`` and
    must not emit partial output: ``check_pages`` runs before anything
    is drawn.
    """

    media_type: str = "application/octet-stream"

    @property
    @abstractmethod
    def supported_kinds(self) -> FrozenSet[FieldKind]:
        """Field kinds this backend can draw."""

    @abstractmethod
    def render(self, surface: BaseSurface, pages: Sequence[PageInput]) -> bytes:
        """
        Draw all pages in the given order.

        Args:
            surface: Page size and optional backdrop document
            pages: Pages in declared order

        Returns:
            Encoded document

        Raises:
            UnsupportedFieldKindError: If a field kind has no handler
            RenderTypeError: If a value does not fit its field kind
        """

    def check_pages(self, pages: Sequence[PageInput]) -> None:
        """Reject unsupported kinds and ill-shaped values on any page."""
        supported = self.supported_kinds
        for page in pages:
            for f in page.schema.fields:
                if f.kind not in supported:
                    raise UnsupportedFieldKindError(f.name, f.kind.value)
                value = page.values.get(f.name)
                if not value_fits(f.kind, value):
                    raise RenderTypeError(f.name, f.kind.value, type(value).__name__)
