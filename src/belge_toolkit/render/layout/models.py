"""
Module: render.layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses for final field geometry on one page.

Key Classes:
    - FieldPlacement: Final geometry of one field
    - LayoutPlan: All placements of one page plus overflow diagnostics

Used By:
    - render.layout.flow: Creates LayoutPlans
    - render.output: Draws at placement geometry
    - render.controller: Collects overflow pages
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class FieldPlacement:
    """
    A field positioned on a page.

    Attributes:
        name: Field name
        x: Left edge (never changed by layout)
        y: Final top edge after flow adjustment
        width: Declared width
        height: Final height (row-driven for variable tables)

    Example:
        >>> FieldPlacement("subtotal", 400, 315, 150, 15).bottom
        330
    """

    name: str
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        """Bottom Y coordinate (y + height)."""
        return self.y + self.height


@dataclass(frozen=True)
class LayoutPlan:
    """
    Final geometry of every field on one page.

    Placements are stored in processing order (declared y, flow first on
    ties, then declaration order).

    Attributes:
        page_index: Page number (0-indexed)
        placements: Tuple of FieldPlacements
        usable_height: Page bottom limit used for the overflow check
        content_bottom: Largest placement bottom (0 for an empty page)
        overflow: content_bottom exceeds usable_height
    """

    page_index: int
    placements: Tuple[FieldPlacement, ...]
    usable_height: Optional[float] = None
    content_bottom: float = 0.0
    overflow: bool = False

    def placement(self, name: str) -> Optional[FieldPlacement]:
        for p in self.placements:
            if p.name == name:
                return p
        return None

    def by_name(self) -> Dict[str, FieldPlacement]:
        return {p.name: p for p in self.placements}
