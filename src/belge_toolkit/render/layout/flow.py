"""
Module: render.layout.flow

Purpose:
    Single-axis vertical flow adjustment. Variable-height tables grow or
    shrink to fit their row count and every field below them moves by the
    accumulated difference.

Key Functions:
    - compute_layout_plan(): Lay out one page

Algorithm:
    1. Sort fields by declared y (flow before fixed on ties, then
       declaration order)
    2. Keep a running offset, starting at 0
    3. Each field lands at declared y + offset
    4. A variable-height table with a row count takes
       header + rows * row height; the difference to its declared
       height is added to the offset
    5. Overflow when the lowest bottom passes the usable height

Dependencies:
    - core.models: Schema, Field
    - render.layout.models: FieldPlacement, LayoutPlan
    - render.layout.config: LayoutDefaults

Used By:
    - render.controller: Per-page layout
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from belge_toolkit.core.models import Anchor, Field, Schema

from .config import LayoutDefaults
from .models import FieldPlacement, LayoutPlan

logger = logging.getLogger(__name__)


def _sort_key(indexed: tuple[int, Field]) -> tuple[float, int, int]:
    index, f = indexed
    return (f.declared_y, 0 if f.anchor is Anchor.FLOW else 1, index)


def table_height(f: Field, row_count: int, defaults: LayoutDefaults) -> float:
    """Height of a variable table holding ``row_count`` data rows."""
    header = f.style.header_row_height
    row = f.style.data_row_height
    if header is None:
        header = defaults.header_row_height
    if row is None:
        row = defaults.data_row_height
    return header + row_count * row


def compute_layout_plan(
    schema: Schema,
    row_counts: Mapping[str, int],
    *,
    page_index: int = 0,
    usable_height: Optional[float] = None,
    defaults: LayoutDefaults = LayoutDefaults(),
) -> LayoutPlan:
    """
    Compute final positions and heights for one page.

    Pure: the schema is not modified and the same inputs always give an
    equal plan.

    Args:
        schema: Page to lay out
        row_counts: Row count per variable-height field name; fields
            without an entry keep their declared height
        page_index: Index recorded on the plan
        usable_height: Overflow limit; None disables the check
        defaults: Row heights for tables whose style sets none

    Returns:
        LayoutPlan with one placement per field

    Raises:
        ValueError: If a row count is negative
    """
    for name, count in row_counts.items():
        if count < 0:
            raise ValueError(f"row count for {name!r} must be >= 0: {count}")

    ordered = sorted(enumerate(schema.fields), key=_sort_key)

    placements: List[FieldPlacement] = []
    offset = 0.0
    for _, f in ordered:
        final_y = f.declared_y + offset
        height = f.declared_height

        if f.variable_height and f.name in row_counts:
            height = table_height(f, row_counts[f.name], defaults)
            delta = height - f.declared_height
            offset += delta
            logger.debug(
                f"Page {page_index}: {f.name} rows={row_counts[f.name]} "
                f"height {f.declared_height:g}->{height:g} (offset now {offset:g})"
            )

        placements.append(
            FieldPlacement(
                name=f.name,
                x=f.position.x,
                y=final_y,
                width=f.size.width,
                height=height,
            )
        )

    content_bottom = max((p.bottom for p in placements), default=0.0)
    overflow = usable_height is not None and content_bottom > usable_height
    if overflow:
        logger.debug(
            f"Page {page_index}: content bottom {content_bottom:g} "
            f"exceeds usable height {usable_height:g}"
        )

    return LayoutPlan(
        page_index=page_index,
        placements=tuple(placements),
        usable_height=usable_height,
        content_bottom=content_bottom,
        overflow=overflow,
    )
