"""
Module: render.result

Purpose:
    Stage enumeration and result record of one render.

Key Classes:
    - RenderStage: Pipeline state machine states
    - RenderResult: Encoded document plus diagnostics

Used By:
    - render.controller
    - render.output.export
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from belge_toolkit.render.errors import OverflowWarning
from belge_toolkit.render.layout.models import LayoutPlan


class RenderStage(str, Enum):
    """
    Render pipeline state.

    Transitions: validating -> resolving -> laying_out -> rendering ->
    complete, with failed reachable from every non-terminal state.
    """
    VALIDATING = "validating"
    RESOLVING = "resolving"
    LAYING_OUT = "laying_out"
    RENDERING = "rendering"
    COMPLETE = "complete"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (RenderStage.COMPLETE, RenderStage.FAILED)


# Successful path, in order
STAGE_ORDER: Tuple[RenderStage, ...] = (
    RenderStage.VALIDATING,
    RenderStage.RESOLVING,
    RenderStage.LAYING_OUT,
    RenderStage.RENDERING,
    RenderStage.COMPLETE,
)


@dataclass(frozen=True)
class RenderResult:
    """
    Output of a successful render.

    Attributes:
        content: Encoded document
        media_type: MIME type of content
        page_count: Pages in the document (always the template's page count)
        overflow_pages: 0-based indices of pages whose content passed the
            usable height
        warnings: One OverflowWarning per overflowing page
        template_id: Template rendered
        template_version: Version of that template
        plans: Layout plan of every page, in page order
    """

    content: bytes
    media_type: str
    page_count: int
    overflow_pages: Tuple[int, ...] = ()
    warnings: Tuple[OverflowWarning, ...] = ()
    template_id: str = ""
    template_version: int = 1
    plans: Tuple[LayoutPlan, ...] = ()

    @property
    def has_overflow(self) -> bool:
        return bool(self.overflow_pages)

    @property
    def size(self) -> int:
        return len(self.content)
