"""
Module: render.errors

Purpose:
    Exception hierarchy for the render pipeline plus the non-fatal
    overflow record.

Key Classes:
    - RenderError: Base for every fatal render failure
    - ValidationError: Template/mapping inconsistency found before resolving
    - MissingFieldsError: Required fields that resolved to nothing
    - ConfigurationError: Bad mapping configuration (transforms, paths)
    - UnsupportedFieldKindError / RenderTypeError: Renderer rejections
    - RenderCancelledError: Caller cancelled the render
    - OverflowWarning: Informational record, never raised

Used By:
    - render.controller
    - render.resolving, render.layout, render.output
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple


class RenderError(Exception):
    """Base class for fatal render errors."""
    pass


class ValidationError(RenderError):
    """
    Template and mappings are inconsistent.

    Attributes:
        field_names: Fields involved, in the order problems were found
        problems: One human-readable message per problem
    """

    def __init__(
        self,
        message: str,
        field_names: Sequence[str] = (),
        problems: Sequence[str] = (),
    ):
        super().__init__(message)
        self.field_names: Tuple[str, ...] = tuple(dict.fromkeys(field_names))
        self.problems: Tuple[str, ...] = tuple(problems)


class MissingFieldsError(RenderError):
    """Required fields resolved to absent values."""

    def __init__(self, field_names: Iterable[str]):
        self.field_names: Tuple[str, ...] = tuple(field_names)
        super().__init__(f"Required fields missing: {', '.join(self.field_names)}")


class ConfigurationError(RenderError):
    """Mapping configuration cannot be evaluated."""
    pass


class UnknownTransformError(ConfigurationError):
    """Computed mapping names a transform that is not registered."""

    def __init__(self, names: Iterable[str]):
        self.names: Tuple[str, ...] = tuple(dict.fromkeys(names))
        super().__init__(f"Unknown transform(s): {', '.join(self.names)}")


class InvalidPathError(ConfigurationError):
    """Path expression cannot be parsed."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid path {path!r}{detail}")


class UnsupportedFieldKindError(RenderError):
    """Renderer has no drawing handler for a field kind."""

    def __init__(self, field_name: str, kind: str):
        self.field_name = field_name
        self.kind = str(kind)
        super().__init__(f"Field {field_name!r}: renderer cannot draw kind {self.kind!r}")


class RenderTypeError(RenderError):
    """Resolved value does not fit its field kind."""

    def __init__(self, field_name: str, kind: str, value_type: str):
        self.field_name = field_name
        self.kind = str(kind)
        self.value_type = value_type
        super().__init__(
            f"Field {field_name!r} of kind {self.kind!r} cannot draw a {value_type} value"
        )


class RenderCancelledError(RenderError):
    """Render was cancelled through its CancellationToken."""

    def __init__(self, stage: Optional[str] = None):
        self.stage = stage
        where = f" during {stage}" if stage else ""
        super().__init__(f"Render cancelled{where}")


@dataclass(frozen=True)
class OverflowWarning:
    """
    Page content extends past the usable height.

    Reported in RenderResult.warnings; rendering still completes.
    """

    page_index: int
    content_bottom: float
    usable_height: float

    @property
    def excess(self) -> float:
        return self.content_bottom - self.usable_height

    def __str__(self) -> str:
        return (
            f"Page {self.page_index + 1} overflows by {self.excess:g} "
            f"(content ends at {self.content_bottom:g}, usable height {self.usable_height:g})"
        )
