"""
Module: fields

Purpose:
    Provides the Field dataclass - a single named, typed, positioned unit
    of content on one template page - together with its closed kind
    enumeration, anchor mode and pass-through style.

Key Classes:
    - FieldKind: Closed set of drawable field kinds
    - Anchor: fixed or flow positioning
    - FieldStyle: Presentation attributes (opaque to layout except row heights)
    - Field: Positioned field definition

Dependencies:
    - dataclasses (std)
    - core.models.geometry: Position, Size

Used By:
    - core.models.templates.Schema
    - render.layout.flow: Reads y/height/anchor/variable_height
    - render.output: Dispatches on FieldKind
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .geometry import Position, Size


class FieldKind(str, Enum):
    """Type of template field."""
    TEXT = "text"
    IMAGE = "image"
    TABLE = "table"
    BARCODE = "barcode"
    LINE = "line"
    RECT = "rect"
    CHECKBOX = "checkbox"
    DATE_TIME = "dateTime"

    def __str__(self) -> str:
        return self.value


class Anchor(str, Enum):
    """How a field relates to variable-height content above it."""
    FIXED = "fixed"
    FLOW = "flow"

    def __str__(self) -> str:
        return self.value


# Python attribute -> designer JSON key
_STYLE_KEYS: Dict[str, str] = {
    "font_name": "fontName",
    "font_size": "fontSize",
    "font_color": "fontColor",
    "alignment": "alignment",
    "background_color": "backgroundColor",
    "border_color": "borderColor",
    "border_width": "borderWidth",
    "line_height": "lineHeight",
    "header_row_height": "headerRowHeight",
    "data_row_height": "rowHeight",
    "date_format": "dateFormat",
    "barcode_format": "barcodeFormat",
}

ALIGNMENTS = ("left", "center", "right")


@dataclass(frozen=True)
class FieldStyle:
    """
    Presentation attributes passed through to the renderer.

    Every attribute is optional; the renderer and layout engine fall back
    to their configured defaults. Keys the engine does not understand are
    kept in ``extra`` so templates survive a load/save cycle unchanged.

    Attributes:
        font_name: Registered font name (e.g. "Helvetica")
        font_size: Font size in points
        font_color: Hex color like "#333333"
        alignment: "left", "center" or "right"
        background_color: Fill color for tables/rects/table headers
        border_color: Stroke color
        border_width: Stroke width in layout units
        line_height: Multiplier applied to font_size for text lines
        header_row_height: Table header row height in layout units
        data_row_height: Table data row height in layout units
        date_format: Format token for dateTime fields (e.g. "DD.MM.YYYY")
        barcode_format: Barcode symbology (code128, qrcode, ean13, code39)
        extra: Unrecognised style keys
    """

    font_name: Optional[str] = None
    font_size: Optional[float] = None
    font_color: Optional[str] = None
    alignment: Optional[str] = None
    background_color: Optional[str] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    line_height: Optional[float] = None
    header_row_height: Optional[float] = None
    data_row_height: Optional[float] = None
    date_format: Optional[str] = None
    barcode_format: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.alignment is not None and self.alignment not in ALIGNMENTS:
            raise ValueError(f"alignment must be one of {ALIGNMENTS}: {self.alignment!r}")
        if self.font_size is not None and self.font_size <= 0:
            raise ValueError(f"font_size must be positive: {self.font_size}")
        for name in ("header_row_height", "data_row_height"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0: {value}")

    def to_dict(self) -> dict:
        d: dict = {}
        for attr, key in _STYLE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                d[key] = value
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldStyle:
        known = {key: attr for attr, key in _STYLE_KEYS.items()}
        kwargs: dict = {}
        extra: dict = {}
        for key, value in data.items():
            if key in known:
                kwargs[known[key]] = value
            else:
                extra[key] = value
        return cls(**kwargs, extra=extra)


@dataclass(frozen=True)
class Field:
    """
    A named, typed, positioned unit of content (immutable).

    Attributes:
        name: Unique name within its Schema; doubles as the value key
        kind: What the renderer draws
        position: Declared top-left corner
        size: Declared width and height
        anchor: FIXED or FLOW (FLOW wins ties on the same baseline)
        variable_height: True only for tables whose height follows row count
        required: Whether a render must populate this field
        style: Presentation attributes
        head: Table column titles
        column_widths: Table column widths as percentages of the field width

    Invariants:
        - name is non-empty
        - variable_height implies kind == TABLE
        - column_widths is empty or matches head, every width positive

    Example:
        >>> items = Field("itemsTable", FieldKind.TABLE, Position(20, 120),
        ...               Size(555, 200), anchor=Anchor.FLOW, variable_height=True)
        >>> items.declared_height
        200
    """

    name: str
    kind: FieldKind
    position: Position
    size: Size
    anchor: Anchor = Anchor.FIXED
    variable_height: bool = False
    required: bool = False
    style: FieldStyle = field(default_factory=FieldStyle)
    head: Tuple[str, ...] = ()
    column_widths: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Field name must be non-empty")
        if self.variable_height and self.kind is not FieldKind.TABLE:
            raise ValueError(
                f"Field {self.name!r}: only table fields may have variable height "
                f"(kind={self.kind})"
            )
        if self.column_widths:
            if len(self.column_widths) != len(self.head):
                raise ValueError(
                    f"Field {self.name!r}: {len(self.column_widths)} column widths "
                    f"for {len(self.head)} columns"
                )
            if any(w <= 0 for w in self.column_widths):
                raise ValueError(f"Field {self.name!r}: column widths must be positive")

    @property
    def declared_y(self) -> float:
        return self.position.y

    @property
    def declared_height(self) -> float:
        return self.size.height

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "type": self.kind.value,
            "position": self.position.to_dict(),
            "width": self.size.width,
            "height": self.size.height,
            "anchor": self.anchor.value,
            "variableHeight": self.variable_height,
            "required": self.required,
        }
        style = self.style.to_dict()
        if style:
            d["style"] = style
        if self.head:
            d["head"] = list(self.head)
        if self.column_widths:
            d["headWidthPercentages"] = list(self.column_widths)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Field:
        return cls(
            name=data["name"],
            kind=FieldKind(data["type"]),
            position=Position.from_dict(data["position"]),
            size=Size(width=data["width"], height=data["height"]),
            anchor=Anchor(data.get("anchor", Anchor.FIXED.value)),
            variable_height=data.get("variableHeight", False),
            required=data.get("required", False),
            style=FieldStyle.from_dict(data.get("style", {})),
            head=tuple(data.get("head", ())),
            column_widths=tuple(data.get("headWidthPercentages", ())),
        )
