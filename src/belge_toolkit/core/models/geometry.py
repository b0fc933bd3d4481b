"""
Module: geometry

Purpose:
    Position and size primitives for template fields. Coordinates are
    top-down layout units (y grows toward the bottom of the page).

Key Classes:
    - Position: Top-left corner of a field
    - Size: Width and height of a field

Used By:
    - core.models.fields.Field
    - render.layout.flow
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """
    Top-left corner of a field in layout units.

    Example:
        >>> Position(20, 120).to_dict()
        {'x': 20, 'y': 120}
    """

    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Position:
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True, slots=True)
class Size:
    """
    Field dimensions in layout units.

    Invariants:
        - width >= 0
        - height >= 0
    """

    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError(f"width must be >= 0: {self.width}")
        if self.height < 0:
            raise ValueError(f"height must be >= 0: {self.height}")

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> Size:
        return cls(width=data["width"], height=data["height"])
