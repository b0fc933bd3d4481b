"""
Module: render.layout.config

Purpose:
    Fallback table row heights for the layout engine.

Key Classes:
    - LayoutDefaults: Header and data row heights used when a table
      field's style does not set its own

Used By:
    - render.layout.flow
    - render.config.EngineConfig.layout_defaults
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_HEADER_ROW_HEIGHT = 15.0
DEFAULT_DATA_ROW_HEIGHT = 15.0


@dataclass(frozen=True)
class LayoutDefaults:
    """
    Table row heights in layout units (immutable).

    Example:
        >>> defaults = LayoutDefaults(data_row_height=12)
        >>> defaults.header_row_height, defaults.data_row_height
        (15.0, 12)
    """

    header_row_height: float = DEFAULT_HEADER_ROW_HEIGHT
    data_row_height: float = DEFAULT_DATA_ROW_HEIGHT

    def __post_init__(self) -> None:
        if self.header_row_height < 0:
            raise ValueError(f"header_row_height must be non-negative: {self.header_row_height}")
        if self.data_row_height < 0:
            raise ValueError(f"data_row_height must be non-negative: {self.data_row_height}")
