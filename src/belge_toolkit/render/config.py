"""
Module: render.config

Purpose:
    Configuration dataclass for the render pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - EngineConfig: Units, table row heights, fonts, formatting
      defaults and page-layout concurrency

Dependencies:
    - dataclasses (std)
    - render.layout.config: LayoutDefaults

Used By:
    - render.controller: RenderPipeline
    - render.output.pdf_renderer: Fonts and unit conversion
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from belge_toolkit.common.formatting import CURRENCIES, DATE_FORMATS, DEFAULT_DATE_FORMAT
from belge_toolkit.render.layout.config import (
    DEFAULT_DATA_ROW_HEIGHT,
    DEFAULT_HEADER_ROW_HEIGHT,
    LayoutDefaults,
)

# Points per layout unit
UNIT_TO_PT = {
    "pt": 1.0,
    "mm": 72.0 / 25.4,
}

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for rendering documents (immutable).

    Attributes:
        unit: Layout unit of template coordinates ("pt" or "mm")
        header_row_height: Table header height when a field has no style value
        data_row_height: Table row height when a field has no style value
        parallel_pages: Lay out pages concurrently
        max_workers: Thread pool size for page layout (None: executor default)
        default_font: Registered font used when a field names none (bundled
            DejaVuSans covers Turkish letters and the lira sign)
        fonts: Extra TrueType fonts to register, name -> .ttf path
        date_format: Default pattern for date transforms and dateTime fields
        default_currency: Currency used when a transform names none

    Example:
        >>> config = EngineConfig(unit="mm", data_row_height=6)
        >>> config.layout_defaults.data_row_height
        6
    """

    unit: str = "pt"
    header_row_height: float = DEFAULT_HEADER_ROW_HEIGHT
    data_row_height: float = DEFAULT_DATA_ROW_HEIGHT
    parallel_pages: bool = True
    max_workers: Optional[int] = None
    default_font: str = "DejaVuSans"
    fonts: Dict[str, Path] = field(default_factory=dict)
    date_format: str = DEFAULT_DATE_FORMAT
    default_currency: str = "TRY"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.unit not in UNIT_TO_PT:
            raise ValueError(f"unit must be one of {sorted(UNIT_TO_PT)}: {self.unit!r}")
        if self.header_row_height < 0:
            raise ValueError(f"header_row_height must be non-negative: {self.header_row_height}")
        if self.data_row_height < 0:
            raise ValueError(f"data_row_height must be non-negative: {self.data_row_height}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be positive: {self.max_workers}")
        if self.date_format not in DATE_FORMATS:
            raise ValueError(f"date_format must be one of {DATE_FORMATS}: {self.date_format!r}")
        if self.default_currency.upper() not in CURRENCIES:
            raise ValueError(f"Unsupported default_currency: {self.default_currency!r}")

    @property
    def media_type(self) -> str:
        return PDF_MEDIA_TYPE

    @property
    def points_per_unit(self) -> float:
        return UNIT_TO_PT[self.unit]

    @property
    def layout_defaults(self) -> LayoutDefaults:
        return LayoutDefaults(
            header_row_height=self.header_row_height,
            data_row_height=self.data_row_height,
        )
