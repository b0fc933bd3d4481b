"""
Module: render.output.pdf_renderer

Purpose:
    Render laid-out pages to PDF using ReportLab. Each PageInput becomes
    one PDF page with every field drawn at its planned geometry; a
    document backdrop is stamped underneath with PyMuPDF afterwards.

Key Classes:
    - PdfRenderer: reportlab backend with one handler per field kind

Dependencies:
    - reportlab: PDF generation, barcodes
    - PIL: Image decoding (via render.output.images)
    - fitz (PyMuPDF): Backdrop overlay (via render.output.backdrop)

Used By:
    - render.controller: Default renderer of RenderPipeline
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Optional, Sequence

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.lib import colors
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from belge_toolkit.common.formatting import format_date, format_datetime, parse_date
from belge_toolkit.core.models import (
    BaseSurface,
    Field,
    FieldKind,
    ImageRef,
    SurfaceKind,
    TableValue,
    is_absent,
)
from belge_toolkit.render.config import EngineConfig, PDF_MEDIA_TYPE
from belge_toolkit.render.layout.flow import table_height
from belge_toolkit.render.layout.models import FieldPlacement
from belge_toolkit.render.resolving.resolver import cell_text

from .backdrop import apply_backdrop
from .images import ImageLoadError, load_image, to_reader
from .renderer import PageInput, Renderer

logger = logging.getLogger(__name__)

# Defaults
DEFAULT_FONT_SIZE = 10
DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_BORDER_COLOR = "#000000"
DEFAULT_HEADER_FILL = "#f0f0f0"
CELL_PADDING_PT = 2

# Style barcode names -> reportlab widget names
BARCODE_TYPES = {
    "code128": "Code128",
    "qrcode": "QR",
    "qr": "QR",
    "ean13": "EAN13",
    "code39": "Standard39",
}

# TrueType fonts shipped with the package, name -> file
FONT_DIR = Path(__file__).parent / "fonts"
BUNDLED_FONTS = {
    "DejaVuSans": FONT_DIR / "DejaVuSans.ttf",
    "DejaVuSans-Bold": FONT_DIR / "DejaVuSans-Bold.ttf",
}

# Regular font -> bold variant used for table headers
BOLD_VARIANTS = {
    "Helvetica": "Helvetica-Bold",
    "Times-Roman": "Times-Bold",
    "Courier": "Courier-Bold",
    "DejaVuSans": "DejaVuSans-Bold",
}

BOOLEAN_TEXT = {True: "Evet", False: "Hayır"}

_CHECKED_WORDS = {"true", "1", "x", "yes", "evet", "✓"}

Handler = Callable[[canvas.Canvas, Field, "Box", Any], None]


@dataclass(frozen=True)
class Box:
    """Field rectangle in PDF points, origin at the bottom-left of the page."""

    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height


def _color(value: Optional[str], fallback: str):
    return colors.HexColor(value or fallback)


class PdfRenderer(Renderer):
    """
    reportlab PDF backend.

    Output is byte-identical for identical input: the canvas runs in
    invariant mode and the backdrop merge writes no random document id.

    Example:
        >>> renderer = PdfRenderer(EngineConfig())
        >>> pdf = renderer.render(template.base_surface, pages)
        >>> pdf[:5]
        b'%PDF-'
    """

    media_type = PDF_MEDIA_TYPE

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._scale = self.config.points_per_unit
        self._handlers: Dict[FieldKind, Handler] = {
            FieldKind.TEXT: self.draw_text,
            FieldKind.IMAGE: self.draw_image,
            FieldKind.TABLE: self.draw_table,
            FieldKind.BARCODE: self.draw_barcode,
            FieldKind.LINE: self.draw_line,
            FieldKind.RECT: self.draw_rect,
            FieldKind.CHECKBOX: self.draw_checkbox,
            FieldKind.DATE_TIME: self.draw_date_time,
        }
        self._register_fonts()

    @property
    def supported_kinds(self) -> FrozenSet[FieldKind]:
        return frozenset(self._handlers)

    def _register_fonts(self) -> None:
        registered = set(pdfmetrics.getRegisteredFontNames())
        for name, path in {**BUNDLED_FONTS, **self.config.fonts}.items():
            if name not in registered:
                pdfmetrics.registerFont(TTFont(name, str(path)))
                logger.debug(f"Registered font {name} from {path}")

    def render(self, surface: BaseSurface, pages: Sequence[PageInput]) -> bytes:
        if not pages:
            raise ValueError("Cannot render a document without pages")
        self.check_pages(pages)

        width_pt = surface.width * self._scale
        height_pt = surface.height * self._scale

        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=(width_pt, height_pt), invariant=1)
        for page in pages:
            self._render_page(c, page, height_pt)
            c.showPage()
        c.save()
        content = buf.getvalue()

        if surface.kind is SurfaceKind.DOCUMENT:
            content = apply_backdrop(surface.document, content)

        logger.debug(f"Rendered {len(pages)} page(s), {len(content)} bytes")
        return content

    def _render_page(self, c: canvas.Canvas, page: PageInput, height_pt: float) -> None:
        placements = page.plan.by_name()
        for f in page.schema.fields:
            placement = placements.get(f.name)
            if placement is None:
                continue
            box = self._box(placement, height_pt)
            value = page.values.get(f.name)
            c.saveState()
            self._handlers[f.kind](c, f, box, value)
            c.restoreState()

    def _box(self, placement: FieldPlacement, height_pt: float) -> Box:
        """Convert top-down layout geometry to bottom-up PDF points."""
        k = self._scale
        return Box(
            x=placement.x * k,
            y=height_pt - (placement.y + placement.height) * k,
            width=placement.width * k,
            height=placement.height * k,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Text
    # ─────────────────────────────────────────────────────────────────────

    def _font(self, f: Field) -> tuple[str, float]:
        return f.style.font_name or self.config.default_font, f.style.font_size or DEFAULT_FONT_SIZE

    def _draw_lines(self, c: canvas.Canvas, f: Field, box: Box, text: str) -> None:
        font_name, font_size = self._font(f)
        leading = font_size * (f.style.line_height or DEFAULT_LINE_HEIGHT)
        lines = []
        for paragraph in text.split("\n"):
            lines.extend(simpleSplit(paragraph, font_name, font_size, box.width) or [""])

        c.setFont(font_name, font_size)
        c.setFillColor(_color(f.style.font_color, DEFAULT_TEXT_COLOR))
        baseline = box.top - font_size
        for line in lines:
            if baseline < box.y - font_size:
                break
            if f.style.alignment == "center":
                c.drawCentredString(box.x + box.width / 2, baseline, line)
            elif f.style.alignment == "right":
                c.drawRightString(box.x + box.width, baseline, line)
            else:
                c.drawString(box.x, baseline, line)
            baseline -= leading

    def draw_text(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if is_absent(value) or value is None:
            return
        self._draw_lines(c, f, box, self._text_of(f, value))

    def _text_of(self, f: Field, value: Any) -> str:
        if isinstance(value, bool):
            return BOOLEAN_TEXT[value]
        pattern = f.style.date_format or self.config.date_format
        if isinstance(value, datetime):
            return format_datetime(value, pattern)
        if isinstance(value, date):
            return format_date(value, pattern)
        return cell_text(value)

    def draw_date_time(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if is_absent(value) or value is None:
            return
        text = value
        if isinstance(value, date) or parse_date(value) is not None:
            text = format_date(value, f.style.date_format or self.config.date_format)
        self._draw_lines(c, f, box, str(text))

    # ─────────────────────────────────────────────────────────────────────
    # Images and barcodes
    # ─────────────────────────────────────────────────────────────────────

    def draw_image(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if not isinstance(value, ImageRef) or value.is_placeholder:
            return
        try:
            img = load_image(value)
        except ImageLoadError as e:
            logger.warning(f"Image field {f.name!r} omitted: {e}")
            return
        c.drawImage(
            to_reader(img),
            box.x,
            box.y,
            width=box.width,
            height=box.height,
            preserveAspectRatio=True,
            mask="auto",
        )

    def draw_barcode(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if is_absent(value) or value is None or str(value) == "":
            return
        symbology = (f.style.barcode_format or "code128").lower()
        barcode_type = BARCODE_TYPES.get(symbology)
        if barcode_type is None:
            logger.warning(f"Unknown barcode format {symbology!r} on {f.name!r}, using code128")
            barcode_type = BARCODE_TYPES["code128"]
        drawing = createBarcodeDrawing(
            barcode_type, value=str(value), width=box.width, height=box.height
        )
        renderPDF.draw(drawing, c, box.x, box.y)

    # ─────────────────────────────────────────────────────────────────────
    # Table
    # ─────────────────────────────────────────────────────────────────────

    def _column_widths(self, f: Field, box: Box, value: Optional[TableValue]) -> list[float]:
        if f.column_widths:
            total = sum(f.column_widths)
            return [box.width * w / total for w in f.column_widths]
        count = max(len(f.head), value.column_count if value else 0, 1)
        return [box.width / count] * count

    def _fit(self, text: str, font_name: str, font_size: float, width: float) -> str:
        if pdfmetrics.stringWidth(text, font_name, font_size) <= width:
            return text
        while text and pdfmetrics.stringWidth(text + "…", font_name, font_size) > width:
            text = text[:-1]
        return text + "…" if text else ""

    def draw_table(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        table = value if isinstance(value, TableValue) else None
        k = self._scale
        defaults = self.config.layout_defaults
        header_h = table_height(f, 0, defaults) * k
        row_h = (table_height(f, 1, defaults) - table_height(f, 0, defaults)) * k
        widths = self._column_widths(f, box, table)
        font_name, font_size = self._font(f)
        header_font = BOLD_VARIANTS.get(font_name, font_name)
        border = _color(f.style.border_color, DEFAULT_BORDER_COLOR)

        c.setLineWidth((f.style.border_width or 0.5) * k)
        c.setStrokeColor(border)

        # Header row
        top = box.top
        if header_h > 0:
            c.setFillColor(_color(f.style.background_color, DEFAULT_HEADER_FILL))
            c.rect(box.x, top - header_h, box.width, header_h, stroke=1, fill=1)
            c.setFillColor(_color(f.style.font_color, DEFAULT_TEXT_COLOR))
            c.setFont(header_font, font_size)
            x = box.x
            for title, width in zip(f.head, widths):
                text = self._fit(title, header_font, font_size, width - 2 * CELL_PADDING_PT)
                c.drawString(x + CELL_PADDING_PT, top - header_h + (header_h - font_size) / 2 + 1, text)
                x += width
            top -= header_h

        if table is None or row_h <= 0:
            return

        c.setFont(font_name, font_size)
        drawn = 0
        for row in table.rows:
            if top - row_h < box.y - 0.01:
                break
            c.setFillColor(_color(f.style.font_color, DEFAULT_TEXT_COLOR))
            x = box.x
            for text, width in zip(row, widths):
                c.rect(x, top - row_h, width, row_h, stroke=1, fill=0)
                fitted = self._fit(text, font_name, font_size, width - 2 * CELL_PADDING_PT)
                c.drawString(x + CELL_PADDING_PT, top - row_h + (row_h - font_size) / 2 + 1, fitted)
                x += width
            top -= row_h
            drawn += 1
        if drawn < table.row_count:
            logger.debug(f"Table {f.name!r}: {table.row_count - drawn} row(s) clipped by field height")

    # ─────────────────────────────────────────────────────────────────────
    # Shapes
    # ─────────────────────────────────────────────────────────────────────

    def _stroke(self, c: canvas.Canvas, f: Field) -> None:
        c.setStrokeColor(_color(f.style.border_color, DEFAULT_BORDER_COLOR))
        c.setLineWidth((f.style.border_width or 1) * self._scale)

    def draw_line(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if value is False:
            return
        self._stroke(c, f)
        if isinstance(value, str) and value:
            c.setStrokeColor(colors.HexColor(value))
        if box.height > box.width:
            mid = box.x + box.width / 2
            c.line(mid, box.y, mid, box.top)
        else:
            mid = box.y + box.height / 2
            c.line(box.x, mid, box.x + box.width, mid)

    def draw_rect(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        if value is False:
            return
        self._stroke(c, f)
        fill = f.style.background_color
        if isinstance(value, str) and value:
            fill = value
        if fill:
            c.setFillColor(colors.HexColor(fill))
        c.rect(box.x, box.y, box.width, box.height, stroke=1, fill=1 if fill else 0)

    def draw_checkbox(self, c: canvas.Canvas, f: Field, box: Box, value: Any) -> None:
        side = min(box.width, box.height)
        self._stroke(c, f)
        c.rect(box.x, box.top - side, side, side, stroke=1, fill=0)

        if isinstance(value, str):
            checked = value.strip().lower() in _CHECKED_WORDS
        else:
            checked = bool(value) and not is_absent(value)
        if checked:
            inset = side * 0.2
            left, right = box.x + inset, box.x + side - inset
            bottom, top = box.top - side + inset, box.top - inset
            c.line(left, bottom, right, top)
            c.line(left, top, right, bottom)
