"""
Output Package

Renderer interface, the reportlab PDF backend and export helpers.
"""

from .renderer import PageInput, Renderer, value_fits
from .pdf_renderer import PdfRenderer
from .images import ImageLoadError, load_image
from .backdrop import apply_backdrop, pdf_page_count
from .export import (
    DocumentUploader,
    suggested_filename,
    to_data_uri,
    upload_document,
    write_document,
)

__all__ = [
    "PageInput",
    "Renderer",
    "value_fits",
    "PdfRenderer",
    "ImageLoadError",
    "load_image",
    "apply_backdrop",
    "pdf_page_count",
    "DocumentUploader",
    "suggested_filename",
    "to_data_uri",
    "upload_document",
    "write_document",
]
