"""
Module: render.output.backdrop

Purpose:
    Stamp rendered field overlays onto a template's backdrop PDF.

Key Functions:
    - apply_backdrop(): Overlay PDF + backdrop PDF -> merged PDF
    - pdf_page_count(): Number of pages in a PDF

Dependencies:
    - fitz (PyMuPDF): PDF page import and overlay

Used By:
    - render.output.pdf_renderer: When the base surface is a document
"""

from __future__ import annotations

import logging

import fitz

logger = logging.getLogger(__name__)


def pdf_page_count(content: bytes) -> int:
    with fitz.open(stream=content, filetype="pdf") as doc:
        return doc.page_count


def apply_backdrop(backdrop: bytes, overlay: bytes) -> bytes:
    """
    Draw each overlay page on top of a backdrop page.

    Overlay page i is placed on backdrop page i; when the overlay has more
    pages than the backdrop, the last backdrop page is reused.

    Args:
        backdrop: Template base document
        overlay: Rendered fields, one page per template page

    Returns:
        Merged PDF bytes (no random document id, so output is stable)

    Raises:
        ValueError: If the backdrop has no pages
    """
    with fitz.open(stream=backdrop, filetype="pdf") as base, \
            fitz.open(stream=overlay, filetype="pdf") as fields, \
            fitz.open() as merged:
        if base.page_count == 0:
            raise ValueError("Backdrop document has no pages")

        for index in range(fields.page_count):
            source = min(index, base.page_count - 1)
            merged.insert_pdf(base, from_page=source, to_page=source)
            page = merged[index]
            page.show_pdf_page(page.rect, fields, index)

        if fields.page_count > base.page_count:
            logger.debug(
                f"Backdrop has {base.page_count} page(s); reused last page for "
                f"{fields.page_count - base.page_count} more"
            )
        return merged.tobytes(garbage=3, deflate=True, no_new_id=True)
