"""
Module: render.output.images

Purpose:
    Load images referenced by image fields. Inline ``data:`` URIs and
    local files are decoded with Pillow; remote URLs are never fetched
    while rendering.

Key Functions:
    - load_image(): ImageRef -> PIL Image
    - to_reader(): PIL Image -> reportlab ImageReader

Key Classes:
    - ImageLoadError: Image cannot be loaded

Dependencies:
    - PIL: Image decoding
    - reportlab: ImageReader

Used By:
    - render.output.pdf_renderer: draw_image
"""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader

from belge_toolkit.core.models import ImageRef


class ImageLoadError(Exception):
    """Image reference cannot be turned into pixels."""
    pass


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise ImageLoadError("data URI has no payload")
    if not header.endswith(";base64"):
        raise ImageLoadError(f"only base64 data URIs are supported: {header[:40]}")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ImageLoadError(f"invalid base64 payload: {e}") from e


def load_image(ref: ImageRef, base_dir: Optional[Path] = None) -> Image.Image:
    """
    Decode the image behind ``ref``.

    Args:
        ref: Data URI or local path (relative paths resolve against base_dir)
        base_dir: Directory for relative paths

    Returns:
        Loaded PIL Image

    Raises:
        ImageLoadError: If the reference is a placeholder or remote URL,
            the file is missing, or the bytes are not an image
    """
    if ref.is_placeholder:
        raise ImageLoadError("image placeholder has no content")
    if ref.is_remote:
        raise ImageLoadError(f"remote image not fetched: {ref.uri}")

    try:
        if ref.is_inline:
            img = Image.open(io.BytesIO(_decode_data_uri(ref.uri)))
        else:
            path = Path(ref.uri)
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            if not path.exists():
                raise ImageLoadError(f"image file not found: {path}")
            img = Image.open(path)
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"cannot decode image: {e}") from e
    return img


def to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Re-encoding as PNG keeps transparency and normalises palette modes.
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)
