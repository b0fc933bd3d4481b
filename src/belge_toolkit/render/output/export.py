"""
Module: render.output.export

Purpose:
    Hand a finished render to its consumer: write it to disk (download),
    encode it for an in-browser viewer (preview), or pass it to a storage
    collaborator (upload). The engine itself never stores documents.

Key Functions:
    - suggested_filename(): "<name>-<record id>.pdf"
    - write_document(): Save bytes under a directory
    - to_data_uri(): base64 data URI for previews
    - upload_document(): Forward bytes to a DocumentUploader

Key Classes:
    - DocumentUploader: Abstract storage collaborator

Used By:
    - Application code after RenderPipeline.render()
"""

from __future__ import annotations

import base64
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from belge_toolkit.render.result import RenderResult

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "application/pdf": ".pdf",
}
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class DocumentUploader(ABC):
    """Storage collaborator that keeps rendered documents."""

    @abstractmethod
    def upload(self, filename: str, content: bytes, media_type: str) -> str:
        """
        Store a document.

        Returns:
            Location of the stored document (URL or storage key)
        """


def _safe(part: str) -> str:
    return _UNSAFE.sub("-", part).strip("-") or "belge"


def suggested_filename(
    result: RenderResult,
    record_id: Optional[str] = None,
    prefix: Optional[str] = None,
) -> str:
    """
    Build a download filename.

    Example:
        >>> suggested_filename(result, "TKL-2024-001", prefix="teklif")
        'teklif-TKL-2024-001.pdf'
    """
    stem = _safe(prefix or result.template_id)
    if record_id:
        stem = f"{stem}-{_safe(str(record_id))}"
    return stem + _EXTENSIONS.get(result.media_type, ".bin")


def write_document(
    result: RenderResult,
    output_dir: Path,
    filename: Optional[str] = None,
) -> Path:
    """
    Write the rendered document under ``output_dir``.

    Returns:
        Path of the written file

    Raises:
        ValueError: If filename tries to leave output_dir
        OSError: If the file cannot be written
    """
    name = filename or suggested_filename(result)
    if Path(name).name != name:
        raise ValueError(f"filename must not contain directories: {name!r}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / name
    path.write_bytes(result.content)
    logger.info(f"Wrote {result.page_count} page(s), {result.size} bytes to {path}")
    return path


def to_data_uri(result: RenderResult) -> str:
    """Encode the document for an inline viewer (iframe/object src)."""
    payload = base64.b64encode(result.content).decode("ascii")
    return f"data:{result.media_type};base64,{payload}"


def upload_document(
    result: RenderResult,
    uploader: DocumentUploader,
    filename: Optional[str] = None,
) -> str:
    """
    Pass the document to a storage collaborator.

    Returns:
        Location reported by the uploader
    """
    name = filename or suggested_filename(result)
    location = uploader.upload(name, result.content, result.media_type)
    logger.info(f"Uploaded {name} ({result.size} bytes) to {location}")
    return location
