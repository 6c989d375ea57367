"""File utilities for the paystub extractor.

Handles reading documents from disk and identifying their type from content.
"""

import hashlib
import logging
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

DocumentKind = Literal["pdf", "image", "unknown"]

# Leading bytes of the image formats Tesseract reads
_IMAGE_SIGNATURES: tuple[bytes, ...] = (
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",  # JPEG
    b"II*\x00",  # TIFF little-endian
    b"MM\x00*",  # TIFF big-endian
    b"GIF87a",
    b"GIF89a",
    b"BM",
)


def read_document(file_path: Path | str) -> bytes:
    """Read a document from disk.

    Args:
        file_path: Path to the document

    Returns:
        bytes: Raw document content

    Raises:
        FileNotFoundError: If the file doesn't exist

    Examples:
        >>> read_document("~/Downloads/paystub.pdf")[:4]
        b'%PDF'
    """
    source_path = Path(file_path).expanduser().resolve()

    if not source_path.exists():
        raise FileNotFoundError(f"Document not found: {source_path}")

    data = source_path.read_bytes()
    logger.debug(f"Read {len(data):,} bytes from {source_path}")
    return data


def document_digest(data: bytes, length: int = 12) -> str:
    """Short SHA-256 digest of document content.

    Used to tag log lines and temporary files with a per-document identifier.

    Args:
        data: Raw document content
        length: Number of hex characters to keep

    Returns:
        str: Hex digest prefix
    """
    return hashlib.sha256(data).hexdigest()[:length]


def detect_document_kind(
    data: bytes, content_type: str | None = None
) -> DocumentKind:
    """Identify a document as PDF or image.

    An explicit content type wins; otherwise the leading bytes are inspected.

    Args:
        data: Raw document content
        content_type: Optional MIME type supplied by the caller

    Returns:
        DocumentKind: "pdf", "image", or "unknown"
    """
    if content_type:
        lowered = content_type.lower()
        if "pdf" in lowered:
            return "pdf"
        if lowered.startswith("image"):
            return "image"

    head = data[:16].lstrip()
    if head.startswith(b"%PDF"):
        return "pdf"
    if any(head.startswith(sig) for sig in _IMAGE_SIGNATURES):
        return "image"
    return "unknown"
