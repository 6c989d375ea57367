"""Utility modules for the paystub extractor.

This package provides shared helpers for reading and identifying documents.
"""

from .file import detect_document_kind, document_digest, read_document

__all__ = ["detect_document_kind", "document_digest", "read_document"]
