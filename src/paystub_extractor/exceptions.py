"""Error taxonomy for paystub extraction.

Only two conditions abort an extraction: no text could be acquired from the
document, or neither gross nor net pay could be found. Single-field misses are
not errors; they leave the field at its zero/empty default.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from paystub_extractor.extractors.schemas import ExtractionResult


class ExtractionError(Exception):
    """Base class for all paystub extraction failures."""


class AcquisitionError(ExtractionError):
    """No text could be obtained from the document by any strategy."""


class ValidationError(ExtractionError):
    """Extraction finished but produced no usable pay amounts.

    The partially filled result is attached so callers can still inspect
    what was found.
    """

    def __init__(self, message: str, result: ExtractionResult | None = None):
        super().__init__(message)
        self.result = result


class ExternalToolError(ExtractionError):
    """An external utility (pdftotext, rasterizer, OCR engine) failed.

    Raised by acquisition fallbacks and always handled inside the acquisition
    strategy, which moves on to the next fallback.
    """
