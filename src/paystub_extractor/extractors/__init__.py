"""Paystub extraction pipeline.

This package turns paystub documents into structured ExtractionResult
records: text acquisition, provider detection, pattern matching, field
extraction, pay-frequency inference and confidence scoring.
"""

from .batch import batch_to_dataframe, extract_batch
from .paystub import PaystubExtractor, extract_paystub_file
from .patterns import PatternLibrary, PatternLibraryBuilder, default_pattern_library
from .schemas import BatchEntry, ExtractionResult, PayFrequency

__all__ = [
    "BatchEntry",
    "ExtractionResult",
    "PatternLibrary",
    "PatternLibraryBuilder",
    "PayFrequency",
    "PaystubExtractor",
    "batch_to_dataframe",
    "default_pattern_library",
    "extract_batch",
    "extract_paystub_file",
]
