"""Batch extraction over several documents.

Each document is extracted independently; a failure becomes an error entry
instead of aborting the batch. Entries keep the input order.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import polars as pl

from ..exceptions import ExtractionError
from .paystub import PaystubExtractor
from .schemas import BatchEntry

logger = logging.getLogger(__name__)


def extract_batch(
    documents: Sequence[tuple[str, bytes]],
    extractor: PaystubExtractor | None = None,
    enable_ocr: bool | None = None,
) -> list[BatchEntry]:
    """Extract a batch of documents.

    Args:
        documents: (filename, content) pairs
        extractor: Extractor to use; a default one is created if omitted
        enable_ocr: Override the configured OCR setting

    Returns:
        list[BatchEntry]: One entry per document, in input order

    Raises:
        ValueError: If the batch exceeds the configured maximum size
    """
    extractor = extractor or PaystubExtractor()
    limits = extractor.settings.batch

    if len(documents) > limits.max_documents:
        raise ValueError(
            f"Batch of {len(documents)} documents exceeds the limit of "
            f"{limits.max_documents}"
        )

    def run(document: tuple[str, bytes]) -> BatchEntry:
        filename, data = document
        try:
            result = extractor.extract_from_bytes(data, enable_ocr=enable_ocr)
        except ExtractionError as e:
            logger.warning(f"⚠️  {filename}: {e}")
            return BatchEntry(filename=filename, success=False, error=str(e))
        except Exception as e:
            logger.error(f"❌ {filename}: unexpected extraction failure: {e}")
            return BatchEntry(filename=filename, success=False, error=str(e))
        return BatchEntry(filename=filename, success=True, data=result)

    logger.info(f"Extracting batch of {len(documents)} documents")
    if limits.max_workers > 1 and len(documents) > 1:
        with ThreadPoolExecutor(max_workers=limits.max_workers) as pool:
            entries = list(pool.map(run, documents))
    else:
        entries = [run(document) for document in documents]

    succeeded = sum(1 for entry in entries if entry.success)
    logger.info(f"✅ Batch complete: {succeeded}/{len(entries)} succeeded")
    return entries


def batch_to_dataframe(entries: Sequence[BatchEntry]) -> pl.DataFrame:
    """Summarize batch entries as a DataFrame, one row per document."""
    rows = []
    for entry in entries:
        data = entry.data
        rows.append(
            {
                "filename": entry.filename,
                "success": entry.success,
                "employer": data.employer.name if data else None,
                "pay_date": data.pay_date if data else None,
                "gross_pay": float(data.gross_pay) if data else None,
                "net_pay": float(data.net_pay) if data else None,
                "pay_frequency": data.pay_frequency.value if data else None,
                "confidence": data.confidence_score if data else None,
                "error": entry.error,
            }
        )
    schema = {
        "filename": pl.Utf8,
        "success": pl.Boolean,
        "employer": pl.Utf8,
        "pay_date": pl.Utf8,
        "gross_pay": pl.Float64,
        "net_pay": pl.Float64,
        "pay_frequency": pl.Utf8,
        "confidence": pl.Float64,
        "error": pl.Utf8,
    }
    return pl.DataFrame(rows, schema=schema)
