"""Paystub extraction pipeline.

Runs the stages in a fixed order: text acquisition, provider classification,
pattern matching, structured field extraction, pay-frequency inference,
confidence scoring and validation.
"""

import logging
from pathlib import Path

from ..config import PaystubSettings, get_settings
from ..exceptions import AcquisitionError
from ..utils.file import detect_document_kind, document_digest, read_document
from .acquisition import TextAcquirer
from .classifier import ProviderClassifier
from .fields import FieldExtractor
from .frequency import infer_pay_frequency
from .matcher import PatternMatcher
from .normalize import normalize_text
from .patterns import PatternLibrary, default_pattern_library
from .schemas import ExtractionResult
from .scoring import calculate_confidence, validate_result

logger = logging.getLogger(__name__)


class PaystubExtractor:
    """Extract structured pay data from paystub documents.

    The pattern library and classifier are immutable and may be shared
    between extractors and threads.
    """

    def __init__(
        self,
        library: PatternLibrary | None = None,
        settings: PaystubSettings | None = None,
        acquirer: TextAcquirer | None = None,
        classifier: ProviderClassifier | None = None,
    ):
        """Initialize the paystub extractor.

        Args:
            library: Provider pattern library; defaults to the standard one
            settings: Application settings; defaults to the environment
            acquirer: Text acquisition chain; built from settings if omitted
            classifier: Provider classifier
        """
        self.settings = settings or get_settings()
        self.library = library or default_pattern_library()
        self.classifier = classifier or ProviderClassifier()
        self.matcher = PatternMatcher(self.library)
        self.fields = FieldExtractor()
        self.acquirer = acquirer or TextAcquirer(
            self.settings.ocr, self.settings.acquisition
        )

    def extract_from_file(
        self, file_path: Path | str, enable_ocr: bool | None = None
    ) -> ExtractionResult:
        """Extract paystub data from a PDF or image file.

        Args:
            file_path: Path to the document
            enable_ocr: Override the configured OCR setting

        Returns:
            ExtractionResult: Validated extraction result

        Raises:
            FileNotFoundError: If the file doesn't exist
            AcquisitionError: If no text could be obtained
            ValidationError: If no pay amounts were found
        """
        logger.info(f"Extracting paystub data from: {file_path}")
        return self.extract_from_bytes(read_document(file_path), enable_ocr=enable_ocr)

    def extract_from_bytes(
        self,
        data: bytes,
        content_type: str | None = None,
        enable_ocr: bool | None = None,
    ) -> ExtractionResult:
        """Extract paystub data from raw document bytes.

        Args:
            data: PDF or image content
            content_type: Optional MIME type from the caller
            enable_ocr: Override the configured OCR setting

        Returns:
            ExtractionResult: Validated extraction result

        Raises:
            AcquisitionError: If no text could be obtained
            ValidationError: If no pay amounts were found
        """
        if not data:
            raise AcquisitionError("empty document provided")

        kind = detect_document_kind(data, content_type)
        request_id = document_digest(data, length=8)

        # Filled when native text alone was confident enough to skip OCR
        native_results: list[ExtractionResult] = []

        def skip_ocr(native_text: str) -> bool:
            parsed = self._confident_native_result(native_text)
            if parsed is None:
                return False
            native_results.append(parsed)
            return True

        if kind == "image":
            acquired = self.acquirer.acquire_image(data, enable_ocr=enable_ocr)
        else:
            if kind == "unknown":
                logger.warning("⚠️  Unrecognized document type, treating it as a PDF")
            acquired = self.acquirer.acquire(
                data,
                enable_ocr=enable_ocr,
                skip_ocr=skip_ocr,
                request_id=request_id,
            )

        if native_results and not acquired.ocr_used:
            result = self._finish(native_results[0])
        else:
            result = self.extract_from_text(acquired.text)
        result.ocr_used = acquired.ocr_used
        return result

    def extract_from_text(self, text: str) -> ExtractionResult:
        """Run the pipeline on already-acquired text.

        Raises:
            AcquisitionError: If the text is empty
            ValidationError: If no pay amounts were found
        """
        if not text or not text.strip():
            raise AcquisitionError("empty text provided")

        return self._finish(self._parse(text))

    def _finish(self, result: ExtractionResult) -> ExtractionResult:
        result = validate_result(result)
        logger.info(
            f"✅ Extracted paystub ({result.provider}): gross {result.gross_pay}, "
            f"net {result.net_pay}, confidence {result.confidence_score:.0%}"
        )
        return result

    def _parse(self, text: str) -> ExtractionResult:
        normalized = normalize_text(text)
        result = ExtractionResult(raw_text=text)

        result.provider = self.classifier.detect(normalized)
        matches = self.matcher.match(normalized, result.provider)
        self.fields.extract(normalized, matches, result)
        result.pay_frequency = infer_pay_frequency(
            result.pay_period_start, result.pay_period_end, normalized
        )
        result.confidence_score = calculate_confidence(result)
        return result

    def _confident_native_result(self, native_text: str) -> ExtractionResult | None:
        """Parse native text and return it when it is good enough to skip OCR."""
        config = self.settings.acquisition
        text = native_text.strip()
        if len(text) <= config.ocr_skip_min_chars:
            return None
        result = self._parse(text)
        logger.debug(f"Native-only extraction confidence: {result.confidence_score:.2f}")
        if result.confidence_score > config.ocr_skip_confidence:
            return result
        return None


def extract_paystub_file(
    file_path: Path | str, enable_ocr: bool | None = None
) -> ExtractionResult:
    """Convenience function to extract a paystub file.

    Args:
        file_path: Path to the paystub PDF or image
        enable_ocr: Override the configured OCR setting

    Returns:
        ExtractionResult: Validated extraction result
    """
    extractor = PaystubExtractor()
    return extractor.extract_from_file(Path(file_path), enable_ocr=enable_ocr)
