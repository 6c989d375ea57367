"""Text acquisition for paystub documents.

Text is obtained through an ordered fallback chain:

1. Native text extraction with pdfplumber
2. The ``pdftotext -layout`` utility when native text is too short
3. OCR: pages are rasterized (pdf2image/poppler, ImageMagick, Ghostscript)
   and read with Tesseract through pytesseract

Every external fallback exposes ``available()`` and ``invoke()``. A failing
``invoke()`` raises ExternalToolError, which is logged here and never leaves
this module. Temporary files live in a per-call directory that is removed on
every exit path.

Documentation:
- pdfplumber: https://pdfplumber.readthedocs.io/
- pdf2image: https://github.com/Belval/pdf2image
- pytesseract: https://github.com/madmaze/pytesseract
"""

import io
import logging
import os
import shutil
import subprocess  # noqa: S404
import tempfile
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import pdfplumber
import pytesseract
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)
from PIL import Image, ImageSequence, UnidentifiedImageError

from ..config import AcquisitionConfig, OCRConfig
from ..exceptions import AcquisitionError, ExternalToolError

logger = logging.getLogger(__name__)


@dataclass
class AcquiredText:
    """Text obtained from a document."""

    text: str
    ocr_used: bool = False


class ExternalTool(ABC):
    """A fallback that may not be installed on every host."""

    name: str = "tool"

    @abstractmethod
    def available(self) -> bool:
        """Check whether the tool can run on this host."""


class PlainTextSource(ExternalTool):
    """Extracts plain text from a PDF file."""

    @abstractmethod
    def invoke(self, pdf_path: Path) -> str:
        """Return the document text.

        Raises:
            ExternalToolError: If the tool fails
        """


class Rasterizer(ExternalTool):
    """Renders PDF pages to image files."""

    @abstractmethod
    def invoke(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        """Render every page and return the image paths in page order.

        Raises:
            ExternalToolError: If rendering fails
        """


class OCREngine(ExternalTool):
    """Reads text from a page image."""

    @abstractmethod
    def invoke(self, image: Path | Image.Image) -> str:
        """Return the recognized text.

        Raises:
            ExternalToolError: If recognition fails
        """


def _run(cmd: list[str], tool: str) -> str:
    try:
        process = subprocess.run(cmd, capture_output=True, text=True, check=True)  # noqa: S603
    except subprocess.CalledProcessError as e:
        raise ExternalToolError(
            f"{tool} exited with {e.returncode}: {(e.stderr or '').strip()}"
        ) from e
    except OSError as e:
        raise ExternalToolError(f"{tool} could not be started: {e}") from e
    return process.stdout


class PdftotextSource(PlainTextSource):
    """Poppler's pdftotext in layout mode."""

    name = "pdftotext"

    def available(self) -> bool:
        return shutil.which("pdftotext") is not None

    def invoke(self, pdf_path: Path) -> str:
        return _run(["pdftotext", "-layout", str(pdf_path), "-"], self.name)


class Pdf2ImageRasterizer(Rasterizer):
    """Poppler rasterization through pdf2image."""

    name = "pdf2image"

    def available(self) -> bool:
        return shutil.which("pdftoppm") is not None

    def invoke(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        try:
            paths = convert_from_path(
                str(pdf_path),
                dpi=dpi,
                output_folder=str(output_dir),
                fmt="png",
                paths_only=True,
            )
        except (
            PDFInfoNotInstalledError,
            PDFPageCountError,
            PDFSyntaxError,
            OSError,
        ) as e:
            raise ExternalToolError(f"pdf2image failed: {e}") from e
        return sorted(Path(p) for p in paths)


class ImageMagickRasterizer(Rasterizer):
    """ImageMagick ``magick`` (v7) or ``convert`` (v6)."""

    name = "imagemagick"

    def _binary(self) -> str | None:
        return shutil.which("magick") or shutil.which("convert")

    def available(self) -> bool:
        return self._binary() is not None

    def invoke(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        binary = self._binary()
        if binary is None:
            raise ExternalToolError("ImageMagick is not installed")
        output_pattern = str(output_dir / "page-%03d.png")
        _run([binary, "-density", str(dpi), str(pdf_path), output_pattern], self.name)
        return sorted(output_dir.glob("page-*.png"))


class GhostscriptRasterizer(Rasterizer):
    name = "ghostscript"

    def available(self) -> bool:
        return shutil.which("gs") is not None

    def invoke(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        _run(
            [
                "gs",
                "-q",
                "-dNOPAUSE",
                "-dBATCH",
                "-dSAFER",
                "-sDEVICE=png16m",
                f"-r{dpi}",
                f"-sOutputFile={output_dir / 'page-%03d.png'}",
                str(pdf_path),
            ],
            self.name,
        )
        return sorted(output_dir.glob("page-*.png"))


class TesseractEngine(OCREngine):
    """Tesseract OCR through pytesseract."""

    name = "tesseract"

    def __init__(self, languages: Sequence[str] = ("eng",), page_seg_mode: int = 3):
        self.lang = "+".join(languages)
        self.page_seg_mode = page_seg_mode

    def available(self) -> bool:
        try:
            pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError):
            return False
        return True

    def invoke(self, image: Path | Image.Image) -> str:
        try:
            if isinstance(image, Path):
                with Image.open(image) as page:
                    return self._recognize(page)
            return self._recognize(image)
        except (
            pytesseract.TesseractError,
            pytesseract.TesseractNotFoundError,
            UnidentifiedImageError,
            OSError,
        ) as e:
            raise ExternalToolError(f"Tesseract failed: {e}") from e

    def _recognize(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(  # type: ignore[reportUnknownMemberType] - pytesseract has incomplete type stubs
            image, lang=self.lang, config=f"--psm {self.page_seg_mode}"
        )


def default_rasterizers() -> list[Rasterizer]:
    return [Pdf2ImageRasterizer(), ImageMagickRasterizer(), GhostscriptRasterizer()]


class TextAcquirer:
    """Runs the acquisition fallback chain for one document at a time."""

    def __init__(
        self,
        ocr_config: OCRConfig | None = None,
        acquisition_config: AcquisitionConfig | None = None,
        plain_text_sources: Sequence[PlainTextSource] | None = None,
        rasterizers: Sequence[Rasterizer] | None = None,
        ocr_engine: OCREngine | None = None,
    ):
        """Initialize the acquirer.

        Args:
            ocr_config: OCR settings (languages, dpi, segmentation mode)
            acquisition_config: Thresholds and temporary directory location
            plain_text_sources: Fallbacks tried when native text is too short
            rasterizers: Page renderers, tried in order until one succeeds
            ocr_engine: Engine used on rendered pages and image documents
        """
        self.ocr_config = ocr_config or OCRConfig()
        self.config = acquisition_config or AcquisitionConfig()
        self.plain_text_sources = (
            list(plain_text_sources)
            if plain_text_sources is not None
            else [PdftotextSource()]
        )
        self.rasterizers = (
            list(rasterizers) if rasterizers is not None else default_rasterizers()
        )
        self.ocr_engine = ocr_engine or TesseractEngine(
            self.ocr_config.languages, self.ocr_config.page_seg_mode
        )

    @contextmanager
    def workspace(self, data: bytes, request_id: str | None = None) -> Iterator[Path]:
        """Write the document into a private temporary directory.

        Yields:
            Path: Path of the document copy; the directory is removed on exit
        """
        request_id = request_id or uuid.uuid4().hex[:8]
        temp_root = str(self.config.temp_dir) if self.config.temp_dir else None
        with tempfile.TemporaryDirectory(
            prefix=f"paystub_{os.getpid()}_{request_id}_", dir=temp_root
        ) as tmp:
            pdf_path = Path(tmp) / "document.pdf"
            pdf_path.write_bytes(data)
            yield pdf_path

    def acquire(
        self,
        data: bytes,
        enable_ocr: bool | None = None,
        skip_ocr: Callable[[str], bool] | None = None,
        request_id: str | None = None,
    ) -> AcquiredText:
        """Obtain text from PDF bytes.

        Args:
            data: Raw PDF bytes
            enable_ocr: Run the OCR pass; defaults to the OCR configuration
            skip_ocr: Called with the native text; returning True skips OCR
            request_id: Identifier used in the temporary directory name

        Returns:
            AcquiredText: Combined native and OCR text

        Raises:
            AcquisitionError: If no strategy produced any text
        """
        if enable_ocr is None:
            enable_ocr = self.ocr_config.enabled

        with self.workspace(data, request_id) as pdf_path:
            native = self.native_text(pdf_path)
            if len(native.strip()) < self.config.min_text_length:
                native = self.plain_text_fallback(pdf_path) or native

            ocr = ""
            if enable_ocr:
                if skip_ocr is not None and skip_ocr(native):
                    logger.info("✅ Native text is sufficient, skipping OCR")
                else:
                    ocr = self.ocr_text(pdf_path)

        parts = [part for part in (native.strip(), ocr.strip()) if part]
        if not parts:
            raise AcquisitionError("unable to extract meaningful data")
        return AcquiredText(text="\n".join(parts), ocr_used=bool(ocr.strip()))

    def acquire_image(self, data: bytes, enable_ocr: bool | None = None) -> AcquiredText:
        """Obtain text from an image document with OCR.

        Raises:
            AcquisitionError: If OCR is disabled or reads nothing
        """
        if enable_ocr is None:
            enable_ocr = self.ocr_config.enabled
        if not enable_ocr:
            raise AcquisitionError("OCR is disabled; image documents need OCR")

        try:
            image = Image.open(io.BytesIO(data))
        except (UnidentifiedImageError, OSError) as e:
            raise AcquisitionError(f"Unreadable image: {e}") from e

        pages = []
        with image:
            for i, frame in enumerate(ImageSequence.Iterator(image)):
                try:
                    pages.append(self.ocr_engine.invoke(frame.convert("RGB")))
                except ExternalToolError as e:
                    logger.warning(f"OCR failed on image frame {i + 1}: {e}")

        text = "\n".join(p.strip() for p in pages if p.strip())
        if not text:
            raise AcquisitionError("unable to extract meaningful data")
        return AcquiredText(text=text, ocr_used=True)

    def native_text(self, pdf_path: Path) -> str:
        """Extract embedded text with pdfplumber, skipping unreadable pages."""
        logger.debug("📄 Attempting native text extraction...")
        pages: list[str] = []
        try:
            with pdfplumber.open(pdf_path) as pdf:
                for i, page in enumerate(pdf.pages):
                    try:
                        pages.append(page.extract_text() or "")
                    except Exception as e:
                        logger.debug(f"Skipping unreadable page {i + 1}: {e}")
        except Exception as e:
            logger.warning(f"Native text extraction failed: {e}")
            return ""

        text = "\n".join(pages)
        logger.debug(f"Extracted {len(text)} characters via native text")
        return text

    def plain_text_fallback(self, pdf_path: Path) -> str:
        for source in self.plain_text_sources:
            if not source.available():
                logger.debug(f"{source.name} is not available")
                continue
            try:
                text = source.invoke(pdf_path)
            except ExternalToolError as e:
                logger.warning(f"⚠️  {source.name} failed: {e}")
                continue
            if text.strip():
                logger.debug(f"Extracted {len(text)} characters via {source.name}")
                return text
        return ""

    def ocr_text(self, pdf_path: Path) -> str:
        """Rasterize the PDF and OCR each page.

        Pages that fail OCR are skipped. Returns an empty string when no
        rasterizer or OCR engine is usable.
        """
        logger.info("🔍 Attempting OCR extraction...")
        if not self.ocr_engine.available():
            logger.warning(f"⚠️  OCR engine {self.ocr_engine.name} is not available")
            return ""

        images = self.rasterize(pdf_path)
        pages: list[str] = []
        for i, image_path in enumerate(images):
            logger.debug(f"Performing OCR on page {i + 1}...")
            try:
                pages.append(self.ocr_engine.invoke(image_path))
            except ExternalToolError as e:
                logger.debug(f"Skipping page {i + 1}: {e}")

        text = "\n".join(p.strip() for p in pages if p.strip())
        logger.debug(f"Extracted {len(text)} characters via OCR")
        return text

    def rasterize(self, pdf_path: Path) -> list[Path]:
        for rasterizer in self.rasterizers:
            if not rasterizer.available():
                logger.debug(f"{rasterizer.name} is not available")
                continue
            output_dir = pdf_path.parent / rasterizer.name
            output_dir.mkdir(exist_ok=True)
            try:
                images = rasterizer.invoke(pdf_path, output_dir, self.ocr_config.dpi)
            except ExternalToolError as e:
                logger.warning(f"⚠️  {rasterizer.name} failed: {e}")
                continue
            if images:
                return images
        logger.warning("⚠️  No rasterizer produced page images")
        return []
