"""Shared pytest fixtures for paystub extractor tests.

This module provides sample paystub text, a reportlab-generated native-text
PDF, and settings isolation between tests.
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from paystub_extractor.config import OCRConfig, PaystubSettings, clear_settings_cache

SAMPLE_PAYSTUB_TEXT = """ACME CORPORATION
123 Main Street
Springfield, IL 62701
EIN: 12-3456789
Earnings Statement
Employee Name: John Doe
Employee ID: EMP12345
SSN: XXX-XX-6789
Pay Period: 01/08/2024 - 01/21/2024
Pay Date: 01/26/2024
Earnings
Regular Hours 80.00 @ $25.00 2,000.00
Overtime 10.00 @ $37.50 375.00
Gross Pay: $2,375.00
Deductions
Health Insurance (Pre-Tax) 125.00
401k Contribution 150.00
Taxes
Federal Income Tax 285.00
State Income Tax 95.00
Social Security 147.25
Medicare 34.44
Net Pay: $1,592.06
Gross Pay YTD: $4,750.00
"""


@pytest.fixture(autouse=True)
def clean_settings_state() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sample_text() -> str:
    """Complete paystub text with every field populated."""
    return SAMPLE_PAYSTUB_TEXT


@pytest.fixture
def no_ocr_settings() -> PaystubSettings:
    """Settings with OCR disabled."""
    return PaystubSettings(ocr=OCRConfig(enabled=False))


def write_text_pdf(path: Path, text: str) -> Path:
    """Render text into a single-page native-text PDF with reportlab."""
    from reportlab.lib.pagesizes import letter
    from reportlab.pdfgen import canvas

    pdf = canvas.Canvas(str(path), pagesize=letter)
    y = 750
    for line in text.splitlines():
        pdf.drawString(72, y, line)
        y -= 18
    pdf.showPage()
    pdf.save()
    return path


@pytest.fixture
def sample_pdf(tmp_path: Path, sample_text: str) -> Path:
    """Native-text PDF of the sample paystub."""
    return write_text_pdf(tmp_path / "paystub.pdf", sample_text)


@pytest.fixture
def pdf_factory(tmp_path: Path) -> Callable[[str, str], Path]:
    """Build native-text PDFs on demand: pdf_factory(name, text)."""

    def build(name: str, text: str) -> Path:
        return write_text_pdf(tmp_path / name, text)

    return build
