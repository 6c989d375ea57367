"""Tests for the end-to-end paystub extraction pipeline."""

import io
from collections.abc import Callable
from decimal import Decimal
from pathlib import Path

import pytest
from PIL import Image

from paystub_extractor.config import PaystubSettings
from paystub_extractor.exceptions import AcquisitionError, ValidationError
from paystub_extractor.extractors.acquisition import OCREngine, TextAcquirer
from paystub_extractor.extractors.paystub import PaystubExtractor
from paystub_extractor.extractors.schemas import PayFrequency, TaxItem


class ScriptedEngine(OCREngine):
    """OCR engine that returns fixed text for every image."""

    name = "scripted"

    def __init__(self, text: str):
        self.text = text
        self.calls = 0

    def available(self) -> bool:
        return True

    def invoke(self, image: Path | Image.Image) -> str:
        self.calls += 1
        return self.text


@pytest.fixture
def extractor(no_ocr_settings: PaystubSettings) -> PaystubExtractor:
    """Extractor that never shells out to OCR."""
    return PaystubExtractor(settings=no_ocr_settings)


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


class TestExtractFromText:
    """Pipeline behavior on already-acquired text."""

    @pytest.mark.unit
    def test_minimal_semi_monthly_paystub(self, extractor: PaystubExtractor) -> None:
        text = (
            "Gross Pay: $2,375.00\n"
            "Net Pay: $1,592.06\n"
            "Pay Period: 01/01/2024 - 01/15/2024"
        )

        result = extractor.extract_from_text(text)

        assert result.gross_pay == Decimal("2375.00")
        assert result.net_pay == Decimal("1592.06")
        assert result.pay_period_start == "2024-01-01"
        assert result.pay_period_end == "2024-01-15"
        assert result.pay_frequency == PayFrequency.SEMI_MONTHLY
        assert result.confidence_score == pytest.approx(0.6)

    @pytest.mark.unit
    def test_complete_paystub(
        self, extractor: PaystubExtractor, sample_text: str
    ) -> None:
        result = extractor.extract_from_text(sample_text)

        assert result.provider == "Generic"
        assert result.gross_pay == Decimal("2375.00")
        assert result.net_pay == Decimal("1592.06")
        assert result.pay_period_start == "2024-01-08"
        assert result.pay_period_end == "2024-01-21"
        assert result.pay_date == "2024-01-26"
        assert result.pay_frequency == PayFrequency.BIWEEKLY

        assert result.employer.name == "ACME CORPORATION"
        assert result.employer.address == "123 Main Street, Springfield, IL 62701"
        assert result.employer.ein == "12-3456789"
        assert result.employee.name == "John Doe"
        assert result.employee.employee_id == "EMP12345"
        assert result.employee.ssn_last4 == "6789"

        assert [e.amount for e in result.earnings] == [
            Decimal("2000.00"),
            Decimal("375.00"),
        ]
        assert [d.amount for d in result.deductions] == [
            Decimal("125.00"),
            Decimal("150.00"),
        ]
        assert all(d.pre_tax for d in result.deductions)
        assert sum(t.amount for t in result.taxes) == Decimal("561.69")
        assert result.ytd == {"gross": Decimal("4750.00")}
        assert result.confidence_score == pytest.approx(1.0)

    @pytest.mark.unit
    def test_raw_text_is_kept_but_not_serialized(
        self, extractor: PaystubExtractor, sample_text: str
    ) -> None:
        result = extractor.extract_from_text(sample_text)

        assert result.raw_text == sample_text
        assert "raw_text" not in result.to_json_dict()

    @pytest.mark.unit
    @pytest.mark.parametrize("text", ["", "   \n\t  "])
    def test_empty_text_rejected(self, extractor: PaystubExtractor, text: str) -> None:
        with pytest.raises(AcquisitionError, match="empty text"):
            extractor.extract_from_text(text)

    @pytest.mark.unit
    def test_missing_amounts_carry_partial_result(
        self, extractor: PaystubExtractor
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            extractor.extract_from_text("ACME CORPORATION\nEmployee Name: Jane Roe\n")

        partial = exc_info.value.result
        assert partial is not None
        assert partial.employer.name == "ACME CORPORATION"
        assert partial.employee.name == "Jane Roe"

    @pytest.mark.unit
    def test_net_above_gross_is_swapped(self, extractor: PaystubExtractor) -> None:
        result = extractor.extract_from_text(
            "Gross Pay: $1,000.00\nNet Pay: $1,500.00\n"
        )

        assert result.gross_pay == Decimal("1500.00")
        assert result.net_pay == Decimal("1000.00")

    @pytest.mark.unit
    def test_provider_patterns_are_used(self, extractor: PaystubExtractor) -> None:
        result = extractor.extract_from_text(
            "ADP Earnings Statement\n"
            "Gross Earnings: $3,000.00\n"
            "Net Pay: $2,200.00\n"
        )

        assert result.provider == "ADP"
        assert result.gross_pay == Decimal("3000.00")
        assert result.net_pay == Decimal("2200.00")

    @pytest.mark.unit
    def test_withholding_lines_are_taxes(self, extractor: PaystubExtractor) -> None:
        result = extractor.extract_from_text(
            "Gross Pay: $1,000.00\nNet Pay: $800.00\nFederal Withholding: $120.00\n"
        )

        assert result.taxes == [
            TaxItem(description="Federal Withholding", amount=Decimal("120.00"))
        ]

    @pytest.mark.unit
    def test_taxes_after_taxable_wage_lines(self, extractor: PaystubExtractor) -> None:
        result = extractor.extract_from_text(
            "Gross Pay: $2,000.00\n"
            "Net Pay: $1,600.00\n"
            "Medicare Taxable Wages 2,000.00\n"
            "Federal Income Tax 200.00\n"
            "Medicare Tax 29.00\n"
            "Social Security Tax 124.00\n"
        )

        assert [tax.description for tax in result.taxes] == [
            "Federal Income Tax",
            "Medicare Tax",
            "Social Security Tax",
        ]


class TestExtractFromDocuments:
    """Pipeline behavior starting from files and bytes."""

    @pytest.mark.unit
    def test_missing_file(self, extractor: PaystubExtractor, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            extractor.extract_from_file(tmp_path / "missing.pdf")

    @pytest.mark.unit
    def test_empty_bytes_rejected(self, extractor: PaystubExtractor) -> None:
        with pytest.raises(AcquisitionError, match="empty document"):
            extractor.extract_from_bytes(b"")

    @pytest.mark.integration
    def test_native_text_pdf(
        self, extractor: PaystubExtractor, sample_pdf: Path
    ) -> None:
        result = extractor.extract_from_file(sample_pdf)

        assert result.gross_pay == Decimal("2375.00")
        assert result.net_pay == Decimal("1592.06")
        assert result.pay_period_start == "2024-01-08"
        assert result.ocr_used is False

    @pytest.mark.integration
    def test_confident_native_text_skips_ocr(
        self, sample_pdf: Path, mocker
    ) -> None:
        extractor = PaystubExtractor(settings=PaystubSettings())
        ocr_text = mocker.patch.object(extractor.acquirer, "ocr_text")

        result = extractor.extract_from_file(sample_pdf)

        ocr_text.assert_not_called()
        assert result.ocr_used is False

    @pytest.mark.integration
    def test_skipped_ocr_parses_native_text_once(
        self, sample_pdf: Path, mocker
    ) -> None:
        extractor = PaystubExtractor(settings=PaystubSettings())
        ocr_text = mocker.patch.object(extractor.acquirer, "ocr_text")
        parse = mocker.patch.object(extractor, "_parse", wraps=extractor._parse)

        result = extractor.extract_from_file(sample_pdf)

        ocr_text.assert_not_called()
        assert parse.call_count == 1
        assert result.gross_pay > 0

    @pytest.mark.integration
    def test_weak_native_text_falls_back_to_ocr(
        self, pdf_factory: Callable[[str, str], Path], mocker
    ) -> None:
        settings = PaystubSettings()
        acquirer = TextAcquirer(
            settings.ocr, settings.acquisition, plain_text_sources=[]
        )
        extractor = PaystubExtractor(settings=settings, acquirer=acquirer)
        mocker.patch.object(acquirer, "ocr_text", return_value="Net Pay: $80.00")

        result = extractor.extract_from_file(
            pdf_factory("weak.pdf", "Gross Pay: $100.00")
        )

        acquirer.ocr_text.assert_called_once()
        assert result.ocr_used is True
        assert result.gross_pay == Decimal("100.00")
        assert result.net_pay == Decimal("80.00")

    @pytest.mark.unit
    def test_image_document_goes_through_ocr(self, sample_text: str) -> None:
        engine = ScriptedEngine(sample_text)
        extractor = PaystubExtractor(
            settings=PaystubSettings(), acquirer=TextAcquirer(ocr_engine=engine)
        )

        result = extractor.extract_from_bytes(png_bytes())

        assert engine.calls == 1
        assert result.ocr_used is True
        assert result.net_pay == Decimal("1592.06")

    @pytest.mark.unit
    def test_image_document_without_ocr(self, extractor: PaystubExtractor) -> None:
        with pytest.raises(AcquisitionError, match="OCR is disabled"):
            extractor.extract_from_bytes(png_bytes())

    @pytest.mark.unit
    def test_content_type_overrides_sniffing(
        self, extractor: PaystubExtractor, mocker
    ) -> None:
        acquire_image = mocker.patch.object(extractor.acquirer, "acquire_image")
        acquire_image.return_value.text = "Gross Pay: $10.00"
        acquire_image.return_value.ocr_used = True

        result = extractor.extract_from_bytes(b"not-really", content_type="image/png")

        acquire_image.assert_called_once()
        assert result.gross_pay == Decimal("10.00")
