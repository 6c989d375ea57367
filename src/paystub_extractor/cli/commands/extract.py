"""Extraction commands for the paystub extractor CLI.

This module provides commands for extracting paystub data from single
documents, plain-text dumps and batches of documents.
"""

import json
import logging
from enum import Enum
from pathlib import Path

import typer

from paystub_extractor.exceptions import ExtractionError
from paystub_extractor.extractors.batch import batch_to_dataframe, extract_batch
from paystub_extractor.extractors.paystub import PaystubExtractor
from paystub_extractor.extractors.schemas import BatchEntry, ExtractionResult
from paystub_extractor.utils.file import read_document

app = typer.Typer(help="Extract structured data from paystubs")
logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    JSON = "json"
    PRETTY = "pretty"
    SUMMARY = "summary"


def format_summary(result: ExtractionResult) -> str:
    """Render a human-readable summary of an extraction result."""
    lines = ["", "=== Paystub Extraction Summary ==="]
    lines.append(f"Employer:      {result.employer.name or '-'}")
    lines.append(f"Employee:      {result.employee.name or '-'}")
    if result.pay_period_start or result.pay_period_end:
        lines.append(
            f"Pay Period:    {result.pay_period_start or '?'} to "
            f"{result.pay_period_end or '?'}"
        )
    if result.pay_date:
        lines.append(f"Pay Date:      {result.pay_date}")
    lines.append(f"Frequency:     {result.pay_frequency.value}")
    lines.append("")
    lines.append(f"Gross Pay:     ${result.gross_pay:,.2f}")
    lines.append(f"Net Pay:       ${result.net_pay:,.2f}")
    total_deductions = result.gross_pay - result.net_pay
    if total_deductions > 0:
        lines.append(f"Deductions:    ${total_deductions:,.2f}")

    if result.earnings:
        lines.append("")
        lines.append("Earnings:")
        for earning in result.earnings:
            detail = ""
            if earning.hours is not None and earning.rate is not None:
                detail = f" ({earning.hours} hrs @ ${earning.rate:,.2f})"
            elif earning.hours is not None:
                detail = f" ({earning.hours} hrs)"
            lines.append(f"  - {earning.description}: ${earning.amount:,.2f}{detail}")

    if result.deductions:
        lines.append("")
        lines.append("Deductions:")
        for deduction in result.deductions:
            marker = " (pre-tax)" if deduction.pre_tax else ""
            lines.append(
                f"  - {deduction.description}: ${deduction.amount:,.2f}{marker}"
            )

    if result.taxes:
        lines.append("")
        lines.append("Taxes:")
        for tax in result.taxes:
            lines.append(f"  - {tax.description}: ${tax.amount:,.2f}")

    lines.append("")
    lines.append(f"Confidence:    {result.confidence_score:.1%}")
    return "\n".join(lines)


def _render(result: ExtractionResult, output: OutputFormat) -> str:
    if output is OutputFormat.SUMMARY:
        return format_summary(result)
    indent = 2 if output is OutputFormat.PRETTY else None
    return json.dumps(result.to_json_dict(), indent=indent)


@app.command("file")
def extract_file(
    file_path: Path = typer.Argument(..., help="Paystub PDF or image"),
    ocr: bool | None = typer.Option(
        None, "--ocr/--no-ocr", help="Override the configured OCR setting"
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.JSON, "--output", "-o", help="Output format"
    ),
) -> None:
    """Extract paystub data from a PDF or image file.

    Example:
        paystub extract file ~/Downloads/paystub.pdf --output summary
    """
    try:
        result = PaystubExtractor().extract_from_file(file_path, enable_ocr=ocr)
    except FileNotFoundError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e
    except ExtractionError as e:
        logger.error(f"❌ Extraction failed: {e}")
        raise typer.Exit(1) from e

    print(_render(result, output))


@app.command("text")
def extract_text(
    file_path: Path = typer.Argument(..., help="Plain-text dump of a paystub"),
    output: OutputFormat = typer.Option(
        OutputFormat.JSON, "--output", "-o", help="Output format"
    ),
) -> None:
    """Run the extraction pipeline on already-extracted text.

    Example:
        paystub extract text paystub.txt --output pretty
    """
    try:
        text = read_document(file_path).decode("utf-8", errors="replace")
        result = PaystubExtractor().extract_from_text(text)
    except FileNotFoundError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e
    except ExtractionError as e:
        logger.error(f"❌ Extraction failed: {e}")
        raise typer.Exit(1) from e

    print(_render(result, output))


@app.command("batch")
def extract_many(
    file_paths: list[Path] = typer.Argument(..., help="Paystub files"),
    ocr: bool | None = typer.Option(
        None, "--ocr/--no-ocr", help="Override the configured OCR setting"
    ),
) -> None:
    """Extract several paystubs and print one entry per file.

    Exits with status 1 when no document succeeded.

    Example:
        paystub extract batch jan.pdf feb.pdf mar.pdf
    """
    documents: list[tuple[str, bytes]] = []
    missing: dict[int, BatchEntry] = {}
    for i, path in enumerate(file_paths):
        try:
            documents.append((path.name, read_document(path)))
        except FileNotFoundError as e:
            logger.warning(f"⚠️  {e}")
            missing[i] = BatchEntry(filename=path.name, success=False, error=str(e))

    try:
        entries = iter(extract_batch(documents, enable_ocr=ocr))
    except ValueError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(1) from e

    # Unreadable files keep their command-line position
    ordered = [
        missing[i] if i in missing else next(entries) for i in range(len(file_paths))
    ]

    print(json.dumps([entry.to_json_dict() for entry in ordered], indent=2))
    logger.info(f"📄 Batch summary:\n{batch_to_dataframe(ordered)}")

    if not any(entry.success for entry in ordered):
        logger.error("❌ No documents were extracted")
        raise typer.Exit(1)
