"""Configuration commands for the paystub extractor CLI."""

import json

import typer

from paystub_extractor.config import get_settings
from paystub_extractor.logging import get_log_config_summary

app = typer.Typer(
    name="config",
    help="Configuration inspection",
    no_args_is_help=True,
)


@app.command("show")
def show_config(
    as_json: bool = typer.Option(False, "--json", help="Print settings as JSON"),
) -> None:
    """Show the effective settings.

    Settings come from PAYSTUB_* environment variables and the .env file.

    Example:
        paystub config show
    """
    settings = get_settings()

    if as_json:
        print(json.dumps(settings.model_dump(mode="json"), indent=2))
        return

    print("\n📋 Paystub Extractor Configuration")
    print(f"   OCR enabled: {settings.ocr.enabled}")
    print(f"   OCR languages: {'+'.join(settings.ocr.languages)}")
    print(f"   OCR DPI: {settings.ocr.dpi}")
    print(f"   Min native text length: {settings.acquisition.min_text_length}")
    print(
        f"   OCR skip threshold: >{settings.acquisition.ocr_skip_min_chars} chars, "
        f"confidence >{settings.acquisition.ocr_skip_confidence}"
    )
    print(f"   Batch size limit: {settings.batch.max_documents}")
    print(f"   Batch workers: {settings.batch.max_workers}")

    log_summary = get_log_config_summary()
    print(f"   Log level: {log_summary['level']}")
    print(f"   Log to file: {log_summary['log_to_file']}")
    print()
