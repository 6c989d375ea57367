"""Main CLI application for the paystub extractor.

This module provides the unified entry point, organizing commands into
extraction and configuration groups.
"""

from typing import Annotated

import typer

from .. import __version__
from ..logging import setup_logging
from .commands import config, extract

app = typer.Typer(
    name="paystub",
    help="Paystub Extractor: structured data from paystub PDFs and images",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _print_version(value: bool) -> None:
    if value:
        print(f"paystub-extractor {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug logging"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_print_version,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = False,
) -> None:
    """Extract pay amounts, dates, line items and YTD totals from paystubs.

    Examples:
      paystub extract file stub.pdf --output summary
      paystub extract batch jan.pdf feb.pdf --no-ocr
      paystub -v config show
    """
    setup_logging(cli_mode=True, verbose=verbose)


app.add_typer(extract.app, name="extract", help="Extract data from paystubs")
app.add_typer(config.app, name="config", help="Configuration commands")


def main() -> None:
    """Entry point for the paystub CLI application."""
    app()


if __name__ == "__main__":
    main()
