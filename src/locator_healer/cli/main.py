"""locator-healer CLI - Main entry point.

Provides commands for checking model answers, previewing prompts and
reading the audit trail of healed locators.

Exit codes:
    0: Success
    1: Model declined (no suggestion)
    2: Input error (undecodable answer, bad locator)
    3: Runtime error
"""

import json
import sys
from pathlib import Path
from typing import TextIO

import click

from ..audit import JsonFileResultsSink
from ..config import get_settings
from ..healing.codec import DecodeStatus, LocatorCodec
from ..healing.healing_types import Platform
from ..healing.prompts import get_prompt_builder
from ..healing_exceptions import UnsupportedStrategy
from ..locators import LocatorDescriptor
from .formatters import format_audit_records, format_decode_result

# Exit codes
EXIT_SUCCESS = 0
EXIT_NO_SUGGESTION = 1
EXIT_INPUT_ERROR = 2
EXIT_RUNTIME_ERROR = 3

FORMAT_CHOICE = click.Choice(["text", "json"])


@click.group()
@click.version_option(package_name="locator-healer", prog_name="locator-healer")
def main() -> None:
    """Self-healing UI locators backed by a generative model."""
    pass


@main.command()
@click.argument("response_file", type=click.File("r", encoding="utf-8"))
@click.option("--format", "format_type", type=FORMAT_CHOICE, default="text", help="Output format")
def decode(response_file: TextIO, format_type: str) -> None:
    """Decode a raw model answer into a locator.

    RESPONSE_FILE holds the model text ("-" reads stdin).
    """
    result = LocatorCodec().decode(response_file.read())
    click.echo(format_decode_result(result, format_type))

    if result.status is DecodeStatus.RESOLVED:
        sys.exit(EXIT_SUCCESS)
    elif result.status is DecodeStatus.NO_SUGGESTION:
        sys.exit(EXIT_NO_SUGGESTION)
    else:
        sys.exit(EXIT_INPUT_ERROR)


@main.command()
@click.argument("page_source_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--platform",
    "-p",
    type=click.Choice([p.value for p in Platform]),
    required=True,
    help="Platform the page source comes from",
)
@click.option("--locator", "-l", required=True, help="Failed locator, e.g. 'id=login_btn'")
@click.option("--error", "-e", "error_message", required=True, help="Driver error message")
@click.option("--ui-label", default="", help="Text expected on the element")
def prompt(
    page_source_file: TextIO,
    platform: str,
    locator: str,
    error_message: str,
    ui_label: str,
) -> None:
    """Print the healing prompt the model would receive."""
    try:
        descriptor = LocatorDescriptor.parse(locator)
    except (ValueError, UnsupportedStrategy) as e:
        click.echo(f"Error: Invalid locator {locator!r}: {e}", err=True)
        sys.exit(EXIT_INPUT_ERROR)

    builder = get_prompt_builder(Platform(platform))
    click.echo(
        builder.build_prompt(
            page_source=page_source_file.read(),
            failed_locator=str(descriptor),
            error_message=error_message,
            ui_label=ui_label,
        )
    )


@main.command()
@click.argument("results_file", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option("--format", "format_type", type=FORMAT_CHOICE, default="text", help="Output format")
def audit(results_file: Path | None, format_type: str) -> None:
    """List healed locators recorded in RESULTS_FILE.

    Defaults to the configured results file.
    """
    path = results_file or get_settings().results_file
    try:
        records = JsonFileResultsSink(path).read_records()
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON in {path}: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)
    except OSError as e:
        click.echo(f"Error reading {path}: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    click.echo(format_audit_records(records, format_type))


if __name__ == "__main__":
    main()
