"""
Command-line interface for toonkit.

Converts JSON documents to TOON and back.
"""

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .decode import try_decode
from .encode import try_encode
from .logs import configure_logging, get_logger
from .observe import LoggingObserver

app = typer.Typer(
    name="toonkit",
    help="Convert between JSON and TOON (Token-Oriented Object Notation)",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


class DelimiterChoice(str, Enum):
    comma = "comma"
    tab = "tab"
    pipe = "pipe"


DELIMITER_SYMBOLS = {
    DelimiterChoice.comma: ",",
    DelimiterChoice.tab: "\t",
    DelimiterChoice.pipe: "|",
}


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Convert between JSON and TOON."""
    configure_logging("DEBUG" if verbose else "WARNING")
    ctx.obj = LoggingObserver() if verbose else None


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold cyan]toonkit[/bold cyan] version {__version__}")


@app.command()
def encode(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="JSON file to encode (default: stdin)", dir_okay=False),
    indent: int = typer.Option(2, "--indent", help="Spaces per indentation level"),
    delimiter: DelimiterChoice = typer.Option(DelimiterChoice.comma, "--delimiter", help="Array value delimiter"),
    length_marker: Optional[str] = typer.Option(None, "--length-marker", help="Prefix for array lengths, e.g. '#'"),
):
    """
    Encode JSON to TOON.

    Examples:
        toonkit encode data.json
        cat data.json | toonkit encode --delimiter tab
    """
    text = _read_input(file)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        _fail("Invalid JSON input", str(e))

    options = {
        "indent": indent,
        "delimiter": DELIMITER_SYMBOLS[delimiter],
        "length_marker": length_marker,
    }
    result = try_encode(data, options, observer=ctx.obj)
    if not result.success:
        _fail("Encode failed", str(result.error))

    typer.echo(result.data)


@app.command()
def decode(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="TOON file to decode (default: stdin)", dir_okay=False),
    indent: int = typer.Option(2, "--indent", help="Expected spaces per indentation level"),
    lenient: bool = typer.Option(False, "--lenient", help="Disable strict validation"),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print the JSON output"),
):
    """
    Decode TOON to JSON.

    Examples:
        toonkit decode data.toon --pretty
        cat data.toon | toonkit decode --lenient
    """
    text = _read_input(file)

    result = try_decode(text, {"indent": indent, "strict": not lenient}, observer=ctx.obj)
    if not result.success:
        _fail("Decode failed", str(result.error))

    typer.echo(json.dumps(result.data, indent=2 if pretty else None, ensure_ascii=False))


def _read_input(file: Optional[Path]) -> str:
    if file is None or str(file) == "-":
        return sys.stdin.read()

    try:
        return file.read_text(encoding="utf-8")
    except OSError as e:
        _fail("Cannot read input", str(e))


def _fail(title: str, message: str):
    logger.debug("cli_failed", title=title, error=message)
    err_console.print(f"[bold red]❌ {title}:[/bold red] {escape(message)}")
    sys.exit(1)
