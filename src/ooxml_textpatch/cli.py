"""Command-line interface for ooxml-textpatch.

Provides commands for extracting and replacing the text of Word and
PowerPoint documents from the terminal.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml

from . import __version__
from .errors import TextPatchError
from .flavors import Flavor
from .session import DocumentSession

app = typer.Typer(
    name="ooxml-textpatch",
    help="Replace the text of Word and PowerPoint documents without touching their structure.",
    no_args_is_help=True,
)

FlavorOption = Annotated[
    str | None,
    typer.Option("--flavor", "-f", help="word-processing or presentation (default: detect)"),
]
OutputOption = Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ooxml-textpatch version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Replace the text of Word and PowerPoint documents from the command line."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


@app.command()
def extract(
    file: Annotated[Path, typer.Argument(help="Path to the .docx/.pptx file")],
    flavor: FlavorOption = None,
    segments: Annotated[
        bool, typer.Option("--segments", "-s", help="Print one YAML list item per text slot")
    ] = False,
) -> None:
    """Print the plain text of a document."""
    try:
        with DocumentSession.open(file, flavor) as session:
            if segments:
                typer.echo(yaml.safe_dump(session.segments(), allow_unicode=True), nl=False)
            else:
                typer.echo(session.extract_plain_text())
    except (TextPatchError, OSError) as e:
        raise _fail(e) from e


@app.command()
def apply(
    file: Annotated[Path, typer.Argument(help="Path to the .docx/.pptx file")],
    replacements: Annotated[
        Path, typer.Argument(help="YAML/JSON file with one replacement text per slot")
    ],
    flavor: FlavorOption = None,
    output: OutputOption = None,
) -> None:
    """Replace every text slot with the texts from a YAML or JSON list."""
    try:
        texts = yaml.safe_load(replacements.read_text(encoding="utf-8"))
        if not isinstance(texts, list):
            raise TextPatchError("Replacements file must contain a list of strings")
        texts = ["" if text is None else str(text) for text in texts]

        with DocumentSession.open(file, flavor) as session:
            changed = session.apply_replacements(texts)
            output_path = output or file
            session.save(output_path)
        typer.echo(f"Replaced {changed} of {len(texts)} text slots and saved to {output_path}")
    except (TextPatchError, OSError, yaml.YAMLError) as e:
        raise _fail(e) from e


@app.command("apply-text")
def apply_text(
    file: Annotated[Path, typer.Argument(help="Path to the .docx/.pptx file")],
    text_file: Annotated[Path, typer.Argument(help="Plain text laid out like 'extract' output")],
    flavor: FlavorOption = None,
    output: OutputOption = None,
) -> None:
    """Apply plain text, falling back to a single-slot replacement on mismatch."""
    try:
        text = text_file.read_text(encoding="utf-8")
        with DocumentSession.open(file, flavor) as session:
            result = session.apply_plain_text(text)
            output_path = output or file
            session.save(output_path)
        typer.echo(f"{result}; saved to {output_path}")
        if result.fallback:
            typer.echo(
                "Warning: segment count did not match; only the first slot was replaced",
                err=True,
            )
    except (TextPatchError, OSError) as e:
        raise _fail(e) from e


@app.command()
def info(
    file: Annotated[Path, typer.Argument(help="Path to the .docx/.pptx file")],
    flavor: FlavorOption = None,
) -> None:
    """Show document information."""
    try:
        with DocumentSession.open(file, flavor) as session:
            typer.echo(f"File: {file}")
            typer.echo(f"Flavor: {session.flavor.value}")
            opaque = sum(1 for part in session.package.iter_parts() if not part.is_structured)
            typer.echo(f"Parts: {len(session.package.part_names)} ({opaque} binary)")
            typer.echo(f"Text parts: {len(session.body_parts)}")
            typer.echo(f"Text slots: {session.number_of_slots}")
    except (TextPatchError, OSError) as e:
        raise _fail(e) from e


@app.command()
def new(
    output: Annotated[Path, typer.Argument(help="Path of the document to create")],
    flavor: FlavorOption = None,
    text_file: Annotated[
        Path | None, typer.Option("--text-file", "-t", help="Initial plain text")
    ] = None,
) -> None:
    """Create a new document, optionally filled with plain text."""
    try:
        resolved = Flavor.parse(flavor) if flavor else Flavor.from_extension(output)
        text = text_file.read_text(encoding="utf-8") if text_file else ""
        with DocumentSession.new(resolved, text) as session:
            session.save(output)
            typer.echo(f"Created {resolved.value} document with {session.number_of_slots} text slots")
    except (TextPatchError, OSError) as e:
        raise _fail(e) from e


if __name__ == "__main__":
    app()
