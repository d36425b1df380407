"""
mdexport Command Line Interface.

Provides commands for exporting Markdown documents and inspecting slide
segmentation.
"""

import logging
from pathlib import Path
from typing import Optional

import typer

from mdexport.core import ExportConfig, ExportError, load_export_config
from mdexport.export import ExportDispatcher, parse_markdown_to_slides
from mdexport.io import FixedPathPrompt, LocalFileWriter, TyperPrompt

app = typer.Typer(
    name="mdexport",
    help="Export Markdown documents to HTML, PDF, Word and PowerPoint",
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load_config(config_path: Optional[str]) -> ExportConfig:
    if not config_path:
        return ExportConfig()
    return load_export_config(config_path)


@app.command()
def export(
    input_file: str = typer.Argument(..., help="Markdown document to export"),
    fmt: str = typer.Option("pdf", "--format", "-f", help="Export format (html,pdf,docx,pptx)"),
    theme: Optional[str] = typer.Option(None, "--theme", "-t", help="Theme id (github, minimal, dark)"),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Destination path; prompts with the default path when omitted",
        show_default=False,
    ),
    free: bool = typer.Option(False, "--free", help="Apply the free-tier watermark"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Export config YAML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Export a Markdown document.

    Example:
        mdexport export notes.md --format docx --theme github
    """
    _setup_logging(verbose)

    source = Path(input_file)
    if not source.exists():
        typer.secho(f"✗ File not found: {input_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        config = _load_config(config_path)
        dispatcher = ExportDispatcher(
            prompt=FixedPathPrompt(output) if output else TyperPrompt(),
            writer=LocalFileWriter(),
            config=config,
        )
        status = dispatcher.export(
            fmt.strip().upper(),
            source.read_text(encoding="utf-8"),
            theme,
            str(source),
            is_pro=not free,
        )
    except (ExportError, FileNotFoundError, ValueError) as e:
        typer.secho(f"✗ Error: {e}", fg=typer.colors.RED, err=True)
        if verbose:
            import traceback

            traceback.print_exc()
        raise typer.Exit(code=1)

    if status is None:
        typer.echo("Export cancelled")
        return
    typer.secho(f"✓ {status}", fg=typer.colors.GREEN, bold=True)


@app.command()
def slides(
    input_file: str = typer.Argument(..., help="Markdown document to segment"),
):
    """Print the slide segmentation of a Markdown document."""
    source = Path(input_file)
    if not source.exists():
        typer.secho(f"✗ File not found: {input_file}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    deck = parse_markdown_to_slides(source.read_text(encoding="utf-8"))
    if not deck:
        typer.echo("No slide content (a title slide would be generated)")
        return

    for idx, slide in enumerate(deck, 1):
        typer.secho(f"[{idx}] {slide.title or '(untitled)'}", bold=True)
        for bullet in slide.bullets:
            typer.echo(f"{'  ' * (bullet.level + 1)}• {bullet.text}")
        if slide.code:
            typer.echo(f"  code: {len(slide.code.splitlines())} lines")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
