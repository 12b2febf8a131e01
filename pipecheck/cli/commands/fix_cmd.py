"""Auto-fix command for pipecheck CLI."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from pipecheck.cli.utils import get_config, print_json, read_pipeline
from pipecheck.compiler.autofix import AutoFixResult, apply_auto_fixes

app = typer.Typer()
console = Console()


@app.command()
def fix(
    ctx: typer.Context,
    pipeline_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the pipeline file to fix",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Write the corrected document back to the file"),
    ] = False,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
) -> None:
    """Apply high-confidence fixes to a pipeline file.

    Only unambiguous corrections are applied (misspelled component names,
    camelCase Bloblang methods, processors key synonyms). Ambiguous names
    are listed as suggestions and left untouched.

    Without ``--write`` the corrected document is printed after the summary.

    Examples
    --------
    pipecheck fix pipeline.yaml
    pipecheck fix pipeline.yaml --write
    """
    if output_format not in ("text", "json"):
        console.print(f"[red]✗ Invalid format:[/red] {output_format} (use text or json)")
        raise typer.Exit(1)

    text = read_pipeline(pipeline_file)
    config = get_config(ctx)
    result = apply_auto_fixes(text, max_iterations=config.max_fix_iterations)

    if write and result.was_modified:
        try:
            pipeline_file.write_text(result.corrected_text, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]✗ File Error:[/red] {e}")
            raise typer.Exit(1) from e

    if output_format == "json":
        print_json(result.to_dict())
        return

    _print_summary(pipeline_file, result, written=write)
    if not write:
        typer.echo(result.corrected_text)


def _print_summary(pipeline_file: Path, result: AutoFixResult, *, written: bool) -> None:
    if not result.was_modified:
        console.print(f"[green]✓ No fixes needed:[/green] {pipeline_file}")
    else:
        verb = "Fixed" if written else "Fixes for"
        console.print(f"[green]✓ {verb}:[/green] {pipeline_file}")
        for description in result.applied_fixes:
            console.print(f"  [green]✓[/green] {escape(description)}")

    if result.suggested_fixes:
        console.print("[blue]Suggestions (not applied):[/blue]")
        for suggestion in result.suggested_fixes:
            candidates = escape(", ".join(suggestion.candidates))
            line = f" (line {suggestion.line})" if suggestion.line else ""
            console.print(
                f"  [blue]ℹ[/blue] {escape(suggestion.original)} -> {candidates}"
                f" ({suggestion.confidence.value}){line}"
            )
