"""Pipeline validation command for pipecheck CLI."""

import asyncio
import dataclasses
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from pipecheck.api.validation import avalidate_with_external, check_pipeline
from pipecheck.cli.utils import get_config, print_json, read_pipeline
from pipecheck.kernel.exceptions import ConfigurationError

app = typer.Typer()
console = Console()


@app.command()
def validate(
    ctx: typer.Context,
    pipeline_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the pipeline file to validate",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    fix: Annotated[
        bool,
        typer.Option("--fix", help="Apply high-confidence fixes before validating"),
    ] = False,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
    no_compat: Annotated[
        bool,
        typer.Option("--no-compat", help="Skip component compatibility warnings"),
    ] = False,
    external: Annotated[
        bool,
        typer.Option("--external", help="Also ask the configured external validator"),
    ] = False,
) -> None:
    """Validate a pipeline file.

    This command checks:
    - Document structure (input, pipeline.processors, output)
    - Component names and their fields
    - Embedded Bloblang mappings and interpolations
    - Component compatibility (as warnings)

    Examples
    --------
    pipecheck validate pipeline.yaml
    pipecheck validate pipeline.yaml --fix --format json
    """
    if output_format not in ("text", "json"):
        console.print(f"[red]✗ Invalid format:[/red] {output_format} (use text or json)")
        raise typer.Exit(1)

    text = read_pipeline(pipeline_file)
    config = get_config(ctx)
    config = dataclasses.replace(
        config,
        auto_fix=fix,
        compatibility_checks=config.compatibility_checks and not no_compat,
    )

    if external:
        try:
            config = dataclasses.replace(
                config, external=dataclasses.replace(config.external, enabled=True)
            )
        except ConfigurationError as e:
            console.print(f"[red]✗ Configuration Error:[/red] {e}")
            raise typer.Exit(1) from e
        result = asyncio.run(avalidate_with_external(text, config))
    else:
        result = check_pipeline(text, config)

    if output_format == "json":
        print_json(result)
    else:
        _print_result(pipeline_file, result)

    if not result["valid"]:
        raise typer.Exit(1)


def _print_result(pipeline_file: Path, result: dict[str, Any]) -> None:
    console.print()
    if result["valid"]:
        console.print(f"[green]✓ Validation successful:[/green] {pipeline_file}")
    else:
        console.print(f"[red]✗ Validation failed:[/red] {pipeline_file}")

    if fixes := result.get("fixes_applied"):
        console.print()
        console.print("[green]Fixes applied:[/green]")
        for fix in fixes:
            console.print(f"  [green]✓[/green] {escape(fix)}")

    if result["warnings"]:
        console.print()
        console.print("[yellow]Warnings:[/yellow]")
        for warning in result["warnings"]:
            console.print(f"  [yellow]⚠[/yellow] {escape(warning)}")

    if result["errors"]:
        console.print()
        console.print("[red]Errors:[/red]")
        for error in result["errors"]:
            console.print(f"  [red]✗[/red] {escape(error['path'])}: {escape(error['message'])}")
            if suggestion := error.get("suggestion"):
                console.print(f"    [blue]→[/blue] {escape(suggestion)}")

    if suggested := result.get("suggested_fixes"):
        console.print()
        console.print("[blue]Suggestions:[/blue]")
        for item in suggested:
            candidates = escape(", ".join(item["candidates"]))
            original = escape(item["original"])
            console.print(f"  [blue]ℹ[/blue] {original} -> {candidates} ({item['confidence']})")
    console.print()
