"""pipecheck CLI - Main entrypoint."""

from pathlib import Path

import typer
from rich.console import Console

from pipecheck import __version__
from pipecheck.cli.commands import (
    bloblang_cmd,
    components_cmd,
    fix_cmd,
    schema_cmd,
    validate_cmd,
)
from pipecheck.compiler.config_loader import load_config
from pipecheck.kernel.exceptions import PipecheckError
from pipecheck.kernel.logging import configure_logging

# Create the main Typer app
app = typer.Typer(
    name="pipecheck",
    help="pipecheck - Validate and auto-fix Expanso pipeline configurations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

# Create console for rich output
console = Console()

# Add commands
app.command(name="validate", help="Validate a pipeline file")(validate_cmd.validate)
app.command(name="fix", help="Apply high-confidence fixes to a pipeline file")(fix_cmd.fix)
app.command(name="schema", help="Show the field schema of a component")(schema_cmd.schema)
app.command(name="components", help="List known components")(components_cmd.list_components)
app.command(name="bloblang", help="Look up Bloblang functions and methods")(bloblang_cmd.bloblang)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]pipecheck[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
    verbose: bool = typer.Option(False, "-V", "--verbose", help="Enable debug logging"),
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to a pipecheck configuration file"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """pipecheck - Validate and auto-fix Expanso pipeline configurations.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}

    try:
        config = load_config(config_path)
    except (PipecheckError, FileNotFoundError) as e:
        console.print(f"[red]✗ Configuration Error:[/red] {e}")
        raise typer.Exit(1) from e

    # Compute effective log level
    level = config.logging.level
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"

    configure_logging(
        level=level,
        format="rich" if verbose else config.logging.format,
        output_file=config.logging.output_file,
        use_color=config.logging.use_color,
        include_timestamp=config.logging.include_timestamp,
    )

    ctx.obj.update({
        "quiet": quiet,
        "verbose": verbose,
        "config": config,
        "config_path": config_path,
    })


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
