"""Bloblang reference command for pipecheck CLI."""

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pipecheck.api import components
from pipecheck.cli.utils import print_json
from pipecheck.kernel.catalog import list_bloblang_categories

app = typer.Typer()
console = Console()

# Pseudo-categories accepted besides the real ones
_KIND_CATEGORIES = ("all", "functions", "methods")


@app.command()
def bloblang(
    query: Annotated[
        str | None,
        typer.Argument(help="Function or method name, or a search term"),
    ] = None,
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Restrict to a category, or functions/methods"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
) -> None:
    """Look up Bloblang functions and methods.

    Examples
    --------
    pipecheck bloblang parse_json
    pipecheck bloblang timestamp --category methods
    pipecheck bloblang --category string
    """
    valid = (*_KIND_CATEGORIES, *list_bloblang_categories())
    if category is not None and category not in valid:
        console.print(
            f"[red]✗ Invalid category:[/red] {escape(category)} (use one of: {', '.join(valid)})"
        )
        raise typer.Exit(1)

    items = components.lookup_bloblang(query or "", category)
    if output_format == "json":
        print_json(items)
        return

    if not items:
        console.print(f"[yellow]No Bloblang functions or methods match '{escape(query or '')}'[/yellow]")
        return

    table = Table(title="Bloblang Reference")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Category", style="blue")
    table.add_column("Signature", style="white")
    table.add_column("Description", style="white")
    for item in items:
        call = f".{item['signature']}" if item["kind"] == "method" else item["signature"]
        table.add_row(
            item["name"], item["kind"], item["category"], escape(call), escape(item["description"])
        )
    console.print(table)
