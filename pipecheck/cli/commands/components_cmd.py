"""Component catalog listing command for pipecheck CLI."""

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pipecheck.api import components
from pipecheck.cli.commands.schema_cmd import check_category
from pipecheck.cli.utils import print_json

app = typer.Typer()
console = Console()


@app.command()
def list_components(
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Only list this category"),
    ] = None,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="Filter documented components by name or description"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
) -> None:
    """List known components.

    Examples
    --------
    pipecheck components
    pipecheck components --category input
    pipecheck components --search kafka
    """
    selected = check_category(category)

    if search is not None:
        hits = components.search_components(search, selected)
        if output_format == "json":
            print_json(hits)
            return
        table = Table(title=f"Components matching '{escape(search)}'")
        table.add_column("Name", style="cyan")
        table.add_column("Category", style="green")
        table.add_column("Description", style="white")
        for hit in hits:
            table.add_row(hit["name"], hit["category"], escape(hit["description"]))
        console.print(table)
        return

    names = components.list_components(selected)
    if output_format == "json":
        print_json(names)
        return
    table = Table(title="Known Components")
    table.add_column("Category", style="green")
    table.add_column("Count", justify="right")
    table.add_column("Names", style="cyan")
    for cat, items in names.items():
        table.add_row(cat, str(len(items)), ", ".join(items))
    console.print(table)
