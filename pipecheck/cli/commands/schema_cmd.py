"""Component schema command for pipecheck CLI."""

from typing import Annotated, get_args

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from pipecheck.api import components
from pipecheck.cli.utils import print_json
from pipecheck.kernel.catalog.models import ComponentCategory
from pipecheck.kernel.exceptions import UnknownComponentError

app = typer.Typer()
console = Console()

CATEGORIES: tuple[str, ...] = get_args(ComponentCategory)


def check_category(category: str | None) -> ComponentCategory | None:
    if category is not None and category not in CATEGORIES:
        console.print(
            f"[red]✗ Invalid category:[/red] {escape(category)} "
            f"(use one of: {', '.join(CATEGORIES)})"
        )
        raise typer.Exit(1)
    return category  # type: ignore[return-value]


@app.command()
def schema(
    name: Annotated[str, typer.Argument(help="Component name, e.g. kafka")],
    category: Annotated[
        str | None,
        typer.Option("--category", "-c", help="Component category (input, processor, output, ...)"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
) -> None:
    """Show the field schema of a component.

    Examples
    --------
    pipecheck schema kafka --category output
    pipecheck schema mapping --format json
    """
    selected = check_category(category)

    if output_format == "json":
        data = components.get_component_schema(name, selected)
        if data is None:
            console.print(f"[red]✗ No schema for component:[/red] {escape(name)}")
            raise typer.Exit(1)
        print_json(data)
        return

    try:
        document = components.describe_component(name, selected)
    except UnknownComponentError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    console.print(Markdown(document))
