"""CLI helper utilities for pipecheck commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

import typer
from rich.console import Console

from pipecheck.compiler.config_loader import load_config
from pipecheck.kernel.config.models import PipecheckConfig
from pipecheck.kernel.exceptions import PipecheckError


class ContextProtocol(Protocol):
    """Protocol for common interface between Click and Typer contexts."""

    @property
    def obj(self) -> dict[str, Any] | None: ...


console = Console()


def get_config(ctx: ContextProtocol | None) -> PipecheckConfig:
    """Return the configuration loaded by the root callback, or load it now.

    Raises ``typer.Exit(1)`` after printing the problem when the
    configuration is invalid.
    """
    obj = getattr(ctx, "obj", None)
    if isinstance(obj, dict) and isinstance(obj.get("config"), PipecheckConfig):
        return obj["config"]
    config_path = obj.get("config_path") if isinstance(obj, dict) else None
    try:
        return load_config(config_path)
    except (PipecheckError, FileNotFoundError) as e:
        console.print(f"[red]✗ Configuration Error:[/red] {e}")
        raise typer.Exit(1) from e


def read_pipeline(path: Path) -> str:
    """Read a pipeline file, exiting with code 1 when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]✗ File Error:[/red] {e}")
        raise typer.Exit(1) from e


def print_json(obj: Any) -> None:
    """Print ``obj`` as indented JSON without rich formatting."""
    typer.echo(json.dumps(obj, default=str, indent=2, ensure_ascii=False))
