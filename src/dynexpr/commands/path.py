"""Path command: parse and normalize document paths."""

from __future__ import annotations

import typer

from dynexpr.errors import PathParseError
from dynexpr.path import parse_path


def run_path(paths: list[str]) -> list[str]:
    """Parse every path and return its normalized text."""
    normalized: list[str] = []
    for text in paths:
        try:
            normalized.append(str(parse_path(text)))
        except PathParseError as exc:
            raise typer.BadParameter(str(exc)) from exc
    return normalized


def register(app: typer.Typer) -> None:
    """Register the path command."""

    @app.command("path")
    def path_command(
        paths: list[str] = typer.Argument(..., metavar="PATH", help="Document paths to check"),  # noqa: B008
    ) -> None:
        """Parse document paths and print their normalized form."""
        for line in run_path(paths):
            typer.echo(line)
