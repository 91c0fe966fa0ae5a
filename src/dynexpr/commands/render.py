"""Render command: build an expression from a JSON document."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from dynexpr import config as config_module
from dynexpr.document import parse_document
from dynexpr.errors import ExpressionError
from dynexpr.expression import Expression


logger = logging.getLogger("dynexpr")

DEFAULT_OUTPUT_THEME = "github-dark"

EXPRESSION_FIELDS = (
    ("ConditionExpression", "condition_expression"),
    ("KeyConditionExpression", "key_condition_expression"),
    ("UpdateExpression", "update_expression"),
    ("FilterExpression", "filter_expression"),
    ("ProjectionExpression", "projection_expression"),
)


@dataclass
class RenderArgs:
    """Arguments for the render command."""

    document: str
    config: str
    color_flag: bool | None
    out: str


def read_document(source: str) -> str:
    """Read document text from a file, or from stdin when source is `-`."""
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as err:
        raise typer.BadParameter(f"Cannot read document '{source}': {err.strerror}") from err
    except UnicodeDecodeError as err:
        raise typer.BadParameter(f"Document is not valid UTF-8: '{source}'") from err


def build_console(color_enabled: bool) -> Console:
    """Build a console writing to the current stdout."""
    return Console(
        file=sys.stdout,
        color_system="auto" if color_enabled else None,
        force_terminal=color_enabled or None,
        highlight=False,
        soft_wrap=True,
    )


def resolve_color(color_flag: bool | None) -> bool:
    """Use the explicit flag, otherwise color only interactive terminals."""
    if color_flag is not None:
        return color_flag
    return sys.stdout.isatty()


def print_json(console: Console, expression: Expression, color_enabled: bool) -> None:
    """Print the expression as JSON, highlighted when color is enabled."""
    text = json.dumps(expression.to_dict(), indent=2, ensure_ascii=False)
    if color_enabled:
        console.print(Syntax(text, "json", theme=DEFAULT_OUTPUT_THEME, word_wrap=True))
        return
    console.file.write(f"{text}\n")
    console.file.flush()


def _placeholder_table(title: str, rows: dict[str, object]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("Placeholder", no_wrap=True)
    table.add_column("Value")
    for placeholder, value in rows.items():
        table.add_row(placeholder, str(value))
    return table


def print_table(console: Console, expression: Expression) -> None:
    """Print the expression strings and placeholder tables as rich tables."""
    table = Table(title="Expressions")
    table.add_column("Field", no_wrap=True)
    table.add_column("Expression")
    for label, field_name in EXPRESSION_FIELDS:
        text = getattr(expression, field_name)
        if text is not None:
            table.add_row(label, text)
    console.print(table)

    if expression.expression_attribute_names is not None:
        console.print(_placeholder_table("Names", dict(expression.expression_attribute_names)))
    if expression.expression_attribute_values is not None:
        console.print(_placeholder_table("Values", dict(expression.expression_attribute_values)))


def run_render(args: RenderArgs) -> None:
    """Run the render command."""
    if args.out not in config_module.OUTPUT_FORMATS:
        raise typer.BadParameter(f"--out must be one of: {', '.join(config_module.OUTPUT_FORMATS)}")

    logger.info("Document: %s", "<stdin>" if args.document == "-" else args.document)
    text = read_document(args.document)
    try:
        expression = parse_document(text)
    except ExpressionError as exc:
        raise typer.BadParameter(str(exc)) from exc

    color_enabled = resolve_color(args.color_flag)
    console = build_console(color_enabled)
    if args.out == "table":
        print_table(console, expression)
    else:
        print_json(console, expression, color_enabled)


def register(app: typer.Typer) -> None:
    """Register the render command."""

    @app.command("render")
    def render_command(
        document: str = typer.Argument(
            ..., metavar="DOCUMENT", help="JSON expression document, or - to read stdin"
        ),
        config: str = typer.Option(
            config_module.DEFAULT_CONFIG_NAME,
            "--config",
            metavar="FILE",
            help="Config file name to load from current directory",
        ),
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        out: str = typer.Option(
            "json",
            "--out",
            help="Output format: json or table",
        ),
    ) -> None:
        """Render condition, update, and projection expressions with placeholders."""
        args = RenderArgs(document=document, config=config, color_flag=color_flag, out=out)
        config_module.log_applied_config_defaults("render")
        run_render(args)
