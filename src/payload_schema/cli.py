"""CLI interface for payload-schema using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from payload_schema import __description__, __version__
from payload_schema.catalog import describe_catalog
from payload_schema.config import ReportFormat, load_config
from payload_schema.errors import SchemaError, SchemaUsageError, ValidationFailure
from payload_schema.report import ReportFormatter, ValidationReport
from payload_schema.template import Template
from payload_schema.validation import Schema

app = typer.Typer(
    name="payload-schema",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"payload-schema version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level: error, warn, info, debug (default: from config)")
    ] = None,
) -> None:
    """payload-schema - Declarative schema validation for untrusted decoded payloads."""
    level = log_level
    if level is None:
        try:
            level = load_config().logging.level
        except ValueError:
            # validate reports config errors itself
            level = "warn"
    logging.basicConfig(level=LOG_LEVELS.get(level, logging.WARNING), format="%(levelname)s %(name)s: %(message)s")


def _load_json(path: Path, what: str) -> Any:
    """Decode a JSON file or exit with code 2."""
    try:
        with open(path, encoding="utf-8") as f:
            return jsonlib.load(f)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] {what} file not found: {path}")
        raise typer.Exit(2)
    except jsonlib.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON in {what} file {path}: {escape(str(e))}")
        raise typer.Exit(2)


def _load_template(path: Path) -> Template:
    try:
        return Template.from_dict(_load_json(path, "schema"))
    except SchemaError as e:
        console.print(f"[red]Schema error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command()
def validate(
    schema: Annotated[
        Path,
        typer.Argument(help="Path to the JSON schema file")
    ],
    payload: Annotated[
        Path,
        typer.Argument(help="Path to the JSON payload file")
    ],
    fail_fast: Annotated[
        Optional[bool],
        typer.Option("--fail-fast/--collect-all", help="Stop at the first failing check (default: from config)")
    ] = None,
    no_key_limit: Annotated[
        bool,
        typer.Option("--no-key-limit", help="Do not limit the number of payload keys")
    ] = False,
    key_limit: Annotated[
        Optional[int],
        typer.Option("--key-limit", min=0, help="Maximum number of payload keys (default: schema field count)")
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: table)")
    ] = None,
    errors_only: Annotated[
        bool,
        typer.Option("--errors-only", "-e", help="Only show failing checks")
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .payload-schema.json)")
    ] = None,
) -> None:
    """Validate a JSON payload against a JSON schema."""
    try:
        settings = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    output_format = format or settings.output.format
    valid_formats = [f.value for f in ReportFormat]
    if output_format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{output_format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(2)

    if fail_fast is None:
        fail_fast = settings.engine.fail_fast
    errors_only = errors_only or not settings.output.show_valid

    limit: bool | int = settings.engine.effective_key_limit
    if no_key_limit:
        limit = False
    elif key_limit is not None:
        limit = key_limit

    template = _load_template(schema)
    data = _load_json(payload, "payload")

    session = Schema(template).set_key_limiter(limit)
    try:
        if fail_fast:
            session.parse(data)
        else:
            session.safe_parse(data)
    except ValidationFailure as e:
        console.print(f"[red]Validation failed:[/red] {escape(str(e.result))}")
    except SchemaUsageError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    outcome = session.outcome
    if output_format == ReportFormat.JSON.value:
        report = ValidationReport.from_outcome(
            outcome, schema_source=str(schema), payload_source=str(payload), errors_only=errors_only
        )
        console.print_json(report.to_json())
    elif output_format == ReportFormat.MARKDOWN.value:
        ReportFormatter(console).format_markdown(outcome, errors_only=errors_only)
    else:
        ReportFormatter(console).format_table(outcome, errors_only=errors_only)

    raise typer.Exit(0 if outcome.is_valid else 1)


@app.command()
def check(
    schema: Annotated[
        Path,
        typer.Argument(help="Path to the JSON schema file")
    ],
) -> None:
    """Compile a schema file and show its fields."""
    template = _load_template(schema)

    table = Table(title=f"Schema: {schema.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Constraints", style="dim")

    for name, spec in template.items():
        constraints = {key: value for key, value in spec.to_dict().items() if key != "type"}
        described = ", ".join(f"{key}={value}" for key, value in constraints.items())
        table.add_row(escape(name), spec.type, escape(described))

    console.print(table)
    console.print(f"[green]Schema OK:[/green] {len(template)} fields")


@app.command()
def catalog() -> None:
    """Show recognized constraint keys and type names."""
    described = describe_catalog()

    table = Table(title="Constraint Catalog")
    table.add_column("Group", style="cyan")
    table.add_column("Entries", style="white")
    for group, entries in described.items():
        table.add_row(group, ", ".join(entries))

    console.print(table)


if __name__ == "__main__":
    app()
