"""Validation reports: a serializable report model and rich console rendering."""

from typing import Any

from pydantic import BaseModel, Field
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from payload_schema import __version__
from payload_schema.validation.results import ValidationOutcome, ValidationResult


class ResultEntry(BaseModel):
    """One validation result as written to JSON reports."""
    code: str
    expected: str
    received: Any = None
    path: list[str | int] = Field(default_factory=list)
    message: str

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ResultEntry":
        return cls(**result.to_dict())


class ValidationReport(BaseModel):
    """Serializable report for one validated payload."""
    tool_version: str = Field(alias="toolVersion", default=__version__)
    schema_source: str | None = Field(alias="schemaSource", default=None)
    payload_source: str | None = Field(alias="payloadSource", default=None)
    is_valid: bool = Field(alias="isValid")
    counters: dict[str, int] = Field(default_factory=dict)
    results: list[ResultEntry] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_outcome(
        cls,
        outcome: ValidationOutcome,
        schema_source: str | None = None,
        payload_source: str | None = None,
        errors_only: bool = False,
    ) -> "ValidationReport":
        selected = outcome.errors if errors_only else outcome.results
        counters = {"results": len(outcome.results), "errors": len(outcome.errors), "valids": len(outcome.valids)}
        counters.update({f"code_{code}": count for code, count in sorted(outcome.codes().items())})
        return cls(
            schema_source=schema_source,
            payload_source=payload_source,
            is_valid=outcome.is_valid,
            counters=counters,
            results=[ResultEntry.from_result(result) for result in selected],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def format_path(path) -> str:
    if not path:
        return "$"
    return "$" + "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in path)


class ReportFormatter:
    """Formats validation outcomes for rich console display."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def format_table(self, outcome: ValidationOutcome, errors_only: bool = False) -> None:
        status_color = "green" if outcome.is_valid else "red"
        status = "VALID" if outcome.is_valid else "INVALID"
        self.console.print(f"[{status_color}]Validation Status: {status}[/{status_color}]")
        self.console.print(f"Results: {len(outcome.results)}  Errors: {len(outcome.errors)}  Valid: {len(outcome.valids)}")

        selected = outcome.errors if errors_only else outcome.results
        if not selected:
            if errors_only:
                self.console.print("\n[green]No issues found![/green]")
            return

        table = Table(box=box.SIMPLE)
        table.add_column("Path", style="cyan", no_wrap=True)
        table.add_column("Code", style="white", no_wrap=True)
        table.add_column("Expected", style="white")
        table.add_column("Received", style="white")
        table.add_column("Message", style="dim")

        for result in selected:
            code_color = "green" if result.is_valid else "red"
            table.add_row(
                escape(format_path(result.path)),
                f"[{code_color}]{result.code.value}[/{code_color}]",
                escape(result.expected),
                escape(repr(result.received)),
                result.message,
            )

        self.console.print(table)

    def format_markdown(self, outcome: ValidationOutcome, errors_only: bool = False) -> None:
        self.console.print("# Validation Report")
        self.console.print(f"**Status:** {'valid' if outcome.is_valid else 'invalid'}")
        self.console.print()

        counts = outcome.codes()
        if counts:
            self.console.print("## Counters")
            for code, count in sorted(counts.items()):
                self.console.print(f"- {code}: {count}")
            self.console.print()

        selected = outcome.errors if errors_only else outcome.results
        if selected:
            self.console.print("## Results")
            for result in selected:
                self.console.print(
                    f"- **{result.code.value}** `{escape(format_path(result.path))}`: {result.message} "
                    f"(expected {escape(result.expected)}, received {escape(repr(result.received))})"
                )
