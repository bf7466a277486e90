"""Output formatting utilities for CLI."""

from collections.abc import Sequence
from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from schemamap.ddl import render_script, write_ddl_file

console = Console()


def output_ddl(statements: list[str], output_path: Path | None = None) -> None:
    """Write DDL statements to a file, or print them with SQL highlighting.

    Args:
        statements: Synthesized statements
        output_path: Output file path (None = stdout)
    """
    if output_path:
        write_ddl_file(statements, output_path)
        success_message(f"DDL written to {output_path}")
    else:
        syntax = Syntax(render_script(statements), "sql", theme="monokai", line_numbers=False, word_wrap=True)
        console.print(syntax)


def show_summary_table(title: str, columns: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
    """Print rows as a rich table."""
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(str(value) for value in row))
    console.print(table)


def error_message(message: str, hint: str | None = None) -> None:
    """Print error message.

    Args:
        message: Error message
        hint: Optional hint for user
    """
    typer.secho(f"✗ Error: {message}", fg=typer.colors.RED, err=True)
    if hint:
        typer.secho(f"  Hint: {hint}", fg=typer.colors.YELLOW, err=True)


def warning_message(message: str) -> None:
    typer.secho(f"! Warning: {message}", fg=typer.colors.YELLOW, err=True)


def success_message(message: str) -> None:
    """Print success message.

    Args:
        message: Success message
    """
    typer.secho(f"✓ {message}", fg=typer.colors.GREEN)
