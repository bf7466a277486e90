"""Saved connection commands."""

import typer

from schemamap.connections import delete_connection, list_connections, load_connection
from schemamap.errors import ConfigurationMissing, MalformedArtifact
from schemamap_cli.output import error_message, show_summary_table, success_message

app = typer.Typer(help="Manage saved source connections")


@app.command("list")
def connections_list() -> None:
    """List saved connections (passwords stay encrypted)."""
    try:
        names = list_connections()
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e

    if not names:
        typer.echo("No connections saved yet")
        return

    rows = []
    for name in names:
        try:
            saved = load_connection(name)
        except MalformedArtifact:
            rows.append((name, "-", "-", "-", "invalid"))
            continue
        rows.append((name, saved.engine.value, f"{saved.host}:{saved.port}", saved.database, saved.user))
    show_summary_table("Connections", ["Name", "Engine", "Host", "Database", "User"], rows)


@app.command("delete")
def connections_delete(
    name: str = typer.Argument(..., help="Connection name"),
) -> None:
    """Delete a saved connection."""
    try:
        delete_connection(name)
        success_message(f"Connection '{name}' deleted")
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        error_message(str(e), hint="List saved connections with 'schemamap connections list'")
        raise typer.Exit(1) from e
