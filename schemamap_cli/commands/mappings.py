"""Saved mapping commands."""

import typer

from schemamap.artifact import list_mapping_files, load_mapping_file
from schemamap.errors import ConfigurationMissing, MalformedArtifact
from schemamap_cli.output import error_message, show_summary_table

app = typer.Typer(help="Inspect saved mappings")


@app.command("list")
def mappings_list() -> None:
    """List mappings in the active installation.

    Example:
        schemamap mappings list
    """
    try:
        names = list_mapping_files()
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' first")
        raise typer.Exit(1) from e

    if not names:
        typer.echo("No mappings saved yet")
        return

    rows = []
    for name in names:
        try:
            artifact = load_mapping_file(name)
        except MalformedArtifact:
            rows.append((name, "-", "-", "-", "invalid"))
            continue
        connection = artifact.source.connection
        rows.append(
            (
                name,
                artifact.source.engine.value,
                f"{connection.host}/{connection.database}",
                len(artifact.tables),
                artifact.created_at,
            )
        )
    show_summary_table("Mappings", ["Name", "Engine", "Source", "Tables", "Created"], rows)
