"""Single type lookup command."""

import typer

from schemamap.models import SourceEngine
from schemamap.type_mapping import map_native_type
from schemamap_cli.output import warning_message


def map_type_command(
    engine: SourceEngine = typer.Argument(..., help="Source engine"),
    type_name: str = typer.Argument(..., help="Native type, e.g. 'numeric(10,2)' or 'int unsigned'"),
    precision: int | None = typer.Option(None, "--precision", help="Declared precision"),
    scale: int | None = typer.Option(None, "--scale", help="Declared scale"),
    length: int | None = typer.Option(None, "--length", help="Declared length (-1 for unbounded)"),
    identity: bool = typer.Option(False, "--identity", help="Column is auto-increment"),
) -> None:
    """Show the Snowflake type a native column type maps to.

    Examples:
        schemamap map-type postgresql "numeric(10,2)"
        schemamap map-type mysql "bigint unsigned"
        schemamap map-type sqlserver int --identity
    """
    mapping = map_native_type(engine, type_name, precision=precision, scale=scale, length=length, is_identity=identity)

    rendered = mapping.canonical.render()
    if mapping.identity:
        rendered += " IDENTITY(1,1)"
    typer.echo(rendered)

    if mapping.warning:
        warning_message(mapping.warning)
