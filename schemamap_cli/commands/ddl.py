"""DDL generation command."""

from pathlib import Path

import typer

from schemamap.artifact import load_mapping
from schemamap.config import load_settings
from schemamap.ddl import synthesize
from schemamap.errors import ConfigurationMissing, MalformedArtifact
from schemamap_cli.output import error_message, output_ddl


def generate_ddl(
    mapping: str = typer.Argument(..., help="Mapping name or path to a .mapping.json file"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file path (default: stdout)", dir_okay=False, resolve_path=True
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="Target database to create and use (default: from config.yaml)"
    ),
) -> None:
    """Generate Snowflake DDL from a mapping.

    Examples:
        # Print DDL for a saved mapping
        schemamap generate-ddl shop

        # Write DDL for a mapping file, creating the target database first
        schemamap generate-ddl ./shop.mapping.json --database ANALYTICS --output ddl/shop.sql
    """
    try:
        artifact = load_mapping(mapping)
        settings = load_settings()
        statements = synthesize(artifact, target_database=database or settings.defaults.ddl.target_database)
        output_ddl(statements, output_path=output)

    except ConfigurationMissing as e:
        error_message(str(e), hint="Pass a file path, or run 'schemamap init' first")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        error_message(str(e), hint="List saved mappings with 'schemamap mappings list'")
        raise typer.Exit(1) from e
    except MalformedArtifact as e:
        error_message(str(e), hint="Re-create the mapping with 'schemamap map'")
        raise typer.Exit(1) from e
    except Exception as e:
        error_message(f"Failed to generate DDL: {e}")
        raise typer.Exit(1) from e
