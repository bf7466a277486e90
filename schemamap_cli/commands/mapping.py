"""Schema mapping command: introspect a source database into a mapping artifact."""

import logging
from pathlib import Path

import typer

from schemamap.artifact import (
    build_mapping_artifact,
    decrypt_password,
    get_connection_from_mapping,
    load_mapping,
    save_mapping_file,
)
from schemamap.config import get_encryption_service, load_settings
from schemamap.connections import decrypt_connection_password, get_connection_config, load_connection, save_connection
from schemamap.constants import DEFAULT_PORTS
from schemamap.encryption import EncryptionService
from schemamap.errors import AuthenticationError, ConfigurationMissing, MalformedArtifact
from schemamap.models import ConnectionConfig, ExportOptions, MappingArtifact, SourceEngine, TableDescriptor
from schemamap.sources.database import create_database_engine, introspect_tables, list_schemas
from schemamap.type_mapping import map_type
from schemamap.validation import is_valid_database_name, is_valid_host, is_valid_mapping_name, is_valid_port
from schemamap_cli.output import error_message, show_summary_table, success_message, warning_message

logger = logging.getLogger(__name__)


def tables_for_schema(schema: str, table_options: list[str]) -> list[str] | None:
    """Pick the --table values that apply to a schema.

    ``schema.table`` values apply to that schema only, bare names to every
    schema. No --table options means all tables.
    """
    if not table_options:
        return None
    selected = []
    for option in table_options:
        if "." in option:
            option_schema, table = option.split(".", 1)
            if option_schema == schema:
                selected.append(table)
        else:
            selected.append(option)
    return selected


def _resolve_connection(
    service: EncryptionService,
    connection_name: str | None,
    engine: SourceEngine,
    host: str | None,
    port: int | None,
    database: str | None,
    user: str | None,
    password: str | None,
    ssl: bool,
) -> ConnectionConfig:
    if connection_name:
        saved = load_connection(connection_name)
        return get_connection_config(saved, decrypt_connection_password(saved, service))

    if not host or not is_valid_host(host):
        raise typer.BadParameter("A valid --host is required", param_hint="--host")
    if not database or not is_valid_database_name(database):
        raise typer.BadParameter("A valid --database is required", param_hint="--database")
    if not user:
        raise typer.BadParameter("--user is required", param_hint="--user")
    port = port or DEFAULT_PORTS[engine.value]
    if not is_valid_port(port):
        raise typer.BadParameter("Port must be between 1 and 65535", param_hint="--port")
    if password is None:
        password = typer.prompt("Password", hide_input=True, default="", show_default=False)

    return ConnectionConfig(
        engine=engine, host=host, port=port, database=database, user=user, password=password, ssl=ssl
    )


def _warning_count(table: TableDescriptor, engine: SourceEngine) -> int:
    return sum(1 for column in table.columns if map_type(engine, column).warning)


def _introspect(config: ConnectionConfig, schemas: list[str], table_options: list[str]) -> list[TableDescriptor]:
    """Connect, check the schemas exist and read their tables in selection order."""
    db_engine = create_database_engine(config)
    try:
        available = list_schemas(db_engine, config.engine)
        missing = [schema for schema in schemas if schema not in available]
        if missing:
            raise ValueError(f"Schema(s) not found: {', '.join(missing)}. Available: {', '.join(available)}")

        descriptors: list[TableDescriptor] = []
        for schema in schemas:
            descriptors.extend(
                introspect_tables(db_engine, config.engine, schema, tables_for_schema(schema, table_options))
            )
    finally:
        db_engine.dispose()

    if not descriptors:
        warning_message("No tables found in the selected schemas")
    return descriptors


def _show_mapping(artifact: MappingArtifact, path: Path) -> None:
    engine = artifact.source.engine
    show_summary_table(
        f"Mapping '{artifact.name}'",
        ["Schema", "Table", "Columns", "Foreign keys", "Warnings"],
        [
            (t.schema_name, t.table_name, len(t.columns), len(t.foreign_keys), _warning_count(t, engine))
            for t in artifact.tables
        ],
    )
    success_message(f"Mapping saved to {path}")


def map_schema(
    schemas: list[str] = typer.Option(..., "--schema", "-s", help="Schema to map (repeat for several, order is kept)"),
    name: str = typer.Option(..., "--name", "-n", help="Mapping name"),
    engine: SourceEngine = typer.Option(SourceEngine.POSTGRESQL, "--engine", "-e", help="Source database engine"),
    host: str | None = typer.Option(None, "--host", help="Database host"),
    port: int | None = typer.Option(None, "--port", help="Database port (default: engine default)"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name"),
    user: str | None = typer.Option(None, "--user", "-u", help="Database user"),
    password: str | None = typer.Option(
        None, "--password", envvar="SCHEMAMAP_PASSWORD", help="Database password (prompted if omitted)"
    ),
    ssl: bool = typer.Option(False, "--ssl", help="Connect with TLS"),
    tables: list[str] | None = typer.Option(
        None, "--table", "-t", help="Table to include, as name or schema.name (default: all tables)"
    ),
    export_format: str | None = typer.Option(None, "--format", help="Export format: parquet or csv"),
    output_dir: str | None = typer.Option(None, "--output-dir", help="Export output directory"),
    connection_name: str | None = typer.Option(None, "--connection", "-c", help="Use a saved connection"),
    save_connection_name: str | None = typer.Option(
        None, "--save-connection", help="Save the connection under this name"
    ),
) -> None:
    """Introspect source schemas and save them as a mapping.

    Examples:
        # Map two PostgreSQL schemas
        schemamap map --engine postgresql --host localhost --database shop --user app \\
            --schema public --schema sales --name shop

        # Map selected tables through a saved connection
        schemamap map --connection prod --schema dbo --table orders --table customers --name orders
    """
    if not is_valid_mapping_name(name):
        error_message(f"Invalid mapping name: {name}", hint="Use letters, digits, '-' and '_' only")
        raise typer.Exit(1)
    if save_connection_name and not is_valid_mapping_name(save_connection_name):
        error_message(f"Invalid connection name: {save_connection_name}", hint="Use letters, digits, '-' and '_' only")
        raise typer.Exit(1)

    try:
        service = get_encryption_service()
        config = _resolve_connection(service, connection_name, engine, host, port, database, user, password, ssl)

        settings = load_settings()
        export_options = ExportOptions(
            format=export_format or settings.defaults.export.format,
            output_dir=output_dir or settings.defaults.export.output_dir,
        )

        descriptors = _introspect(config, schemas, tables or [])
        artifact = build_mapping_artifact(name, config, schemas, descriptors, service, export_options)
        path = save_mapping_file(artifact)

        if save_connection_name:
            save_connection(save_connection_name, config, service)
            success_message(f"Connection saved as '{save_connection_name}'")

        _show_mapping(artifact, path)

    except typer.BadParameter:
        raise
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' to create the encryption key")
        raise typer.Exit(1) from e
    except AuthenticationError as e:
        error_message(f"Could not decrypt saved connection: {e}", hint="The connection was saved under another key")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        error_message(str(e), hint="List saved connections with 'schemamap connections list'")
        raise typer.Exit(1) from e
    except (MalformedArtifact, ValueError) as e:
        error_message(str(e), hint="Check the schema and table names")
        raise typer.Exit(1) from e
    except Exception as e:
        logger.debug("Mapping failed", exc_info=True)
        error_message(f"Failed to map schema: {e}", hint="Check the connection settings and that the server is reachable")
        raise typer.Exit(1) from e


def refresh_mapping(
    mapping: str = typer.Argument(..., help="Mapping name or path to a mapping file"),
    all_tables: bool = typer.Option(
        False, "--all-tables", help="Map every table in the selected schemas, not only the ones already mapped"
    ),
) -> None:
    """Re-introspect a mapping's source with its stored connection.

    The password stored in the mapping is decrypted with the installation key,
    the selected schemas are read again and the mapping is saved under the same
    name with a new creation timestamp. Export options are kept.

    Examples:
        schemamap refresh shop
        schemamap refresh shop --all-tables
    """
    try:
        service = get_encryption_service()
        previous = load_mapping(mapping)
        config = get_connection_from_mapping(previous, decrypt_password(previous, service))

        table_options = [] if all_tables else [t.qualified_name for t in previous.tables]
        if not all_tables and not table_options:
            warning_message("The mapping has no tables; nothing to refresh (use --all-tables)")
            raise typer.Exit(1)

        descriptors = _introspect(config, previous.selected_schemas, table_options)
        dropped = {t.qualified_name for t in previous.tables} - {t.qualified_name for t in descriptors}
        for qualified in sorted(dropped):
            warning_message(f"Table {qualified} no longer exists in the source")

        artifact = build_mapping_artifact(
            previous.name, config, previous.selected_schemas, descriptors, service, previous.export_options
        )
        path = save_mapping_file(artifact)
        logger.info(f"Mapping '{artifact.name}' refreshed ({len(descriptors)} tables)")
        _show_mapping(artifact, path)

    except typer.Exit:
        raise
    except ConfigurationMissing as e:
        error_message(str(e), hint="Run 'schemamap init' to create the encryption key")
        raise typer.Exit(1) from e
    except AuthenticationError as e:
        error_message(f"Could not decrypt the mapping's password: {e}", hint="The mapping was saved under another key")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        error_message(str(e), hint="List saved mappings with 'schemamap mappings list'")
        raise typer.Exit(1) from e
    except (MalformedArtifact, ValueError) as e:
        error_message(str(e))
        raise typer.Exit(1) from e
    except Exception as e:
        logger.debug("Refresh failed", exc_info=True)
        error_message(f"Failed to refresh mapping: {e}", hint="Check that the server is reachable")
        raise typer.Exit(1) from e
