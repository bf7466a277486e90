"""Main entry point for the schemamap CLI tool."""

import logging

import typer

from schemamap.config import Settings, is_initialized, load_settings, resolve_config_paths, validate_settings
from schemamap.log_file import init_log_file
from schemamap_cli import __version__
from schemamap_cli.commands import connections, credentials, mappings
from schemamap_cli.commands.ddl import generate_ddl
from schemamap_cli.commands.init import init, reset
from schemamap_cli.commands.mapping import map_schema, refresh_mapping
from schemamap_cli.commands.types import map_type_command
from schemamap_cli.commands.validate import validate
from schemamap_cli.output import warning_message

logger = logging.getLogger(__name__)

# Create main app
app = typer.Typer(
    name="schemamap",
    help="Map PostgreSQL, MySQL and SQL Server schemas to Snowflake DDL",
    no_args_is_help=True,
    add_completion=False,
)

# Add subcommands
app.command(name="init")(init)
app.command(name="map")(map_schema)
app.command(name="refresh")(refresh_mapping)
app.command(name="generate-ddl")(generate_ddl)
app.command(name="validate")(validate)
app.command(name="map-type")(map_type_command)
app.command(name="reset")(reset)
app.add_typer(mappings.app, name="mappings")
app.add_typer(connections.app, name="connections")
app.add_typer(credentials.app, name="credentials")


def version_callback(show_version: bool) -> None:
    """Show version and exit.

    Args:
        show_version: Whether to show version
    """
    if show_version:
        typer.echo(f"schemamap version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Start this run's log file in the active installation, if there is one."""
    try:
        settings = load_settings()
    except ValueError as e:
        warning_message(f"{e}; using default settings")
        settings = Settings()
    for problem in validate_settings(settings):
        warning_message(f"config.yaml: {problem}")

    logs_dir = resolve_config_paths().logs_dir if is_initialized() else None
    log_path = init_log_file(
        logs_dir,
        verbose=verbose or settings.logging.verbose,
        level=settings.logging.level,
    )
    if log_path is not None:
        logger.debug(f"Logging to {log_path}")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output on the console"),
) -> None:
    """Map relational schemas to Snowflake DDL.

    Examples:

        # Create the installation key
        schemamap init

        # Introspect a PostgreSQL schema into a mapping
        schemamap map --engine postgresql --host localhost --database shop --user app --schema public --name shop

        # Generate Snowflake DDL from the mapping
        schemamap generate-ddl shop --output ddl/shop.sql

    For detailed help on each command:
        schemamap map --help
        schemamap generate-ddl --help
    """
    setup_logging(verbose)


if __name__ == "__main__":
    app()
