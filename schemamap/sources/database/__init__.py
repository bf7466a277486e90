"""Source database connection and schema introspection.

This package turns a live PostgreSQL, MySQL or SQL Server database into the
canonical schema model consumed by the DDL synthesizer.
"""

from schemamap.sources.database.engine import build_connection_url, create_database_engine, sanitize_connection_string
from schemamap.sources.database.introspection import (
    build_column_descriptor,
    introspect_table,
    introspect_tables,
    list_schemas,
    list_tables,
)

__all__ = [
    # Engine
    "build_connection_url",
    "create_database_engine",
    "sanitize_connection_string",
    # Introspection
    "build_column_descriptor",
    "introspect_table",
    "introspect_tables",
    "list_schemas",
    "list_tables",
]
