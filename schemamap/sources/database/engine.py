"""Database connection URLs and engine management."""

import logging
import re
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from schemamap.models import ConnectionConfig, SourceEngine

logger = logging.getLogger(__name__)

DRIVERS = {
    SourceEngine.POSTGRESQL: "postgresql+psycopg2",
    SourceEngine.MYSQL: "mysql+pymysql",
    SourceEngine.SQLSERVER: "mssql+pyodbc",
}

MSSQL_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def build_connection_url(config: ConnectionConfig) -> URL:
    """Build the SQLAlchemy URL for a source connection.

    The TLS flag becomes the driver's query argument where it has one
    (``sslmode`` for psycopg2, ``Encrypt`` for the ODBC driver); MySQL gets it
    through connect args in :func:`create_database_engine`.
    """
    query: dict[str, str] = {}
    match config.engine:
        case SourceEngine.POSTGRESQL:
            query["sslmode"] = "require" if config.ssl else "prefer"
        case SourceEngine.SQLSERVER:
            query["driver"] = MSSQL_ODBC_DRIVER
            query["Encrypt"] = "yes" if config.ssl else "no"
        case SourceEngine.MYSQL:
            query["charset"] = "utf8mb4"

    return URL.create(
        drivername=DRIVERS[config.engine],
        username=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        database=config.database,
        query=query,
    )


def sanitize_connection_string(connection_string: str | URL) -> str:
    """Sanitize a database connection string by removing passwords for logging.

    Args:
        connection_string: Connection string or SQLAlchemy URL

    Returns:
        Sanitized connection string with password replaced by ***
    """
    if isinstance(connection_string, URL):
        return connection_string.render_as_string(hide_password=True)
    # Matches :password@ in the authority part
    return re.sub(r"://([^:/@]+):([^@]*)@", r"://\1:***@", connection_string)


def create_database_engine(config: ConnectionConfig) -> Engine:
    """Create a SQLAlchemy engine for a source connection.

    Args:
        config: Connection settings with clear-text password

    Returns:
        SQLAlchemy Engine instance
    """
    url = build_connection_url(config)

    # Add driver-specific connection arguments if needed
    connect_args: dict[str, Any] = {}
    if config.engine == SourceEngine.MYSQL and config.ssl:
        connect_args["ssl"] = {"check_hostname": True}

    logger.debug(f"Creating engine for {sanitize_connection_string(url)}")
    return create_engine(url, connect_args=connect_args, echo=False)
