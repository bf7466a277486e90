"""Saved source connections, passwords encrypted with the installation key."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from schemamap.artifact import utc_timestamp
from schemamap.config import ConfigPaths, resolve_config_paths
from schemamap.constants import CONNECTION_FILE_EXTENSION
from schemamap.encryption import EncryptionService
from schemamap.errors import MalformedArtifact
from schemamap.models import ConnectionConfig, SavedConnection

logger = logging.getLogger(__name__)


def connection_file_path(name: str, paths: ConfigPaths | None = None) -> Path:
    paths = paths or resolve_config_paths()
    return paths.connections_dir / f"{name}{CONNECTION_FILE_EXTENSION}"


def save_connection(
    name: str, config: ConnectionConfig, service: EncryptionService, paths: ConfigPaths | None = None
) -> Path:
    """Save a connection for reuse.

    Returns:
        Path of the written file
    """
    saved = SavedConnection(
        name=name,
        engine=config.engine,
        host=config.host,
        port=config.port,
        database=config.database,
        user=config.user,
        password=service.encrypt(config.password),
        ssl=config.ssl,
        created_at=utc_timestamp(),
    )

    file_path = connection_file_path(name, paths)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(saved.model_dump_json(indent=2, by_alias=True) + "\n", encoding="utf-8")
    logger.info(f"Connection '{name}' saved to {file_path}")
    return file_path


def load_connection(name: str, paths: ConfigPaths | None = None) -> SavedConnection:
    """Load a saved connection by name.

    Raises:
        FileNotFoundError: If no connection with that name exists
        MalformedArtifact: If the file is not a valid saved connection
    """
    file_path = connection_file_path(name, paths)
    if not file_path.exists():
        raise FileNotFoundError(f"Connection '{name}' not found")
    try:
        return SavedConnection.model_validate_json(file_path.read_text(encoding="utf-8"))
    except (ValidationError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedArtifact(f"Invalid connection file {file_path}: {e}") from e


def list_connections(paths: ConfigPaths | None = None) -> list[str]:
    """Return the names of all saved connections, sorted."""
    paths = paths or resolve_config_paths()
    if not paths.connections_dir.is_dir():
        return []
    return sorted(
        f.name[: -len(CONNECTION_FILE_EXTENSION)]
        for f in paths.connections_dir.iterdir()
        if f.is_file() and f.name.endswith(CONNECTION_FILE_EXTENSION)
    )


def delete_connection(name: str, paths: ConfigPaths | None = None) -> None:
    file_path = connection_file_path(name, paths)
    if not file_path.exists():
        raise FileNotFoundError(f"Connection '{name}' not found")
    file_path.unlink()
    logger.info(f"Connection '{name}' deleted")


def decrypt_connection_password(saved: SavedConnection, service: EncryptionService) -> str:
    return service.decrypt(saved.password)


def get_connection_config(saved: SavedConnection, password: str) -> ConnectionConfig:
    """Turn a saved connection plus its decrypted password into a ConnectionConfig."""
    return ConnectionConfig(
        engine=saved.engine,
        host=saved.host,
        port=saved.port,
        database=saved.database,
        user=saved.user,
        password=password,
        ssl=saved.ssl,
    )
