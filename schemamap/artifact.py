"""Mapping artifact creation, persistence and loading."""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from schemamap.config import ConfigPaths, resolve_config_paths
from schemamap.constants import MAPPING_FILE_EXTENSION, MAPPING_FILE_VERSION
from schemamap.encryption import EncryptionService
from schemamap.errors import MalformedArtifact
from schemamap.models import (
    ConnectionConfig,
    ConnectionDescriptor,
    EncryptedPayload,
    ExportOptions,
    MappingArtifact,
    SourceDescriptor,
    TableDescriptor,
)

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def encrypt_password(password: str, service: EncryptionService) -> EncryptedPayload:
    """Encrypt a connection password for storage in an artifact."""
    return service.encrypt(password)


def decrypt_password(artifact: MappingArtifact, service: EncryptionService) -> str:
    """Recover the clear-text password of an artifact's source connection.

    Raises:
        AuthenticationError: If the installation key does not match
    """
    return service.decrypt(artifact.source.connection.password)


def build_mapping_artifact(
    name: str,
    config: ConnectionConfig,
    selected_schemas: list[str],
    tables: list[TableDescriptor],
    service: EncryptionService,
    export_options: ExportOptions | None = None,
    created_at: str | None = None,
) -> MappingArtifact:
    """Assemble a new mapping artifact.

    The password is encrypted before the artifact exists, so a failed
    encryption never leaves a half-built artifact behind. Table descriptors are
    deep-copied; the artifact does not share them with the caller.

    Args:
        name: Mapping name
        config: Source connection with clear-text password
        selected_schemas: Schemas in operator selection order
        tables: Introspected tables
        service: Encryption service for the installation key
        export_options: Export preferences (defaults if omitted)
        created_at: Creation timestamp (now if omitted)

    Returns:
        Validated MappingArtifact

    Raises:
        MalformedArtifact: If the pieces do not form a valid artifact
    """
    password = encrypt_password(config.password, service)

    try:
        return MappingArtifact(
            version=MAPPING_FILE_VERSION,
            name=name,
            created_at=created_at or utc_timestamp(),
            source=SourceDescriptor(
                engine=config.engine,
                connection=ConnectionDescriptor(
                    host=config.host,
                    port=config.port,
                    database=config.database,
                    user=config.user,
                    password=password,
                    ssl=config.ssl,
                ),
            ),
            selected_schemas=list(selected_schemas),
            tables=[table.model_copy(deep=True) for table in tables],
            export_options=export_options or ExportOptions(),
        )
    except ValidationError as e:
        raise MalformedArtifact(f"Invalid mapping '{name}': {e}") from e


def get_connection_from_mapping(artifact: MappingArtifact, password: str) -> ConnectionConfig:
    """Rebuild the in-memory connection config of an artifact's source."""
    connection = artifact.source.connection
    return ConnectionConfig(
        engine=artifact.source.engine,
        host=connection.host,
        port=connection.port,
        database=connection.database,
        user=connection.user,
        password=password,
        ssl=connection.ssl,
    )


def serialize_mapping_artifact(artifact: MappingArtifact) -> str:
    return artifact.model_dump_json(indent=2, by_alias=True) + "\n"


def parse_mapping_artifact(text: str, source: str = "<string>") -> MappingArtifact:
    """Parse and validate mapping JSON.

    Raises:
        MalformedArtifact: On invalid JSON, missing fields or a version mismatch
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedArtifact(f"Invalid JSON in {source}: {e}") from e

    if not isinstance(data, dict):
        raise MalformedArtifact(f"Mapping file {source} must contain a JSON object")

    try:
        return MappingArtifact.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc']) or '<root>'}: {error['msg']}" for error in e.errors()
        )
        raise MalformedArtifact(f"Invalid mapping file {source}: {problems}") from e


def mapping_file_path(name: str, paths: ConfigPaths | None = None) -> Path:
    paths = paths or resolve_config_paths()
    return paths.mappings_dir / f"{name}{MAPPING_FILE_EXTENSION}"


def save_mapping_file(artifact: MappingArtifact, paths: ConfigPaths | None = None) -> Path:
    """Write an artifact to the mappings directory.

    The file is written to a temporary sibling and renamed into place, so an
    existing mapping with the same name is superseded as a whole.

    Returns:
        Path of the written file
    """
    file_path = mapping_file_path(artifact.name, paths)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{artifact.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(serialize_mapping_artifact(artifact))
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Mapping '{artifact.name}' saved to {file_path} ({len(artifact.tables)} tables)")
    return file_path


def load_mapping_file_by_path(path: str | Path) -> MappingArtifact:
    """Load an artifact from an explicit path.

    Raises:
        FileNotFoundError: If the file does not exist
        MalformedArtifact: If the file is not UTF-8 text or not a valid artifact
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedArtifact(f"Mapping file {file_path} is not valid UTF-8: {e}") from e
    return parse_mapping_artifact(text, source=str(file_path))


def load_mapping_file(name: str, paths: ConfigPaths | None = None) -> MappingArtifact:
    """Load an artifact by mapping name from the mappings directory."""
    file_path = mapping_file_path(name, paths)
    if not file_path.exists():
        raise FileNotFoundError(f"Mapping '{name}' not found in {file_path.parent}")
    return load_mapping_file_by_path(file_path)


def load_mapping(reference: str, paths: ConfigPaths | None = None) -> MappingArtifact:
    """Load an artifact given either a mapping name or a file path."""
    if os.sep in reference or "/" in reference or reference.endswith(".json"):
        return load_mapping_file_by_path(reference)
    return load_mapping_file(reference, paths)


def list_mapping_files(paths: ConfigPaths | None = None) -> list[str]:
    """Return the names of all saved mappings, sorted."""
    paths = paths or resolve_config_paths()
    if not paths.mappings_dir.is_dir():
        return []
    return sorted(
        f.name[: -len(MAPPING_FILE_EXTENSION)]
        for f in paths.mappings_dir.iterdir()
        if f.is_file() and f.name.endswith(MAPPING_FILE_EXTENSION)
    )


def summarize_mapping(artifact: MappingArtifact) -> dict[str, object]:
    """Short description of an artifact, without any credential material."""
    connection = artifact.source.connection
    return {
        "engine": artifact.source.engine.value,
        "host": connection.host,
        "database": connection.database,
        "schemas": list(artifact.selected_schemas),
        "tables": len(artifact.tables),
        "created_at": artifact.created_at,
    }
