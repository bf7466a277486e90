"""Installation configuration: config directory, encryption key and settings.

An installation lives in ``./.schemamap`` (local) or ``~/.schemamap``
(global). The key file is the sentinel for "initialized": resolution prefers
the local directory when its key file exists, then the global one.

The key is read into an :class:`~schemamap.encryption.EncryptionKey` and
handed to an :class:`~schemamap.encryption.EncryptionService`; nothing keeps
it in module state. Replacing the key makes every payload encrypted under the
old key undecryptable, so :func:`initialize_config` refuses to overwrite an
existing key unless forced.
"""

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from schemamap.constants import (
    AWS_CREDENTIALS_FILE_NAME,
    CONFIG_DIR_NAME,
    CONNECTIONS_DIR_NAME,
    DEFAULT_DDL_DIR,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_OUTPUT_DIR,
    KEY_FILE_NAME,
    LOGS_DIR_NAME,
    MAPPINGS_DIR_NAME,
    SETTINGS_FILE_NAME,
    SETTINGS_VERSION,
)
from schemamap.encryption import EncryptionKey, EncryptionService
from schemamap.errors import ConfigurationMissing

logger = logging.getLogger(__name__)


class ConfigLocation(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"


class ConfigPaths(BaseModel):
    """Filesystem layout of one installation"""

    config_dir: Path
    mappings_dir: Path
    connections_dir: Path
    logs_dir: Path
    key_file: Path
    aws_credentials_file: Path
    settings_file: Path

    @classmethod
    def for_dir(cls, config_dir: Path) -> "ConfigPaths":
        return cls(
            config_dir=config_dir,
            mappings_dir=config_dir / MAPPINGS_DIR_NAME,
            connections_dir=config_dir / CONNECTIONS_DIR_NAME,
            logs_dir=config_dir / LOGS_DIR_NAME,
            key_file=config_dir / KEY_FILE_NAME,
            aws_credentials_file=config_dir / AWS_CREDENTIALS_FILE_NAME,
            settings_file=config_dir / SETTINGS_FILE_NAME,
        )


# ============================================================================
# Settings (config.yaml)
# ============================================================================


class ExportDefaults(BaseModel):
    """Defaults written into new mapping artifacts"""

    format: Literal["parquet", "csv"] = Field(default=DEFAULT_EXPORT_FORMAT)
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR)


class DdlDefaults(BaseModel):
    """Defaults for DDL generation"""

    output_dir: str = Field(default=DEFAULT_DDL_DIR)
    target_database: str | None = Field(default=None)


class Defaults(BaseModel):
    export: ExportDefaults = Field(default_factory=ExportDefaults)
    ddl: DdlDefaults = Field(default_factory=DdlDefaults)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO")
    verbose: bool = Field(default=False)


class Settings(BaseModel):
    """Contents of config.yaml"""

    version: str = Field(default=SETTINGS_VERSION)
    defaults: Defaults = Field(default_factory=Defaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ============================================================================
# Path resolution
# ============================================================================


def get_config_paths(location: ConfigLocation | str) -> ConfigPaths:
    """Return the paths for a location, whether or not it is initialized."""
    if ConfigLocation(location) == ConfigLocation.LOCAL:
        return ConfigPaths.for_dir(Path.cwd() / CONFIG_DIR_NAME)
    return ConfigPaths.for_dir(Path.home() / CONFIG_DIR_NAME)


def get_config_location() -> ConfigLocation | None:
    """Return the initialized location that resolution would pick, if any."""
    for location in (ConfigLocation.LOCAL, ConfigLocation.GLOBAL):
        if get_config_paths(location).key_file.is_file():
            return location
    return None


def resolve_config_paths() -> ConfigPaths:
    """Return the paths of the active installation.

    Raises:
        ConfigurationMissing: If neither a local nor a global key file exists
    """
    location = get_config_location()
    if location is None:
        raise ConfigurationMissing()
    return get_config_paths(location)


def is_initialized(location: ConfigLocation | str | None = None) -> bool:
    """Check whether a location (or any location) has a key file."""
    if location is not None:
        return get_config_paths(location).key_file.is_file()
    return get_config_location() is not None


# ============================================================================
# Lifecycle
# ============================================================================


def initialize_config(location: ConfigLocation | str, key: EncryptionKey, force: bool = False) -> ConfigPaths:
    """Create an installation and persist its encryption key.

    Args:
        location: Where to create the config directory
        key: Installation key
        force: Overwrite an existing key (invalidates all existing payloads)

    Returns:
        ConfigPaths of the new installation

    Raises:
        FileExistsError: If the location is already initialized and force is False
    """
    paths = get_config_paths(location)
    if paths.key_file.exists() and not force:
        raise FileExistsError(f"Configuration already exists at {paths.config_dir}")

    for directory in (paths.config_dir, paths.mappings_dir, paths.connections_dir, paths.logs_dir):
        directory.mkdir(parents=True, exist_ok=True)

    paths.key_file.write_text(key.to_hex() + "\n", encoding="utf-8")
    paths.key_file.chmod(0o600)

    if not paths.settings_file.exists():
        save_settings(Settings(), paths)

    logger.info(f"Configuration initialized at {paths.config_dir}")
    return paths


def remove_config(location: ConfigLocation | str) -> Path:
    """Delete an installation, including its key, mappings and saved connections.

    Returns:
        The removed config directory

    Raises:
        ConfigurationMissing: If the location has no config directory
    """
    paths = get_config_paths(location)
    if not paths.config_dir.is_dir():
        raise ConfigurationMissing(f"No configuration at {paths.config_dir}")
    shutil.rmtree(paths.config_dir)
    logger.info(f"Configuration removed from {paths.config_dir}")
    return paths.config_dir


def load_encryption_key(paths: ConfigPaths | None = None) -> EncryptionKey:
    """Read the installation key.

    Raises:
        ConfigurationMissing: If no key file is resolvable
    """
    paths = paths or resolve_config_paths()
    try:
        key_hex = paths.key_file.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationMissing() from e
    return EncryptionKey.from_hex(key_hex)


def get_encryption_service(paths: ConfigPaths | None = None) -> EncryptionService:
    """Build an EncryptionService around the installation key."""
    return EncryptionService(load_encryption_key(paths))


# ============================================================================
# Settings persistence
# ============================================================================


def load_settings(paths: ConfigPaths | None = None) -> Settings:
    """Load config.yaml, falling back to defaults when it does not exist.

    Raises:
        ValueError: If the file is not valid YAML or fails validation
    """
    if paths is None:
        try:
            paths = resolve_config_paths()
        except ConfigurationMissing:
            return Settings()

    if not paths.settings_file.exists():
        return Settings()

    try:
        with paths.settings_file.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {paths.settings_file}: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings in {paths.settings_file}: {e}") from e


def save_settings(settings: Settings, paths: ConfigPaths | None = None) -> Path:
    """Write config.yaml."""
    paths = paths or resolve_config_paths()
    paths.settings_file.parent.mkdir(parents=True, exist_ok=True)
    with paths.settings_file.open("w", encoding="utf-8") as f:
        yaml.safe_dump(settings.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)
    return paths.settings_file


def validate_settings(settings: Settings) -> list[str]:
    """Check settings for values pydantic alone does not reject.

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []
    if settings.version != SETTINGS_VERSION:
        errors.append(f"Unsupported settings version '{settings.version}' (expected '{SETTINGS_VERSION}')")
    if settings.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append("'logging.level' must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
    if not settings.defaults.export.output_dir:
        errors.append("'defaults.export.output_dir' must not be empty")
    if not settings.defaults.ddl.output_dir:
        errors.append("'defaults.ddl.output_dir' must not be empty")
    return errors
