"""Pytest configuration and shared fixtures"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.console import Console

from schemamap.artifact import build_mapping_artifact
from schemamap.config import ConfigLocation, ConfigPaths, initialize_config
from schemamap.encryption import EncryptionKey, EncryptionService
from schemamap.log_file import LOGGER_NAMES
from schemamap.models import (
    ColumnDescriptor,
    ConnectionConfig,
    ForeignKey,
    MappingArtifact,
    PrimaryKey,
    SourceEngine,
    TableDescriptor,
)

FIXED_CREATED_AT = "2024-05-01T12:00:00.000Z"


@pytest.fixture(autouse=True)
def reset_app_loggers() -> Iterator[None]:
    """Undo handler changes made by CLI runs so tests do not leak log output"""
    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Render CLI tables wide enough that cell text is never truncated"""
    monkeypatch.setattr("schemamap_cli.output.console", Console(width=200))


@pytest.fixture
def key() -> EncryptionKey:
    """Return a fixed installation key"""
    return EncryptionKey(bytes(range(32)))


@pytest.fixture
def other_key() -> EncryptionKey:
    """Return a key different from ``key``"""
    return EncryptionKey(bytes(range(100, 132)))


@pytest.fixture
def service(key: EncryptionKey) -> EncryptionService:
    return EncryptionService(key)


@pytest.fixture
def home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir and run the test from an empty working directory"""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(work)
    return home


@pytest.fixture
def installation(home_dir: Path, key: EncryptionKey) -> ConfigPaths:
    """Return the paths of an initialized global installation"""
    return initialize_config(ConfigLocation.GLOBAL, key)


@pytest.fixture
def connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        engine=SourceEngine.POSTGRESQL,
        host="db.example.com",
        port=5432,
        database="shop",
        user="app",
        password="s3cret!",
        ssl=True,
    )


@pytest.fixture
def orders_table() -> TableDescriptor:
    """orders(id serial primary key, customer_id int4 references customers(id))"""
    return TableDescriptor(
        schema_name="public",
        table_name="orders",
        columns=[
            ColumnDescriptor(
                name="id",
                data_type="serial",
                is_nullable=False,
                default_value="nextval('orders_id_seq'::regclass)",
                ordinal_position=1,
            ),
            ColumnDescriptor(name="customer_id", data_type="int4", ordinal_position=2),
        ],
        primary_key=PrimaryKey(name="orders_pkey", columns=["id"]),
        foreign_keys=[
            ForeignKey(
                name="orders_customer_id_fkey",
                columns=["customer_id"],
                referenced_schema="public",
                referenced_table="customers",
                referenced_columns=["id"],
            )
        ],
    )


@pytest.fixture
def customers_table() -> TableDescriptor:
    return TableDescriptor(
        schema_name="public",
        table_name="customers",
        columns=[
            ColumnDescriptor(name="id", data_type="integer", is_nullable=False, is_identity=True, ordinal_position=1),
            ColumnDescriptor(name="name", data_type="character varying", length=200, ordinal_position=2),
            ColumnDescriptor(name="balance", data_type="numeric", precision=10, scale=2, ordinal_position=3),
            ColumnDescriptor(
                name="created_at",
                data_type="timestamp with time zone",
                default_value="now()",
                is_nullable=False,
                ordinal_position=4,
            ),
            ColumnDescriptor(name="mood", data_type="mood_enum", ordinal_position=5),
        ],
        primary_key=PrimaryKey(columns=["id"]),
    )


@pytest.fixture
def sample_artifact(
    orders_table: TableDescriptor,
    customers_table: TableDescriptor,
    connection_config: ConnectionConfig,
    service: EncryptionService,
) -> MappingArtifact:
    """Return a mapping whose orders table references customers, which comes later"""
    return build_mapping_artifact(
        name="shop",
        config=connection_config,
        selected_schemas=["public"],
        tables=[orders_table, customers_table],
        service=service,
        created_at=FIXED_CREATED_AT,
    )
