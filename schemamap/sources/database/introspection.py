"""Schema introspection into the canonical schema model.

Everything here goes through SQLAlchemy's inspector, so the three source
engines share one code path; only system-schema filtering and identity
detection look at the engine.
"""

import logging
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, NoSuchTableError
from sqlalchemy.types import NullType, TypeEngine

from schemamap.constants import SYSTEM_SCHEMAS
from schemamap.models import ColumnDescriptor, ForeignKey, PrimaryKey, SourceEngine, TableDescriptor

logger = logging.getLogger(__name__)


def list_schemas(engine: Engine, source_engine: SourceEngine | str) -> list[str]:
    """List user schemas, excluding the engine's system schemas.

    Args:
        engine: SQLAlchemy engine connected to the source
        source_engine: Source engine type

    Returns:
        Schema names in the order the database reports them
    """
    source_engine = SourceEngine(source_engine)
    inspector = inspect(engine)
    system = SYSTEM_SCHEMAS[source_engine.value]

    schemas = []
    for name in inspector.get_schema_names():
        if name in system:
            continue
        if source_engine == SourceEngine.POSTGRESQL and name.startswith(("pg_temp_", "pg_toast_temp_")):
            continue
        schemas.append(name)
    return schemas


def list_tables(engine: Engine, schema: str) -> list[str]:
    """List base tables (not views) in a schema, sorted."""
    inspector = inspect(engine)
    return sorted(inspector.get_table_names(schema=schema))


def native_type_name(type_: TypeEngine, engine: Engine) -> str:
    """Render a reflected type the way the source dialect spells it."""
    if isinstance(type_, NullType):
        return "unknown"
    try:
        return str(type_.compile(dialect=engine.dialect))
    except CompileError:
        return str(type_)


def _int_attr(type_: TypeEngine, *names: str) -> int | None:
    for name in names:
        value = getattr(type_, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _is_identity(column: dict[str, Any]) -> bool:
    if column.get("identity"):
        return True
    if column.get("autoincrement") is True:
        return True
    default = column.get("default")
    return isinstance(default, str) and default.strip().lower().startswith("nextval(")


def build_column_descriptor(column: dict[str, Any], position: int, engine: Engine) -> ColumnDescriptor:
    """Convert one ``Inspector.get_columns`` entry into a ColumnDescriptor.

    Args:
        column: Reflected column dict
        position: 1-based ordinal position
        engine: Engine whose dialect renders the type name

    Returns:
        ColumnDescriptor
    """
    type_ = column["type"]
    default = column.get("default")
    return ColumnDescriptor(
        name=column["name"],
        data_type=native_type_name(type_, engine),
        precision=_int_attr(type_, "precision", "fsp"),
        scale=_int_attr(type_, "scale"),
        length=_int_attr(type_, "length"),
        is_nullable=column.get("nullable", True),
        default_value=str(default) if default is not None else None,
        ordinal_position=position,
        is_identity=_is_identity(column),
    )


def introspect_table(engine: Engine, schema: str, table_name: str) -> TableDescriptor:
    """Describe one table: columns, primary key and foreign keys.

    Raises:
        ValueError: If the table does not exist
    """
    inspector = inspect(engine)
    try:
        columns = inspector.get_columns(table_name, schema=schema)
    except NoSuchTableError as e:
        raise ValueError(f"Table '{table_name}' not found in schema '{schema}'") from e

    pk_constraint = inspector.get_pk_constraint(table_name, schema=schema) or {}
    pk_columns = pk_constraint.get("constrained_columns") or []
    primary_key = PrimaryKey(name=pk_constraint.get("name"), columns=pk_columns) if pk_columns else None

    foreign_keys = []
    for fk in inspector.get_foreign_keys(table_name, schema=schema):
        if not fk.get("constrained_columns") or not fk.get("referred_columns"):
            logger.debug(f"Skipping foreign key without columns on {schema}.{table_name}")
            continue
        foreign_keys.append(
            ForeignKey(
                name=fk.get("name"),
                columns=fk["constrained_columns"],
                referenced_schema=fk.get("referred_schema") or schema,
                referenced_table=fk["referred_table"],
                referenced_columns=fk["referred_columns"],
            )
        )

    return TableDescriptor(
        schema_name=schema,
        table_name=table_name,
        columns=[build_column_descriptor(col, i, engine) for i, col in enumerate(columns, start=1)],
        primary_key=primary_key,
        foreign_keys=foreign_keys,
    )


def introspect_tables(
    engine: Engine,
    source_engine: SourceEngine | str,
    schema: str,
    tables: list[str] | None = None,
) -> list[TableDescriptor]:
    """Describe the selected tables of a schema.

    Args:
        engine: SQLAlchemy engine connected to the source
        source_engine: Source engine type
        schema: Schema to read
        tables: Table names to include (all tables when None)

    Returns:
        TableDescriptors in the order of ``tables`` (sorted when all tables)
    """
    source_engine = SourceEngine(source_engine)
    table_names = tables if tables is not None else list_tables(engine, schema)
    logger.info(f"Introspecting {len(table_names)} tables in {source_engine.value} schema '{schema}'")

    descriptors = []
    for table_name in table_names:
        descriptor = introspect_table(engine, schema, table_name)
        logger.debug(
            f"{descriptor.qualified_name}: {len(descriptor.columns)} columns, "
            f"{len(descriptor.foreign_keys)} foreign keys"
        )
        descriptors.append(descriptor)
    return descriptors
