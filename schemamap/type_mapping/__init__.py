"""Native column type to warehouse type mapping.

One table-driven mapper per source engine; callers pick the variant through
the engine discriminator with :func:`get_type_mapper` or call
:func:`map_type` directly.
"""

from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping.base import TableDrivenTypeMapper, TypeMapper, TypeRule, parse_native_type, unmapped
from schemamap.type_mapping.canonical import CanonicalType, TypeKind, TypeMapping
from schemamap.type_mapping.mysql import MySQLTypeMapper
from schemamap.type_mapping.postgresql import PostgresTypeMapper
from schemamap.type_mapping.sqlserver import SqlServerTypeMapper

_MAPPERS: dict[SourceEngine, TypeMapper] = {
    SourceEngine.POSTGRESQL: PostgresTypeMapper(),
    SourceEngine.MYSQL: MySQLTypeMapper(),
    SourceEngine.SQLSERVER: SqlServerTypeMapper(),
}


def get_type_mapper(engine: SourceEngine | str) -> TypeMapper:
    """Return the type mapper for a source engine.

    Args:
        engine: Source engine (postgresql, mysql, sqlserver)

    Returns:
        The engine's TypeMapper

    Raises:
        ValueError: If the engine has no mapper
    """
    try:
        return _MAPPERS[SourceEngine(engine)]
    except ValueError as e:
        raise ValueError(f"Unsupported engine: {engine}. Must be 'postgresql', 'mysql', or 'sqlserver'") from e


def map_type(engine: SourceEngine | str, column: ColumnDescriptor) -> TypeMapping:
    """Map a column's native type to a canonical warehouse type.

    Never raises for unknown types or engines: those come back as UNMAPPED
    with a warning naming the original type.

    Args:
        engine: Source engine the column came from
        column: Column descriptor

    Returns:
        TypeMapping of (canonical type, warning or None, identity flag)
    """
    try:
        mapper = get_type_mapper(engine)
    except ValueError:
        mapping = unmapped(column)
        return mapping._replace(warning=f"{mapping.warning} (no type mapper for engine '{engine}')")
    return mapper.map_column(column)


def map_native_type(
    engine: SourceEngine | str,
    data_type: str,
    precision: int | None = None,
    scale: int | None = None,
    length: int | None = None,
    is_identity: bool = False,
) -> TypeMapping:
    """Map a bare native type name, without a full column descriptor."""
    column = ColumnDescriptor(
        name="value",
        data_type=data_type,
        precision=precision,
        scale=scale,
        length=length,
        ordinal_position=1,
        is_identity=is_identity,
    )
    return map_type(engine, column)


__all__ = [
    "CanonicalType",
    "MySQLTypeMapper",
    "PostgresTypeMapper",
    "SqlServerTypeMapper",
    "TableDrivenTypeMapper",
    "TypeKind",
    "TypeMapper",
    "TypeMapping",
    "TypeRule",
    "get_type_mapper",
    "map_native_type",
    "map_type",
    "parse_native_type",
]
