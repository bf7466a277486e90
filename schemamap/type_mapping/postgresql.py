"""PostgreSQL native type mapping."""

from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping.base import NativeType, Params, TableDrivenTypeMapper, TypeRule
from schemamap.type_mapping.canonical import CanonicalType, TypeKind

RULES: dict[str, TypeRule] = {
    # Integers
    "smallint": TypeRule(TypeKind.SMALLINT),
    "int2": TypeRule(TypeKind.SMALLINT),
    "integer": TypeRule(TypeKind.INTEGER),
    "int": TypeRule(TypeKind.INTEGER),
    "int4": TypeRule(TypeKind.INTEGER),
    "bigint": TypeRule(TypeKind.BIGINT),
    "int8": TypeRule(TypeKind.BIGINT),
    # Exact and approximate numerics
    "numeric": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE),
    "decimal": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE),
    "money": TypeRule(TypeKind.NUMBER, precision=19, scale=2, note="money stored as NUMBER(19,2) without currency"),
    "real": TypeRule(TypeKind.FLOAT),
    "float4": TypeRule(TypeKind.FLOAT),
    "double precision": TypeRule(TypeKind.DOUBLE),
    "float8": TypeRule(TypeKind.DOUBLE),
    "float": TypeRule(TypeKind.DOUBLE),
    # Text
    "character varying": TypeRule(TypeKind.VARCHAR, Params.LENGTH),
    "varchar": TypeRule(TypeKind.VARCHAR, Params.LENGTH),
    "character": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "char": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "bpchar": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "text": TypeRule(TypeKind.VARCHAR),
    "citext": TypeRule(TypeKind.VARCHAR),
    "name": TypeRule(TypeKind.VARCHAR, length=63),
    "uuid": TypeRule(TypeKind.VARCHAR, length=36),
    "inet": TypeRule(TypeKind.VARCHAR, length=43),
    "cidr": TypeRule(TypeKind.VARCHAR, length=43),
    "macaddr": TypeRule(TypeKind.VARCHAR, length=17),
    # Boolean
    "boolean": TypeRule(TypeKind.BOOLEAN),
    "bool": TypeRule(TypeKind.BOOLEAN),
    # Temporal
    "date": TypeRule(TypeKind.DATE),
    "time": TypeRule(TypeKind.TIME, Params.PRECISION),
    "time without time zone": TypeRule(TypeKind.TIME, Params.PRECISION),
    "time with time zone": TypeRule(TypeKind.TIME, Params.PRECISION, note="time zone offset of timetz dropped"),
    "timetz": TypeRule(TypeKind.TIME, Params.PRECISION, note="time zone offset of timetz dropped"),
    "timestamp": TypeRule(TypeKind.TIMESTAMP_NTZ, Params.PRECISION),
    "timestamp without time zone": TypeRule(TypeKind.TIMESTAMP_NTZ, Params.PRECISION),
    "timestamp with time zone": TypeRule(TypeKind.TIMESTAMP_TZ, Params.PRECISION),
    "timestamptz": TypeRule(TypeKind.TIMESTAMP_TZ, Params.PRECISION),
    # Semi-structured
    "json": TypeRule(TypeKind.VARIANT),
    "jsonb": TypeRule(TypeKind.VARIANT),
    "xml": TypeRule(TypeKind.VARIANT),
    "hstore": TypeRule(TypeKind.VARIANT),
    # Binary
    "bytea": TypeRule(TypeKind.BINARY),
}

IDENTITY_ALIASES: dict[str, str] = {
    "smallserial": "smallint",
    "serial2": "smallint",
    "serial": "integer",
    "serial4": "integer",
    "bigserial": "bigint",
    "serial8": "bigint",
}


class PostgresTypeMapper(TableDrivenTypeMapper):
    """Maps PostgreSQL types, including ``udt_name`` spellings such as ``_int4``."""

    engine = SourceEngine.POSTGRESQL
    RULES = RULES
    IDENTITY_ALIASES = IDENTITY_ALIASES

    def map_special(
        self, native: NativeType, column: ColumnDescriptor
    ) -> tuple[CanonicalType, str | None] | None:
        # information_schema reports arrays as "ARRAY" and udt_name as "_<element>"
        if native.base == "array" and not native.is_array:
            unknown = CanonicalType.unmapped("unknown")
            return CanonicalType.array(unknown), "array of unknown element type stored as ARRAY"
        if native.base.startswith("_") and not native.is_array:
            element = native.base[1:]
            array = NativeType(original=column.data_type, base="array", is_array=True, element=element)
            return self._map_native(array, column)
        return None
