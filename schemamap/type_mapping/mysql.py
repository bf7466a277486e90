"""MySQL native type mapping."""

from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping.base import NativeType, Params, TableDrivenTypeMapper, TypeRule, apply_rule, int_param
from schemamap.type_mapping.canonical import CanonicalType, TypeKind

RULES: dict[str, TypeRule] = {
    # Integers
    "tinyint": TypeRule(TypeKind.SMALLINT),
    "smallint": TypeRule(TypeKind.SMALLINT),
    "mediumint": TypeRule(TypeKind.INTEGER),
    "int": TypeRule(TypeKind.INTEGER),
    "integer": TypeRule(TypeKind.INTEGER),
    "bigint": TypeRule(TypeKind.BIGINT),
    "year": TypeRule(TypeKind.SMALLINT),
    # Exact and approximate numerics; an undeclared decimal is decimal(10,0)
    "decimal": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=10, scale=0),
    "numeric": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=10, scale=0),
    "fixed": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=10, scale=0),
    "dec": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=10, scale=0),
    "float": TypeRule(TypeKind.FLOAT),
    "double": TypeRule(TypeKind.DOUBLE),
    "double precision": TypeRule(TypeKind.DOUBLE),
    "real": TypeRule(TypeKind.DOUBLE),
    # Text
    "char": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "varchar": TypeRule(TypeKind.VARCHAR, Params.LENGTH),
    "tinytext": TypeRule(TypeKind.VARCHAR),
    "text": TypeRule(TypeKind.VARCHAR),
    "mediumtext": TypeRule(TypeKind.VARCHAR),
    "longtext": TypeRule(TypeKind.VARCHAR),
    # Boolean
    "bool": TypeRule(TypeKind.BOOLEAN),
    "boolean": TypeRule(TypeKind.BOOLEAN),
    # Temporal
    "date": TypeRule(TypeKind.DATE),
    "time": TypeRule(TypeKind.TIME, Params.PRECISION),
    "datetime": TypeRule(TypeKind.TIMESTAMP_NTZ, Params.PRECISION),
    "timestamp": TypeRule(TypeKind.TIMESTAMP_TZ, Params.PRECISION),
    # Semi-structured
    "json": TypeRule(TypeKind.VARIANT),
    # Binary
    "binary": TypeRule(TypeKind.BINARY, Params.LENGTH),
    "varbinary": TypeRule(TypeKind.BINARY, Params.LENGTH),
    "tinyblob": TypeRule(TypeKind.BINARY),
    "blob": TypeRule(TypeKind.BINARY),
    "mediumblob": TypeRule(TypeKind.BINARY),
    "longblob": TypeRule(TypeKind.BINARY),
}

# Unsigned integers widen to the next type that holds their full range
UNSIGNED_RULES: dict[str, TypeRule] = {
    "tinyint": TypeRule(TypeKind.SMALLINT),
    "smallint": TypeRule(TypeKind.INTEGER),
    "mediumint": TypeRule(TypeKind.INTEGER),
    "int": TypeRule(TypeKind.BIGINT),
    "integer": TypeRule(TypeKind.BIGINT),
    "bigint": TypeRule(TypeKind.NUMBER, precision=20, scale=0, note="bigint unsigned widened to NUMBER(20,0)"),
}

IDENTITY_ALIASES: dict[str, str] = {
    "serial": "bigint",
}


class MySQLTypeMapper(TableDrivenTypeMapper):
    """Maps MySQL types, honouring ``unsigned`` and the ``tinyint(1)``/``bit(1)`` boolean idiom."""

    engine = SourceEngine.MYSQL
    RULES = RULES
    IDENTITY_ALIASES = IDENTITY_ALIASES

    def map_special(
        self, native: NativeType, column: ColumnDescriptor
    ) -> tuple[CanonicalType, str | None] | None:
        if native.base == "tinyint" and native.params == ("1",) and "unsigned" not in native.modifiers:
            return CanonicalType(kind=TypeKind.BOOLEAN), None

        if native.base == "bit":
            width = column.length if column.length is not None else (int_param(native.params, 0) or 1)
            if width <= 1:
                return CanonicalType(kind=TypeKind.BOOLEAN), None
            return CanonicalType(kind=TypeKind.BINARY, length=(width + 7) // 8), f"bit({width}) stored as BINARY"

        if "unsigned" in native.modifiers and native.base in UNSIGNED_RULES:
            return apply_rule(UNSIGNED_RULES[native.base], native, column)

        return None
