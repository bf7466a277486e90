"""SQL Server native type mapping."""

from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping.base import NativeType, Params, TableDrivenTypeMapper, TypeRule, int_param
from schemamap.type_mapping.canonical import CanonicalType, TypeKind

RULES: dict[str, TypeRule] = {
    # Integers
    "bit": TypeRule(TypeKind.BOOLEAN),
    "tinyint": TypeRule(TypeKind.SMALLINT),
    "smallint": TypeRule(TypeKind.SMALLINT),
    "int": TypeRule(TypeKind.INTEGER),
    "integer": TypeRule(TypeKind.INTEGER),
    "bigint": TypeRule(TypeKind.BIGINT),
    # Exact and approximate numerics; an undeclared decimal is decimal(18,0)
    "decimal": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=18, scale=0),
    "numeric": TypeRule(TypeKind.NUMBER, Params.PRECISION_SCALE, precision=18, scale=0),
    "money": TypeRule(TypeKind.NUMBER, precision=19, scale=4),
    "smallmoney": TypeRule(TypeKind.NUMBER, precision=10, scale=4),
    "real": TypeRule(TypeKind.FLOAT),
    "float": TypeRule(TypeKind.DOUBLE),
    # Text
    "char": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "nchar": TypeRule(TypeKind.CHAR, Params.LENGTH),
    "varchar": TypeRule(TypeKind.VARCHAR, Params.LENGTH),
    "nvarchar": TypeRule(TypeKind.VARCHAR, Params.LENGTH),
    "text": TypeRule(TypeKind.VARCHAR),
    "ntext": TypeRule(TypeKind.VARCHAR),
    "sysname": TypeRule(TypeKind.VARCHAR, length=128),
    "uniqueidentifier": TypeRule(TypeKind.VARCHAR, length=36),
    # Temporal
    "date": TypeRule(TypeKind.DATE),
    "time": TypeRule(TypeKind.TIME, Params.PRECISION),
    "smalldatetime": TypeRule(TypeKind.TIMESTAMP_NTZ),
    "datetime": TypeRule(TypeKind.TIMESTAMP_NTZ),
    "datetime2": TypeRule(TypeKind.TIMESTAMP_NTZ, Params.PRECISION),
    "datetimeoffset": TypeRule(TypeKind.TIMESTAMP_TZ, Params.PRECISION),
    # Semi-structured
    "xml": TypeRule(TypeKind.VARIANT),
    "sql_variant": TypeRule(TypeKind.VARIANT),
    # Binary
    "binary": TypeRule(TypeKind.BINARY, Params.LENGTH),
    "varbinary": TypeRule(TypeKind.BINARY, Params.LENGTH),
    "image": TypeRule(TypeKind.BINARY),
    "timestamp": TypeRule(TypeKind.BINARY, length=8, note="rowversion stored as BINARY(8)"),
    "rowversion": TypeRule(TypeKind.BINARY, length=8, note="rowversion stored as BINARY(8)"),
}


class SqlServerTypeMapper(TableDrivenTypeMapper):
    """Maps SQL Server types, including ``(max)`` lengths and ``int identity`` spellings."""

    engine = SourceEngine.SQLSERVER
    RULES = RULES

    def map_special(
        self, native: NativeType, column: ColumnDescriptor
    ) -> tuple[CanonicalType, str | None] | None:
        # float(n) with n <= 24 is single precision
        if native.base == "float":
            mantissa = column.precision if column.precision is not None else int_param(native.params, 0)
            if mantissa is not None and 0 < mantissa <= 24:
                return CanonicalType(kind=TypeKind.FLOAT), None
        return None
