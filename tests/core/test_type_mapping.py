"""Tests for the per-engine type mappers"""

import pytest

from schemamap.models import ColumnDescriptor, SourceEngine
from schemamap.type_mapping import (
    CanonicalType,
    MySQLTypeMapper,
    PostgresTypeMapper,
    SqlServerTypeMapper,
    TypeKind,
    get_type_mapper,
    map_native_type,
    map_type,
    parse_native_type,
)
from schemamap.type_mapping.base import Params


def column(data_type: str, **kwargs: object) -> ColumnDescriptor:
    return ColumnDescriptor(name="c", data_type=data_type, ordinal_position=1, **kwargs)


# Every rule, across all engines, that carries declared parameters over
PARAMETERIZED_RULES = [
    pytest.param(mapper.engine, name, rule.params, id=f"{mapper.engine.value}-{name}")
    for mapper in (PostgresTypeMapper, MySQLTypeMapper, SqlServerTypeMapper)
    for name, rule in mapper.RULES.items()
    if rule.params is not Params.NONE
]
DECLARED_VALUES: dict[Params, dict[str, int]] = {
    Params.PRECISION_SCALE: {"precision": 12, "scale": 3},
    Params.LENGTH: {"length": 77},
    Params.PRECISION: {"precision": 3},
}
# The same values written as a type suffix, which is also how they render
PARAM_SUFFIX = {
    Params.PRECISION_SCALE: "(12,3)",
    Params.LENGTH: "(77)",
    Params.PRECISION: "(3)",
}


class TestParseNativeType:
    """Tests for native type name normalization"""

    def test_params_and_case(self) -> None:
        native = parse_native_type("NUMERIC(10, 2)")
        assert native.base == "numeric"
        assert native.params == ("10", "2")

    def test_params_in_the_middle(self) -> None:
        native = parse_native_type("timestamp(3) with time zone")
        assert native.base == "timestamp with time zone"
        assert native.params == ("3",)

    def test_modifiers(self) -> None:
        native = parse_native_type("INT(10) UNSIGNED ZEROFILL")
        assert native.base == "int"
        assert native.modifiers == frozenset({"unsigned", "zerofill"})

    def test_array(self) -> None:
        native = parse_native_type("integer[][]")
        assert native.is_array
        assert native.element == "integer"

    def test_identity_keyword(self) -> None:
        native = parse_native_type("int identity(1,1)")
        assert native.base == "int"
        assert native.identity
        assert native.params == ()


class TestEngineSelection:
    """Tests for selecting a mapper by engine discriminator"""

    def test_get_type_mapper(self) -> None:
        assert isinstance(get_type_mapper("postgresql"), PostgresTypeMapper)
        assert isinstance(get_type_mapper(SourceEngine.MYSQL), MySQLTypeMapper)
        assert isinstance(get_type_mapper("sqlserver"), SqlServerTypeMapper)

    def test_get_type_mapper_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Unsupported engine"):
            get_type_mapper("oracle")

    def test_map_type_unknown_engine_does_not_raise(self) -> None:
        result = map_type("oracle", column("number(10)"))
        assert result.canonical.is_unmapped
        assert "number(10)" in result.warning
        assert "oracle" in result.warning


class TestPostgresMapping:
    """Tests for PostgreSQL type mapping"""

    @pytest.mark.parametrize(
        ("data_type", "expected"),
        [
            ("smallint", "SMALLINT"),
            ("int4", "INTEGER"),
            ("bigint", "BIGINT"),
            ("real", "FLOAT"),
            ("double precision", "DOUBLE"),
            ("text", "VARCHAR"),
            ("character varying", "VARCHAR"),
            ("varchar(120)", "VARCHAR(120)"),
            ("char(2)", "CHAR(2)"),
            ("uuid", "VARCHAR(36)"),
            ("boolean", "BOOLEAN"),
            ("date", "DATE"),
            ("timestamp without time zone", "TIMESTAMP_NTZ"),
            ("timestamp(3) with time zone", "TIMESTAMP_TZ(3)"),
            ("timestamptz", "TIMESTAMP_TZ"),
            ("jsonb", "VARIANT"),
            ("xml", "VARIANT"),
            ("bytea", "BINARY"),
        ],
    )
    def test_rules(self, data_type: str, expected: str) -> None:
        result = map_native_type("postgresql", data_type)
        assert result.canonical.render() == expected
        assert result.identity is False

    def test_numeric_precision_and_scale(self) -> None:
        result = map_native_type("postgresql", "numeric(10,2)")
        assert result.canonical.render() == "NUMBER(10,2)"
        assert result.warning is None

    def test_descriptor_precision_wins(self) -> None:
        result = map_type("postgresql", column("numeric", precision=18, scale=4))
        assert result.canonical.precision == 18
        assert result.canonical.scale == 4

    def test_bare_numeric_warns(self) -> None:
        result = map_native_type("postgresql", "numeric")
        assert result.canonical.render() == "NUMBER"
        assert "no declared precision" in result.warning

    def test_precision_above_warehouse_maximum_is_kept_and_flagged(self) -> None:
        result = map_native_type("postgresql", "numeric(50,10)")
        assert result.canonical.render() == "NUMBER(50,10)"
        assert "exceeds" in result.warning

    @pytest.mark.parametrize(
        ("data_type", "expected"),
        [("serial", "INTEGER"), ("bigserial", "BIGINT"), ("smallserial", "SMALLINT")],
    )
    def test_serial_is_identity_on_base_integer(self, data_type: str, expected: str) -> None:
        result = map_native_type("postgresql", data_type)
        assert result.canonical.render() == expected
        assert result.identity is True

    def test_identity_flag_from_descriptor(self) -> None:
        plain = map_type("postgresql", column("integer"))
        identity = map_type("postgresql", column("integer", is_identity=True))
        assert plain.canonical == identity.canonical
        assert identity.identity is True

    def test_array_maps_element_recursively(self) -> None:
        result = map_native_type("postgresql", "numeric(12,3)[]")
        assert result.canonical.kind == TypeKind.ARRAY
        assert result.canonical.element == CanonicalType(kind=TypeKind.NUMBER, precision=12, scale=3)
        assert result.canonical.render() == "ARRAY"
        assert "numeric(12,3)" in result.warning

    def test_udt_array_spelling(self) -> None:
        result = map_native_type("postgresql", "_int4")
        assert result.canonical.kind == TypeKind.ARRAY
        assert result.canonical.element.kind == TypeKind.INTEGER

    def test_money_is_lossy(self) -> None:
        result = map_native_type("postgresql", "money")
        assert result.canonical.render() == "NUMBER(19,2)"
        assert result.warning


class TestMySQLMapping:
    """Tests for MySQL type mapping"""

    @pytest.mark.parametrize(
        ("data_type", "expected"),
        [
            ("tinyint(1)", "BOOLEAN"),
            ("tinyint(4)", "SMALLINT"),
            ("int(11)", "INTEGER"),
            ("int unsigned", "BIGINT"),
            ("smallint unsigned", "INTEGER"),
            ("decimal", "NUMBER(10,0)"),
            ("decimal(8,3)", "NUMBER(8,3)"),
            ("varchar(255)", "VARCHAR(255)"),
            ("longtext", "VARCHAR"),
            ("datetime", "TIMESTAMP_NTZ"),
            ("timestamp", "TIMESTAMP_TZ"),
            ("json", "VARIANT"),
            ("varbinary(16)", "BINARY(16)"),
            ("blob", "BINARY"),
            ("bit(1)", "BOOLEAN"),
        ],
    )
    def test_rules(self, data_type: str, expected: str) -> None:
        assert map_native_type("mysql", data_type).canonical.render() == expected

    def test_bigint_unsigned_widens(self) -> None:
        result = map_native_type("mysql", "bigint unsigned")
        assert result.canonical.render() == "NUMBER(20,0)"
        assert "unsigned" in result.warning

    def test_wide_bit_is_binary(self) -> None:
        result = map_native_type("mysql", "bit(12)")
        assert result.canonical.render() == "BINARY(2)"
        assert result.warning

    def test_auto_increment_keyword(self) -> None:
        result = map_native_type("mysql", "int auto_increment")
        assert result.canonical.render() == "INTEGER"
        assert result.identity is True

    def test_enum_is_unmapped_verbatim(self) -> None:
        result = map_native_type("mysql", "enum('small','large')")
        assert result.canonical.is_unmapped
        assert result.canonical.original_type == "enum('small','large')"
        assert "enum('small','large')" in result.warning


class TestSqlServerMapping:
    """Tests for SQL Server type mapping"""

    @pytest.mark.parametrize(
        ("data_type", "expected"),
        [
            ("bit", "BOOLEAN"),
            ("tinyint", "SMALLINT"),
            ("decimal", "NUMBER(18,0)"),
            ("money", "NUMBER(19,4)"),
            ("float", "DOUBLE"),
            ("float(24)", "FLOAT"),
            ("nvarchar(50)", "VARCHAR(50)"),
            ("nvarchar(max)", "VARCHAR"),
            ("uniqueidentifier", "VARCHAR(36)"),
            ("datetime2(7)", "TIMESTAMP_NTZ(7)"),
            ("datetimeoffset", "TIMESTAMP_TZ"),
            ("varbinary(max)", "BINARY"),
            ("xml", "VARIANT"),
        ],
    )
    def test_rules(self, data_type: str, expected: str) -> None:
        assert map_native_type("sqlserver", data_type).canonical.render() == expected

    def test_unbounded_length_from_descriptor(self) -> None:
        result = map_type("sqlserver", column("nvarchar", length=-1))
        assert result.canonical.length is None

    def test_int_identity(self) -> None:
        result = map_native_type("sqlserver", "int identity(1,1)")
        assert result.canonical.render() == "INTEGER"
        assert result.identity is True


class TestUnmappedFallback:
    """Tests for the UNMAPPED fallback path"""

    @pytest.mark.parametrize("engine", ["postgresql", "mysql", "sqlserver"])
    @pytest.mark.parametrize("data_type", ["geometry", "tsvector", "HierarchyID", "", "???", "point(1,2)"])
    def test_never_raises_and_keeps_original(self, engine: str, data_type: str) -> None:
        result = map_native_type(engine, data_type)
        assert result.canonical.is_unmapped
        assert result.canonical.original_type == data_type
        assert result.canonical.render() == "VARCHAR"
        assert result.identity is False
        assert f"'{data_type}'" in result.warning

    def test_describe(self) -> None:
        assert CanonicalType.unmapped("geometry").describe() == "UNMAPPED(geometry)"


class TestPrecisionPreservation:
    """Declared precision, scale and length come through unchanged"""

    @pytest.mark.parametrize(
        ("engine", "data_type", "kwargs", "attrs"),
        [
            ("postgresql", "numeric", {"precision": 38, "scale": 9}, {"precision": 38, "scale": 9}),
            ("postgresql", "varchar", {"length": 4000}, {"length": 4000}),
            ("postgresql", "bpchar", {"length": 3}, {"length": 3}),
            ("mysql", "decimal", {"precision": 30, "scale": 0}, {"precision": 30, "scale": 0}),
            ("mysql", "char", {"length": 10}, {"length": 10}),
            ("mysql", "binary", {"length": 20}, {"length": 20}),
            ("sqlserver", "numeric", {"precision": 5, "scale": 5}, {"precision": 5, "scale": 5}),
            ("sqlserver", "nchar", {"length": 1}, {"length": 1}),
            ("sqlserver", "datetime2", {"precision": 3}, {"precision": 3}),
        ],
    )
    def test_declared_values_preserved(
        self, engine: str, data_type: str, kwargs: dict[str, int], attrs: dict[str, int]
    ) -> None:
        canonical = map_type(engine, column(data_type, **kwargs)).canonical
        for attr, value in attrs.items():
            assert getattr(canonical, attr) == value

    @pytest.mark.parametrize(("engine", "data_type", "params"), PARAMETERIZED_RULES)
    def test_every_parameterized_rule_keeps_declared_values(
        self, engine: SourceEngine, data_type: str, params: Params
    ) -> None:
        declared = DECLARED_VALUES[params]
        result = map_type(engine, column(data_type, **declared))

        assert not result.canonical.is_unmapped
        for attr, value in declared.items():
            assert getattr(result.canonical, attr) == value
        assert result.canonical.render().endswith(PARAM_SUFFIX[params])

    @pytest.mark.parametrize(("engine", "data_type", "params"), PARAMETERIZED_RULES)
    def test_every_parameterized_rule_keeps_inline_values(
        self, engine: SourceEngine, data_type: str, params: Params
    ) -> None:
        result = map_type(engine, column(f"{data_type}{PARAM_SUFFIX[params]}"))

        for attr, value in DECLARED_VALUES[params].items():
            assert getattr(result.canonical, attr) == value

    def test_mapping_is_deterministic(self) -> None:
        first = map_native_type("mysql", "decimal(12,4) unsigned")
        second = map_native_type("mysql", "decimal(12,4) unsigned")
        assert first == second
