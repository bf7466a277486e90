"""Pydantic models for the canonical schema model and mapping artifacts"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from schemamap.constants import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_OUTPUT_DIR,
    ENCRYPTION_ALGORITHM,
    MAPPING_FILE_VERSION,
)


class SourceEngine(str, Enum):
    """Source database engines with a type mapper"""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Canonical Schema Model
# ============================================================================


class ColumnDescriptor(CamelModel):
    """A single column as reported by schema introspection"""

    name: str = Field(min_length=1, description="Column name")
    data_type: str = Field(description="Native type name as reported by the source engine")
    precision: int | None = Field(default=None, description="Declared numeric (or fractional seconds) precision")
    scale: int | None = Field(default=None, description="Declared numeric scale")
    length: int | None = Field(default=None, description="Declared character/binary length (-1 = unbounded)")
    is_nullable: bool = Field(default=True, description="Whether the column accepts NULL")
    default_value: str | None = Field(default=None, description="Default value expression in source syntax")
    ordinal_position: int = Field(ge=1, description="1-based position of the column in the table")
    is_identity: bool = Field(default=False, description="Engine reported auto-increment outside the type name")


class PrimaryKey(CamelModel):
    """Primary key constraint"""

    name: str | None = Field(default=None, description="Constraint name in the source database")
    columns: list[str] = Field(min_length=1, description="Ordered key columns")


class ForeignKey(CamelModel):
    """Foreign key constraint"""

    name: str | None = Field(default=None, description="Constraint name in the source database")
    columns: list[str] = Field(min_length=1, description="Ordered local columns")
    referenced_schema: str = Field(description="Schema of the referenced table")
    referenced_table: str = Field(description="Referenced table name")
    referenced_columns: list[str] = Field(min_length=1, description="Ordered referenced columns")

    @model_validator(mode="after")
    def check_column_counts(self) -> "ForeignKey":
        if len(self.columns) != len(self.referenced_columns):
            raise ValueError(
                f"Foreign key has {len(self.columns)} local columns "
                f"but {len(self.referenced_columns)} referenced columns"
            )
        return self


class TableDescriptor(CamelModel):
    """A table with its columns and keys"""

    schema_name: str = Field(min_length=1, description="Schema the table belongs to")
    table_name: str = Field(min_length=1, description="Table name")
    columns: list[ColumnDescriptor] = Field(default_factory=list, description="Columns in ordinal order")
    primary_key: PrimaryKey | None = Field(default=None, description="Primary key, if any")
    foreign_keys: list[ForeignKey] = Field(default_factory=list, description="Foreign keys in declaration order")

    @field_validator("columns")
    @classmethod
    def check_unique_column_names(cls, columns: list[ColumnDescriptor]) -> list[ColumnDescriptor]:
        seen: set[str] = set()
        for column in columns:
            if column.name in seen:
                raise ValueError(f"Duplicate column name: {column.name}")
            seen.add(column.name)
        return columns

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


# ============================================================================
# Encrypted secrets
# ============================================================================


class EncryptedPayload(CamelModel):
    """At-rest form of a secret string"""

    encrypted: Literal[True] = Field(default=True, description="Marker for encrypted values")
    algorithm: str = Field(default=ENCRYPTION_ALGORITHM, description="Cipher identifier")
    iv: str = Field(description="Hex-encoded initialization vector")
    tag: str = Field(description="Hex-encoded authentication tag")
    ciphertext: str = Field(description="Hex-encoded ciphertext")


# ============================================================================
# Mapping Artifact
# ============================================================================


class ConnectionDescriptor(CamelModel):
    """Source connection details with the password encrypted"""

    host: str = Field(min_length=1, description="Database host")
    port: int = Field(ge=1, le=65535, description="Database port")
    database: str = Field(min_length=1, description="Database name")
    user: str = Field(min_length=1, description="Database user")
    password: EncryptedPayload = Field(description="Encrypted password")
    ssl: bool = Field(default=False, description="Whether to connect with TLS")


class SourceDescriptor(CamelModel):
    """Where the mapped schema came from"""

    engine: SourceEngine = Field(default=SourceEngine.POSTGRESQL, description="Source database engine")
    connection: ConnectionDescriptor = Field(description="Connection details")


class ExportOptions(CamelModel):
    """Preferences for the external export engine"""

    format: Literal["parquet", "csv"] = Field(default=DEFAULT_EXPORT_FORMAT, description="Export file format")
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, description="Export output directory")


class MappingArtifact(CamelModel):
    """Persisted schema mapping: canonical schema model plus encrypted credential"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    version: int = Field(description="Mapping file format version")
    name: str = Field(min_length=1, description="Mapping name")
    created_at: str = Field(description="ISO-8601 creation timestamp")
    source: SourceDescriptor = Field(description="Source database")
    selected_schemas: list[str] = Field(min_length=1, description="Schemas in operator selection order")
    tables: list[TableDescriptor] = Field(default_factory=list, description="Mapped tables in selection order")
    export_options: ExportOptions = Field(default_factory=ExportOptions, description="Export preferences")

    @field_validator("version")
    @classmethod
    def check_version(cls, version: int) -> int:
        if version != MAPPING_FILE_VERSION:
            raise ValueError(f"Unsupported mapping file version {version} (expected {MAPPING_FILE_VERSION})")
        return version

    @field_validator("selected_schemas")
    @classmethod
    def check_unique_schemas(cls, schemas: list[str]) -> list[str]:
        if len(set(schemas)) != len(schemas):
            raise ValueError("selectedSchemas contains duplicates")
        return schemas

    @model_validator(mode="after")
    def check_table_schemas(self) -> "MappingArtifact":
        selected = set(self.selected_schemas)
        for table in self.tables:
            if table.schema_name not in selected:
                raise ValueError(f"Table {table.qualified_name} belongs to a schema that was not selected")
        return self


# ============================================================================
# Saved connections and credentials
# ============================================================================


class ConnectionConfig(BaseModel):
    """In-memory connection settings with the password in clear text"""

    engine: SourceEngine = SourceEngine.POSTGRESQL
    host: str
    port: int = Field(ge=1, le=65535)
    database: str
    user: str
    password: str = Field(repr=False)
    ssl: bool = False


class SavedConnection(CamelModel):
    """Connection saved for reuse, password encrypted with the installation key"""

    name: str = Field(min_length=1, description="Connection name")
    engine: SourceEngine = Field(default=SourceEngine.POSTGRESQL, description="Source database engine")
    host: str = Field(description="Database host")
    port: int = Field(ge=1, le=65535, description="Database port")
    database: str = Field(description="Database name")
    user: str = Field(description="Database user")
    password: EncryptedPayload = Field(description="Encrypted password")
    ssl: bool = Field(default=False, description="Whether to connect with TLS")
    created_at: str = Field(description="ISO-8601 creation timestamp")


class AwsCredentials(BaseModel):
    """Object-storage credentials in clear text"""

    access_key_id: str
    secret_access_key: str = Field(repr=False)
    region: str


class SavedAwsCredentials(CamelModel):
    """Credential vault entry, secret key encrypted with the installation key"""

    access_key_id: str = Field(description="AWS access key id")
    secret_access_key: EncryptedPayload = Field(description="Encrypted AWS secret access key")
    region: str = Field(description="AWS region")
    created_at: str = Field(description="ISO-8601 creation timestamp")
