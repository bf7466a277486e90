"""Application-wide constants."""

APP_NAME = "schemamap"
APP_DESCRIPTION = "Relational schema to Snowflake DDL mapping tool"

# Installation layout
CONFIG_DIR_NAME = ".schemamap"
MAPPINGS_DIR_NAME = "mappings"
CONNECTIONS_DIR_NAME = "connections"
LOGS_DIR_NAME = "logs"
KEY_FILE_NAME = "key"
SETTINGS_FILE_NAME = "config.yaml"
AWS_CREDENTIALS_FILE_NAME = "aws.json"
MAPPING_FILE_EXTENSION = ".mapping.json"
CONNECTION_FILE_EXTENSION = ".connection.json"

# Encryption
ENCRYPTION_ALGORITHM = "aes-256-gcm"
KEY_LENGTH = 32
IV_LENGTH = 12
TAG_LENGTH = 16
SCRYPT_SALT = b"schemamap-salt"
SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1

MAPPING_FILE_VERSION = 1
SETTINGS_VERSION = "1.0"

MAX_LOG_FILES = 10

DEFAULT_PORTS = {
    "postgresql": 5432,
    "mysql": 3306,
    "sqlserver": 1433,
}
DEFAULT_EXPORT_FORMAT = "parquet"
DEFAULT_OUTPUT_DIR = "./export"
DEFAULT_DDL_DIR = "./ddl"
DEFAULT_AWS_REGION = "us-east-1"

SYSTEM_SCHEMAS = {
    "postgresql": frozenset({"pg_catalog", "information_schema", "pg_toast"}),
    "mysql": frozenset({"information_schema", "mysql", "performance_schema", "sys"}),
    "sqlserver": frozenset(
        {
            "sys",
            "INFORMATION_SCHEMA",
            "guest",
            "db_owner",
            "db_accessadmin",
            "db_securityadmin",
            "db_ddladmin",
            "db_backupoperator",
            "db_datareader",
            "db_datawriter",
            "db_denydatareader",
            "db_denydatawriter",
        }
    ),
}

# Largest precision the warehouse NUMBER type accepts
MAX_NUMBER_PRECISION = 38
