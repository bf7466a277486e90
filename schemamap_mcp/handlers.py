"""Mapping and DDL tool handlers"""

import json
import logging

from schemamap.artifact import decrypt_password, list_mapping_files, load_mapping, summarize_mapping
from schemamap.config import get_encryption_service
from schemamap.ddl import render_script, synthesize
from schemamap.errors import AuthenticationError, ConfigurationMissing, MalformedArtifact
from schemamap.type_mapping import get_type_mapper, map_native_type
from schemamap.type_mapping import map_type as map_column_type

logger = logging.getLogger(__name__)


def _error(message: str, **details: object) -> str:
    return json.dumps({"error": message, **details}, indent=2)


class MappingHandler:
    """Handles all mapping-related tool calls. Every method returns JSON text."""

    def generate_ddl(self, mapping: str, target_database: str | None = None) -> str:
        """Generate Snowflake DDL for a saved mapping

        Args:
            mapping: Mapping name, or path to a .mapping.json file
            target_database: Optional database to create and switch to first

        Returns:
            JSON with the DDL script, its statements and any column warnings
        """
        try:
            artifact = load_mapping(mapping)
        except (ConfigurationMissing, FileNotFoundError, MalformedArtifact) as e:
            return _error(f"Failed to load mapping: {e!s}", mapping=mapping)

        statements = synthesize(artifact, target_database=target_database)
        engine = artifact.source.engine
        warnings = [
            {"table": table.qualified_name, "column": column.name, "warning": result.warning}
            for table in artifact.tables
            for column in table.columns
            if (result := map_column_type(engine, column)).warning
        ]
        return json.dumps(
            {
                "mapping": artifact.name,
                "statement_count": len(statements),
                "statements": statements,
                "script": render_script(statements),
                "warnings": warnings,
            },
            indent=2,
        )

    def map_type(
        self,
        engine: str,
        data_type: str,
        precision: int | None = None,
        scale: int | None = None,
        length: int | None = None,
        is_identity: bool = False,
    ) -> str:
        """Map one native column type to its Snowflake type

        Args:
            engine: Source engine (postgresql, mysql, sqlserver)
            data_type: Native type name, e.g. 'numeric(10,2)'
            precision: Declared precision
            scale: Declared scale
            length: Declared length (-1 for unbounded)
            is_identity: Whether the column is auto-increment

        Returns:
            JSON with the rendered type, identity flag and warning
        """
        try:
            get_type_mapper(engine)
        except ValueError as e:
            return _error(str(e))

        result = map_native_type(engine, data_type, precision, scale, length, is_identity)
        return json.dumps(
            {
                "source_type": data_type,
                "snowflake_type": result.canonical.render(),
                "canonical": result.canonical.describe(),
                "identity": result.identity,
                "unmapped": result.canonical.is_unmapped,
                "warning": result.warning,
            },
            indent=2,
        )

    def validate_mapping(self, mapping: str, check_credentials: bool = False) -> str:
        """Validate a mapping file and optionally its encrypted password

        Args:
            mapping: Mapping name, or path to a .mapping.json file
            check_credentials: Also decrypt the password with the installation key

        Returns:
            JSON with ``valid`` and a list of errors
        """
        try:
            artifact = load_mapping(mapping)
            if check_credentials:
                decrypt_password(artifact, get_encryption_service())
        except (MalformedArtifact, AuthenticationError, ConfigurationMissing, FileNotFoundError) as e:
            return json.dumps({"valid": False, "mapping": mapping, "errors": [str(e)]}, indent=2)

        summary = {"valid": True, "mapping": artifact.name, "errors": [], **summarize_mapping(artifact)}
        return json.dumps(summary, indent=2)

    def list_mappings(self) -> str:
        """List saved mappings

        Returns:
            JSON list of mapping summaries
        """
        try:
            names = list_mapping_files()
        except ConfigurationMissing as e:
            return _error(str(e))

        summaries = []
        for name in names:
            try:
                summaries.append({"name": name, **summarize_mapping(load_mapping(name))})
            except MalformedArtifact as e:
                logger.warning(f"Skipping invalid mapping '{name}': {e}")
                summaries.append({"name": name, "error": str(e)})
        return json.dumps({"mappings": summaries}, indent=2)
