"""schemamap: map relational schemas to Snowflake.

The core is three pieces: per-engine type mappers
(:mod:`schemamap.type_mapping`), the DDL synthesizer (:mod:`schemamap.ddl`)
and the credential encryption service (:mod:`schemamap.encryption`). Mapping
artifacts (:mod:`schemamap.artifact`) tie them together on disk.
"""

__version__ = "0.1.0"
