"""Snowflake DDL synthesis from a mapping artifact.

Statements come out in two passes: every ``CREATE SCHEMA`` and
``CREATE TABLE`` first, then one ``ALTER TABLE ... ADD CONSTRAINT ...
FOREIGN KEY`` per foreign key. A foreign key may reference a table that is
created later in the list, or form a cycle; splitting constraints into their
own pass means no dependency ordering is needed.

Synthesis is deterministic. The header carries the artifact's own creation
timestamp, so the same artifact always produces the same text.
"""

import logging
import re
from pathlib import Path

from schemamap.models import ColumnDescriptor, ForeignKey, MappingArtifact, SourceEngine, TableDescriptor
from schemamap.type_mapping import map_type

logger = logging.getLogger(__name__)

INDENT = "    "

HEADER_NOTICE = (
    "-- PRIMARY KEY and FOREIGN KEY constraints below are declarative only:\n"
    "-- Snowflake records them as metadata but does not enforce them.\n"
    "-- Only NOT NULL is enforced at load time."
)

_SIMPLE_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Snowflake reserved keywords that cannot be used as bare identifiers
RESERVED_WORDS = frozenset(
    {
        "ACCOUNT", "ALL", "ALTER", "AND", "ANY", "AS", "BETWEEN", "BY", "CASE", "CAST", "CHECK",
        "COLUMN", "CONNECT", "CONNECTION", "CONSTRAINT", "CREATE", "CROSS", "CURRENT",
        "CURRENT_DATE", "CURRENT_TIME", "CURRENT_TIMESTAMP", "CURRENT_USER", "DATABASE",
        "DELETE", "DISTINCT", "DROP", "ELSE", "EXISTS", "FALSE", "FOLLOWING", "FOR", "FROM",
        "FULL", "GRANT", "GROUP", "GSCLUSTER", "HAVING", "ILIKE", "IN", "INCREMENT", "INNER",
        "INSERT", "INTERSECT", "INTO", "IS", "ISSUE", "JOIN", "LATERAL", "LEFT", "LIKE",
        "LOCALTIME", "LOCALTIMESTAMP", "MINUS", "NATURAL", "NOT", "NULL", "OF", "ON", "OR",
        "ORDER", "ORGANIZATION", "QUALIFY", "REGEXP", "REVOKE", "RIGHT", "RLIKE", "ROW", "ROWS",
        "SAMPLE", "SCHEMA", "SELECT", "SET", "SOME", "START", "TABLE", "TABLESAMPLE", "THEN",
        "TO", "TRIGGER", "TRUE", "TRY_CAST", "UNION", "UNIQUE", "UPDATE", "USING", "VALUES",
        "VIEW", "WHEN", "WHENEVER", "WHERE", "WITH",
    }
)  # fmt: skip


# ============================================================================
# Identifiers
# ============================================================================


def quote_identifier(name: str) -> str:
    """Emit simple identifiers bare, double-quote everything else.

    A simple name that is a reserved word is quoted in upper case, which is
    the name Snowflake would have folded it to had it been legal bare.

    Examples:
        >>> quote_identifier("orders")
        'orders'
        >>> quote_identifier("order")
        '"ORDER"'
        >>> quote_identifier("Order Items")
        '"Order Items"'
    """
    if _SIMPLE_IDENTIFIER_RE.match(name):
        if name.upper() not in RESERVED_WORDS:
            return name
        return f'"{name.upper()}"'
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def comment_text(text: str) -> str:
    """Flatten text for a ``--`` comment so it cannot spill onto a new line."""
    return " ".join(text.splitlines())


def qualified_name(schema: str, table: str) -> str:
    return f"{quote_identifier(schema)}.{quote_identifier(table)}"


def _column_list(columns: list[str]) -> str:
    return ", ".join(quote_identifier(c) for c in columns)


# ============================================================================
# Default expressions
# ============================================================================

_SQL_LITERAL_RE = re.compile(r"('(?:[^']|'')*')")
_PG_CAST_RE = re.compile(
    r"::\"?[A-Za-z_][A-Za-z0-9_ ]*?\"?"
    r"(?:\s+(?:varying|precision|with(?:out)? time zone))?"
    r"(?:\(\d+(?:\s*,\s*\d+)?\))?(?:\[\])*"
    r"(?=$|[\s),|+\-*/])"
)
_CURRENT_TIMESTAMP_RE = re.compile(
    r"^(?:now\(\)|'now'|getdate\(\)|getutcdate\(\)|sysdatetime\(\)|sysdatetimeoffset\(\)"
    r"|current_timestamp(?:\(\d*\))?|localtimestamp(?:\(\d*\))?|transaction_timestamp\(\))$",
    re.IGNORECASE,
)
_UUID_RE = re.compile(r"^(?:gen_random_uuid|uuid_generate_v[14]|newid|newsequentialid|uuid)\(\)$", re.IGNORECASE)
_NEXTVAL_RE = re.compile(r"^nextval\(", re.IGNORECASE)


def _strip_outer_parens(expr: str) -> str:
    """Remove parentheses that wrap the whole expression, e.g. SQL Server ``((0))``."""
    while expr.startswith("(") and expr.endswith(")"):
        depth = 0
        for i, ch in enumerate(expr):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0 and i != len(expr) - 1:
                    return expr
        expr = expr[1:-1].strip()
    return expr


def _strip_pg_casts(expr: str) -> str:
    """Drop PostgreSQL ``::type`` casts outside of quoted string literals."""
    # split() with a capturing group puts the literals at odd indices
    parts = _SQL_LITERAL_RE.split(expr)
    return "".join(part if i % 2 else _PG_CAST_RE.sub("", part) for i, part in enumerate(parts))


def normalize_default(expr: str | None, engine: SourceEngine | str) -> str | None:
    """Translate a source default expression into Snowflake syntax.

    Args:
        expr: Default expression as reported by the source engine
        engine: Source engine

    Returns:
        The Snowflake expression, or None when the default should be dropped
        (no default, or a sequence default superseded by IDENTITY)
    """
    if expr is None:
        return None
    expr = expr.strip()
    if not expr:
        return None

    if engine == SourceEngine.SQLSERVER:
        expr = _strip_outer_parens(expr)
    elif engine == SourceEngine.POSTGRESQL:
        if _NEXTVAL_RE.match(expr):
            return None
        expr = _strip_pg_casts(expr).strip()
        expr = _strip_outer_parens(expr)

    if _NEXTVAL_RE.match(expr):
        return None
    if _CURRENT_TIMESTAMP_RE.match(expr):
        return "CURRENT_TIMESTAMP()"
    if _UUID_RE.match(expr):
        return "UUID_STRING()"
    return expr


# ============================================================================
# Statements
# ============================================================================


def _header(artifact: MappingArtifact) -> str:
    connection = artifact.source.connection
    source = f"{artifact.source.engine.value} database {connection.database} on {connection.host}"
    lines = [
        "-- Snowflake DDL generated by schemamap",
        f"-- Mapping: {comment_text(artifact.name)}",
        f"-- Source: {comment_text(source)}",
        f"-- Mapping created: {comment_text(artifact.created_at)}",
        "--",
        HEADER_NOTICE,
    ]
    return "\n".join(lines)


def _column_clause(column: ColumnDescriptor, engine: SourceEngine) -> tuple[str, str | None]:
    """Build one column definition and its warning (if any)."""
    mapping = map_type(engine, column)
    parts = [quote_identifier(column.name), mapping.canonical.render()]

    if mapping.identity:
        parts.append("IDENTITY(1,1)")
    else:
        default = normalize_default(column.default_value, engine)
        if default is not None:
            parts.append(f"DEFAULT {default}")

    if not column.is_nullable:
        parts.append("NOT NULL")

    return " ".join(parts), mapping.warning


def create_table_statement(table: TableDescriptor, engine: SourceEngine) -> str:
    """Render ``CREATE TABLE IF NOT EXISTS`` for one table.

    Each column is on its own line so a lossy mapping can carry its warning as
    a trailing comment. Apart from that layout the statement is the usual
    single-line form: collapsing the whitespace gives
    ``CREATE TABLE IF NOT EXISTS public.orders (id INTEGER ..., PRIMARY KEY (id));``.
    """
    name = qualified_name(table.schema_name, table.table_name)
    if not table.columns:
        message = f"{table.qualified_name} has no columns; CREATE TABLE skipped"
        logger.warning(f"Table {message}")
        return f"-- WARNING: {comment_text(message)}"

    clauses: list[tuple[str, str | None]] = [
        _column_clause(column, engine) for column in sorted(table.columns, key=lambda c: c.ordinal_position)
    ]
    if table.primary_key is not None:
        clauses.append((f"PRIMARY KEY ({_column_list(table.primary_key.columns)})", None))

    lines = [f"CREATE TABLE IF NOT EXISTS {name} ("]
    last = len(clauses) - 1
    for i, (clause, warning) in enumerate(clauses):
        line = INDENT + clause + ("," if i < last else "")
        if warning:
            line += f" -- {comment_text(warning)}"
        lines.append(line)
    lines.append(");")
    return "\n".join(lines)


def foreign_key_name(table: TableDescriptor, fk: ForeignKey, used: set[str]) -> str:
    """Name a constraint ``fk_<table>_<columns>``, suffixed if already used on the table."""
    base = f"fk_{table.table_name}_{'_'.join(fk.columns)}"
    name = base
    n = 2
    while name in used:
        name = f"{base}_{n}"
        n += 1
    used.add(name)
    return name


def foreign_key_statement(table: TableDescriptor, fk: ForeignKey, constraint_name: str) -> str:
    return (
        f"ALTER TABLE {qualified_name(table.schema_name, table.table_name)} "
        f"ADD CONSTRAINT {quote_identifier(constraint_name)} "
        f"FOREIGN KEY ({_column_list(fk.columns)}) "
        f"REFERENCES {qualified_name(fk.referenced_schema, fk.referenced_table)} "
        f"({_column_list(fk.referenced_columns)});"
    )


def synthesize(artifact: MappingArtifact, target_database: str | None = None) -> list[str]:
    """Turn a mapping artifact into an ordered list of Snowflake DDL statements.

    Order: header comment, optional database statements, one
    ``CREATE SCHEMA IF NOT EXISTS`` per selected schema (selection order), one
    ``CREATE TABLE IF NOT EXISTS`` per table (artifact order), then every
    foreign key as ``ALTER TABLE ... ADD CONSTRAINT``.

    Never raises for data it is given. Unmapped types become VARCHAR with a
    warning comment; a foreign key referencing a table outside the mapping is
    still emitted, with a warning comment before it. Foreign keys of a table
    with no columns are replaced by a warning comment, since that table is
    never created.

    Args:
        artifact: Validated mapping artifact
        target_database: Optional database to create and switch to first

    Returns:
        List of statements (element 0 is the header comment)
    """
    engine = artifact.source.engine
    statements = [_header(artifact)]

    if target_database:
        db = quote_identifier(target_database)
        statements.append(f"CREATE DATABASE IF NOT EXISTS {db};")
        statements.append(f"USE DATABASE {db};")

    seen_schemas: set[str] = set()
    for schema in artifact.selected_schemas:
        if schema in seen_schemas:
            continue
        seen_schemas.add(schema)
        statements.append(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(schema)};")

    for table in artifact.tables:
        statements.append(create_table_statement(table, engine))

    mapped_tables = {(t.schema_name, t.table_name) for t in artifact.tables}
    fk_count = 0
    for table in artifact.tables:
        used_names: set[str] = set()
        for fk in table.foreign_keys:
            constraint_name = foreign_key_name(table, fk, used_names)
            if not table.columns:
                message = f"{table.qualified_name} has no columns; foreign key {constraint_name} skipped"
                logger.warning(message)
                statements.append(f"-- WARNING: {comment_text(message)}")
                continue

            statement = foreign_key_statement(table, fk, constraint_name)
            target = (fk.referenced_schema, fk.referenced_table)
            if target not in mapped_tables:
                message = (
                    f"{table.qualified_name} references {fk.referenced_schema}.{fk.referenced_table}, "
                    f"which is not part of this mapping"
                )
                logger.warning(message)
                statement = f"-- WARNING: {comment_text(message)}\n{statement}"
            statements.append(statement)
            fk_count += 1

    logger.debug(
        f"Synthesized DDL for mapping '{artifact.name}': "
        f"{len(seen_schemas)} schemas, {len(artifact.tables)} tables, {fk_count} foreign keys"
    )
    return statements


def render_script(statements: list[str]) -> str:
    """Join statements with blank lines into a script ending in a newline."""
    return "\n\n".join(statements) + "\n"


def write_ddl_file(statements: list[str], path: str | Path) -> Path:
    """Write the rendered script as UTF-8 with LF line endings."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(render_script(statements))
    logger.info(f"DDL written to {file_path}")
    return file_path
