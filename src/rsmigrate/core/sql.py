"""SQL text builders for the statements the migration issues.

Every statement sent to a cluster is built here so the exact text can be
asserted in tests and shown in dry-run output.
"""

from __future__ import annotations

SYSTEM_SCHEMAS = ("pg_catalog", "information_schema", "admin")


def quote_ident(identifier: str) -> str:
    """Quote an identifier, doubling embedded double quotes."""
    return '"' + identifier.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a string literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def qualified(schema: str, table: str) -> str:
    return f"{quote_ident(schema)}.{quote_ident(table)}"


def _system_schema_list() -> str:
    return ", ".join(quote_literal(s) for s in SYSTEM_SCHEMAS)


def list_schemas_sql() -> str:
    return (
        "SELECT schema_name FROM information_schema.schemata "
        f"WHERE schema_name NOT IN ({_system_schema_list()});"
    )


def list_tables_sql() -> str:
    return (
        "SELECT table_schema, table_name FROM information_schema.tables "
        f"WHERE table_schema NOT IN ({_system_schema_list()}) "
        "AND table_type = 'BASE TABLE';"
    )


def table_ddl_sql(schema: str, table: str) -> str:
    return (
        "SELECT ddl FROM admin.v_generate_tbl_ddl "
        f"WHERE schemaname = {quote_literal(schema)} "
        f"AND tablename = {quote_literal(table)} ORDER BY seq;"
    )


def create_schema_sql(schema: str) -> str:
    return f"CREATE SCHEMA {quote_ident(schema)};"


def unload_sql(schema: str, table: str, s3_prefix: str, iam_role: str) -> str:
    """Export a whole table as JSON lines, replacing whatever is at the prefix."""
    select = f"SELECT * FROM {qualified(schema, table)}"
    return (
        f"UNLOAD ({quote_literal(select)}) TO {quote_literal(s3_prefix)} "
        f"IAM_ROLE {quote_literal(iam_role)} JSON CLEANPATH;"
    )


def truncate_sql(schema: str, table: str) -> str:
    return f"TRUNCATE {qualified(schema, table)};"


def copy_sql(schema: str, table: str, s3_prefix: str, iam_role: str) -> str:
    """Load every JSON object under the prefix, mapping columns by name."""
    return (
        f"COPY {qualified(schema, table)} FROM {quote_literal(s3_prefix)} "
        f"IAM_ROLE {quote_literal(iam_role)} FORMAT AS JSON 'auto';"
    )


def dedup_sql(schema: str, table: str) -> str:
    """Keep the row with the smallest uuid for every id."""
    target = qualified(schema, table)
    return (
        f"DELETE FROM {target} USING {target} b "
        f"WHERE {target}.uuid > b.uuid AND {target}.id = b.id;"
    )
