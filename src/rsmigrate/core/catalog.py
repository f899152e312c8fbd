"""Catalog reads: schemas, tables and generated table DDL.

All reads go through a StatementRunner and reshape the Data API records
into plain Python values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rsmigrate.core import sql
from rsmigrate.core.errors import CatalogError, ConfigError
from rsmigrate.core.statements import StatementRunner


@dataclass(frozen=True, order=True)
class TableRef:
    """A table identified by schema and name within one cluster."""

    schema: str
    table: str

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"

    @property
    def prefix(self) -> str:
        """Object storage key prefix for this table."""
        return f"{self.schema}/{self.table}/"


def field_value(field: Mapping[str, Any]) -> Any:
    """Decode one Data API field (`{"stringValue": "x"}` and friends)."""
    if field.get("isNull"):
        return None
    for key in ("stringValue", "longValue", "doubleValue", "booleanValue", "blobValue"):
        if key in field:
            return field[key]
    raise CatalogError(f"Unsupported field in result record: {dict(field)!r}")


def _rows(records: list | None, width: int) -> list[list[Any]]:
    if records is None:
        raise CatalogError("Catalog query returned no result set.")
    rows = []
    for record in records:
        if len(record) != width:
            raise CatalogError(
                f"Expected {width} column(s) per catalog row, got {len(record)}."
            )
        rows.append([field_value(f) for f in record])
    return rows


def list_schemas(runner: StatementRunner, cluster: str) -> set[str]:
    """Return the user schemas of a cluster (system schemas excluded)."""
    outcome = runner.run(cluster, sql.list_schemas_sql())
    return {
        str(name)
        for (name,) in _rows(outcome.records, 1)
        if name not in sql.SYSTEM_SCHEMAS
    }


def list_tables(runner: StatementRunner, cluster: str) -> set[TableRef]:
    """Return the user tables of a cluster (system schemas excluded)."""
    outcome = runner.run(cluster, sql.list_tables_sql())
    return {
        TableRef(schema=str(schema), table=str(table))
        for schema, table in _rows(outcome.records, 2)
        if schema not in sql.SYSTEM_SCHEMAS
    }


def get_ddl(runner: StatementRunner, cluster: str, table: TableRef) -> str:
    """
    Return the CREATE TABLE statement for a table.

    Reads `admin.v_generate_tbl_ddl`, which must already exist on the
    cluster; its fragments are joined in `seq` order.

    Raises:
        CatalogError: If the view returns nothing for the table.
    """
    outcome = runner.run(cluster, sql.table_ddl_sql(table.schema, table.table))
    fragments = [str(ddl) for (ddl,) in _rows(outcome.records, 1) if ddl is not None]
    if not fragments:
        raise CatalogError(
            f"No DDL found for {table.full_name} in admin.v_generate_tbl_ddl "
            f"on {cluster}; is the view installed?"
        )
    return "\n".join(fragments)


def filter_tables(
    tables: Iterable[TableRef], name_regex: str | None
) -> list[TableRef]:
    """Filter tables by regex on `schema.table` and return them sorted."""
    if not name_regex:
        return sorted(tables)
    try:
        rx = re.compile(name_regex)
    except re.error as exc:
        raise ConfigError(f"Invalid regex expression: {exc}") from exc
    return sorted(t for t in tables if rx.search(t.full_name))
