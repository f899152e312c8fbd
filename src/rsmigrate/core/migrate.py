"""Per-table data migration: export, load, deduplicate.

Each step is one blocking statement. A failing step raises and the whole
migration stops; tables already processed keep whatever state they reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from rsmigrate.core import sql
from rsmigrate.core.catalog import TableRef, filter_tables, list_tables
from rsmigrate.core.config import MigrationConfig
from rsmigrate.core.statements import StatementRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableMigrationResult:
    """Which steps ran for one table."""

    table: TableRef
    exported: bool = False
    truncated: bool = False
    loaded: bool = False
    deduplicated: bool = False


def _run_step(
    runner: StatementRunner,
    cluster: str,
    statement: str,
    *,
    step: str,
    table: TableRef,
    dry_run: bool,
) -> bool:
    logger.info("%s %s", step, table.full_name)
    if dry_run:
        logger.info("[dry-run] %s", statement)
        return False
    runner.run(cluster, statement)
    return True


def export_table(
    runner: StatementRunner,
    config: MigrationConfig,
    table: TableRef,
    *,
    dry_run: bool = False,
) -> bool:
    """UNLOAD the source table to its S3 prefix."""
    statement = sql.unload_sql(
        table.schema,
        table.table,
        config.s3_prefix(table.prefix),
        config.iam_role,
    )
    return _run_step(
        runner,
        config.source_cluster,
        statement,
        step="Exporting",
        table=table,
        dry_run=dry_run,
    )


def truncate_table(
    runner: StatementRunner,
    config: MigrationConfig,
    table: TableRef,
    *,
    dry_run: bool = False,
) -> bool:
    """Empty the destination table so the load replaces instead of appends."""
    return _run_step(
        runner,
        config.destination_cluster,
        sql.truncate_sql(table.schema, table.table),
        step="Truncating",
        table=table,
        dry_run=dry_run,
    )


def load_table(
    runner: StatementRunner,
    config: MigrationConfig,
    table: TableRef,
    *,
    dry_run: bool = False,
) -> bool:
    """COPY the exported objects into the destination table."""
    statement = sql.copy_sql(
        table.schema,
        table.table,
        config.s3_prefix(table.prefix),
        config.iam_role,
    )
    return _run_step(
        runner,
        config.destination_cluster,
        statement,
        step="Loading",
        table=table,
        dry_run=dry_run,
    )


def dedup_table(
    runner: StatementRunner,
    config: MigrationConfig,
    table: TableRef,
    *,
    dry_run: bool = False,
) -> bool:
    """Delete rows sharing an id with a row that has a smaller uuid."""
    return _run_step(
        runner,
        config.destination_cluster,
        sql.dedup_sql(table.schema, table.table),
        step="Deduplicating",
        table=table,
        dry_run=dry_run,
    )


def migrate_table(
    runner: StatementRunner,
    config: MigrationConfig,
    table: TableRef,
    *,
    dry_run: bool = False,
    truncate: bool = False,
) -> TableMigrationResult:
    """Run export, (optional truncate), load and dedup for one table."""
    logger.info("Starting migration for %s", table.full_name)
    exported = export_table(runner, config, table, dry_run=dry_run)
    truncated = (
        truncate_table(runner, config, table, dry_run=dry_run) if truncate else False
    )
    loaded = load_table(runner, config, table, dry_run=dry_run)
    deduplicated = dedup_table(runner, config, table, dry_run=dry_run)
    return TableMigrationResult(
        table=table,
        exported=exported,
        truncated=truncated,
        loaded=loaded,
        deduplicated=deduplicated,
    )


def migrate_data(
    runner: StatementRunner,
    config: MigrationConfig,
    *,
    dry_run: bool = False,
    truncate: bool = False,
    name_regex: str | None = None,
    on_table: Callable[[TableMigrationResult], None] | None = None,
) -> list[TableMigrationResult]:
    """
    Migrate every table currently present on the source, one at a time.

    The source catalog is listed fresh here; tables created on the source
    after this listing are not migrated.

    Args:
        runner: Statement runner bound to the migration config.
        config: Migration configuration.
        dry_run: Log the statements instead of running them.
        truncate: Truncate each destination table before loading it.
        name_regex: Only migrate tables whose `schema.table` matches.
        on_table: Called after each table finished, e.g. for progress output.

    Returns:
        One TableMigrationResult per migrated table, in processing order.
    """
    tables = filter_tables(list_tables(runner, config.source_cluster), name_regex)
    results: list[TableMigrationResult] = []

    for table in tables:
        result = migrate_table(
            runner, config, table, dry_run=dry_run, truncate=truncate
        )
        results.append(result)
        if on_table is not None:
            on_table(result)

    return results
