"""End-to-end migration pipeline.

Stages run in a fixed order because each depends on the previous one:
schemas before table DDL, table DDL before data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from rsmigrate.core.config import MigrationConfig
from rsmigrate.core.migrate import TableMigrationResult, migrate_data
from rsmigrate.core.reconcile import (
    ReconcileResult,
    reconcile_schemas,
    reconcile_tables,
)
from rsmigrate.core.statements import StatementRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """Summary of a full migration run."""

    schemas: ReconcileResult
    tables: ReconcileResult
    migrated: list[TableMigrationResult]


def run_migration(
    runner: StatementRunner,
    config: MigrationConfig,
    *,
    dry_run: bool = False,
    truncate: bool = False,
    name_regex: str | None = None,
    on_table: Callable[[TableMigrationResult], None] | None = None,
) -> MigrationReport:
    """Reconcile schemas, then tables, then migrate every table's data."""
    logger.info(
        "Migrating %s -> %s (database %s)",
        config.source_cluster,
        config.destination_cluster,
        config.db_name,
    )
    schemas = reconcile_schemas(runner, config, dry_run=dry_run)
    tables = reconcile_tables(runner, config, dry_run=dry_run, name_regex=name_regex)
    migrated = migrate_data(
        runner,
        config,
        dry_run=dry_run,
        truncate=truncate,
        name_regex=name_regex,
        on_table=on_table,
    )
    logger.info("Migration finished: %d table(s)", len(migrated))
    return MigrationReport(schemas=schemas, tables=tables, migrated=migrated)
