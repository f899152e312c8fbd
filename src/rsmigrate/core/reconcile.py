"""Create schemas and tables that exist on the source but not the destination.

Reconciliation is a plain set difference on names. A table present on both
sides is left alone even when its columns differ.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Iterable, TypeVar

from rsmigrate.core import sql
from rsmigrate.core.catalog import (
    TableRef,
    filter_tables,
    get_ddl,
    list_schemas,
    list_tables,
)
from rsmigrate.core.config import MigrationConfig
from rsmigrate.core.statements import StatementRunner

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class ReconcileResult:
    """Objects that were (or, in dry-run, would be) created on the destination."""

    created: list = field(default_factory=list)
    dry_run: bool = False


def difference(source: Iterable[T], destination: Iterable[T]) -> list[T]:
    """Return items of `source` missing from `destination`, sorted."""
    return sorted(set(source) - set(destination))


def missing_schemas(runner: StatementRunner, config: MigrationConfig) -> list[str]:
    return difference(
        list_schemas(runner, config.source_cluster),
        list_schemas(runner, config.destination_cluster),
    )


def missing_tables(
    runner: StatementRunner,
    config: MigrationConfig,
    *,
    name_regex: str | None = None,
) -> list[TableRef]:
    missing = difference(
        list_tables(runner, config.source_cluster),
        list_tables(runner, config.destination_cluster),
    )
    return filter_tables(missing, name_regex)


def reconcile_schemas(
    runner: StatementRunner,
    config: MigrationConfig,
    *,
    dry_run: bool = False,
) -> ReconcileResult:
    """Issue one CREATE SCHEMA on the destination per missing schema."""
    logger.info("Creating missing schemas")
    missing = missing_schemas(runner, config)

    for schema in missing:
        statement = sql.create_schema_sql(schema)
        if dry_run:
            logger.info("[dry-run] %s", statement)
            continue
        runner.run(config.destination_cluster, statement)

    return ReconcileResult(created=missing, dry_run=dry_run)


def reconcile_tables(
    runner: StatementRunner,
    config: MigrationConfig,
    *,
    dry_run: bool = False,
    name_regex: str | None = None,
) -> ReconcileResult:
    """Replay the source DDL on the destination for every missing table."""
    logger.info("Creating missing tables")
    missing = missing_tables(runner, config, name_regex=name_regex)

    for table in missing:
        ddl = get_ddl(runner, config.source_cluster, table)
        if dry_run:
            logger.info("[dry-run] create %s:\n%s", table.full_name, ddl)
            continue
        runner.run(config.destination_cluster, ddl)

    return ReconcileResult(created=missing, dry_run=dry_run)
