"""Commands for migrating between two Redshift clusters."""

import typer

from rsmigrate.cli.common.context import (
    MigrateAppContext,
    MigrateOptions,
    build_migrate_context,
)
from rsmigrate.cli.common.exits import exit_from_exc, ok_exit, warn_exit
from rsmigrate.cli.common.logs import configure_logging
from rsmigrate.cli.common.options import (
    ConfirmOpt,
    DbNameOpt,
    DbUserOpt,
    DestinationOpt,
    DryRunOpt,
    IamRoleOpt,
    PollBackoffOpt,
    PollIntervalOpt,
    PollMaxIntervalOpt,
    ProfileOpt,
    RegionOpt,
    S3BucketOpt,
    SourceOpt,
    StatementTimeoutOpt,
    TablesOpt,
    TruncateOpt,
    VerboseOpt,
)
from rsmigrate.cli.common.output import out
from rsmigrate.core.errors import MigrationError
from rsmigrate.core.migrate import TableMigrationResult, migrate_data
from rsmigrate.core.orchestrator import run_migration
from rsmigrate.core.reconcile import (
    missing_schemas,
    missing_tables,
    reconcile_schemas,
    reconcile_tables,
)

app = typer.Typer(
    help="rsmigrate - copy schemas, tables and data between Redshift clusters",
    no_args_is_help=True,
)


@app.callback()
def _init(
    ctx: typer.Context,
    source: str | None = SourceOpt,
    destination: str | None = DestinationOpt,
    iam_role: str | None = IamRoleOpt,
    db_user: str | None = DbUserOpt,
    db_name: str | None = DbNameOpt,
    s3_bucket: str | None = S3BucketOpt,
    profile: str | None = ProfileOpt,
    region: str | None = RegionOpt,
    poll_interval: float = PollIntervalOpt,
    poll_backoff: float = PollBackoffOpt,
    poll_max_interval: float = PollMaxIntervalOpt,
    statement_timeout: float = StatementTimeoutOpt,
    verbose: bool = VerboseOpt,
):
    """Collect connection options; validation happens when a command runs."""
    configure_logging(verbose)
    ctx.obj = MigrateOptions(
        source=source,
        destination=destination,
        iam_role=iam_role,
        db_user=db_user,
        db_name=db_name,
        s3_bucket=s3_bucket,
        profile=profile,
        region=region,
        poll_interval=poll_interval,
        poll_backoff=poll_backoff,
        poll_max_interval=poll_max_interval,
        statement_timeout=statement_timeout,
    )


def _context(ctx: typer.Context) -> MigrateAppContext:
    opts: MigrateOptions = ctx.obj
    return build_migrate_context(opts)


def _describe(appctx: MigrateAppContext) -> None:
    config = appctx.config
    out.kv(
        {
            "source": config.source_cluster,
            "destination": config.destination_cluster,
            "database": config.db_name,
            "staging": f"s3://{config.storage_bucket}/",
        }
    )


def _confirm_or_exit(message: str, *, confirm: bool, dry_run: bool) -> None:
    if dry_run:
        out.warn("Dry-run enabled: only catalog reads will be executed")
        return
    if confirm and not out.confirm(message):
        ok_exit("Cancelled")


def _table_done(result: TableMigrationResult) -> None:
    if result.loaded:
        out.success(f"Migrated {result.table.full_name}")


@app.command()
def diff(ctx: typer.Context, tables: str | None = TablesOpt):
    """
    Show schemas and tables missing on the destination.
    """
    appctx = _context(ctx)
    _describe(appctx)

    try:
        with out.status("Comparing catalogs..."):
            schemas = missing_schemas(appctx.runner, appctx.config)
            refs = missing_tables(appctx.runner, appctx.config, name_regex=tables)
    except (MigrationError, KeyboardInterrupt) as exc:
        exit_from_exc(exc)

    if not schemas and not refs:
        ok_exit("Destination already has every source schema and table")

    if schemas:
        out.schemas_table(schemas, title="Missing schemas")
    if refs:
        out.tables_table(refs, title="Missing tables")


@app.command()
def schemas(
    ctx: typer.Context,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Create schemas that exist on the source but not on the destination.
    """
    appctx = _context(ctx)
    _describe(appctx)
    _confirm_or_exit("Create missing schemas?", confirm=confirm, dry_run=dry_run)

    try:
        result = reconcile_schemas(appctx.runner, appctx.config, dry_run=dry_run)
    except (MigrationError, KeyboardInterrupt) as exc:
        exit_from_exc(exc)

    if not result.created:
        warn_exit("No missing schemas", code=0)
    out.schemas_table(
        result.created, title="Would create" if dry_run else "Created schemas"
    )


@app.command("tables")
def tables_cmd(
    ctx: typer.Context,
    tables: str | None = TablesOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Replay source DDL on the destination for every missing table.
    """
    appctx = _context(ctx)
    _describe(appctx)
    _confirm_or_exit("Create missing tables?", confirm=confirm, dry_run=dry_run)

    try:
        result = reconcile_tables(
            appctx.runner, appctx.config, dry_run=dry_run, name_regex=tables
        )
    except (MigrationError, KeyboardInterrupt) as exc:
        exit_from_exc(exc)

    if not result.created:
        warn_exit("No missing tables", code=0)
    out.tables_table(
        result.created, title="Would create" if dry_run else "Created tables"
    )


@app.command()
def data(
    ctx: typer.Context,
    tables: str | None = TablesOpt,
    truncate: bool = TruncateOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Export, load and deduplicate every source table.
    """
    appctx = _context(ctx)
    _describe(appctx)
    _confirm_or_exit("Migrate table data?", confirm=confirm, dry_run=dry_run)

    try:
        results = migrate_data(
            appctx.runner,
            appctx.config,
            dry_run=dry_run,
            truncate=truncate,
            name_regex=tables,
            on_table=_table_done,
        )
    except (MigrationError, KeyboardInterrupt) as exc:
        exit_from_exc(exc)

    if not results:
        warn_exit("No tables to migrate", code=0)
    out.migration_results_table(results)


@app.command()
def run(
    ctx: typer.Context,
    tables: str | None = TablesOpt,
    truncate: bool = TruncateOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Run the full migration: schemas, tables, then data.
    """
    appctx = _context(ctx)
    _describe(appctx)
    _confirm_or_exit("Start the migration?", confirm=confirm, dry_run=dry_run)

    try:
        report = run_migration(
            appctx.runner,
            appctx.config,
            dry_run=dry_run,
            truncate=truncate,
            name_regex=tables,
            on_table=_table_done,
        )
    except (MigrationError, KeyboardInterrupt) as exc:
        exit_from_exc(exc)

    if report.schemas.created:
        out.schemas_table(
            report.schemas.created,
            title="Would create" if report.schemas.dry_run else "Created schemas",
        )
    if report.tables.created:
        out.tables_table(
            report.tables.created,
            title="Would create" if report.tables.dry_run else "Created tables",
        )
    out.migration_results_table(report.migrated)
    out.success(f"Migration finished: {len(report.migrated)} table(s)")
