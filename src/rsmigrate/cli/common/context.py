"""Application context management for the CLI."""

from dataclasses import dataclass

from rsmigrate.cli.common.exits import exit_from_exc
from rsmigrate.core.adapters.redshiftdata import RedshiftDataAdapter
from rsmigrate.core.auth import AuthError, get_client
from rsmigrate.core.config import MigrationConfig, PollSettings, build_config
from rsmigrate.core.errors import ConfigError
from rsmigrate.core.statements import StatementRunner


@dataclass(frozen=True)
class MigrateOptions:
    """Raw connection/polling options collected by the top-level callback."""

    source: str | None = None
    destination: str | None = None
    iam_role: str | None = None
    db_user: str | None = None
    db_name: str | None = None
    s3_bucket: str | None = None
    profile: str | None = None
    region: str | None = None
    poll_interval: float = 0.1
    poll_backoff: float = 2.0
    poll_max_interval: float = 5.0
    statement_timeout: float = 0.0


@dataclass
class MigrateAppContext:
    """Application context holding the validated config and statement runner."""

    config: MigrationConfig
    runner: StatementRunner


def build_poll_settings(opts: MigrateOptions) -> PollSettings:
    """Translate CLI polling options into PollSettings (0 timeout = none)."""
    return PollSettings(
        interval=opts.poll_interval,
        backoff=opts.poll_backoff,
        max_interval=opts.poll_max_interval,
        timeout=opts.statement_timeout or None,
    )


def build_migrate_context(opts: MigrateOptions) -> MigrateAppContext:
    """Validate options and build the context used by every command.

    Args:
        opts: Options gathered by the CLI callback.

    Returns:
        MigrateAppContext: Context with config and a ready StatementRunner.
    """
    try:
        config = build_config(
            source=opts.source,
            destination=opts.destination,
            iam_role=opts.iam_role,
            db_user=opts.db_user,
            db_name=opts.db_name,
            s3_bucket=opts.s3_bucket,
        )
        settings = build_poll_settings(opts)
    except ConfigError as exc:
        exit_from_exc(exc)

    try:
        client = get_client(opts.profile, opts.region)
    except AuthError as exc:
        exit_from_exc(exc)

    runner = StatementRunner(
        adapter=RedshiftDataAdapter(client),
        config=config,
        settings=settings,
    )
    return MigrateAppContext(config=config, runner=runner)
