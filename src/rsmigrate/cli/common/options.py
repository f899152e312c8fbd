"""Common CLI options for the CLI."""

import typer

SourceOpt = typer.Option(
    None,
    "--source",
    "-s",
    envvar="RSMIGRATE_SOURCE",
    help="Source cluster identifier",
)

DestinationOpt = typer.Option(
    None,
    "--destination",
    "-d",
    envvar="RSMIGRATE_DESTINATION",
    help="Destination cluster identifier",
)

IamRoleOpt = typer.Option(
    None,
    "--iam-role",
    "-r",
    envvar="RSMIGRATE_IAM_ROLE",
    help="IAM role ARN used by UNLOAD and COPY",
)

DbUserOpt = typer.Option(
    None,
    "--db-user",
    "-u",
    envvar="RSMIGRATE_DB_USER",
    help="Database user for the Data API",
)

DbNameOpt = typer.Option(
    None,
    "--db-name",
    "-n",
    envvar="RSMIGRATE_DB_NAME",
    help="Database name (same on both clusters)",
)

S3BucketOpt = typer.Option(
    None,
    "--s3-bucket",
    "-b",
    envvar="RSMIGRATE_S3_BUCKET",
    help="S3 bucket used as staging area",
)

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    envvar="AWS_PROFILE",
    help="AWS profile (from ~/.aws/config)",
)

RegionOpt = typer.Option(
    None,
    "--region",
    help="AWS region (defaults to the profile/environment)",
)

PollIntervalOpt = typer.Option(
    0.1,
    "--poll-interval",
    help="Initial seconds between statement status checks",
)

PollBackoffOpt = typer.Option(
    2.0,
    "--poll-backoff",
    help="Multiplier applied to the poll interval after each check (1 = fixed)",
)

PollMaxIntervalOpt = typer.Option(
    5.0,
    "--poll-max-interval",
    help="Upper bound for the poll interval in seconds",
)

StatementTimeoutOpt = typer.Option(
    0.0,
    "--statement-timeout",
    help=(
        "Cancel a statement after this many seconds (0 = wait forever). "
        "Ctrl-C also cancels the running statement"
    ),
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every status poll and API call",
)

TablesOpt = typer.Option(
    None,
    "--tables",
    help="Regex on schema.table; only matching tables are processed",
)

TruncateOpt = typer.Option(
    False,
    "--truncate",
    help="Truncate destination tables before loading (replace instead of append)",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before changing the destination",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Log the statements that would run, but only execute catalog reads",
)
