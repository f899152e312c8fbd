"""Configuration records for a migration run.

Both records are assembled once (normally by the CLI) and never mutated;
every core function receives them as arguments.
"""

from __future__ import annotations

from dataclasses import dataclass

from rsmigrate.core.errors import ConfigError


@dataclass(frozen=True)
class MigrationConfig:
    """
    Describes which clusters to migrate between and how to reach them.

    Attributes:
        source_cluster: Cluster identifier the data is copied from.
        destination_cluster: Cluster identifier the data is copied to.
        iam_role: IAM role ARN used by UNLOAD and COPY to access S3.
        db_user: Database user the Data API authenticates as.
        db_name: Database name, identical on both clusters.
        storage_bucket: S3 bucket name used as the staging area.
    """

    source_cluster: str
    destination_cluster: str
    iam_role: str
    db_user: str
    db_name: str
    storage_bucket: str

    def s3_prefix(self, key_prefix: str) -> str:
        """Return the staging location for a key prefix such as `schema/table/`."""
        return f"s3://{self.storage_bucket}/{key_prefix}"


@dataclass(frozen=True)
class PollSettings:
    """
    Controls how long and how often a statement is polled.

    Attributes:
        interval: Initial pause between two status checks, in seconds.
        backoff: Factor applied to the pause after every check (1.0 = fixed).
        max_interval: Upper bound for the pause, in seconds.
        timeout: Give up after this many seconds; None waits forever.
    """

    interval: float = 0.1
    backoff: float = 2.0
    max_interval: float = 5.0
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigError("Poll interval must be > 0")
        if self.backoff < 1:
            raise ConfigError("Poll backoff must be >= 1")
        if self.max_interval < self.interval:
            raise ConfigError("Poll max interval must be >= the poll interval")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError("Statement timeout must be > 0 (or None)")


def _normalize_bucket(bucket: str) -> str:
    """Accept `name`, `s3://name` or `s3://name/` and return `name`."""
    bucket = bucket.strip()
    if bucket.startswith("s3://"):
        bucket = bucket[len("s3://") :]
    return bucket.rstrip("/")


def build_config(
    *,
    source: str | None,
    destination: str | None,
    iam_role: str | None,
    db_user: str | None,
    db_name: str | None,
    s3_bucket: str | None,
) -> MigrationConfig:
    """
    Validate raw option values and build a MigrationConfig.

    Raises:
        ConfigError: If a value is missing or malformed.
    """
    raw = {
        "source": source,
        "destination": destination,
        "iam-role": iam_role,
        "db-user": db_user,
        "db-name": db_name,
        "s3-bucket": s3_bucket,
    }
    missing = [name for name, value in raw.items() if not value or not value.strip()]
    if missing:
        raise ConfigError(
            "Missing required option(s): " + ", ".join(f"--{m}" for m in missing)
        )

    if source.strip() == destination.strip():
        raise ConfigError("Source and destination cluster must differ.")

    role = iam_role.strip()
    if not role.startswith("arn:aws") or ":iam::" not in role:
        raise ConfigError(f"IAM role must be an ARN (arn:aws:iam::...), got {role!r}")

    bucket = _normalize_bucket(s3_bucket)
    if not bucket or "/" in bucket:
        raise ConfigError(f"S3 bucket must be a bucket name, got {s3_bucket!r}")

    return MigrationConfig(
        source_cluster=source.strip(),
        destination_cluster=destination.strip(),
        iam_role=role,
        db_user=db_user.strip(),
        db_name=db_name.strip(),
        storage_bucket=bucket,
    )
