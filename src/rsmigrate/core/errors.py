"""Exception hierarchy for the migration core.

Core modules raise these; the CLI layer turns them into messages and exit
codes. Nothing here is retryable: every error aborts the migration.
"""

from __future__ import annotations


class MigrationError(RuntimeError):
    """Base class for all migration failures."""


class ConfigError(MigrationError, ValueError):
    """Raised when the migration configuration is missing or malformed."""


class RemoteCallError(MigrationError):
    """Raised when a Redshift Data API call itself fails."""


class CatalogError(MigrationError):
    """Raised when catalog metadata is missing or has an unexpected shape."""


class UnexpectedStatusError(MigrationError):
    """Raised when the Data API reports a status we do not know about."""

    def __init__(self, statement_id: str, status: str):
        super().__init__(f"Statement {statement_id} reported unknown status {status!r}")
        self.statement_id = statement_id
        self.status = status


class StatementError(MigrationError):
    """A submitted statement did not finish successfully."""

    verb = "did not finish"

    def __init__(self, statement_id: str, sql: str, reason: str | None = None):
        message = f"Statement {statement_id} {self.verb}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.statement_id = statement_id
        self.sql = sql
        self.reason = reason


class StatementFailedError(StatementError):
    verb = "failed"


class StatementAbortedError(StatementError):
    verb = "was aborted remotely"


class StatementTimeoutError(StatementError):
    verb = "timed out"


class StatementCancelledError(StatementError):
    verb = "was cancelled"
