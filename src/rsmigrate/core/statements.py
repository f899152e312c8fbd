"""Statement submission and polling.

The Redshift Data API is asynchronous: a statement is submitted, returns an
id, and has to be polled until it reaches a terminal state. This module
turns that into a blocking call. Polling is explicit and synchronous; the
adapter does the actual API work so tests can drive the state machine with
a scripted stub.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from rsmigrate.core.config import MigrationConfig, PollSettings
from rsmigrate.core.errors import (
    StatementAbortedError,
    StatementCancelledError,
    StatementFailedError,
    StatementTimeoutError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

Record = list[Any]


@dataclass(frozen=True)
class StatementHandle:
    """
    Opaque handle for a submitted statement.

    Attributes:
        id: Data API statement id.
        cluster: Cluster the statement was submitted to (for logging only).
    """

    id: str
    cluster: str = ""


class StatementStatus(str, Enum):
    """
    Status values reported by `describe_statement`.

    SUBMITTED, PICKED and STARTED are pending; FINISHED, FAILED and ABORTED
    are terminal. UNKNOWN stands for anything the API adds later.
    """

    SUBMITTED = "SUBMITTED"
    PICKED = "PICKED"
    STARTED = "STARTED"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | None) -> StatementStatus:
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


PENDING_STATUSES = frozenset(
    {StatementStatus.SUBMITTED, StatementStatus.PICKED, StatementStatus.STARTED}
)


@dataclass(frozen=True)
class StatementDescription:
    """Snapshot of a statement's remote state."""

    status: StatementStatus
    has_result_set: bool = False
    error: str | None = None
    raw_status: str | None = None


class OutcomeKind(str, Enum):
    """Every way waiting on a statement can end."""

    FINISHED = "FINISHED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class StatementOutcome:
    """
    Terminal result of a statement.

    Attributes:
        handle: Handle of the statement this outcome belongs to.
        kind: How the statement ended.
        records: Result rows for a FINISHED query; None when the statement
                 produced no result set (DDL/DML) or did not finish.
        error: Remote error message for FAILED outcomes.
    """

    handle: StatementHandle
    kind: OutcomeKind
    records: list[Record] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.FINISHED


class StatementsAdapter(Protocol):
    """Interface for the remote statement API used by the core."""

    def submit(self, cluster: str, database: str, db_user: str, sql: str) -> str:
        """Submit a statement and return its id."""
        ...

    def describe(self, statement_id: str) -> StatementDescription:
        """Return the current state of a statement."""
        ...

    def fetch_result(self, statement_id: str) -> list[Record]:
        """Return all result rows of a finished statement."""
        ...

    def cancel(self, statement_id: str) -> None:
        """Ask the remote side to stop a running statement."""
        ...


def execute(
    adapter: StatementsAdapter,
    cluster: str,
    sql: str,
    config: MigrationConfig,
) -> StatementHandle:
    """Submit `sql` to `cluster` as the configured user and database."""
    logger.info("Submitting statement to %s: %s", cluster, sql)
    statement_id = adapter.submit(cluster, config.db_name, config.db_user, sql)
    return StatementHandle(id=statement_id, cluster=cluster)


def _pause(
    delay: float,
    sleep: Callable[[float], None],
    cancel: threading.Event | None,
) -> None:
    if cancel is None:
        sleep(delay)
    else:
        # wakes up early once the event is set
        cancel.wait(delay)


def wait_for_statement(
    adapter: StatementsAdapter,
    handle: StatementHandle,
    settings: PollSettings | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    cancel: threading.Event | None = None,
) -> StatementOutcome:
    """
    Block until a statement reaches a terminal state.

    The pause between two checks starts at `settings.interval` and grows by
    `settings.backoff` up to `settings.max_interval`. When the statement
    finishes with a result set, the rows are fetched with exactly one extra
    adapter call.

    Args:
        adapter: Statement API adapter.
        handle: Handle returned by `execute`.
        settings: Polling configuration; defaults to PollSettings().
        sleep: Pause function, replaceable in tests.
        clock: Monotonic clock used for the timeout.
        cancel: Optional event; once set, the statement is cancelled
                remotely and a CANCELLED outcome is returned.

    Returns:
        The StatementOutcome.

    Raises:
        UnexpectedStatusError: If the API reports a status outside
            StatementStatus.
        KeyboardInterrupt: Re-raised after cancelling the statement remotely.
    """
    settings = settings or PollSettings()
    deadline = clock() + settings.timeout if settings.timeout is not None else None
    delay = settings.interval

    try:
        while True:
            if cancel is not None and cancel.is_set():
                logger.warning("Cancelling statement %s", handle.id)
                adapter.cancel(handle.id)
                return StatementOutcome(handle=handle, kind=OutcomeKind.CANCELLED)

            description = adapter.describe(handle.id)
            status = description.status
            logger.debug("Statement %s status: %s", handle.id, status.value)

            if status in PENDING_STATUSES:
                if deadline is not None and clock() >= deadline:
                    logger.warning(
                        "Statement %s still %s after %ss, cancelling",
                        handle.id,
                        status.value,
                        settings.timeout,
                    )
                    adapter.cancel(handle.id)
                    return StatementOutcome(
                        handle=handle, kind=OutcomeKind.TIMED_OUT
                    )
                _pause(delay, sleep, cancel)
                delay = min(delay * settings.backoff, settings.max_interval)
                continue

            logger.info(
                "Statement %s on %s: %s", handle.id, handle.cluster, status.value
            )

            if status == StatementStatus.FINISHED:
                if not description.has_result_set:
                    return StatementOutcome(handle=handle, kind=OutcomeKind.FINISHED)
                records = adapter.fetch_result(handle.id)
                return StatementOutcome(
                    handle=handle, kind=OutcomeKind.FINISHED, records=records
                )
            if status == StatementStatus.FAILED:
                return StatementOutcome(
                    handle=handle, kind=OutcomeKind.FAILED, error=description.error
                )
            if status == StatementStatus.ABORTED:
                return StatementOutcome(
                    handle=handle, kind=OutcomeKind.ABORTED, error=description.error
                )

            raise UnexpectedStatusError(
                handle.id, description.raw_status or status.value
            )
    except KeyboardInterrupt:
        logger.warning("Interrupted, cancelling statement %s", handle.id)
        adapter.cancel(handle.id)
        raise


def raise_for_outcome(outcome: StatementOutcome, sql: str) -> StatementOutcome:
    """Return a FINISHED outcome unchanged, raise a StatementError otherwise."""
    statement_id = outcome.handle.id
    if outcome.ok:
        return outcome
    if outcome.kind == OutcomeKind.FAILED:
        raise StatementFailedError(statement_id, sql, outcome.error)
    if outcome.kind == OutcomeKind.ABORTED:
        raise StatementAbortedError(statement_id, sql, outcome.error)
    if outcome.kind == OutcomeKind.TIMED_OUT:
        raise StatementTimeoutError(statement_id, sql)
    if outcome.kind == OutcomeKind.CANCELLED:
        raise StatementCancelledError(statement_id, sql)
    raise ValueError(f"Unhandled outcome kind: {outcome.kind}")


def run_statement(
    adapter: StatementsAdapter,
    cluster: str,
    sql: str,
    config: MigrationConfig,
    settings: PollSettings | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    cancel: threading.Event | None = None,
) -> StatementOutcome:
    """
    Submit a statement and wait for it to finish successfully.

    Raises:
        StatementError: If the statement failed, was aborted, timed out or
            was cancelled.
    """
    handle = execute(adapter, cluster, sql, config)
    outcome = wait_for_statement(adapter, handle, settings, sleep=sleep, cancel=cancel)
    return raise_for_outcome(outcome, sql)


@dataclass
class StatementRunner:
    """
    Binds an adapter to a configuration so callers only pass cluster + SQL.

    The catalog, reconcile and migrate modules talk to the warehouse
    exclusively through `run`.
    """

    adapter: StatementsAdapter
    config: MigrationConfig
    settings: PollSettings
    cancel: threading.Event | None = None
    sleep: Callable[[float], None] = time.sleep

    def run(self, cluster: str, sql: str) -> StatementOutcome:
        return run_statement(
            self.adapter,
            cluster,
            sql,
            self.config,
            self.settings,
            sleep=self.sleep,
            cancel=self.cancel,
        )
