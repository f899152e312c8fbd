from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from rsmigrate.core.catalog import TableRef  # noqa: E402
from rsmigrate.core.config import MigrationConfig, PollSettings  # noqa: E402
from rsmigrate.core.statements import (  # noqa: E402
    StatementDescription,
    StatementRunner,
    StatementStatus,
)

_IDENT = r'"((?:[^"]|"")+)"'
_QUALIFIED = re.compile(_IDENT + r"\." + _IDENT)
_CREATE_TABLE = re.compile(
    r"CREATE TABLE (?:IF NOT EXISTS )?" + _IDENT + r"\." + _IDENT, re.IGNORECASE
)
_DDL_FILTER = re.compile(r"schemaname = '(.*?)' AND tablename = '(.*?)'")
_S3_TARGET = re.compile(r"(?:TO|FROM) '(s3://[^']+)'")


def _unquote(name: str) -> str:
    return name.replace('""', '"')


def _s(value) -> dict:
    return {"stringValue": value}


@dataclass
class FakeTable:
    ddl: list[str]
    rows: list[dict] = field(default_factory=list)


@dataclass
class FakeCluster:
    schemas: set[str] = field(default_factory=set)
    tables: dict[TableRef, FakeTable] = field(default_factory=dict)

    def add_table(self, schema: str, table: str, rows: list[dict] | None = None):
        self.schemas.add(schema)
        ddl = [
            f'CREATE TABLE IF NOT EXISTS "{schema}"."{table}"',
            "(",
            "\tid INTEGER ENCODE az64",
            "\t,uuid VARCHAR(36) ENCODE lzo",
            ")",
            "DISTSTYLE AUTO",
            ";",
        ]
        self.tables[TableRef(schema, table)] = FakeTable(ddl=ddl, rows=list(rows or []))
        return self.tables[TableRef(schema, table)]


@dataclass
class _Submitted:
    cluster: str
    sql: str
    records: list | None
    error: str | None
    polls_left: int


class FakeWarehouse:
    """
    In-memory stand-in for the Redshift Data API.

    Understands exactly the statements rsmigrate issues. Statements take
    effect on submit; `describe` reports STARTED `pending_polls` times first.
    """

    def __init__(self, pending_polls: int = 0):
        self.clusters: dict[str, FakeCluster] = {}
        self.s3: dict[str, list[dict]] = {}
        self.pending_polls = pending_polls
        self.fail_on: dict[str, str] = {}
        self.executed: list[tuple[str, str]] = []
        self.cancelled: list[str] = []
        self._statements: dict[str, _Submitted] = {}

    def cluster(self, name: str) -> FakeCluster:
        return self.clusters.setdefault(name, FakeCluster())

    def statements_on(self, cluster: str) -> list[str]:
        return [sql for c, sql in self.executed if c == cluster]

    # StatementsAdapter

    def submit(self, cluster: str, database: str, db_user: str, sql: str) -> str:
        statement_id = f"stmt-{len(self._statements) + 1}"
        self.executed.append((cluster, sql))
        error = next((msg for needle, msg in self.fail_on.items() if needle in sql), None)
        records = None if error else self._apply(self.cluster(cluster), sql)
        self._statements[statement_id] = _Submitted(
            cluster, sql, records, error, self.pending_polls
        )
        return statement_id

    def describe(self, statement_id: str) -> StatementDescription:
        stmt = self._statements[statement_id]
        if stmt.polls_left > 0:
            stmt.polls_left -= 1
            return StatementDescription(status=StatementStatus.STARTED)
        if stmt.error:
            return StatementDescription(status=StatementStatus.FAILED, error=stmt.error)
        return StatementDescription(
            status=StatementStatus.FINISHED,
            has_result_set=stmt.records is not None,
        )

    def fetch_result(self, statement_id: str) -> list:
        return self._statements[statement_id].records or []

    def cancel(self, statement_id: str) -> None:
        self.cancelled.append(statement_id)

    # SQL interpretation

    def _apply(self, cluster: FakeCluster, sql: str) -> list | None:
        if sql.startswith("SELECT schema_name FROM information_schema.schemata"):
            return [[_s(name)] for name in cluster.schemas]
        if sql.startswith("SELECT table_schema, table_name FROM information_schema.tables"):
            return [[_s(ref.schema), _s(ref.table)] for ref in cluster.tables]
        if sql.startswith("SELECT ddl FROM admin.v_generate_tbl_ddl"):
            schema, table = _DDL_FILTER.search(sql).groups()
            found = cluster.tables.get(TableRef(schema, table))
            return [[_s(fragment)] for fragment in (found.ddl if found else [])]
        if sql.startswith("CREATE SCHEMA"):
            (name,) = re.match(r"CREATE SCHEMA " + _IDENT, sql).groups()
            cluster.schemas.add(_unquote(name))
            return None
        if _CREATE_TABLE.match(sql):
            schema, table = (_unquote(n) for n in _CREATE_TABLE.match(sql).groups())
            ref = TableRef(schema, table)
            if ref not in cluster.tables:
                cluster.tables[ref] = FakeTable(ddl=sql.split("\n"))
            return None

        ref = TableRef(*(_unquote(n) for n in _QUALIFIED.search(sql).groups()))
        if sql.startswith("UNLOAD"):
            prefix = _S3_TARGET.search(sql).group(1)
            self.s3[prefix] = [dict(r) for r in cluster.tables[ref].rows]
        elif sql.startswith("TRUNCATE"):
            cluster.tables[ref].rows = []
        elif sql.startswith("COPY"):
            prefix = _S3_TARGET.search(sql).group(1)
            cluster.tables[ref].rows.extend(dict(r) for r in self.s3.get(prefix, []))
        elif sql.startswith("DELETE FROM"):
            rows = cluster.tables[ref].rows
            cluster.tables[ref].rows = [
                a
                for a in rows
                if not any(a["id"] == b["id"] and a["uuid"] > b["uuid"] for b in rows)
            ]
        else:
            raise AssertionError(f"FakeWarehouse does not understand: {sql}")
        return None


@pytest.fixture
def config() -> MigrationConfig:
    return MigrationConfig(
        source_cluster="old-cluster",
        destination_cluster="new-cluster",
        iam_role="arn:aws:iam::123456789012:role/redshift-s3",
        db_user="migrator",
        db_name="analytics",
        storage_bucket="staging-bucket",
    )


@pytest.fixture
def warehouse() -> FakeWarehouse:
    return FakeWarehouse()


@pytest.fixture
def runner(warehouse: FakeWarehouse, config: MigrationConfig) -> StatementRunner:
    return StatementRunner(
        adapter=warehouse,
        config=config,
        settings=PollSettings(),
        sleep=lambda _seconds: None,
    )
