from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from rsmigrate.core.errors import RemoteCallError
from rsmigrate.core.statements import Record, StatementDescription, StatementStatus

logger = logging.getLogger(__name__)


class RedshiftDataAdapter:
    """Adapter around the boto3 Redshift Data API client."""

    def __init__(self, client) -> None:
        self.client = client

    def _call(self, operation: str, **params):
        """Invoke one client operation, logging it and wrapping AWS errors."""
        logger.debug("redshift-data %s %s", operation, _loggable(params))
        try:
            response = getattr(self.client, operation)(**params)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            code = error.get("Code", "Unknown")
            logger.error("redshift-data %s failed: %s", operation, code)
            raise RemoteCallError(
                f"{operation} failed ({code}): {error.get('Message', exc)}"
            ) from exc
        except BotoCoreError as exc:
            logger.error("redshift-data %s failed: %s", operation, exc)
            raise RemoteCallError(f"{operation} failed: {exc}") from exc

        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        logger.debug("redshift-data %s -> HTTP %s", operation, status)
        return response

    def submit(self, cluster: str, database: str, db_user: str, sql: str) -> str:
        """Submit a statement and return its id."""
        response = self._call(
            "execute_statement",
            ClusterIdentifier=cluster,
            Database=database,
            DbUser=db_user,
            Sql=sql,
        )
        return response["Id"]

    def describe(self, statement_id: str) -> StatementDescription:
        """Return the current state of a statement."""
        response = self._call("describe_statement", Id=statement_id)
        raw_status = response.get("Status")
        return StatementDescription(
            status=StatementStatus.parse(raw_status),
            has_result_set=bool(response.get("HasResultSet", False)),
            error=response.get("Error") or None,
            raw_status=raw_status,
        )

    def fetch_result(self, statement_id: str) -> list[Record]:
        """Return all result rows, following NextToken pagination."""
        records: list[Record] = []
        params = {"Id": statement_id}
        while True:
            response = self._call("get_statement_result", **params)
            records.extend(response.get("Records", []))
            token = response.get("NextToken")
            if not token:
                return records
            params = {"Id": statement_id, "NextToken": token}

    def cancel(self, statement_id: str) -> None:
        """Cancel a running statement."""
        self._call("cancel_statement", Id=statement_id)


def _loggable(params: dict) -> dict:
    """Shorten long SQL text in debug logs."""
    sql = params.get("Sql")
    if sql and len(sql) > 200:
        return {**params, "Sql": f"{sql[:197]}..."}
    return params
