import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from rsmigrate.core.adapters.redshiftdata import RedshiftDataAdapter
from rsmigrate.core.errors import RemoteCallError
from rsmigrate.core.statements import StatementStatus


class _ClientStub:
    """Mimics the boto3 redshift-data client methods the adapter uses."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def _respond(self, operation, params):
        self.calls.append((operation, params))
        if self.error is not None:
            raise self.error
        response = self.responses[operation]
        if isinstance(response, list):
            return response.pop(0)
        return response

    def execute_statement(self, **params):
        return self._respond("execute_statement", params)

    def describe_statement(self, **params):
        return self._respond("describe_statement", params)

    def get_statement_result(self, **params):
        return self._respond("get_statement_result", params)

    def cancel_statement(self, **params):
        return self._respond("cancel_statement", params)


def test_submit_passes_cluster_database_user_and_sql():
    client = _ClientStub({"execute_statement": {"Id": "abc-123"}})
    adapter = RedshiftDataAdapter(client)

    statement_id = adapter.submit("old-cluster", "analytics", "migrator", "SELECT 1;")

    assert statement_id == "abc-123"
    assert client.calls == [
        (
            "execute_statement",
            {
                "ClusterIdentifier": "old-cluster",
                "Database": "analytics",
                "DbUser": "migrator",
                "Sql": "SELECT 1;",
            },
        )
    ]


def test_describe_maps_status_result_set_and_error():
    client = _ClientStub(
        {
            "describe_statement": {
                "Id": "abc",
                "Status": "FAILED",
                "HasResultSet": False,
                "Error": "ERROR: relation does not exist",
            }
        }
    )

    description = RedshiftDataAdapter(client).describe("abc")

    assert description.status == StatementStatus.FAILED
    assert description.has_result_set is False
    assert description.error == "ERROR: relation does not exist"
    assert description.raw_status == "FAILED"


def test_describe_keeps_raw_value_for_unknown_status():
    client = _ClientStub({"describe_statement": {"Id": "abc", "Status": "PAUSED"}})

    description = RedshiftDataAdapter(client).describe("abc")

    assert description.status == StatementStatus.UNKNOWN
    assert description.raw_status == "PAUSED"


def test_fetch_result_follows_next_token():
    client = _ClientStub(
        {
            "get_statement_result": [
                {"Records": [[{"stringValue": "a"}]], "NextToken": "page-2"},
                {"Records": [[{"stringValue": "b"}]]},
            ]
        }
    )

    records = RedshiftDataAdapter(client).fetch_result("abc")

    assert records == [[{"stringValue": "a"}], [{"stringValue": "b"}]]
    assert client.calls[1] == (
        "get_statement_result",
        {"Id": "abc", "NextToken": "page-2"},
    )


def test_cancel_calls_cancel_statement():
    client = _ClientStub({"cancel_statement": {"Status": True}})

    RedshiftDataAdapter(client).cancel("abc")

    assert client.calls == [("cancel_statement", {"Id": "abc"})]


def test_client_error_is_wrapped():
    error = ClientError(
        {"Error": {"Code": "ValidationException", "Message": "Cluster not found"}},
        "ExecuteStatement",
    )
    adapter = RedshiftDataAdapter(_ClientStub(error=error))

    with pytest.raises(RemoteCallError, match="ValidationException"):
        adapter.submit("missing", "analytics", "migrator", "SELECT 1;")


def test_connection_error_is_wrapped():
    error = EndpointConnectionError(endpoint_url="https://redshift-data.example")
    adapter = RedshiftDataAdapter(_ClientStub(error=error))

    with pytest.raises(RemoteCallError, match="describe_statement"):
        adapter.describe("abc")
