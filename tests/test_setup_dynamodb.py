"""
Tests for the DynamoDB table setup script.
"""

import sys
import pytest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from scripts import setup_dynamodb


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "CreateTable")


class TestSetupDynamoDB:
    """Exit codes of the setup script."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def run(self, client):
        def _run(*argv):
            with patch.object(sys, "argv", ["setup_dynamodb.py", *argv]), \
                    patch("scripts.setup_dynamodb.boto3.client", return_value=client) as factory:
                code = setup_dynamodb.main()
            return code, factory
        return _run

    def test_table_created(self, run, client):
        code, factory = run("--table", "posts-test", "--endpoint-url", "http://localhost:8000")

        assert code == 0
        assert factory.call_args.args == ("dynamodb",)
        assert factory.call_args.kwargs["endpoint_url"] == "http://localhost:8000"
        assert client.create_table.call_args.kwargs["TableName"] == "posts-test"
        client.get_waiter.assert_called_once_with("table_exists")

    def test_no_wait(self, run, client):
        code, _ = run("--table", "posts-test", "--no-wait")

        assert code == 0
        client.get_waiter.assert_not_called()

    def test_table_already_exists(self, run, client):
        client.create_table.side_effect = client_error("ResourceInUseException")

        code, _ = run("--table", "posts-test")

        assert code == 0

    def test_failure_exits_non_zero(self, run, client):
        client.create_table.side_effect = client_error("AccessDeniedException")

        code, _ = run("--table", "posts-test")

        assert code == 1
