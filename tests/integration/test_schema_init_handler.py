"""
Integration tests for the schema initializer custom resource handler.
"""

from unittest.mock import patch

import psycopg2
import pytest

from users_api.handlers.schema_init_handler import lambda_handler
from users_api.logic.schema import build_schema_statements


@pytest.mark.integration
class TestSchemaInitHandler:
    """Integration tests for the schema initializer."""

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_create_success(self, mock_connect, db_secret, db_connection, custom_resource_event, lambda_context):
        mock_connect.return_value = db_connection

        response = lambda_handler(custom_resource_event, lambda_context)

        assert response == {
            "RequestId": "cfn-request-id-456",
            "LogicalResourceId": "DatabaseInitializer",
            "PhysicalResourceId": "DBInitialization",
            "StackId": custom_resource_event["StackId"],
            "Status": "SUCCESS",
            "Reason": "Database initialization completed successfully",
            "NoEcho": False,
        }
        cursor = db_connection.cursor.return_value.__enter__.return_value
        assert cursor.execute.call_count == len(build_schema_statements())
        cursor.executemany.assert_not_called()
        db_connection.commit.assert_called_once()
        db_connection.close.assert_called_once()

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_create_with_seed_and_row_level_security(
        self, mock_connect, monkeypatch, db_secret, db_connection, custom_resource_event, lambda_context
    ):
        monkeypatch.setenv("SEED_SAMPLE_DATA", "true")
        monkeypatch.setenv("ENABLE_ROW_LEVEL_SECURITY", "true")
        mock_connect.return_value = db_connection

        response = lambda_handler(custom_resource_event, lambda_context)

        cursor = db_connection.cursor.return_value.__enter__.return_value
        assert response["Status"] == "SUCCESS"
        assert cursor.execute.call_count == len(build_schema_statements(enable_row_level_security=True))
        cursor.executemany.assert_called_once()

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_update_does_not_seed(
        self, mock_connect, monkeypatch, db_secret, db_connection, custom_resource_event, lambda_context
    ):
        monkeypatch.setenv("SEED_SAMPLE_DATA", "true")
        mock_connect.return_value = db_connection
        custom_resource_event["RequestType"] = "Update"

        response = lambda_handler(custom_resource_event, lambda_context)

        cursor = db_connection.cursor.return_value.__enter__.return_value
        assert response["Status"] == "SUCCESS"
        cursor.executemany.assert_not_called()

    @patch("users_api.dal.db_connection.psycopg2.connect")
    @patch("users_api.handlers.schema_init_handler.SecretsManagerCredentialResolver")
    def test_delete_is_noop(self, mock_resolver, mock_connect, custom_resource_event, lambda_context):
        custom_resource_event["RequestType"] = "Delete"

        response = lambda_handler(custom_resource_event, lambda_context)

        assert response["Status"] == "SUCCESS"
        assert response["RequestId"] == "cfn-request-id-456"
        mock_resolver.assert_not_called()
        mock_connect.assert_not_called()

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_secret_missing(self, mock_connect, aws_mock, custom_resource_event, lambda_context):
        response = lambda_handler(custom_resource_event, lambda_context)

        assert response["Status"] == "FAILED"
        assert response["Reason"].startswith("Database initialization failed: ")
        assert response["RequestId"] == "cfn-request-id-456"
        assert response["LogicalResourceId"] == "DatabaseInitializer"
        assert response["PhysicalResourceId"] == "DBInitialization"
        mock_connect.assert_not_called()

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_connection_failure(self, mock_connect, db_secret, custom_resource_event, lambda_context):
        mock_connect.side_effect = psycopg2.OperationalError("Connection failed")

        response = lambda_handler(custom_resource_event, lambda_context)

        assert response["Status"] == "FAILED"
        assert "Connection failed" in response["Reason"]
        assert response["StackId"] == custom_resource_event["StackId"]

    @patch("users_api.dal.db_connection.psycopg2.connect")
    def test_statement_failure_closes_connection(
        self, mock_connect, db_secret, db_connection, custom_resource_event, lambda_context
    ):
        mock_connect.return_value = db_connection
        cursor = db_connection.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = psycopg2.ProgrammingError("syntax error")

        response = lambda_handler(custom_resource_event, lambda_context)

        assert response["Status"] == "FAILED"
        assert "syntax error" in response["Reason"]
        db_connection.commit.assert_not_called()
        db_connection.close.assert_called_once()

    def test_missing_configuration(self, monkeypatch, custom_resource_event, lambda_context):
        monkeypatch.delenv("DB_SECRET_ARN")

        response = lambda_handler(custom_resource_event, lambda_context)

        assert response["Status"] == "FAILED"
        assert "DB_SECRET_ARN" in response["Reason"]

    def test_malformed_event_still_answered(self, lambda_context):
        """Test that an event missing fields still produces a FAILED response."""
        response = lambda_handler({"RequestId": "req-only"}, lambda_context)

        assert response["Status"] == "FAILED"
        assert response["RequestId"] == "req-only"
        assert response["LogicalResourceId"] == ""
        assert response["PhysicalResourceId"] == "DBInitialization"
