"""
Pytest configuration and shared fixtures for the users API.

This module provides common test fixtures and configuration used across
unit and integration tests.
"""

import json
import os
from typing import Any, Dict, List
from unittest.mock import MagicMock, Mock

import boto3
import pytest
from moto import mock_aws

TEST_SECRET_NAME = "test/users-api/db"
TEST_DB_HOST = "db.internal.example.com"


# Test environment configuration
@pytest.fixture(scope="session", autouse=True)
def test_environment():
    """Set up test environment variables."""
    os.environ.update({
        "AWS_DEFAULT_REGION": "us-east-1",
        "AWS_REGION": "us-east-1",
        "AWS_ACCESS_KEY_ID": "test",
        "AWS_SECRET_ACCESS_KEY": "test",
        "POWERTOOLS_SERVICE_NAME": "test-users-api",
        "POWERTOOLS_METRICS_NAMESPACE": "TestUsersApi",
        "LOG_LEVEL": "DEBUG",
        "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
    })


@pytest.fixture(autouse=True)
def database_environment(monkeypatch):
    """Database settings, reset for every test so tests can remove them."""
    monkeypatch.setenv("DB_SECRET_ARN", TEST_SECRET_NAME)
    monkeypatch.setenv("DB_HOST", TEST_DB_HOST)
    monkeypatch.setenv("DB_PORT", "5432")
    monkeypatch.setenv("DB_NAME", "pgdatabase")
    monkeypatch.delenv("CORS_ALLOW_ORIGIN", raising=False)
    monkeypatch.delenv("ENABLE_ROW_LEVEL_SECURITY", raising=False)
    monkeypatch.delenv("SEED_SAMPLE_DATA", raising=False)


# Secrets Manager fixtures
@pytest.fixture
def aws_mock():
    """Mock every AWS service for the duration of a test."""
    with mock_aws():
        yield


@pytest.fixture
def secretsmanager_client(aws_mock):
    """Secrets Manager client bound to the moto backend."""
    return boto3.client("secretsmanager", region_name="us-east-1")


@pytest.fixture
def db_secret(secretsmanager_client) -> Dict[str, str]:
    """Create the database secret the handlers resolve."""
    payload = {
        "username": "app_user",
        "password": "s3cr3t-Pa55word",
        "engine": "postgres",
    }
    secretsmanager_client.create_secret(
        Name=TEST_SECRET_NAME,
        SecretString=json.dumps(payload),
    )
    return payload


# Sample data fixtures
@pytest.fixture
def user_rows() -> List[Dict[str, Any]]:
    """Rows as returned by a RealDictCursor."""
    return [
        {"id": 1, "name": "John Doe", "email": "john@example.com", "status": "active"},
        {"id": 2, "name": "Jane Smith", "email": "jane@example.com", "status": "active"},
    ]


@pytest.fixture
def db_connection(user_rows):
    """Mock psycopg2 connection whose cursor returns ``user_rows``."""
    connection = MagicMock(name="connection")
    cursor = MagicMock(name="cursor")
    cursor.fetchall.return_value = user_rows
    connection.cursor.return_value.__enter__.return_value = cursor
    connection.cursor.return_value.__exit__.return_value = False
    return connection


@pytest.fixture
def api_gateway_event() -> Dict[str, Any]:
    """Create a sample API Gateway event for testing."""
    return {
        "httpMethod": "GET",
        "path": "/users",
        "headers": {
            "Content-Type": "application/json",
            "User-Agent": "test-agent/1.0",
        },
        "body": None,
        "requestContext": {
            "requestId": "test-request-id-123",
            "accountId": "123456789012",
            "stage": "test",
            "httpMethod": "GET",
            "path": "/users",
            "protocol": "HTTP/1.1",
            "identity": {
                "sourceIp": "127.0.0.1",
                "userAgent": "test-agent/1.0",
            },
        },
        "pathParameters": None,
        "queryStringParameters": None,
        "multiValueQueryStringParameters": None,
        "stageVariables": None,
        "isBase64Encoded": False,
    }


@pytest.fixture
def custom_resource_event() -> Dict[str, Any]:
    """Create a sample CloudFormation custom resource Create event."""
    return {
        "RequestType": "Create",
        "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:provider",
        "ResponseURL": "https://cloudformation-custom-resource-response.example.com/",
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/users-api/abc123",
        "RequestId": "cfn-request-id-456",
        "LogicalResourceId": "DatabaseInitializer",
        "ResourceType": "Custom::DatabaseInitializer",
        "ResourceProperties": {
            "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:provider",
        },
    }


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = "512"
    context.remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
