"""
Database credential resolution from AWS Secrets Manager.

Credentials are fetched once per invocation with a single attempt. There is
no cache: a rotated secret is picked up by the next request.
"""

import json
import os
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError as PydanticValidationError

from users_api.handlers.utils.error_handling import (
    CredentialsError,
    CredentialsNotFoundError,
    InvalidCredentialsFormatError,
)
from users_api.handlers.utils.observability import logger, tracer
from users_api.models.credentials import DatabaseCredentials


class SecretsManagerCredentialResolver:
    """Resolves a secret identifier to database credentials."""

    def __init__(self, client: Optional[Any] = None, region_name: Optional[str] = None):
        """
        Args:
            client: Pre-built ``secretsmanager`` client (tests, custom endpoints)
            region_name: AWS region; defaults to the Lambda's ``AWS_REGION``
        """
        if client is None:
            try:
                client = boto3.client(
                    'secretsmanager',
                    region_name=region_name or os.environ.get('AWS_REGION'),
                )
            except BotoCoreError as e:
                logger.error("Secrets Manager client could not be created", extra={"error": str(e)})
                raise CredentialsError(f"Failed to create Secrets Manager client: {e}") from e
        self.client = client

    @tracer.capture_method
    def resolve(self, secret_id: str) -> DatabaseCredentials:
        """
        Fetch and parse database credentials.

        Args:
            secret_id: Name or ARN of the secret

        Returns:
            Parsed credentials with non-empty username and password

        Raises:
            CredentialsNotFoundError: If the secret or its string payload is missing
            InvalidCredentialsFormatError: If the payload lacks username or password
            CredentialsError: On any other Secrets Manager failure
        """
        try:
            response = self.client.get_secret_value(SecretId=secret_id)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')

            if error_code == 'ResourceNotFoundException':
                logger.error("Database secret not found", extra={"secret_id": secret_id})
                raise CredentialsNotFoundError(f"Secret '{secret_id}' not found") from e

            logger.error(
                "Failed to retrieve database secret",
                extra={"secret_id": secret_id, "error_code": error_code, "error": str(e)},
            )
            raise CredentialsError(f"Failed to retrieve secret '{secret_id}': {e}") from e
        except BotoCoreError as e:
            logger.error(
                "Secrets Manager request failed",
                extra={"secret_id": secret_id, "error": str(e)},
            )
            raise CredentialsError(f"Failed to retrieve secret '{secret_id}': {e}") from e

        secret_string = response.get('SecretString')
        if not secret_string:
            logger.error("Database secret has no string payload", extra={"secret_id": secret_id})
            raise CredentialsNotFoundError("Database credentials not found")

        credentials = self._parse_credentials(secret_string)

        logger.debug(
            "Database credentials resolved",
            extra={"secret_id": secret_id, "version_id": response.get('VersionId')},
        )
        return credentials

    def _parse_credentials(self, secret_string: str) -> DatabaseCredentials:
        try:
            payload = json.loads(secret_string)
        except json.JSONDecodeError as e:
            raise InvalidCredentialsFormatError("Database secret is not valid JSON") from e

        if not isinstance(payload, dict):
            raise InvalidCredentialsFormatError("Database secret must be a JSON object")

        try:
            return DatabaseCredentials.model_validate(payload)
        except PydanticValidationError as e:
            # Field names only; values may contain the password
            invalid_fields = [str(error['loc'][-1]) for error in e.errors() if error['loc']]
            raise InvalidCredentialsFormatError(
                f"Database secret missing or invalid fields: {invalid_fields}"
            ) from None
