"""
Environment variable models for type-safe configuration.

Settings are parsed on every invocation rather than cached for the lifetime of
the execution environment, so a changed function configuration is picked up
by the next request. ``get_environment_variables`` caches per model, so the
models are validated against ``os.environ`` directly.
"""

import os
from typing import Annotated, Type, TypeVar

from aws_lambda_env_modeler import BaseModel
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from users_api.handlers.utils.error_handling import ConfigurationError

EnvModel = TypeVar('EnvModel', bound=BaseModel)


class DatabaseEnvVars(BaseModel):
    """Environment variables shared by every function that talks to the database."""

    # Secrets Manager ARN or name holding {"username", "password"}
    DB_SECRET_ARN: Annotated[str, Field(
        description='Secrets Manager identifier of the database credentials',
        min_length=1
    )]

    DB_HOST: Annotated[str, Field(
        description='Database endpoint address',
        min_length=1
    )]

    DB_PORT: Annotated[int, Field(
        default=5432,
        description='Database port',
        ge=1,
        le=65535
    )] = 5432

    DB_NAME: Annotated[str, Field(
        default='pgdatabase',
        description='Database name',
        min_length=1
    )] = 'pgdatabase'

    DB_CONNECT_TIMEOUT: Annotated[int, Field(
        default=5,
        description='Connection establishment timeout in seconds',
        ge=1,
        le=60
    )] = 5


class ApiEnvVars(BaseModel):
    """Environment variables for building API responses."""

    CORS_ALLOW_ORIGIN: Annotated[str, Field(
        default='*',
        description='CORS allowed origin for API responses'
    )] = '*'


class SchemaInitEnvVars(DatabaseEnvVars):
    """Environment variables for the schema initializer."""

    ENABLE_ROW_LEVEL_SECURITY: Annotated[str, Field(
        default='false',
        description='Create row-level-security policies on the users table (true/false)',
        pattern=r'^(true|false)$'
    )] = 'false'

    SEED_SAMPLE_DATA: Annotated[str, Field(
        default='false',
        description='Insert sample users on stack creation (true/false)',
        pattern=r'^(true|false)$'
    )] = 'false'

    @property
    def row_level_security_enabled(self) -> bool:
        """Check if row-level-security policies should be created."""
        return self.ENABLE_ROW_LEVEL_SECURITY == 'true'

    @property
    def seed_sample_data(self) -> bool:
        """Check if sample rows should be inserted on creation."""
        return self.SEED_SAMPLE_DATA == 'true'


def get_env_vars(model: Type[EnvModel]) -> EnvModel:
    """
    Parse and validate environment variables into ``model``.

    Args:
        model: Environment model class

    Returns:
        Validated environment variables model instance

    Raises:
        ConfigurationError: If a required variable is missing or invalid
    """
    try:
        return model.model_validate(dict(os.environ))
    except PydanticValidationError as exc:
        invalid_fields = [str(error['loc'][-1]) for error in exc.errors() if error['loc']]
        raise ConfigurationError(
            f'Invalid or missing environment variables: {invalid_fields}'
        ) from exc
