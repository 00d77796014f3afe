"""
Per-invocation PostgreSQL connection management.

``open_connection`` opens exactly one connection, hands it to the caller and
closes it on every exit path. Driver failures while connecting are turned into
typed errors here, so nothing downstream has to inspect driver messages.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import psycopg2
from psycopg2.extensions import connection as PgConnection

from users_api.handlers.models.env_vars import DatabaseEnvVars
from users_api.handlers.utils.error_handling import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseUnavailableError,
)
from users_api.handlers.utils.observability import logger, tracer
from users_api.models.credentials import DatabaseCredentials

APPLICATION_NAME = 'users-api'

# libpq messages for hosts that refuse, time out or cannot be resolved/routed
UNAVAILABLE_MARKERS = (
    'connection refused',
    'could not connect to server',
    'timeout expired',
    'connection timed out',
    'could not translate host name',
    'name or service not known',
    'no route to host',
    'network is unreachable',
    'econnrefused',
)


@dataclass(frozen=True)
class ConnectionConfig:
    """Static network configuration for the database."""

    host: str
    port: int
    database: str
    connect_timeout: int = 5

    def __post_init__(self) -> None:
        if not self.host or not self.host.strip():
            raise ConfigurationError("Database host is not configured")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Database port out of range: {self.port}")
        if not self.database:
            raise ConfigurationError("Database name is not configured")

    @classmethod
    def from_env_vars(cls, env_vars: DatabaseEnvVars) -> 'ConnectionConfig':
        return cls(
            host=env_vars.DB_HOST,
            port=env_vars.DB_PORT,
            database=env_vars.DB_NAME,
            connect_timeout=env_vars.DB_CONNECT_TIMEOUT,
        )


def is_unavailable_error(error: Exception) -> bool:
    """Check whether a connection failure means the host is refused or unreachable."""
    message = str(error).lower()
    return any(marker in message for marker in UNAVAILABLE_MARKERS)


@tracer.capture_method
def connect(config: ConnectionConfig, credentials: DatabaseCredentials) -> PgConnection:
    """
    Open a single database connection.

    Raises:
        DatabaseUnavailableError: If the host refused or could not be reached
        DatabaseConnectionError: On any other establishment failure
    """
    try:
        connection = psycopg2.connect(
            host=config.host,
            port=config.port,
            dbname=config.database,
            user=credentials.username,
            password=credentials.password.get_secret_value(),
            connect_timeout=config.connect_timeout,
            application_name=APPLICATION_NAME,
        )
    except Exception as e:
        details = str(e).strip()
        if is_unavailable_error(e):
            logger.error(
                "Database unreachable",
                extra={"host": config.host, "port": config.port, "error": details},
            )
            raise DatabaseUnavailableError(
                f"Database {config.host}:{config.port} unreachable: {details}"
            ) from e

        logger.error(
            "Database connection failed",
            extra={"host": config.host, "port": config.port, "error": details},
        )
        raise DatabaseConnectionError(f"Failed to connect to database: {details}") from e

    logger.debug("Database connection opened", extra={"host": config.host, "database": config.database})
    return connection


def release(connection: PgConnection) -> None:
    """Close ``connection``; failures are logged and never raised."""
    try:
        connection.close()
        logger.debug("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection", extra={"error": str(e)})


@contextmanager
def open_connection(config: ConnectionConfig, credentials: DatabaseCredentials) -> Iterator[PgConnection]:
    """
    Scoped acquisition of one database connection.

    Example:
        with open_connection(config, credentials) as connection:
            rows = UsersDal(connection).list_users(limit=10, offset=0)
    """
    connection = connect(config, credentials)
    try:
        yield connection
    finally:
        release(connection)
