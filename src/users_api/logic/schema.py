"""
Users schema definition and idempotent initialization.

Every statement is safe to re-run: objects are created behind existence
checks, the trigger is dropped and recreated, and policies are replaced.
All statements run in order on one connection inside a single transaction,
so a failure leaves the schema as it was.
"""

from dataclasses import dataclass
from typing import List

import psycopg2
from psycopg2.extensions import connection as PgConnection

from users_api.handlers.utils.error_handling import QueryError
from users_api.handlers.utils.observability import logger, tracer
from users_api.models.user import SAMPLE_USERS, UserStatus

STATEMENT_TIMEOUT = '60s'

_USER_STATUS_LABELS = ', '.join(f"'{status.value}'" for status in UserStatus)


@dataclass(frozen=True)
class SchemaStatement:
    """A named DDL statement."""

    name: str
    sql: str


SESSION_STATEMENTS = [
    SchemaStatement('quiet_notices', "SET client_min_messages TO WARNING"),
    SchemaStatement('utc_time_zone', "SET TIME ZONE 'UTC'"),
    SchemaStatement('statement_timeout', f"SET statement_timeout TO '{STATEMENT_TIMEOUT}'"),
]

TYPE_STATEMENTS = [
    SchemaStatement('citext_extension', 'CREATE EXTENSION IF NOT EXISTS citext'),
    SchemaStatement('user_status_type', f"""
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'user_status') THEN
                CREATE TYPE user_status AS ENUM ({_USER_STATUS_LABELS});
            END IF;
        END
        $$
    """),
]

TABLE_STATEMENTS = [
    SchemaStatement('users_table', f"""
        CREATE TABLE IF NOT EXISTS users (
            id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            email CITEXT NOT NULL,
            status user_status NOT NULL DEFAULT '{UserStatus.ACTIVE.value}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            deleted_at TIMESTAMPTZ,
            last_login_at TIMESTAMPTZ,
            CONSTRAINT users_email_key UNIQUE (email)
        )
    """),
]

INDEX_STATEMENTS = [
    SchemaStatement('idx_users_status', 'CREATE INDEX IF NOT EXISTS idx_users_status ON users (status)'),
    SchemaStatement('idx_users_created_at', 'CREATE INDEX IF NOT EXISTS idx_users_created_at ON users (created_at)'),
    SchemaStatement(
        'idx_users_not_deleted',
        'CREATE INDEX IF NOT EXISTS idx_users_not_deleted ON users (id) WHERE deleted_at IS NULL',
    ),
]

TRIGGER_STATEMENTS = [
    SchemaStatement('set_updated_at_function', """
        CREATE OR REPLACE FUNCTION set_updated_at() RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """),
    SchemaStatement('drop_updated_at_trigger', 'DROP TRIGGER IF EXISTS users_set_updated_at ON users'),
    SchemaStatement('create_updated_at_trigger', """
        CREATE TRIGGER users_set_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """),
]

# The table owner bypasses these unless FORCE ROW LEVEL SECURITY is set
ROW_LEVEL_SECURITY_STATEMENTS = [
    SchemaStatement('enable_rls', 'ALTER TABLE users ENABLE ROW LEVEL SECURITY'),
    SchemaStatement('drop_select_policy', 'DROP POLICY IF EXISTS users_select_not_deleted ON users'),
    SchemaStatement(
        'create_select_policy',
        'CREATE POLICY users_select_not_deleted ON users FOR SELECT USING (deleted_at IS NULL)',
    ),
    SchemaStatement('drop_insert_policy', 'DROP POLICY IF EXISTS users_insert ON users'),
    SchemaStatement('create_insert_policy', 'CREATE POLICY users_insert ON users FOR INSERT WITH CHECK (true)'),
    SchemaStatement('drop_update_policy', 'DROP POLICY IF EXISTS users_update_not_deleted ON users'),
    SchemaStatement(
        'create_update_policy',
        'CREATE POLICY users_update_not_deleted ON users FOR UPDATE USING (deleted_at IS NULL) WITH CHECK (true)',
    ),
]

SEED_USERS_STATEMENT = 'INSERT INTO users (name, email) VALUES (%s, %s) ON CONFLICT (email) DO NOTHING'


def build_schema_statements(enable_row_level_security: bool = False) -> List[SchemaStatement]:
    """Return the ordered list of statements that bring the schema up to date."""
    statements = (
        SESSION_STATEMENTS
        + TYPE_STATEMENTS
        + TABLE_STATEMENTS
        + INDEX_STATEMENTS
        + TRIGGER_STATEMENTS
    )
    if enable_row_level_security:
        statements = statements + ROW_LEVEL_SECURITY_STATEMENTS
    return statements


@tracer.capture_method
def initialize_schema(
    connection: PgConnection,
    enable_row_level_security: bool = False,
    seed_sample_data: bool = False,
) -> int:
    """
    Create the users schema on ``connection`` and commit.

    Args:
        connection: Open database connection
        enable_row_level_security: Also create row-level-security policies
        seed_sample_data: Insert the sample users, skipping existing emails

    Returns:
        Number of statements executed

    Raises:
        QueryError: If any statement fails; nothing is committed
    """
    statements = build_schema_statements(enable_row_level_security)

    with connection.cursor() as cursor:
        for statement in statements:
            try:
                cursor.execute(statement.sql)
            except psycopg2.Error as e:
                logger.error(
                    "Schema statement failed",
                    extra={"statement": statement.name, "pgcode": e.pgcode, "error": str(e)},
                )
                raise QueryError(f"Schema statement '{statement.name}' failed: {e}") from e
            logger.debug("Schema statement executed", extra={"statement": statement.name})

        if seed_sample_data:
            try:
                cursor.executemany(SEED_USERS_STATEMENT, SAMPLE_USERS)
            except psycopg2.Error as e:
                logger.error("Seeding sample users failed", extra={"error": str(e)})
                raise QueryError(f"Seeding sample users failed: {e}") from e

    connection.commit()

    executed = len(statements)
    logger.info(
        "Users schema initialized",
        extra={
            "statements": executed,
            "row_level_security": enable_row_level_security,
            "seeded": seed_sample_data,
        },
    )
    return executed
