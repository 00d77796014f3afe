"""
Read access to the users table over an open PostgreSQL connection.
"""

from typing import Any, Dict, List

import psycopg2
from psycopg2.extensions import connection as PgConnection
from psycopg2.extras import RealDictCursor

from users_api.handlers.utils.error_handling import QueryError
from users_api.handlers.utils.observability import logger, tracer

# limit/offset are always bound parameters, never interpolated
LIST_USERS_QUERY = 'SELECT * FROM users ORDER BY id LIMIT %s OFFSET %s'


class UsersDal:
    """Data access for the users table."""

    def __init__(self, connection: PgConnection) -> None:
        self.connection = connection

    @tracer.capture_method
    def list_users(self, limit: int, offset: int) -> List[Dict[str, Any]]:
        """
        Fetch one page of users.

        Args:
            limit: Maximum number of rows
            offset: Number of rows to skip

        Returns:
            Rows as dictionaries keyed by column name

        Raises:
            QueryError: If the statement fails
        """
        try:
            with self.connection.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(LIST_USERS_QUERY, (limit, offset))
                rows = cursor.fetchall()
        except psycopg2.Error as e:
            logger.error(
                "Users query failed",
                extra={"limit": limit, "offset": offset, "pgcode": e.pgcode, "error": str(e)},
            )
            raise QueryError(f"Users query failed: {e}") from e

        tracer.put_annotation("users_returned", len(rows))
        logger.info("Users retrieved from database", extra={"user_count": len(rows)})
        return [dict(row) for row in rows]
