"""
User domain types.

The users table is owned by the schema initializer; the API reads rows
opaquely, so only the pieces the DDL needs are modelled here.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User status enumeration, mirrored by the ``user_status`` database type."""

    ACTIVE = 'active'
    SUSPENDED = 'suspended'
    DELETED = 'deleted'


SAMPLE_USERS = [
    ('John Doe', 'john@example.com'),
    ('Jane Smith', 'jane@example.com'),
]
