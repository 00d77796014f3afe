"""
Data Access Layer (DAL) for the users API.

One connection is opened per invocation through ``open_connection`` and closed
on every exit path; ``UsersDal`` runs the queries on it.
"""

from users_api.dal.db_connection import ConnectionConfig, open_connection
from users_api.dal.users_dal import UsersDal

__all__ = [
    'ConnectionConfig',
    'open_connection',
    'UsersDal',
]
